from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from . import config


class BodyMatch(enum.Enum):
    CONTAINS = "contains"
    EQUALS = "equals"


@dataclass(frozen=True)
class HostTarget:
    address: str

    @property
    def name(self) -> str:
        return self.address


@dataclass(frozen=True)
class HttpCheckTarget:
    label: str
    url: str
    expected: str
    match: BodyMatch

    @property
    def name(self) -> str:
        return self.label


Target = Union[HostTarget, HttpCheckTarget]

APPLE_CHECK = HttpCheckTarget(
    config.APPLE_CHECK_NAME,
    config.APPLE_CHECK_URL,
    config.APPLE_EXPECTED_SUBSTRING,
    BodyMatch.CONTAINS,
)
MICROSOFT_CHECK = HttpCheckTarget(
    config.MICROSOFT_CHECK_NAME,
    config.MICROSOFT_CHECK_URL,
    config.MICROSOFT_EXPECTED_BODY,
    BodyMatch.EQUALS,
)


@dataclass(frozen=True)
class ProbeOutcome:
    name: str
    is_up: bool
    resolved_ip: Optional[str] = None


class Health(enum.Enum):
    UP = "up"
    SINGLE_TIMEOUT = "single_timeout"  # some offline, but within the ignored threshold
    MULTIPLE_DOWN = "multiple_down"

    @property
    def is_up(self) -> bool:
        return self is Health.UP


@dataclass(frozen=True)
class Snapshot:
    """Aggregated result of one monitoring cycle."""

    outcomes: Tuple[ProbeOutcome, ...]
    public_ip: str
    country_code: str
    vpn_at_risk: bool
    overall_up: bool

    @property
    def up_count(self) -> int:
        return sum(1 for o in self.outcomes if o.is_up)
