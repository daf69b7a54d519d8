from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from . import config
from .http_check import HttpChecker
from .models import HostTarget, ProbeOutcome, Target
from .ping import PingResult, ping_host

logger = logging.getLogger(__name__)

PingFunc = Callable[[str, int], Awaitable[PingResult]]


class Prober:
    """Probe every target of a cycle at once and keep the caller's order."""

    def __init__(
        self,
        ping: PingFunc = ping_host,
        http: Optional[HttpChecker] = None,
    ):
        self.ping = ping
        self.http = http or HttpChecker()

    async def probe(self, target: Target, timeout: int) -> ProbeOutcome:
        try:
            if isinstance(target, HostTarget):
                res = await self.ping(target.address, timeout)
                return ProbeOutcome(target.name, res.ok, res.ip if res.ok else None)
            up = await self.http.check(target)
            return ProbeOutcome(target.name, up, None)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("probe of %s crashed", target.name)
            return ProbeOutcome(target.name, False, None)

    async def run_all(
        self,
        targets: Sequence[Target],
        timeout: int = config.PING_TIMEOUT_SECONDS,
    ) -> List[ProbeOutcome]:
        async def unit(index: int, target: Target) -> Tuple[int, ProbeOutcome]:
            return index, await self.probe(target, timeout)

        ordered: List[Optional[ProbeOutcome]] = [None] * len(targets)
        for index, outcome in await asyncio.gather(
            *(unit(i, t) for i, t in enumerate(targets))
        ):
            ordered[index] = outcome
        return [o for o in ordered if o is not None]
