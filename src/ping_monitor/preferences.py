from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Protocol, Tuple

from . import config

logger = logging.getLogger(__name__)


class PreferencesStore(Protocol):
    def get_bool(self, key: str, default: bool) -> bool: ...

    def set_bool(self, key: str, value: bool) -> None: ...

    def get_int(self, key: str, default: int) -> int: ...

    def set_int(self, key: str, value: int) -> None: ...

    def get_string_list(self, key: str) -> List[str]: ...

    def set_string_list(self, key: str, value: List[str]) -> None: ...


class MemoryPreferences:
    """Typed key/value settings kept in a dict."""

    def __init__(self, values: Dict[str, Any] | None = None):
        self.values: Dict[str, Any] = dict(values or {})

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.values.get(key)
        return value if isinstance(value, bool) else default

    def set_bool(self, key: str, value: bool) -> None:
        self._set(key, bool(value))

    def get_int(self, key: str, default: int) -> int:
        value = self.values.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return default

    def set_int(self, key: str, value: int) -> None:
        self._set(key, int(value))

    def get_string_list(self, key: str) -> List[str]:
        value = self.values.get(key)
        if not isinstance(value, list):
            return []
        return [v for v in value if isinstance(v, str)]

    def set_string_list(self, key: str, value: List[str]) -> None:
        self._set(key, list(value))

    def _set(self, key: str, value: Any) -> None:
        self.values[key] = value


class JsonFilePreferences(MemoryPreferences):
    """Settings persisted to a JSON object file, rewritten on every change.

    A missing or corrupt file reads as empty. Write errors are logged and
    otherwise ignored; the in-memory value still changes.
    """

    def __init__(self, path: str = config.PREFERENCES_FILE):
        self.path = path
        super().__init__(self._load())

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable preferences %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _set(self, key: str, value: Any) -> None:
        super()._set(key, value)
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.values, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.warning("could not save preferences to %s: %s", self.path, exc)


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(
        dict.fromkeys(
            v for v in values if v and v not in config.RESERVED_TARGET_NAMES
        )
    )


class MonitorConfig:
    """User settings for the monitor, read from and written through to a store."""

    def __init__(self, store: PreferencesStore):
        self.store = store
        self._include_apple = store.get_bool(
            config.KEY_INCLUDE_APPLE, config.DEFAULT_INCLUDE_APPLE
        )
        self._include_microsoft = store.get_bool(
            config.KEY_INCLUDE_MICROSOFT, config.DEFAULT_INCLUDE_MICROSOFT
        )
        self._include_router = store.get_bool(
            config.KEY_INCLUDE_ROUTER, config.DEFAULT_INCLUDE_ROUTER
        )
        self._include_vpn_check = store.get_bool(
            config.KEY_INCLUDE_VPN, config.DEFAULT_INCLUDE_VPN
        )
        self._ping_interval = max(
            1,
            store.get_int(
                config.KEY_PING_INTERVAL, config.DEFAULT_PING_INTERVAL_SECONDS
            ),
        )
        self._ignored_timeouts = max(
            0,
            store.get_int(
                config.KEY_IGNORED_TIMEOUTS, config.DEFAULT_IGNORED_TIMEOUTS
            ),
        )
        self._custom_hosts = _unique(
            h.strip() for h in store.get_string_list(config.KEY_CUSTOM_DOMAINS)
        )

    @property
    def include_apple(self) -> bool:
        return self._include_apple

    @include_apple.setter
    def include_apple(self, value: bool) -> None:
        self._include_apple = bool(value)
        self.store.set_bool(config.KEY_INCLUDE_APPLE, self._include_apple)

    @property
    def include_microsoft(self) -> bool:
        return self._include_microsoft

    @include_microsoft.setter
    def include_microsoft(self, value: bool) -> None:
        self._include_microsoft = bool(value)
        self.store.set_bool(config.KEY_INCLUDE_MICROSOFT, self._include_microsoft)

    @property
    def include_router(self) -> bool:
        return self._include_router

    @include_router.setter
    def include_router(self, value: bool) -> None:
        self._include_router = bool(value)
        self.store.set_bool(config.KEY_INCLUDE_ROUTER, self._include_router)

    @property
    def include_vpn_check(self) -> bool:
        return self._include_vpn_check

    @include_vpn_check.setter
    def include_vpn_check(self, value: bool) -> None:
        self._include_vpn_check = bool(value)
        self.store.set_bool(config.KEY_INCLUDE_VPN, self._include_vpn_check)

    @property
    def ping_interval(self) -> int:
        return self._ping_interval

    @ping_interval.setter
    def ping_interval(self, value: int) -> None:
        self._ping_interval = max(1, int(value))
        self.store.set_int(config.KEY_PING_INTERVAL, self._ping_interval)

    @property
    def ignored_timeouts(self) -> int:
        return self._ignored_timeouts

    @ignored_timeouts.setter
    def ignored_timeouts(self, value: int) -> None:
        self._ignored_timeouts = max(0, int(value))
        self.store.set_int(config.KEY_IGNORED_TIMEOUTS, self._ignored_timeouts)

    @property
    def custom_hosts(self) -> Tuple[str, ...]:
        return self._custom_hosts

    @custom_hosts.setter
    def custom_hosts(self, hosts: Iterable[str]) -> None:
        self._custom_hosts = _unique(h.strip() for h in hosts)
        self.store.set_string_list(config.KEY_CUSTOM_DOMAINS, list(self._custom_hosts))

    def add_custom_host(self, value: str) -> bool:
        """Append a host unless it is blank, already present or a built-in target."""
        host = value.strip()
        if (
            not host
            or host in self._custom_hosts
            or host in config.RESERVED_TARGET_NAMES
        ):
            return False
        self.custom_hosts = self._custom_hosts + (host,)
        return True

    def remove_custom_host(self, value: str) -> bool:
        host = value.strip()
        if host not in self._custom_hosts:
            return False
        self.custom_hosts = [h for h in self._custom_hosts if h != host]
        return True

    def remove_custom_hosts_at(self, indices: Iterable[int]) -> None:
        drop = set(indices)
        self.custom_hosts = [
            h for i, h in enumerate(self._custom_hosts) if i not in drop
        ]
