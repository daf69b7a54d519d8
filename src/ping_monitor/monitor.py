"""Polling state machine that turns probe results into snapshots and alerts.

Each cycle resolves the public IP and country, probes every configured target
concurrently, classifies the result, notifies and publishes a new Snapshot.
Cycles never overlap; the pause between them is cut short by stop().
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from . import config
from .geo import GeoResolver
from .models import (
    APPLE_CHECK,
    MICROSOFT_CHECK,
    Health,
    HostTarget,
    Snapshot,
    Target,
)
from .notifier import Notifier, Tone
from .preferences import MonitorConfig
from .prober import Prober

logger = logging.getLogger(__name__)


class UISink(Protocol):
    def publish(self, snapshot: Snapshot) -> None: ...


class MonitorState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class RunState:
    is_first_cycle: bool = True
    consecutive_failed_cycles: int = 0
    last_overall_up: bool = False


def build_targets(cfg: MonitorConfig) -> List[Target]:
    targets: List[Target] = [HostTarget(h) for h in cfg.custom_hosts]
    targets.append(HostTarget(config.SENTINEL_HOST))
    if cfg.include_router:
        targets.append(HostTarget(config.ROUTER_HOST))
    if cfg.include_apple:
        targets.append(APPLE_CHECK)
    if cfg.include_microsoft:
        targets.append(MICROSOFT_CHECK)
    return targets


def classify(up_count: int, total: int, ignored: int) -> Health:
    total = max(1, total)
    if up_count < total - ignored:
        return Health.MULTIPLE_DOWN
    if up_count < total:
        return Health.SINGLE_TIMEOUT
    return Health.UP


def display_country(found: str, previous: str) -> str:
    """Uppercase a two-letter code; otherwise mark the previous one as unresolved."""
    if len(found) == 2 and found.isalpha():
        return found.upper()
    return previous[:2] + config.UNRESOLVED_MARKER


def is_vpn_at_risk(country: str, include_vpn_check: bool) -> bool:
    return include_vpn_check and country.lower() in config.VPN_RISK_COUNTRIES


class ConnectivityMonitor:
    def __init__(
        self,
        cfg: MonitorConfig,
        notifier: Notifier,
        sink: UISink,
        prober: Optional[Prober] = None,
        geo: Optional[GeoResolver] = None,
        probe_timeout: int = config.PING_TIMEOUT_SECONDS,
    ):
        self.cfg = cfg
        self.notifier = notifier
        self.sink = sink
        self.prober = prober or Prober()
        self.geo = geo or GeoResolver()
        self.probe_timeout = probe_timeout

        self.public_ip = config.INITIAL_PUBLIC_IP
        self.country = config.INITIAL_COUNTRY
        self.vpn_at_risk = False

        self._run = RunState()
        self._snapshot: Optional[Snapshot] = None
        self._state = MonitorState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._cycle_lock = asyncio.Lock()

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is MonitorState.RUNNING

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    def start(self) -> None:
        """Start the polling loop; does nothing if it is already running."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(self._stop_event))
        self._state = MonitorState.RUNNING
        logger.info("monitor started")

    def stop(self) -> None:
        if not self.is_running:
            return
        assert self._stop_event is not None
        self._stop_event.set()
        self._state = MonitorState.STOPPED
        logger.info("monitor stopped")

    async def wait_stopped(self) -> None:
        """Wait until the loop task has actually exited after stop()."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _run_loop(self, stop_event: asyncio.Event) -> None:
        try:
            while not stop_event.is_set():
                await self.run_cycle()
                if stop_event.is_set():
                    break
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(
                        stop_event.wait(), timeout=max(1, self.cfg.ping_interval)
                    )
        except Exception:
            logger.exception("monitor loop crashed")
        finally:
            # a dead loop must not leave start() blocked
            if self._stop_event is stop_event and self.is_running:
                self._state = MonitorState.STOPPED

    async def run_cycle(self) -> Snapshot:
        """Run one full cycle and publish its snapshot."""
        async with self._cycle_lock:
            return await self._cycle()

    async def _cycle(self) -> Snapshot:
        if self._run.is_first_cycle:
            self._notify("Please, wait...", "Check is running.", Tone.NONE)

        try:
            await self._update_location()
        except Exception:
            logger.exception("public IP / country lookup failed")

        targets = build_targets(self.cfg)
        outcomes = await self.prober.run_all(targets, self.probe_timeout)
        up_count = sum(1 for o in outcomes if o.is_up)
        total = max(1, len(outcomes))
        health = classify(up_count, total, self.cfg.ignored_timeouts)
        logger.info(
            "cycle: %d of %d up (%s), ip=%s country=%s",
            up_count,
            total,
            health.value,
            self.public_ip,
            self.country,
        )

        self._apply_policy(health, up_count, total)

        snapshot = Snapshot(
            outcomes=tuple(outcomes),
            public_ip=self.public_ip,
            country_code=self.country,
            vpn_at_risk=self.vpn_at_risk,
            overall_up=health.is_up,
        )
        self._snapshot = snapshot
        try:
            self.sink.publish(snapshot)
        except Exception:
            logger.exception("publishing snapshot failed")

        self._run.is_first_cycle = False
        self._run.last_overall_up = health.is_up
        return snapshot

    async def _update_location(self) -> None:
        ip = await self.geo.resolve_public_ip()
        if ip is None:
            return
        self.public_ip = ip
        found = await self.geo.resolve_country(ip)
        if not found:
            return
        self.country = display_country(found, self.country)
        self.vpn_at_risk = is_vpn_at_risk(found, self.cfg.include_vpn_check)

    def _apply_policy(self, health: Health, up_count: int, total: int) -> None:
        run = self._run
        if health is Health.UP:
            if run.is_first_cycle or not run.last_overall_up:
                self._notify(
                    "You are online!" if run.is_first_cycle else "You are back online!",
                    f"All {total} domains is online.",
                    Tone.SUCCESS,
                )
            run.consecutive_failed_cycles = 0
            return

        run.consecutive_failed_cycles += 1
        # the first failed cycle of a streak stays quiet
        if run.consecutive_failed_cycles > 1:
            subtitle = (
                "Something is wrong!"
                if health is Health.MULTIPLE_DOWN
                else "Just one timeout, worry?"
            )
            self._notify(
                subtitle, f"{up_count} domains of {total} is online.", Tone.FAILURE
            )

    def _notify(self, subtitle: str, message: str, tone: Tone) -> None:
        try:
            self.notifier.send(config.NOTIFICATION_TITLE, subtitle, message, tone)
        except Exception as exc:
            logger.warning("notification %r could not be delivered: %s", subtitle, exc)
