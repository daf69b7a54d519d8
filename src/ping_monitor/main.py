from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from typing import List, Optional

import httpx
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from . import config
from .geo import GeoResolver
from .http_check import HttpChecker
from .monitor import ConnectivityMonitor
from .notifier import ConsoleNotifier
from .preferences import JsonFilePreferences, MonitorConfig
from .prober import Prober
from .ui import LatestSnapshotSink, LiveSink, build_table

console = Console()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ping-monitor",
        description="Watch internet connectivity and VPN posture.",
    )
    parser.add_argument("--prefs", default=config.PREFERENCES_FILE, help="settings file")
    parser.add_argument("--add-host", action="append", default=[], metavar="HOST")
    parser.add_argument("--remove-host", action="append", default=[], metavar="HOST")
    for name in ("apple", "microsoft", "router", "vpn"):
        parser.add_argument(
            f"--{name}",
            dest=name,
            action=argparse.BooleanOptionalAction,
            default=None,
            help=f"include the {name} check",
        )
    parser.add_argument("--interval", type=int, help="seconds between checks")
    parser.add_argument("--ignored-timeouts", type=int)
    parser.add_argument("--once", action="store_true", help="run a single check and exit")
    parser.add_argument("--log-file", nargs="?", const=config.LOG_FILE, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(verbose: bool, log_file: Optional[str]) -> None:
    handlers: List[logging.Handler] = [
        RichHandler(console=console, show_path=False, rich_tracebacks=True)
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_TIME_FORMAT)
        )
        handlers.append(file_handler)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=handlers,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def apply_overrides(cfg: MonitorConfig, args: argparse.Namespace) -> None:
    """Persist settings given on the command line."""
    for host in args.add_host:
        cfg.add_custom_host(host)
    for host in args.remove_host:
        cfg.remove_custom_host(host)
    if args.apple is not None:
        cfg.include_apple = args.apple
    if args.microsoft is not None:
        cfg.include_microsoft = args.microsoft
    if args.router is not None:
        cfg.include_router = args.router
    if args.vpn is not None:
        cfg.include_vpn_check = args.vpn
    if args.interval is not None:
        cfg.ping_interval = args.interval
    if args.ignored_timeouts is not None:
        cfg.ignored_timeouts = args.ignored_timeouts


async def main_async(args: argparse.Namespace):
    """The main asynchronous entry point of the application."""
    cfg = MonitorConfig(JsonFilePreferences(args.prefs))
    apply_overrides(cfg, args)
    notifier = ConsoleNotifier()

    async with httpx.AsyncClient() as client:
        prober = Prober(http=HttpChecker(client))
        geo = GeoResolver(client)

        if args.once:
            monitor = ConnectivityMonitor(
                cfg, notifier, LatestSnapshotSink(), prober, geo
            )
            snapshot = await monitor.run_cycle()
            console.print(build_table(snapshot, cfg.include_vpn_check))
            return

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        def _signal_handler():
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _signal_handler)
            except NotImplementedError:  # Windows
                signal.signal(sig, lambda s, f: _signal_handler())

        with Live(
            build_table(None, cfg.include_vpn_check),
            refresh_per_second=int(1 / config.UI_REFRESH_INTERVAL),
            console=console,
            screen=False,
        ) as live:
            sink = LiveSink(live, cfg.include_vpn_check)
            monitor = ConnectivityMonitor(cfg, notifier, sink, prober, geo)
            monitor.start()
            await stop_event.wait()
            monitor.stop()
            await monitor.wait_stopped()

    snapshot = monitor.snapshot
    if snapshot is not None:
        console.print("\nLast check:")
        for outcome in snapshot.outcomes:
            state = "up" if outcome.is_up else "down"
            console.print(f"{outcome.name}: {state}")


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":  # pragma: no cover
    main()
