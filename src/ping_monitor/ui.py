from __future__ import annotations

from datetime import datetime
from typing import Optional

from rich import box
from rich.live import Live
from rich.table import Table

from . import config
from .models import Snapshot

REGIONAL_INDICATOR_OFFSET = 127397  # ord("🇦") - ord("A")


def flag_emoji(country_code: str) -> str:
    code = country_code.strip().upper()
    if len(code) != 2 or not all("A" <= c <= "Z" for c in code):
        return config.EMOJI_NO_FLAG
    return "".join(chr(REGIONAL_INDICATOR_OFFSET + ord(c)) for c in code)


def menu_bar_title(snapshot: Optional[Snapshot], include_vpn_check: bool) -> str:
    """Compact one-line status: flag, per-target glyphs, VPN glyph."""
    if snapshot is None:
        return f"{config.EMOJI_NO_FLAG} {config.EMOJI_PENDING}"
    if not snapshot.outcomes:
        connectivity = config.EMOJI_PENDING
    elif all(o.is_up for o in snapshot.outcomes):
        connectivity = config.EMOJI_ALL_UP
    else:
        connectivity = "".join(
            config.EMOJI_UP if o.is_up else config.EMOJI_DOWN
            for o in snapshot.outcomes
        )
    vpn = ""
    if include_vpn_check:
        vpn = config.EMOJI_VPN_RISK if snapshot.vpn_at_risk else config.EMOJI_VPN_OK
    return f"{flag_emoji(snapshot.country_code)} {connectivity}{vpn}"


def build_table(snapshot: Optional[Snapshot], include_vpn_check: bool = True) -> Table:
    table = Table(
        title=f"Ping Monitor  {menu_bar_title(snapshot, include_vpn_check)}",
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=True,
        caption_style="bold",
    )
    table.add_column("Target", style="bold")
    table.add_column("Status")
    table.add_column("Answered by")

    if snapshot is None:
        table.caption = "Waiting for the first check..."
        return table

    for outcome in snapshot.outcomes:
        table.add_row(
            outcome.name,
            "[green]UP[/green]" if outcome.is_up else "[red]DOWN[/red]",
            outcome.resolved_ip or "-",
        )

    overall = "[green]online[/green]" if snapshot.overall_up else "[red]offline[/red]"
    vpn = "at risk" if snapshot.vpn_at_risk else "ok"
    table.caption = (
        f"{overall} ({snapshot.up_count}/{len(snapshot.outcomes)} up) | "
        f"IP {snapshot.public_ip} | country {snapshot.country_code} | VPN {vpn}\n"
        f"Updated {datetime.now().strftime(config.LOG_TIME_FORMAT)}"
    )
    return table


class LatestSnapshotSink:
    """Keeps only the most recently published snapshot."""

    def __init__(self):
        self.latest: Optional[Snapshot] = None
        self.published = 0

    def publish(self, snapshot: Snapshot) -> None:
        self.latest = snapshot
        self.published += 1


class LiveSink(LatestSnapshotSink):
    """Redraws a rich Live table with every published snapshot."""

    def __init__(self, live: Live, include_vpn_check: bool = True):
        super().__init__()
        self.live = live
        self.include_vpn_check = include_vpn_check

    def publish(self, snapshot: Snapshot) -> None:
        super().publish(snapshot)
        self.live.update(build_table(snapshot, self.include_vpn_check))
