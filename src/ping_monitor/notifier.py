from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from rich.console import Console

from . import config


class Tone(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NONE = "none"


class Notifier(Protocol):
    def send(self, title: str, subtitle: str, message: str, tone: Tone) -> None: ...


TONE_STYLES = {
    Tone.SUCCESS: "bold green",
    Tone.FAILURE: "bold red",
    Tone.NONE: "cyan",
}


class ConsoleNotifier:
    """Prints alerts to the terminal; the failure tone also rings the bell."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def send(self, title: str, subtitle: str, message: str, tone: Tone) -> None:
        ts = datetime.now().strftime(config.LOG_TIME_FORMAT)
        self.console.print(
            f"[dim]{ts}[/dim] [{TONE_STYLES[tone]}]{title} {subtitle}[/] {message}",
            highlight=False,
        )
        if tone is Tone.FAILURE:
            self.console.bell()


@dataclass(frozen=True)
class Notification:
    title: str
    subtitle: str
    message: str
    tone: Tone


class RecordingNotifier:
    """Keeps every notification in memory instead of delivering it."""

    def __init__(self):
        self.sent: List[Notification] = []

    def send(self, title: str, subtitle: str, message: str, tone: Tone) -> None:
        self.sent.append(Notification(title, subtitle, message, tone))

    def with_tone(self, tone: Tone) -> List[Notification]:
        return [n for n in self.sent if n.tone is tone]
