"""
Notices — user-visible alerts raised by the client components.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class Level(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    title: str
    message: str
    level: Level = Level.INFO


class Notifier(Protocol):
    """Sink for user-facing notices (alerts, toasts, dialogs)."""

    def notify(self, notice: Notice) -> None: ...


class LoggingNotifier:
    """Default notifier: notices go to the log."""

    _LEVELS = {
        Level.INFO: logging.INFO,
        Level.WARNING: logging.WARNING,
        Level.ERROR: logging.ERROR,
    }

    def notify(self, notice: Notice) -> None:
        logger.log(self._LEVELS[notice.level], "%s: %s", notice.title, notice.message)


@dataclass
class RecordingNotifier:
    """Keeps every notice. For tests and headless runs."""

    notices: list[Notice] = field(default_factory=list[Notice])

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notices]

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices.clear()


__all__ = ("Level", "Notice", "Notifier", "LoggingNotifier", "RecordingNotifier")
