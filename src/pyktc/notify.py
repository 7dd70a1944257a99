"""User-facing notification sinks.

The sync core reports outcomes (created, failed, switched to offline
data) through a :class:`NotificationSink`. The console UI plugs in its
toast layer; headless callers get log lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Protocol

from pyktc.models.common import utcnow

_logger = logging.getLogger(__name__)

Level = Literal["success", "info", "error"]


class NotificationSink(Protocol):
    def success(self, title: str, description: str | None = None) -> None: ...

    def info(self, title: str, description: str | None = None) -> None: ...

    def error(self, title: str, description: str | None = None) -> None: ...


class LoggingNotificationSink:
    """Default sink: forwards notifications to the ``pyktc.notify`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def _emit(self, level: int, title: str, description: str | None) -> None:
        if description:
            self._logger.log(level, "%s: %s", title, description)
        else:
            self._logger.log(level, "%s", title)

    def success(self, title: str, description: str | None = None) -> None:
        self._emit(logging.INFO, title, description)

    def info(self, title: str, description: str | None = None) -> None:
        self._emit(logging.INFO, title, description)

    def error(self, title: str, description: str | None = None) -> None:
        self._emit(logging.ERROR, title, description)


@dataclass(frozen=True, slots=True)
class Notification:
    level: Level
    title: str
    description: str | None = None
    at: datetime = field(default_factory=utcnow)


class RecordingNotificationSink:
    """Sink that keeps every notification in memory."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def success(self, title: str, description: str | None = None) -> None:
        self.notifications.append(Notification("success", title, description))

    def info(self, title: str, description: str | None = None) -> None:
        self.notifications.append(Notification("info", title, description))

    def error(self, title: str, description: str | None = None) -> None:
        self.notifications.append(Notification("error", title, description))

    def titles(self, level: Level | None = None) -> list[str]:
        return [n.title for n in self.notifications if level is None or n.level == level]

    def clear(self) -> None:
        self.notifications.clear()
