"""User-facing notifications (the host's toast messages).

Every notification is also logged so headless runs keep a trace. The UI
polls recent() through GET /api/notifications.
"""

import logging
from collections import deque
from datetime import UTC, datetime

from ddbimporter.models import Notification

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class NotificationCenter:
    """Bounded, newest-last buffer of notifications."""

    def __init__(self, max_items: int = 50) -> None:
        self._items: deque[Notification] = deque(maxlen=max_items)

    def info(self, message: str) -> Notification:
        return self._push("info", message)

    def warn(self, message: str) -> Notification:
        return self._push("warning", message)

    def error(self, message: str) -> Notification:
        return self._push("error", message)

    def recent(self, limit: int | None = None) -> list[Notification]:
        items = list(self._items)
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def clear(self) -> None:
        self._items.clear()

    def _push(self, level: str, message: str) -> Notification:
        note = Notification(level=level, message=message, created_at=datetime.now(UTC))
        self._items.append(note)
        logger.log(_LOG_LEVELS[level], "notification: %s", message)
        return note
