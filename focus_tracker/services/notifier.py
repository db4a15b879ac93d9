"""In-process, best-effort fan-out of timer/task/goal events to connected clients."""

from __future__ import annotations

import logging
import queue
from threading import Lock
from typing import Any

from ..config import get_settings

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, max_queue_size: int = 100):
        self._max_queue_size = max_queue_size
        self._subscribers: dict[str, list[queue.Queue]] = {}
        self._lock = Lock()

    def subscribe(self, user_id: str) -> queue.Queue:
        inbox: queue.Queue = queue.Queue(maxsize=self._max_queue_size)
        with self._lock:
            self._subscribers.setdefault(user_id, []).append(inbox)
        logger.info("User connected: %s", user_id)
        return inbox

    def unsubscribe(self, user_id: str, inbox: queue.Queue) -> None:
        with self._lock:
            inboxes = self._subscribers.get(user_id, [])
            if inbox in inboxes:
                inboxes.remove(inbox)
            if not inboxes:
                self._subscribers.pop(user_id, None)
        logger.info("User disconnected: %s", user_id)

    def is_online(self, user_id: str) -> bool:
        with self._lock:
            return bool(self._subscribers.get(user_id))

    def publish(self, user_id: str, event: str, payload: Any) -> int:
        """Queue ``event`` for every connection of ``user_id``; never blocks.

        Returns how many connections accepted the message. Offline users and
        full inboxes are skipped.
        """
        with self._lock:
            inboxes = list(self._subscribers.get(user_id, []))
        delivered = 0
        for inbox in inboxes:
            try:
                inbox.put_nowait({"event": event, "data": payload})
                delivered += 1
            except queue.Full:
                logger.warning("Dropping %s for %s: inbox full", event, user_id)
        return delivered


_notifier = Notifier(get_settings().notification_queue_size)


def get_notifier() -> Notifier:
    return _notifier
