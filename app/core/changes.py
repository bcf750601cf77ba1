# =========================================================
# CHANGE FEED
#
# Ordered, versioned notifications of catalog / sales writes
# so screens showing products, toppings, sales, ... can
# refresh when another cashier changes something.
#
# - subscribe(callback) for in-process observers
# - since(version) for clients polling over HTTP
# =========================================================

import logging
import threading
from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Callable

from app.core.config import settings

logger = logging.getLogger("app")


@dataclass(frozen=True)
class ChangeEvent:
    version: int
    collection: str
    action: str
    document_id: str | None
    at: datetime

    def to_dict(self):
        return asdict(self)


class ChangeFeed:
    def __init__(self, max_events: int = 500):
        self._events: deque[ChangeEvent] = deque(maxlen=max_events)
        self._subscribers: dict[int, Callable[[ChangeEvent], None]] = {}
        self._version = 0
        self._next_token = 0
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        return self._version

    def publish(self, collection: str, action: str, document_id=None) -> ChangeEvent:
        with self._lock:
            self._version += 1
            event = ChangeEvent(
                version=self._version,
                collection=collection,
                action=action,
                document_id=str(document_id) if document_id is not None else None,
                at=datetime.now(timezone.utc),
            )
            self._events.append(event)
            subscribers = list(self._subscribers.values())

        # Callbacks run outside the lock so they may publish or unsubscribe
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Change feed subscriber failed on {collection}/{action}")

        return event

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """Register an observer; returns a function that cancels it."""
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

        def unsubscribe():
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def since(self, version: int, collection: str | None = None) -> list[ChangeEvent]:
        with self._lock:
            events = [e for e in self._events if e.version > version]

        if collection:
            events = [e for e in events if e.collection == collection]

        return events

    def oldest_version(self) -> int:
        with self._lock:
            return self._events[0].version if self._events else self._version


change_feed = ChangeFeed(max_events=settings.CHANGE_FEED_SIZE)
