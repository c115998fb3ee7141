"""
Change notifications for committed writes.

Services publish a ChangeEvent after each successful commit. Whatever
pushes changes to clients (websocket, polling endpoint, message queue)
subscribes here; the core never depends on that transport.
"""
import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: str  # "insert", "update", "delete"
    record_id: int


class ChangeFeed:
    def __init__(self):
        self._subscribers: list[Callable[[ChangeEvent], None]] = []

    def subscribe(self, callback: Callable[[ChangeEvent], None]):
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Callable[[ChangeEvent], None]):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, event: ChangeEvent):
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    f"Change subscriber failed for {event.table}:{event.action}:{event.record_id}"
                )


change_feed = ChangeFeed()
