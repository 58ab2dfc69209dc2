"""
In-process change feed for content tables.

Writers publish (table, event, row) after a row is saved or deleted; any
number of subscribers receive the events for the table they watch. A
subscriber can narrow its scope to rows whose attributes match a mapping,
e.g. {'project_id': 7}.

The feed is process-local. Writes made by another worker process are never
observed here.
"""
import itertools
import logging
import threading
from typing import Any, Callable, Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'
EVENTS = (INSERT, UPDATE, DELETE)


class ChangeEvent(NamedTuple):
    table: str
    event: str
    row: Any


class Subscription(NamedTuple):
    table: str
    event: str
    callback: Callable[[ChangeEvent], None]
    scope: Optional[Dict[str, Any]]

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table or change.event != self.event:
            return False
        if not self.scope:
            return True
        return all(getattr(change.row, field, None) == value for field, value in self.scope.items())


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[int, Subscription] = {}
        self._handles = itertools.count(1)

    def subscribe(self, table: str, event: str, callback, scope=None) -> int:
        """Register callback for event on table. Returns a handle for unsubscribe()."""
        if event not in EVENTS:
            raise ValueError(f"Unknown change event: {event}")
        subscription = Subscription(table, event, callback, dict(scope) if scope else None)
        with self._lock:
            handle = next(self._handles)
            self._subscriptions[handle] = subscription
        logger.debug("Feed subscription %s: %s %s scope=%s", handle, event, table, scope)
        return handle

    def unsubscribe(self, handle: int) -> bool:
        """Remove a subscription. Returns False if the handle was already removed."""
        with self._lock:
            removed = self._subscriptions.pop(handle, None)
        if removed is not None:
            logger.debug("Feed subscription %s removed", handle)
        return removed is not None

    def publish(self, table: str, event: str, row) -> int:
        """
        Deliver an event to every matching subscriber, synchronously and in
        subscription order. Returns the number of subscribers notified.

        A failing callback is logged and skipped; it never reaches the writer.
        """
        change = ChangeEvent(table, event, row)
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]

        for subscription in targets:
            try:
                subscription.callback(change)
            except Exception:
                logger.exception(f"Change feed subscriber failed for {event} on {table}")
        return len(targets)

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions.values() if s.table == table)


change_feed = ChangeFeed()
