"""
Unread counts for the admin console badges.

An aggregator watches two tables, contact_messages and project_feedback,
either globally or (feedback only) for one project. Each watched key moves
Idle -> Subscribed on subscribe() and back to Idle on unsubscribe() or
teardown(). While subscribed, every INSERT, UPDATE or DELETE that reaches
the key triggers a full recount; counts are replaced, never adjusted by a
delta, so deleting an unread row drops it from the badge.

Recounts can overlap when inserts arrive close together. Each recount takes
a ticket from a single increasing counter, and its result is applied only
if it is newer than the last applied result for that key and the key is
still subscribed. A recount that finishes after teardown is dropped.
"""
import functools
import itertools
import logging
import threading
from typing import NamedTuple, Optional

from django.db import DatabaseError

from content.exceptions import FetchError, WriteError
from content.models import ContactMessage, ProjectFeedback

from .feed import change_feed, EVENTS

logger = logging.getLogger(__name__)


class WatchedTable(NamedTuple):
    model: type
    scope_field: Optional[str]


WATCHED_TABLES = {
    ContactMessage._meta.db_table: WatchedTable(ContactMessage, None),
    ProjectFeedback._meta.db_table: WatchedTable(ProjectFeedback, 'project_id'),
}

CONTACT_MESSAGES = ContactMessage._meta.db_table
PROJECT_FEEDBACK = ProjectFeedback._meta.db_table


def _key(table, scope=None):
    try:
        watched = WATCHED_TABLES[table]
    except KeyError:
        raise ValueError(f"Not a watched table: {table}")
    if scope is None:
        return (table, None)
    if watched.scope_field is None:
        raise ValueError(f"{table} has no per-scope counts")
    return (table, int(scope))


def _filters(key):
    table, scope = key
    filters = {'is_read': False}
    if scope is not None:
        filters[WATCHED_TABLES[table].scope_field] = scope
    return filters


class NotificationAggregator:
    def __init__(self, feed=None):
        self.feed = feed if feed is not None else change_feed
        self._lock = threading.Lock()
        self._tickets = itertools.count(1)
        self._handles = {}
        self._counts = {}
        # Ticket of the newest applied recount per key; also the floor set at subscribe time
        self._applied = {}

    def subscribe(self, table: str, scope=None) -> bool:
        """
        Start watching (table, scope) and load its initial count.
        Returns False if the key was already subscribed.
        """
        key = _key(table, scope)
        feed_scope = None
        if key[1] is not None:
            feed_scope = {WATCHED_TABLES[table].scope_field: key[1]}

        with self._lock:
            if key in self._handles:
                return False
            callback = functools.partial(self._on_change, key)
            self._handles[key] = tuple(
                self.feed.subscribe(table, event, callback, scope=feed_scope) for event in EVENTS
            )
            self._counts[key] = 0
            self._applied[key] = next(self._tickets)

        logger.info("Watching unread %s (scope=%s)", table, key[1])
        self._recount(key)
        return True

    def unsubscribe(self, table: str, scope=None) -> bool:
        key = _key(table, scope)
        with self._lock:
            handles = self._handles.pop(key, None)
            self._counts.pop(key, None)
        if handles is None:
            return False
        for handle in handles:
            self.feed.unsubscribe(handle)
        logger.info("Stopped watching unread %s (scope=%s)", table, key[1])
        return True

    def teardown(self) -> int:
        """Release every feed handle. Safe to call repeatedly; returns how many keys were released."""
        with self._lock:
            released = list(self._handles.values())
            self._handles.clear()
            self._counts.clear()
        for handles in released:
            for handle in handles:
                self.feed.unsubscribe(handle)
        if released:
            logger.info("Notification aggregator torn down (%s subscription(s))", len(released))
        return len(released)

    def is_subscribed(self, table: str, scope=None) -> bool:
        with self._lock:
            return _key(table, scope) in self._handles

    def count(self, table: str, scope=None) -> int:
        """Cached unread count; 0 for a key that is not subscribed."""
        with self._lock:
            return self._counts.get(_key(table, scope), 0)

    def counts(self):
        """Snapshot of every subscribed key, e.g. {'contact_messages': 2, 'project_feedback:7': 1}."""
        with self._lock:
            return {
                table if scope is None else f"{table}:{scope}": value
                for (table, scope), value in self._counts.items()
            }

    def refresh(self, table: str, scope=None):
        """Recount one subscribed key now. Returns the cached count afterwards."""
        key = _key(table, scope)
        self._recount(key)
        return self.count(table, scope)

    def mark_read(self, table: str, scope=None) -> int:
        """
        Flag every unread row in scope as read, then recount the keys it
        touched. Idempotent; an empty scope updates nothing and still
        recounts. Returns the number of rows flagged.
        """
        key = _key(table, scope)
        model = WATCHED_TABLES[table].model
        try:
            updated = model.objects.filter(**_filters(key)).update(is_read=True)
        except DatabaseError as e:
            logger.error(f"Failed to mark {table} read (scope={key[1]}): {e}")
            raise WriteError(f"Failed to mark {table} as read") from e

        logger.info("Marked %s %s row(s) read (scope=%s)", updated, table, key[1])

        # Global and per-scope keys overlap, so refresh every key the update could have changed
        with self._lock:
            affected = [
                k for k in self._handles
                if k[0] == table and (key[1] is None or k[1] is None or k[1] == key[1])
            ]
        for k in affected:
            self._recount(k)
        return updated

    def _on_change(self, key, change):
        self._recount(key)

    def _recount(self, key):
        with self._lock:
            if key not in self._handles:
                return
            ticket = next(self._tickets)

        table = key[0]
        try:
            value = WATCHED_TABLES[table].model.objects.filter(**_filters(key)).count()
        except DatabaseError as e:
            logger.error(f"Failed to count unread {table} (scope={key[1]}): {e}")
            raise FetchError(f"Failed to fetch unread {table} count") from e

        with self._lock:
            if key not in self._handles or ticket <= self._applied.get(key, 0):
                logger.debug("Dropped stale recount %s for %s", ticket, key)
                return
            self._applied[key] = ticket
            self._counts[key] = value
