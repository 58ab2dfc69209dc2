"""
Navigation state of the admin console.

A shell has exactly one active tab and at most one drill-down (a card's
items, or a project's feedback). It owns a NotificationAggregator: open()
subscribes the global badge streams, the feedback drill-down adds a
per-project subscription while it is shown, and close() tears everything
down exactly once.

Shells live in a process-local registry keyed by user id.
"""
import logging
import threading
from typing import NamedTuple

from notifications.aggregator import NotificationAggregator, CONTACT_MESSAGES, PROJECT_FEEDBACK

logger = logging.getLogger(__name__)

TABS = ('hero', 'about', 'cards', 'projects', 'resume', 'contact', 'techstack')
DEFAULT_TAB = 'hero'

# drill-down kind -> tab it lives under
DRILL_DOWNS = {
    'card_items': 'cards',
    'feedback': 'projects',
}


class NavigationError(ValueError):
    pass


class DrillDown(NamedTuple):
    kind: str
    key: int


class AdminShell:
    def __init__(self, aggregator=None):
        self.aggregator = aggregator if aggregator is not None else NotificationAggregator()
        self.active_tab = DEFAULT_TAB
        self.drill_down = None
        self._lock = threading.RLock()
        self._opened = False
        self._closed = False

    @property
    def is_open(self):
        return self._opened and not self._closed

    def open(self) -> bool:
        """Subscribe the badge streams. Only the first call does anything."""
        with self._lock:
            if self._closed:
                raise NavigationError("Shell is closed")
            if self._opened:
                return False
            self._opened = True
            self.aggregator.subscribe(CONTACT_MESSAGES)
            self.aggregator.subscribe(PROJECT_FEEDBACK)
        return True

    def close(self) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            self.drill_down = None
            self.aggregator.teardown()
        logger.debug("Admin shell closed")
        return True

    def select_tab(self, tab: str):
        """Switch tabs. Showing the contact tab marks every contact message read."""
        if tab not in TABS:
            raise NavigationError(f"Unknown tab: {tab}")
        with self._lock:
            self._leave_drill_down()
            self.active_tab = tab
        if tab == 'contact':
            self.aggregator.mark_read(CONTACT_MESSAGES)

    def open_drill_down(self, kind: str, key) -> DrillDown:
        """Show a card's items or a project's feedback, replacing any open drill-down."""
        if kind not in DRILL_DOWNS:
            raise NavigationError(f"Unknown drill-down: {kind}")
        try:
            key = int(key)
        except (TypeError, ValueError):
            raise NavigationError(f"Invalid {kind} key: {key}")

        with self._lock:
            self._leave_drill_down()
            self.active_tab = DRILL_DOWNS[kind]
            self.drill_down = DrillDown(kind, key)
            if kind == 'feedback':
                self.aggregator.subscribe(PROJECT_FEEDBACK, scope=key)
        return self.drill_down

    def back(self) -> bool:
        """Leave the drill-down, staying on its tab. False if none was open."""
        with self._lock:
            return self._leave_drill_down()

    def _leave_drill_down(self):
        current = self.drill_down
        if current is None:
            return False
        self.drill_down = None
        if current.kind == 'feedback':
            self.aggregator.unsubscribe(PROJECT_FEEDBACK, scope=current.key)
        return True

    def badges(self):
        return {
            'contact': self.aggregator.count(CONTACT_MESSAGES),
            'projects': self.aggregator.count(PROJECT_FEEDBACK),
        }

    def state(self):
        with self._lock:
            drill_down = None
            if self.drill_down is not None:
                drill_down = {'kind': self.drill_down.kind, 'key': self.drill_down.key}
                if self.drill_down.kind == 'feedback':
                    drill_down['unread'] = self.aggregator.count(PROJECT_FEEDBACK, scope=self.drill_down.key)
            return {
                'active_tab': self.active_tab,
                'drill_down': drill_down,
                'badges': self.badges(),
                'tabs': list(TABS),
            }


_shells = {}
_registry_lock = threading.Lock()


def _registered_shell(user):
    with _registry_lock:
        shell = _shells.get(user.pk)
        if shell is None:
            shell = AdminShell()
            _shells[user.pk] = shell
    return shell


def _forget(user, shell):
    with _registry_lock:
        if _shells.get(user.pk) is shell:
            del _shells[user.pk]


def shell_for(user) -> AdminShell:
    """
    The user's shell, created and opened on first use.

    A shell closed by a concurrent close_shell() between lookup and open()
    is replaced by a fresh one.
    """
    shell = _registered_shell(user)
    try:
        shell.open()
    except NavigationError:
        _forget(user, shell)
        shell = _registered_shell(user)
        shell.open()
    except Exception:
        _forget(user, shell)
        shell.close()
        raise
    return shell


def close_shell(user) -> bool:
    with _registry_lock:
        shell = _shells.pop(user.pk, None)
    if shell is None:
        return False
    return shell.close()


def close_all() -> int:
    with _registry_lock:
        shells = list(_shells.values())
        _shells.clear()
    for shell in shells:
        shell.close()
    return len(shells)
