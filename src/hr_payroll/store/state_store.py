import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional, Tuple

from ..models.snapshot import Snapshot
from ..utils.clock import SystemClock
from . import intents
from .reducer import apply, prune_notifications

logger = logging.getLogger(__name__)


class InMemoryPersistence:
    """Persistence collaborator that keeps the last saved snapshot in memory"""

    def __init__(self, snapshot: Optional[Snapshot] = None):
        self.snapshot = snapshot
        self.save_count = 0

    def load(self) -> Optional[Snapshot]:
        return self.snapshot

    def save(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        self.save_count += 1


class StateStore:
    """
    Owner of the authoritative snapshot.

    Transitions run one at a time through ``dispatch``; each accepted
    transition is mirrored to the persistence collaborator. A rejected
    transition raises and leaves ``state`` untouched.
    """

    def __init__(self, persistence=None, clock=None, initial: Optional[Snapshot] = None):
        self.persistence = persistence
        self.clock = clock or SystemClock()
        self._state = initial or Snapshot()
        self._lock = threading.Lock()
        self.last_persistence_error: Optional[Exception] = None

    @property
    def state(self) -> Snapshot:
        return self._state

    def load(self) -> Snapshot:
        """Replace the state with the collaborator's last snapshot, if any"""
        if self.persistence is None:
            return self._state

        loaded = self.persistence.load()
        if loaded is None:
            logger.info("No saved state found, starting empty")
            return self._state

        with self._lock:
            self._state = normalize_loaded(loaded, self.clock.now())
        logger.info(
            "Loaded state: %d employees, %d advances, %d payroll records",
            len(self._state.employees), len(self._state.advances), len(self._state.payroll_records),
        )
        return self._state

    def visible_state(self) -> Snapshot:
        """Current state without notifications that expired since the last transition"""
        state = self._state
        return replace(state, notifications=prune_notifications(state.notifications, self.clock.now()))

    def dispatch(self, intent: intents.Intent) -> Snapshot:
        """Apply one transition; raises PayrollError subclasses on rejection"""
        return self.transition(intent)[1]

    def transition(self, intent: intents.Intent) -> Tuple[Snapshot, Snapshot]:
        """Apply one transition and return the (previous, next) snapshots it joined"""
        with self._lock:
            previous = self._state
            next_state = apply(previous, intent, self.clock.now())
            self._state = next_state
            self._save(next_state)
        return previous, next_state

    def tick(self) -> Snapshot:
        """Periodic housekeeping: flag overdue installments and prune old notifications"""
        self.dispatch(intents.MarkOverdueInstallments())
        return self.dispatch(intents.PruneNotifications())

    def close(self):
        """Flush the current state once more at session end"""
        with self._lock:
            self._save(self._state)

    def _save(self, snapshot: Snapshot):
        if self.persistence is None:
            return
        try:
            self.persistence.save(snapshot)
            self.last_persistence_error = None
        except Exception as e:
            # The transition stays applied; the next save retries with newer state
            logger.exception("Error saving state")
            self.last_persistence_error = e


def normalize_loaded(snapshot: Snapshot, now: datetime) -> Snapshot:
    """Drop orphaned installments and expired notifications from a loaded snapshot"""
    advance_ids = {a.id for a in snapshot.advances}
    return replace(
        snapshot,
        advance_installments=tuple(i for i in snapshot.advance_installments if i.advance_id in advance_ids),
        notifications=prune_notifications(snapshot.notifications, now),
    )
