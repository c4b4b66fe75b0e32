"""
Single in-memory holder for the ledger snapshot.

All writes go through LedgerState.transact(). A transaction takes the
current snapshot, lets a mutator build a new one (copy-on-write, models are
frozen), bumps the version and mirrors it to the store. Writers are
serialized by a lock, and the store's version check catches writers in other
processes.

In-memory state is the source of truth: if the store cannot be written the
update still stands and a PersistenceFailed event is published. The next
successful save carries the unsaved changes along with it.
"""

import logging
import threading
from typing import Callable, TypeVar

from core.errors import ConcurrentUpdateError, StoreError
from core.event_bus import EventBus
from core.events import PersistenceFailed
from core.models import LedgerSnapshot
from core.store import SnapshotStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Takes the current snapshot, returns (new snapshot, result for the caller).
# Returning the input snapshot unchanged means "nothing to write".
Mutator = Callable[[LedgerSnapshot], tuple[LedgerSnapshot, T]]


class LedgerState:
    """
    Owns the current LedgerSnapshot.

    Usage:
        state = LedgerState(MemorySnapshotStore(), EventBus())
        invoice = state.transact(lambda snap: (snap.model_copy(...), invoice))
    """

    def __init__(self, store: SnapshotStore, event_bus: EventBus, max_conflict_retries: int = 3):
        """
        Load the initial snapshot from the store.

        Raises:
            StoreError: If the store cannot be read
        """
        self.store = store
        self.event_bus = event_bus
        self.max_conflict_retries = max_conflict_retries
        self._lock = threading.RLock()
        self._snapshot = store.load()
        self._stored_version = self._snapshot.version
        logger.info(f"Ledger state loaded at version {self._snapshot.version}")

    @property
    def snapshot(self) -> LedgerSnapshot:
        """Current committed snapshot. Immutable; safe to read without the lock."""
        return self._snapshot

    @property
    def has_unsaved_changes(self) -> bool:
        return self._snapshot.version != self._stored_version

    def reload(self) -> LedgerSnapshot:
        """Replace in-memory state with what the store holds."""
        with self._lock:
            self._snapshot = self.store.load()
            self._stored_version = self._snapshot.version
            return self._snapshot

    def transact(self, mutator: Mutator[T]) -> T:
        """
        Apply mutator atomically and mirror the result to the store.

        The mutator may raise to abort; nothing is committed in that case.
        On a version conflict the stored snapshot is reloaded and the mutator
        re-applied, up to max_conflict_retries times.

        Args:
            mutator: Function (snapshot) -> (new snapshot, result)

        Returns:
            The mutator's result

        Raises:
            ConcurrentUpdateError: If conflicts persist after all retries
            Any exception raised by the mutator
        """
        failure: PersistenceFailed | None = None

        with self._lock:
            attempt = 0
            while True:
                current = self._snapshot
                updated, result = mutator(current)
                if updated is current:
                    return result

                updated = updated.model_copy(update={"version": current.version + 1})

                try:
                    self.store.save(updated, expected_version=self._stored_version)
                except ConcurrentUpdateError:
                    if attempt >= self.max_conflict_retries:
                        logger.error(
                            f"Giving up after {attempt + 1} conflicting writes "
                            f"(local version {current.version})"
                        )
                        raise
                    attempt += 1
                    if self.has_unsaved_changes:
                        logger.warning(
                            f"Discarding unsaved local changes up to version {current.version} "
                            f"after a concurrent write"
                        )
                    logger.info(f"Concurrent write detected, reloading (attempt {attempt})")
                    self.reload()
                    continue
                except StoreError as e:
                    logger.error(f"Snapshot v{updated.version} not persisted: {e}")
                    failure = PersistenceFailed.create(version=updated.version, error=str(e))
                else:
                    self._stored_version = updated.version

                self._snapshot = updated
                break

        if failure is not None:
            self.event_bus.publish(failure)
        return result
