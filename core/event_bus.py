"""
Event bus for ledger domain events.

Synchronous in-process pub/sub. Handlers execute immediately in the same
thread as the publisher. Handler errors are logged but never propagate;
the state transaction has already committed when an event is published.
"""

import logging
from typing import Callable, Dict, List

from core.events import LedgerEvent

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"


class EventBus:
    """
    In-process event bus for ledger domain events.

    Subscribe by event class (or its name), publish by event instance.
    Subscribing to "*" receives every event. Handlers are called
    synchronously: type-specific subscribers first, in subscription order,
    then wildcard subscribers.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    @staticmethod
    def _key(event_type: str | type) -> str:
        return event_type if isinstance(event_type, str) else event_type.__name__

    def subscribe(self, event_type: str | type, callback: Callable) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Event class or its name (e.g. InvoicePaid or 'InvoicePaid'),
                or "*" for every event
            callback: Function to call with the event when published
        """
        self._subscribers.setdefault(self._key(event_type), []).append(callback)

    def unsubscribe(self, event_type: str | type, callback: Callable) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        callbacks = self._subscribers.get(self._key(event_type), [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True

    def publish(self, event: LedgerEvent) -> None:
        """
        Publish an event to all subscribers of that type.

        Args:
            event: LedgerEvent instance to publish
        """
        event_type = event.__class__.__name__
        callbacks = [
            *self._subscribers.get(event_type, []),
            *self._subscribers.get(ALL_EVENTS, []),
        ]

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    event_type,
                    event.event_id,
                )

    def publish_all(self, events: List[LedgerEvent]) -> None:
        for event in events:
            self.publish(event)
