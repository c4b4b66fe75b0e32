"""
Notification feed.

Subscribes to every event and turns the ones a user cares about into short
success/error notifications, kept in a bounded history for the UI to poll.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from core.event_bus import ALL_EVENTS, EventBus
from core.events import (
    ClientCreated,
    ClientDeleted,
    ClientUpdated,
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseUpdated,
    InvoiceCreated,
    InvoiceOverdue,
    InvoicePaid,
    InvoiceReminderSent,
    InvoicesDeleted,
    InvoiceSent,
    InvoiceUpdated,
    ItemCreated,
    ItemDeleted,
    ItemUpdated,
    LedgerEvent,
    PaymentRecorded,
    PersistenceFailed,
    ProfileSaved,
)
from core.money import format_money

logger = logging.getLogger(__name__)

Level = Literal["success", "error"]


@dataclass(frozen=True)
class Notification:
    id: int
    level: Level
    message: str
    event_type: str
    occurred_at: datetime


def _describe(event: LedgerEvent, currency_symbol: str) -> tuple[Level, str] | None:
    """Notification text for an event, or None if the event is not user-facing."""
    match event:
        case ProfileSaved(created=True):
            return "success", "Company profile set up"
        case ProfileSaved():
            return "success", "Profile saved"
        case ClientCreated(client=client):
            return "success", f"Client {client.name} added"
        case ClientUpdated(client=client):
            return "success", f"Client {client.name} updated"
        case ClientDeleted(client=client):
            return "success", f"Client {client.name} deleted"
        case ItemCreated(item=item):
            return "success", f"Item {item.name} added"
        case ItemUpdated(item=item):
            return "success", f"Item {item.name} updated"
        case ItemDeleted(item=item):
            return "success", f"Item {item.name} deleted"
        case ExpenseCreated(expense=expense):
            return "success", f"Expense from {expense.merchant} added"
        case ExpenseUpdated(expense=expense):
            return "success", f"Expense from {expense.merchant} updated"
        case ExpenseDeleted(expense=expense):
            return "success", f"Expense from {expense.merchant} deleted"
        case InvoiceCreated(invoice=invoice):
            return "success", f"Invoice {invoice.invoice_number} created"
        case InvoiceUpdated(invoice=invoice):
            return "success", f"Invoice {invoice.invoice_number} updated"
        case InvoiceSent(invoice=invoice):
            return "success", f"Invoice {invoice.invoice_number} sent"
        case InvoiceReminderSent(invoice=invoice):
            return "success", f"Reminder sent for invoice {invoice.invoice_number}"
        case PaymentRecorded(invoice=invoice, payment=payment):
            amount = format_money(payment.amount, currency_symbol)
            return "success", f"Payment of {amount} recorded on invoice {invoice.invoice_number}"
        case InvoicePaid(invoice=invoice):
            return "success", f"Invoice {invoice.invoice_number} marked as paid"
        case InvoiceOverdue(invoice=invoice):
            return "error", f"Invoice {invoice.invoice_number} is overdue"
        case InvoicesDeleted(invoice_ids=ids):
            return "success", f"{len(ids)} invoice(s) deleted"
        case PersistenceFailed():
            return "error", "Changes could not be saved to storage"
    return None


class NotificationFeed:
    """
    Bounded history of user-facing notifications.

    Usage:
        feed = NotificationFeed(max_items=50)
        feed.attach(event_bus)
        feed.recent()  # newest first
    """

    def __init__(self, max_items: int = 50, currency_symbol: str = "$"):
        self.currency_symbol = currency_symbol
        self._items: deque[Notification] = deque(maxlen=max_items)
        self._next_id = 1
        self._lock = threading.Lock()

    def attach(self, event_bus: EventBus) -> None:
        event_bus.subscribe(ALL_EVENTS, self.handle)

    def handle(self, event: LedgerEvent) -> None:
        described = _describe(event, self.currency_symbol)
        if described is None:
            return
        level, message = described
        with self._lock:
            self._items.append(Notification(
                id=self._next_id,
                level=level,
                message=message,
                event_type=event.__class__.__name__,
                occurred_at=event.occurred_at,
            ))
            self._next_id += 1

    def recent(self, limit: int | None = None) -> list[Notification]:
        """Newest first."""
        with self._lock:
            items = list(reversed(self._items))
        return items if limit is None else items[:limit]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
