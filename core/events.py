"""
Domain events for the invoice ledger.

Immutable event objects that represent state changes. A service publishes
what happened after the state transaction commits; handlers (notification
feed, receipt emails) react without the publisher knowing who's listening.

Event Categories:
- ProfileEvent: Company profile setup and settings edits
- ClientEvent / ItemEvent / ExpenseEvent: Directory, catalog and expense CRUD
- InvoiceEvent: Invoice lifecycle (create, edit, send, payment, paid, overdue, delete)
- PersistenceFailed: Snapshot mirroring failures

Events carry the full domain object so handlers don't need to re-read state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class LedgerEvent:
    """Base class for all ledger domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# PROFILE EVENTS
# =============================================================================


@dataclass(frozen=True)
class ProfileEvent(LedgerEvent):
    """Events related to the company profile."""
    pass


@dataclass(frozen=True)
class ProfileSaved(ProfileEvent):
    """Profile was created by setup or edited in settings."""
    profile: Any = None  # CompanyProfile
    created: bool = False

    @classmethod
    def create(cls, profile: Any, created: bool = False) -> "ProfileSaved":
        return cls(profile=profile, created=created)


# =============================================================================
# CLIENT, ITEM & EXPENSE EVENTS
# =============================================================================


@dataclass(frozen=True)
class ClientEvent(LedgerEvent):
    """Events related to the client directory."""
    client: Any = None  # Client


@dataclass(frozen=True)
class ClientCreated(ClientEvent):
    @classmethod
    def create(cls, client: Any) -> "ClientCreated":
        return cls(client=client)


@dataclass(frozen=True)
class ClientUpdated(ClientEvent):
    @classmethod
    def create(cls, client: Any) -> "ClientUpdated":
        return cls(client=client)


@dataclass(frozen=True)
class ClientDeleted(ClientEvent):
    @classmethod
    def create(cls, client: Any) -> "ClientDeleted":
        return cls(client=client)


@dataclass(frozen=True)
class ItemEvent(LedgerEvent):
    """Events related to the item catalog."""
    item: Any = None  # Item


@dataclass(frozen=True)
class ItemCreated(ItemEvent):
    @classmethod
    def create(cls, item: Any) -> "ItemCreated":
        return cls(item=item)


@dataclass(frozen=True)
class ItemUpdated(ItemEvent):
    @classmethod
    def create(cls, item: Any) -> "ItemUpdated":
        return cls(item=item)


@dataclass(frozen=True)
class ItemDeleted(ItemEvent):
    @classmethod
    def create(cls, item: Any) -> "ItemDeleted":
        return cls(item=item)


@dataclass(frozen=True)
class ExpenseEvent(LedgerEvent):
    """Events related to recorded expenses."""
    expense: Any = None  # Expense


@dataclass(frozen=True)
class ExpenseCreated(ExpenseEvent):
    @classmethod
    def create(cls, expense: Any) -> "ExpenseCreated":
        return cls(expense=expense)


@dataclass(frozen=True)
class ExpenseUpdated(ExpenseEvent):
    @classmethod
    def create(cls, expense: Any) -> "ExpenseUpdated":
        return cls(expense=expense)


@dataclass(frozen=True)
class ExpenseDeleted(ExpenseEvent):
    @classmethod
    def create(cls, expense: Any) -> "ExpenseDeleted":
        return cls(expense=expense)


# =============================================================================
# INVOICE EVENTS
# =============================================================================


@dataclass(frozen=True)
class InvoiceEvent(LedgerEvent):
    """Events related to invoice lifecycle."""
    invoice: Any = None  # Invoice


@dataclass(frozen=True)
class InvoiceCreated(InvoiceEvent):
    """Invoice was created in DRAFT with a freshly issued number."""

    @classmethod
    def create(cls, invoice: Any) -> "InvoiceCreated":
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceUpdated(InvoiceEvent):
    """Invoice content was edited."""

    @classmethod
    def create(cls, invoice: Any) -> "InvoiceUpdated":
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceSent(InvoiceEvent):
    """Invoice was sent (or re-sent) to the client."""
    recipient: str | None = None

    @classmethod
    def create(cls, invoice: Any, recipient: str | None = None) -> "InvoiceSent":
        return cls(invoice=invoice, recipient=recipient)


@dataclass(frozen=True)
class InvoiceReminderSent(InvoiceEvent):
    """Payment reminder was sent for an unpaid invoice."""
    recipient: str | None = None

    @classmethod
    def create(cls, invoice: Any, recipient: str | None = None) -> "InvoiceReminderSent":
        return cls(invoice=invoice, recipient=recipient)


@dataclass(frozen=True)
class PaymentRecorded(InvoiceEvent):
    """A payment was appended to the invoice ledger."""
    payment: Any = None  # PaymentRecord

    @classmethod
    def create(cls, invoice: Any, payment: Any) -> "PaymentRecorded":
        return cls(invoice=invoice, payment=payment)


@dataclass(frozen=True)
class InvoicePaid(InvoiceEvent):
    """Invoice became fully paid."""

    @classmethod
    def create(cls, invoice: Any) -> "InvoicePaid":
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceOverdue(InvoiceEvent):
    """Invoice was found past due on evaluation."""

    @classmethod
    def create(cls, invoice: Any) -> "InvoiceOverdue":
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoicesDeleted(LedgerEvent):
    """Invoices were removed in bulk."""
    invoice_ids: tuple[str, ...] = ()

    @classmethod
    def create(cls, invoice_ids: list[str]) -> "InvoicesDeleted":
        return cls(invoice_ids=tuple(invoice_ids))


# =============================================================================
# STORE EVENTS
# =============================================================================


@dataclass(frozen=True)
class PersistenceFailed(LedgerEvent):
    """Snapshot could not be mirrored to the store. In-memory state stands."""
    version: int = 0
    error: str = ""

    @classmethod
    def create(cls, version: int, error: str) -> "PersistenceFailed":
        return cls(version=version, error=error)
