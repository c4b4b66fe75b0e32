"""Invoice domain models.

Amounts are Decimal at full precision. `total` is computed once when the
invoice is saved or edited and is authoritative afterwards; it is never
re-derived from line items on read.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from core.models.client import Client
from core.models.line_item import LineItem, LineItemCreate, TaxDefinition
from core.models.payment import PaymentRecord


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class InvoiceDraft(BaseModel):
    """Data required to create an invoice."""

    client_id: str | None = None
    line_items: list[LineItemCreate] = Field(default_factory=list)
    taxes: list[TaxDefinition] = Field(default_factory=list)
    issue_date: date | None = None  # Defaults to today
    due_date: date | None = None  # Defaults to issue_date
    notes: str | None = Field(None, max_length=2000)


class InvoiceEdit(InvoiceDraft):
    """
    Full replacement of an invoice's billable content.

    Line items, taxes and client are replaced wholesale. Omitted dates keep
    their current values. Payments are never touched by an edit.
    """


class Invoice(BaseModel):
    """Full invoice entity as stored."""

    id: str
    invoice_number: str
    client: Client
    line_items: list[LineItem]
    taxes: list[TaxDefinition] = Field(default_factory=list)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    issue_date: date
    due_date: date
    subtotal: Decimal
    tax_total: Decimal = Decimal("0")
    total: Decimal
    amount_paid: Decimal = Decimal("0")
    payment_records: list[PaymentRecord] = Field(default_factory=list)
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}

    @property
    def balance_due(self) -> Decimal:
        """Remaining amount to be paid."""
        return self.total - self.amount_paid

    @property
    def is_paid(self) -> bool:
        """Whether invoice is fully paid."""
        return self.status == InvoiceStatus.PAID
