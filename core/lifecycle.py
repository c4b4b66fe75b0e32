"""
Invoice status lifecycle.

Status is a cached value derived from payment and date facts. derive_status()
is the single rule set; every mutation boundary (create, edit, payment,
send, mark paid) and every read for display runs it via refresh(). There is
no background scheduler: an invoice becomes OVERDUE the next time it is
evaluated after its due date.

Rule order:
1. amount_paid covers total (within EPSILON)   -> PAID
2. amount_paid > 0                             -> PARTIALLY_PAID
3. due_date < today and not DRAFT              -> OVERDUE
4. otherwise keep the current status

A zero-total invoice counts as settled only once it has left DRAFT.
"""

import logging
from datetime import date
from typing import Sequence

from core.errors import InvalidStatusTransitionError
from core.models import (
    Client, Invoice, InvoiceStatus, LineItem, PaymentMethod, PaymentRecord, TaxDefinition,
)
from core.money import EPSILON, ZERO, compute_totals, exceeds

logger = logging.getLogger(__name__)

MARK_PAID_NOTE = "Marked as paid"

# Every status change the lifecycle can make. Payments and mark_paid can settle
# a draft directly; an edit that raises the total can reopen a paid invoice.
ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({
        InvoiceStatus.SENT, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID,
    }),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID, InvoiceStatus.OVERDUE,
    }),
    InvoiceStatus.PARTIALLY_PAID: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset({InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.OVERDUE}),
}


def can_transition(current: InvoiceStatus, new: InvoiceStatus) -> bool:
    return new == current or new in ALLOWED_TRANSITIONS[current]


def _with_status(invoice: Invoice, status: InvoiceStatus, **changes) -> Invoice:
    """Copy of the invoice in the new status, rejecting moves outside the table."""
    if not can_transition(invoice.status, status):
        raise InvalidStatusTransitionError(
            f"Invoice {invoice.invoice_number} cannot move from "
            f"{invoice.status.value} to {status.value}"
        )
    return invoice.model_copy(update={**changes, "status": status})


def is_past_due(invoice: Invoice, today: date) -> bool:
    return invoice.due_date < today


def derive_status(invoice: Invoice, today: date) -> InvoiceStatus:
    """Apply the status rules to the invoice's current facts."""
    settled = invoice.amount_paid >= invoice.total - EPSILON
    if settled and (invoice.amount_paid > ZERO or invoice.status != InvoiceStatus.DRAFT):
        return InvoiceStatus.PAID

    if invoice.amount_paid > ZERO:
        return InvoiceStatus.PARTIALLY_PAID

    if is_past_due(invoice, today) and invoice.status != InvoiceStatus.DRAFT:
        return InvoiceStatus.OVERDUE

    return invoice.status


def refresh(invoice: Invoice, today: date) -> Invoice:
    """
    Return the invoice with its status re-derived.

    Returns the same object when nothing changes so callers can detect
    changes by identity.
    """
    status = derive_status(invoice, today)
    if status == invoice.status:
        return invoice

    return _with_status(invoice, status)


def mark_sent(invoice: Invoice, today: date) -> Invoice:
    """
    Move a DRAFT invoice to SENT, then re-derive.

    A draft that is already past due lands in OVERDUE. Calling this on an
    invoice that has left DRAFT is a resend and changes nothing but the
    derived status.
    """
    if invoice.status != InvoiceStatus.DRAFT:
        return refresh(invoice, today)

    sent = _with_status(invoice, InvoiceStatus.SENT)
    return refresh(sent, today)


def mark_paid(invoice: Invoice, today: date) -> Invoice:
    """
    Settle an invoice in full without a user-entered payment.

    The remaining balance is appended to the ledger as a settlement record
    (method OTHER, note "Marked as paid") so amount_paid still equals the sum
    of payment records. Already-paid invoices are returned unchanged.
    """
    if invoice.status == InvoiceStatus.PAID:
        return invoice

    records = list(invoice.payment_records)
    balance = invoice.balance_due
    if balance > ZERO:
        records.append(PaymentRecord(
            amount=balance,
            date=today,
            method=PaymentMethod.OTHER,
            note=MARK_PAID_NOTE,
        ))

    return _with_status(
        invoice,
        InvoiceStatus.PAID,
        payment_records=records,
        amount_paid=sum((r.amount for r in records), ZERO),
    )


def warn_on_dates(invoice_number: str, issue_date: date, due_date: date) -> None:
    """Due before issue is suspicious but allowed."""
    if due_date < issue_date:
        logger.warning(
            "Invoice %s is due (%s) before it is issued (%s)",
            invoice_number, due_date.isoformat(), issue_date.isoformat(),
        )


def apply_edit(
    invoice: Invoice,
    *,
    client: Client,
    line_items: Sequence[LineItem],
    taxes: Sequence[TaxDefinition],
    issue_date: date,
    due_date: date,
    notes: str | None,
    today: date,
) -> Invoice:
    """
    Replace the billable content of an invoice.

    Totals are recomputed from the new line items. amount_paid and the
    payment records are carried over untouched, and status is re-derived.
    """
    totals = compute_totals(line_items, taxes)
    warn_on_dates(invoice.invoice_number, issue_date, due_date)

    if exceeds(invoice.amount_paid, totals.total):
        logger.warning(
            "Edit leaves invoice %s overpaid: paid %s, new total %s",
            invoice.invoice_number, invoice.amount_paid, totals.total,
        )

    edited = invoice.model_copy(update={
        "client": client,
        "line_items": list(line_items),
        "taxes": list(taxes),
        "issue_date": issue_date,
        "due_date": due_date,
        "notes": notes,
        "subtotal": totals.subtotal,
        "tax_total": totals.tax_total,
        "total": totals.total,
    })
    return refresh(edited, today)
