"""
Payment ledger.

Each invoice carries an append-only list of payment records (its audit
trail). amount_paid is always the sum of those records. Payments are
validated against the balance due, appended, and the status is re-derived.
Nothing here mutates an invoice in place.
"""

import logging
from datetime import date
from decimal import Decimal

from core import lifecycle
from core.errors import InvalidPaymentAmountError
from core.models import Invoice, PaymentCreate, PaymentRecord
from core.money import ZERO, exceeds

logger = logging.getLogger(__name__)


def balance_due(invoice: Invoice) -> Decimal:
    return invoice.total - invoice.amount_paid


def ledger_total(invoice: Invoice) -> Decimal:
    """Sum of recorded payments; equals amount_paid for any ledger-built invoice."""
    return sum((record.amount for record in invoice.payment_records), ZERO)


def validate_amount(invoice: Invoice, amount: Decimal) -> None:
    """
    Raises:
        InvalidPaymentAmountError: If amount <= 0 or exceeds the balance due
            by more than EPSILON
    """
    balance = balance_due(invoice)
    if amount <= ZERO or exceeds(amount, balance):
        raise InvalidPaymentAmountError(amount=amount, balance_due=balance)


def record_payment(invoice: Invoice, payment: PaymentCreate, today: date) -> Invoice:
    """
    Record a payment on an invoice.

    Args:
        invoice: Current invoice state (not modified)
        payment: Payment as entered; date defaults to today
        today: Current calendar date for status derivation

    Returns:
        New invoice state with the record appended and status re-derived

    Raises:
        InvalidPaymentAmountError: If the amount is not positive or exceeds
            the balance due
    """
    validate_amount(invoice, payment.amount)

    record = PaymentRecord(
        amount=payment.amount,
        date=payment.date or today,
        method=payment.method,
        note=payment.note,
    )

    updated = invoice.model_copy(update={
        "payment_records": [*invoice.payment_records, record],
        "amount_paid": invoice.amount_paid + record.amount,
    })

    logger.info(
        "Payment of %s recorded on invoice %s (balance %s)",
        record.amount, invoice.invoice_number, balance_due(updated),
    )

    return lifecycle.refresh(updated, today)
