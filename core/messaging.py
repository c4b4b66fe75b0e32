"""
Invoice email composition.

Builds the default subject and body for sending an invoice, re-sending it,
or reminding the client about an unpaid balance. Delivery is the mailer's
job; this module only produces text.
"""

from dataclasses import dataclass
from enum import Enum

from core.errors import FieldValidationError
from core.models import CompanyProfile, Invoice
from core.money import round_display


class SendMode(str, Enum):
    SEND = "send"
    RESEND = "resend"
    REMINDER = "reminder"


@dataclass(frozen=True)
class InvoiceMessage:
    to: str
    subject: str
    body: str


def _subject(invoice: Invoice, profile: CompanyProfile, mode: SendMode) -> str:
    if mode == SendMode.REMINDER:
        return f"Reminder: Invoice #{invoice.invoice_number}"
    if mode == SendMode.RESEND:
        return f"Resent: Invoice #{invoice.invoice_number} from {profile.name}"
    return f"Invoice #{invoice.invoice_number} from {profile.name}"


def _paragraph(invoice: Invoice, mode: SendMode) -> str:
    balance = f"{round_display(invoice.balance_due):.2f}"
    due = invoice.due_date.isoformat()
    if mode == SendMode.REMINDER:
        return (
            f"This is a friendly reminder that invoice #{invoice.invoice_number}, "
            f"due on {due}, has an outstanding balance of {balance}."
        )
    if mode == SendMode.RESEND:
        return f"Please find invoice #{invoice.invoice_number} attached again for your records."
    return (
        f"Please find attached invoice #{invoice.invoice_number} "
        f"for {balance}, due on {due}."
    )


def compose_invoice_message(
    invoice: Invoice,
    profile: CompanyProfile,
    mode: SendMode = SendMode.SEND,
    recipient: str | None = None,
) -> InvoiceMessage:
    """
    Compose the email for an invoice.

    Args:
        invoice: Invoice being sent
        profile: Sender's company profile
        mode: send, resend or reminder
        recipient: Address override; defaults to the client's email

    Returns:
        InvoiceMessage ready for delivery

    Raises:
        FieldValidationError: If there is no recipient address
    """
    to = (recipient or invoice.client.email or "").strip()
    if not to:
        raise FieldValidationError("recipient", "Recipient email address is required")

    body = (
        f"Dear {invoice.client.greeting_name},\n\n"
        f"{_paragraph(invoice, mode)}\n\n"
        f"Best regards,\n{profile.name}"
    )
    return InvoiceMessage(to=to, subject=_subject(invoice, profile, mode), body=body)
