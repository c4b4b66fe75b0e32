"""
Handler for InvoicePaid events.

On invoice payment, emails a receipt/thank-you message to the client.
"""

import logging
from typing import Callable

from core.events import InvoicePaid
from core.money import format_money

logger = logging.getLogger(__name__)


def handle_invoice_paid(mailer, currency_symbol: str = "$") -> Callable:
    """
    Factory that returns an InvoicePaid handler.

    Args:
        mailer: Object with send_email(to, subject, body) (EmailGatewayClient)
        currency_symbol: Symbol used in the receipt text

    Returns:
        Handler callable that emails a receipt
    """

    def handler(event: InvoicePaid):
        invoice = event.invoice
        if not invoice.client.email:
            logger.info(f"No email for client of invoice {invoice.invoice_number}, receipt skipped")
            return

        mailer.send_email(
            to=invoice.client.email,
            subject=f"Payment received: Invoice #{invoice.invoice_number}",
            body=(
                f"Dear {invoice.client.greeting_name},\n\n"
                f"Thank you! Payment of {format_money(invoice.amount_paid, currency_symbol)} "
                f"received for invoice {invoice.invoice_number}."
            ),
        )

    return handler
