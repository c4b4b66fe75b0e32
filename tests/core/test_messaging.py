"""Tests for invoice email composition."""

from datetime import date
from decimal import Decimal

import pytest

from core.errors import FieldValidationError
from core.messaging import SendMode, compose_invoice_message
from core.models import Client, CompanyProfile


@pytest.fixture
def company():
    return CompanyProfile(name="Acme Studio", email="billing@acme.example.com")


@pytest.fixture
def invoice(make_invoice):
    return make_invoice(
        total="250",
        amount_paid="100",
        due_date=date(2024, 7, 1),
        client=Client(id="client-1", name="Globex", email="ap@globex.example.com", contact_name="Hank"),
    )


class TestComposeInvoiceMessage:

    def test_send_mode(self, invoice, company):
        message = compose_invoice_message(invoice, company, SendMode.SEND)

        assert message.to == "ap@globex.example.com"
        assert message.subject == "Invoice #INV-1 from Acme Studio"
        assert message.body.startswith("Dear Hank,")
        assert "150.00" in message.body
        assert "2024-07-01" in message.body
        assert message.body.endswith("Best regards,\nAcme Studio")

    def test_resend_mode(self, invoice, company):
        message = compose_invoice_message(invoice, company, SendMode.RESEND)

        assert message.subject.startswith("Resent: Invoice #INV-1")

    def test_reminder_mode_mentions_balance_and_due_date(self, invoice, company):
        message = compose_invoice_message(invoice, company, SendMode.REMINDER)

        assert message.subject == "Reminder: Invoice #INV-1"
        assert "outstanding balance of 150.00" in message.body
        assert "2024-07-01" in message.body

    def test_greeting_falls_back_to_client_name(self, make_invoice, company):
        invoice = make_invoice(client=Client(id="client-2", name="Initech", email="a@initech.example.com"))

        message = compose_invoice_message(invoice, company)

        assert message.body.startswith("Dear Initech,")

    def test_balance_is_rounded_for_display(self, make_invoice, company):
        invoice = make_invoice(total="10.005")

        message = compose_invoice_message(invoice, company)

        assert "10.01" in message.body

    def test_recipient_override(self, invoice, company):
        message = compose_invoice_message(invoice, company, recipient="other@globex.example.com")

        assert message.to == "other@globex.example.com"

    def test_missing_recipient_raises(self, make_invoice, company):
        invoice = make_invoice(client=Client(id="client-3", name="No Email"))

        with pytest.raises(FieldValidationError) as exc_info:
            compose_invoice_message(invoice, company)

        assert exc_info.value.field == "recipient"
