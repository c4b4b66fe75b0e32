"""Tests for the payment ledger."""

from datetime import date
from decimal import Decimal

import pytest

from core import ledger
from core.errors import InvalidPaymentAmountError
from core.models import InvoiceStatus, PaymentCreate, PaymentMethod
from core.money import EPSILON


def _pay(amount, **kwargs) -> PaymentCreate:
    return PaymentCreate(amount=Decimal(amount), **kwargs)


class TestRecordPayment:

    def test_full_payment_marks_paid(self, make_invoice, today):
        """Payment of 250 on a 250 invoice: PAID, balance 0."""
        invoice = make_invoice(total="250")

        paid = ledger.record_payment(invoice, _pay("250"), today)

        assert paid.status == InvoiceStatus.PAID
        assert paid.amount_paid == Decimal("250")
        assert paid.balance_due == Decimal("0")

    def test_partial_then_remaining_payment(self, make_invoice, today):
        """100 then 150 on a 250 invoice: PARTIALLY_PAID then PAID."""
        invoice = make_invoice(total="250")

        partial = ledger.record_payment(invoice, _pay("100"), today)
        assert partial.status == InvoiceStatus.PARTIALLY_PAID
        assert partial.balance_due == Decimal("150")

        paid = ledger.record_payment(partial, _pay("150"), today)
        assert paid.status == InvoiceStatus.PAID
        assert paid.balance_due == Decimal("0")

    def test_amount_paid_always_equals_sum_of_records(self, make_invoice, today):
        invoice = make_invoice(total="100")
        for amount in ["10", "20.50", "0.25", "69.25"]:
            invoice = ledger.record_payment(invoice, _pay(amount), today)
            assert invoice.amount_paid == ledger.ledger_total(invoice)
            assert invoice.amount_paid <= invoice.total + EPSILON

        assert invoice.status == InvoiceStatus.PAID

    def test_records_are_appended_in_order(self, make_invoice, today):
        invoice = make_invoice(total="300")
        invoice = ledger.record_payment(invoice, _pay("100", method=PaymentMethod.CASH), today)
        invoice = ledger.record_payment(invoice, _pay("50", note="second"), today)

        assert [r.amount for r in invoice.payment_records] == [Decimal("100"), Decimal("50")]
        assert invoice.payment_records[0].method == PaymentMethod.CASH
        assert invoice.payment_records[1].note == "second"

    def test_date_defaults_to_today(self, make_invoice, today):
        invoice = ledger.record_payment(make_invoice(total="100"), _pay("10"), today)
        assert invoice.payment_records[0].date == today

        dated = ledger.record_payment(make_invoice(total="100"), _pay("10", date=date(2024, 1, 2)), today)
        assert dated.payment_records[0].date == date(2024, 1, 2)

    def test_overpayment_within_epsilon_is_accepted(self, make_invoice, today):
        invoice = make_invoice(total="100")

        paid = ledger.record_payment(invoice, _pay("100.0005"), today)

        assert paid.status == InvoiceStatus.PAID

    def test_input_invoice_is_unchanged(self, make_invoice, today):
        invoice = make_invoice(total="100")

        ledger.record_payment(invoice, _pay("40"), today)

        assert invoice.amount_paid == Decimal("0")
        assert invoice.payment_records == []


class TestRejectedPayments:

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_zero_or_negative_is_rejected(self, make_invoice, today, amount):
        invoice = make_invoice(total="250")

        with pytest.raises(InvalidPaymentAmountError) as exc_info:
            ledger.record_payment(invoice, _pay(amount), today)

        assert exc_info.value.balance_due == Decimal("250")

    def test_more_than_balance_is_rejected_with_balance(self, make_invoice, today):
        invoice = ledger.record_payment(make_invoice(total="250"), _pay("100"), today)

        with pytest.raises(InvalidPaymentAmountError) as exc_info:
            ledger.record_payment(invoice, _pay("150.01"), today)

        assert exc_info.value.balance_due == Decimal("150")
        assert "150.00" in str(exc_info.value)

    def test_payment_on_paid_invoice_is_rejected(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.PAID, amount_paid="100")

        with pytest.raises(InvalidPaymentAmountError):
            ledger.record_payment(invoice, _pay("1"), today)
