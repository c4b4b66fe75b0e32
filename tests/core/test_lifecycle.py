"""Tests for the invoice status lifecycle."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from core import lifecycle
from core.errors import InvalidStatusTransitionError
from core.models import Client, InvoiceStatus, LineItem, PaymentMethod, TaxDefinition


class TestDeriveStatus:

    def test_partially_paid_past_due_stays_partially_paid(self, make_invoice, today):
        """Payment precedence: amount_paid > 0 is checked before the due date."""
        invoice = make_invoice(
            total="100", status=InvoiceStatus.PARTIALLY_PAID, amount_paid="10",
            issue_date=today - timedelta(days=40), due_date=today - timedelta(days=10),
        )

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.PARTIALLY_PAID

    def test_overdue_with_first_payment_becomes_partially_paid(self, make_invoice, today):
        invoice = make_invoice(
            total="100", status=InvoiceStatus.OVERDUE, amount_paid="10",
            issue_date=today - timedelta(days=40), due_date=today - timedelta(days=10),
        )

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.PARTIALLY_PAID

    def test_sent_unpaid_past_due_is_overdue(self, make_invoice, today):
        invoice = make_invoice(total="100", due_date=today - timedelta(days=1), issue_date=today - timedelta(days=30))

        assert lifecycle.refresh(invoice, today).status == InvoiceStatus.OVERDUE

    def test_draft_never_becomes_overdue(self, make_invoice, today):
        invoice = make_invoice(
            total="100", status=InvoiceStatus.DRAFT,
            issue_date=today - timedelta(days=30), due_date=today - timedelta(days=1),
        )

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.DRAFT

    def test_due_today_is_not_overdue(self, make_invoice, today):
        invoice = make_invoice(total="100", due_date=today)

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.SENT

    def test_paid_wins_over_past_due(self, make_invoice, today):
        invoice = make_invoice(
            total="100", status=InvoiceStatus.OVERDUE, amount_paid="100",
            issue_date=today - timedelta(days=30), due_date=today - timedelta(days=1),
        )

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.PAID

    def test_zero_total_draft_stays_draft(self, make_invoice, today):
        invoice = make_invoice(total="0", status=InvoiceStatus.DRAFT)

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.DRAFT

    def test_zero_total_sent_is_paid(self, make_invoice, today):
        invoice = make_invoice(total="0", status=InvoiceStatus.SENT)

        assert lifecycle.derive_status(invoice, today) == InvoiceStatus.PAID


class TestRefresh:

    def test_returns_same_object_when_unchanged(self, make_invoice, today):
        invoice = make_invoice(total="100")

        assert lifecycle.refresh(invoice, today) is invoice

    def test_returns_copy_when_status_changes(self, make_invoice, today):
        invoice = make_invoice(total="100", due_date=today - timedelta(days=1), issue_date=today - timedelta(days=5))

        refreshed = lifecycle.refresh(invoice, today)

        assert refreshed is not invoice
        assert invoice.status == InvoiceStatus.SENT
        assert refreshed.status == InvoiceStatus.OVERDUE


class TestTransitions:

    def test_draft_never_goes_overdue(self):
        assert lifecycle.can_transition(InvoiceStatus.DRAFT, InvoiceStatus.SENT)
        assert lifecycle.can_transition(InvoiceStatus.DRAFT, InvoiceStatus.PAID)
        assert not lifecycle.can_transition(InvoiceStatus.DRAFT, InvoiceStatus.OVERDUE)

    def test_nothing_returns_to_draft(self):
        for status in InvoiceStatus:
            if status != InvoiceStatus.DRAFT:
                assert not lifecycle.can_transition(status, InvoiceStatus.DRAFT)

    def test_derived_changes_stay_inside_table(self, make_invoice, today):
        """Every status refresh can produce from any starting point is an allowed move."""
        for status in InvoiceStatus:
            for paid in ("0", "40", "100"):
                for days in (-5, 5):
                    invoice = make_invoice(
                        total="100", status=status, amount_paid=paid,
                        due_date=today + timedelta(days=days),
                    )
                    derived = lifecycle.derive_status(invoice, today)
                    assert lifecycle.can_transition(status, derived), (status, paid, days)

    def test_paid_reopens_when_total_raised(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.PAID, amount_paid="100")
        line = LineItem(id="line-9", description="Extra", quantity=Decimal("1"), unit_price=Decimal("150"))

        edited = lifecycle.apply_edit(
            invoice, client=invoice.client, line_items=[line], taxes=[],
            issue_date=invoice.issue_date, due_date=invoice.due_date, notes=None, today=today,
        )

        assert edited.status == InvoiceStatus.PARTIALLY_PAID

    def test_disallowed_move_rejected(self, make_invoice, today):
        invoice = make_invoice(status=InvoiceStatus.PAID)

        with pytest.raises(InvalidStatusTransitionError):
            lifecycle._with_status(invoice, InvoiceStatus.SENT)


class TestMarkSent:

    def test_draft_becomes_sent(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.DRAFT, due_date=today + timedelta(days=30))

        assert lifecycle.mark_sent(invoice, today).status == InvoiceStatus.SENT

    def test_past_due_draft_goes_straight_to_overdue(self, make_invoice, today):
        invoice = make_invoice(
            total="100", status=InvoiceStatus.DRAFT,
            issue_date=today - timedelta(days=40), due_date=today - timedelta(days=10),
        )

        assert lifecycle.mark_sent(invoice, today).status == InvoiceStatus.OVERDUE

    def test_non_draft_is_left_alone(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.PARTIALLY_PAID, amount_paid="10")

        assert lifecycle.mark_sent(invoice, today) is invoice


class TestMarkPaid:

    def test_appends_settlement_record_for_remaining_balance(self, make_invoice, today):
        invoice = make_invoice(total="250", status=InvoiceStatus.PARTIALLY_PAID, amount_paid="100")

        paid = lifecycle.mark_paid(invoice, today)

        assert paid.status == InvoiceStatus.PAID
        assert paid.amount_paid == Decimal("250")
        settlement = paid.payment_records[-1]
        assert settlement.amount == Decimal("150")
        assert settlement.method == PaymentMethod.OTHER
        assert settlement.note == lifecycle.MARK_PAID_NOTE
        assert sum(r.amount for r in paid.payment_records) == paid.amount_paid

    def test_already_paid_is_unchanged(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.PAID, amount_paid="100")

        assert lifecycle.mark_paid(invoice, today) is invoice

    def test_zero_total_draft_gets_no_record(self, make_invoice, today):
        invoice = make_invoice(total="0", status=InvoiceStatus.DRAFT)

        paid = lifecycle.mark_paid(invoice, today)

        assert paid.status == InvoiceStatus.PAID
        assert paid.payment_records == []


class TestApplyEdit:

    def _edit(self, invoice, today, unit_price="300", **overrides):
        kwargs = dict(
            client=invoice.client,
            line_items=[LineItem(id="line-x", description="New", quantity=Decimal("1"), unit_price=Decimal(unit_price))],
            taxes=[],
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            notes="edited",
            today=today,
        )
        kwargs.update(overrides)
        return lifecycle.apply_edit(invoice, **kwargs)

    def test_recomputes_totals_and_keeps_payments(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.PARTIALLY_PAID, amount_paid="40")

        edited = self._edit(invoice, today, taxes=[TaxDefinition(name="VAT", rate_percent=Decimal("10"))])

        assert edited.subtotal == Decimal("300")
        assert edited.tax_total == Decimal("30")
        assert edited.total == Decimal("330")
        assert edited.amount_paid == Decimal("40")
        assert edited.payment_records == invoice.payment_records
        assert edited.status == InvoiceStatus.PARTIALLY_PAID
        assert edited.notes == "edited"

    def test_reducing_total_to_amount_paid_settles(self, make_invoice, today):
        invoice = make_invoice(total="100", status=InvoiceStatus.PARTIALLY_PAID, amount_paid="40")

        edited = self._edit(invoice, today, unit_price="40")

        assert edited.status == InvoiceStatus.PAID

    def test_edit_below_amount_paid_logs_warning(self, make_invoice, today, caplog):
        invoice = make_invoice(total="100", status=InvoiceStatus.PARTIALLY_PAID, amount_paid="40")

        with caplog.at_level("WARNING", logger="core.lifecycle"):
            edited = self._edit(invoice, today, unit_price="30")

        assert edited.status == InvoiceStatus.PAID
        assert "overpaid" in caplog.text

    def test_client_snapshot_is_replaced(self, make_invoice, today):
        invoice = make_invoice(total="100")
        other = Client(id="client-9", name="Initech")

        edited = self._edit(invoice, today, client=other)

        assert edited.client.name == "Initech"

    def test_due_before_issue_is_allowed_with_warning(self, make_invoice, today, caplog):
        invoice = make_invoice(total="100")

        with caplog.at_level("WARNING", logger="core.lifecycle"):
            edited = self._edit(invoice, today, issue_date=date(2024, 6, 10), due_date=date(2024, 6, 1))

        assert edited.due_date == date(2024, 6, 1)
        assert "before it is issued" in caplog.text
