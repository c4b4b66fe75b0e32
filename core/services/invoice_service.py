"""
Invoice service for billing and payments.

Invoices are created from a draft (client + line items), numbered from the
company profile's counter, and then move through the status lifecycle as
they are sent and paid. Every write is one LedgerState transaction; every
read returns invoices with their status re-derived for today.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Protocol

from core import ledger, lifecycle
from core.errors import (
    ClientRequiredError,
    FieldValidationError,
    InvalidStatusTransitionError,
    ProfileMissingError,
)
from core.event_bus import EventBus
from core.events import (
    InvoiceCreated,
    InvoiceOverdue,
    InvoicePaid,
    InvoiceReminderSent,
    InvoicesDeleted,
    InvoiceSent,
    InvoiceUpdated,
    LedgerEvent,
    PaymentRecorded,
)
from core.messaging import InvoiceMessage, SendMode, compose_invoice_message
from core.models import (
    Client,
    Invoice,
    InvoiceDraft,
    InvoiceEdit,
    InvoiceStatus,
    LedgerSnapshot,
    LineItem,
    LineItemCreate,
    PaymentCreate,
)
from core.money import compute_totals
from core.numbering import issue_number, preview_number
from core.state import LedgerState
from utils.ids import generate_id
from utils.timezone import now_utc, today_utc

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send_email(self, to: str, subject: str, body: str, reply_to: str | None = None) -> None:
        ...


@dataclass(frozen=True)
class SendResult:
    """Outcome of InvoiceService.send()."""
    invoice: Invoice
    message: InvoiceMessage
    delivered: bool  # False when no mailer is configured


class InvoiceService:
    """Service for invoice operations."""

    def __init__(
        self,
        state: LedgerState,
        event_bus: EventBus,
        mailer: Mailer | None = None,
        today: Callable[[], date] = today_utc,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self.state = state
        self.event_bus = event_bus
        self.mailer = mailer
        self.today = today
        self.id_factory = id_factory

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _line_items(self, rows: Iterable[LineItemCreate]) -> list[LineItem]:
        """Drop rows without a description or quantity; at least one must remain."""
        items = [
            LineItem(
                id=self.id_factory("line"),
                description=row.description.strip(),
                quantity=row.quantity,
                unit_price=row.unit_price,
            )
            for row in rows
            if row.is_billable
        ]
        if not items:
            raise FieldValidationError(
                "line_items",
                "At least one line item with a description and quantity is required",
            )
        return items

    @staticmethod
    def _client(snapshot: LedgerSnapshot, client_id: str | None, current: Client | None = None) -> Client:
        """
        Resolve the client snapshot to embed in an invoice.

        An invoice whose client was since removed from the directory keeps
        its embedded copy as long as the edit doesn't change the client.
        """
        if not client_id:
            raise ClientRequiredError()
        client = snapshot.find_client(client_id)
        if client is not None:
            return client
        if current is not None and current.id == client_id:
            return current
        raise ClientRequiredError(f"Client {client_id} does not exist")

    def _refreshed(self, invoices: Iterable[Invoice]) -> list[Invoice]:
        today = self.today()
        return [lifecycle.refresh(inv, today) for inv in invoices]

    def _modify(
        self,
        invoice_id: str,
        change: Callable[[LedgerSnapshot, Invoice], Invoice],
    ) -> tuple[Invoice, Invoice]:
        """
        Apply change to one invoice inside a transaction.

        change receives the status-refreshed invoice and returns its new
        state (or the same object for no change).

        Returns:
            (invoice before the change, invoice after the change)

        Raises:
            ValueError: If invoice not found
        """
        today = self.today()

        def mutate(snapshot: LedgerSnapshot):
            stored = snapshot.find_invoice(invoice_id)
            if stored is None:
                raise ValueError(f"Invoice {invoice_id} not found")

            before = lifecycle.refresh(stored, today)
            after = change(snapshot, before)
            if after is stored:
                return snapshot, (before, after)

            after = after.model_copy(update={"updated_at": now_utc()})
            invoices = [after if inv.id == invoice_id else inv for inv in snapshot.invoices]
            return snapshot.model_copy(update={"invoices": invoices}), (before, after)

        return self.state.transact(mutate)

    @staticmethod
    def _transition_events(before: Invoice, after: Invoice) -> list[LedgerEvent]:
        if after.status == before.status:
            return []
        if after.status == InvoiceStatus.PAID:
            return [InvoicePaid.create(invoice=after)]
        if after.status == InvoiceStatus.OVERDUE:
            return [InvoiceOverdue.create(invoice=after)]
        return []

    # -------------------------------------------------------------------------
    # Create / read
    # -------------------------------------------------------------------------

    def next_number(self) -> str:
        """
        Number the next invoice will receive. Does not consume it.

        Raises:
            ProfileMissingError: If no profile is configured
        """
        return preview_number(self.state.snapshot.profile)

    def create(self, data: InvoiceDraft) -> Invoice:
        """
        Create a new invoice in DRAFT status.

        The invoice number is issued and the profile counter advanced in the
        same transaction that stores the invoice.

        Args:
            data: Draft with client, line items, taxes and dates

        Returns:
            Created invoice

        Raises:
            ProfileMissingError: If no company profile is set up
            ClientRequiredError: If no client (or an unknown client) is given
            FieldValidationError: If no billable line item remains
        """
        today = self.today()
        issue_date = data.issue_date or today
        due_date = data.due_date or issue_date

        def mutate(snapshot: LedgerSnapshot):
            if snapshot.profile is None:
                raise ProfileMissingError()
            client = self._client(snapshot, data.client_id)
            line_items = self._line_items(data.line_items)
            totals = compute_totals(line_items, data.taxes)

            number, profile = issue_number(snapshot.profile)
            now = now_utc()
            invoice = Invoice(
                id=self.id_factory("inv"),
                invoice_number=number,
                client=client,
                line_items=line_items,
                taxes=list(data.taxes),
                status=InvoiceStatus.DRAFT,
                issue_date=issue_date,
                due_date=due_date,
                subtotal=totals.subtotal,
                tax_total=totals.tax_total,
                total=totals.total,
                notes=data.notes,
                created_at=now,
                updated_at=now,
            )
            updated = snapshot.model_copy(update={
                "profile": profile,
                "invoices": [invoice, *snapshot.invoices],
            })
            return updated, invoice

        invoice = self.state.transact(mutate)

        lifecycle.warn_on_dates(invoice.invoice_number, invoice.issue_date, invoice.due_date)
        logger.info(f"Invoice {invoice.invoice_number} created for {invoice.client.name} ({invoice.total})")
        self.event_bus.publish(InvoiceCreated.create(invoice=invoice))
        return invoice

    def get_by_id(self, invoice_id: str) -> Invoice | None:
        """
        Get invoice by id.

        Returns:
            Invoice with status re-derived for today, None if not found
        """
        invoice = self.state.snapshot.find_invoice(invoice_id)
        if invoice is None:
            return None
        return lifecycle.refresh(invoice, self.today())

    def list_all(self, status: InvoiceStatus | None = None, search: str | None = None) -> list[Invoice]:
        """
        List invoices, newest first.

        Args:
            status: Only invoices with this (re-derived) status
            search: Case-insensitive match on invoice number or client name
        """
        invoices = self._refreshed(self.state.snapshot.invoices)
        if status is not None:
            invoices = [inv for inv in invoices if inv.status == status]
        if search:
            needle = search.strip().lower()
            invoices = [
                inv for inv in invoices
                if needle in inv.invoice_number.lower() or needle in inv.client.name.lower()
            ]
        return invoices

    # -------------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------------

    def edit(self, invoice_id: str, data: InvoiceEdit) -> Invoice:
        """
        Replace an invoice's client, line items, taxes, dates and notes.

        Totals are recomputed; payments are kept; status is re-derived.

        Raises:
            ValueError: If invoice not found
            ClientRequiredError: If no client (or an unknown client) is given
            FieldValidationError: If no billable line item remains
        """
        today = self.today()

        def change(snapshot: LedgerSnapshot, invoice: Invoice) -> Invoice:
            client = self._client(snapshot, data.client_id, current=invoice.client)
            return lifecycle.apply_edit(
                invoice,
                client=client,
                line_items=self._line_items(data.line_items),
                taxes=data.taxes,
                issue_date=data.issue_date or invoice.issue_date,
                due_date=data.due_date or invoice.due_date,
                notes=data.notes,
                today=today,
            )

        before, after = self._modify(invoice_id, change)

        self.event_bus.publish_all([
            InvoiceUpdated.create(invoice=after),
            *self._transition_events(before, after),
        ])
        return after

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def mark_sent(self, invoice_id: str, recipient: str | None = None) -> Invoice:
        """
        Mark a DRAFT invoice as SENT.

        An invoice already past due goes straight to OVERDUE. On an invoice
        that already left DRAFT this changes nothing.

        Raises:
            ValueError: If invoice not found
        """
        today = self.today()
        before, after = self._modify(invoice_id, lambda _, inv: lifecycle.mark_sent(inv, today))

        if before.status == InvoiceStatus.DRAFT:
            logger.info(f"Invoice {after.invoice_number} marked as sent")
            self.event_bus.publish_all([
                InvoiceSent.create(invoice=after, recipient=recipient),
                *self._transition_events(before, after),
            ])
        return after

    def send(self, invoice_id: str, mode: SendMode = SendMode.SEND, recipient: str | None = None) -> SendResult:
        """
        Compose and deliver the invoice email.

        In send mode the invoice is marked SENT once delivery succeeds.
        Resend and reminder leave the status alone.

        Args:
            invoice_id: Invoice id
            mode: send, resend or reminder
            recipient: Address override; defaults to the client's email

        Returns:
            SendResult with the invoice and the composed message

        Raises:
            ValueError: If invoice not found
            ProfileMissingError: If no company profile is set up
            InvalidStatusTransitionError: Resend/reminder on a draft, or
                reminder on a paid invoice
            FieldValidationError: If there is no recipient address
            EmailGatewayError: If delivery fails (status is not changed)
        """
        invoice = self.get_by_id(invoice_id)
        if invoice is None:
            raise ValueError(f"Invoice {invoice_id} not found")

        profile = self.state.snapshot.profile
        if profile is None:
            raise ProfileMissingError()

        if mode != SendMode.SEND and invoice.status == InvoiceStatus.DRAFT:
            raise InvalidStatusTransitionError(
                f"Invoice {invoice.invoice_number} has not been sent yet"
            )
        if mode == SendMode.REMINDER and invoice.status == InvoiceStatus.PAID:
            raise InvalidStatusTransitionError(
                f"Invoice {invoice.invoice_number} is already paid"
            )

        message = compose_invoice_message(invoice, profile, mode, recipient)

        delivered = False
        if self.mailer is not None:
            self.mailer.send_email(
                to=message.to,
                subject=message.subject,
                body=message.body,
                reply_to=profile.email,
            )
            delivered = True

        if mode == SendMode.SEND:
            invoice = self.mark_sent(invoice_id, recipient=message.to)
        elif mode == SendMode.RESEND:
            self.event_bus.publish(InvoiceSent.create(invoice=invoice, recipient=message.to))
        else:
            logger.info(f"Reminder for invoice {invoice.invoice_number} sent to {message.to}")
            self.event_bus.publish(InvoiceReminderSent.create(invoice=invoice, recipient=message.to))

        return SendResult(invoice=invoice, message=message, delivered=delivered)

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def record_payment(self, invoice_id: str, payment: PaymentCreate) -> Invoice:
        """
        Record a payment on an invoice.

        Args:
            invoice_id: Invoice id
            payment: Amount, date (defaults to today), method and note

        Returns:
            Updated invoice (status may become PARTIALLY_PAID or PAID)

        Raises:
            ValueError: If invoice not found
            InvalidPaymentAmountError: If amount <= 0 or above the balance due
        """
        today = self.today()
        before, after = self._modify(
            invoice_id, lambda _, inv: ledger.record_payment(inv, payment, today)
        )

        self.event_bus.publish_all([
            PaymentRecorded.create(invoice=after, payment=after.payment_records[-1]),
            *self._transition_events(before, after),
        ])
        return after

    def mark_paid(self, invoice_ids: list[str]) -> list[Invoice]:
        """
        Settle invoices in full. Already-paid invoices are skipped.

        All invoices are settled in one transaction; an unknown id aborts
        the whole batch.

        Returns:
            Invoices that were settled by this call

        Raises:
            ValueError: If any invoice is not found
        """
        today = self.today()

        def mutate(snapshot: LedgerSnapshot):
            by_id = {inv.id: inv for inv in snapshot.invoices}
            missing = [invoice_id for invoice_id in invoice_ids if invoice_id not in by_id]
            if missing:
                raise ValueError(f"Invoice {missing[0]} not found")

            now = now_utc()
            settled: dict[str, Invoice] = {}
            for invoice_id in invoice_ids:
                current = lifecycle.refresh(by_id[invoice_id], today)
                if current.status == InvoiceStatus.PAID or invoice_id in settled:
                    continue
                paid = lifecycle.mark_paid(current, today)
                settled[invoice_id] = paid.model_copy(update={"updated_at": now})

            if not settled:
                return snapshot, []
            invoices = [settled.get(inv.id, inv) for inv in snapshot.invoices]
            return snapshot.model_copy(update={"invoices": invoices}), list(settled.values())

        settled = self.state.transact(mutate)

        for invoice in settled:
            logger.info(f"Invoice {invoice.invoice_number} marked as paid")
        self.event_bus.publish_all([InvoicePaid.create(invoice=inv) for inv in settled])
        return settled

    # -------------------------------------------------------------------------
    # Delete / maintenance
    # -------------------------------------------------------------------------

    def delete(self, invoice_ids: list[str]) -> int:
        """
        Delete invoices. Unknown ids are ignored.

        Invoice numbers of deleted invoices are not reissued.

        Returns:
            Number of invoices deleted
        """
        wanted = set(invoice_ids)

        def mutate(snapshot: LedgerSnapshot):
            removed = [inv.id for inv in snapshot.invoices if inv.id in wanted]
            if not removed:
                return snapshot, []
            invoices = [inv for inv in snapshot.invoices if inv.id not in wanted]
            return snapshot.model_copy(update={"invoices": invoices}), removed

        removed = self.state.transact(mutate)
        if removed:
            logger.info(f"Deleted {len(removed)} invoice(s)")
            self.event_bus.publish(InvoicesDeleted.create(invoice_ids=removed))
        return len(removed)

    def refresh_statuses(self) -> list[Invoice]:
        """
        Persist re-derived statuses for the whole collection.

        Returns:
            Invoices whose status changed
        """
        today = self.today()

        def mutate(snapshot: LedgerSnapshot):
            changes: list[tuple[Invoice, Invoice]] = []
            invoices = []
            for stored in snapshot.invoices:
                refreshed = lifecycle.refresh(stored, today)
                if refreshed is not stored:
                    changes.append((stored, refreshed))
                invoices.append(refreshed)
            if not changes:
                return snapshot, []
            return snapshot.model_copy(update={"invoices": invoices}), changes

        changes = self.state.transact(mutate)

        events: list[LedgerEvent] = []
        for before, after in changes:
            events.extend(self._transition_events(before, after))
        self.event_bus.publish_all(events)
        return [after for _, after in changes]
