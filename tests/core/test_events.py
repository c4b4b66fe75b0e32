"""Tests for ledger domain events."""

import dataclasses
from datetime import datetime

import pytest

from core.events import (
    InvoiceCreated,
    InvoicePaid,
    InvoicesDeleted,
    LedgerEvent,
    PaymentRecorded,
    PersistenceFailed,
    ProfileSaved,
)


class TestEventBase:

    def test_events_get_unique_ids_and_timestamps(self, make_invoice):
        invoice = make_invoice()
        a = InvoiceCreated.create(invoice=invoice)
        b = InvoiceCreated.create(invoice=invoice)

        assert a.event_id != b.event_id
        assert isinstance(a.occurred_at, datetime)
        assert a.occurred_at.tzinfo is not None

    def test_events_are_immutable(self, make_invoice):
        event = InvoicePaid.create(invoice=make_invoice())

        with pytest.raises(dataclasses.FrozenInstanceError):
            event.invoice = None

    def test_all_events_share_base(self, make_invoice):
        invoice = make_invoice()
        events = [
            InvoiceCreated.create(invoice=invoice),
            PaymentRecorded.create(invoice=invoice, payment=None),
            InvoicesDeleted.create(invoice_ids=["inv-1"]),
            PersistenceFailed.create(version=3, error="disk full"),
        ]

        assert all(isinstance(e, LedgerEvent) for e in events)


class TestEventPayloads:

    def test_profile_saved_defaults_to_update(self):
        assert ProfileSaved.create(profile=None).created is False
        assert ProfileSaved.create(profile=None, created=True).created is True

    def test_invoices_deleted_stores_ids_as_tuple(self):
        event = InvoicesDeleted.create(invoice_ids=["inv-1", "inv-2"])

        assert event.invoice_ids == ("inv-1", "inv-2")

    def test_persistence_failed_carries_version_and_error(self):
        event = PersistenceFailed.create(version=7, error="boom")

        assert event.version == 7
        assert event.error == "boom"
