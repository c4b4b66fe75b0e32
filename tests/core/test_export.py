"""Tests for CSV and JSON export content."""

import json
from datetime import date

from core.export import CSV_HEADERS, invoices_to_csv, snapshot_to_json
from core.models import Client, InvoiceStatus, LedgerSnapshot


class TestInvoicesToCsv:

    def test_header_then_one_quoted_row_per_invoice(self, make_invoice):
        invoices = [
            make_invoice(total="250", issue_date=date(2024, 6, 1), due_date=date(2024, 7, 1)),
            make_invoice(total="100", status=InvoiceStatus.PAID, amount_paid="100"),
        ]

        lines = invoices_to_csv(invoices).split("\n")

        assert lines[0] == "Invoice Number,Client,Issue Date,Due Date,Total,Amount Paid,Status"
        assert lines[1] == '"INV-1","Globex","2024-06-01","2024-07-01","250","0","SENT"'
        assert lines[2].endswith('"100","100","PAID"')
        assert len(lines) == 3

    def test_rows_are_separated_by_single_newlines(self, make_invoice):
        invoices = [make_invoice(total=str(n)) for n in (10, 20, 30)]

        text = invoices_to_csv(invoices)

        assert "\n\n" not in text
        assert not text.endswith("\n")
        assert len(text.split("\n")) == 4

    def test_embedded_quotes_are_doubled(self, make_invoice):
        invoice = make_invoice(client=Client(id="client-1", name='The "Best", Inc'))

        row = invoices_to_csv([invoice]).split("\n")[1]

        assert '"The ""Best"", Inc"' in row

    def test_empty_list_is_header_only(self):
        assert invoices_to_csv([]) == ",".join(CSV_HEADERS)


class TestSnapshotToJson:

    def test_full_snapshot_is_indented_json(self, make_invoice):
        snapshot = LedgerSnapshot(version=3, invoices=[make_invoice(total="12.5")])

        text = snapshot_to_json(snapshot)
        data = json.loads(text)

        assert text.startswith("{\n  ")
        assert data["version"] == 3
        assert data["invoices"][0]["total"] == "12.5"
        assert data["profile"] is None
