"""
Export content for invoices and full backups.

Produces text only; how it reaches the user (HTTP download, file) is up to
the caller.
"""

import csv
import io
import json
from typing import Iterable

from core.models import Invoice, LedgerSnapshot

CSV_HEADERS = [
    "Invoice Number", "Client", "Issue Date", "Due Date", "Total", "Amount Paid", "Status",
]


def invoice_row(invoice: Invoice) -> list[str]:
    return [
        invoice.invoice_number,
        invoice.client.name,
        invoice.issue_date.isoformat(),
        invoice.due_date.isoformat(),
        str(invoice.total),
        str(invoice.amount_paid),
        invoice.status.value,
    ]


def invoices_to_csv(invoices: Iterable[Invoice]) -> str:
    """
    Invoice list as CSV.

    The header row is plain; every data cell is quoted with embedded quotes
    doubled. Amounts are written at full precision.
    """
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(invoice_row(invoice) for invoice in invoices)
    # csv.writer terminates every row; the format has no trailing newline
    return buffer.getvalue().rstrip("\n")


def snapshot_to_json(snapshot: LedgerSnapshot) -> str:
    """Full backup as indented JSON. Decimals are written as strings."""
    return json.dumps(snapshot.model_dump(mode="json"), indent=2)
