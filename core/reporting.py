"""
Read-only rollups over an invoice collection.

Everything here is a pure function of (invoices, date range, today). Nothing
is cached: reports are recomputed on demand from the current collection.
Callers are expected to pass status-refreshed invoices.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from core.models import Invoice, InvoiceStatus
from core.money import ZERO
from utils.timezone import add_months

REVENUE_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID})
OUTSTANDING_STATUSES = frozenset({
    InvoiceStatus.SENT, InvoiceStatus.OVERDUE, InvoiceStatus.PARTIALLY_PAID,
})


class DateRange(str, Enum):
    """Report window, keyed off issue_date."""

    ALL = "all"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    LAST_365_DAYS = "365d"

    def start_date(self, today: date) -> date | None:
        """First issue date included in the window, None for ALL."""
        if self == DateRange.LAST_30_DAYS:
            return today - timedelta(days=30)
        if self == DateRange.LAST_90_DAYS:
            return today - timedelta(days=90)
        if self == DateRange.LAST_365_DAYS:
            # One calendar year back, not 365 days
            return add_months(today, -12)
        return None


@dataclass(frozen=True)
class ClientRevenue:
    client_id: str
    client_name: str
    invoice_count: int
    total_billed: Decimal


@dataclass(frozen=True)
class ReportSummary:
    date_range: DateRange
    invoice_count: int
    total_revenue: Decimal
    total_collected: Decimal
    outstanding: Decimal
    revenue_by_client: list[ClientRevenue] = field(default_factory=list)


@dataclass(frozen=True)
class MonthTotal:
    month: str  # YYYY-MM
    amount: Decimal


@dataclass(frozen=True)
class Dashboard:
    outstanding: Decimal
    overdue: Decimal
    collected: Decimal
    monthly_invoiced: list[MonthTotal]
    recent_invoices: list[Invoice]


def filter_by_range(invoices: Iterable[Invoice], date_range: DateRange, today: date) -> list[Invoice]:
    start = date_range.start_date(today)
    if start is None:
        return list(invoices)
    return [inv for inv in invoices if inv.issue_date >= start]


def total_revenue(invoices: Iterable[Invoice]) -> Decimal:
    """Sum of totals for PAID and PARTIALLY_PAID invoices."""
    return sum((inv.total for inv in invoices if inv.status in REVENUE_STATUSES), ZERO)


def total_collected(invoices: Iterable[Invoice]) -> Decimal:
    """Sum of amount_paid regardless of status."""
    return sum((inv.amount_paid for inv in invoices), ZERO)


def outstanding(invoices: Iterable[Invoice]) -> Decimal:
    """Sum of balance due for SENT, OVERDUE and PARTIALLY_PAID invoices."""
    return sum(
        (inv.total - inv.amount_paid for inv in invoices if inv.status in OUTSTANDING_STATUSES),
        ZERO,
    )


def overdue_amount(invoices: Iterable[Invoice]) -> Decimal:
    return sum(
        (inv.total - inv.amount_paid for inv in invoices if inv.status == InvoiceStatus.OVERDUE),
        ZERO,
    )


def revenue_by_client(invoices: Iterable[Invoice]) -> list[ClientRevenue]:
    """
    Group invoices by client id.

    The display name is taken from the most recently issued invoice's client
    snapshot. Sorted by total billed, highest first; ties keep first-seen order.
    """
    counts: dict[str, int] = {}
    totals: dict[str, Decimal] = {}
    names: dict[str, tuple[date, str]] = {}

    for inv in invoices:
        client_id = inv.client.id
        counts[client_id] = counts.get(client_id, 0) + 1
        totals[client_id] = totals.get(client_id, ZERO) + inv.total
        seen = names.get(client_id)
        if seen is None or inv.issue_date >= seen[0]:
            names[client_id] = (inv.issue_date, inv.client.name)

    rows = [
        ClientRevenue(
            client_id=client_id,
            client_name=names[client_id][1],
            invoice_count=counts[client_id],
            total_billed=totals[client_id],
        )
        for client_id in counts
    ]
    return sorted(rows, key=lambda row: row.total_billed, reverse=True)


def build_report(invoices: Sequence[Invoice], date_range: DateRange, today: date) -> ReportSummary:
    selected = filter_by_range(invoices, date_range, today)
    return ReportSummary(
        date_range=date_range,
        invoice_count=len(selected),
        total_revenue=total_revenue(selected),
        total_collected=total_collected(selected),
        outstanding=outstanding(selected),
        revenue_by_client=revenue_by_client(selected),
    )


def monthly_invoiced(invoices: Iterable[Invoice], today: date, months: int = 6) -> list[MonthTotal]:
    """
    Invoiced amount per calendar month, oldest first, ending with today's month.

    Drafts are not counted as invoiced.
    """
    keys = [add_months(today, -offset).strftime("%Y-%m") for offset in range(months - 1, -1, -1)]
    sums = {key: ZERO for key in keys}
    for inv in invoices:
        if inv.status == InvoiceStatus.DRAFT:
            continue
        key = inv.issue_date.strftime("%Y-%m")
        if key in sums:
            sums[key] += inv.total
    return [MonthTotal(month=key, amount=sums[key]) for key in keys]


def recent_invoices(invoices: Iterable[Invoice], limit: int = 5) -> list[Invoice]:
    """Newest issue date first."""
    return sorted(invoices, key=lambda inv: inv.issue_date, reverse=True)[:limit]


def build_dashboard(invoices: Sequence[Invoice], today: date) -> Dashboard:
    return Dashboard(
        outstanding=outstanding(invoices),
        overdue=overdue_amount(invoices),
        collected=total_collected(invoices),
        monthly_invoiced=monthly_invoiced(invoices, today),
        recent_invoices=recent_invoices(invoices),
    )
