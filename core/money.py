"""
Invoice total calculation.

Pure functions over line items and tax definitions. Everything is Decimal at
full precision; comparisons that decide acceptance or status allow an
EPSILON of 0.001 so values entered as floats upstream still settle cleanly.
Rounding to cents happens only for display.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from core.models import LineItem, TaxDefinition

EPSILON = Decimal("0.001")
ZERO = Decimal("0")
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class TaxLine:
    """A tax definition with its computed amount."""
    name: str
    rate_percent: Decimal
    amount: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """Result of compute_totals()."""
    subtotal: Decimal
    taxes: tuple[TaxLine, ...]
    tax_total: Decimal
    total: Decimal


def line_total(item: LineItem) -> Decimal:
    return item.quantity * item.unit_price


def subtotal(items: Iterable[LineItem]) -> Decimal:
    """Sum of quantity x unit_price. Empty input gives 0."""
    return sum((line_total(item) for item in items), ZERO)


def tax_lines(base: Decimal, taxes: Sequence[TaxDefinition]) -> tuple[TaxLine, ...]:
    """Each tax is computed on the subtotal, never compounded."""
    return tuple(
        TaxLine(
            name=tax.name,
            rate_percent=tax.rate_percent,
            amount=base * tax.rate_percent / 100,
        )
        for tax in taxes
    )


def compute_totals(
    items: Sequence[LineItem],
    taxes: Sequence[TaxDefinition] = (),
) -> InvoiceTotals:
    """
    Compute subtotal, per-tax amounts, and grand total.

    Args:
        items: Line items in display order
        taxes: Optional tax definitions (rate in percent)

    Returns:
        InvoiceTotals with unrounded amounts
    """
    base = subtotal(items)
    lines = tax_lines(base, taxes)
    tax_total = sum((line.amount for line in lines), ZERO)
    return InvoiceTotals(
        subtotal=base,
        taxes=lines,
        tax_total=tax_total,
        total=base + tax_total,
    )


def round_display(amount: Decimal) -> Decimal:
    """Round to cents, half-up, for display and export only."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, symbol: str = "$") -> str:
    """
    Human-readable amount, e.g. format_money(Decimal("-1234.5")) -> "-$1,234.50".
    """
    rounded = round_display(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def amounts_equal(a: Decimal, b: Decimal) -> bool:
    return abs(a - b) <= EPSILON


def exceeds(amount: Decimal, limit: Decimal) -> bool:
    """True when amount is above limit by more than EPSILON."""
    return amount > limit + EPSILON
