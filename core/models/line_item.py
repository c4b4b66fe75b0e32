"""Line item and tax models.

Amounts are Decimal at full precision; rounding happens only for display.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class LineItemCreate(BaseModel):
    """A line item as entered, before it is given an id."""

    description: str = Field("", max_length=500)
    quantity: Decimal = Field(Decimal("1"), ge=0)
    unit_price: Decimal = Field(Decimal("0"), ge=0)

    @property
    def is_billable(self) -> bool:
        """Rows without a description or with zero quantity are dropped on save."""
        return bool(self.description.strip()) and self.quantity > 0


class LineItem(BaseModel):
    """Full line item as stored on an invoice."""

    id: str
    description: str
    quantity: Decimal = Field(..., ge=0)
    unit_price: Decimal = Field(..., ge=0)

    model_config = {"frozen": True}

    @property
    def line_total(self) -> Decimal:
        """quantity x unit_price, unrounded."""
        return self.quantity * self.unit_price


class TaxDefinition(BaseModel):
    """A named tax applied to the invoice subtotal."""

    name: str = Field(..., min_length=1, max_length=100)
    rate_percent: Decimal = Field(..., ge=0)  # 8.25 = 8.25%

    model_config = {"frozen": True}
