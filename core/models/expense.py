"""Expense (business spending) domain models.

Expenses are recorded alongside invoices but never affect them: they have
no status and are not part of revenue or outstanding figures.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


def _require_merchant(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Merchant is required")
    return value


class ExpenseCreate(BaseModel):
    """Data required to record an expense."""

    merchant: str = Field(..., max_length=255)
    spent_on: date
    amount: Decimal = Field(..., ge=0)
    tax: Decimal | None = Field(None, ge=0)  # Tax included in amount, if known
    category: str = Field("", max_length=100)
    description: str | None = Field(None, max_length=1000)
    receipt_image: str | None = None  # Opaque reference (e.g. base64 data URL)

    @field_validator("merchant")
    @classmethod
    def merchant_not_blank(cls, value: str) -> str:
        return _require_merchant(value)

    @field_validator("category")
    @classmethod
    def category_stripped(cls, value: str) -> str:
        return value.strip()


class ExpenseUpdate(BaseModel):
    """Data that can be updated on an expense. All fields optional."""

    merchant: str | None = Field(None, max_length=255)
    spent_on: date | None = None
    amount: Decimal | None = Field(None, ge=0)
    tax: Decimal | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=1000)
    receipt_image: str | None = None

    @field_validator("merchant")
    @classmethod
    def merchant_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _require_merchant(value)

    @field_validator("category")
    @classmethod
    def category_stripped(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class Expense(BaseModel):
    """Full expense entity as stored."""

    id: str
    merchant: str
    spent_on: date
    amount: Decimal
    tax: Decimal | None = None
    category: str = ""
    description: str | None = None
    receipt_image: str | None = None

    model_config = {"frozen": True}
