"""Payment domain models."""

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    """How a payment was made."""

    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"
    CASH = "CASH"
    OTHER = "OTHER"


class PaymentCreate(BaseModel):
    """
    A payment as entered.

    The amount is checked by the ledger against the balance due, which
    rejects it with the balance attached.
    """

    amount: Decimal
    date: dt.date | None = None  # Defaults to today when recorded
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    note: str | None = Field(None, max_length=1000)


class PaymentRecord(BaseModel):
    """An accepted payment. Immutable; corrections are new records."""

    amount: Decimal = Field(..., gt=0)
    date: dt.date
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    note: str | None = None

    model_config = {"frozen": True}
