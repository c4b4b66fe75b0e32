"""Catalog item domain models.

Catalog items are templates only: picking one copies its description and
price into a new line item, after which the two are unrelated.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class ItemCreate(BaseModel):
    """Data required to create a catalog item."""

    name: str = Field(..., max_length=255)
    description: str = Field("", max_length=1000)
    unit_price: Decimal = Field(Decimal("0"), ge=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Item name is required")
        return value


class ItemUpdate(BaseModel):
    """Data that can be updated on an item. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    unit_price: Decimal | None = Field(None, ge=0)


class Item(BaseModel):
    """Full catalog item as stored."""

    id: str
    name: str
    description: str = ""
    unit_price: Decimal

    model_config = {"frozen": True}
