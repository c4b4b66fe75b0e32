"""Company profile domain models.

One profile per application instance. It carries the invoice numbering
counter, which only ever moves forward.
"""

from enum import Enum

from pydantic import BaseModel, Field, EmailStr

from core.models.address import Address


class TemplateId(str, Enum):
    """Presentation template used by the external renderer."""

    MODERN = "modern"
    CLASSIC = "classic"
    MINIMALIST = "minimalist"


class ProfileCreate(BaseModel):
    """Data collected by the one-time setup flow."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    address: Address | None = None
    logo: str | None = None  # Opaque reference (e.g. base64 data URL)
    invoice_number_prefix: str = Field("INV-", max_length=20)
    next_invoice_number: int = Field(1, ge=1)
    tax_type: str | None = Field(None, max_length=50)
    tax_number: str | None = Field(None, max_length=100)
    template: TemplateId = TemplateId.MODERN


class ProfileUpdate(BaseModel):
    """Settings edits. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: Address | None = None
    logo: str | None = None
    invoice_number_prefix: str | None = Field(None, max_length=20)
    next_invoice_number: int | None = Field(None, ge=1)
    tax_type: str | None = Field(None, max_length=50)
    tax_number: str | None = Field(None, max_length=100)
    template: TemplateId | None = None


class CompanyProfile(BaseModel):
    """Full company profile as stored."""

    name: str
    email: str
    phone: str | None = None
    address: Address | None = None
    logo: str | None = None
    invoice_number_prefix: str = "INV-"
    next_invoice_number: int = Field(1, ge=1)
    tax_type: str | None = None
    tax_number: str | None = None
    template: TemplateId = TemplateId.MODERN

    model_config = {"frozen": True}
