"""Client (billed party) domain models."""

from pydantic import BaseModel, Field, EmailStr, field_validator

from core.models.address import Address


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Client name is required")
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ClientCreate(BaseModel):
    """Data required to create a client."""

    name: str = Field(..., max_length=255)
    email: EmailStr | None = None
    address: Address | None = None
    contact_name: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=10000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        return _blank_to_none(value)


class ClientUpdate(BaseModel):
    """Data that can be updated on a client. All fields optional."""

    name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    address: Address | None = None
    contact_name: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=10000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _require_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        return _blank_to_none(value)


class Client(BaseModel):
    """
    Full client entity as stored.

    Invoices embed a copy of this model taken at issue time; later edits to
    the directory entry do not reach existing invoices.
    """

    id: str
    name: str
    email: str | None = None
    address: Address | None = None
    contact_name: str | None = None
    notes: str | None = None

    model_config = {"frozen": True}

    @property
    def greeting_name(self) -> str:
        """Name used to address the client in correspondence."""
        return self.contact_name or self.name
