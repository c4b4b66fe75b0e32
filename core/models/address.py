"""Postal address value type."""

from pydantic import BaseModel, Field


class Address(BaseModel):
    """
    Postal address for a client or the company profile.

    Every part is optional; partially filled addresses are stored as given.
    """

    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)

    model_config = {"frozen": True}

    @property
    def one_line(self) -> str:
        """Single-line address for display. Empty parts are skipped."""
        locality = " ".join(p for p in [self.state, self.postal_code] if p)
        parts = [self.street, self.city, locality, self.country]
        return ", ".join(p for p in parts if p)
