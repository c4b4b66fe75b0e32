"""
Invoice numbering.

The company profile's next_invoice_number is the single source of truth.
Numbers are prefix + counter, issued once, never reused, never gap-filled.
Callers must commit the returned profile together with the invoice that
received the number (InvoiceService does this inside one state transaction).
"""

from core.errors import ProfileMissingError
from core.models import CompanyProfile


def format_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence}"


def preview_number(profile: CompanyProfile | None) -> str:
    """
    Number the next invoice would receive, without consuming it.

    Raises:
        ProfileMissingError: If no profile is configured
    """
    if profile is None:
        raise ProfileMissingError()
    return format_number(profile.invoice_number_prefix, profile.next_invoice_number)


def issue_number(profile: CompanyProfile | None) -> tuple[str, CompanyProfile]:
    """
    Issue the next invoice number.

    Args:
        profile: Current company profile (not modified)

    Returns:
        (invoice_number, profile with next_invoice_number advanced by one)

    Raises:
        ProfileMissingError: If no profile is configured
    """
    number = preview_number(profile)
    updated = profile.model_copy(
        update={"next_invoice_number": profile.next_invoice_number + 1}
    )
    return number, updated
