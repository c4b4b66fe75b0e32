"""Typed exceptions for ledger failures.

Every LedgerError is recoverable by the user: the operation is rejected,
nothing is clamped, and the message says what to fix. LedgerError subclasses
ValueError so callers that only know "bad input" still catch it.
"""

from decimal import Decimal


class LedgerError(ValueError):
    """Base class for rejected ledger operations."""

    code = "LEDGER_ERROR"


class ProfileMissingError(LedgerError):
    """No company profile is configured. Invoices cannot be issued."""

    code = "PROFILE_MISSING"

    def __init__(self, message: str = "Company profile is not set up"):
        super().__init__(message)


class InvalidPaymentAmountError(LedgerError):
    """
    Payment is zero, negative, or larger than the balance due.

    Carries the current balance so the caller can re-prompt.
    """

    code = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, amount: Decimal, balance_due: Decimal):
        self.amount = amount
        self.balance_due = balance_due
        super().__init__(
            f"Invalid payment amount {amount}. "
            f"Amount must be greater than 0 and at most the balance due ({balance_due:.2f})."
        )


class ClientRequiredError(LedgerError):
    """Invoice save attempted with no client selected."""

    code = "CLIENT_REQUIRED"

    def __init__(self, message: str = "A client must be selected for the invoice"):
        super().__init__(message)


class FieldValidationError(LedgerError):
    """A required field is missing or empty."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class InvalidStatusTransitionError(LedgerError):
    """Requested status change is not allowed from the current status."""

    code = "INVALID_STATUS_TRANSITION"


class ConcurrentUpdateError(LedgerError):
    """
    The stored snapshot changed underneath this writer.

    Raised by snapshot stores on a version mismatch, and by LedgerState once
    conflict retries are exhausted.
    """

    code = "CONCURRENT_UPDATE"

    def __init__(self, expected_version: int, actual_version: int | None):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Snapshot version conflict: expected {expected_version}, found {actual_version}"
        )


class StoreError(Exception):
    """Persistence I/O failed. In-memory state is unaffected."""
