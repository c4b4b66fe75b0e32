"""
Company profile service.

The profile is set up once and then edited in settings. It owns the invoice
numbering counter, which may be raised by an edit but never lowered: numbers
already issued must not be handed out again.
"""

import logging

from core.errors import FieldValidationError, ProfileMissingError
from core.event_bus import EventBus
from core.events import ProfileSaved
from core.models import CompanyProfile, LedgerSnapshot, ProfileCreate, ProfileUpdate
from core.state import LedgerState

logger = logging.getLogger(__name__)

# Profile fields an update may change but never clear
REQUIRED_FIELDS = ("name", "email", "invoice_number_prefix", "next_invoice_number", "template")


class ProfileService:
    """Service for the company profile."""

    def __init__(self, state: LedgerState, event_bus: EventBus):
        self.state = state
        self.event_bus = event_bus

    def get(self) -> CompanyProfile | None:
        return self.state.snapshot.profile

    def require(self) -> CompanyProfile:
        """
        Raises:
            ProfileMissingError: If setup has not been completed
        """
        profile = self.get()
        if profile is None:
            raise ProfileMissingError()
        return profile

    def setup(self, data: ProfileCreate) -> CompanyProfile:
        """
        Create the company profile.

        Args:
            data: Setup form data

        Returns:
            Created profile

        Raises:
            ValueError: If a profile already exists
        """
        profile = CompanyProfile.model_validate(data.model_dump())

        def mutate(snapshot: LedgerSnapshot):
            if snapshot.profile is not None:
                raise ValueError("Company profile is already set up")
            return snapshot.model_copy(update={"profile": profile}), profile

        created = self.state.transact(mutate)
        logger.info(f"Company profile set up for {created.name}")
        self.event_bus.publish(ProfileSaved.create(profile=created, created=True))
        return created

    def update(self, data: ProfileUpdate) -> CompanyProfile:
        """
        Update profile settings.

        Args:
            data: Fields to update. Only fields that were set are changed; an
                explicit None clears an optional field.

        Returns:
            Updated profile

        Raises:
            ProfileMissingError: If setup has not been completed
            FieldValidationError: If next_invoice_number would move backwards
        """
        updates = data.model_dump(exclude_unset=True)
        for required in REQUIRED_FIELDS:
            if updates.get(required, "") is None:
                del updates[required]

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.profile
            if current is None:
                raise ProfileMissingError()
            if not updates:
                return snapshot, current

            next_number = updates.get("next_invoice_number")
            if next_number is not None and next_number < current.next_invoice_number:
                raise FieldValidationError(
                    "next_invoice_number",
                    f"Next invoice number cannot be lowered below {current.next_invoice_number}",
                )

            updated = CompanyProfile.model_validate({**current.model_dump(), **updates})
            return snapshot.model_copy(update={"profile": updated}), updated

        profile = self.state.transact(mutate)
        if updates:
            self.event_bus.publish(ProfileSaved.create(profile=profile))
        return profile
