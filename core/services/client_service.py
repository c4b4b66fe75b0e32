"""
Client directory service.

Invoices keep their own copy of the client taken when they were saved, so
edits and deletes here never change existing invoices.
"""

import logging
from typing import Callable

from core.event_bus import EventBus
from core.events import ClientCreated, ClientDeleted, ClientUpdated
from core.models import Client, ClientCreate, ClientUpdate, LedgerSnapshot
from core.state import LedgerState
from utils.ids import generate_id

logger = logging.getLogger(__name__)


class ClientService:
    """Service for client operations."""

    def __init__(
        self,
        state: LedgerState,
        event_bus: EventBus,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self.state = state
        self.event_bus = event_bus
        self.id_factory = id_factory

    def create(self, data: ClientCreate) -> Client:
        """
        Create a new client.

        Args:
            data: Client creation data

        Returns:
            Created client
        """
        client = Client(id=self.id_factory("client"), **data.model_dump())

        def mutate(snapshot: LedgerSnapshot):
            return snapshot.model_copy(update={"clients": [*snapshot.clients, client]}), client

        self.state.transact(mutate)
        self.event_bus.publish(ClientCreated.create(client=client))
        return client

    def get_by_id(self, client_id: str) -> Client | None:
        return self.state.snapshot.find_client(client_id)

    def list_all(self) -> list[Client]:
        """All clients, sorted by name."""
        return sorted(self.state.snapshot.clients, key=lambda c: c.name.lower())

    def search(self, query: str) -> list[Client]:
        """Case-insensitive match on name, contact name or email."""
        needle = query.strip().lower()
        if not needle:
            return self.list_all()
        return [
            c for c in self.list_all()
            if needle in c.name.lower()
            or needle in (c.contact_name or "").lower()
            or needle in (c.email or "").lower()
        ]

    def update(self, client_id: str, data: ClientUpdate) -> Client:
        """
        Update client fields.

        Args:
            client_id: Client id
            data: Fields to update. Only fields that were set are changed; an
                explicit None clears an optional field.

        Returns:
            Updated client

        Raises:
            ValueError: If client not found
        """
        updates = data.model_dump(exclude_unset=True)
        # The name is required and cannot be cleared
        if updates.get("name", "") is None:
            del updates["name"]

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.find_client(client_id)
            if current is None:
                raise ValueError(f"Client {client_id} not found")
            if not updates:
                return snapshot, current

            updated = Client.model_validate({**current.model_dump(), **updates})
            clients = [updated if c.id == client_id else c for c in snapshot.clients]
            return snapshot.model_copy(update={"clients": clients}), updated

        client = self.state.transact(mutate)
        if updates:
            self.event_bus.publish(ClientUpdated.create(client=client))
        return client

    def delete(self, client_id: str) -> bool:
        """
        Delete a client from the directory.

        Returns:
            True if deleted, False if not found
        """

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.find_client(client_id)
            if current is None:
                return snapshot, None
            clients = [c for c in snapshot.clients if c.id != client_id]
            return snapshot.model_copy(update={"clients": clients}), current

        deleted = self.state.transact(mutate)
        if deleted is None:
            return False

        self.event_bus.publish(ClientDeleted.create(client=deleted))
        return True
