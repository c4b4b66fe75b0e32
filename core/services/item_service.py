"""
Item catalog service.

Catalog items are templates for line items. to_line_item() copies the
item's name and price into a new LineItem; the two are unrelated afterwards.
"""

import logging
from decimal import Decimal
from typing import Callable

from core.event_bus import EventBus
from core.events import ItemCreated, ItemDeleted, ItemUpdated
from core.models import Item, ItemCreate, ItemUpdate, LedgerSnapshot, LineItem
from core.state import LedgerState
from utils.ids import generate_id

logger = logging.getLogger(__name__)


class ItemService:
    """Service for catalog item operations."""

    def __init__(
        self,
        state: LedgerState,
        event_bus: EventBus,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self.state = state
        self.event_bus = event_bus
        self.id_factory = id_factory

    def create(self, data: ItemCreate) -> Item:
        item = Item(id=self.id_factory("item"), **data.model_dump())

        def mutate(snapshot: LedgerSnapshot):
            return snapshot.model_copy(update={"items": [*snapshot.items, item]}), item

        self.state.transact(mutate)
        self.event_bus.publish(ItemCreated.create(item=item))
        return item

    def get_by_id(self, item_id: str) -> Item | None:
        return self.state.snapshot.find_item(item_id)

    def list_all(self) -> list[Item]:
        return sorted(self.state.snapshot.items, key=lambda i: i.name.lower())

    def update(self, item_id: str, data: ItemUpdate) -> Item:
        """
        Update item fields.

        Raises:
            ValueError: If item not found
        """
        updates = data.model_dump(exclude_none=True)

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.find_item(item_id)
            if current is None:
                raise ValueError(f"Item {item_id} not found")
            if not updates:
                return snapshot, current

            updated = Item.model_validate({**current.model_dump(), **updates})
            items = [updated if i.id == item_id else i for i in snapshot.items]
            return snapshot.model_copy(update={"items": items}), updated

        item = self.state.transact(mutate)
        if updates:
            self.event_bus.publish(ItemUpdated.create(item=item))
        return item

    def delete(self, item_id: str) -> bool:
        """
        Returns:
            True if deleted, False if not found
        """

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.find_item(item_id)
            if current is None:
                return snapshot, None
            items = [i for i in snapshot.items if i.id != item_id]
            return snapshot.model_copy(update={"items": items}), current

        deleted = self.state.transact(mutate)
        if deleted is None:
            return False

        self.event_bus.publish(ItemDeleted.create(item=deleted))
        return True

    def to_line_item(self, item_id: str, quantity: Decimal = Decimal("1")) -> LineItem:
        """
        Copy a catalog item into a new line item.

        The item name becomes the line description.

        Raises:
            ValueError: If item not found
        """
        item = self.get_by_id(item_id)
        if item is None:
            raise ValueError(f"Item {item_id} not found")

        return LineItem(
            id=self.id_factory("line"),
            description=item.name,
            quantity=quantity,
            unit_price=item.unit_price,
        )
