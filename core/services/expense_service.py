"""
Expense service.

Expenses are kept newest first, the order they are listed in. Totals are
recomputed from the stored records on every call.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from core.event_bus import EventBus
from core.events import ExpenseCreated, ExpenseDeleted, ExpenseUpdated
from core.models import Expense, ExpenseCreate, ExpenseUpdate, LedgerSnapshot
from core.money import ZERO
from core.state import LedgerState
from utils.ids import generate_id

logger = logging.getLogger(__name__)

# Expense fields an update may change but never clear
REQUIRED_FIELDS = ("merchant", "spent_on", "amount", "category")

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class ExpenseSummary:
    total: Decimal
    tax: Decimal
    count: int
    by_category: dict[str, Decimal]


class ExpenseService:
    """Service for expense operations."""

    def __init__(
        self,
        state: LedgerState,
        event_bus: EventBus,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self.state = state
        self.event_bus = event_bus
        self.id_factory = id_factory

    def create(self, data: ExpenseCreate) -> Expense:
        expense = Expense(id=self.id_factory("exp"), **data.model_dump())

        def mutate(snapshot: LedgerSnapshot):
            return snapshot.model_copy(update={"expenses": [expense, *snapshot.expenses]}), expense

        self.state.transact(mutate)
        logger.info(f"Expense {expense.id} recorded: {expense.merchant} {expense.amount}")
        self.event_bus.publish(ExpenseCreated.create(expense=expense))
        return expense

    def get_by_id(self, expense_id: str) -> Expense | None:
        return self.state.snapshot.find_expense(expense_id)

    def list_all(self, category: str | None = None) -> list[Expense]:
        """
        Expenses, newest spending date first.

        Args:
            category: Only expenses in this category (case-insensitive)
        """
        expenses = self.state.snapshot.expenses
        if category:
            needle = category.strip().lower()
            expenses = [e for e in expenses if e.category.lower() == needle]
        return sorted(expenses, key=lambda e: e.spent_on, reverse=True)

    def update(self, expense_id: str, data: ExpenseUpdate) -> Expense:
        """
        Update expense fields.

        Args:
            expense_id: Expense id
            data: Fields to update. Only fields that were set are changed; an
                explicit None clears tax, description or receipt image.

        Raises:
            ValueError: If expense not found
        """
        updates = data.model_dump(exclude_unset=True)
        for required in REQUIRED_FIELDS:
            if updates.get(required, "") is None:
                del updates[required]

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.find_expense(expense_id)
            if current is None:
                raise ValueError(f"Expense {expense_id} not found")
            if not updates:
                return snapshot, current

            updated = Expense.model_validate({**current.model_dump(), **updates})
            expenses = [updated if e.id == expense_id else e for e in snapshot.expenses]
            return snapshot.model_copy(update={"expenses": expenses}), updated

        expense = self.state.transact(mutate)
        if updates:
            self.event_bus.publish(ExpenseUpdated.create(expense=expense))
        return expense

    def delete(self, expense_id: str) -> bool:
        """
        Returns:
            True if deleted, False if not found
        """

        def mutate(snapshot: LedgerSnapshot):
            current = snapshot.find_expense(expense_id)
            if current is None:
                return snapshot, None
            expenses = [e for e in snapshot.expenses if e.id != expense_id]
            return snapshot.model_copy(update={"expenses": expenses}), current

        deleted = self.state.transact(mutate)
        if deleted is None:
            return False

        self.event_bus.publish(ExpenseDeleted.create(expense=deleted))
        return True

    def summary(self, category: str | None = None) -> ExpenseSummary:
        """Total spent, tax paid and per-category totals at full precision."""
        expenses = self.list_all(category)
        by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for expense in expenses:
            by_category[expense.category or UNCATEGORIZED] += expense.amount

        return ExpenseSummary(
            total=sum((e.amount for e in expenses), ZERO),
            tax=sum((e.tax or ZERO for e in expenses), ZERO),
            count=len(expenses),
            by_category=dict(sorted(by_category.items())),
        )
