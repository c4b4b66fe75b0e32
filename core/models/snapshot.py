"""Full-state snapshot: the unit of persistence."""

from pydantic import BaseModel, Field

from core.models.client import Client
from core.models.expense import Expense
from core.models.invoice import Invoice
from core.models.item import Item
from core.models.profile import CompanyProfile


class LedgerSnapshot(BaseModel):
    """
    Everything the application owns, versioned as one value.

    The version increases by one per committed transaction and is what
    stores compare to detect a concurrent writer.
    """

    version: int = Field(0, ge=0)
    profile: CompanyProfile | None = None
    invoices: list[Invoice] = Field(default_factory=list)
    clients: list[Client] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)

    model_config = {"frozen": True}

    def find_invoice(self, invoice_id: str) -> Invoice | None:
        return next((inv for inv in self.invoices if inv.id == invoice_id), None)

    def find_client(self, client_id: str) -> Client | None:
        return next((c for c in self.clients if c.id == client_id), None)

    def find_item(self, item_id: str) -> Item | None:
        return next((i for i in self.items if i.id == item_id), None)

    def find_expense(self, expense_id: str) -> Expense | None:
        return next((e for e in self.expenses if e.id == expense_id), None)
