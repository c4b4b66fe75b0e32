"""Core domain models."""

from core.models.address import Address
from core.models.client import Client, ClientCreate, ClientUpdate
from core.models.expense import Expense, ExpenseCreate, ExpenseUpdate
from core.models.item import Item, ItemCreate, ItemUpdate
from core.models.line_item import LineItem, LineItemCreate, TaxDefinition
from core.models.payment import PaymentRecord, PaymentCreate, PaymentMethod
from core.models.invoice import Invoice, InvoiceDraft, InvoiceEdit, InvoiceStatus
from core.models.profile import CompanyProfile, ProfileCreate, ProfileUpdate, TemplateId
from core.models.snapshot import LedgerSnapshot

__all__ = [
    # Address
    "Address",
    # Client
    "Client", "ClientCreate", "ClientUpdate",
    # Expense
    "Expense", "ExpenseCreate", "ExpenseUpdate",
    # Item
    "Item", "ItemCreate", "ItemUpdate",
    # LineItem
    "LineItem", "LineItemCreate", "TaxDefinition",
    # Payment
    "PaymentRecord", "PaymentCreate", "PaymentMethod",
    # Invoice
    "Invoice", "InvoiceDraft", "InvoiceEdit", "InvoiceStatus",
    # Profile
    "CompanyProfile", "ProfileCreate", "ProfileUpdate", "TemplateId",
    # Snapshot
    "LedgerSnapshot",
]
