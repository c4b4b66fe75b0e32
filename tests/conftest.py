"""Shared test fixtures for the ledger test suite."""

import itertools
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env")

from core.event_bus import EventBus
from core.models import (
    Client,
    ClientCreate,
    Invoice,
    InvoiceStatus,
    LineItem,
    LineItemCreate,
    PaymentRecord,
    ProfileCreate,
    TaxDefinition,
)
from core.money import compute_totals
from core.state import LedgerState
from core.store import MemorySnapshotStore
from utils.timezone import now_utc


# =============================================================================
# CLOCK & IDS
# =============================================================================

# Fixed "today" so status derivation and report windows are deterministic
TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    """Mutable clock: set clock.today to move time forward."""

    class Clock:
        def __init__(self):
            self.today = TODAY

        def __call__(self) -> date:
            return self.today

    return Clock()


@pytest.fixture
def id_factory():
    """Deterministic ids: client-1, inv-2, line-3, ..."""
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


# =============================================================================
# STATE & SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def published(event_bus):
    """Every event published on the bus, in order."""
    events = []
    event_bus.subscribe("*", events.append)
    return events


@pytest.fixture
def store():
    return MemorySnapshotStore()


@pytest.fixture
def state(store, event_bus):
    return LedgerState(store, event_bus)


@pytest.fixture
def profile_service(state, event_bus):
    from core.services.profile_service import ProfileService
    return ProfileService(state, event_bus)


@pytest.fixture
def client_service(state, event_bus, id_factory):
    from core.services.client_service import ClientService
    return ClientService(state, event_bus, id_factory=id_factory)


@pytest.fixture
def item_service(state, event_bus, id_factory):
    from core.services.item_service import ItemService
    return ItemService(state, event_bus, id_factory=id_factory)


@pytest.fixture
def expense_service(state, event_bus, id_factory):
    from core.services.expense_service import ExpenseService
    return ExpenseService(state, event_bus, id_factory=id_factory)


@pytest.fixture
def invoice_service(state, event_bus, clock, id_factory):
    from core.services.invoice_service import InvoiceService
    return InvoiceService(state, event_bus, today=clock, id_factory=id_factory)


@pytest.fixture
def report_service(state, clock):
    from core.services.report_service import ReportService
    return ReportService(state, today=clock)


# =============================================================================
# DOMAIN DATA FIXTURES
# =============================================================================


@pytest.fixture
def profile_data() -> ProfileCreate:
    return ProfileCreate(
        name="Acme Studio",
        email="billing@acme.example.com",
        invoice_number_prefix="INV-",
        next_invoice_number=5,
    )


@pytest.fixture
def profile(profile_service, profile_data):
    return profile_service.setup(profile_data)


@pytest.fixture
def sample_client(client_service):
    return client_service.create(ClientCreate(
        name="Globex",
        email="ap@globex.example.com",
        contact_name="Hank Scorpio",
    ))


@pytest.fixture
def line_rows():
    """2 x 100 + 1 x 50 = 250."""
    return [
        LineItemCreate(description="Design", quantity=Decimal("2"), unit_price=Decimal("100")),
        LineItemCreate(description="Hosting", quantity=Decimal("1"), unit_price=Decimal("50")),
    ]


@pytest.fixture
def make_invoice():
    """
    Build an Invoice directly, bypassing services.

    For pure-function tests (ledger, lifecycle, reporting). Totals are
    computed from the line items unless total is given.
    """
    counter = itertools.count(1)

    def _make(
        total: Decimal | str | None = None,
        status: InvoiceStatus = InvoiceStatus.SENT,
        issue_date: date = TODAY,
        due_date: date | None = None,
        amount_paid: Decimal | str = "0",
        client: Client | None = None,
        taxes: list[TaxDefinition] | None = None,
    ) -> Invoice:
        n = next(counter)
        if total is None:
            items = [LineItem(id=f"line-{n}", description="Work", quantity=Decimal("1"), unit_price=Decimal("100"))]
        else:
            items = [LineItem(id=f"line-{n}", description="Work", quantity=Decimal("1"), unit_price=Decimal(total))]
        totals = compute_totals(items, taxes or [])

        paid = Decimal(amount_paid)
        records = [PaymentRecord(amount=paid, date=issue_date)] if paid > 0 else []
        now = now_utc()
        return Invoice(
            id=f"inv-{n}",
            invoice_number=f"INV-{n}",
            client=client or Client(id="client-1", name="Globex", email="ap@globex.example.com"),
            line_items=items,
            taxes=taxes or [],
            status=status,
            issue_date=issue_date,
            due_date=due_date or issue_date,
            subtotal=totals.subtotal,
            tax_total=totals.tax_total,
            total=totals.total,
            amount_paid=paid,
            payment_records=records,
            created_at=now,
            updated_at=now,
        )

    return _make
