"""
Application factory.

Wires config -> store -> state -> services -> handlers -> routers. Hosts
that embed the ledger call create_app(); tests pass their own store, clock
and mailer.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable

from fastapi import FastAPI
from starlette.requests import Request

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.export import create_export_router
from api.middleware import RequestIDMiddleware, SessionGateMiddleware
from clients.email_client import EmailGatewayClient
from clients.valkey_client import ValkeyClient
from core.config import LedgerConfig
from core.event_bus import EventBus
from core.events import InvoicePaid
from core.handlers.invoice_payment_handler import handle_invoice_paid
from core.handlers.notification_handler import NotificationFeed
from core.services.client_service import ClientService
from core.services.expense_service import ExpenseService
from core.services.invoice_service import InvoiceService
from core.services.item_service import ItemService
from core.services.profile_service import ProfileService
from core.services.report_service import ReportService
from core.state import LedgerState
from core.store import JsonFileSnapshotStore, MemorySnapshotStore, SnapshotStore, ValkeySnapshotStore
from utils.timezone import today_utc

logger = logging.getLogger(__name__)


def create_store(config: LedgerConfig) -> SnapshotStore:
    """Build the snapshot store selected by config.store_backend."""
    if config.store_backend == "file":
        return JsonFileSnapshotStore(config.snapshot_path)
    if config.store_backend == "valkey":
        return ValkeySnapshotStore(ValkeyClient(config.valkey_url), config.snapshot_key)
    return MemorySnapshotStore()


def create_mailer(config: LedgerConfig) -> EmailGatewayClient | None:
    if not config.email_enabled:
        logger.info("Email gateway not configured; invoices will not be emailed")
        return None
    return EmailGatewayClient.from_config(config)


def build_services(
    config: LedgerConfig,
    store: SnapshotStore | None = None,
    mailer=None,
    today: Callable[[], date] = today_utc,
) -> tuple[LedgerState, dict]:
    """
    Build the state holder and all services.

    Returns:
        (state, services dict keyed by domain)
    """
    event_bus = EventBus()
    state = LedgerState(
        store if store is not None else create_store(config),
        event_bus,
        max_conflict_retries=config.max_conflict_retries,
    )

    feed = NotificationFeed(config.notification_history, config.currency_symbol)
    feed.attach(event_bus)
    if mailer is not None:
        event_bus.subscribe(InvoicePaid, handle_invoice_paid(mailer, config.currency_symbol))

    services = {
        "profile": ProfileService(state, event_bus),
        "client": ClientService(state, event_bus),
        "item": ItemService(state, event_bus),
        "expense": ExpenseService(state, event_bus),
        "invoice": InvoiceService(state, event_bus, mailer=mailer, today=today),
        "report": ReportService(state, today=today),
        "notifications": feed,
    }
    return state, services


def create_app(
    config: LedgerConfig | None = None,
    *,
    store: SnapshotStore | None = None,
    mailer=None,
    is_authenticated: Callable[[Request], bool] | None = None,
    today: Callable[[], date] = today_utc,
) -> FastAPI:
    """
    Create the ledger API.

    Args:
        config: Settings; read from LEDGER_* environment variables if omitted
        store: Snapshot store override (otherwise built from config)
        mailer: Email sender override (otherwise built from config)
        is_authenticated: Request gate supplied by the host; no gate if omitted
        today: Clock for status derivation and reports
    """
    config = config or LedgerConfig()
    if mailer is None:
        mailer = create_mailer(config)

    state, services = build_services(config, store=store, mailer=mailer, today=today)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        state.store.close()
        logger.info("Snapshot store closed")

    app = FastAPI(title="Invoice Ledger", lifespan=lifespan)
    if is_authenticated is not None:
        app.add_middleware(SessionGateMiddleware, is_authenticated=is_authenticated)
    # Added last so it runs first and the gate's responses carry the id
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")
    app.include_router(create_export_router(services, state), prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": state.snapshot.version}

    app.state.ledger = state
    app.state.services = services
    logger.info(f"Ledger API ready (store backend: {config.store_backend})")
    return app
