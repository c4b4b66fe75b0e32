"""API test fixtures: TestClient over an in-memory ledger."""

from datetime import date

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from core.config import LedgerConfig
from core.store import MemorySnapshotStore

TODAY = date(2024, 6, 15)


def _has_session(request) -> bool:
    return request.cookies.get("session_token") == "test-token"


@pytest.fixture
def app():
    """Ledger API with a cookie gate, a fixed clock and no mailer."""
    return create_app(
        LedgerConfig(),
        store=MemorySnapshotStore(),
        is_authenticated=_has_session,
        today=lambda: TODAY,
    )


@pytest.fixture
def services(app):
    return app.state.services


@pytest.fixture
def client(app):
    """Authenticated test client."""
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "test-token")
    return c


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no session cookie)."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def act(client):
    """POST /api/actions as the authenticated client."""

    def _act(domain: str, action: str, data: dict | None = None):
        return client.post("/api/actions", json={"domain": domain, "action": action, "data": data or {}})

    return _act


@pytest.fixture
def profile(act):
    response = act("profile", "setup", {
        "name": "Acme Studio",
        "email": "billing@acme.example.com",
        "next_invoice_number": 5,
    })
    assert response.status_code == 200
    return response.json()["data"]


@pytest.fixture
def sample_client(act):
    response = act("client", "create", {
        "name": "Globex",
        "email": "ap@globex.example.com",
        "contact_name": "Hank Scorpio",
    })
    return response.json()["data"]


@pytest.fixture
def invoice(act, profile, sample_client):
    """SENT invoice for 250.00 due 2024-07-15."""
    response = act("invoice", "create", {
        "client_id": sample_client["id"],
        "line_items": [
            {"description": "Design", "quantity": "2", "unit_price": "100"},
            {"description": "Hosting", "quantity": "1", "unit_price": "50"},
        ],
        "issue_date": "2024-06-15",
        "due_date": "2024-07-15",
    })
    created = response.json()["data"]
    return act("invoice", "mark_sent", {"id": created["id"]}).json()["data"]
