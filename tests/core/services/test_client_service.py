"""Tests for ClientService."""

import pytest


class TestClientCreate:

    def test_creates_client(self, client_service, state):
        from core.models import ClientCreate

        client = client_service.create(ClientCreate(name="Initech", email="ap@initech.example.com"))

        assert client.id == "client-1"
        assert client.name == "Initech"
        assert state.snapshot.find_client(client.id) == client

    def test_publishes_created_event(self, client_service, published):
        from core.events import ClientCreated
        from core.models import ClientCreate

        client_service.create(ClientCreate(name="Initech"))

        assert isinstance(published[-1], ClientCreated)
        assert published[-1].client.name == "Initech"


class TestClientQueries:

    @pytest.fixture
    def clients(self, client_service):
        from core.models import ClientCreate

        return [
            client_service.create(ClientCreate(name="umbrella", email="ops@umbrella.example.com")),
            client_service.create(ClientCreate(name="Globex", contact_name="Hank Scorpio")),
            client_service.create(ClientCreate(name="Initech")),
        ]

    def test_list_all_sorted_by_name(self, client_service, clients):
        names = [c.name for c in client_service.list_all()]

        assert names == ["Globex", "Initech", "umbrella"]

    def test_search_matches_name_contact_and_email(self, client_service, clients):
        assert [c.name for c in client_service.search("INI")] == ["Initech"]
        assert [c.name for c in client_service.search("scorpio")] == ["Globex"]
        assert [c.name for c in client_service.search("umbrella.example")] == ["umbrella"]

    def test_blank_search_lists_everything(self, client_service, clients):
        assert len(client_service.search("  ")) == 3

    def test_get_by_id_missing_returns_none(self, client_service):
        assert client_service.get_by_id("client-404") is None


class TestClientUpdate:

    def test_updates_fields(self, client_service, sample_client):
        from core.models import ClientUpdate

        updated = client_service.update(sample_client.id, ClientUpdate(notes="Net 30"))

        assert updated.notes == "Net 30"
        assert updated.email == sample_client.email

    def test_explicit_none_clears_optional_fields(self, client_service, sample_client):
        from core.models import ClientUpdate

        updated = client_service.update(sample_client.id, ClientUpdate(email=None, contact_name=None))

        assert updated.email is None
        assert updated.contact_name is None
        assert updated.name == "Globex"

    def test_none_name_leaves_name_alone(self, client_service, sample_client):
        from core.models import ClientUpdate

        updated = client_service.update(sample_client.id, ClientUpdate(name=None, notes="Net 30"))

        assert updated.name == "Globex"
        assert updated.notes == "Net 30"

    def test_blank_email_clears_email(self, client_service, sample_client):
        from core.models import ClientUpdate

        updated = client_service.update(sample_client.id, ClientUpdate(email=""))

        assert updated.email is None

    def test_missing_client_raises(self, client_service):
        from core.models import ClientUpdate

        with pytest.raises(ValueError, match="not found"):
            client_service.update("client-404", ClientUpdate(name="Nobody"))

    def test_update_does_not_touch_existing_invoices(
        self, client_service, invoice_service, profile, sample_client, line_rows
    ):
        """Invoices keep the client details they were created with."""
        from core.models import ClientUpdate, InvoiceDraft

        invoice = invoice_service.create(InvoiceDraft(client_id=sample_client.id, line_items=line_rows))
        client_service.update(sample_client.id, ClientUpdate(name="Globex Corp"))

        assert invoice_service.get_by_id(invoice.id).client.name == "Globex"


class TestClientDelete:

    def test_deletes_client(self, client_service, sample_client, published):
        from core.events import ClientDeleted

        assert client_service.delete(sample_client.id) is True
        assert client_service.get_by_id(sample_client.id) is None
        assert isinstance(published[-1], ClientDeleted)

    def test_delete_missing_returns_false(self, client_service, published):
        assert client_service.delete("client-404") is False
        assert published == []
