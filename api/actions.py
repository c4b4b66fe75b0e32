"""POST /api/actions: unified mutation endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from api.data import invoice_json
from core.messaging import SendMode
from core.models import (
    ProfileCreate, ProfileUpdate,
    ClientCreate, ClientUpdate,
    ItemCreate, ItemUpdate,
    ExpenseCreate, ExpenseUpdate,
    InvoiceDraft, InvoiceEdit,
    PaymentCreate,
)


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "profile": ProfileHandler(services["profile"]),
        "client": ClientHandler(services["client"]),
        "item": ItemHandler(services["item"]),
        "expense": ExpenseHandler(services["expense"]),
        "invoice": InvoiceHandler(services["invoice"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}", None)
        result = method(body.data)
        return success_response(result, request.state.request_id).model_dump(mode="json")

    return router


def _require_id(data: dict, key: str = "id") -> str:
    value = data.pop(key, None)
    if not value:
        raise ValueError(f"'{key}' is required")
    return str(value)


def _require_ids(data: dict) -> list[str]:
    ids = data.get("ids")
    if not isinstance(ids, list) or not ids:
        raise ValueError("'ids' must be a non-empty list")
    return [str(i) for i in ids]


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class ProfileHandler:
    ALLOWED_ACTIONS = {"setup", "update"}

    def __init__(self, service):
        self.service = service

    def _handle_setup(self, data: dict):
        profile = self.service.setup(ProfileCreate(**data))
        return profile.model_dump(mode="json")

    def _handle_update(self, data: dict):
        profile = self.service.update(ProfileUpdate(**data))
        return profile.model_dump(mode="json")


class ClientHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        client = self.service.create(ClientCreate(**data))
        return client.model_dump(mode="json")

    def _handle_update(self, data: dict):
        client_id = _require_id(data)
        client = self.service.update(client_id, ClientUpdate(**data))
        return client.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        client_id = _require_id(data)
        deleted = self.service.delete(client_id)
        if not deleted:
            raise ValueError(f"Client {client_id} not found")
        return {"deleted": True}


class ItemHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        item = self.service.create(ItemCreate(**data))
        return item.model_dump(mode="json")

    def _handle_update(self, data: dict):
        item_id = _require_id(data)
        item = self.service.update(item_id, ItemUpdate(**data))
        return item.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        item_id = _require_id(data)
        deleted = self.service.delete(item_id)
        if not deleted:
            raise ValueError(f"Item {item_id} not found")
        return {"deleted": True}


class ExpenseHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        expense = self.service.create(ExpenseCreate(**data))
        return expense.model_dump(mode="json")

    def _handle_update(self, data: dict):
        expense_id = _require_id(data)
        expense = self.service.update(expense_id, ExpenseUpdate(**data))
        return expense.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        expense_id = _require_id(data)
        deleted = self.service.delete(expense_id)
        if not deleted:
            raise ValueError(f"Expense {expense_id} not found")
        return {"deleted": True}


class InvoiceHandler:
    ALLOWED_ACTIONS = {
        "create", "update", "delete",
        "send", "mark_sent", "record_payment", "mark_paid", "refresh_statuses",
    }

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        invoice = self.service.create(InvoiceDraft(**data))
        return invoice_json(invoice)

    def _handle_update(self, data: dict):
        invoice_id = _require_id(data)
        invoice = self.service.edit(invoice_id, InvoiceEdit(**data))
        return invoice_json(invoice)

    def _handle_delete(self, data: dict):
        deleted = self.service.delete(_require_ids(data))
        return {"deleted": deleted}

    def _handle_send(self, data: dict):
        invoice_id = _require_id(data)
        mode = SendMode(data.get("mode", SendMode.SEND.value))
        result = self.service.send(invoice_id, mode, data.get("recipient"))
        return {
            "invoice": invoice_json(result.invoice),
            "message": result.message,
            "delivered": result.delivered,
        }

    def _handle_mark_sent(self, data: dict):
        invoice = self.service.mark_sent(_require_id(data))
        return invoice_json(invoice)

    def _handle_record_payment(self, data: dict):
        invoice_id = _require_id(data, "invoice_id")
        invoice = self.service.record_payment(invoice_id, PaymentCreate(**data))
        return invoice_json(invoice)

    def _handle_mark_paid(self, data: dict):
        invoices = self.service.mark_paid(_require_ids(data))
        return [invoice_json(inv) for inv in invoices]

    def _handle_refresh_statuses(self, data: dict):
        invoices = self.service.refresh_statuses()
        return [invoice_json(inv) for inv in invoices]
