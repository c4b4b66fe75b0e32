"""GET /api/data: unified read endpoint."""

from fastapi import APIRouter, Query, Request

from api.base import success_response
from core.models import Invoice, InvoiceStatus
from core.reporting import DateRange


VALID_TYPES = {
    "profile", "clients", "items", "expenses", "invoices", "report", "dashboard", "notifications",
}


def invoice_json(invoice: Invoice) -> dict:
    """Invoice as JSON with derived amounts the client would otherwise recompute."""
    data = invoice.model_dump(mode="json")
    data["balance_due"] = str(invoice.balance_due)
    return data


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    profile_svc = services["profile"]
    client_svc = services["client"]
    item_svc = services["item"]
    expense_svc = services["expense"]
    invoice_svc = services["invoice"]
    report_svc = services["report"]
    feed = services["notifications"]

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        search: str | None = Query(None),
        category: str | None = Query(None),
        status: InvoiceStatus | None = Query(None),
        range: DateRange = Query(DateRange.ALL),
        limit: int = Query(50, ge=1, le=500),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        request_id = request.state.request_id

        if type == "profile":
            data = _handle_profile(profile_svc, invoice_svc)
        elif type == "clients":
            data = _handle_clients(client_svc, id, search)
        elif type == "items":
            data = _handle_items(item_svc, id)
        elif type == "expenses":
            data = _handle_expenses(expense_svc, id, category)
        elif type == "invoices":
            data = _handle_invoices(invoice_svc, id, status, search, limit)
        elif type == "report":
            data = report_svc.summary(range)
        elif type == "dashboard":
            data = _handle_dashboard(report_svc)
        else:
            data = feed.recent(limit)

        return success_response(data, request_id).model_dump(mode="json")

    return router


def _handle_profile(profile_svc, invoice_svc):
    profile = profile_svc.get()
    if profile is None:
        return None

    data = profile.model_dump(mode="json")
    data["next_invoice_number_preview"] = invoice_svc.next_number()
    return data


def _handle_clients(client_svc, id, search):
    if id:
        client = client_svc.get_by_id(id)
        if client is None:
            raise ValueError(f"Client {id} not found")
        return client.model_dump(mode="json")

    clients = client_svc.search(search) if search else client_svc.list_all()
    return [c.model_dump(mode="json") for c in clients]


def _handle_items(item_svc, id):
    if id:
        item = item_svc.get_by_id(id)
        if item is None:
            raise ValueError(f"Item {id} not found")
        return item.model_dump(mode="json")

    return [i.model_dump(mode="json") for i in item_svc.list_all()]


def _handle_expenses(expense_svc, id, category):
    if id:
        expense = expense_svc.get_by_id(id)
        if expense is None:
            raise ValueError(f"Expense {id} not found")
        return expense.model_dump(mode="json")

    summary = expense_svc.summary(category)
    return {
        "expenses": [e.model_dump(mode="json") for e in expense_svc.list_all(category)],
        "total": summary.total,
        "tax": summary.tax,
        "by_category": summary.by_category,
    }


def _handle_invoices(invoice_svc, id, status, search, limit):
    if id:
        invoice = invoice_svc.get_by_id(id)
        if invoice is None:
            raise ValueError(f"Invoice {id} not found")
        return invoice_json(invoice)

    invoices = invoice_svc.list_all(status=status, search=search)
    return [invoice_json(inv) for inv in invoices[:limit]]


def _handle_dashboard(report_svc):
    dashboard = report_svc.dashboard()
    return {
        "outstanding": dashboard.outstanding,
        "overdue": dashboard.overdue,
        "collected": dashboard.collected,
        "monthly_invoiced": dashboard.monthly_invoiced,
        "recent_invoices": [invoice_json(inv) for inv in dashboard.recent_invoices],
    }
