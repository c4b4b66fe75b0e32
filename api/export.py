"""GET /api/export/*: CSV and JSON downloads."""

from fastapi import APIRouter
from starlette.responses import Response

from core.export import invoices_to_csv, snapshot_to_json
from utils.timezone import today_utc


def _attachment(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def create_export_router(services: dict, state) -> APIRouter:
    router = APIRouter()

    invoice_svc = services["invoice"]

    @router.get("/export/invoices.csv")
    async def export_invoices():
        csv_text = invoices_to_csv(invoice_svc.list_all())
        return _attachment(csv_text, "text/csv; charset=utf-8", f"invoices-{today_utc().isoformat()}.csv")

    @router.get("/export/backup.json")
    async def export_backup():
        json_text = snapshot_to_json(state.snapshot)
        return _attachment(json_text, "application/json", f"ledger-backup-{today_utc().isoformat()}.json")

    return router
