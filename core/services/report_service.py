"""Report service: rollups over the current invoice collection."""

from datetime import date
from typing import Callable

from core import lifecycle
from core.models import Invoice
from core.reporting import Dashboard, DateRange, ReportSummary, build_dashboard, build_report
from core.state import LedgerState
from utils.timezone import today_utc


class ReportService:
    """Recomputes reports on every call. Nothing is cached."""

    def __init__(self, state: LedgerState, today: Callable[[], date] = today_utc):
        self.state = state
        self.today = today

    def _invoices(self, today: date) -> list[Invoice]:
        return [lifecycle.refresh(inv, today) for inv in self.state.snapshot.invoices]

    def summary(self, date_range: DateRange = DateRange.ALL) -> ReportSummary:
        today = self.today()
        return build_report(self._invoices(today), date_range, today)

    def dashboard(self) -> Dashboard:
        today = self.today()
        return build_dashboard(self._invoices(today), today)
