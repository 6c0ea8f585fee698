# inventory_ui/reports.py
# Property report export (single binary download)

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

try:
    from inventory_ui.api_client import ApiClient, ApiError, error_text
    from inventory_ui.config import IS_DEV
    from inventory_ui.notices import NoticeBoard
except ModuleNotFoundError:
    from api_client import ApiClient, ApiError, error_text
    from config import IS_DEV
    from notices import NoticeBoard

REPORT_PATH = "/properties/report"
REPORT_KEY = "report-export"


@dataclass(frozen=True)
class ReportFile:
    filename: str
    data: bytes
    mime: str = "application/pdf"


class ReportExporter:
    """Fetches the report PDF; refuses to start a second export while one is running."""

    def __init__(self, client: ApiClient, notices: Optional[NoticeBoard] = None, today: Callable[[], date] = date.today):
        self.client = client
        self.notices = notices if notices is not None else NoticeBoard()
        self.today = today
        self.in_flight = False

    def export(self) -> Optional[ReportFile]:
        if self.in_flight:
            return None
        self.in_flight = True
        try:
            with self.notices.track(REPORT_KEY, "Generating report...", "Failed to generate report."):
                try:
                    data = self.client.request_binary(REPORT_PATH)
                except ApiError as e:
                    self.notices.error(REPORT_KEY, error_text(e, "Failed to generate report."))
                    return None
                if not data:
                    self.notices.error(REPORT_KEY, "The report came back empty.")
                    return None
                self.notices.success(REPORT_KEY, "Report ready for download.")
                if IS_DEV:
                    print(f"[REPORT] Received {len(data)} bytes")
                return ReportFile(filename=f"property-report-{self.today().isoformat()}.pdf", data=data)
        finally:
            self.in_flight = False
