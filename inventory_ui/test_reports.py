# inventory_ui/test_reports.py
# Unit tests for the report export

import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from inventory_ui.notices import NoticeBoard
from inventory_ui.reports import REPORT_KEY, REPORT_PATH, ReportExporter, ReportFile
from conftest import FakeResponse, fail


def make_exporter(client):
    return ReportExporter(client, NoticeBoard(), today=lambda: date(2024, 6, 30))


def test_export_returns_dated_pdf(http, client):
    http.on("GET", REPORT_PATH, FakeResponse(200, content=b"%PDF-1.4 report"))
    exporter = make_exporter(client)

    report = exporter.export()

    assert report == ReportFile(filename="property-report-2024-06-30.pdf", data=b"%PDF-1.4 report")
    assert report.mime == "application/pdf"
    assert exporter.notices.get(REPORT_KEY).kind == "success"
    assert not exporter.in_flight


def test_export_failure_resolves_indicator(http, client):
    http.on("GET", REPORT_PATH, fail(500, "Report service down"))
    exporter = make_exporter(client)

    assert exporter.export() is None

    notice = exporter.notices.get(REPORT_KEY)
    assert notice.kind == "error"
    assert notice.message == "Report service down"
    assert exporter.notices.pending() == []
    assert not exporter.in_flight


def test_empty_report_is_an_error(http, client):
    http.on("GET", REPORT_PATH, FakeResponse(200, content=b""))
    exporter = make_exporter(client)

    assert exporter.export() is None
    assert exporter.notices.get(REPORT_KEY).message == "The report came back empty."


def test_second_export_refused_while_in_flight(http, client):
    exporter = make_exporter(client)
    exporter.in_flight = True

    assert exporter.export() is None
    assert http.calls == []
