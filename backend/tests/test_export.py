"""
Tests for the payroll Excel workbook and PDF summary.
"""
import io
import uuid
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace

from openpyxl import load_workbook

from app.services.export_service import (
    DETAIL_HEADERS,
    SUMMARY_HEADERS,
    build_payroll_workbook,
    payroll_workbook_bytes,
)
from app.services.payroll_service import build_payroll_summary
from app.services.pdf_service import PERSON_HEADER, generate_payroll_summary_pdf, person_rows


def make_records():
    shift = SimpleNamespace(date=date(2025, 3, 11), title="Dinner", start_time=time(18, 0), end_time=time(23, 0))
    people = [
        SimpleNamespace(id=uuid.uuid4(), username=name, full_name=f"{name.capitalize()} Test", hourly_rate=rate)
        for name, rate in (("alice", 15.0), ("bob", 12.0))
    ]
    clock_in = datetime(2025, 3, 11, 17, 0, tzinfo=timezone.utc)
    return [
        SimpleNamespace(
            id=uuid.uuid4(), user_id=p.id, user=p, shift=shift, position=pos,
            clock_in=clock_in, clock_out=clock_in + timedelta(hours=hours), validated=validated,
        )
        for p, pos, hours, validated in (
            (people[0], "bar", 5.0, True),
            (people[1], "hot", 4.5, True),
            (people[1], "bread", 1.0, False),
        )
    ]


def test_workbook_sheets():
    records = make_records()
    summary = build_payroll_summary(records, date(2025, 3, 1), date(2025, 3, 31))
    wb = build_payroll_workbook(summary, records)

    summary_ws, detail_ws = wb["Summary"], wb["Hours"]
    assert [c.value for c in summary_ws[1]] == SUMMARY_HEADERS
    assert [c.value for c in detail_ws[1]] == DETAIL_HEADERS

    # two people plus the totals row
    assert summary_ws.max_row == 4
    assert summary_ws.cell(row=2, column=1).value == "alice"
    assert summary_ws.cell(row=4, column=1).value == "Total"
    assert summary_ws.cell(row=4, column=len(SUMMARY_HEADERS)).value == summary.total_salary

    assert detail_ws.max_row == 4
    assert detail_ws.cell(row=2, column=7).value == "Bar"
    assert detail_ws.cell(row=3, column=8).value == "Kitchen"
    assert detail_ws.cell(row=4, column=12).value == "no"


def test_detail_clock_times_in_restaurant_time():
    records = make_records()
    wb = build_payroll_workbook(build_payroll_summary(records), records)
    # 17:00 UTC is 18:00 in Brussels in March
    assert wb["Hours"].cell(row=2, column=9).value == datetime(2025, 3, 11, 18, 0)


def test_workbook_bytes_load_back():
    records = make_records()
    content = payroll_workbook_bytes(build_payroll_summary(records), records)
    assert content[:2] == b"PK"
    wb = load_workbook(io.BytesIO(content))
    assert wb.sheetnames == ["Summary", "Hours"]


def test_pdf_summary():
    records = make_records()
    summary = build_payroll_summary(records, date(2025, 3, 1), date(2025, 3, 31))
    pdf = generate_payroll_summary_pdf(summary, "Chez Test")
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_pdf_empty_summary():
    pdf = generate_payroll_summary_pdf(build_payroll_summary([]))
    assert pdf.startswith(b"%PDF")


def test_pdf_person_rows_show_other_hours():
    records = make_records()
    records[0].position = None
    rows = person_rows(build_payroll_summary(records))

    other = PERSON_HEADER.index("Other")
    assert PERSON_HEADER[other + 1] == "Total"
    header, alice, bob, totals = rows
    assert alice[0] == "Alice Test"
    assert alice[other] == "5.00 h"
    assert alice[other + 1] == "5.00 h"
    assert bob[other] == "–"
    assert totals[other] == "5.00 h"
    assert totals[other + 1] == "9.50 h"
