"""Excel export of payroll summaries and the hours behind them."""
from __future__ import annotations

import io
from typing import Any, Iterable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from app.services.payroll_service import PayrollSummary
from app.services.validation_service import as_utc, restaurant_tz, worked_hours
from app.utils.positions import CATEGORIES, CATEGORY_LABELS, POSITION_CONFIGS

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill("solid", fgColor="1E3A5F")
TOTAL_FONT = Font(bold=True)
CENTER = Alignment(horizontal="center", vertical="center")

SUMMARY_HEADERS = (
    ["Username", "Name", "Shifts"]
    + [f"{CATEGORY_LABELS[c]} (h)" for c in CATEGORIES]
    + ["Other (h)", "Total (h)", "Hourly rate", "Salary"]
)
DETAIL_HEADERS = [
    "Date", "Shift", "Start", "End", "Username", "Name", "Position", "Category",
    "Clock in", "Clock out", "Hours", "Validated",
]


def _write_header(ws, headers: list[str]) -> None:
    for idx, label in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=idx, value=label)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
    ws.freeze_panes = "A2"


def _fit_columns(ws) -> None:
    for column_cells in ws.columns:
        width = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
        ws.column_dimensions[get_column_letter(column_cells[0].column)].width = min(max(width + 2, 10), 40)


def _local(value):
    # Excel has no timezone support
    value = as_utc(value)
    if value is None:
        return None
    return value.astimezone(restaurant_tz()).replace(tzinfo=None)


def write_summary_sheet(ws, summary: PayrollSummary) -> None:
    ws.title = "Summary"
    _write_header(ws, SUMMARY_HEADERS)

    row = 2
    for line in summary.lines:
        values = (
            [line.username, line.full_name, line.shift_count]
            + [line.hours_by_category[c] for c in CATEGORIES]
            + [line.uncategorized_hours, line.total_hours, line.hourly_rate, line.total_salary]
        )
        for col, value in enumerate(values, start=1):
            ws.cell(row=row, column=col, value=value)
        row += 1

    totals = (
        ["Total", "", sum(l.shift_count for l in summary.lines)]
        + [summary.hours_by_category[c] for c in CATEGORIES]
        + [round(sum(l.uncategorized_hours for l in summary.lines), 2), summary.total_hours, "", summary.total_salary]
    )
    for col, value in enumerate(totals, start=1):
        ws.cell(row=row, column=col, value=value).font = TOTAL_FONT
    _fit_columns(ws)


def write_detail_sheet(ws, assignments: Iterable[Any]) -> None:
    ws.title = "Hours"
    _write_header(ws, DETAIL_HEADERS)

    for row, a in enumerate(assignments, start=2):
        position = POSITION_CONFIGS.get(a.position or "")
        values = [
            a.shift.date,
            a.shift.title,
            a.shift.start_time,
            a.shift.end_time,
            a.user.username,
            a.user.full_name,
            position.label if position else a.position,
            CATEGORY_LABELS[position.category] if position else None,
            _local(a.clock_in),
            _local(a.clock_out),
            worked_hours(a.clock_in, a.clock_out),
            "yes" if a.validated else "no",
        ]
        for col, value in enumerate(values, start=1):
            ws.cell(row=row, column=col, value=value)
    _fit_columns(ws)


def build_payroll_workbook(summary: PayrollSummary, assignments: Iterable[Any]) -> Workbook:
    wb = Workbook()
    write_summary_sheet(wb.active, summary)
    write_detail_sheet(wb.create_sheet(), assignments)
    return wb


def payroll_workbook_bytes(summary: PayrollSummary, assignments: Iterable[Any]) -> bytes:
    buf = io.BytesIO()
    build_payroll_workbook(summary, assignments).save(buf)
    return buf.getvalue()
