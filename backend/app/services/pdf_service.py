"""
PDF payroll summary for a period.
Returns bytes – nothing is written to disk.
"""
from __future__ import annotations

import io
from datetime import datetime, timezone

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, HRFlowable

from app.core.config import settings
from app.services.payroll_service import PayrollSummary
from app.utils.positions import CATEGORIES, CATEGORY_LABELS


# ── Colours (print friendly) ─────────────────────────────────────────────────

_NAVY   = colors.HexColor("#1E3A5F")   # header background
_LIGHT  = colors.HexColor("#F0F4F8")   # table zebra
_WHITE  = colors.white
_GRAY   = colors.HexColor("#6B7280")
_GRID   = colors.HexColor("#E5E7EB")


# ── Helpers ──────────────────────────────────────────────────────────────────

def _fmt_money(val: float | None) -> str:
    if val is None:
        return "–"
    return f"{val:,.2f} {settings.CURRENCY_SYMBOL}"


def _fmt_hours(val: float | None) -> str:
    if not val:
        return "–"
    return f"{val:.2f} h"


def _period_label(summary: PayrollSummary) -> str:
    start = summary.from_date.strftime("%d/%m/%Y") if summary.from_date else "…"
    end = summary.to_date.strftime("%d/%m/%Y") if summary.to_date else "…"
    return f"{start} – {end}"


# ── Tables ───────────────────────────────────────────────────────────────────

PERSON_HEADER = (
    ["Name", "Shifts"] + [CATEGORY_LABELS[c] for c in CATEGORIES] + ["Other", "Total", "Rate", "Salary"]
)


def person_rows(summary: PayrollSummary) -> list[list[str]]:
    """Header, one row per person and a totals row; category and Other columns add up to Total."""
    rows = [PERSON_HEADER]
    for line in summary.lines:
        rows.append(
            [line.full_name, str(line.shift_count)]
            + [_fmt_hours(line.hours_by_category[c]) for c in CATEGORIES]
            + [
                _fmt_hours(line.uncategorized_hours),
                _fmt_hours(line.total_hours),
                _fmt_money(line.hourly_rate),
                _fmt_money(line.total_salary),
            ]
        )
    rows.append(
        ["Total", str(sum(l.shift_count for l in summary.lines))]
        + [_fmt_hours(summary.hours_by_category[c]) for c in CATEGORIES]
        + [
            _fmt_hours(round(sum(l.uncategorized_hours for l in summary.lines), 2)),
            _fmt_hours(summary.total_hours),
            "",
            _fmt_money(summary.total_salary),
        ]
    )
    return rows


# ── Main function ────────────────────────────────────────────────────────────

def generate_payroll_summary_pdf(summary: PayrollSummary, restaurant_name: str | None = None) -> bytes:
    """Renders the payroll summary (one line per person, totals per category)."""
    restaurant_name = restaurant_name or settings.RESTAURANT_NAME

    buf = io.BytesIO()
    pagesize = landscape(A4)
    doc = SimpleDocTemplate(
        buf,
        pagesize=pagesize,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
    )

    styles = getSampleStyleSheet()
    normal = styles["Normal"]
    normal.fontName = "Helvetica"
    normal.fontSize = 9
    normal.leading = 13

    heading = ParagraphStyle(
        "heading",
        parent=normal,
        fontSize=11,
        fontName="Helvetica-Bold",
        textColor=_NAVY,
        spaceAfter=4,
    )
    small_gray = ParagraphStyle(
        "small_gray",
        parent=normal,
        fontSize=8,
        textColor=_GRAY,
    )

    story = []
    page_w = pagesize[0] - 3 * cm

    # ── Header ───────────────────────────────────────────────────────────────
    header_tbl = Table(
        [[
            Paragraph(f"<font color='white'><b>{restaurant_name} – Payroll summary</b></font>", normal),
            Paragraph(f"<font color='white'>{_period_label(summary)}</font>", normal),
        ]],
        colWidths=[page_w * 0.6, page_w * 0.4],
    )
    header_tbl.setStyle(TableStyle([
        ("BACKGROUND",    (0, 0), (-1, -1), _NAVY),
        ("ALIGN",         (1, 0), (1, 0),   "RIGHT"),
        ("TOPPADDING",    (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
        ("LEFTPADDING",   (0, 0), (-1, -1), 10),
        ("RIGHTPADDING",  (0, 0), (-1, -1), 10),
    ]))
    story.append(header_tbl)
    story.append(Spacer(1, 0.4 * cm))

    # ── Per person ───────────────────────────────────────────────────────────
    story.append(Paragraph("Validated hours per person", heading))

    rows = person_rows(summary)
    header = rows[0]
    total_idx = len(rows) - 1

    first_w = page_w * 0.22
    other_w = (page_w - first_w) / (len(header) - 1)
    lines_tbl = Table(rows, colWidths=[first_w] + [other_w] * (len(header) - 1), repeatRows=1)
    line_style = [
        ("BACKGROUND",    (0, 0),          (-1, 0),          _NAVY),
        ("TEXTCOLOR",     (0, 0),          (-1, 0),          _WHITE),
        ("FONTNAME",      (0, 0),          (-1, 0),          "Helvetica-Bold"),
        ("FONTSIZE",      (0, 0),          (-1, -1),         9),
        ("ALIGN",         (1, 0),          (-1, -1),         "RIGHT"),
        ("BACKGROUND",    (0, total_idx),  (-1, total_idx),  _LIGHT),
        ("FONTNAME",      (0, total_idx),  (-1, total_idx),  "Helvetica-Bold"),
        ("LINEABOVE",     (0, total_idx),  (-1, total_idx),  0.5, _NAVY),
        ("TOPPADDING",    (0, 0),          (-1, -1),         4),
        ("BOTTOMPADDING", (0, 0),          (-1, -1),         4),
        ("GRID",          (0, 0),          (-1, -1),         0.25, _GRID),
    ]
    if total_idx > 1:
        line_style.append(("ROWBACKGROUNDS", (0, 1), (-1, total_idx - 1), [_WHITE, _LIGHT]))
    lines_tbl.setStyle(TableStyle(line_style))
    story.append(lines_tbl)
    story.append(Spacer(1, 0.4 * cm))

    # ── Per category ─────────────────────────────────────────────────────────
    story.append(Paragraph("Totals per category", heading))

    cat_rows = [["Category", "Hours", "Salary"]]
    for c in CATEGORIES:
        cat_rows.append([
            CATEGORY_LABELS[c],
            _fmt_hours(summary.hours_by_category[c]),
            _fmt_money(summary.salary_by_category[c]),
        ])
    cat_tbl = Table(cat_rows, colWidths=[page_w * 0.4, page_w * 0.3, page_w * 0.3])
    cat_tbl.setStyle(TableStyle([
        ("BACKGROUND",     (0, 0), (-1, 0),  _NAVY),
        ("TEXTCOLOR",      (0, 0), (-1, 0),  _WHITE),
        ("FONTNAME",       (0, 0), (-1, 0),  "Helvetica-Bold"),
        ("FONTSIZE",       (0, 0), (-1, -1), 9),
        ("ALIGN",          (1, 0), (-1, -1), "RIGHT"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [_WHITE, _LIGHT]),
        ("TOPPADDING",     (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING",  (0, 0), (-1, -1), 4),
        ("GRID",           (0, 0), (-1, -1), 0.25, _GRID),
    ]))
    story.append(cat_tbl)

    if not summary.lines:
        story.append(Spacer(1, 0.3 * cm))
        story.append(Paragraph("No validated hours in this period.", small_gray))

    # ── Footer ───────────────────────────────────────────────────────────────
    story.append(Spacer(1, 0.5 * cm))
    story.append(HRFlowable(width="100%", thickness=0.5, color=_GRAY))
    story.append(Spacer(1, 0.15 * cm))
    now = datetime.now(timezone.utc).strftime("%d/%m/%Y")
    story.append(Paragraph(
        f"Generated on {now} · {restaurant_name} · validated hours only",
        small_gray,
    ))

    doc.build(story)
    return buf.getvalue()
