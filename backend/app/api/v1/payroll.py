"""
Payroll API – validated hours and salaries over a period, with Excel and PDF exports.
"""
import uuid
from datetime import date

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from app.api.deps import DB, ManagerUser
from app.core.config import settings
from app.schemas.payroll import PayrollSummaryOut
from app.services.export_service import payroll_workbook_bytes
from app.services.payroll_service import PayrollService, build_payroll_summary
from app.services.pdf_service import generate_payroll_summary_pdf

router = APIRouter(prefix="/payroll", tags=["payroll"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _check_period(from_date: date | None, to_date: date | None) -> None:
    if from_date and to_date and from_date > to_date:
        raise HTTPException(status_code=400, detail="from_date must be on or before to_date")


def _filename(prefix: str, from_date: date | None, to_date: date | None, ext: str) -> str:
    parts = [prefix]
    if from_date:
        parts.append(from_date.isoformat())
    if to_date:
        parts.append(to_date.isoformat())
    return "-".join(parts) + f".{ext}"


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.get("/summary", response_model=PayrollSummaryOut)
async def payroll_summary(
    current_user: ManagerUser,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    user_id: uuid.UUID | None = Query(None),
):
    """Validated hours per person and per category (kitchen, dining room, bar)."""
    _check_period(from_date, to_date)
    return await PayrollService(db).summary(from_date, to_date, user_id)


@router.get("/export.xlsx")
async def export_payroll_xlsx(
    current_user: ManagerUser,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    include_unvalidated: bool = Query(False, description="List unvalidated hours on the detail sheet"),
):
    """Workbook with the summary sheet and every clocked record behind it."""
    _check_period(from_date, to_date)
    service = PayrollService(db)
    assignments = await service.load_assignments(from_date, to_date, validated_only=not include_unvalidated)
    summary = build_payroll_summary(assignments, from_date, to_date)

    content = payroll_workbook_bytes(summary, assignments)
    return _download(content, XLSX_MEDIA_TYPE, _filename("payroll", from_date, to_date, "xlsx"))


@router.get("/summary.pdf")
async def export_payroll_pdf(
    current_user: ManagerUser,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
):
    _check_period(from_date, to_date)
    summary = await PayrollService(db).summary(from_date, to_date)

    content = generate_payroll_summary_pdf(summary, settings.RESTAURANT_NAME)
    return _download(content, "application/pdf", _filename("payroll", from_date, to_date, "pdf"))
