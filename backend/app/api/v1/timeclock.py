"""
Timeclock API – clock-in/out, hour validation, corrections and salary rows.

Every validation and every manual correction leaves an HoursAudit row written
in the same transaction as the change.
"""
import logging
import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.api.deps import DB, CurrentUser, ManagerUser, SupervisorOrManager, ROLE_MANAGER
from app.models.audit import HoursAudit
from app.models.shift import Shift, UserShift
from app.services.payroll_service import shift_salary_rows
from app.services.validation_service import (
    as_utc, derive_validation_status, format_duration, group_hours_by_date, now_local, worked_duration, worked_hours,
)
from app.schemas.timeclock import (
    ClockRequest, ValidateRequest, ValidateShiftRequest, ValidateShiftResult, UpdateHoursRequest,
    UserShiftStateOut, HoursRecordOut, DayHoursGroupOut, ShiftHoursGroupOut, SupervisorShiftOut,
    SalaryRowOut, HoursAuditOut,
)
from app.utils.positions import category_of

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timeclock", tags=["timeclock"])

ACTION_VALIDATE = "VALIDATE"
ACTION_REVALIDATE = "REVALIDATE"
ACTION_UPDATE_HOURS = "UPDATE_HOURS"


# ── Helpers ──────────────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_user_and_shift():
    return (selectinload(UserShift.user), selectinload(UserShift.shift))


async def _own_assignment(current_user, shift_id: uuid.UUID, db) -> UserShift:
    result = await db.execute(
        select(UserShift).where(UserShift.user_id == current_user.id, UserShift.shift_id == shift_id)
    )
    assignment = result.scalar_one_or_none()
    if not assignment:
        raise HTTPException(status_code=404, detail="You are not assigned to this shift")
    return assignment


async def _get_assignment_or_404(user_shift_id: uuid.UUID, db) -> UserShift:
    result = await db.execute(
        select(UserShift).options(*_with_user_and_shift()).where(UserShift.id == user_shift_id)
    )
    assignment = result.scalar_one_or_none()
    if not assignment:
        raise HTTPException(status_code=404, detail="Hours record not found")
    return assignment


async def _assigned_shift_ids(user, db) -> set[uuid.UUID] | None:
    """Shifts a supervisor may act on; None means no restriction (manager)."""
    if user.role == ROLE_MANAGER:
        return None
    result = await db.execute(select(UserShift.shift_id).where(UserShift.user_id == user.id))
    return {row[0] for row in result.all()}


async def _require_shift_access(user, shift_id: uuid.UUID, db) -> None:
    allowed = await _assigned_shift_ids(user, db)
    if allowed is not None and shift_id not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Supervisors can only manage hours of shifts they are assigned to",
        )


def _record_out(a: UserShift) -> HoursRecordOut:
    return HoursRecordOut(
        user_shift_id=a.id,
        user_id=a.user_id,
        shift_id=a.shift_id,
        username=a.user.username,
        first_name=a.user.first_name,
        last_name=a.user.last_name,
        title=a.shift.title,
        date=a.shift.date,
        start_time=a.shift.start_time,
        end_time=a.shift.end_time,
        position=a.position,
        category=category_of(a.position),
        is_supervisor=a.is_supervisor,
        clock_in=a.clock_in,
        clock_out=a.clock_out,
        hours_worked=worked_hours(a.clock_in, a.clock_out),
        duration=format_duration(worked_duration(a.clock_in, a.clock_out)),
        validated=a.validated,
        validated_by=a.validated_by,
        validated_at=a.validated_at,
        comment=a.comment,
    )


def _hours_query(from_date: date | None, to_date: date | None, shift_ids: set | None = None):
    query = (
        select(UserShift)
        .join(Shift, UserShift.shift_id == Shift.id)
        .options(*_with_user_and_shift())
        .where(UserShift.clock_in.isnot(None), UserShift.clock_out.isnot(None))
    )
    if from_date:
        query = query.where(Shift.date >= from_date)
    if to_date:
        query = query.where(Shift.date <= to_date)
    if shift_ids is not None:
        query = query.where(UserShift.shift_id.in_(shift_ids))
    return query.order_by(Shift.date.desc(), Shift.start_time, UserShift.position)


def _mark_validated(assignment: UserShift, validator, comment: str | None, now: datetime) -> HoursAudit:
    action = ACTION_REVALIDATE if assignment.validated else ACTION_VALIDATE
    audit = HoursAudit(
        user_shift_id=assignment.id,
        modified_by=validator.id,
        action=action,
        old_clock_in=assignment.clock_in,
        new_clock_in=assignment.clock_in,
        old_clock_out=assignment.clock_out,
        new_clock_out=assignment.clock_out,
        old_validated=assignment.validated,
        new_validated=True,
        reason=comment,
    )
    assignment.validated = True
    assignment.validated_by = validator.id
    assignment.validated_at = now
    assignment.comment = comment
    return audit


# ── Clocking ─────────────────────────────────────────────────────────────────

@router.post("/clock-in", response_model=UserShiftStateOut)
async def clock_in(payload: ClockRequest, current_user: CurrentUser, db: DB):
    assignment = await _own_assignment(current_user, payload.shift_id, db)
    if assignment.clock_in is not None:
        raise HTTPException(status_code=400, detail="Already clocked in for this shift")

    assignment.clock_in = _utcnow()
    await db.commit()
    await db.refresh(assignment)
    logger.info("User %s clocked in on shift %s", current_user.username, payload.shift_id)
    return assignment


@router.post("/clock-out", response_model=UserShiftStateOut)
async def clock_out(payload: ClockRequest, current_user: CurrentUser, db: DB):
    assignment = await _own_assignment(current_user, payload.shift_id, db)
    if assignment.clock_in is None:
        raise HTTPException(status_code=400, detail="You must clock in before clocking out")
    if assignment.clock_out is not None:
        raise HTTPException(status_code=400, detail="Already clocked out for this shift")

    assignment.clock_out = _utcnow()
    await db.commit()
    await db.refresh(assignment)
    logger.info("User %s clocked out on shift %s", current_user.username, payload.shift_id)
    return assignment


# ── Validation ───────────────────────────────────────────────────────────────

@router.post("/validate", response_model=UserShiftStateOut)
async def validate_hours(payload: ValidateRequest, current_user: SupervisorOrManager, db: DB):
    """Validate one hours record. Validating again is recorded as REVALIDATE."""
    assignment = await _get_assignment_or_404(payload.user_shift_id, db)
    await _require_shift_access(current_user, assignment.shift_id, db)

    if assignment.clock_in is None or assignment.clock_out is None:
        raise HTTPException(status_code=400, detail="Cannot validate a record without clock-in and clock-out")

    db.add(_mark_validated(assignment, current_user, payload.comment, _utcnow()))
    await db.commit()
    await db.refresh(assignment)
    logger.info("Hours %s validated by %s", assignment.id, current_user.username)
    return assignment


@router.post("/validate-shift", response_model=ValidateShiftResult)
async def validate_shift(payload: ValidateShiftRequest, current_user: SupervisorOrManager, db: DB):
    """Validate every clocked, not yet validated record of a shift."""
    result = await db.execute(
        select(Shift).options(selectinload(Shift.assignments)).where(Shift.id == payload.shift_id)
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    await _require_shift_access(current_user, shift.id, db)

    now = _utcnow()
    validated = already = not_clocked = 0
    for assignment in shift.assignments:
        if assignment.clock_in is None or assignment.clock_out is None:
            not_clocked += 1
        elif assignment.validated:
            already += 1
        else:
            db.add(_mark_validated(assignment, current_user, payload.comment, now))
            validated += 1

    await db.commit()
    logger.info("Shift %s: %d record(s) validated by %s", shift.id, validated, current_user.username)
    return ValidateShiftResult(
        shift_id=shift.id,
        validated=validated,
        already_validated=already,
        not_clocked=not_clocked,
    )


@router.put("/update-hours", response_model=UserShiftStateOut)
async def update_hours(payload: UpdateHoursRequest, current_user: SupervisorOrManager, db: DB):
    """Correct clock times. The record goes back to unvalidated."""
    assignment = await _get_assignment_or_404(payload.user_shift_id, db)
    await _require_shift_access(current_user, assignment.shift_id, db)

    # stored as UTC instants; naive input is taken as UTC
    new_in, new_out = as_utc(payload.clock_in), as_utc(payload.clock_out)

    db.add(HoursAudit(
        user_shift_id=assignment.id,
        modified_by=current_user.id,
        action=ACTION_UPDATE_HOURS,
        old_clock_in=assignment.clock_in,
        new_clock_in=new_in,
        old_clock_out=assignment.clock_out,
        new_clock_out=new_out,
        old_validated=assignment.validated,
        new_validated=False,
        reason=payload.reason,
    ))
    assignment.clock_in = new_in
    assignment.clock_out = new_out
    assignment.validated = False
    assignment.validated_by = None
    assignment.validated_at = None
    assignment.comment = None

    await db.commit()
    await db.refresh(assignment)
    logger.info("Hours %s corrected by %s", assignment.id, current_user.username)
    return assignment


# ── Listings ─────────────────────────────────────────────────────────────────

@router.get("/unvalidated", response_model=list[HoursRecordOut])
async def list_unvalidated(current_user: SupervisorOrManager, db: DB):
    shift_ids = await _assigned_shift_ids(current_user, db)
    query = _hours_query(None, None, shift_ids).where(UserShift.validated == False)  # noqa: E712
    result = await db.execute(query)
    return [_record_out(a) for a in result.scalars().all()]


@router.get("/all-hours", response_model=list[HoursRecordOut])
async def list_all_hours(
    current_user: ManagerUser,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    user_id: uuid.UUID | None = Query(None),
):
    query = _hours_query(from_date, to_date)
    if user_id:
        query = query.where(UserShift.user_id == user_id)
    result = await db.execute(query)
    return [_record_out(a) for a in result.scalars().all()]


@router.get("/grouped", response_model=list[DayHoursGroupOut])
async def list_grouped_hours(
    current_user: SupervisorOrManager,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    pending_only: bool = Query(False),
):
    """Clocked hours grouped by date (newest first) and shift, each shift with its status."""
    shift_ids = await _assigned_shift_ids(current_user, db)
    result = await db.execute(_hours_query(from_date, to_date, shift_ids))
    records = [_record_out(a) for a in result.scalars().all()]

    days = []
    for day in group_hours_by_date(records, now_local()):
        shifts = [
            ShiftHoursGroupOut(
                shift_id=g.shift_id,
                title=g.title,
                date=g.date,
                start_time=g.start_time,
                end_time=g.end_time,
                status=g.status,
                validated_count=g.validated_count,
                total_count=g.total_count,
                records=g.records,
            )
            for g in day.shifts
            if not pending_only or g.validated_count < g.total_count
        ]
        if shifts:
            days.append(DayHoursGroupOut(date=day.date, shifts=shifts))
    return days


@router.get("/supervisor-shifts/{user_id}", response_model=list[SupervisorShiftOut])
async def list_supervisor_shifts(
    user_id: uuid.UUID,
    current_user: SupervisorOrManager,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
):
    """Shifts a supervisor works on, with their validation status."""
    if current_user.role != ROLE_MANAGER and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only list your own shifts")

    query = (
        select(Shift)
        .join(UserShift, UserShift.shift_id == Shift.id)
        .options(selectinload(Shift.assignments))
        .where(UserShift.user_id == user_id)
    )
    if from_date:
        query = query.where(Shift.date >= from_date)
    if to_date:
        query = query.where(Shift.date <= to_date)

    result = await db.execute(query.order_by(Shift.date.desc(), Shift.start_time))
    now = now_local()
    out = []
    for shift in result.scalars().unique().all():
        state = derive_validation_status(shift, shift.assignments, now)
        out.append(SupervisorShiftOut(
            shift_id=shift.id,
            title=shift.title,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            status=state.status,
            in_progress=state.in_progress,
        ))
    return out


@router.get("/shift-salaries/{shift_id}", response_model=list[SalaryRowOut])
async def get_shift_salaries(
    shift_id: uuid.UUID,
    current_user: CurrentUser,
    db: DB,
    validated_only: bool = Query(False),
):
    """Worked hours per person on a shift; rate and salary only for managers or one's own row."""
    result = await db.execute(
        select(Shift)
        .options(selectinload(Shift.assignments).selectinload(UserShift.user))
        .where(Shift.id == shift_id)
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")

    return shift_salary_rows(shift.assignments, current_user.id, current_user.role, validated_only)


@router.get("/audit/{user_shift_id}", response_model=list[HoursAuditOut])
async def get_hours_audit(user_shift_id: uuid.UUID, current_user: SupervisorOrManager, db: DB):
    assignment = await _get_assignment_or_404(user_shift_id, db)
    await _require_shift_access(current_user, assignment.shift_id, db)

    result = await db.execute(
        select(HoursAudit)
        .where(HoursAudit.user_shift_id == user_shift_id)
        .order_by(HoursAudit.created_at.desc())
    )
    return result.scalars().all()
