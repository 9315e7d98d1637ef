import logging
import uuid
from datetime import date, timedelta

from fastapi import APIRouter, HTTPException, status, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.api.deps import DB, CurrentUser, SupervisorOrManager, ROLE_STAFF
from app.models.shift import Shift, UserShift
from app.models.user import User
from app.services.personnel_service import (
    DesiredAssignment, DuplicateAssignmentError, personnel_by_category, personnel_by_position,
    plan_personnel_update,
)
from app.services.validation_service import derive_validation_status, now_local, worked_hours
from app.schemas.shift import (
    ShiftCreate, ShiftUpdate, ShiftOut, MultipleShiftCreate, AssignRequest, UnassignRequest,
    PersonnelUpdate, PersonnelUpdateResult, AssignmentOut, UserShiftOut, ShiftStatusOut, ShiftOverviewOut,
)
from app.utils.positions import category_of

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shifts", tags=["shifts"])


# ── Helpers ──────────────────────────────────────────────────────────────────

def _with_personnel():
    return selectinload(Shift.assignments).selectinload(UserShift.user)


async def _get_shift_or_404(shift_id: uuid.UUID, db, with_personnel: bool = False) -> Shift:
    query = select(Shift).where(Shift.id == shift_id)
    if with_personnel:
        query = query.options(_with_personnel())
    result = await db.execute(query)
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    return shift


async def _check_users_exist(user_ids: set[uuid.UUID], db) -> None:
    if not user_ids:
        return
    result = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    missing = user_ids - {row[0] for row in result.all()}
    if missing:
        raise HTTPException(status_code=404, detail=f"User not found: {sorted(map(str, missing))[0]}")


def _assignment_out(a: UserShift) -> AssignmentOut:
    return AssignmentOut(
        id=a.id,
        user_id=a.user_id,
        shift_id=a.shift_id,
        username=a.user.username,
        email=a.user.email,
        role=a.user.role,
        position=a.position,
        category=category_of(a.position),
        is_supervisor=a.is_supervisor,
        individual_start_time=a.individual_start_time,
        individual_end_time=a.individual_end_time,
        clock_in=a.clock_in,
        clock_out=a.clock_out,
        validated=a.validated,
        hours_worked=worked_hours(a.clock_in, a.clock_out),
    )


def _grouped_out(grouped: dict[str, list]) -> dict[str, list[AssignmentOut]]:
    return {key: [_assignment_out(a) for a in items] for key, items in grouped.items()}


def _overview(shift: Shift, by_category: bool = False, now=None) -> ShiftOverviewOut:
    state = derive_validation_status(shift, shift.assignments, now)
    grouped = personnel_by_category(shift.assignments) if by_category else personnel_by_position(shift.assignments)
    return ShiftOverviewOut(
        id=shift.id,
        title=shift.title,
        date=shift.date,
        start_time=shift.start_time,
        end_time=shift.end_time,
        created_at=shift.created_at,
        status=state.status,
        in_progress=state.in_progress,
        validated_count=state.validated_count,
        total_count=state.total_count,
        personnel=_grouped_out(grouped),
    )


# ── Shifts ───────────────────────────────────────────────────────────────────

@router.get("", response_model=list[ShiftOut])
async def list_shifts(
    current_user: CurrentUser,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
):
    query = select(Shift)
    if from_date:
        query = query.where(Shift.date >= from_date)
    if to_date:
        query = query.where(Shift.date <= to_date)

    result = await db.execute(query.order_by(Shift.date, Shift.start_time))
    return result.scalars().all()


@router.get("/week", response_model=list[ShiftOverviewOut])
async def week_overview(
    current_user: CurrentUser,
    db: DB,
    start: date | None = Query(None, description="Any day of the week; defaults to today"),
):
    """Seven days starting on Monday, each shift with its personnel and validation status."""
    day = start or now_local().date()
    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)

    result = await db.execute(
        select(Shift)
        .options(_with_personnel())
        .where(Shift.date >= monday, Shift.date <= sunday)
        .order_by(Shift.date, Shift.start_time)
    )
    now = now_local()
    return [_overview(s, now=now) for s in result.scalars().all()]


@router.post("", response_model=ShiftOut, status_code=status.HTTP_201_CREATED)
async def create_shift(payload: ShiftCreate, current_user: SupervisorOrManager, db: DB):
    shift = Shift(**payload.model_dump())
    db.add(shift)
    await db.commit()
    await db.refresh(shift)
    logger.info("Shift %s created by %s", shift.id, current_user.username)
    return shift


@router.post("/multiple", response_model=list[ShiftOut], status_code=status.HTTP_201_CREATED)
async def create_multiple_shifts(payload: MultipleShiftCreate, current_user: SupervisorOrManager, db: DB):
    """Create several shifts, each with its initial staff, in one transaction."""
    all_user_ids: set[uuid.UUID] = set()
    for item in payload.shifts:
        ids = [a.user_id for a in item.assigned_users]
        if len(ids) != len(set(ids)):
            raise HTTPException(status_code=400, detail=f"A user is assigned twice to shift '{item.title}'")
        all_user_ids.update(ids)
    await _check_users_exist(all_user_ids, db)

    shifts = []
    for item in payload.shifts:
        shift = Shift(
            title=item.title,
            date=item.date,
            start_time=item.start_time,
            end_time=item.end_time,
        )
        shift.assignments = [UserShift(**a.model_dump()) for a in item.assigned_users]
        db.add(shift)
        shifts.append(shift)

    await db.commit()
    for s in shifts:
        await db.refresh(s)
    logger.info("%d shifts created by %s", len(shifts), current_user.username)
    return shifts


@router.get("/user/{user_id}", response_model=list[UserShiftOut])
async def get_user_shifts(
    user_id: uuid.UUID,
    current_user: CurrentUser,
    db: DB,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
):
    """Planning of one user. Staff can only read their own."""
    if current_user.role == ROLE_STAFF and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only view your own shifts")

    query = (
        select(UserShift, Shift)
        .join(Shift, UserShift.shift_id == Shift.id)
        .where(UserShift.user_id == user_id)
    )
    if from_date:
        query = query.where(Shift.date >= from_date)
    if to_date:
        query = query.where(Shift.date <= to_date)

    result = await db.execute(query.order_by(Shift.date, Shift.start_time))
    return [
        UserShiftOut(
            user_shift_id=us.id,
            shift_id=shift.id,
            title=shift.title,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            position=us.position,
            is_supervisor=us.is_supervisor,
            individual_start_time=us.individual_start_time,
            individual_end_time=us.individual_end_time,
            clock_in=us.clock_in,
            clock_out=us.clock_out,
            validated=us.validated,
        )
        for us, shift in result.all()
    ]


@router.post("/assign", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
async def assign_user(payload: AssignRequest, current_user: SupervisorOrManager, db: DB):
    await _get_shift_or_404(payload.shift_id, db)
    user = await db.get(User, payload.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    existing = await db.execute(
        select(UserShift.id).where(
            UserShift.user_id == payload.user_id,
            UserShift.shift_id == payload.shift_id,
        )
    )
    if existing.first():
        raise HTTPException(status_code=409, detail="User is already assigned to this shift")

    assignment = UserShift(**payload.model_dump())
    db.add(assignment)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="User is already assigned to this shift")

    result = await db.execute(
        select(UserShift).options(selectinload(UserShift.user)).where(UserShift.id == assignment.id)
    )
    return _assignment_out(result.scalar_one())


@router.post("/unassign", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_user(payload: UnassignRequest, current_user: SupervisorOrManager, db: DB):
    result = await db.execute(
        select(UserShift).where(
            UserShift.user_id == payload.user_id,
            UserShift.shift_id == payload.shift_id,
        )
    )
    assignment = result.scalar_one_or_none()
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if assignment.has_clocked:
        raise HTTPException(status_code=400, detail="Cannot unassign a user who already clocked on this shift")

    await db.delete(assignment)
    await db.commit()


@router.get("/{shift_id}", response_model=ShiftOverviewOut)
async def get_shift(shift_id: uuid.UUID, current_user: CurrentUser, db: DB):
    shift = await _get_shift_or_404(shift_id, db, with_personnel=True)
    return _overview(shift)


@router.put("/{shift_id}", response_model=ShiftOut)
async def update_shift(shift_id: uuid.UUID, payload: ShiftUpdate, current_user: SupervisorOrManager, db: DB):
    shift = await _get_shift_or_404(shift_id, db)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(shift, field, value)

    await db.commit()
    await db.refresh(shift)
    return shift


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift(shift_id: uuid.UUID, current_user: SupervisorOrManager, db: DB):
    shift = await _get_shift_or_404(shift_id, db)
    await db.delete(shift)
    await db.commit()
    logger.info("Shift %s deleted by %s", shift_id, current_user.username)


# ── Personnel ────────────────────────────────────────────────────────────────

@router.get("/{shift_id}/personnel", response_model=dict[str, list[AssignmentOut]])
async def get_personnel(shift_id: uuid.UUID, current_user: CurrentUser, db: DB):
    """Staff of a shift keyed by position; every position is present."""
    shift = await _get_shift_or_404(shift_id, db, with_personnel=True)
    return _grouped_out(personnel_by_position(shift.assignments))


@router.put("/{shift_id}/personnel", response_model=PersonnelUpdateResult)
async def update_personnel(
    shift_id: uuid.UUID, payload: PersonnelUpdate, current_user: SupervisorOrManager, db: DB
):
    """
    Replace the staff of a shift with the given roster.

    Users who already clocked on the shift stay assigned even when they are
    left out of the roster.
    """
    shift = await _get_shift_or_404(shift_id, db, with_personnel=True)

    desired = [
        DesiredAssignment(
            user_id=member.user_id,
            position=position,
            is_supervisor=member.is_supervisor,
            individual_start_time=member.individual_start_time,
            individual_end_time=member.individual_end_time,
        )
        for position, members in payload.personnel.items()
        for member in members
    ]
    try:
        plan = plan_personnel_update(shift.assignments, desired)
    except DuplicateAssignmentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await _check_users_exist({d.user_id for d in plan.to_add}, db)

    for assignment in plan.to_remove:
        shift.assignments.remove(assignment)
    for assignment, target in plan.to_update:
        assignment.position = target.position
        assignment.is_supervisor = target.is_supervisor
        assignment.individual_start_time = target.individual_start_time
        assignment.individual_end_time = target.individual_end_time
    for target in plan.to_add:
        db.add(UserShift(
            shift_id=shift.id,
            user_id=target.user_id,
            position=target.position,
            is_supervisor=target.is_supervisor,
            individual_start_time=target.individual_start_time,
            individual_end_time=target.individual_end_time,
        ))

    await db.commit()
    if plan.kept_with_hours:
        logger.info(
            "Shift %s: kept %d clocked assignment(s) missing from the new roster",
            shift_id, len(plan.kept_with_hours),
        )

    return PersonnelUpdateResult(
        added=len(plan.to_add),
        updated=len(plan.to_update),
        removed=len(plan.to_remove),
        kept_with_hours=len(plan.kept_with_hours),
    )


@router.get("/{shift_id}/details", response_model=ShiftOverviewOut)
async def get_shift_details(shift_id: uuid.UUID, current_user: CurrentUser, db: DB):
    """Shift with its staff keyed by category (kitchen, dining room, bar)."""
    shift = await _get_shift_or_404(shift_id, db, with_personnel=True)
    return _overview(shift, by_category=True)


@router.get("/{shift_id}/status", response_model=ShiftStatusOut)
async def get_shift_status(shift_id: uuid.UUID, current_user: CurrentUser, db: DB):
    shift = await _get_shift_or_404(shift_id, db, with_personnel=True)
    state = derive_validation_status(shift, shift.assignments)
    return ShiftStatusOut(
        shift_id=shift.id,
        status=state.status,
        in_progress=state.in_progress,
        validated_count=state.validated_count,
        total_count=state.total_count,
    )
