"""
Availability API – staff declare they cannot work a shift, colleagues offer
to cover, managers decide.
"""
import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.api.deps import DB, CurrentUser, ManagerUser
from app.models.availability import ShiftReplacement, ShiftUnavailability
from app.models.shift import Shift, UserShift
from app.schemas.availability import (
    UnavailabilityCreate, UnavailabilityOut, OpenShiftOut, ReplacementCreate, ReplacementDecision, ReplacementOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


def _unavailability_out(u: ShiftUnavailability) -> UnavailabilityOut:
    return UnavailabilityOut(
        id=u.id,
        user_id=u.user_id,
        shift_id=u.shift_id,
        reason=u.reason,
        created_at=u.created_at,
        title=u.shift.title,
        date=u.shift.date,
        start_time=u.shift.start_time,
        end_time=u.shift.end_time,
    )


def _replacement_out(r: ShiftReplacement) -> ReplacementOut:
    return ReplacementOut(
        id=r.id,
        shift_id=r.shift_id,
        title=r.shift.title,
        date=r.shift.date,
        start_time=r.shift.start_time,
        end_time=r.shift.end_time,
        original_user_id=r.original_user_id,
        original_username=r.original_user.username,
        replacement_user_id=r.replacement_user_id,
        replacement_username=r.replacement_user.username,
        status=r.status,
        decided_by=r.decided_by,
        decided_at=r.decided_at,
        created_at=r.created_at,
    )


def _replacement_query():
    return select(ShiftReplacement).options(
        selectinload(ShiftReplacement.shift),
        selectinload(ShiftReplacement.original_user),
        selectinload(ShiftReplacement.replacement_user),
    )


async def _get_assignment(db, user_id: uuid.UUID, shift_id: uuid.UUID) -> UserShift | None:
    result = await db.execute(
        select(UserShift).where(UserShift.user_id == user_id, UserShift.shift_id == shift_id)
    )
    return result.scalar_one_or_none()


async def _get_unavailability(db, user_id: uuid.UUID, shift_id: uuid.UUID) -> ShiftUnavailability | None:
    result = await db.execute(
        select(ShiftUnavailability).where(
            ShiftUnavailability.user_id == user_id,
            ShiftUnavailability.shift_id == shift_id,
        )
    )
    return result.scalar_one_or_none()


async def _load_replacement(db, replacement_id: uuid.UUID) -> ShiftReplacement:
    result = await db.execute(_replacement_query().where(ShiftReplacement.id == replacement_id))
    replacement = result.scalar_one_or_none()
    if not replacement:
        raise HTTPException(status_code=404, detail="Replacement not found")
    return replacement


# ── Unavailability ───────────────────────────────────────────────────────────

@router.post("/unavailable", response_model=UnavailabilityOut, status_code=status.HTTP_201_CREATED)
async def declare_unavailable(payload: UnavailabilityCreate, current_user: CurrentUser, db: DB):
    assignment = await _get_assignment(db, current_user.id, payload.shift_id)
    if not assignment:
        raise HTTPException(status_code=404, detail="You are not assigned to this shift")
    if assignment.has_clocked:
        raise HTTPException(status_code=400, detail="You already clocked on this shift")
    if await _get_unavailability(db, current_user.id, payload.shift_id):
        raise HTTPException(status_code=409, detail="Unavailability already declared for this shift")

    unavailability = ShiftUnavailability(
        user_id=current_user.id,
        shift_id=payload.shift_id,
        reason=payload.reason,
    )
    db.add(unavailability)
    await db.commit()

    result = await db.execute(
        select(ShiftUnavailability)
        .options(selectinload(ShiftUnavailability.shift))
        .where(ShiftUnavailability.id == unavailability.id)
    )
    logger.info("User %s unavailable for shift %s", current_user.username, payload.shift_id)
    return _unavailability_out(result.scalar_one())


@router.get("/unavailable/mine", response_model=list[UnavailabilityOut])
async def list_my_unavailabilities(current_user: CurrentUser, db: DB):
    result = await db.execute(
        select(ShiftUnavailability)
        .join(Shift, ShiftUnavailability.shift_id == Shift.id)
        .options(selectinload(ShiftUnavailability.shift))
        .where(ShiftUnavailability.user_id == current_user.id)
        .order_by(Shift.date, Shift.start_time)
    )
    return [_unavailability_out(u) for u in result.scalars().all()]


@router.delete("/unavailable/{unavailability_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_unavailability(unavailability_id: uuid.UUID, current_user: CurrentUser, db: DB):
    """Withdraw one's own unavailability; pending offers to cover it are rejected."""
    unavailability = await db.get(ShiftUnavailability, unavailability_id)
    if not unavailability or unavailability.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Unavailability not found")

    pending = await db.execute(
        select(ShiftReplacement).where(
            ShiftReplacement.shift_id == unavailability.shift_id,
            ShiftReplacement.original_user_id == unavailability.user_id,
            ShiftReplacement.status == STATUS_PENDING,
        )
    )
    now = datetime.now(timezone.utc)
    for replacement in pending.scalars().all():
        replacement.status = STATUS_REJECTED
        replacement.decided_by = current_user.id
        replacement.decided_at = now
    await db.delete(unavailability)
    await db.commit()


@router.get("/open-shifts", response_model=list[OpenShiftOut])
async def list_open_shifts(current_user: CurrentUser, db: DB):
    """Shifts a colleague cannot work, excluding the caller's own and shifts the caller already works."""
    working = select(UserShift.shift_id).where(UserShift.user_id == current_user.id)
    result = await db.execute(
        select(ShiftUnavailability, UserShift)
        .join(Shift, ShiftUnavailability.shift_id == Shift.id)
        .join(
            UserShift,
            (UserShift.shift_id == ShiftUnavailability.shift_id)
            & (UserShift.user_id == ShiftUnavailability.user_id),
        )
        .options(selectinload(ShiftUnavailability.shift), selectinload(ShiftUnavailability.user))
        .where(
            ShiftUnavailability.user_id != current_user.id,
            ShiftUnavailability.shift_id.not_in(working),
        )
        .order_by(Shift.date, Shift.start_time)
    )
    return [
        OpenShiftOut(
            unavailability_id=u.id,
            shift_id=u.shift_id,
            title=u.shift.title,
            date=u.shift.date,
            start_time=u.shift.start_time,
            end_time=u.shift.end_time,
            position=assignment.position,
            original_user_id=u.user_id,
            original_username=u.user.username,
            reason=u.reason,
        )
        for u, assignment in result.all()
    ]


# ── Replacements ─────────────────────────────────────────────────────────────

@router.post("/replacements", response_model=ReplacementOut, status_code=status.HTTP_201_CREATED)
async def propose_replacement(payload: ReplacementCreate, current_user: CurrentUser, db: DB):
    if payload.original_user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot replace yourself")
    if not await _get_unavailability(db, payload.original_user_id, payload.shift_id):
        raise HTTPException(status_code=404, detail="No open unavailability for this shift and user")
    if await _get_assignment(db, current_user.id, payload.shift_id):
        raise HTTPException(status_code=400, detail="You already work on this shift")

    result = await db.execute(
        select(ShiftReplacement).where(
            ShiftReplacement.shift_id == payload.shift_id,
            ShiftReplacement.original_user_id == payload.original_user_id,
            ShiftReplacement.replacement_user_id == current_user.id,
        )
    )
    existing = result.scalars().first()
    if existing and existing.status == STATUS_PENDING:
        raise HTTPException(status_code=409, detail="You already offered to replace on this shift")

    if existing and existing.status == STATUS_REJECTED:
        # a rejected offer is re-opened instead of duplicated
        existing.status = STATUS_PENDING
        existing.decided_by = None
        existing.decided_at = None
        replacement = existing
    else:
        replacement = ShiftReplacement(
            shift_id=payload.shift_id,
            original_user_id=payload.original_user_id,
            replacement_user_id=current_user.id,
        )
        db.add(replacement)

    await db.commit()
    return _replacement_out(await _load_replacement(db, replacement.id))


@router.get("/replacements/mine", response_model=list[ReplacementOut])
async def list_my_replacements(current_user: CurrentUser, db: DB):
    result = await db.execute(
        _replacement_query()
        .where(ShiftReplacement.replacement_user_id == current_user.id)
        .order_by(ShiftReplacement.created_at.desc())
    )
    return [_replacement_out(r) for r in result.scalars().all()]


@router.get("/replacements/pending", response_model=list[ReplacementOut])
async def list_pending_replacements(current_user: ManagerUser, db: DB):
    result = await db.execute(
        _replacement_query()
        .where(ShiftReplacement.status == STATUS_PENDING)
        .order_by(ShiftReplacement.created_at)
    )
    return [_replacement_out(r) for r in result.scalars().all()]


@router.get("/replacements/history", response_model=list[ReplacementOut])
async def list_replacement_history(current_user: ManagerUser, db: DB):
    result = await db.execute(
        _replacement_query()
        .where(ShiftReplacement.status != STATUS_PENDING)
        .order_by(ShiftReplacement.decided_at.desc())
    )
    return [_replacement_out(r) for r in result.scalars().all()]


@router.post("/replacements/{replacement_id}/decision", response_model=ReplacementOut)
async def decide_replacement(
    replacement_id: uuid.UUID, payload: ReplacementDecision, current_user: ManagerUser, db: DB
):
    """
    Approve or reject an offer.

    Approval hands the original assignment over to the replacement, rejects
    the competing offers and closes the unavailability, all in one commit.
    """
    replacement = await _load_replacement(db, replacement_id)
    if replacement.status != STATUS_PENDING:
        raise HTTPException(status_code=400, detail=f"Replacement already {replacement.status}")

    now = datetime.now(timezone.utc)
    if payload.approve:
        assignment = await _get_assignment(db, replacement.original_user_id, replacement.shift_id)
        if not assignment:
            raise HTTPException(status_code=400, detail="The original assignment no longer exists")
        if await _get_assignment(db, replacement.replacement_user_id, replacement.shift_id):
            raise HTTPException(status_code=409, detail="Replacement user already works on this shift")

        assignment.user_id = replacement.replacement_user_id

        others = await db.execute(
            select(ShiftReplacement).where(
                ShiftReplacement.shift_id == replacement.shift_id,
                ShiftReplacement.original_user_id == replacement.original_user_id,
                ShiftReplacement.status == STATUS_PENDING,
                ShiftReplacement.id != replacement.id,
            )
        )
        for other in others.scalars().all():
            other.status = STATUS_REJECTED
            other.decided_by = current_user.id
            other.decided_at = now

        unavailability = await _get_unavailability(db, replacement.original_user_id, replacement.shift_id)
        if unavailability:
            await db.delete(unavailability)

    replacement.status = STATUS_APPROVED if payload.approve else STATUS_REJECTED
    replacement.decided_by = current_user.id
    replacement.decided_at = now

    await db.commit()
    logger.info("Replacement %s %s by %s", replacement.id, replacement.status, current_user.username)
    return _replacement_out(await _load_replacement(db, replacement.id))


@router.delete("/replacements/{replacement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_replacement(replacement_id: uuid.UUID, current_user: ManagerUser, db: DB):
    """Remove a decided offer from the history."""
    replacement = await db.get(ShiftReplacement, replacement_id)
    if not replacement:
        raise HTTPException(status_code=404, detail="Replacement not found")
    if replacement.status == STATUS_PENDING:
        raise HTTPException(status_code=400, detail="Pending replacements must be decided first")

    await db.delete(replacement)
    await db.commit()
