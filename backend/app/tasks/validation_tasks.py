"""
Celery task reporting finished shifts whose hours are not fully validated.
"""
import asyncio
import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 14


@celery_app.task(name="app.tasks.validation_tasks.report_pending_validation")
def report_pending_validation(days: int = LOOKBACK_DAYS) -> int:
    """Logs every pending shift of the last ``days`` days; returns how many were found."""
    return asyncio.run(_report_pending(days))


async def find_pending_shifts(db, days: int = LOOKBACK_DAYS, now: datetime | None = None) -> list:
    """(shift, ValidationState) pairs for shifts in the window whose status is pending."""
    from app.models.shift import Shift
    from app.services.validation_service import STATUS_PENDING, derive_validation_status, now_local

    now = now or now_local()
    since = now.date() - timedelta(days=days)

    result = await db.execute(
        select(Shift)
        .options(selectinload(Shift.assignments))
        .where(Shift.date >= since, Shift.date <= now.date())
        .order_by(Shift.date, Shift.start_time)
    )

    pending = []
    for shift in result.scalars().all():
        try:
            state = derive_validation_status(shift, shift.assignments, now)
        except Exception:
            logger.exception("Could not compute validation status of shift %s", shift.id)
            continue
        if state.status == STATUS_PENDING:
            pending.append((shift, state))
    return pending


async def _report_pending(days: int) -> int:
    from app.core.database import AsyncSessionLocal

    async with AsyncSessionLocal() as db:
        pending = await find_pending_shifts(db, days)

    for shift, state in pending:
        logger.warning(
            "Shift '%s' on %s has %d/%d validated record(s)",
            shift.title, shift.date.isoformat(), state.validated_count, state.total_count,
        )
    logger.info("%d shift(s) pending validation over the last %d days", len(pending), days)
    return len(pending)
