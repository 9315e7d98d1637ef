"""
PayrollService: salary rows per shift and payroll summaries over a period.

Hours come from clock records (clock_out - clock_in), not from the planned
shift times. Summaries only count validated assignments.
"""
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.services.validation_service import worked_duration
from app.utils.positions import CATEGORIES, category_of

MANAGER_ROLE = "manager"


def _hours(assignment: Any) -> float | None:
    delta = worked_duration(assignment.clock_in, assignment.clock_out)
    if delta is None:
        return None
    return delta.total_seconds() / 3600


def _rate(user: Any) -> float:
    return float(user.hourly_rate or 0)


@dataclass
class SalaryRow:
    user_shift_id: uuid.UUID
    user_id: uuid.UUID
    username: str
    first_name: str | None
    last_name: str | None
    position: str | None
    category: str | None
    hours_worked: float
    validated: bool
    hourly_rate: float | None = None
    salary: float | None = None


def shift_salary_rows(
    assignments: Iterable[Any],
    viewer_id: uuid.UUID,
    viewer_role: str,
    validated_only: bool = False,
) -> list[SalaryRow]:
    """
    One row per clocked assignment of a shift.

    Rate and salary are only filled in for managers, or for the viewer's own
    row.
    """
    rows = []
    for a in assignments:
        hours = _hours(a)
        if hours is None:
            continue
        if validated_only and not a.validated:
            continue

        row = SalaryRow(
            user_shift_id=a.id,
            user_id=a.user_id,
            username=a.user.username,
            first_name=a.user.first_name,
            last_name=a.user.last_name,
            position=a.position,
            category=category_of(a.position),
            hours_worked=round(hours, 2),
            validated=bool(a.validated),
        )
        if viewer_role == MANAGER_ROLE or a.user_id == viewer_id:
            rate = _rate(a.user)
            row.hourly_rate = rate
            row.salary = round(hours * rate, 2)
        rows.append(row)
    return rows


# ── Period summary ───────────────────────────────────────────────────────────

def _empty_categories() -> dict[str, float]:
    return {c: 0.0 for c in CATEGORIES}


@dataclass
class PayrollLine:
    user_id: uuid.UUID
    username: str
    full_name: str
    hourly_rate: float
    shift_count: int = 0
    hours_by_category: dict[str, float] = field(default_factory=_empty_categories)
    uncategorized_hours: float = 0.0
    total_hours: float = 0.0
    total_salary: float = 0.0


@dataclass
class PayrollSummary:
    from_date: date | None
    to_date: date | None
    lines: list[PayrollLine] = field(default_factory=list)
    hours_by_category: dict[str, float] = field(default_factory=_empty_categories)
    salary_by_category: dict[str, float] = field(default_factory=_empty_categories)
    total_hours: float = 0.0
    total_salary: float = 0.0


def build_payroll_summary(
    assignments: Iterable[Any],
    from_date: date | None = None,
    to_date: date | None = None,
) -> PayrollSummary:
    """Aggregate validated, clocked assignments per user and per position category."""
    lines: dict[uuid.UUID, PayrollLine] = {}
    raw_hours: dict[uuid.UUID, dict[str, float]] = defaultdict(lambda: defaultdict(float))
    cat_hours: dict[str, float] = defaultdict(float)
    cat_salary: dict[str, float] = defaultdict(float)

    for a in assignments:
        if not a.validated:
            continue
        hours = _hours(a)
        if hours is None:
            continue

        user = a.user
        line = lines.get(a.user_id)
        if line is None:
            line = PayrollLine(
                user_id=a.user_id,
                username=user.username,
                full_name=user.full_name,
                hourly_rate=_rate(user),
            )
            lines[a.user_id] = line

        category = category_of(a.position) or "uncategorized"
        line.shift_count += 1
        raw_hours[a.user_id][category] += hours
        cat_hours[category] += hours
        cat_salary[category] += hours * line.hourly_rate

    summary = PayrollSummary(from_date=from_date, to_date=to_date)
    for user_id, line in lines.items():
        per_cat = raw_hours[user_id]
        total = sum(per_cat.values())
        for c in CATEGORIES:
            line.hours_by_category[c] = round(per_cat.get(c, 0.0), 2)
        line.uncategorized_hours = round(per_cat.get("uncategorized", 0.0), 2)
        line.total_hours = round(total, 2)
        line.total_salary = round(total * line.hourly_rate, 2)
        summary.lines.append(line)

    summary.lines.sort(key=lambda l: (l.full_name.lower(), l.username))
    for c in CATEGORIES:
        summary.hours_by_category[c] = round(cat_hours.get(c, 0.0), 2)
        summary.salary_by_category[c] = round(cat_salary.get(c, 0.0), 2)
    summary.total_hours = round(sum(cat_hours.values()), 2)
    summary.total_salary = round(sum(cat_salary.values()), 2)
    return summary


class PayrollService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_assignments(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
        user_id: uuid.UUID | None = None,
        validated_only: bool = True,
    ) -> list:
        """Clocked assignments in a date range, with user and shift loaded."""
        from app.models.shift import Shift, UserShift

        query = (
            select(UserShift)
            .join(Shift, UserShift.shift_id == Shift.id)
            .options(selectinload(UserShift.user), selectinload(UserShift.shift))
            .where(UserShift.clock_in.isnot(None), UserShift.clock_out.isnot(None))
        )
        if validated_only:
            query = query.where(UserShift.validated == True)  # noqa: E712
        if from_date:
            query = query.where(Shift.date >= from_date)
        if to_date:
            query = query.where(Shift.date <= to_date)
        if user_id:
            query = query.where(UserShift.user_id == user_id)

        result = await self.db.execute(query.order_by(Shift.date, Shift.start_time))
        return list(result.scalars().all())

    async def summary(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
        user_id: uuid.UUID | None = None,
    ) -> PayrollSummary:
        assignments = await self.load_assignments(from_date, to_date, user_id)
        return build_payroll_summary(assignments, from_date, to_date)
