"""
Validation status of shifts and worked-time arithmetic on clock records.

A shift is ``upcoming`` until its end time has passed. After that it is
``validated`` once every assignment has been validated, otherwise ``pending``.
Shift dates and times are restaurant wall-clock values (settings.TIMEZONE);
clock timestamps are absolute instants.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, Sequence
from zoneinfo import ZoneInfo

from app.core.config import settings

STATUS_UPCOMING = "upcoming"
STATUS_PENDING = "pending"
STATUS_VALIDATED = "validated"


def restaurant_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def now_local() -> datetime:
    return datetime.now(restaurant_tz())


def as_utc(value: datetime | None) -> datetime | None:
    """Normalise a clock timestamp; naive values (SQLite) are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def shift_window(
    shift_date: date, start_time: time, end_time: time, tz: ZoneInfo | None = None
) -> tuple[datetime, datetime]:
    """Start and end of a shift. An end at or before the start means the next day."""
    tz = tz or restaurant_tz()
    start = datetime.combine(shift_date, start_time, tzinfo=tz)
    end = datetime.combine(shift_date, end_time, tzinfo=tz)
    if end <= start:
        end += timedelta(days=1)
    return start, end


@dataclass
class ValidationState:
    status: str
    in_progress: bool = False
    validated_count: int = 0
    total_count: int = 0

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_VALIDATED


def derive_validation_status(
    shift: Any,
    assignments: Iterable[Any],
    now: datetime | None = None,
) -> ValidationState:
    """
    Tri-state status of one shift.

    ``shift`` needs ``date``, ``start_time`` and ``end_time``; each assignment
    needs ``validated``. A finished shift without assignments counts as
    validated.
    """
    tz = restaurant_tz()
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)

    flags = [bool(a.validated) for a in assignments]
    start, end = shift_window(shift.date, shift.start_time, shift.end_time, tz)

    if now <= end:
        status = STATUS_UPCOMING
    elif all(flags):
        status = STATUS_VALIDATED
    else:
        status = STATUS_PENDING

    return ValidationState(
        status=status,
        in_progress=start <= now <= end,
        validated_count=sum(flags),
        total_count=len(flags),
    )


# ── Worked time ──────────────────────────────────────────────────────────────

def worked_duration(clock_in: datetime | None, clock_out: datetime | None) -> timedelta | None:
    if clock_in is None or clock_out is None:
        return None
    delta = as_utc(clock_out) - as_utc(clock_in)
    return max(delta, timedelta(0))


def worked_hours(clock_in: datetime | None, clock_out: datetime | None) -> float | None:
    delta = worked_duration(clock_in, clock_out)
    if delta is None:
        return None
    return round(delta.total_seconds() / 3600, 2)


def format_duration(delta: timedelta | None) -> str:
    """7h05 style label, '-' when there is nothing to show."""
    if delta is None:
        return "-"
    total_minutes = int(delta.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h{minutes:02d}"


# ── Grouping of clock records ────────────────────────────────────────────────

@dataclass
class ShiftGroup:
    shift_id: Any
    title: str
    date: date
    start_time: time
    end_time: time
    records: list = field(default_factory=list)
    status: str = STATUS_UPCOMING

    @property
    def validated_count(self) -> int:
        return sum(1 for r in self.records if r.validated)

    @property
    def total_count(self) -> int:
        return len(self.records)


@dataclass
class DayGroup:
    date: date
    shifts: list[ShiftGroup] = field(default_factory=list)


def group_hours_by_date(records: Sequence[Any], now: datetime | None = None) -> list[DayGroup]:
    """
    Group flat hour records by shift date, then by shift.

    Each record needs ``shift_id``, ``title``, ``date``, ``start_time``,
    ``end_time`` and ``validated``. Dates come out newest first, shifts of a
    day by start time, records in input order.
    """
    by_date: dict[date, dict[Any, ShiftGroup]] = {}
    for record in records:
        shifts = by_date.setdefault(record.date, {})
        group = shifts.get(record.shift_id)
        if group is None:
            group = ShiftGroup(
                shift_id=record.shift_id,
                title=record.title,
                date=record.date,
                start_time=record.start_time,
                end_time=record.end_time,
            )
            shifts[record.shift_id] = group
        group.records.append(record)

    days = []
    for day in sorted(by_date, reverse=True):
        groups = sorted(by_date[day].values(), key=lambda g: (g.start_time, g.title))
        for group in groups:
            group.status = derive_validation_status(group, group.records, now).status
        days.append(DayGroup(date=day, shifts=groups))
    return days
