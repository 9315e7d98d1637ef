"""
Shift personnel: grouping assignments by position / category and
reconciling a shift's staff with a new roster.
"""
import uuid
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Iterable

from app.utils.positions import ALL_POSITIONS, CATEGORIES, category_of


@dataclass(frozen=True)
class DesiredAssignment:
    user_id: uuid.UUID
    position: str
    is_supervisor: bool = False
    individual_start_time: time | None = None
    individual_end_time: time | None = None


@dataclass
class PersonnelPlan:
    to_add: list[DesiredAssignment] = field(default_factory=list)
    to_update: list[tuple[Any, DesiredAssignment]] = field(default_factory=list)
    to_remove: list[Any] = field(default_factory=list)
    kept_with_hours: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_update or self.to_remove)


class DuplicateAssignmentError(ValueError):
    pass


def _differs(current: Any, desired: DesiredAssignment) -> bool:
    return (
        current.position != desired.position
        or bool(current.is_supervisor) != bool(desired.is_supervisor)
        or current.individual_start_time != desired.individual_start_time
        or current.individual_end_time != desired.individual_end_time
    )


def plan_personnel_update(current: Iterable[Any], desired: Iterable[DesiredAssignment]) -> PersonnelPlan:
    """
    Diff the current assignments of a shift against the desired roster.

    Assignments that drop out of the roster are removed unless they already
    carry a clock-in or clock-out; those are kept so worked hours survive.
    """
    wanted: dict[uuid.UUID, DesiredAssignment] = {}
    for d in desired:
        if d.user_id in wanted:
            raise DuplicateAssignmentError(f"User {d.user_id} is listed more than once")
        wanted[d.user_id] = d

    plan = PersonnelPlan()
    existing = {a.user_id: a for a in current}

    for user_id, assignment in existing.items():
        target = wanted.get(user_id)
        if target is None:
            if assignment.clock_in is not None or assignment.clock_out is not None:
                plan.kept_with_hours.append(assignment)
            else:
                plan.to_remove.append(assignment)
        elif _differs(assignment, target):
            plan.to_update.append((assignment, target))

    for user_id, target in wanted.items():
        if user_id not in existing:
            plan.to_add.append(target)

    return plan


def personnel_by_position(assignments: Iterable[Any]) -> dict[str, list]:
    grouped: dict[str, list] = {p: [] for p in ALL_POSITIONS}
    for a in assignments:
        if a.position in grouped:
            grouped[a.position].append(a)
    return grouped


def personnel_by_category(assignments: Iterable[Any]) -> dict[str, list]:
    grouped: dict[str, list] = {c: [] for c in CATEGORIES}
    for a in assignments:
        category = category_of(a.position)
        if category:
            grouped[category].append(a)
    return grouped
