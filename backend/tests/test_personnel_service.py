"""
Tests for personnel_service – roster reconciliation and grouping.
"""
import uuid
from datetime import datetime, time, timezone
from types import SimpleNamespace

import pytest

from app.services.personnel_service import (
    DesiredAssignment,
    DuplicateAssignmentError,
    personnel_by_category,
    personnel_by_position,
    plan_personnel_update,
)


def current(user_id, position="dining_room", clocked=False, **extra):
    values = dict(
        user_id=user_id,
        position=position,
        is_supervisor=False,
        individual_start_time=None,
        individual_end_time=None,
        clock_in=datetime(2025, 3, 11, 17, tzinfo=timezone.utc) if clocked else None,
        clock_out=None,
    )
    values.update(extra)
    return SimpleNamespace(**values)


def test_plan_adds_updates_and_removes():
    kept, moved, dropped, new = (uuid.uuid4() for _ in range(4))
    existing = [current(kept, "bar"), current(moved, "bar"), current(dropped)]
    desired = [
        DesiredAssignment(kept, "bar"),
        DesiredAssignment(moved, "hot"),
        DesiredAssignment(new, "bread"),
    ]

    plan = plan_personnel_update(existing, desired)

    assert [d.user_id for d in plan.to_add] == [new]
    assert [(a.user_id, d.position) for a, d in plan.to_update] == [(moved, "hot")]
    assert [a.user_id for a in plan.to_remove] == [dropped]
    assert plan.kept_with_hours == []


def test_plan_keeps_clocked_assignments():
    clocked = uuid.uuid4()
    plan = plan_personnel_update([current(clocked, clocked=True)], [])
    assert plan.to_remove == []
    assert [a.user_id for a in plan.kept_with_hours] == [clocked]
    assert plan.is_empty


def test_plan_detects_supervisor_and_time_changes():
    sup, late = uuid.uuid4(), uuid.uuid4()
    existing = [current(sup), current(late)]
    desired = [
        DesiredAssignment(sup, "dining_room", is_supervisor=True),
        DesiredAssignment(late, "dining_room", individual_start_time=time(19, 0)),
    ]
    plan = plan_personnel_update(existing, desired)
    assert {a.user_id for a, _ in plan.to_update} == {sup, late}


def test_plan_unchanged_roster_is_empty():
    user_id = uuid.uuid4()
    plan = plan_personnel_update([current(user_id, "bar")], [DesiredAssignment(user_id, "bar")])
    assert plan.is_empty


def test_plan_rejects_user_listed_twice():
    user_id = uuid.uuid4()
    with pytest.raises(DuplicateAssignmentError):
        plan_personnel_update([], [DesiredAssignment(user_id, "bar"), DesiredAssignment(user_id, "hot")])


def test_grouping_by_position_and_category():
    assignments = [
        current(uuid.uuid4(), "hot"),
        current(uuid.uuid4(), "bread"),
        current(uuid.uuid4(), "bar"),
        current(uuid.uuid4(), "sommelier"),
    ]
    by_position = personnel_by_position(assignments)
    assert len(by_position["hot"]) == 1
    assert by_position["dining_room"] == []
    assert "sommelier" not in by_position

    by_category = personnel_by_category(assignments)
    assert set(by_category) == {"kitchen", "dining_room", "bar"}
    assert len(by_category["kitchen"]) == 2
    assert len(by_category["bar"]) == 1
