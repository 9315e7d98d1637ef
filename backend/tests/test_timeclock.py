"""
Tests for /api/v1/timeclock – clocking, validation, corrections, listings, salaries, audit.
"""
import uuid
from datetime import datetime, time, timedelta, timezone

import pytest
from sqlalchemy import select

from app.models.audit import HoursAudit
from tests.conftest import auth_headers, assign, future_day, make_shift, PAST_DAY

BASE = "/api/v1/timeclock"


async def audit_actions(db, user_shift_id) -> list[str]:
    db.expunge_all()
    result = await db.execute(
        select(HoursAudit).where(HoursAudit.user_shift_id == user_shift_id).order_by(HoursAudit.created_at)
    )
    return [a.action for a in result.scalars().all()]


# ── Clock in / out ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_clock_in_and_out(client, db, staff_user, staff_token):
    shift = await make_shift(db, day=future_day(0))
    await assign(db, staff_user, shift)

    resp = await client.post(f"{BASE}/clock-in", json={"shift_id": str(shift.id)}, headers=auth_headers(staff_token))
    assert resp.status_code == 200
    assert resp.json()["clock_in"] is not None
    assert resp.json()["clock_out"] is None

    resp = await client.post(f"{BASE}/clock-out", json={"shift_id": str(shift.id)}, headers=auth_headers(staff_token))
    assert resp.status_code == 200
    assert resp.json()["clock_out"] is not None
    assert resp.json()["validated"] is False


@pytest.mark.asyncio
async def test_clock_times_carry_utc_offset(client, db, manager_token, staff_user, staff_token):
    shift = await make_shift(db, day=future_day(0))
    await assign(db, staff_user, shift)

    resp = await client.post(f"{BASE}/clock-in", json={"shift_id": str(shift.id)}, headers=auth_headers(staff_token))
    clock_in = datetime.fromisoformat(resp.json()["clock_in"])
    assert clock_in.utcoffset() == timedelta(0)

    past = await make_shift(db)
    await assign(db, staff_user, past, hours=4)
    resp = await client.get(f"{BASE}/all-hours", headers=auth_headers(manager_token))
    record, = resp.json()
    assert datetime.fromisoformat(record["clock_in"]) == datetime(2025, 3, 11, 18, 0, tzinfo=timezone.utc)
    assert datetime.fromisoformat(record["clock_out"]).utcoffset() == timedelta(0)


@pytest.mark.asyncio
async def test_clock_in_twice(client, db, staff_user, staff_token):
    shift = await make_shift(db, day=future_day(0))
    await assign(db, staff_user, shift)
    body = {"shift_id": str(shift.id)}

    await client.post(f"{BASE}/clock-in", json=body, headers=auth_headers(staff_token))
    resp = await client.post(f"{BASE}/clock-in", json=body, headers=auth_headers(staff_token))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_clock_out_before_clock_in(client, db, staff_user, staff_token):
    shift = await make_shift(db, day=future_day(0))
    await assign(db, staff_user, shift)
    resp = await client.post(f"{BASE}/clock-out", json={"shift_id": str(shift.id)}, headers=auth_headers(staff_token))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_clock_in_not_assigned(client, db, staff_token):
    shift = await make_shift(db, day=future_day(0))
    resp = await client.post(f"{BASE}/clock-in", json={"shift_id": str(shift.id)}, headers=auth_headers(staff_token))
    assert resp.status_code == 404


# ── Validate ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_manager_validates_hours(client, db, manager_user, manager_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)

    resp = await client.post(
        f"{BASE}/validate",
        json={"user_shift_id": str(a.id), "comment": "ok"},
        headers=auth_headers(manager_token),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["validated"] is True
    assert data["validated_by"] == str(manager_user.id)
    assert data["comment"] == "ok"
    assert await audit_actions(db, a.id) == ["VALIDATE"]


@pytest.mark.asyncio
async def test_validate_again_is_revalidate(client, db, manager_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)
    body = {"user_shift_id": str(a.id)}

    await client.post(f"{BASE}/validate", json=body, headers=auth_headers(manager_token))
    resp = await client.post(f"{BASE}/validate", json=body, headers=auth_headers(manager_token))
    assert resp.status_code == 200
    assert await audit_actions(db, a.id) == ["VALIDATE", "REVALIDATE"]


@pytest.mark.asyncio
async def test_validate_unclocked_record(client, db, manager_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift)
    resp = await client.post(f"{BASE}/validate", json={"user_shift_id": str(a.id)}, headers=auth_headers(manager_token))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_supervisor_validates_own_shift(client, db, supervisor_user, supervisor_token, staff_user):
    shift = await make_shift(db)
    await assign(db, supervisor_user, shift, "dispatch", is_supervisor=True, hours=5)
    a = await assign(db, staff_user, shift, hours=5)

    resp = await client.post(f"{BASE}/validate", json={"user_shift_id": str(a.id)}, headers=auth_headers(supervisor_token))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_supervisor_cannot_validate_foreign_shift(client, db, supervisor_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)

    resp = await client.post(f"{BASE}/validate", json={"user_shift_id": str(a.id)}, headers=auth_headers(supervisor_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_staff_cannot_validate(client, db, staff_user, staff_token):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)
    resp = await client.post(f"{BASE}/validate", json={"user_shift_id": str(a.id)}, headers=auth_headers(staff_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_validate_unknown_record(client, manager_token):
    resp = await client.post(
        f"{BASE}/validate", json={"user_shift_id": str(uuid.uuid4())}, headers=auth_headers(manager_token)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_validate_shift_bulk(client, db, manager_token, staff_user, other_staff_user, supervisor_user):
    shift = await make_shift(db)
    await assign(db, staff_user, shift, hours=5)
    await assign(db, other_staff_user, shift, "hot", hours=5, validated=True)
    await assign(db, supervisor_user, shift, "dispatch")

    resp = await client.post(f"{BASE}/validate-shift", json={"shift_id": str(shift.id)}, headers=auth_headers(manager_token))
    assert resp.status_code == 200
    assert resp.json() == {
        "shift_id": str(shift.id),
        "validated": 1,
        "already_validated": 1,
        "not_clocked": 1,
    }

    status_resp = await client.get(f"/api/v1/shifts/{shift.id}/status", headers=auth_headers(manager_token))
    assert status_resp.json()["status"] == "pending"


# ── Update hours ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_hours_resets_validation(client, db, manager_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5, validated=True)

    resp = await client.put(
        f"{BASE}/update-hours",
        json={
            "user_shift_id": str(a.id),
            "clock_in": "2025-03-11T17:00:00Z",
            "clock_out": "2025-03-11T22:30:00Z",
            "reason": "forgot to clock out",
        },
        headers=auth_headers(manager_token),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["validated"] is False
    assert data["validated_by"] is None
    assert data["comment"] is None

    db.expunge_all()
    result = await db.execute(select(HoursAudit).where(HoursAudit.user_shift_id == a.id))
    audit = result.scalar_one()
    assert audit.action == "UPDATE_HOURS"
    assert audit.old_validated is True
    assert audit.new_validated is False
    assert audit.reason == "forgot to clock out"


@pytest.mark.asyncio
async def test_update_hours_clock_out_before_clock_in(client, db, manager_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)
    resp = await client.put(
        f"{BASE}/update-hours",
        json={
            "user_shift_id": str(a.id),
            "clock_in": "2025-03-11T22:00:00Z",
            "clock_out": "2025-03-11T17:00:00Z",
        },
        headers=auth_headers(manager_token),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_hours_supervisor_not_on_shift(client, db, supervisor_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)
    resp = await client.put(
        f"{BASE}/update-hours",
        json={
            "user_shift_id": str(a.id),
            "clock_in": "2025-03-11T17:00:00Z",
            "clock_out": "2025-03-11T22:00:00Z",
        },
        headers=auth_headers(supervisor_token),
    )
    assert resp.status_code == 403


# ── Listings ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_unvalidated_lists_only_pending_records(client, db, manager_token, staff_user, other_staff_user):
    shift = await make_shift(db)
    pending = await assign(db, staff_user, shift, hours=5)
    await assign(db, other_staff_user, shift, "hot", hours=5, validated=True)

    resp = await client.get(f"{BASE}/unvalidated", headers=auth_headers(manager_token))
    assert resp.status_code == 200
    data = resp.json()
    assert [r["user_shift_id"] for r in data] == [str(pending.id)]
    assert data[0]["duration"] == "5h00"
    assert data[0]["hours_worked"] == 5.0


@pytest.mark.asyncio
async def test_unvalidated_supervisor_scope(client, db, supervisor_user, supervisor_token, staff_user):
    own = await make_shift(db, title="Lunch")
    foreign = await make_shift(db, title="Dinner")
    await assign(db, supervisor_user, own, "hot", is_supervisor=True)
    mine = await assign(db, staff_user, own, hours=3)
    await assign(db, staff_user, foreign, hours=4)

    resp = await client.get(f"{BASE}/unvalidated", headers=auth_headers(supervisor_token))
    assert [r["user_shift_id"] for r in resp.json()] == [str(mine.id)]


@pytest.mark.asyncio
async def test_all_hours_manager_only(client, db, supervisor_token, manager_token, staff_user):
    shift = await make_shift(db)
    await assign(db, staff_user, shift, hours=5, validated=True)

    assert (await client.get(f"{BASE}/all-hours", headers=auth_headers(supervisor_token))).status_code == 403

    resp = await client.get(f"{BASE}/all-hours", headers=auth_headers(manager_token))
    assert resp.status_code == 200
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_grouped_hours(client, db, manager_token, staff_user, other_staff_user):
    lunch = await make_shift(db, title="Lunch", start=time(11, 0), end=time(15, 0))
    dinner = await make_shift(db, title="Dinner")
    await assign(db, staff_user, lunch, hours=4, validated=True)
    await assign(db, staff_user, dinner, hours=5)
    await assign(db, other_staff_user, dinner, "hot", hours=5, validated=True)

    resp = await client.get(f"{BASE}/grouped", headers=auth_headers(manager_token))
    assert resp.status_code == 200
    days = resp.json()
    assert len(days) == 1
    assert days[0]["date"] == PAST_DAY.isoformat()
    shifts = days[0]["shifts"]
    assert [s["title"] for s in shifts] == ["Lunch", "Dinner"]
    assert shifts[0]["status"] == "validated"
    assert shifts[1]["status"] == "pending"
    assert (shifts[1]["validated_count"], shifts[1]["total_count"]) == (1, 2)

    resp = await client.get(f"{BASE}/grouped", params={"pending_only": True}, headers=auth_headers(manager_token))
    assert [s["title"] for s in resp.json()[0]["shifts"]] == ["Dinner"]


@pytest.mark.asyncio
async def test_supervisor_shifts(client, db, supervisor_user, supervisor_token):
    past = await make_shift(db)
    upcoming = await make_shift(db, day=future_day())
    await assign(db, supervisor_user, past, "hot", is_supervisor=True, hours=5)
    await assign(db, supervisor_user, upcoming, "hot", is_supervisor=True)

    resp = await client.get(f"{BASE}/supervisor-shifts/{supervisor_user.id}", headers=auth_headers(supervisor_token))
    assert resp.status_code == 200
    statuses = {s["shift_id"]: s["status"] for s in resp.json()}
    assert statuses == {str(past.id): "pending", str(upcoming.id): "upcoming"}


@pytest.mark.asyncio
async def test_supervisor_shifts_of_other_supervisor_forbidden(client, supervisor_token, manager_user):
    resp = await client.get(f"{BASE}/supervisor-shifts/{manager_user.id}", headers=auth_headers(supervisor_token))
    assert resp.status_code == 403


# ── Salaries ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_shift_salaries_visibility(client, db, staff_user, staff_token, other_staff_user):
    shift = await make_shift(db)
    await assign(db, staff_user, shift, hours=5)
    await assign(db, other_staff_user, shift, "hot", hours=4)

    resp = await client.get(f"{BASE}/shift-salaries/{shift.id}", headers=auth_headers(staff_token))
    assert resp.status_code == 200
    rows = {r["username"]: r for r in resp.json()}
    assert rows["stella"]["salary"] == 75.0
    assert rows["stella"]["hourly_rate"] == 15.0
    assert rows["oscar"]["hours_worked"] == 4.0
    assert rows["oscar"]["salary"] is None
    assert rows["oscar"]["hourly_rate"] is None


@pytest.mark.asyncio
async def test_shift_salaries_manager_sees_all(client, db, manager_token, staff_user, other_staff_user):
    shift = await make_shift(db)
    await assign(db, staff_user, shift, hours=5, validated=True)
    await assign(db, other_staff_user, shift, "hot", hours=4)

    resp = await client.get(
        f"{BASE}/shift-salaries/{shift.id}", params={"validated_only": True}, headers=auth_headers(manager_token)
    )
    rows = resp.json()
    assert [r["username"] for r in rows] == ["stella"]
    assert rows[0]["salary"] == 75.0


# ── Audit ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_audit_trail(client, db, manager_token, staff_user):
    shift = await make_shift(db)
    a = await assign(db, staff_user, shift, hours=5)
    await client.post(f"{BASE}/validate", json={"user_shift_id": str(a.id)}, headers=auth_headers(manager_token))

    resp = await client.get(f"{BASE}/audit/{a.id}", headers=auth_headers(manager_token))
    assert resp.status_code == 200
    entries = resp.json()
    assert len(entries) == 1
    assert entries[0]["action"] == "VALIDATE"
    assert entries[0]["new_validated"] is True
