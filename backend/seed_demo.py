"""
Demo seed for Brigade – staff accounts plus three weeks of lunch and dinner services.

SQLite:     DATABASE_URL=sqlite+aiosqlite:///./brigade.db  .venv/bin/python seed_demo.py

Tables are created on the fly (create_tables()), no migrations needed.
Past services get clock times; all but the last two days are validated, so
the validation screens have something pending.
"""
import asyncio
import random
from datetime import datetime, time, timedelta, timezone
import sys, os

sys.path.insert(0, os.path.dirname(__file__))

from sqlalchemy import select

from app.core.database import AsyncSessionLocal, create_tables
from app.core.security import hash_password
from app.models.shift import Shift, UserShift
from app.models.user import User
from app.services.validation_service import now_local, restaurant_tz

DEMO_PASSWORD = "demo1234"

# username, role, first name, last name, hourly rate, positions
STAFF = [
    ("claire",  "manager",    "Claire",  "Dubois",   28.00, ["dining_room", "bar"]),
    ("marc",    "supervisor", "Marc",    "Lambert",  19.50, ["kitchen", "hot", "dispatch"]),
    ("sofia",   "supervisor", "Sofia",   "Peeters",  18.50, ["dining_room", "bar"]),
    ("yanis",   "staff",      "Yanis",   "Maes",     15.20, ["hot", "kitchen"]),
    ("ines",    "staff",      "Inès",    "Jacobs",   15.20, ["bread", "kitchen"]),
    ("tom",     "staff",      "Tom",     "Willems",  14.80, ["dispatch", "kitchen"]),
    ("lena",    "staff",      "Léna",    "Claes",    14.80, ["dining_room"]),
    ("noah",    "staff",      "Noah",    "Goossens", 14.80, ["dining_room", "bar"]),
    ("amira",   "staff",      "Amira",   "Wouters",  15.00, ["bar"]),
]

# title, start, end, roster (username, position, supervisor)
SERVICES = [
    ("Lunch", time(11, 0), time(15, 0), [
        ("marc", "hot", True), ("ines", "bread", False),
        ("sofia", "dining_room", True), ("lena", "dining_room", False), ("amira", "bar", False),
    ]),
    ("Dinner", time(18, 0), time(23, 30), [
        ("marc", "dispatch", True), ("yanis", "hot", False), ("tom", "kitchen", False),
        ("sofia", "dining_room", True), ("noah", "dining_room", False), ("amira", "bar", False),
    ]),
]


def _clock(day, at: time, jitter_minutes: int) -> datetime:
    local = datetime.combine(day, at, tzinfo=restaurant_tz())
    return (local + timedelta(minutes=jitter_minutes)).astimezone(timezone.utc)


async def seed():
    await create_tables()
    rng = random.Random(42)

    async with AsyncSessionLocal() as db:
        existing = await db.execute(select(User).where(User.username == STAFF[0][0]))
        if existing.scalar_one_or_none():
            print("Demo data already present – nothing to do.")
            return

        users = {}
        for username, role, first, last, rate, positions in STAFF:
            user = User(
                username=username,
                email=f"{username}@brigade.demo",
                hashed_password=hash_password(DEMO_PASSWORD),
                role=role,
                first_name=first,
                last_name=last,
                phone="+32 470 00 00 00",
                national_number="00.00.00-000.00",
                address="Rue de la Cuisine 1, 1000 Bruxelles",
                hourly_rate=rate,
                positions=positions,
            )
            db.add(user)
            users[username] = user
        await db.flush()
        print(f"  ✓ {len(users)} accounts created")

        manager = users["claire"]
        today = now_local().date()
        first_day = today - timedelta(days=today.weekday() + 14)   # Monday two weeks ago
        last_day = first_day + timedelta(days=20)
        validate_until = today - timedelta(days=2)

        shift_count = 0
        current = first_day
        while current <= last_day:
            # closed on Mondays
            if current.weekday() == 0:
                current += timedelta(days=1)
                continue

            for title, start, end, roster in SERVICES:
                shift = Shift(title=title, date=current, start_time=start, end_time=end)
                is_past = current < today
                for username, position, supervisor in roster:
                    assignment = UserShift(
                        user_id=users[username].id,
                        position=position,
                        is_supervisor=supervisor,
                    )
                    if is_past:
                        assignment.clock_in = _clock(current, start, rng.randint(-10, 5))
                        assignment.clock_out = _clock(current, end, rng.randint(-5, 25))
                        if current <= validate_until:
                            assignment.validated = True
                            assignment.validated_by = manager.id
                            assignment.validated_at = assignment.clock_out + timedelta(hours=12)
                    shift.assignments.append(assignment)
                db.add(shift)
                shift_count += 1
            current += timedelta(days=1)

        await db.commit()
        print(f"  ✓ {shift_count} services created ({first_day} → {last_day})")

    print("\n" + "═" * 55)
    print("  Brigade demo ready!")
    print("═" * 55)
    print(f"\n  All accounts – password: {DEMO_PASSWORD}\n")
    print("  MANAGER:     claire")
    print("  SUPERVISOR:  marc (kitchen)  |  sofia (dining room)")
    print("  STAFF:       yanis / ines / tom / lena / noah / amira")
    print("═" * 55 + "\n")


if __name__ == "__main__":
    asyncio.run(seed())
