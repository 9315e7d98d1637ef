"""
Shared pytest fixtures for Brigade backend tests.

Uses SQLite in-memory with StaticPool so all sessions share one connection,
meaning data written in one session is visible to others (important for HTTP client tests).
"""
import uuid
from datetime import date, datetime, time, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import app.models  # noqa – registers all SQLAlchemy models with Base.metadata
from app.core.database import Base, enable_sqlite_foreign_keys, get_db
from app.core.security import hash_password, create_access_token
from app.main import app
from app.models.shift import Shift, UserShift
from app.models.user import User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "testpass123"

# Long finished and far ahead, whatever day the suite runs on
PAST_DAY = date(2025, 3, 11)


# ── Shared engine (function-scoped: fresh DB per test) ───────────────────────

@pytest_asyncio.fixture
async def engine():
    """Creates a fresh in-memory SQLite engine per test with a shared connection pool."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,          # single shared connection → all sessions see same data
    )
    enable_sqlite_foreign_keys(eng)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    """Async DB session for direct data inspection inside tests."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ── HTTP client fixture ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(engine) -> AsyncClient:
    """
    FastAPI test client with get_db overridden to use the test engine.
    Each request gets its own session but shares the same underlying
    connection via StaticPool.
    """
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ── User fixtures ─────────────────────────────────────────────────────────────

async def make_user(db, username: str, role: str = "staff", hourly_rate: float = 15.0,
                    positions: list[str] | None = None, **extra) -> User:
    u = User(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@test.be",
        hashed_password=hash_password(PASSWORD),
        role=role,
        first_name=username.capitalize(),
        last_name="Test",
        hourly_rate=hourly_rate,
        positions=positions or [],
        is_active=True,
        created_at=datetime.now(timezone.utc),
        **extra,
    )
    db.add(u)
    await db.commit()
    await db.refresh(u)
    return u


@pytest_asyncio.fixture
async def manager_user(db) -> User:
    return await make_user(db, "manon", role="manager", hourly_rate=25.0, positions=["dining_room"])


@pytest_asyncio.fixture
async def supervisor_user(db) -> User:
    return await make_user(db, "sam", role="supervisor", hourly_rate=18.0, positions=["hot", "dispatch"])


@pytest_asyncio.fixture
async def staff_user(db) -> User:
    return await make_user(db, "stella", role="staff", hourly_rate=15.0, positions=["dining_room", "bar"])


@pytest_asyncio.fixture
async def other_staff_user(db) -> User:
    return await make_user(db, "oscar", role="staff", hourly_rate=14.0, positions=["hot", "bread"])


def token_for(user: User) -> str:
    return create_access_token(user.id, user.username, user.role)


@pytest.fixture
def manager_token(manager_user) -> str:
    return token_for(manager_user)


@pytest.fixture
def supervisor_token(supervisor_user) -> str:
    return token_for(supervisor_user)


@pytest.fixture
def staff_token(staff_user) -> str:
    return token_for(staff_user)


@pytest.fixture
def other_staff_token(other_staff_user) -> str:
    return token_for(other_staff_user)


# ── Shift helpers ─────────────────────────────────────────────────────────────

async def make_shift(db, day: date = PAST_DAY, start: time = time(18, 0), end: time = time(23, 0),
                     title: str = "Dinner") -> Shift:
    s = Shift(title=title, date=day, start_time=start, end_time=end)
    db.add(s)
    await db.commit()
    await db.refresh(s)
    return s


async def assign(db, user: User, shift: Shift, position: str = "dining_room", *,
                 is_supervisor: bool = False, hours: float | None = None,
                 validated: bool = False) -> UserShift:
    """Assign a user; with ``hours`` the record is clocked from the shift start."""
    a = UserShift(
        user_id=user.id,
        shift_id=shift.id,
        position=position,
        is_supervisor=is_supervisor,
        validated=validated,
    )
    if hours is not None:
        a.clock_in = datetime.combine(shift.date, shift.start_time, tzinfo=timezone.utc)
        a.clock_out = a.clock_in + timedelta(hours=hours)
    db.add(a)
    await db.commit()
    await db.refresh(a)
    return a


def future_day(days: int = 30) -> date:
    return date.today() + timedelta(days=days)


# ── Helper ────────────────────────────────────────────────────────────────────

def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
