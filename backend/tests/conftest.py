"""
Pytest fixtures for test database, client, and authentication.

Tests run against a throwaway SQLite file (override with TEST_DATABASE_URL to
use PostgreSQL). Tables are created and dropped around every test; Redis is
disabled so listings always come from the database.
"""

import os
import tempfile

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ADMIN_EMAIL", "admin@campus.local")
os.environ.setdefault("ADMIN_PASSWORD", "admin-test-password")
os.environ.setdefault("TRANSITION_POLICY", "permissive")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.main import app
from campus_events.db.base import Base
from campus_events.db.session import build_engine, build_session_factory, get_db
from campus_events.core.security import ADMIN_ROLE, create_access_token, hash_password
from campus_events.models.user import User
from campus_events.models.event import Event
from campus_events.services.policy_factory import set_transition_policy

TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'campus_events_test.db')}",
)

test_engine = build_engine(TEST_DATABASE_URL)
TestSessionLocal = build_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def reset_transition_policy():
    set_transition_policy(None)
    yield
    set_transition_policy(None)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, **overrides) -> User:
    fields = {
        "name": "Test Student",
        "student_id": "S1001",
        "email": "student@example.com",
        "gender": "Female",
        "phone_no": "9876543210",
        "course": "Computer Science",
        "hashed_password": hash_password("testpassword123"),
    }
    fields.update(overrides)
    user = User(**fields)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_event(db: AsyncSession, **overrides) -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=30)
    fields = {
        "name": "Tech Talk",
        "description": "An evening talk",
        "location": "Main Hall",
        "start_date": start,
        "end_date": start + timedelta(hours=3),
        "price": 0,
        "is_paid": False,
        "participant_limit": None,
        "current_applications": 0,
    }
    fields.update(overrides)
    event = Event(**fields)
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


def bearer(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "roles": user.role_list})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test student in the database."""
    return await make_user(db_session)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(
        db_session,
        name="Second Student",
        student_id="S1002",
        email="second@example.com",
        gender="Male",
        phone_no="9123456780",
    )


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Authorization headers with a student Bearer token."""
    return bearer(test_user)


@pytest_asyncio.fixture
async def admin_headers() -> dict:
    token = create_access_token(data={"sub": "admin", "roles": [ADMIN_ROLE]})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def free_event(db_session: AsyncSession) -> Event:
    """Free event with no participant limit."""
    return await make_event(db_session)


@pytest_asyncio.fixture
async def paid_event(db_session: AsyncSession) -> Event:
    return await make_event(
        db_session,
        name="Robotics Workshop",
        price=250.0,
        is_paid=True,
        participant_limit=50,
        image_url="https://media.example.com/robotics.png",
        qr_code_image_url="https://media.example.com/robotics-qr.png",
    )


@pytest_asyncio.fixture
async def full_event(db_session: AsyncSession) -> Event:
    """Event whose participant limit is already reached."""
    return await make_event(
        db_session,
        name="Sold Out Seminar",
        participant_limit=2,
        current_applications=2,
    )
