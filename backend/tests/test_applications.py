"""
Tests for the student application flow.

Includes concurrency tests that race separate sessions against the same
event to verify no overbooking and no duplicate applications.
"""

import asyncio
from datetime import datetime, timezone, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from campus_events.core.exceptions import LifecycleError
from campus_events.models.application import Application
from campus_events.models.event import Event
from campus_events.services.application_service import apply_to_event

from tests.conftest import TestSessionLocal, bearer, make_event, make_user


async def _attempt(event_id: int, user_id: int) -> str:
    """One apply in its own session, as a separate request would do."""
    async with TestSessionLocal() as session:
        try:
            await apply_to_event(session, event_id, user_id)
            await session.commit()
            return "created"
        except LifecycleError as e:
            await session.rollback()
            return e.kind


@pytest.mark.asyncio
async def test_apply_free_event(client: AsyncClient, auth_headers, test_user, free_event):
    """Free events produce a Pending application with payment already Verified."""
    event_id = free_event.id
    user_id = test_user.id
    response = await client.post(
        f"/api/v1/events/{event_id}/apply",
        json={"notes": "Looking forward to it"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["event_id"] == event_id
    assert data["user_id"] == user_id
    assert data["status"] == "Pending"
    assert data["payment_status"] == "Verified"
    assert data["is_paid"] is False
    assert data["notes"] == "Looking forward to it"
    assert data["refund_status"] is None


@pytest.mark.asyncio
async def test_apply_paid_event(client: AsyncClient, auth_headers, paid_event):
    """Paid events start Unverified and carry the event price."""
    response = await client.post(
        f"/api/v1/events/{paid_event.id}/apply",
        json={"payment_screenshot_url": "https://media.example.com/receipt.png"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Pending"
    assert data["payment_status"] == "Unverified"
    assert data["is_paid"] is True
    assert data["price"] == 250.0
    assert data["payment_screenshot_url"] == "https://media.example.com/receipt.png"
    assert data["event_image_url"] == "https://media.example.com/robotics.png"


@pytest.mark.asyncio
async def test_apply_without_body(client: AsyncClient, auth_headers, free_event):
    response = await client.post(f"/api/v1/events/{free_event.id}/apply", headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["notes"] == ""


@pytest.mark.asyncio
async def test_apply_copies_user_snapshot(client: AsyncClient, auth_headers, free_event):
    response = await client.post(f"/api/v1/events/{free_event.id}/apply", headers=auth_headers)
    data = response.json()
    assert data["user_name"] == "Test Student"
    assert data["user_email"] == "student@example.com"
    assert data["student_id"] == "S1001"
    assert data["phone_no"] == "9876543210"
    assert data["course"] == "Computer Science"
    assert data["event_name"] == "Tech Talk"


@pytest.mark.asyncio
async def test_apply_increments_counter(client: AsyncClient, db_session, auth_headers, paid_event):
    event_id = paid_event.id
    response = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
    assert response.status_code == 201

    event = await db_session.get(Event, event_id)
    await db_session.refresh(event)
    assert event.current_applications == 1


@pytest.mark.asyncio
async def test_apply_twice_is_duplicate(client: AsyncClient, db_session, auth_headers, paid_event):
    """Second application for the same event returns 409 and leaves the counter alone."""
    event_id = paid_event.id
    first = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
    assert first.status_code == 201

    second = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
    assert second.status_code == 409
    assert second.json()["detail"]["kind"] == "DuplicateApplication"

    event = await db_session.get(Event, event_id)
    await db_session.refresh(event)
    assert event.current_applications == 1


@pytest.mark.asyncio
async def test_apply_full_event(client: AsyncClient, auth_headers, full_event):
    """Event at its participant limit returns 409 CapacityExceeded."""
    response = await client.post(f"/api/v1/events/{full_event.id}/apply", headers=auth_headers)
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["kind"] == "CapacityExceeded"
    assert detail["participant_limit"] == 2


@pytest.mark.asyncio
async def test_apply_zero_limit_event(client: AsyncClient, db_session, auth_headers):
    event = await make_event(db_session, participant_limit=0)
    response = await client.post(f"/api/v1/events/{event.id}/apply", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "CapacityExceeded"


@pytest.mark.asyncio
async def test_apply_negative_limit_is_unlimited(client: AsyncClient, db_session, auth_headers):
    event = await make_event(db_session, participant_limit=-1, current_applications=40)
    response = await client.post(f"/api/v1/events/{event.id}/apply", headers=auth_headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_apply_nonexistent_event(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/events/99999/apply", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "NotFound"


@pytest.mark.asyncio
async def test_apply_blocked_user(client: AsyncClient, db_session, auth_headers, test_user, free_event):
    """Blocked students cannot apply."""
    event_id = free_event.id
    test_user.is_blocked = True
    await db_session.commit()

    response = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["detail"]["kind"] == "AccountBlocked"


@pytest.mark.asyncio
async def test_apply_requires_student_token(client: AsyncClient, admin_headers, free_event):
    response = await client.post(f"/api/v1/events/{free_event.id}/apply", headers=admin_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_my_applications(client: AsyncClient, db_session, auth_headers, test_user):
    """Own applications are listed soonest event first."""
    now = datetime.now(timezone.utc)
    later = await make_event(
        db_session, name="Later", start_date=now + timedelta(days=60), end_date=now + timedelta(days=61)
    )
    sooner = await make_event(
        db_session, name="Sooner", start_date=now + timedelta(days=5), end_date=now + timedelta(days=6)
    )
    later_id, sooner_id = later.id, sooner.id

    await client.post(f"/api/v1/events/{later_id}/apply", headers=auth_headers)
    await client.post(f"/api/v1/events/{sooner_id}/apply", headers=auth_headers)

    response = await client.get("/api/v1/applications/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [a["event_name"] for a in data["applications"]] == ["Sooner", "Later"]


@pytest.mark.asyncio
async def test_get_my_application(client: AsyncClient, auth_headers, free_event):
    created = await client.post(f"/api/v1/events/{free_event.id}/apply", headers=auth_headers)
    application_id = created.json()["id"]

    response = await client.get(f"/api/v1/applications/me/{application_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["id"] == application_id


@pytest.mark.asyncio
async def test_cannot_read_other_users_application(
    client: AsyncClient, auth_headers, other_user, free_event
):
    created = await client.post(f"/api/v1/events/{free_event.id}/apply", headers=auth_headers)
    application_id = created.json()["id"]

    response = await client.get(
        f"/api/v1/applications/me/{application_id}", headers=bearer(other_user)
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_duplicate_applications(db_session, test_user, free_event):
    """
    The same student applying twice at once: exactly one application
    exists afterwards and the counter is 1.
    """
    event_id, user_id = free_event.id, test_user.id
    # Release the fixture session's transaction before racing
    await db_session.commit()

    results = await asyncio.gather(*[_attempt(event_id, user_id) for _ in range(5)])

    assert results.count("created") == 1
    assert results.count("DuplicateApplication") == 4

    async with TestSessionLocal() as session:
        count = (await session.execute(
            select(func.count()).select_from(Application).where(Application.event_id == event_id)
        )).scalar()
        event = await session.get(Event, event_id)
        assert count == 1
        assert event.current_applications == 1


@pytest.mark.asyncio
async def test_concurrent_applications_for_last_place(db_session):
    """
    Many students race for an event with 3 places left: exactly 3 succeed,
    the rest get CapacityExceeded, and the counter never passes the limit.
    """
    event = await make_event(db_session, participant_limit=5, current_applications=2)
    users = [
        await make_user(
            db_session,
            name=f"Racer {i}",
            student_id=f"R{i:03d}",
            email=f"racer{i}@example.com",
        )
        for i in range(8)
    ]
    event_id = event.id
    user_ids = [u.id for u in users]
    await db_session.commit()

    results = await asyncio.gather(*[_attempt(event_id, uid) for uid in user_ids])

    assert results.count("created") == 3
    assert results.count("CapacityExceeded") == 5

    async with TestSessionLocal() as session:
        event = await session.get(Event, event_id)
        count = (await session.execute(
            select(func.count()).select_from(Application).where(Application.event_id == event_id)
        )).scalar()
        assert event.current_applications == 5
        assert count == 3
