"""
Tests for event endpoints: admin create/edit/delete, public browse,
and the student's upcoming list.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient
from sqlalchemy import select

from campus_events.models.application import Application
from campus_events.models.event import Event

from tests.conftest import make_event


def _event_payload(**overrides) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=30)
    payload = {
        "name": "Hackathon 2026",
        "description": "24 hour build sprint",
        "location": "Innovation Lab",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=1)).isoformat(),
        "price": 0,
        "participant_limit": 100,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, admin_headers):
    """Admin can create an event."""
    response = await client.post("/api/v1/events/", json=_event_payload(), headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Hackathon 2026"
    assert data["participant_limit"] == 100
    assert data["current_applications"] == 0
    assert data["is_paid"] is False


@pytest.mark.asyncio
async def test_create_paid_event_sets_flag(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/events/", json=_event_payload(price=150.0), headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["is_paid"] is True


@pytest.mark.asyncio
async def test_create_event_unauthenticated(client: AsyncClient):
    """Unauthenticated request returns 401."""
    response = await client.post("/api/v1/events/", json=_event_payload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_event_as_student(client: AsyncClient, auth_headers):
    """Students cannot create events."""
    response = await client.post("/api/v1/events/", json=_event_payload(), headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_event_past_date(client: AsyncClient, admin_headers):
    """Event starting in the past returns 400."""
    past = datetime.now(timezone.utc) - timedelta(days=1)
    response = await client.post(
        "/api/v1/events/",
        json=_event_payload(start_date=past.isoformat(), end_date=past.isoformat()),
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, admin_headers):
    start = datetime.now(timezone.utc) + timedelta(days=10)
    response = await client.post(
        "/api/v1/events/",
        json=_event_payload(
            start_date=start.isoformat(),
            end_date=(start - timedelta(hours=1)).isoformat(),
        ),
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_event_negative_price(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/events/", json=_event_payload(price=-5), headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, free_event, paid_event):
    """List events returns paginated results."""
    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["cached"] is False
    assert {e["name"] for e in data["events"]} == {"Tech Talk", "Robotics Workshop"}


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient, free_event):
    event_id = free_event.id
    response = await client.get(f"/api/v1/events/{event_id}")
    assert response.status_code == 200
    assert response.json()["id"] == event_id


@pytest.mark.asyncio
async def test_get_nonexistent_event(client: AsyncClient):
    """Non-existent event returns 404."""
    response = await client.get("/api/v1/events/99999")
    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "NotFound"


@pytest.mark.asyncio
async def test_update_event_price_updates_paid_flag(client: AsyncClient, admin_headers, free_event):
    event_id = free_event.id
    response = await client.put(
        f"/api/v1/events/{event_id}",
        json={"price": 99.0, "location": "Auditorium"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["price"] == 99.0
    assert data["is_paid"] is True
    assert data["location"] == "Auditorium"
    assert data["name"] == "Tech Talk"


@pytest.mark.asyncio
async def test_update_event_cannot_clear_name(client: AsyncClient, admin_headers, free_event):
    response = await client.put(
        f"/api/v1/events/{free_event.id}",
        json={"name": None},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_event_keeps_application_snapshot(
    client: AsyncClient, db_session, admin_headers, auth_headers, free_event
):
    """Editing an event never rewrites the copy held by existing applications."""
    event_id = free_event.id
    applied = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
    assert applied.status_code == 201
    application_id = applied.json()["id"]

    response = await client.put(
        f"/api/v1/events/{event_id}",
        json={"name": "Renamed Talk", "price": 500.0},
        headers=admin_headers,
    )
    assert response.status_code == 200

    result = await db_session.execute(select(Application).where(Application.id == application_id))
    application = result.scalar_one()
    await db_session.refresh(application)
    assert application.event_name == "Tech Talk"
    assert application.price == 0
    assert application.is_paid is False


@pytest.mark.asyncio
async def test_delete_event(client: AsyncClient, admin_headers, free_event):
    event_id = free_event.id

    response = await client.delete(f"/api/v1/events/{event_id}", headers=admin_headers)
    assert response.status_code == 204

    missing = await client.get(f"/api/v1/events/{event_id}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_event_with_applications_is_refused(
    client: AsyncClient, db_session, admin_headers, auth_headers, free_event
):
    event_id = free_event.id
    applied = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
    assert applied.status_code == 201

    response = await client.delete(f"/api/v1/events/{event_id}", headers=admin_headers)
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["kind"] == "EventHasApplications"
    assert detail["applications"] == 1

    assert await db_session.get(Event, event_id) is not None


@pytest.mark.asyncio
async def test_delete_event_as_student(client: AsyncClient, auth_headers, free_event):
    response = await client.delete(f"/api/v1/events/{free_event.id}", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_missing_event(client: AsyncClient, admin_headers):
    response = await client.delete("/api/v1/events/99999", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_event_path_id_out_of_range(client: AsyncClient):
    response = await client.get(f"/api/v1/events/{10**30}")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_my_upcoming_applications(client: AsyncClient, db_session, auth_headers):
    """Only applications for events that have not started, soonest first."""
    now = datetime.now(timezone.utc)
    past = await make_event(
        db_session, name="Last Week", start_date=now - timedelta(days=7), end_date=now - timedelta(days=6)
    )
    later = await make_event(
        db_session, name="Later", start_date=now + timedelta(days=40), end_date=now + timedelta(days=41)
    )
    sooner = await make_event(
        db_session, name="Sooner", start_date=now + timedelta(days=3), end_date=now + timedelta(days=4)
    )
    event_ids = [past.id, later.id, sooner.id]

    for event_id in event_ids:
        applied = await client.post(f"/api/v1/events/{event_id}/apply", headers=auth_headers)
        assert applied.status_code == 201

    response = await client.get("/api/v1/events/upcoming/my", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [a["event_name"] for a in data["applications"]] == ["Sooner", "Later"]


@pytest.mark.asyncio
async def test_my_upcoming_applications_requires_login(client: AsyncClient):
    response = await client.get("/api/v1/events/upcoming/my")
    assert response.status_code == 401
