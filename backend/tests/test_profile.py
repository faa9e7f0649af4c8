"""
Tests for the student's own profile.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/profile", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "student@example.com"
    assert data["roles"] == ["student"]
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_get_profile_requires_login(client: AsyncClient):
    response = await client.get("/api/v1/profile")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/profile",
        json={"name": "Renamed Student", "phone_no": "9000000001"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed Student"
    assert data["phone_no"] == "9000000001"
    assert data["course"] == "Computer Science"


@pytest.mark.asyncio
async def test_update_profile_cannot_clear_required_field(client: AsyncClient, auth_headers):
    response = await client.put("/api/v1/profile", json={"name": None}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_profile_rejects_bad_phone(client: AsyncClient, auth_headers):
    response = await client.put("/api/v1/profile", json={"phone_no": "12345"}, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_profile_edit_keeps_application_snapshot(client: AsyncClient, auth_headers, free_event):
    """Applications keep the name and phone the student applied with."""
    applied = await client.post(f"/api/v1/events/{free_event.id}/apply", headers=auth_headers)
    assert applied.status_code == 201
    application_id = applied.json()["id"]

    edited = await client.put(
        "/api/v1/profile",
        json={"name": "New Name", "phone_no": "9111111111", "course": "Physics"},
        headers=auth_headers,
    )
    assert edited.status_code == 200

    response = await client.get(f"/api/v1/applications/me/{application_id}", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["user_name"] == "Test Student"
    assert data["phone_no"] == "9876543210"
    assert data["course"] == "Computer Science"
