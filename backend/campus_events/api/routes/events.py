"""
Event endpoints: public browsing with Redis caching on the listing,
admin-only create/edit, and the student apply action.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.base import MAX_INTEGER_ID
from campus_events.db.session import get_db
from campus_events.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from campus_events.schemas.application import (
    ApplyRequest,
    ApplicationResponse,
    ApplicationListResponse,
    ApplicationSummary,
)
from campus_events.services.event_service import create_event, delete_event, get_event, list_events, update_event
from campus_events.services.application_service import apply_to_event, get_user_upcoming_applications
from campus_events.services.cache_service import get_cached_events, set_cached_events, invalidate_event_cache
from campus_events.core.security import get_current_user_id, require_admin
from campus_events.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a new event. Admins only."""
    event = await create_event(db, event_data)
    await invalidate_event_cache()
    return event


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    upcoming_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with pagination.
    Results are cached in Redis; the cache is invalidated on event changes
    and on every new application.
    """
    cached = await get_cached_events(page, page_size, upcoming_only)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size, upcoming_only)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump(mode="json") for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }

    await set_cached_events(page, page_size, upcoming_only, response_data)

    return EventListResponse(**response_data)


@router.get("/upcoming/my", response_model=ApplicationListResponse)
async def my_upcoming_applications(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The student's applications for events that have not started yet."""
    applications = await get_user_upcoming_applications(db, user_id)
    return ApplicationListResponse(
        total=len(applications),
        applications=[ApplicationSummary.model_validate(a) for a in applications],
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    db: AsyncSession = Depends(get_db),
):
    """Get a single event by ID. Not cached (shows the live application count)."""
    event = await get_event(db, event_id)
    return event


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_data: EventUpdate,
    event_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Edit an event. Existing applications keep their snapshot."""
    event = await update_event(db, event_id, event_data)
    await invalidate_event_cache()
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event. Refused with 409 once anyone has applied."""
    await delete_event(db, event_id)
    await invalidate_event_cache()


@router.post("/{event_id}/apply", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def apply_endpoint(
    event_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    apply_data: Optional[ApplyRequest] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Apply to an event.

    Fails with 409 CapacityExceeded when the participant limit is reached and
    409 DuplicateApplication when the student already applied.
    """
    apply_data = apply_data or ApplyRequest()
    application = await apply_to_event(
        db,
        event_id,
        user_id,
        notes=apply_data.notes,
        payment_screenshot_url=apply_data.payment_screenshot_url,
    )
    await invalidate_event_cache()
    return application
