"""
Event service handling the event directory: create, edit, delete, read, list.

Editing an event never touches existing applications; their event fields
are a snapshot taken when the student applied.
"""

from datetime import datetime, timezone
from sqlalchemy import delete, select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from campus_events.core.exceptions import EventHasApplicationsError, NotFoundError
from campus_events.models.application import Application
from campus_events.models.event import Event
from campus_events.schemas.event import EventCreate, EventUpdate
from campus_events.core.logging import get_logger

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_date_range(start_date: datetime, end_date: datetime) -> None:
    if _as_utc(end_date) < _as_utc(start_date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event end date must not be before its start date",
        )


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """Create a new event with no applications counted yet."""
    if _as_utc(event_data.start_date) <= datetime.now(timezone.utc):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event start date must be in the future",
        )
    _check_date_range(event_data.start_date, event_data.end_date)

    event = Event(
        name=event_data.name,
        description=event_data.description,
        location=event_data.location,
        start_date=_as_utc(event_data.start_date),
        end_date=_as_utc(event_data.end_date),
        is_paid=event_data.price > 0,
        price=event_data.price,
        image_url=event_data.image_url,
        qr_code_image_url=event_data.qr_code_image_url,
        organizer_name=event_data.organizer_name,
        organizer_email=event_data.organizer_email,
        participant_limit=event_data.participant_limit,
        current_applications=0,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info(
        "event_created",
        event_id=event.id,
        name=event.name,
        price=event.price,
        participant_limit=event.participant_limit,
    )
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError(f"Event {event_id} not found", resource="event", id=event_id)
    return event


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate) -> Event:
    """
    Apply a partial edit. Explicitly sending participant_limit=null removes
    the limit. The paid flag always follows the price.
    """
    event = await get_event(db, event_id)
    changes = event_data.model_dump(exclude_unset=True)

    for key in ("name", "price"):
        if key in changes and changes[key] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{key} cannot be cleared",
            )
    for key in ("start_date", "end_date"):
        if key in changes:
            if changes[key] is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"{key} cannot be cleared",
                )
            changes[key] = _as_utc(changes[key])

    _check_date_range(changes.get("start_date", event.start_date), changes.get("end_date", event.end_date))

    for key, value in changes.items():
        setattr(event, key, value)
    if "price" in changes:
        event.is_paid = event.price > 0

    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def delete_event(db: AsyncSession, event_id: int) -> None:
    """
    Remove an event nobody has applied to. Applications are permanent
    records, so an event with applications cannot be deleted.
    """
    event = await get_event(db, event_id)
    count = (await db.execute(
        select(func.count()).select_from(Application).where(Application.event_id == event_id)
    )).scalar()
    if count:
        raise EventHasApplicationsError(
            "This event has applications and cannot be deleted.",
            applications=count,
        )

    name = event.name
    await db.execute(delete(Event).where(Event.id == event_id))
    logger.info("event_deleted", event_id=event_id, name=name)


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    upcoming_only: bool = True,
) -> tuple[list[Event], int]:
    """
    List events with pagination.
    Uses the ix_events_start_date index for date filtering.
    """
    query = select(Event)

    if upcoming_only:
        query = query.where(Event.start_date >= datetime.now(timezone.utc))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.start_date.asc(), Event.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total
