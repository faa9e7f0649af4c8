"""
Student-facing application endpoints.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.base import MAX_INTEGER_ID
from campus_events.db.session import get_db
from campus_events.schemas.application import ApplicationResponse, ApplicationListResponse, ApplicationSummary
from campus_events.services.application_service import get_user_applications, get_user_application
from campus_events.core.security import get_current_user_id

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("/me", response_model=ApplicationListResponse)
async def list_my_applications(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """All applications of the authenticated student."""
    applications = await get_user_applications(db, user_id)
    return ApplicationListResponse(
        total=len(applications),
        applications=[ApplicationSummary.model_validate(a) for a in applications],
    )


@router.get("/me/{application_id}", response_model=ApplicationResponse)
async def get_my_application(
    application_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_user_application(db, user_id, application_id)
