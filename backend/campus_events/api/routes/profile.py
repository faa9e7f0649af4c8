"""
Student profile: read and edit the authenticated student's own account.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.session import get_db
from campus_events.schemas.user import ProfileUpdate, UserResponse
from campus_events.services.user_service import get_user, update_profile
from campus_events.core.security import get_current_user_id

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=UserResponse)
async def read_profile(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_user(db, user_id)


@router.put("", response_model=UserResponse)
async def edit_profile(
    profile: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Partial edit. Existing applications keep the details they were made with."""
    return await update_profile(db, user_id, profile)
