"""
Student accounts after signup: the student's own profile, and the
administrator's view (list, detail, roles, blocking).

Profile edits only touch the users table. Applications keep the copy of
name, phone and course taken when the student applied.
"""

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.exceptions import NotFoundError
from campus_events.core.security import ADMIN_ROLE, STUDENT_ROLE
from campus_events.models.user import User
from campus_events.schemas.user import ProfileUpdate
from campus_events.core.logging import get_logger

logger = get_logger(__name__)

KNOWN_ROLES = (STUDENT_ROLE, ADMIN_ROLE)


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError(f"User {user_id} not found", resource="user", id=user_id)
    return user


async def list_users(db: AsyncSession) -> list[User]:
    """All accounts, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def update_profile(db: AsyncSession, user_id: int, profile: ProfileUpdate) -> User:
    user = await get_user(db, user_id)
    changes = profile.model_dump(exclude_unset=True)
    for key in ("name", "gender", "phone_no", "course"):
        if key in changes and changes[key] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{key} cannot be cleared",
            )

    for key, value in changes.items():
        setattr(user, key, value)
    await db.flush()
    await db.refresh(user)

    logger.info("profile_updated", user_id=user.id, fields=sorted(changes))
    return user


async def update_user_roles(db: AsyncSession, user_id: int, roles: list[str]) -> User:
    """
    Replace the role set. Roles must be a non-empty subset of KNOWN_ROLES;
    duplicates are dropped, order is kept.
    """
    cleaned = list(dict.fromkeys(role.strip() for role in roles))
    if not cleaned:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Roles must be provided as a non-empty array.",
        )
    unknown = [role for role in cleaned if role not in KNOWN_ROLES]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown roles: {', '.join(unknown)}. Allowed roles are: {', '.join(KNOWN_ROLES)}",
        )

    user = await get_user(db, user_id)
    previous = user.role_list
    user.roles = ",".join(cleaned)
    await db.flush()
    await db.refresh(user)

    logger.info("user_roles_updated", user_id=user.id, previous=previous, roles=user.role_list)
    return user


async def toggle_user_block(db: AsyncSession, user_id: int) -> User:
    """Flip the blocked flag. Blocked students cannot log in or apply."""
    user = await get_user(db, user_id)
    user.is_blocked = not user.is_blocked
    await db.flush()
    await db.refresh(user)
    logger.info("user_block_toggled", user_id=user.id, is_blocked=user.is_blocked)
    return user
