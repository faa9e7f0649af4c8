"""
Authentication service: student registration and login, and the single
administrator login checked against static credentials from settings.
"""

import secrets

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from campus_events.models.user import User
from campus_events.schemas.user import UserCreate, UserLogin, AdminLogin
from campus_events.core.config import get_settings
from campus_events.core.exceptions import AccountBlockedError
from campus_events.core.security import (
    ADMIN_ROLE,
    create_access_token,
    hash_password,
    verify_password,
)
from campus_events.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

ADMIN_SUBJECT = "admin"


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new student with hashed password.
    Raises 409 if email or student id already exists.
    """
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=email)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    result = await db.execute(select(User).where(User.student_id == user_data.student_id))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="student_id_exists", student_id=user_data.student_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Student ID already registered",
        )

    user = User(
        name=user_data.name,
        student_id=user_data.student_id,
        email=email,
        gender=user_data.gender,
        phone_no=user_data.phone_no,
        course=user_data.course,
        profile_photo=user_data.profile_photo,
        hashed_password=hash_password(user_data.password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> str:
    """
    Authenticate a student and return a JWT access token.
    Raises 401 if credentials are invalid, 403 if the account is blocked.
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.is_blocked:
        logger.warning("login_blocked", user_id=user.id)
        raise AccountBlockedError("Your account has been blocked. Please contact administration.")

    token = create_access_token(data={"sub": str(user.id), "roles": user.role_list})
    logger.info("user_logged_in", user_id=user.id)
    return token


def authenticate_admin(login_data: AdminLogin) -> str:
    """Compare against the configured admin credentials and issue an Admin token."""
    email_ok = secrets.compare_digest(login_data.email.lower(), settings.ADMIN_EMAIL.lower())
    password_ok = secrets.compare_digest(login_data.password, settings.ADMIN_PASSWORD)
    if not (email_ok and password_ok):
        logger.warning("admin_login_failed", email=login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(
        data={"sub": ADMIN_SUBJECT, "email": settings.ADMIN_EMAIL, "roles": [ADMIN_ROLE]}
    )
    logger.info("admin_logged_in")
    return token
