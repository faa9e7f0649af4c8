"""
Administrator endpoints: login, application management, refunds and user
management. Everything except login requires a token with the Admin role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.base import MAX_INTEGER_ID
from campus_events.db.session import get_db
from campus_events.schemas.user import AdminLogin, RoleUpdate, Token, UserBlockResponse, UserResponse
from campus_events.schemas.application import (
    ApplicationResponse,
    ApplicationStats,
    BulkActionRequest,
    BulkActionResponse,
    BulkSummary,
    PaymentStatusUpdate,
    RefundResponse,
    StatusUpdate,
)
from campus_events.services import application_service, user_service
from campus_events.services.auth_service import authenticate_admin
from campus_events.core.security import require_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login", response_model=Token)
async def admin_login(login_data: AdminLogin):
    """Exchange the static admin credentials for an Admin token."""
    return Token(access_token=authenticate_admin(login_data))


@router.get("/applications", response_model=list[ApplicationResponse])
async def list_applications(
    event_id: Optional[int] = Query(None, ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.list_applications(db, event_id)


@router.get("/applications/stats", response_model=ApplicationStats)
async def application_stats(
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.get_application_stats(db)


@router.patch("/applications/{application_id}/status", response_model=ApplicationResponse)
async def update_status(
    body: StatusUpdate,
    application_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.transition_status(db, application_id, body.status)


@router.patch("/applications/{application_id}/payment-status", response_model=ApplicationResponse)
async def update_payment_status(
    body: PaymentStatusUpdate,
    application_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.transition_payment_status(db, application_id, body.payment_status)


@router.post(
    "/applications/bulk-action",
    response_model=BulkActionResponse,
    responses={status.HTTP_207_MULTI_STATUS: {"model": BulkActionResponse}},
)
async def bulk_action(
    body: BulkActionRequest,
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Approve, reject or cancel many applications at once.

    200 when every id succeeded, 207 Multi-Status when some failed; the
    per-id failures are listed in ``details``.
    """
    result = await application_service.bulk_transition_status(db, body.application_ids, body.action)

    summary = BulkSummary(processed=result.processed, succeeded=result.succeeded, failed=result.failed)
    if result.partial:
        message = f"Bulk operation completed with {result.failed} failures."
    else:
        message = f"All {result.succeeded} applications were set to {result.target_status.value}."
    response = BulkActionResponse(
        message=message,
        summary=summary,
        details=result.errors,
        updated=result.updated,
    )

    if result.partial:
        return JSONResponse(status_code=status.HTTP_207_MULTI_STATUS, content=response.model_dump(mode="json"))
    return response


@router.post("/applications/{application_id}/refund", response_model=RefundResponse)
async def refund(
    application_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.initiate_refund(db, application_id)
    return RefundResponse(
        message="Refund initiated successfully.",
        application_id=application.id,
        refund_status=application.refund_status,
    )


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_users(db)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_roles(
    body: RoleUpdate,
    user_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Replace the user's role set. New roles apply from the next login."""
    return await user_service.update_user_roles(db, user_id, body.roles)


@router.patch("/users/{user_id}/block", response_model=UserBlockResponse)
async def toggle_block(
    user_id: int = Path(..., ge=1, le=MAX_INTEGER_ID),
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.toggle_user_block(db, user_id)
    return UserBlockResponse(
        message=f"User {'blocked' if user.is_blocked else 'unblocked'} successfully.",
        user_id=user.id,
        is_blocked=user.is_blocked,
    )
