"""
Application lifecycle service: apply, status and payment-status transitions,
bulk actions and refunds.

CONCURRENCY STRATEGY: Conditional increment + unique constraint
================================================================

Problem:
  Two students apply for the last place at the same time. Both read
  current_applications=limit-1, both pass the capacity check, both insert.
  Result: the event is oversold. The same check-then-act race lets one
  student end up with two applications for the same event.

Solution:
  1. Friendly pre-checks (full event, existing application) give the usual
     error early for the common, non-racing case.
  2. The capacity gate is a single conditional UPDATE:
       UPDATE events SET current_applications = current_applications + 1
       WHERE id = :event_id
         AND (participant_limit IS NULL OR participant_limit < 0
              OR current_applications < participant_limit)
     Zero rows affected means another request took the last place.
  3. The application INSERT runs in the same transaction. The
     (event_id, user_id) unique constraint is the authoritative duplicate
     guard; an IntegrityError rolls back the increment as well.

  Apply is therefore all-or-nothing from the caller's view: either the
  application exists and the counter reflects it, or neither changed.

Bulk actions are the opposite: each item is committed on its own so one
failure never undoes the others.
"""

import enum
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from sqlalchemy import select, update, func, or_
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.exceptions import (
    AccountBlockedError,
    CapacityExceededError,
    DuplicateApplicationError,
    InvalidBulkRequestError,
    InvalidPaymentStatusError,
    InvalidStatusError,
    NotFoundError,
    RefundNotApplicableError,
)
from campus_events.core.logging import get_logger
from campus_events.core.metrics import (
    record_application_attempt,
    record_bulk_item,
    record_transition,
    refunds_initiated,
)
from campus_events.db.base import MAX_INTEGER_ID, utcnow
from campus_events.models.application import (
    REFUND_INITIATED,
    Application,
    ApplicationStatus,
    PaymentStatus,
)
from campus_events.models.event import Event
from campus_events.models.user import User
from campus_events.services.interfaces.transition_policy import TransitionPolicy
from campus_events.services.policy_factory import get_transition_policy

logger = get_logger(__name__)

BULK_ACTIONS: dict[str, ApplicationStatus] = {
    "approve": ApplicationStatus.APPROVED,
    "reject": ApplicationStatus.REJECTED,
    "cancel": ApplicationStatus.CANCELLED,
}

# "Pending" is not a payment status any more, but older records may carry it
REFUNDABLE_PAYMENT_STATUSES = frozenset({PaymentStatus.VERIFIED.value, "Pending"})
REFUNDABLE_STATUSES = frozenset({ApplicationStatus.REJECTED.value, ApplicationStatus.CANCELLED.value})


def _value(member: Union[str, enum.Enum, None]) -> Optional[str]:
    return member.value if isinstance(member, enum.Enum) else member


async def _get_application(db: AsyncSession, application_id: int) -> Application:
    result = await db.execute(select(Application).where(Application.id == application_id))
    application = result.scalar_one_or_none()
    if not application:
        raise NotFoundError(
            f"Application {application_id} not found",
            resource="application",
            id=application_id,
        )
    return application


def coerce_id(value: Any) -> Optional[int]:
    """
    Parse a client-supplied record id. Only ints and ASCII digit strings in
    1..MAX_INTEGER_ID qualify; bools, floats and out-of-range numbers give None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        number = int(value.strip())
    else:
        return None
    if not 1 <= number <= MAX_INTEGER_ID:
        return None
    return number


def parse_status(value: Any) -> ApplicationStatus:
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = [member.value for member in ApplicationStatus]
        raise InvalidStatusError(
            f"Invalid status {value!r}. Allowed statuses are: {', '.join(allowed)}",
            allowed=allowed,
        )


def parse_payment_status(value: Any) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        allowed = [member.value for member in PaymentStatus]
        raise InvalidPaymentStatusError(
            f"Invalid payment status {value!r}. Allowed statuses are: {', '.join(allowed)}",
            allowed=allowed,
        )


async def apply_to_event(
    db: AsyncSession,
    event_id: int,
    user_id: int,
    notes: Optional[str] = None,
    payment_screenshot_url: Optional[str] = None,
) -> Application:
    """
    Create a Pending application for (event, user) and count it against the
    event's participant limit. See module docstring for the race handling.
    """
    event = (await db.execute(select(Event).where(Event.id == event_id))).scalar_one_or_none()
    if not event:
        record_application_attempt("not_found")
        raise NotFoundError(f"Event {event_id} not found", resource="event", id=event_id)

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        record_application_attempt("not_found")
        raise NotFoundError(f"User {user_id} not found", resource="user", id=user_id)

    if user.is_blocked:
        record_application_attempt("blocked")
        raise AccountBlockedError("Your account has been blocked. Please contact administration.")

    if event.is_full:
        record_application_attempt("capacity_exceeded")
        logger.warning(
            "application_rejected_full",
            event_id=event_id,
            limit=event.participant_limit,
            current=event.current_applications,
        )
        raise CapacityExceededError(
            "This event is currently full. You cannot apply at this time.",
            participant_limit=event.participant_limit,
            current_applications=event.current_applications,
        )

    existing = await db.execute(
        select(Application.id).where(
            Application.event_id == event_id,
            Application.user_id == user_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        record_application_attempt("duplicate")
        raise DuplicateApplicationError("You have already applied for this event.")

    price = event.price or 0
    application = Application(
        event_id=event_id,
        user_id=user_id,
        user_name=user.name,
        user_email=user.email,
        student_id=user.student_id,
        gender=user.gender,
        phone_no=user.phone_no,
        course=user.course,
        profile_photo=user.profile_photo,
        event_name=event.name,
        event_start_date=event.start_date,
        event_end_date=event.end_date,
        is_paid=price > 0,
        price=price,
        event_image_url=event.image_url,
        qr_code_image_url=event.qr_code_image_url,
        status=ApplicationStatus.PENDING.value,
        payment_status=(PaymentStatus.VERIFIED if price == 0 else PaymentStatus.UNVERIFIED).value,
        payment_screenshot_url=payment_screenshot_url,
        notes=notes or "",
    )

    # Capacity gate: claim a place only if one is still free
    claim = await db.execute(
        update(Event)
        .where(
            Event.id == event_id,
            or_(
                Event.participant_limit.is_(None),
                Event.participant_limit < 0,
                Event.current_applications < Event.participant_limit,
            ),
        )
        .values(current_applications=Event.current_applications + 1)
        .execution_options(synchronize_session=False)
    )
    if claim.rowcount == 0:
        record_application_attempt("capacity_exceeded")
        logger.info("application_lost_capacity_race", event_id=event_id, user_id=user_id)
        raise CapacityExceededError(
            "This event is currently full. You cannot apply at this time.",
            participant_limit=event.participant_limit,
        )

    db.add(application)
    try:
        await db.flush()
    except IntegrityError:
        # Undo the claimed place together with the failed insert
        await db.rollback()
        record_application_attempt("duplicate")
        logger.info("application_lost_duplicate_race", event_id=event_id, user_id=user_id)
        raise DuplicateApplicationError("You have already applied for this event.")

    await db.refresh(application)
    await db.refresh(event, attribute_names=["current_applications"])

    record_application_attempt("created")
    logger.info(
        "application_created",
        application_id=application.id,
        event_id=event_id,
        user_id=user_id,
        is_paid=application.is_paid,
        payment_status=application.payment_status,
        current_applications=event.current_applications,
    )
    return application


async def transition_status(
    db: AsyncSession,
    application_id: int,
    new_status: Any,
    policy: Optional[TransitionPolicy] = None,
) -> Application:
    """Move an application to ``new_status`` if the transition policy allows it."""
    target = parse_status(new_status)
    application = await _get_application(db, application_id)
    policy = policy or get_transition_policy()

    current = ApplicationStatus(application.status)
    if not policy.allows_status(current, target):
        raise InvalidStatusError(
            f"Cannot move application from {current.value} to {target.value}",
            current=current.value,
            requested=target.value,
            policy=policy.name,
        )

    application.status = target.value
    application.updated_at = utcnow()
    await db.flush()
    await db.refresh(application)

    record_transition("status", target.value)
    logger.info(
        "application_status_changed",
        application_id=application_id,
        previous=current.value,
        status=target.value,
    )
    return application


async def transition_payment_status(
    db: AsyncSession,
    application_id: int,
    new_payment_status: Any,
    policy: Optional[TransitionPolicy] = None,
) -> Application:
    target = parse_payment_status(new_payment_status)
    application = await _get_application(db, application_id)
    policy = policy or get_transition_policy()

    current = PaymentStatus(application.payment_status)
    if not policy.allows_payment_status(current, target):
        raise InvalidPaymentStatusError(
            f"Cannot move payment status from {current.value} to {target.value}",
            current=current.value,
            requested=target.value,
            policy=policy.name,
        )

    application.payment_status = target.value
    application.updated_at = utcnow()
    await db.flush()
    await db.refresh(application)

    record_transition("payment_status", target.value)
    logger.info(
        "application_payment_status_changed",
        application_id=application_id,
        previous=current.value,
        payment_status=target.value,
    )
    return application


@dataclass
class BulkResult:
    action: str
    target_status: ApplicationStatus
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    updated: list[dict[str, Any]] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.failed > 0

    def fail(self, item_id: Any, kind: str, message: str) -> None:
        self.failed += 1
        self.errors.append({"id": item_id, "kind": kind, "message": message})
        record_bulk_item(self.action, succeeded=False)

    def succeed(self, application: Application) -> None:
        self.succeeded += 1
        self.updated.append({"id": application.id, "status": application.status})
        record_bulk_item(self.action, succeeded=True)


async def bulk_transition_status(
    db: AsyncSession,
    application_ids: Sequence[Any],
    action: str,
    policy: Optional[TransitionPolicy] = None,
) -> BulkResult:
    """
    Apply approve / reject / cancel to many applications.

    Only a malformed request (no ids, unknown action) fails as a whole.
    Every id is otherwise processed and committed independently; failures are
    collected per id with kind InvalidId, NotFound, ValidationFailed or
    Transient.
    """
    if not application_ids:
        raise InvalidBulkRequestError("Please provide an array of application IDs.")

    normalized_action = (action or "").strip().lower()
    target = BULK_ACTIONS.get(normalized_action)
    if target is None:
        raise InvalidBulkRequestError(
            f"Invalid action. Allowed actions are: {', '.join(BULK_ACTIONS)}.",
            allowed=list(BULK_ACTIONS),
        )

    policy = policy or get_transition_policy()
    result = BulkResult(action=normalized_action, target_status=target)

    for raw_id in application_ids:
        result.processed += 1

        application_id = coerce_id(raw_id)
        if application_id is None:
            result.fail(raw_id, "InvalidId", "Invalid application ID format.")
            continue

        try:
            application = await db.get(Application, application_id)
            if application is None:
                result.fail(application_id, "NotFound", "Application not found.")
                continue

            current = ApplicationStatus(application.status)
            if not policy.allows_status(current, target):
                result.fail(
                    application_id,
                    "ValidationFailed",
                    f"Cannot move application from {current.value} to {target.value}",
                )
                continue

            application.status = target.value
            application.updated_at = utcnow()
            await db.commit()
        except OperationalError as exc:
            await db.rollback()
            logger.error("bulk_item_transient_failure", application_id=application_id, error=str(exc))
            result.fail(application_id, "Transient", "Storage temporarily unavailable.")
            continue
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("bulk_item_failed", application_id=application_id, error=str(exc))
            result.fail(application_id, "ValidationFailed", str(getattr(exc, "orig", None) or exc))
            continue

        result.succeed(application)

    logger.info(
        "bulk_status_update_completed",
        action=normalized_action,
        processed=result.processed,
        succeeded=result.succeeded,
        failed=result.failed,
    )
    return result


def is_refund_applicable(application: Application) -> bool:
    """
    A refund may be initiated when a paid, settled application ended in a
    negative outcome: is_paid, payment in {Verified, Pending} and status in
    {Rejected, Cancelled}.
    """
    paid_and_settled = bool(application.is_paid) and _value(application.payment_status) in REFUNDABLE_PAYMENT_STATUSES
    terminal_negative = _value(application.status) in REFUNDABLE_STATUSES
    return paid_and_settled and terminal_negative


async def initiate_refund(db: AsyncSession, application_id: int) -> Application:
    """
    Record refund intent on an eligible application. Settlement with the
    payment provider happens out of band; this only marks the record.
    """
    application = await _get_application(db, application_id)

    if not is_refund_applicable(application):
        raise RefundNotApplicableError(
            "Refund is not applicable for this application based on its current status or payment.",
            details={
                "is_paid": bool(application.is_paid),
                "payment_status": application.payment_status,
                "status": application.status,
            },
        )

    if application.refund_status == REFUND_INITIATED:
        logger.info("refund_already_initiated", application_id=application_id)
        return application

    application.refund_status = REFUND_INITIATED
    application.refund_initiated_at = utcnow()
    await db.flush()
    await db.refresh(application)

    refunds_initiated.inc()
    logger.info(
        "refund_initiated",
        application_id=application_id,
        user_id=application.user_id,
        event_id=application.event_id,
        price=application.price,
    )
    return application


async def get_user_applications(db: AsyncSession, user_id: int) -> list[Application]:
    """All applications of one student, soonest event first."""
    result = await db.execute(
        select(Application)
        .where(Application.user_id == user_id)
        .order_by(Application.event_start_date.asc())
    )
    return list(result.scalars().all())


async def get_user_upcoming_applications(db: AsyncSession, user_id: int) -> list[Application]:
    """Applications whose event (as snapshotted) has not started yet."""
    result = await db.execute(
        select(Application)
        .where(
            Application.user_id == user_id,
            Application.event_start_date >= datetime.now(timezone.utc),
        )
        .order_by(Application.event_start_date.asc())
    )
    return list(result.scalars().all())


async def get_user_application(db: AsyncSession, user_id: int, application_id: int) -> Application:
    result = await db.execute(
        select(Application).where(
            Application.id == application_id,
            Application.user_id == user_id,
        )
    )
    application = result.scalar_one_or_none()
    if not application:
        raise NotFoundError(
            "Application not found or you do not have access to it.",
            resource="application",
            id=application_id,
        )
    return application


async def list_applications(db: AsyncSession, event_id: Optional[int] = None) -> list[Application]:
    query = select(Application)
    if event_id is not None:
        query = query.where(Application.event_id == event_id)
    result = await db.execute(query.order_by(Application.created_at.desc(), Application.id.desc()))
    return list(result.scalars().all())


async def get_application_stats(db: AsyncSession) -> dict[str, Any]:
    """Dashboard counters for the admin panel."""
    by_status = {member.value: 0 for member in ApplicationStatus}
    rows = await db.execute(select(Application.status, func.count()).group_by(Application.status))
    for status_value, count in rows.all():
        by_status[status_value] = count

    by_payment_status = {member.value: 0 for member in PaymentStatus}
    rows = await db.execute(
        select(Application.payment_status, func.count()).group_by(Application.payment_status)
    )
    for payment_value, count in rows.all():
        by_payment_status[payment_value] = count

    total_users = (await db.execute(select(func.count()).select_from(User))).scalar()
    total_events = (await db.execute(select(func.count()).select_from(Event))).scalar()

    return {
        "total_applications": sum(by_status.values()),
        "by_status": by_status,
        "by_payment_status": by_payment_status,
        "total_users": total_users,
        "total_events": total_events,
    }
