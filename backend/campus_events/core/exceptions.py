"""
Domain errors for the application lifecycle.

Every error is an HTTPException so services can raise it directly, the same
way they raise plain HTTPExceptions elsewhere. The response detail always
carries a machine-readable ``kind`` next to the human-readable message.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class LifecycleError(HTTPException):
    kind: str = "LifecycleError"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, headers: Optional[dict[str, str]] = None, **extra: Any):
        self.message = message
        self.extra = extra
        detail = {"kind": self.kind, "message": message, **extra}
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class NotFoundError(LifecycleError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateApplicationError(LifecycleError):
    kind = "DuplicateApplication"
    status_code = status.HTTP_409_CONFLICT


class CapacityExceededError(LifecycleError):
    kind = "CapacityExceeded"
    status_code = status.HTTP_409_CONFLICT


class EventHasApplicationsError(LifecycleError):
    kind = "EventHasApplications"
    status_code = status.HTTP_409_CONFLICT


class InvalidStatusError(LifecycleError):
    kind = "InvalidStatus"


class InvalidPaymentStatusError(LifecycleError):
    kind = "InvalidPaymentStatus"


class InvalidBulkRequestError(LifecycleError):
    kind = "InvalidBulkRequest"


class RefundNotApplicableError(LifecycleError):
    kind = "RefundNotApplicable"


class AccountBlockedError(LifecycleError):
    kind = "AccountBlocked"
    status_code = status.HTTP_403_FORBIDDEN


class TransientStorageError(LifecycleError):
    """Storage timeout or lost connection. The whole operation is safe to retry."""

    kind = "Transient"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
