"""
Pydantic schemas for application requests, responses and bulk summaries.

Status fields on the request side are plain strings on purpose: values outside
the domain are reported as InvalidStatus / InvalidPaymentStatus by the service,
not as a generic 422.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class ApplyRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)
    payment_screenshot_url: Optional[str] = Field(None, max_length=1024)


class StatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(BaseModel):
    payment_status: str


class BulkActionRequest(BaseModel):
    # Items are validated one by one so a bad id fails alone
    application_ids: list[Any]
    action: str


class ApplicationResponse(BaseModel):
    id: int
    event_id: int
    user_id: int
    user_name: str
    user_email: str
    student_id: str
    gender: str
    phone_no: str
    course: str
    profile_photo: Optional[str]
    event_name: str
    event_start_date: datetime
    event_end_date: datetime
    is_paid: bool
    price: float
    event_image_url: Optional[str]
    qr_code_image_url: Optional[str]
    status: str
    payment_status: str
    payment_screenshot_url: Optional[str]
    notes: Optional[str]
    refund_status: Optional[str]
    refund_initiated_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicationSummary(BaseModel):
    """Compact row for a student's own application list."""

    id: int
    event_id: int
    event_name: str
    event_start_date: datetime
    status: str
    payment_status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ApplicationListResponse(BaseModel):
    total: int
    applications: list[ApplicationSummary]


class BulkItemError(BaseModel):
    id: Any
    kind: str
    message: str


class BulkItemUpdated(BaseModel):
    id: int
    status: str


class BulkSummary(BaseModel):
    processed: int
    succeeded: int
    failed: int


class BulkActionResponse(BaseModel):
    message: str
    summary: BulkSummary
    details: list[BulkItemError] = []
    updated: list[BulkItemUpdated] = []


class RefundResponse(BaseModel):
    message: str
    application_id: int
    refund_status: str


class ApplicationStats(BaseModel):
    total_applications: int
    by_status: dict[str, int]
    by_payment_status: dict[str, int]
    total_users: int
    total_events: int
