"""
Application model: one student's request to attend one event.

Key design decisions:
- Unique constraint on (event_id, user_id) is the authoritative duplicate guard
- User and event fields are copied at apply time and never refreshed, so the
  record stays a historical snapshot even if the event is edited later
- CHECK constraints keep status and payment_status inside their domains
- Applications are never deleted by the lifecycle; status carries the outcome
"""

import enum

from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin


class ApplicationStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, enum.Enum):
    UNVERIFIED = "Unverified"
    VERIFIED = "Verified"
    REFUNDED = "Refunded"
    FAILED = "Failed"


REFUND_INITIATED = "Initiated"


def _in_clause(column: str, values: type[enum.Enum]) -> str:
    quoted = ", ".join(f"'{member.value}'" for member in values)
    return f"{column} IN ({quoted})"


class Application(Base, TimestampMixin):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # User snapshot
    user_name = Column(String(255), nullable=False)
    user_email = Column(String(255), nullable=False)
    student_id = Column(String(50), nullable=False)
    gender = Column(String(20), nullable=False)
    phone_no = Column(String(20), nullable=False)
    course = Column(String(255), nullable=False)
    profile_photo = Column(String(1024), nullable=True)

    # Event snapshot
    event_name = Column(String(255), nullable=False)
    event_start_date = Column(DateTime(timezone=True), nullable=False)
    event_end_date = Column(DateTime(timezone=True), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    price = Column(Float, nullable=False, default=0)
    event_image_url = Column(String(1024), nullable=True)
    qr_code_image_url = Column(String(1024), nullable=True)

    status = Column(String(20), nullable=False, default=ApplicationStatus.PENDING.value, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.UNVERIFIED.value, index=True)
    payment_screenshot_url = Column(String(1024), nullable=True)
    notes = Column(String(1000), nullable=True)

    refund_status = Column(String(20), nullable=True)
    refund_initiated_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="applications", lazy="raise")
    event = relationship("Event", back_populates="applications", lazy="raise")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_application_event_user"),
        CheckConstraint(_in_clause("status", ApplicationStatus), name="check_application_status"),
        CheckConstraint(_in_clause("payment_status", PaymentStatus), name="check_application_payment_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application(id={self.id}, event={self.event_id}, user={self.user_id}, "
            f"status={self.status}, payment={self.payment_status})>"
        )
