"""
Event model with participant-limit accounting.

Key design decisions:
- `current_applications` is denormalized (avoids COUNT on applications) and is
  only ever changed by a conditional UPDATE, never read-modify-write
- `participant_limit` NULL means unlimited; negative values are treated the same
- Index on `start_date` for "upcoming events" listings
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(5000), nullable=True)
    location = Column(String(255), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    price = Column(Float, nullable=False, default=0)

    # Media store references
    image_url = Column(String(1024), nullable=True)
    qr_code_image_url = Column(String(1024), nullable=True)

    organizer_name = Column(String(255), nullable=True)
    organizer_email = Column(String(255), nullable=True)

    participant_limit = Column(Integer, nullable=True)
    current_applications = Column(Integer, nullable=False, default=0)

    applications = relationship("Application", back_populates="event", lazy="raise")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        CheckConstraint("current_applications >= 0", name="check_current_applications_non_negative"),
        Index("ix_events_start_date", "start_date"),
    )

    @property
    def is_full(self) -> bool:
        if self.participant_limit is None or self.participant_limit < 0:
            return False
        return self.current_applications >= self.participant_limit

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, name={self.name}, "
            f"applications={self.current_applications}/{self.participant_limit})>"
        )
