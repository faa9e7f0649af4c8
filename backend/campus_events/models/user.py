"""
Student account with secure password storage.

Roles are stored as a comma-separated set so the same token format can carry
"student" today and staff roles later.
"""

from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    student_id = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    gender = Column(String(20), nullable=False)
    phone_no = Column(String(20), nullable=False)
    course = Column(String(255), nullable=False)
    profile_photo = Column(String(1024), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    roles = Column(String(255), default="student", nullable=False)

    applications = relationship("Application", back_populates="user", lazy="raise")

    @property
    def role_list(self) -> list[str]:
        return [role for role in (self.roles or "").split(",") if role]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, blocked={self.is_blocked})>"
