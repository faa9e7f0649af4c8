"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

Gender = Literal["Male", "Female", "Other", "Prefer not to say"]


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    student_id: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    gender: Gender
    phone_no: str = Field(..., pattern=r"^[0-9]{10}$")
    course: str = Field(..., min_length=1, max_length=255)
    profile_photo: Optional[str] = Field(None, max_length=1024)
    password: str = Field(..., min_length=8, max_length=128)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class AdminLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    name: str
    student_id: str
    email: str
    gender: str
    phone_no: str
    course: str
    profile_photo: Optional[str]
    is_blocked: bool
    roles: list[str] = Field(default_factory=list, validation_alias="role_list")
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Fields a student may edit. Email and student id are fixed at signup."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    gender: Optional[Gender] = None
    phone_no: Optional[str] = Field(None, pattern=r"^[0-9]{10}$")
    course: Optional[str] = Field(None, min_length=1, max_length=255)
    profile_photo: Optional[str] = Field(None, max_length=1024)


class RoleUpdate(BaseModel):
    roles: list[str]


class UserBlockResponse(BaseModel):
    message: str
    user_id: int
    is_blocked: bool


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
