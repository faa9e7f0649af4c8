"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    start_date: datetime
    end_date: datetime
    price: float = Field(0, ge=0)
    image_url: Optional[str] = Field(None, max_length=1024)
    qr_code_image_url: Optional[str] = Field(None, max_length=1024)
    organizer_name: Optional[str] = Field(None, max_length=255)
    organizer_email: Optional[str] = Field(None, max_length=255)
    participant_limit: Optional[int] = Field(None, ge=0)


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=1024)
    qr_code_image_url: Optional[str] = Field(None, max_length=1024)
    organizer_name: Optional[str] = Field(None, max_length=255)
    organizer_email: Optional[str] = Field(None, max_length=255)
    participant_limit: Optional[int] = Field(None, ge=0)


class EventResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    location: Optional[str]
    start_date: datetime
    end_date: datetime
    is_paid: bool
    price: float
    image_url: Optional[str]
    qr_code_image_url: Optional[str]
    organizer_name: Optional[str]
    organizer_email: Optional[str]
    participant_limit: Optional[int]
    current_applications: int
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
