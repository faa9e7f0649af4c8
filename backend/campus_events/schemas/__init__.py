from campus_events.schemas.user import UserCreate, UserResponse, UserLogin, AdminLogin, Token
from campus_events.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from campus_events.schemas.application import (
    ApplyRequest, ApplicationResponse, ApplicationListResponse,
    BulkActionRequest, BulkActionResponse, RefundResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "AdminLogin", "Token",
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "ApplyRequest", "ApplicationResponse", "ApplicationListResponse",
    "BulkActionRequest", "BulkActionResponse", "RefundResponse",
]
