from campus_events.models.user import User
from campus_events.models.event import Event
from campus_events.models.application import Application, ApplicationStatus, PaymentStatus

__all__ = ["User", "Event", "Application", "ApplicationStatus", "PaymentStatus"]
