from app.models.agency import Agency
from app.models.user import User, UserRole
from app.models.property import ListingPurpose, ListingStatus, Property, PropertyType
from app.models.saved_search import SavedSearch
from app.models.client import Client
from app.models.call_log import CallLog
from app.models.calendar_event import CalendarEvent, CalendarEventType
from app.models.message import Message
from app.models.audit import AuditLog

__all__ = [
    "Agency",
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "ListingPurpose",
    "ListingStatus",
    "SavedSearch",
    "Client",
    "CallLog",
    "CalendarEvent",
    "CalendarEventType",
    "Message",
    "AuditLog",
]
