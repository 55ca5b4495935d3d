"""SQLAlchemy ORM models."""

from booking_api.db.models.catalog import Service, Staff, StaffService
from booking_api.db.models.notifications import Notification
from booking_api.db.models.scheduling import Appointment, Availability, TimeOff
from booking_api.db.models.tenants import Tenant, User

__all__ = [
    "Appointment",
    "Availability",
    "Notification",
    "Service",
    "Staff",
    "StaffService",
    "Tenant",
    "TimeOff",
    "User",
]
