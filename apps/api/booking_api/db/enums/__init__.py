"""Enum definitions for application constants."""

from booking_api.db.enums.appointments import (
    ACTIVE_APPOINTMENT_STATUSES,
    AppointmentStatus,
    AvailabilityType,
    DEFAULT_APPOINTMENT_STATUS,
    NotificationStatus,
    NotificationType,
)
from booking_api.db.enums.auth import (
    ROLES_CAN_MANAGE_CATALOG,
    ROLES_CAN_UPDATE_APPOINTMENTS,
    Role,
)

__all__ = [
    "ACTIVE_APPOINTMENT_STATUSES",
    "AppointmentStatus",
    "AvailabilityType",
    "DEFAULT_APPOINTMENT_STATUS",
    "NotificationStatus",
    "NotificationType",
    "ROLES_CAN_MANAGE_CATALOG",
    "ROLES_CAN_UPDATE_APPOINTMENTS",
    "Role",
]
