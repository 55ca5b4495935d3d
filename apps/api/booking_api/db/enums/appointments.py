"""Appointment and scheduling enums."""

from enum import Enum


class AppointmentStatus(str, Enum):
    """
    Appointment lifecycle status.

    Flow: pending → confirmed → completed
              ↘ cancelled    ↘ no_show
              ↘ rescheduled  ↘ cancelled / rescheduled
    """

    PENDING = "PENDING"  # Booked, awaiting confirmation
    CONFIRMED = "CONFIRMED"  # Confirmed by the business
    CANCELLED = "CANCELLED"  # Cancelled by client or staff
    COMPLETED = "COMPLETED"  # Appointment took place
    NO_SHOW = "NO_SHOW"  # Client didn't show up
    RESCHEDULED = "RESCHEDULED"  # Moved to a new interval

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid status."""
        return value in cls._value2member_map_


class AvailabilityType(str, Enum):
    """Kind of availability record."""

    RECURRING = "RECURRING"  # Weekly window: day_of_week + HH:MM range
    ONE_OFF = "ONE_OFF"  # Absolute date range


class NotificationType(str, Enum):
    """Notification records enqueued by the booking core."""

    BOOKING_CREATED = "booking_created"
    BOOKING_RESCHEDULED = "booking_rescheduled"
    BOOKING_CANCELLED = "booking_cancelled"


class NotificationStatus(str, Enum):
    """Delivery state, owned by the notification sink after enqueue."""

    QUEUED = "queued"
    SENT = "sent"
    FAILED = "failed"


# Statuses that occupy a staff member's or client's time
ACTIVE_APPOINTMENT_STATUSES = (
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
)

# Default appointment status
DEFAULT_APPOINTMENT_STATUS = AppointmentStatus.PENDING
