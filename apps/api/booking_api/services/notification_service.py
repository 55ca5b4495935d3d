"""
Notification Service - enqueues outbound notification records.

Records are staged on the caller's transaction and committed together with
the appointment change that produced them. Delivery is the worker's job.
"""

from uuid import UUID

from booking_api.core.config import settings
from booking_api.db.enums import NotificationStatus, NotificationType
from booking_api.db.models import Appointment, Notification, Service
from booking_api.db.tenant_scope import TenantScope


def enqueue_notification(
    scope: TenantScope,
    user_id: UUID | None,
    notification_type: NotificationType,
    payload: dict,
    channel: str | None = None,
) -> Notification:
    """Stage a queued notification. Does not commit."""
    notification = Notification(
        user_id=user_id,
        type=notification_type.value,
        channel=channel or settings.NOTIFICATION_CHANNEL,
        payload=payload,
        status=NotificationStatus.QUEUED.value,
    )
    scope.add(notification)
    return notification


def build_appointment_payload(appointment: Appointment, service: Service) -> dict:
    """Denormalized, JSON-safe payload for appointment notifications."""
    return {
        "appointmentId": str(appointment.id),
        "start": appointment.start_at.isoformat(),
        "end": appointment.end_at.isoformat(),
        "service": {"id": str(service.id), "title": service.title},
    }


def notify_appointment_event(
    scope: TenantScope,
    appointment: Appointment,
    service: Service,
    notification_type: NotificationType,
) -> Notification:
    """Enqueue a notification to the appointment's client."""
    return enqueue_notification(
        scope,
        user_id=appointment.client_id,
        notification_type=notification_type,
        payload=build_appointment_payload(appointment, service),
    )
