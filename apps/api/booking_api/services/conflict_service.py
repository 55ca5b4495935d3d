"""Conflict detection - double-booking checks for staff and clients.

Only PENDING and CONFIRMED appointments occupy time. Overlap is strict:
an appointment ending at 09:30 does not conflict with one starting at 09:30.
"""

import logging
from datetime import datetime
from typing import Literal
from uuid import UUID

from booking_api.core.exceptions import ConflictError
from booking_api.core.structured_logging import build_log_context
from booking_api.db.enums import ACTIVE_APPOINTMENT_STATUSES
from booking_api.db.models import Appointment
from booking_api.db.tenant_scope import TenantScope

logger = logging.getLogger(__name__)

ConflictSubject = Literal["staff", "client"]

_SUBJECT_COLUMNS = {
    "staff": Appointment.staff_id,
    "client": Appointment.client_id,
}

_MESSAGES = {
    ("staff", False): "Staff already booked for this time slot",
    ("client", False): "Client already has an appointment in this time slot",
    ("staff", True): "Staff already booked at the new time",
    ("client", True): "Client already has an appointment at the new time",
}


def find_conflicting_appointment(
    scope: TenantScope,
    subject: ConflictSubject,
    subject_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: UUID | None = None,
) -> Appointment | None:
    """
    First active appointment for the subject that overlaps ``[start, end)``.

    ``exclude_appointment_id`` lets a reschedule ignore the appointment
    being moved.
    """
    column = _SUBJECT_COLUMNS.get(subject)
    if column is None:
        raise ValueError(f"Unknown conflict subject '{subject}'")

    query = scope.query(
        Appointment,
        column == subject_id,
        Appointment.status.in_([s.value for s in ACTIVE_APPOINTMENT_STATUSES]),
        Appointment.start_at < end,
        Appointment.end_at > start,
    )
    if exclude_appointment_id:
        query = query.filter(Appointment.id != exclude_appointment_id)
    return query.order_by(Appointment.start_at).first()


def ensure_no_conflict(
    scope: TenantScope,
    subject: ConflictSubject,
    subject_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: UUID | None = None,
) -> None:
    """Raise ConflictError when the subject is already booked in the interval."""
    existing = find_conflicting_appointment(
        scope, subject, subject_id, start, end, exclude_appointment_id
    )
    if existing is None:
        return
    logger.info(
        f"Booking rejected: {subject} double-booking",
        extra=build_log_context(
            tenant_id=scope.tenant_id,
            appointment_id=existing.id,
        ),
    )
    raise ConflictError(_MESSAGES[(subject, exclude_appointment_id is not None)])
