"""Appointment service - booking orchestration.

Handles:
- Booking creation with duration, availability, time off and conflict checks
- Reschedule, status and notes updates
- Cancellation
- Tenant-scoped listing and lookup

Every validation read and the final write(s) of a request run in one
transaction. On PostgreSQL that transaction is SERIALIZABLE and the
appointments table carries exclusion constraints; on SQLite the transaction
holds the writer lock from its first statement. Storage-level rejections
surface as ConflictError.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError, OperationalError

from booking_api.core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from booking_api.core.permissions import require_role
from booking_api.core.structured_logging import build_log_context
from booking_api.db.enums import (
    ACTIVE_APPOINTMENT_STATUSES,
    ROLES_CAN_UPDATE_APPOINTMENTS,
    AppointmentStatus,
    NotificationType,
)
from booking_api.db.models import Appointment, Service, Staff, StaffService, User
from booking_api.db.tenant_scope import TenantScope
from booking_api.services import (
    appointment_lifecycle,
    availability_service,
    conflict_service,
    notification_service,
    time_off_service,
)
from booking_api.utils.datetime_parsing import parse_timestamp

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATEs that mean "a concurrent booking won"
_EXCLUSION_VIOLATION = "23P01"
_RETRYABLE_SQLSTATES = {"40001", "40P01"}


# =============================================================================
# Validation
# =============================================================================

def _parse_interval(
    start: datetime | str | None,
    end: datetime | str | None,
    past_message: str,
) -> tuple[datetime, datetime]:
    start_at = parse_timestamp(start, "start")
    end_at = parse_timestamp(end, "end")
    if end_at <= start_at:
        raise ValidationError("end must be after start")
    if start_at < datetime.now(timezone.utc):
        raise ValidationError(past_message)
    return start_at, end_at


def _ensure_duration(service: Service, start: datetime, end: datetime, prefix: str) -> None:
    if end - start != timedelta(minutes=service.duration_minutes):
        raise ValidationError(
            f"{prefix} must be exactly {service.duration_minutes} minutes after start"
        )


def validate_booking_window(
    scope: TenantScope,
    staff_id: UUID,
    client_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: UUID | None = None,
) -> None:
    """
    Run the staff and client checks for a candidate interval.

    Order: time off, availability, staff conflicts, client conflicts. The
    first failure raises ConflictError with its own reason.
    """
    time_off_service.ensure_not_on_time_off(scope, staff_id, start, end)
    availability_service.ensure_within_availability(scope, staff_id, start, end)
    conflict_service.ensure_no_conflict(
        scope, "staff", staff_id, start, end, exclude_appointment_id
    )
    conflict_service.ensure_no_conflict(
        scope, "client", client_id, start, end, exclude_appointment_id
    )


def _is_storage_conflict(exc: Exception) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if isinstance(exc, IntegrityError):
        return code == _EXCLUSION_VIOLATION
    return code in _RETRYABLE_SQLSTATES


def _commit_booking(scope: TenantScope, write, message: str):
    """
    Run ``write(scope)`` and commit it atomically.

    Exclusion-constraint violations and serialization failures mean a
    concurrent request booked the same slot first.
    """
    try:
        with scope.atomic():
            return write(scope)
    except (IntegrityError, OperationalError) as exc:
        if _is_storage_conflict(exc):
            logger.warning(
                "Booking lost a concurrent write race",
                extra=build_log_context(tenant_id=scope.tenant_id),
            )
            raise ConflictError(message) from exc
        if isinstance(exc, IntegrityError):
            logger.exception(
                "Booking write violated an integrity constraint",
                extra=build_log_context(tenant_id=scope.tenant_id),
            )
            raise InternalError("Appointment could not be saved") from exc
        raise


# =============================================================================
# Create
# =============================================================================

def create_appointment(
    scope: TenantScope,
    service_id: UUID | None,
    staff_id: UUID | None,
    client_id: UUID | None,
    start: datetime | str | None,
    end: datetime | str | None,
    notes: str | None = None,
) -> Appointment:
    """
    Book an appointment.

    Steps:
    - Validate input and interval (not inverted, not in the past)
    - Load service (active), staff and client
    - Require a staff ↔ service assignment
    - Enforce the service duration exactly
    - Time off, availability, staff and client conflict checks
    - Insert appointment (PENDING, price/currency snapshot) and its
      notification in one commit

    Raises:
        ValidationError, NotFoundError, ConflictError
    """
    if not service_id or not staff_id or not client_id or not start or not end:
        raise ValidationError(
            "Missing required fields: service_id, staff_id, client_id, start, end"
        )
    start_at, end_at = _parse_interval(
        start, end, "Cannot create appointments in the past"
    )

    service = scope.get(
        Service, service_id, Service.active.is_(True), Service.deleted_at.is_(None)
    )
    staff = scope.get(Staff, staff_id, Staff.deleted_at.is_(None))
    client = scope.first(User, User.id == client_id, User.deleted_at.is_(None))

    if not service:
        raise NotFoundError("Service not found")
    if not staff:
        raise NotFoundError("Staff not found")
    if not client:
        raise NotFoundError("Client not found")

    assigned = scope.first(
        StaffService,
        StaffService.staff_id == staff_id,
        StaffService.service_id == service_id,
    )
    if not assigned:
        raise ConflictError("Selected staff does not provide this service")

    _ensure_duration(service, start_at, end_at, "End time")
    validate_booking_window(scope, staff_id, client_id, start_at, end_at)

    def write(tx: TenantScope) -> Appointment:
        appointment = Appointment(
            service_id=service_id,
            staff_id=staff_id,
            client_id=client_id,
            start_at=start_at,
            end_at=end_at,
            status=AppointmentStatus.PENDING.value,
            price=service.price,
            currency=service.currency,
            notes=notes or None,
        )
        tx.add(appointment)
        tx.db.flush()
        notification_service.notify_appointment_event(
            tx, appointment, service, NotificationType.BOOKING_CREATED
        )
        return appointment

    appointment = _commit_booking(scope, write, "Staff already booked for this time slot")
    logger.info(
        "Appointment created",
        extra=build_log_context(
            tenant_id=scope.tenant_id,
            user_id=scope.ctx.user_id,
            appointment_id=appointment.id,
            staff_id=staff_id,
        ),
    )
    return appointment


# =============================================================================
# Read
# =============================================================================

def get_appointment(scope: TenantScope, appointment_id: UUID) -> Appointment:
    """Get appointment by ID within the caller's tenant."""
    appointment = scope.get(Appointment, appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found")
    return appointment


def list_appointments(
    scope: TenantScope,
    status: str | None = None,
    staff_id: UUID | None = None,
    client_id: UUID | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Appointment], int]:
    """List appointments with filters, ordered by start, with pagination."""
    query = scope.query(Appointment)

    if status:
        query = query.filter(
            Appointment.status == appointment_lifecycle.parse_status(status).value
        )
    if staff_id:
        query = query.filter(Appointment.staff_id == staff_id)
    if client_id:
        query = query.filter(Appointment.client_id == client_id)
    if date_from:
        query = query.filter(Appointment.start_at >= date_from)
    if date_to:
        query = query.filter(Appointment.end_at <= date_to)

    total = query.count()
    appointments = query.order_by(
        Appointment.start_at.asc()
    ).offset(offset).limit(limit).all()

    return appointments, total


# =============================================================================
# Update / Reschedule
# =============================================================================

def reschedule_appointment(
    scope: TenantScope,
    appointment_id: UUID,
    new_start: datetime | str | None,
    new_end: datetime | str | None,
    status: str | None = None,
    notes: str | None = None,
) -> Appointment:
    """
    Move an appointment to a new interval.

    Re-runs duration, time off, availability and conflict checks against the
    new interval with the appointment itself excluded from conflicts.
    """
    appointment = get_appointment(scope, appointment_id)

    if new_start is None or new_end is None:
        raise ValidationError("Both start and end required for reschedule")
    start_at, end_at = _parse_interval(new_start, new_end, "Cannot reschedule to the past")

    if appointment_lifecycle.is_terminal(appointment.status):
        raise ValidationError(
            f"Cannot reschedule appointment with status {appointment.status}"
        )
    target_status = None
    if status is not None:
        target_status = appointment_lifecycle.validate_transition(
            appointment.status, status, interval_changed=True
        )

    service = scope.get(Service, appointment.service_id)
    if not service:
        raise InternalError("Associated service not found")
    _ensure_duration(service, start_at, end_at, "Rescheduled end")

    validate_booking_window(
        scope,
        appointment.staff_id,
        appointment.client_id,
        start_at,
        end_at,
        exclude_appointment_id=appointment.id,
    )

    def write(tx: TenantScope) -> Appointment:
        appointment.start_at = start_at
        appointment.end_at = end_at
        if target_status is not None:
            appointment.status = target_status.value
        if notes is not None:
            appointment.notes = notes
        tx.db.flush()
        notification_service.notify_appointment_event(
            tx, appointment, service, NotificationType.BOOKING_RESCHEDULED
        )
        return appointment

    appointment = _commit_booking(scope, write, "Staff already booked at the new time")
    logger.info(
        "Appointment rescheduled",
        extra=build_log_context(
            tenant_id=scope.tenant_id,
            user_id=scope.ctx.user_id,
            appointment_id=appointment.id,
        ),
    )
    return appointment


def update_appointment(
    scope: TenantScope,
    appointment_id: UUID,
    status: str | None = None,
    start: datetime | str | None = None,
    end: datetime | str | None = None,
    notes: str | None = None,
) -> Appointment:
    """
    Update status, interval and/or notes (OWNER/ADMIN/STAFF).

    Supplying start or end routes through reschedule validation. A status
    change to CANCELLED goes through ``cancel_appointment``. A status change
    that puts an inactive appointment back on the calendar re-runs the staff
    and client conflict checks; other status and notes updates skip interval
    checks.
    """
    require_role(scope.ctx, ROLES_CAN_UPDATE_APPOINTMENTS)

    if start is not None or end is not None:
        return reschedule_appointment(
            scope, appointment_id, start, end, status=status, notes=notes
        )

    if status is not None and (
        appointment_lifecycle.parse_status(status) == AppointmentStatus.CANCELLED
    ):
        cancel_appointment(scope, appointment_id)
        appointment = get_appointment(scope, appointment_id)
        if notes is not None:
            with scope.atomic():
                appointment.notes = notes
        return appointment

    appointment = get_appointment(scope, appointment_id)
    target_status = None
    if status is not None:
        target_status = appointment_lifecycle.validate_transition(
            appointment.status, status
        )
        if target_status.value == appointment.status:
            target_status = None

    if target_status is not None and _reactivates(appointment.status, target_status):
        conflict_service.ensure_no_conflict(
            scope, "staff", appointment.staff_id,
            appointment.start_at, appointment.end_at, appointment.id,
        )
        conflict_service.ensure_no_conflict(
            scope, "client", appointment.client_id,
            appointment.start_at, appointment.end_at, appointment.id,
        )

    def write(tx: TenantScope) -> Appointment:
        if target_status is not None:
            appointment.status = target_status.value
        if notes is not None:
            appointment.notes = notes
        tx.db.flush()
        return appointment

    return _commit_booking(scope, write, "Staff already booked for this time slot")


def _reactivates(current: str, target: AppointmentStatus) -> bool:
    active = {s.value for s in ACTIVE_APPOINTMENT_STATUSES}
    return current not in active and target.value in active


# =============================================================================
# Cancel
# =============================================================================

def cancel_appointment(scope: TenantScope, appointment_id: UUID) -> UUID:
    """
    Cancel an appointment.

    The status change is a single conditional UPDATE; zero affected rows
    means the appointment is missing, already cancelled, or finished.
    """
    cancellable = [s.value for s in appointment_lifecycle.CANCELLABLE_STATUSES]

    with scope.atomic():
        updated = scope.update_where(
            Appointment,
            {
                Appointment.status: AppointmentStatus.CANCELLED.value,
                Appointment.canceled_at: datetime.now(timezone.utc),
            },
            Appointment.id == appointment_id,
            Appointment.status.in_(cancellable),
        )
        if updated == 0:
            existing = scope.get(Appointment, appointment_id)
            if existing and existing.status != AppointmentStatus.CANCELLED.value:
                raise ValidationError(
                    f"Cannot cancel appointment with status {existing.status}"
                )
            raise NotFoundError("Appointment not found or already cancelled")

        appointment = scope.get(Appointment, appointment_id)
        _notify_cancelled(scope, appointment)

    logger.info(
        "Appointment cancelled",
        extra=build_log_context(
            tenant_id=scope.tenant_id,
            user_id=scope.ctx.user_id,
            appointment_id=appointment_id,
        ),
    )
    return appointment_id


def _notify_cancelled(scope: TenantScope, appointment: Appointment) -> None:
    service = scope.get(Service, appointment.service_id)
    if not service:
        raise InternalError("Associated service not found")
    notification_service.notify_appointment_event(
        scope, appointment, service, NotificationType.BOOKING_CANCELLED
    )
