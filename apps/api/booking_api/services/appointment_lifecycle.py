"""Appointment lifecycle - status transition rules.

    PENDING     → CONFIRMED | CANCELLED | RESCHEDULED
    CONFIRMED   → CANCELLED | COMPLETED | NO_SHOW | RESCHEDULED
    RESCHEDULED → CONFIRMED | CANCELLED | RESCHEDULED
    CANCELLED, COMPLETED, NO_SHOW are terminal.

RESCHEDULED is only reachable together with a new start/end.
"""

from booking_api.core.exceptions import ValidationError
from booking_api.db.enums import AppointmentStatus

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.RESCHEDULED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.NO_SHOW,
        AppointmentStatus.RESCHEDULED,
    }),
    AppointmentStatus.RESCHEDULED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.RESCHEDULED,
    }),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

CANCELLABLE_STATUSES = frozenset(
    status
    for status, targets in ALLOWED_TRANSITIONS.items()
    if AppointmentStatus.CANCELLED in targets
)


def parse_status(value: str | AppointmentStatus) -> AppointmentStatus:
    """Coerce a raw status into the closed enum."""
    if isinstance(value, AppointmentStatus):
        return value
    if not isinstance(value, str) or not AppointmentStatus.has_value(value.upper()):
        raise ValidationError(f"Unknown appointment status '{value}'")
    return AppointmentStatus(value.upper())


def is_terminal(status: str | AppointmentStatus) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def can_transition(current: str | AppointmentStatus, target: str | AppointmentStatus) -> bool:
    current_status = parse_status(current)
    target_status = parse_status(target)
    if current_status == target_status:
        return True
    return target_status in ALLOWED_TRANSITIONS[current_status]


def validate_transition(
    current: str | AppointmentStatus,
    target: str | AppointmentStatus,
    interval_changed: bool = False,
) -> AppointmentStatus:
    """
    Check a requested status change and return the target status.

    Re-setting the current status is a no-op and always allowed.

    Raises:
        ValidationError: unknown status, illegal transition, or RESCHEDULED
            without a new interval
    """
    current_status = parse_status(current)
    target_status = parse_status(target)

    if target_status == AppointmentStatus.RESCHEDULED and not interval_changed:
        raise ValidationError("RESCHEDULED status requires a new start and end")

    if not can_transition(current_status, target_status):
        raise ValidationError(
            f"Cannot change appointment status from {current_status.value} to {target_status.value}"
        )
    return target_status
