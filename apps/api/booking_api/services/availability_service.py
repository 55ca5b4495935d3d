"""Availability service - staff bookable windows.

Handles:
- Resolving whether a candidate interval is permitted by a staff member's
  availability records
- Creating, listing and soft-deleting availability records
"""

import logging
from datetime import datetime
from uuid import UUID

from booking_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from booking_api.core.permissions import require_role
from booking_api.core.structured_logging import build_log_context
from booking_api.db.base import utcnow
from booking_api.db.enums import ROLES_CAN_MANAGE_CATALOG, AvailabilityType
from booking_api.db.models import Availability, Staff
from booking_api.db.tenant_scope import TenantScope
from booking_api.utils.datetime_parsing import to_utc
from booking_api.utils.intervals import (
    contains,
    day_of_week as utc_day_of_week,
    hhmm_to_minutes,
    minutes_since_midnight,
)

logger = logging.getLogger(__name__)

OUTSIDE_AVAILABILITY_MESSAGE = "Requested time is outside staff availability"


# =============================================================================
# Matching
# =============================================================================

def is_within_recurring(av: Availability, start: datetime, end: datetime) -> bool:
    """
    Weekly window check on UTC calendar fields.

    The window never spans midnight: an interval ending on a later UTC day
    than it starts never matches.
    """
    if av.day_of_week is None:
        return False
    if utc_day_of_week(start) != av.day_of_week:
        return False
    if end.date() != start.date():
        return False

    window_start = hhmm_to_minutes(av.start_time)
    window_end = hhmm_to_minutes(av.end_time)
    if window_start is None or window_end is None:
        return False

    return (
        window_start <= minutes_since_midnight(start)
        and minutes_since_midnight(end) <= window_end
    )


def is_within_one_off(av: Availability, start: datetime, end: datetime) -> bool:
    """Dated range check; ``[start_date, end_date]`` must contain the interval."""
    if av.start_date is None or av.end_date is None:
        return False
    return contains(av.start_date, av.end_date, start, end)


def record_contains(av: Availability, start: datetime, end: datetime) -> bool:
    if av.type == AvailabilityType.ONE_OFF.value:
        return is_within_one_off(av, start, end)
    if av.type == AvailabilityType.RECURRING.value:
        return is_within_recurring(av, start, end)
    return False


def is_interval_available(
    scope: TenantScope,
    staff_id: UUID,
    start: datetime,
    end: datetime,
) -> bool:
    """
    Whether the staff member's availability permits ``[start, end)``.

    No availability records at all means the staff member is unrestricted.
    """
    records = list_availability_records(scope, staff_id)
    if not records:
        return True
    return any(record_contains(av, start, end) for av in records)


def ensure_within_availability(
    scope: TenantScope,
    staff_id: UUID,
    start: datetime,
    end: datetime,
) -> None:
    """Raise ConflictError when the interval is outside every availability record."""
    if not is_interval_available(scope, staff_id, start, end):
        logger.info(
            "Booking rejected: outside availability",
            extra=build_log_context(tenant_id=scope.tenant_id, staff_id=staff_id),
        )
        raise ConflictError(OUTSIDE_AVAILABILITY_MESSAGE)


# =============================================================================
# Records
# =============================================================================

def list_availability_records(scope: TenantScope, staff_id: UUID) -> list[Availability]:
    """All non-deleted availability records for a staff member."""
    return scope.query(
        Availability,
        Availability.staff_id == staff_id,
        Availability.deleted_at.is_(None),
    ).order_by(Availability.created_at).all()


def create_availability(
    scope: TenantScope,
    staff_id: UUID,
    availability_type: str,
    day_of_week: int | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> Availability:
    """Create an availability record for a staff member (OWNER/ADMIN)."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    _get_staff_or_404(scope, staff_id)

    if availability_type == AvailabilityType.RECURRING.value:
        if day_of_week is None or not 0 <= day_of_week <= 6:
            raise ValidationError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
        window_start = hhmm_to_minutes(start_time)
        window_end = hhmm_to_minutes(end_time)
        if window_start is None or window_end is None:
            raise ValidationError("start_time and end_time must be HH:MM")
        if window_end <= window_start:
            raise ValidationError("end_time must be after start_time")
        record = Availability(
            staff_id=staff_id,
            type=availability_type,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
    elif availability_type == AvailabilityType.ONE_OFF.value:
        if start_date is None or end_date is None:
            raise ValidationError("start_date and end_date are required for ONE_OFF availability")
        start_date, end_date = to_utc(start_date), to_utc(end_date)
        if end_date <= start_date:
            raise ValidationError("end_date must be after start_date")
        record = Availability(
            staff_id=staff_id,
            type=availability_type,
            start_date=start_date,
            end_date=end_date,
        )
    else:
        raise ValidationError(f"Unknown availability type '{availability_type}'")

    with scope.atomic():
        scope.add(record)
    return record


def delete_availability(scope: TenantScope, staff_id: UUID, availability_id: UUID) -> None:
    """Soft delete an availability record (OWNER/ADMIN)."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    with scope.atomic():
        deleted = scope.update_where(
            Availability,
            {Availability.deleted_at: utcnow()},
            Availability.id == availability_id,
            Availability.staff_id == staff_id,
            Availability.deleted_at.is_(None),
        )
        if deleted == 0:
            raise NotFoundError("Availability not found or already deleted")


def _get_staff_or_404(scope: TenantScope, staff_id: UUID) -> Staff:
    staff = scope.get(Staff, staff_id, Staff.deleted_at.is_(None))
    if not staff:
        raise NotFoundError("Staff not found")
    return staff
