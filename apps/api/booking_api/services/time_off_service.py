"""Time off service - staff blackout periods.

A time off record blocks every overlapping interval regardless of
availability. The overlap test is closed: a booking that merely touches a
time off boundary is still blocked.
"""

import logging
from datetime import datetime
from uuid import UUID

from booking_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from booking_api.core.permissions import require_role
from booking_api.core.structured_logging import build_log_context
from booking_api.db.base import utcnow
from booking_api.db.enums import ROLES_CAN_MANAGE_CATALOG
from booking_api.db.models import Staff, TimeOff
from booking_api.db.tenant_scope import TenantScope
from booking_api.utils.datetime_parsing import to_utc

logger = logging.getLogger(__name__)


def find_blocking_time_off(
    scope: TenantScope,
    staff_id: UUID,
    start: datetime,
    end: datetime,
) -> TimeOff | None:
    """First (earliest) non-deleted time off overlapping ``[start, end]``."""
    return scope.query(
        TimeOff,
        TimeOff.staff_id == staff_id,
        TimeOff.deleted_at.is_(None),
        TimeOff.start_at <= end,
        TimeOff.end_at >= start,
    ).order_by(TimeOff.start_at).first()


def ensure_not_on_time_off(
    scope: TenantScope,
    staff_id: UUID,
    start: datetime,
    end: datetime,
) -> None:
    """Raise ConflictError naming the first overlapping time off reason."""
    blocking = find_blocking_time_off(scope, staff_id, start, end)
    if blocking is None:
        return
    logger.info(
        "Booking rejected: staff time off",
        extra=build_log_context(tenant_id=scope.tenant_id, staff_id=staff_id),
    )
    reason = blocking.reason or "Time off"
    raise ConflictError(f"Staff is on time off ({reason}) during requested time")


def list_time_off(
    scope: TenantScope,
    staff_id: UUID,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[TimeOff]:
    """Non-deleted time off for a staff member, optionally within a range."""
    query = scope.query(
        TimeOff,
        TimeOff.staff_id == staff_id,
        TimeOff.deleted_at.is_(None),
    )
    if date_from:
        query = query.filter(TimeOff.end_at >= date_from)
    if date_to:
        query = query.filter(TimeOff.start_at <= date_to)
    return query.order_by(TimeOff.start_at).all()


def create_time_off(
    scope: TenantScope,
    staff_id: UUID,
    start: datetime,
    end: datetime,
    reason: str | None = None,
) -> TimeOff:
    """Create a blackout period (OWNER/ADMIN)."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    start, end = to_utc(start), to_utc(end)
    if end <= start:
        raise ValidationError("end must be after start")

    staff = scope.get(Staff, staff_id, Staff.deleted_at.is_(None))
    if not staff:
        raise NotFoundError("Staff not found")

    time_off = TimeOff(
        staff_id=staff_id,
        start_at=start,
        end_at=end,
        reason=reason.strip() if reason else None,
    )
    with scope.atomic():
        scope.add(time_off)
    return time_off


def delete_time_off(scope: TenantScope, staff_id: UUID, time_off_id: UUID) -> None:
    """Soft delete a time off record (OWNER/ADMIN)."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    with scope.atomic():
        deleted = scope.update_where(
            TimeOff,
            {TimeOff.deleted_at: utcnow()},
            TimeOff.id == time_off_id,
            TimeOff.staff_id == staff_id,
            TimeOff.deleted_at.is_(None),
        )
        if deleted == 0:
            raise NotFoundError("Time off not found or already deleted")
