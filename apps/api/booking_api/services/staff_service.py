"""Staff service - staff members and their service assignments."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from booking_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from booking_api.core.permissions import require_role
from booking_api.core.structured_logging import build_log_context
from booking_api.db.base import utcnow
from booking_api.db.enums import ROLES_CAN_MANAGE_CATALOG
from booking_api.db.models import Service, Staff, StaffService, User
from booking_api.db.tenant_scope import TenantScope

logger = logging.getLogger(__name__)


def create_staff(
    scope: TenantScope,
    name: str | None,
    bio: str | None = None,
    avatar: str | None = None,
    user_id: UUID | None = None,
) -> Staff:
    """Create a staff member, optionally linked to an existing user."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    if not name or not name.strip():
        raise ValidationError("Name is required")

    if user_id:
        user = scope.first(User, User.id == user_id, User.deleted_at.is_(None))
        if not user:
            raise NotFoundError("Linked user not found")

    staff = Staff(
        name=name.strip(),
        bio=bio.strip() if bio and bio.strip() else None,
        avatar=avatar or None,
        user_id=user_id,
    )
    try:
        with scope.atomic():
            scope.add(staff)
    except IntegrityError as exc:
        raise ConflictError("User is already linked to a staff profile") from exc
    return staff


def get_staff(scope: TenantScope, staff_id: UUID) -> Staff:
    """Get non-deleted staff member by ID."""
    staff = scope.get(Staff, staff_id, Staff.deleted_at.is_(None))
    if not staff:
        raise NotFoundError("Staff not found")
    return staff


def list_staff(
    scope: TenantScope,
    search: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Staff], int]:
    """List non-deleted staff, newest first, with case-insensitive name search."""
    query = scope.query(Staff, Staff.deleted_at.is_(None))
    if search:
        query = query.filter(Staff.name.ilike(f"%{search}%"))
    total = query.count()
    staff = query.order_by(Staff.created_at.desc()).offset(offset).limit(limit).all()
    return staff, total


def update_staff(
    scope: TenantScope,
    staff_id: UUID,
    name: str | None = None,
    bio: str | None = None,
    avatar: str | None = None,
) -> Staff:
    """Partial update of a staff member."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    if name is not None and not name.strip():
        raise ValidationError("Name is required")
    staff = get_staff(scope, staff_id)

    with scope.atomic():
        if name is not None:
            staff.name = name.strip()
        if bio is not None:
            staff.bio = bio.strip() or None
        if avatar is not None:
            staff.avatar = avatar or None
    return staff


def delete_staff(scope: TenantScope, staff_id: UUID) -> None:
    """Soft delete a staff member."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    with scope.atomic():
        deleted = scope.update_where(
            Staff,
            {Staff.deleted_at: utcnow()},
            Staff.id == staff_id,
            Staff.deleted_at.is_(None),
        )
        if deleted == 0:
            raise NotFoundError("Staff not found or already deleted")


# =============================================================================
# Assignments
# =============================================================================

def create_assignment(
    scope: TenantScope,
    staff_id: UUID,
    service_id: UUID | None,
    duplicate_message: str,
) -> StaffService:
    """
    Link a staff member to a service.

    Both sides must exist in the caller's tenant and not be deleted.

    Raises:
        ConflictError: link already exists
    """
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    if not staff_id or not service_id:
        raise ValidationError("staff_id and service_id are required")

    staff = scope.get(Staff, staff_id, Staff.deleted_at.is_(None))
    if not staff:
        raise NotFoundError("Staff not found")
    service = scope.get(Service, service_id, Service.deleted_at.is_(None))
    if not service:
        raise NotFoundError("Service not found")

    existing = scope.first(
        StaffService,
        StaffService.staff_id == staff_id,
        StaffService.service_id == service_id,
    )
    if existing:
        raise ConflictError(duplicate_message)

    link = StaffService(staff_id=staff_id, service_id=service_id)
    try:
        with scope.atomic():
            scope.add(link)
    except IntegrityError as exc:
        raise ConflictError(duplicate_message) from exc

    logger.info(
        "Staff assigned to service",
        extra=build_log_context(tenant_id=scope.tenant_id, staff_id=staff_id),
    )
    return link


def assign_service(scope: TenantScope, staff_id: UUID, service_id: UUID | None) -> StaffService:
    """Assign a service to a staff member."""
    return create_assignment(
        scope, staff_id, service_id, "Service already assigned to this staff"
    )


def unassign_service(scope: TenantScope, staff_id: UUID, service_id: UUID | None) -> None:
    """Remove a staff ↔ service link."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    if not service_id:
        raise ValidationError("service_id is required")
    with scope.atomic():
        deleted = scope.delete_where(
            StaffService,
            StaffService.staff_id == staff_id,
            StaffService.service_id == service_id,
        )
        if deleted == 0:
            raise NotFoundError("Service not assigned to this staff")
