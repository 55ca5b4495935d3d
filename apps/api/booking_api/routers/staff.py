"""Staff router - staff profiles, service assignments, availability and time off."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from booking_api.core.deps import get_scope, require_csrf_header
from booking_api.db.models import Staff
from booking_api.db.tenant_scope import TenantScope
from booking_api.schemas.availability import (
    AvailabilityCreate,
    AvailabilityRead,
    TimeOffCreate,
    TimeOffRead,
)
from booking_api.schemas.catalog import (
    AssignServiceRequest,
    ServiceRead,
    StaffCreate,
    StaffDetail,
    StaffListResponse,
    StaffRead,
    StaffServiceRead,
    StaffUpdate,
)
from booking_api.services import availability_service, staff_service, time_off_service
from booking_api.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


def _staff_to_detail(staff: Staff) -> StaffDetail:
    """Convert Staff model to detail schema with its active services."""
    services = [
        ServiceRead.model_validate(link.service)
        for link in staff.service_links
        if link.service.deleted_at is None
    ]
    return StaffDetail(
        **StaffRead.model_validate(staff).model_dump(),
        services=services,
    )


# =============================================================================
# Staff CRUD
# =============================================================================

@router.post(
    "",
    response_model=StaffRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_staff(
    data: StaffCreate,
    scope: TenantScope = Depends(get_scope),
):
    """Create a staff member (OWNER/ADMIN)."""
    staff = staff_service.create_staff(
        scope, name=data.name, bio=data.bio, avatar=data.avatar, user_id=data.user_id
    )
    return StaffRead.model_validate(staff)


@router.get("", response_model=StaffListResponse)
def list_staff(
    q: str | None = Query(None, max_length=100, description="Name search"),
    pagination: PaginationParams = Depends(get_pagination),
    scope: TenantScope = Depends(get_scope),
):
    staff, total = staff_service.list_staff(
        scope, search=q, limit=pagination.per_page, offset=pagination.offset
    )
    return pagination.envelope([StaffRead.model_validate(s) for s in staff], total)


@router.get("/{staff_id}", response_model=StaffDetail)
def get_staff(
    staff_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    return _staff_to_detail(staff_service.get_staff(scope, staff_id))


@router.patch(
    "/{staff_id}",
    response_model=StaffRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_staff(
    staff_id: UUID,
    data: StaffUpdate,
    scope: TenantScope = Depends(get_scope),
):
    staff = staff_service.update_staff(
        scope, staff_id, **data.model_dump(exclude_unset=True)
    )
    return StaffRead.model_validate(staff)


@router.delete(
    "/{staff_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_staff(
    staff_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    staff_service.delete_staff(scope, staff_id)


# =============================================================================
# Service assignments
# =============================================================================

@router.post(
    "/{staff_id}/services",
    response_model=StaffServiceRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def assign_service(
    staff_id: UUID,
    data: AssignServiceRequest,
    scope: TenantScope = Depends(get_scope),
):
    link = staff_service.assign_service(scope, staff_id, data.service_id)
    return StaffServiceRead.model_validate(link)


@router.delete(
    "/{staff_id}/services/{service_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def unassign_service(
    staff_id: UUID,
    service_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    staff_service.unassign_service(scope, staff_id, service_id)


# =============================================================================
# Availability
# =============================================================================

@router.get("/{staff_id}/availability", response_model=list[AvailabilityRead])
def list_availability(
    staff_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    staff_service.get_staff(scope, staff_id)
    records = availability_service.list_availability_records(scope, staff_id)
    return [AvailabilityRead.model_validate(r) for r in records]


@router.post(
    "/{staff_id}/availability",
    response_model=AvailabilityRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_availability(
    staff_id: UUID,
    data: AvailabilityCreate,
    scope: TenantScope = Depends(get_scope),
):
    """
    Declare a bookable window (OWNER/ADMIN).

    Once a staff member has any availability, bookings must fall inside one
    of the declared windows.
    """
    record = availability_service.create_availability(
        scope,
        staff_id,
        availability_type=data.type,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    return AvailabilityRead.model_validate(record)


@router.delete(
    "/{staff_id}/availability/{availability_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_availability(
    staff_id: UUID,
    availability_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    availability_service.delete_availability(scope, staff_id, availability_id)


# =============================================================================
# Time off
# =============================================================================

@router.get("/{staff_id}/time-off", response_model=list[TimeOffRead])
def list_time_off(
    staff_id: UUID,
    date_from: datetime | None = Query(None, alias="from"),
    date_to: datetime | None = Query(None, alias="to"),
    scope: TenantScope = Depends(get_scope),
):
    staff_service.get_staff(scope, staff_id)
    records = time_off_service.list_time_off(scope, staff_id, date_from, date_to)
    return [TimeOffRead.model_validate(r) for r in records]


@router.post(
    "/{staff_id}/time-off",
    response_model=TimeOffRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_time_off(
    staff_id: UUID,
    data: TimeOffCreate,
    scope: TenantScope = Depends(get_scope),
):
    """Block out a period for a staff member (OWNER/ADMIN)."""
    record = time_off_service.create_time_off(
        scope, staff_id, start=data.start, end=data.end, reason=data.reason
    )
    return TimeOffRead.model_validate(record)


@router.delete(
    "/{staff_id}/time-off/{time_off_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_time_off(
    staff_id: UUID,
    time_off_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    time_off_service.delete_time_off(scope, staff_id, time_off_id)
