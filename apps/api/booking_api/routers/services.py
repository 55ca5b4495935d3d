"""Services router - service catalog management."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from booking_api.core.deps import get_scope, require_csrf_header
from booking_api.db.models import Service
from booking_api.db.tenant_scope import TenantScope
from booking_api.schemas.catalog import (
    AssignStaffRequest,
    ServiceCreate,
    ServiceDetail,
    ServiceListResponse,
    ServiceRead,
    ServiceUpdate,
    StaffRead,
    StaffServiceRead,
)
from booking_api.services import catalog_service
from booking_api.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


def _service_to_detail(service: Service) -> ServiceDetail:
    """Convert Service model to detail schema with its active staff."""
    staff = [
        StaffRead.model_validate(link.staff)
        for link in service.staff_links
        if link.staff.deleted_at is None
    ]
    return ServiceDetail(
        **ServiceRead.model_validate(service).model_dump(),
        staff=staff,
    )


@router.post(
    "",
    response_model=ServiceRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_service(
    data: ServiceCreate,
    scope: TenantScope = Depends(get_scope),
):
    """Create a service (OWNER/ADMIN)."""
    service = catalog_service.create_service(
        scope,
        title=data.title,
        duration_minutes=data.duration_minutes,
        price=data.price,
        description=data.description,
        currency=data.currency,
    )
    return ServiceRead.model_validate(service)


@router.get("", response_model=ServiceListResponse)
def list_services(
    q: str | None = Query(None, max_length=100, description="Title search"),
    pagination: PaginationParams = Depends(get_pagination),
    scope: TenantScope = Depends(get_scope),
):
    services, total = catalog_service.list_services(
        scope, search=q, limit=pagination.per_page, offset=pagination.offset
    )
    return pagination.envelope(
        [ServiceRead.model_validate(s) for s in services], total
    )


@router.get("/{service_id}", response_model=ServiceDetail)
def get_service(
    service_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    return _service_to_detail(catalog_service.get_service(scope, service_id))


@router.patch(
    "/{service_id}",
    response_model=ServiceRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_service(
    service_id: UUID,
    data: ServiceUpdate,
    scope: TenantScope = Depends(get_scope),
):
    """Partial update (OWNER/ADMIN). Existing appointments keep their price."""
    service = catalog_service.update_service(
        scope, service_id, **data.model_dump(exclude_unset=True)
    )
    return ServiceRead.model_validate(service)


@router.delete(
    "/{service_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_service(
    service_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    """Soft delete a service (OWNER/ADMIN)."""
    catalog_service.delete_service(scope, service_id)


@router.post(
    "/{service_id}/staff",
    response_model=StaffServiceRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def assign_staff(
    service_id: UUID,
    data: AssignStaffRequest,
    scope: TenantScope = Depends(get_scope),
):
    """Assign a staff member to this service (OWNER/ADMIN)."""
    link = catalog_service.assign_staff(scope, service_id, data.staff_id)
    return StaffServiceRead.model_validate(link)
