"""Appointments router - booking, listing, updating and cancelling appointments."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from booking_api.core.deps import get_scope, require_csrf_header
from booking_api.core.rate_limit import booking_limit, limiter
from booking_api.db.enums import AppointmentStatus
from booking_api.db.tenant_scope import TenantScope
from booking_api.schemas.appointment import (
    AppointmentCancelResponse,
    AppointmentCreate,
    AppointmentDetail,
    AppointmentListResponse,
    AppointmentUpdate,
)
from booking_api.services import appointment_service
from booking_api.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


# =============================================================================
# Booking
# =============================================================================

@router.post(
    "",
    response_model=AppointmentDetail,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(booking_limit)
def create_appointment(
    request: Request,
    data: AppointmentCreate,
    scope: TenantScope = Depends(get_scope),
):
    """
    Book an appointment for a client with a staff member.

    Returns 409 when the slot is taken, the staff member is on time off or
    unavailable, or the staff member does not provide the service.
    """
    appointment = appointment_service.create_appointment(
        scope,
        service_id=data.service_id,
        staff_id=data.staff_id,
        client_id=data.client_id,
        start=data.start,
        end=data.end,
        notes=data.notes,
    )
    return AppointmentDetail.model_validate(appointment)


# =============================================================================
# Reads
# =============================================================================

@router.get("", response_model=AppointmentListResponse)
def list_appointments(
    status: AppointmentStatus | None = None,
    staff_id: UUID | None = None,
    client_id: UUID | None = None,
    date_from: datetime | None = Query(None, alias="from"),
    date_to: datetime | None = Query(None, alias="to"),
    pagination: PaginationParams = Depends(get_pagination),
    scope: TenantScope = Depends(get_scope),
):
    """List appointments ordered by start time."""
    appointments, total = appointment_service.list_appointments(
        scope,
        status=status.value if status else None,
        staff_id=staff_id,
        client_id=client_id,
        date_from=date_from,
        date_to=date_to,
        limit=pagination.per_page,
        offset=pagination.offset,
    )
    return pagination.envelope(
        [AppointmentDetail.model_validate(a) for a in appointments], total
    )


@router.get("/{appointment_id}", response_model=AppointmentDetail)
def get_appointment(
    appointment_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    """Get appointment with service, staff and client."""
    appointment = appointment_service.get_appointment(scope, appointment_id)
    return AppointmentDetail.model_validate(appointment)


# =============================================================================
# Mutations
# =============================================================================

@router.patch(
    "/{appointment_id}",
    response_model=AppointmentDetail,
    dependencies=[Depends(require_csrf_header)],
)
def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    scope: TenantScope = Depends(get_scope),
):
    """
    Update status, notes, or reschedule (start + end).

    Requires OWNER, ADMIN or STAFF role.
    """
    appointment = appointment_service.update_appointment(
        scope,
        appointment_id,
        status=data.status,
        start=data.start,
        end=data.end,
        notes=data.notes,
    )
    return AppointmentDetail.model_validate(appointment)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentCancelResponse,
    dependencies=[Depends(require_csrf_header)],
)
def cancel_appointment(
    appointment_id: UUID,
    scope: TenantScope = Depends(get_scope),
):
    """Cancel an appointment. Cancelling twice returns 404."""
    cancelled_id = appointment_service.cancel_appointment(scope, appointment_id)
    return AppointmentCancelResponse(
        id=cancelled_id, status=AppointmentStatus.CANCELLED.value
    )
