"""Catalog service - bookable services offered by a tenant."""

from decimal import Decimal
from uuid import UUID

from booking_api.core.config import settings
from booking_api.core.exceptions import NotFoundError, ValidationError
from booking_api.core.permissions import require_role
from booking_api.db.base import utcnow
from booking_api.db.enums import ROLES_CAN_MANAGE_CATALOG
from booking_api.db.models import Service, StaffService, Tenant
from booking_api.db.tenant_scope import TenantScope
from booking_api.services.staff_service import create_assignment


def _validate_terms(duration_minutes: int | None, price: Decimal | None) -> None:
    if duration_minutes is not None and duration_minutes <= 0:
        raise ValidationError("Duration must be positive")
    if price is not None and price < 0:
        raise ValidationError("Price must be >= 0")


def _tenant_currency(scope: TenantScope) -> str:
    tenant = scope.first(Tenant, Tenant.id == scope.tenant_id)
    if tenant and tenant.currency:
        return tenant.currency
    return settings.DEFAULT_CURRENCY


def create_service(
    scope: TenantScope,
    title: str | None,
    duration_minutes: int | None,
    price: Decimal | None,
    description: str | None = None,
    currency: str | None = None,
) -> Service:
    """Create a service. Currency defaults to the tenant's currency."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    if not title or not title.strip() or duration_minutes is None or price is None:
        raise ValidationError("Missing required fields: title, duration_minutes, price")
    _validate_terms(duration_minutes, price)

    service = Service(
        title=title.strip(),
        description=description.strip() if description and description.strip() else None,
        duration_minutes=duration_minutes,
        price=price,
        currency=(currency or _tenant_currency(scope)).upper(),
        active=True,
    )
    with scope.atomic():
        scope.add(service)
    return service


def get_service(scope: TenantScope, service_id: UUID) -> Service:
    """Get non-deleted service by ID."""
    service = scope.get(Service, service_id, Service.deleted_at.is_(None))
    if not service:
        raise NotFoundError("Service not found")
    return service


def list_services(
    scope: TenantScope,
    search: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Service], int]:
    """List non-deleted services, newest first, with case-insensitive title search."""
    query = scope.query(Service, Service.deleted_at.is_(None))
    if search:
        query = query.filter(Service.title.ilike(f"%{search}%"))
    total = query.count()
    services = query.order_by(Service.created_at.desc()).offset(offset).limit(limit).all()
    return services, total


def update_service(
    scope: TenantScope,
    service_id: UUID,
    title: str | None = None,
    description: str | None = None,
    duration_minutes: int | None = None,
    price: Decimal | None = None,
    currency: str | None = None,
    active: bool | None = None,
) -> Service:
    """
    Partial update of a service.

    Existing appointments keep their own price/currency snapshot and their
    interval; only future bookings see the new terms.
    """
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    _validate_terms(duration_minutes, price)
    if title is not None and not title.strip():
        raise ValidationError("Title is required")
    service = get_service(scope, service_id)

    with scope.atomic():
        if title is not None:
            service.title = title.strip()
        if description is not None:
            service.description = description.strip() or None
        if duration_minutes is not None:
            service.duration_minutes = duration_minutes
        if price is not None:
            service.price = price
        if currency is not None:
            service.currency = currency.upper()
        if active is not None:
            service.active = active
    return service


def delete_service(scope: TenantScope, service_id: UUID) -> None:
    """Soft delete a service and deactivate it."""
    require_role(scope.ctx, ROLES_CAN_MANAGE_CATALOG)
    with scope.atomic():
        deleted = scope.update_where(
            Service,
            {Service.deleted_at: utcnow(), Service.active: False},
            Service.id == service_id,
            Service.deleted_at.is_(None),
        )
        if deleted == 0:
            raise NotFoundError("Service not found or already deleted")


def assign_staff(scope: TenantScope, service_id: UUID, staff_id: UUID | None) -> StaffService:
    """Assign a staff member to a service."""
    return create_assignment(
        scope, staff_id, service_id, "Staff already assigned to this service"
    )
