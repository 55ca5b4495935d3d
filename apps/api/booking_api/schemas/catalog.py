"""Service catalog and staff schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Services
# =============================================================================

class ServiceCreate(BaseModel):
    """Schema for creating a service."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    duration_minutes: int
    price: Decimal
    currency: str | None = Field(None, min_length=3, max_length=3)


class ServiceUpdate(BaseModel):
    """Schema for updating a service."""
    title: str | None = Field(None, max_length=255)
    description: str | None = None
    duration_minutes: int | None = None
    price: Decimal | None = None
    currency: str | None = Field(None, min_length=3, max_length=3)
    active: bool | None = None


class ServiceRead(BaseModel):
    """Schema for reading a service."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None
    duration_minutes: int
    price: Decimal
    currency: str
    active: bool
    created_at: datetime
    updated_at: datetime


class ServiceDetail(ServiceRead):
    """Service with the staff assigned to it."""
    staff: list["StaffRead"] = []


class ServiceListResponse(BaseModel):
    items: list[ServiceRead]
    total: int
    page: int
    per_page: int
    pages: int


# =============================================================================
# Staff
# =============================================================================

class StaffCreate(BaseModel):
    """Schema for creating a staff member."""
    name: str = Field(..., min_length=1, max_length=255)
    bio: str | None = None
    avatar: str | None = Field(None, max_length=500)
    user_id: UUID | None = None


class StaffUpdate(BaseModel):
    """Schema for updating a staff member."""
    name: str | None = Field(None, max_length=255)
    bio: str | None = None
    avatar: str | None = Field(None, max_length=500)


class StaffRead(BaseModel):
    """Schema for reading a staff member."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None
    name: str
    bio: str | None
    avatar: str | None
    created_at: datetime
    updated_at: datetime


class StaffDetail(StaffRead):
    """Staff member with assigned services."""
    services: list[ServiceRead] = []


class StaffListResponse(BaseModel):
    items: list[StaffRead]
    total: int
    page: int
    per_page: int
    pages: int


# =============================================================================
# Assignments
# =============================================================================

class AssignStaffRequest(BaseModel):
    staff_id: UUID


class AssignServiceRequest(BaseModel):
    service_id: UUID


class StaffServiceRead(BaseModel):
    """Schema for a staff ↔ service link."""
    model_config = ConfigDict(from_attributes=True)

    staff_id: UUID
    service_id: UUID
    created_at: datetime


ServiceDetail.model_rebuild()
