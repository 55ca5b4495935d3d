"""Appointment schemas - Pydantic models for appointments API."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from booking_api.schemas.catalog import ServiceRead, StaffRead


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment."""
    service_id: UUID
    staff_id: UUID
    client_id: UUID
    start: datetime
    end: datetime
    notes: str | None = Field(None, max_length=2000)


class AppointmentUpdate(BaseModel):
    """
    Schema for updating an appointment.

    start/end together reschedule; status and notes may be sent alone.
    """
    status: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class ClientRead(BaseModel):
    """Client summary (no contact details)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class AppointmentRead(BaseModel):
    """Schema for reading an appointment."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    service_id: UUID
    staff_id: UUID
    client_id: UUID
    start: datetime = Field(validation_alias=AliasChoices("start_at", "start"))
    end: datetime = Field(validation_alias=AliasChoices("end_at", "end"))
    status: str
    price: Decimal
    currency: str
    notes: str | None
    canceled_at: datetime | None
    created_at: datetime
    updated_at: datetime


class AppointmentDetail(AppointmentRead):
    """Appointment joined with its service, staff and client."""
    service: ServiceRead
    staff: StaffRead
    client: ClientRead


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""
    items: list[AppointmentDetail]
    total: int
    page: int
    per_page: int
    pages: int


class AppointmentCancelResponse(BaseModel):
    id: UUID
    status: str
