"""Availability and time off schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AvailabilityCreate(BaseModel):
    """
    Schema for creating an availability record.

    RECURRING: day_of_week (0=Sunday..6=Saturday) + start_time/end_time (HH:MM, UTC).
    ONE_OFF: start_date/end_date.
    """
    type: Literal["RECURRING", "ONE_OFF"]
    day_of_week: int | None = Field(None, ge=0, le=6, description="Sunday=0, Saturday=6")
    start_time: str | None = Field(None, pattern=r"^\d{2}:\d{2}$", description="HH:MM format")
    end_time: str | None = Field(None, pattern=r"^\d{2}:\d{2}$", description="HH:MM format")
    start_date: datetime | None = None
    end_date: datetime | None = None


class AvailabilityRead(BaseModel):
    """Schema for reading an availability record."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    staff_id: UUID
    type: str
    day_of_week: int | None
    start_time: str | None
    end_time: str | None
    start_date: datetime | None
    end_date: datetime | None
    created_at: datetime


class TimeOffCreate(BaseModel):
    """Schema for creating a time off record."""
    start: datetime
    end: datetime
    reason: str | None = Field(None, max_length=255)


class TimeOffRead(BaseModel):
    """Schema for reading a time off record."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    staff_id: UUID
    start: datetime = Field(validation_alias=AliasChoices("start_at", "start"))
    end: datetime = Field(validation_alias=AliasChoices("end_at", "end"))
    reason: str | None
    created_at: datetime
