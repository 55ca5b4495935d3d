"""Availability, time off, and appointment models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booking_api.db.base import Base, TenantScopedMixin, utcnow
from booking_api.db.enums import DEFAULT_APPOINTMENT_STATUS

if TYPE_CHECKING:
    from booking_api.db.models.catalog import Service, Staff
    from booking_api.db.models.tenants import User


class Availability(TenantScopedMixin, Base):
    """
    Declared bookable window for a staff member.

    RECURRING rows use ``day_of_week`` (0=Sunday..6=Saturday) with
    ``start_time``/``end_time`` as "HH:MM" UTC wall-clock strings.
    ONE_OFF rows use the absolute ``start_date``/``end_date`` range.

    A staff member with no availability rows is bookable at any time.
    """

    __tablename__ = "availabilities"
    __table_args__ = (
        Index("idx_availabilities_staff", "staff_id"),
        CheckConstraint(
            "day_of_week IS NULL OR (day_of_week >= 0 AND day_of_week <= 6)",
            name="ck_availability_day_of_week",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    staff_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("staff.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    # RECURRING
    day_of_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    # ONE_OFF
    start_date: Mapped[datetime | None] = mapped_column(nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)


class TimeOff(TenantScopedMixin, Base):
    """Blackout interval; overrides any availability for the staff member."""

    __tablename__ = "time_offs"
    __table_args__ = (
        Index("idx_time_offs_staff", "staff_id"),
        CheckConstraint("end_at > start_at", name="ck_time_off_interval"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    staff_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("staff.id", ondelete="CASCADE"), nullable=False
    )
    start_at: Mapped[datetime] = mapped_column(nullable=False)
    end_at: Mapped[datetime] = mapped_column(nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)


class Appointment(TenantScopedMixin, Base):
    """
    Booked appointment.

    Never physically deleted: cancellation is a status transition.
    ``price``/``currency`` are copied from the service at creation so later
    catalog edits don't rewrite history.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_tenant_start", "tenant_id", "start_at"),
        Index("idx_appointments_staff_start", "staff_id", "start_at"),
        Index("idx_appointments_client", "client_id"),
        CheckConstraint("end_at > start_at", name="ck_appointment_interval"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    service_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("services.id"), nullable=False
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("staff.id"), nullable=False
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False
    )

    start_at: Mapped[datetime] = mapped_column(nullable=False)
    end_at: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_APPOINTMENT_STATUS.value, nullable=False
    )

    # Snapshot from service at creation
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )
    canceled_at: Mapped[datetime | None] = mapped_column(nullable=True)

    service: Mapped["Service"] = relationship()
    staff: Mapped["Staff"] = relationship()
    client: Mapped["User"] = relationship()
