"""Tests for staff availability matching and management."""

import uuid
from datetime import timedelta

import pytest

from booking_api.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from booking_api.db.models import Availability
from booking_api.services import availability_service

from conftest import next_monday


def _recurring(day: int, start: str | None, end: str | None) -> Availability:
    return Availability(type="RECURRING", day_of_week=day, start_time=start, end_time=end)


# =============================================================================
# Record matching (no database)
# =============================================================================

class TestRecurringMatch:
    def test_inside_window(self):
        start = next_monday(10)
        assert availability_service.record_contains(
            _recurring(1, "09:00", "17:00"), start, start + timedelta(hours=1)
        )

    def test_window_bounds_inclusive(self):
        start = next_monday(9)
        end = next_monday(17)
        assert availability_service.record_contains(_recurring(1, "09:00", "17:00"), start, end)

    def test_wrong_day(self):
        start = next_monday(10)
        assert not availability_service.record_contains(
            _recurring(2, "09:00", "17:00"), start, start + timedelta(hours=1)
        )

    def test_sunday_window_matches(self):
        sunday = next_monday(10) - timedelta(days=1)
        assert availability_service.record_contains(
            _recurring(0, "09:00", "17:00"), sunday, sunday + timedelta(hours=1)
        )

    def test_past_window_end(self):
        start = next_monday(16, 30)
        assert not availability_service.record_contains(
            _recurring(1, "09:00", "17:00"), start, start + timedelta(hours=1)
        )

    def test_interval_crossing_midnight_never_matches(self):
        start = next_monday(23)
        assert not availability_service.record_contains(
            _recurring(1, "00:00", "23:59"), start, start + timedelta(hours=2)
        )

    def test_malformed_times_do_not_match(self):
        start = next_monday(10)
        assert not availability_service.record_contains(
            _recurring(1, "nine", "17:00"), start, start + timedelta(hours=1)
        )
        assert not availability_service.record_contains(
            _recurring(1, None, "17:00"), start, start + timedelta(hours=1)
        )


class TestOneOffMatch:
    def test_inside_range(self):
        start = next_monday(10)
        av = Availability(
            type="ONE_OFF",
            start_date=start - timedelta(hours=1),
            end_date=start + timedelta(hours=3),
        )
        assert availability_service.record_contains(av, start, start + timedelta(hours=1))

    def test_spills_out_of_range(self):
        start = next_monday(10)
        av = Availability(type="ONE_OFF", start_date=start, end_date=start + timedelta(minutes=30))
        assert not availability_service.record_contains(av, start, start + timedelta(hours=1))

    def test_unknown_type_never_matches(self):
        start = next_monday(10)
        av = Availability(type="SOMETIMES", start_date=start, end_date=start + timedelta(hours=2))
        assert not availability_service.record_contains(av, start, start + timedelta(hours=1))


# =============================================================================
# Checker against stored records
# =============================================================================

class TestAvailabilityChecker:
    def test_no_records_means_always_available(self, owner_scope, staff):
        start = next_monday(3)
        assert availability_service.is_interval_available(
            owner_scope, staff.id, start, start + timedelta(hours=1)
        )

    def test_any_matching_record_suffices(self, owner_scope, staff):
        availability_service.create_availability(
            owner_scope, staff.id, "RECURRING", day_of_week=2, start_time="09:00", end_time="17:00"
        )
        availability_service.create_availability(
            owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="09:00", end_time="12:00"
        )
        start = next_monday(10)
        availability_service.ensure_within_availability(
            owner_scope, staff.id, start, start + timedelta(hours=1)
        )

    def test_outside_all_records(self, owner_scope, staff):
        availability_service.create_availability(
            owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="09:00", end_time="12:00"
        )
        start = next_monday(14)
        with pytest.raises(ConflictError, match="outside staff availability"):
            availability_service.ensure_within_availability(
                owner_scope, staff.id, start, start + timedelta(hours=1)
            )

    def test_deleted_records_ignored(self, owner_scope, staff):
        record = availability_service.create_availability(
            owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="09:00", end_time="12:00"
        )
        availability_service.delete_availability(owner_scope, staff.id, record.id)

        start = next_monday(14)
        assert availability_service.is_interval_available(
            owner_scope, staff.id, start, start + timedelta(hours=1)
        )


# =============================================================================
# Management
# =============================================================================

class TestAvailabilityManagement:
    def test_recurring_validation(self, owner_scope, staff):
        with pytest.raises(ValidationError, match="day_of_week"):
            availability_service.create_availability(
                owner_scope, staff.id, "RECURRING", day_of_week=7, start_time="09:00", end_time="17:00"
            )
        with pytest.raises(ValidationError, match="HH:MM"):
            availability_service.create_availability(
                owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="9am", end_time="17:00"
            )
        with pytest.raises(ValidationError, match="HH:MM"):
            availability_service.create_availability(
                owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="18:00", end_time="24:00"
            )
        with pytest.raises(ValidationError, match="end_time must be after start_time"):
            availability_service.create_availability(
                owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="17:00", end_time="09:00"
            )

    def test_one_off_requires_ordered_dates(self, owner_scope, staff):
        start = next_monday(9)
        with pytest.raises(ValidationError, match="end_date must be after start_date"):
            availability_service.create_availability(
                owner_scope, staff.id, "ONE_OFF", start_date=start, end_date=start
            )

    def test_unknown_type(self, owner_scope, staff):
        with pytest.raises(ValidationError, match="Unknown availability type"):
            availability_service.create_availability(owner_scope, staff.id, "WEEKLY")

    def test_client_cannot_manage(self, client_scope, staff):
        with pytest.raises(AuthorizationError):
            availability_service.create_availability(
                client_scope, staff.id, "RECURRING", day_of_week=1, start_time="09:00", end_time="17:00"
            )

    def test_unknown_staff(self, owner_scope):
        with pytest.raises(NotFoundError, match="Staff not found"):
            availability_service.create_availability(
                owner_scope, uuid.uuid4(), "RECURRING", day_of_week=1, start_time="09:00", end_time="17:00"
            )

    def test_delete_twice(self, owner_scope, staff):
        record = availability_service.create_availability(
            owner_scope, staff.id, "RECURRING", day_of_week=1, start_time="09:00", end_time="17:00"
        )
        availability_service.delete_availability(owner_scope, staff.id, record.id)
        with pytest.raises(NotFoundError):
            availability_service.delete_availability(owner_scope, staff.id, record.id)
