"""Tests for staff time off (blackout) handling."""

from datetime import timedelta

import pytest

from booking_api.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from booking_api.services import time_off_service

from conftest import next_monday


class TestTimeOffChecker:
    def test_overlap_blocks_with_reason(self, owner_scope, staff):
        time_off_service.create_time_off(
            owner_scope, staff.id, next_monday(8), next_monday(12), reason="Vacation"
        )
        with pytest.raises(ConflictError, match=r"Staff is on time off \(Vacation\)"):
            time_off_service.ensure_not_on_time_off(
                owner_scope, staff.id, next_monday(11), next_monday(13)
            )

    def test_touching_endpoint_still_blocks(self, owner_scope, staff):
        time_off_service.create_time_off(owner_scope, staff.id, next_monday(8), next_monday(10))
        with pytest.raises(ConflictError, match=r"\(Time off\)"):
            time_off_service.ensure_not_on_time_off(
                owner_scope, staff.id, next_monday(10), next_monday(11)
            )

    def test_earliest_blocking_reason_reported(self, owner_scope, staff):
        time_off_service.create_time_off(
            owner_scope, staff.id, next_monday(11), next_monday(12), reason="Dentist"
        )
        time_off_service.create_time_off(
            owner_scope, staff.id, next_monday(9), next_monday(10), reason="Training"
        )
        blocking = time_off_service.find_blocking_time_off(
            owner_scope, staff.id, next_monday(9), next_monday(12)
        )
        assert blocking.reason == "Training"

    def test_clear_interval(self, owner_scope, staff):
        time_off_service.create_time_off(owner_scope, staff.id, next_monday(8), next_monday(9))
        time_off_service.ensure_not_on_time_off(
            owner_scope, staff.id, next_monday(10), next_monday(11)
        )

    def test_deleted_time_off_ignored(self, owner_scope, staff):
        record = time_off_service.create_time_off(
            owner_scope, staff.id, next_monday(8), next_monday(18)
        )
        time_off_service.delete_time_off(owner_scope, staff.id, record.id)
        time_off_service.ensure_not_on_time_off(
            owner_scope, staff.id, next_monday(10), next_monday(11)
        )


class TestTimeOffManagement:
    def test_requires_ordered_interval(self, owner_scope, staff):
        with pytest.raises(ValidationError, match="end must be after start"):
            time_off_service.create_time_off(owner_scope, staff.id, next_monday(10), next_monday(9))

    def test_client_cannot_create(self, client_scope, staff):
        with pytest.raises(AuthorizationError):
            time_off_service.create_time_off(
                client_scope, staff.id, next_monday(9), next_monday(10)
            )

    def test_list_filters_by_range(self, owner_scope, staff):
        time_off_service.create_time_off(owner_scope, staff.id, next_monday(8), next_monday(9))
        later = next_monday(8) + timedelta(days=2)
        time_off_service.create_time_off(owner_scope, staff.id, later, later + timedelta(hours=1))

        records = time_off_service.list_time_off(
            owner_scope, staff.id, date_from=later - timedelta(hours=1)
        )
        assert [r.start_at for r in records] == [later]

    def test_delete_unknown(self, owner_scope, staff, other_tenant, scope_for):
        record = time_off_service.create_time_off(
            owner_scope, staff.id, next_monday(8), next_monday(9)
        )
        with pytest.raises(NotFoundError):
            time_off_service.delete_time_off(scope_for(other_tenant), staff.id, record.id)
