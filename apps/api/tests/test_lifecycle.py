"""Tests for appointment status transitions."""

import pytest

from booking_api.core.exceptions import ValidationError
from booking_api.db.enums import AppointmentStatus
from booking_api.services.appointment_lifecycle import (
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    can_transition,
    is_terminal,
    parse_status,
    validate_transition,
)


class TestTransitionTable:
    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {
            AppointmentStatus.CANCELLED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
        }

    def test_cancellable_statuses(self):
        assert CANCELLABLE_STATUSES == {
            AppointmentStatus.PENDING,
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.RESCHEDULED,
        }

    @pytest.mark.parametrize(
        "current,target",
        [
            ("PENDING", "CONFIRMED"),
            ("PENDING", "CANCELLED"),
            ("CONFIRMED", "COMPLETED"),
            ("CONFIRMED", "NO_SHOW"),
            ("RESCHEDULED", "CONFIRMED"),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        assert validate_transition(current, target) == AppointmentStatus(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("PENDING", "COMPLETED"),
            ("PENDING", "NO_SHOW"),
            ("CANCELLED", "CONFIRMED"),
            ("COMPLETED", "CANCELLED"),
            ("NO_SHOW", "PENDING"),
            ("CONFIRMED", "PENDING"),
        ],
    )
    def test_rejected(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(ValidationError, match="Cannot change appointment status"):
            validate_transition(current, target)

    def test_same_status_is_noop(self):
        assert validate_transition("COMPLETED", "COMPLETED") == AppointmentStatus.COMPLETED

    def test_rescheduled_requires_new_interval(self):
        with pytest.raises(ValidationError, match="requires a new start and end"):
            validate_transition("CONFIRMED", "RESCHEDULED")
        assert (
            validate_transition("CONFIRMED", "RESCHEDULED", interval_changed=True)
            == AppointmentStatus.RESCHEDULED
        )


class TestParseStatus:
    def test_lowercase_accepted(self):
        assert parse_status("confirmed") == AppointmentStatus.CONFIRMED

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError, match="Unknown appointment status"):
            parse_status("ARCHIVED")

    def test_is_terminal(self):
        assert is_terminal("NO_SHOW")
        assert not is_terminal(AppointmentStatus.PENDING)
