"""Tests for schedule integrity validation."""

import pytest

from schededit.domain.models import ScheduleSlot, StaffSchedule, TimeWindow
from schededit.validation.validator import (
    DuplicateHolding,
    ScheduleValidator,
    ValidationErrorType,
    find_duplicate_holders,
)

from conftest import make_slot


class TestScheduleValidator:
    """Tests for ScheduleValidator."""

    @pytest.fixture
    def validator(self):
        return ScheduleValidator()

    def test_valid_schedule(self, validator, schedule, staff_list, client_list):
        """The sample day is valid."""
        result = validator.validate(schedule, staff_list, client_list)
        assert result.is_valid
        assert result.errors == []

    def test_overlapping_slots(self, validator):
        """Two slots on one staff member must not overlap."""
        schedule = [
            StaffSchedule(
                "s1",
                slots=[make_slot("a", "c1", 480, 600), make_slot("b", "c2", 570, 720)],
            )
        ]
        result = validator.validate(schedule)
        errors = result.errors_of_type(ValidationErrorType.SLOTS_OVERLAP)
        assert len(errors) == 1
        assert errors[0].slot_id == "a"
        assert errors[0].details == {"other_slot_id": "b"}

    def test_touching_slots_are_fine(self, validator):
        """Back-to-back slots do not overlap."""
        schedule = [
            StaffSchedule(
                "s1",
                slots=[make_slot("a", "c1", 480, 600), make_slot("b", "c2", 600, 720)],
            )
        ]
        assert validator.validate(schedule).is_valid

    def test_duplicate_holder(self, validator):
        """A client held by two staff at once is reported."""
        schedule = [
            StaffSchedule("s1", slots=[make_slot("a", "c1", 480, 720)]),
            StaffSchedule("s2", slots=[make_slot("b", "c1", 600, 780)]),
        ]
        result = validator.validate(schedule)
        errors = result.errors_of_type(ValidationErrorType.DUPLICATE_HOLDER)
        assert len(errors) == 1
        assert errors[0].details["staff_ids"] == ["s1", "s2"]
        assert errors[0].details["window"] == {"start": "10:00", "end": "12:00"}

    def test_invalid_and_out_of_day_slots(self, validator):
        """Slots must have start < end and lie within the day."""
        schedule = [
            StaffSchedule(
                "s1",
                slots=[
                    make_slot("rev", None, 600, 540),
                    make_slot("late", None, 1400, 1500),
                ],
            )
        ]
        result = validator.validate(schedule)
        assert [e.slot_id for e in result.errors_of_type(ValidationErrorType.INVALID_SLOT_WINDOW)] == ["rev"]
        assert [e.slot_id for e in result.errors_of_type(ValidationErrorType.SLOT_OUTSIDE_DAY)] == ["late"]

    def test_unknown_ids(self, validator, staff_list, client_list):
        """Ids missing from the roster are reported when a roster is given."""
        schedule = [StaffSchedule("s9", slots=[make_slot("a", "c9", 480, 600)])]
        result = validator.validate(schedule, staff_list, client_list)
        assert len(result.errors_of_type(ValidationErrorType.UNKNOWN_STAFF)) == 1
        assert len(result.errors_of_type(ValidationErrorType.UNKNOWN_CLIENT)) == 1
        assert validator.validate(schedule).is_valid

    def test_duplicate_staff_schedule(self, validator):
        """Each staff member has at most one day schedule."""
        schedule = [StaffSchedule("s1"), StaffSchedule("s1")]
        result = validator.validate(schedule)
        assert len(result.errors_of_type(ValidationErrorType.DUPLICATE_STAFF_SCHEDULE)) == 1

    def test_error_str(self, validator):
        """Errors render with their type and staff."""
        schedule = [StaffSchedule("s1", slots=[make_slot("rev", None, 600, 540)])]
        error = validator.validate(schedule).errors[0]
        assert str(error).startswith("[invalid_slot_window] Staff s1:")

    def test_unbounded_slot_is_full_day(self, validator):
        """A slot without bounds overlaps every other slot."""
        schedule = [
            StaffSchedule(
                "s1",
                slots=[
                    ScheduleSlot(id="all", block="AM", value="X"),
                    make_slot("b", None, 480, 540),
                ],
            )
        ]
        assert not validator.validate(schedule).is_valid


class TestFindDuplicateHolders:
    """Tests for find_duplicate_holders."""

    @pytest.fixture
    def doubled(self):
        return [
            StaffSchedule("s1", slots=[make_slot("a", "c1", 480, 720)]),
            StaffSchedule("s2", slots=[make_slot("b", "c1", 600, 780)]),
            StaffSchedule("s3", slots=[make_slot("c", "c2", 480, 720)]),
        ]

    def test_finds_pair(self, doubled):
        """The overlap window is the intersection of both slots."""
        assert find_duplicate_holders(doubled) == [
            DuplicateHolding("c1", ("s1", "s2"), TimeWindow(600, 720))
        ]

    def test_filters(self, doubled):
        """Client and window filters narrow the search."""
        assert find_duplicate_holders(doubled, client_id="c2") == []
        assert find_duplicate_holders(doubled, window=TimeWindow(480, 600)) == []
        assert len(find_duplicate_holders(doubled, client_id="c1", window=TimeWindow(700, 760))) == 1

    def test_same_staff_twice_is_not_duplicate(self):
        """A staff member's own slots are not duplicate holders."""
        schedule = [
            StaffSchedule(
                "s1",
                slots=[make_slot("a", "c1", 480, 600), make_slot("b", "c1", 540, 720)],
            )
        ]
        assert find_duplicate_holders(schedule) == []
