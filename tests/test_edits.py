"""Tests for edit variants and their structural validation."""

from schededit.domain.edits import (
    CancelEdit,
    CancelType,
    ChangeStaffEdit,
    EditType,
    SplitEdit,
    SplitSegment,
    TagEdit,
    TrainEdit,
    TrainingPhase,
    edit_from_dict,
    edit_to_dict,
    validate_edit,
)
from schededit.domain.models import TimeWindow


class TestCancelWindow:
    """Tests for resolving a cancellation's interval."""

    def test_all_day(self):
        """All-day cancellations cover the whole day."""
        assert CancelEdit("c1").cancel_window == TimeWindow(0, 1440)

    def test_cancelled_until(self):
        """Cancelled-until runs from midnight to the given time."""
        edit = CancelEdit("c1", CancelType.CANCELLED_UNTIL, time=600)
        assert edit.cancel_window == TimeWindow(0, 600)

    def test_cancelled_at(self):
        """Cancelled-at runs from the given time to the end of the day."""
        edit = CancelEdit("c1", CancelType.CANCELLED_AT, time=600)
        assert edit.cancel_window == TimeWindow(600, 1440)


class TestSplitEdit:
    """Tests for SplitEdit."""

    def test_span_covers_all_segments(self):
        """Span runs from the earliest start to the latest end."""
        edit = SplitEdit(
            "s1",
            (
                SplitSegment("c2", TimeWindow(600, 720)),
                SplitSegment("c1", TimeWindow(480, 600)),
            ),
        )
        assert edit.span == TimeWindow(480, 720)

    def test_empty_split_has_no_span(self):
        """A split without segments has no span."""
        assert SplitEdit("s1").span is None


class TestValidateEdit:
    """Tests for validate_edit."""

    def test_well_formed_edit_has_no_errors(self):
        """A normal change of staff passes."""
        assert validate_edit(ChangeStaffEdit("s1", "c1", TimeWindow(540, 600))) == []

    def test_reversed_window_is_rejected(self):
        """Start must come before end."""
        errors = validate_edit(ChangeStaffEdit("s1", "c1", TimeWindow(600, 540)))
        assert len(errors) == 1
        assert "must be before end" in errors[0]

    def test_window_outside_day_is_rejected(self):
        """Windows must lie within the day."""
        errors = validate_edit(TagEdit("s1", "Meeting", TimeWindow(1400, 1500)))
        assert any("outside the day" in e for e in errors)

    def test_blank_tag_is_rejected(self):
        """Tags need text."""
        assert validate_edit(TagEdit("s1", "  ", TimeWindow(540, 600))) == [
            "Tag text must not be blank"
        ]

    def test_split_needs_segments(self):
        """A split without segments is rejected."""
        assert validate_edit(SplitEdit("s1")) == ["Split needs at least one segment"]

    def test_overlapping_split_segments_are_rejected(self):
        """Split segments must not overlap each other."""
        edit = SplitEdit(
            "s1",
            (
                SplitSegment("c1", TimeWindow(480, 600)),
                SplitSegment("c2", TimeWindow(570, 720)),
            ),
        )
        assert validate_edit(edit) == ["Segment 1 overlaps segment 2"]

    def test_partial_cancel_requires_time(self):
        """Cancelled-until and cancelled-at need a cut-over time."""
        errors = validate_edit(CancelEdit("c1", CancelType.CANCELLED_AT))
        assert errors == ["Cancel type cancelled_at requires a time"]

    def test_all_day_cancel_ignores_time(self):
        """All-day cancellations never need a time."""
        assert validate_edit(CancelEdit("c1")) == []


class TestEditSerialization:
    """Tests for edit_to_dict / edit_from_dict."""

    def test_round_trip_every_variant(self):
        """Each edit variant survives a dict round trip."""
        window = TimeWindow(540, 600)
        edits = [
            ChangeStaffEdit("s1", "c1", window),
            SplitEdit("s1", (SplitSegment("c1", window), SplitSegment("c2", TimeWindow(600, 660)))),
            TrainEdit("s5", "c1", "s4", TrainingPhase.SIGN_OFF, window),
            CancelEdit("c1", CancelType.CANCELLED_UNTIL, time=630),
            TagEdit("s1", "Meeting", window),
            TagEdit("s2", "Available", window, marks_available=True),
        ]
        for edit in edits:
            assert edit_from_dict(edit_to_dict(edit)) == edit

    def test_dict_is_tagged_by_type(self):
        """Serialized edits carry their type and readable times."""
        data = edit_to_dict(CancelEdit("c1", CancelType.CANCELLED_AT, time=600))
        assert data == {
            "type": "cancel",
            "client_id": "c1",
            "cancel_type": "cancelled_at",
            "time": "10:00",
        }

    def test_edit_type_class_attribute(self):
        """Each variant exposes its kind."""
        assert TagEdit.edit_type == EditType.TAG
        assert ChangeStaffEdit("s1", "c1", TimeWindow(0, 60)).edit_type == EditType.CHANGE_STAFF
