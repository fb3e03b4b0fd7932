"""Tests for the change log, undo stack and edit descriptions."""

from datetime import datetime

import pytest

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
)
from schededit.domain.models import Entities, StaffSchedule, TimeWindow
from schededit.editing.description import generate_edit_description
from schededit.editing.history import (
    MAX_UNDO_ITEMS,
    ChangeLog,
    ChangeLogEntry,
    UndoStack,
    edit_entities,
)
from schededit.validation.constraints import EditorWarning, WarningType

from conftest import make_slot

WINDOW = TimeWindow(540, 600)


def _warning(warning_type):
    return EditorWarning(
        id=f"{warning_type.value}-x",
        type=warning_type,
        rule="Rule",
        description="Something",
    )


class TestChangeLog:
    """Tests for ChangeLog."""

    def test_record_assigns_sequential_ids(self):
        """Entries are numbered in append order."""
        log = ChangeLog()
        first = log.record(TagEdit("s1", "A", WINDOW), "one", Entities(), False, [])
        second = log.record(CancelEdit("c1"), "two", Entities(), True, [])
        assert (first.id, second.id) == ("log-0001", "log-0002")
        assert [e.description for e in log] == ["one", "two"]
        assert len(log) == 2

    def test_record_captures_edit_metadata(self):
        """Entries carry the edit type, window and advisor flag."""
        log = ChangeLog()
        stamp = datetime(2024, 1, 15, 9, 30)
        entry = log.record(
            ChangeStaffEdit("s1", "c1", WINDOW),
            "Changed",
            Entities(staff_id="s1"),
            True,
            [],
            timestamp=stamp,
        )
        assert entry.edit_type == EditType.CHANGE_STAFF
        assert entry.time_window == WINDOW
        assert entry.triggered_advisor
        assert entry.timestamp == stamp
        assert not entry.has_warnings
        assert entry.warning_type is None

    def test_cancel_and_split_windows(self):
        """Cancels have no window; splits log their span."""
        log = ChangeLog()
        cancel = log.record(CancelEdit("c1"), "c", Entities(), False, [])
        split = log.record(
            SplitEdit(
                "s1",
                (SplitSegment("c1", TimeWindow(480, 540)), SplitSegment("c2", TimeWindow(600, 660))),
            ),
            "s",
            Entities(),
            False,
            [],
        )
        assert cancel.time_window is None
        assert split.time_window == TimeWindow(480, 660)

    def test_most_severe_warning_recorded(self):
        """A hard warning outranks soft ones."""
        log = ChangeLog()
        soft = log.record(TagEdit("s1", "A", WINDOW), "a", Entities(), False, [_warning(WarningType.SOFT)])
        hard = log.record(
            TagEdit("s1", "B", WINDOW),
            "b",
            Entities(),
            False,
            [_warning(WarningType.SOFT), _warning(WarningType.HARD)],
        )
        assert soft.has_warnings and soft.warning_type == WarningType.SOFT
        assert hard.warning_type == WarningType.HARD

    def test_entries_are_read_only_view(self):
        """The entries property is a snapshot tuple."""
        log = ChangeLog()
        log.record(TagEdit("s1", "A", WINDOW), "a", Entities(), False, [])
        assert isinstance(log.entries, tuple)

    def test_round_trip(self):
        """The log serializes to plain dicts."""
        log = ChangeLog()
        log.record(
            ChangeStaffEdit("s1", "c1", WINDOW),
            "Changed",
            Entities(staff_id="s1", staff_name="Alice"),
            True,
            [_warning(WarningType.SOFT)],
            timestamp=datetime(2024, 1, 15, 9, 30),
        )
        restored = ChangeLog.from_dict(log.to_dict())
        assert restored.entries == log.entries
        assert ChangeLogEntry.from_dict(log.entries[0].to_dict()) == log.entries[0]


class TestUndoStack:
    """Tests for UndoStack."""

    def _day(self, label):
        return [StaffSchedule("s1", slots=[make_slot(label, "c1", 480, 720)])]

    def test_default_cap(self):
        """The default cap is twenty snapshots."""
        assert UndoStack().max_items == MAX_UNDO_ITEMS == 20

    def test_lifo(self):
        """Snapshots come back most recent first."""
        stack = UndoStack()
        stack.push(self._day("a"))
        stack.push(self._day("b"))
        assert stack.pop()[0].slots[0].id == "b"
        assert stack.pop()[0].slots[0].id == "a"
        assert stack.pop() is None

    def test_cap_drops_oldest(self):
        """Pushing past the cap discards the oldest snapshot."""
        stack = UndoStack(max_items=2)
        for label in ("a", "b", "c"):
            stack.push(self._day(label))
        assert len(stack) == 2
        assert stack.pop()[0].slots[0].id == "c"
        assert stack.pop()[0].slots[0].id == "b"
        assert not stack

    def test_push_clones(self):
        """Later changes to a pushed schedule do not leak into the stack."""
        stack = UndoStack()
        day = self._day("a")
        stack.push(day)
        day[0].slots.clear()
        assert len(stack.peek()[0].slots) == 1

    def test_invalid_cap(self):
        """The cap must be positive."""
        with pytest.raises(ValueError):
            UndoStack(max_items=0)

    def test_round_trip(self):
        """Snapshots and the cap survive serialization."""
        stack = UndoStack(max_items=3)
        stack.push(self._day("a"))
        restored = UndoStack.from_dict(stack.to_dict(), stack.max_items)
        assert restored.max_items == 3
        assert restored.pop() == self._day("a")


class TestEditEntities:
    """Tests for edit_entities."""

    def test_resolves_names(self, staff_list, client_list):
        """Names come from the roster."""
        entities = edit_entities(ChangeStaffEdit("s1", "c1", WINDOW), staff_list, client_list)
        assert entities == Entities(
            staff_id="s1", staff_name="Alice", client_id="c1", client_name="Liam Nguyen"
        )

    def test_trainee_is_the_staff(self, staff_list, client_list):
        """Training edits reference the trainee."""
        edit = TrainEdit("s5", "c1", "s4", TrainingPhase.SHADOW, WINDOW)
        assert edit_entities(edit, staff_list, client_list).staff_name == "Eve"


class TestEditDescription:
    """Tests for generate_edit_description."""

    def test_change_staff(self, staff_list, client_list):
        edit = ChangeStaffEdit("s5", "c1", WINDOW)
        assert generate_edit_description(edit, staff_list, client_list) == (
            "Changed Liam Nguyen to Eve (9:00-10:00)"
        )

    def test_split(self, staff_list, client_list):
        edit = SplitEdit(
            "s5",
            (SplitSegment("c1", TimeWindow(480, 540)), SplitSegment("c2", TimeWindow(540, 600))),
        )
        assert generate_edit_description(edit, staff_list, client_list) == (
            "Split Eve's schedule into 2 segments"
        )

    def test_train(self, staff_list, client_list):
        edit = TrainEdit("s5", "c1", "s4", TrainingPhase.SHADOW, WINDOW)
        assert generate_edit_description(edit, staff_list, client_list) == (
            "Added training: Eve with Liam Nguyen (shadow)"
        )

    def test_cancel(self, staff_list, client_list):
        """The first underscore of the cancel type becomes a space."""
        assert generate_edit_description(CancelEdit("c2"), staff_list, client_list) == (
            "Cancelled Mia Patel (all day)"
        )
        edit = CancelEdit("c2", CancelType.CANCELLED_UNTIL, time=600)
        assert generate_edit_description(edit, staff_list, client_list) == (
            "Cancelled Mia Patel (cancelled until)"
        )

    def test_tag(self, staff_list, client_list):
        edit = TagEdit("s4", "Meeting", WINDOW)
        assert generate_edit_description(edit, staff_list, client_list) == (
            'Added tag "Meeting" to David'
        )

    def test_unknown_names(self, staff_list, client_list):
        """Unresolved ids render as Unknown."""
        edit = ChangeStaffEdit("s9", "c9", WINDOW)
        assert generate_edit_description(edit, staff_list, client_list) == (
            "Changed Unknown to Unknown (9:00-10:00)"
        )
