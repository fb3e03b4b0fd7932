"""Change log and undo history for an editing session.

The change log is a permanent audit trail: entries are appended once and
never edited or removed, including for edits that are later undone. Undo is
a separate, bounded stack of schedule snapshots.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional

from schededit.domain.edits import (
    CancelEdit,
    ChangeStaffEdit,
    EditType,
    ScheduleEdit,
    SplitEdit,
    TagEdit,
    TrainEdit,
)
from schededit.domain.models import (
    Client,
    Entities,
    Staff,
    StaffSchedule,
    TimeWindow,
    clone_schedule,
    schedule_from_dicts,
    schedule_to_dicts,
)
from schededit.validation.constraints import EditorWarning, WarningType

MAX_UNDO_ITEMS = 20


@dataclass(frozen=True)
class ChangeLogEntry:
    """One applied edit in the change log.

    Attributes:
        id: Sequential entry id (``log-0001``, ...).
        timestamp: When the edit was applied.
        edit_type: Kind of edit.
        description: Formatted one-line description.
        entities: Staff and client the edit targeted.
        time_window: Window the edit covered; None for cancellations.
        triggered_advisor: Whether the edit opened an advisor problem.
        left_uncovered: Whether the edit left a client without staff, even
            if no advisor problem was opened for it.
        has_warnings: Whether any constraint warning was raised.
        warning_type: Most severe warning tier raised, if any.
    """

    id: str
    timestamp: datetime
    edit_type: EditType
    description: str
    entities: Entities = field(default_factory=Entities)
    time_window: Optional[TimeWindow] = None
    triggered_advisor: bool = False
    left_uncovered: bool = False
    has_warnings: bool = False
    warning_type: Optional[WarningType] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "edit_type": self.edit_type.value,
            "description": self.description,
            "entities": self.entities.to_dict(),
            "triggered_advisor": self.triggered_advisor,
            "left_uncovered": self.left_uncovered,
            "has_warnings": self.has_warnings,
        }
        if self.time_window is not None:
            data["time_window"] = self.time_window.to_dict()
        if self.warning_type is not None:
            data["warning_type"] = self.warning_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeLogEntry":
        time_window = data.get("time_window")
        warning_type = data.get("warning_type")
        return cls(
            id=data["id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            edit_type=EditType(data["edit_type"]),
            description=data["description"],
            entities=Entities.from_dict(data.get("entities", {})),
            time_window=TimeWindow.from_dict(time_window) if time_window else None,
            triggered_advisor=data.get("triggered_advisor", False),
            left_uncovered=data.get("left_uncovered", False),
            has_warnings=data.get("has_warnings", False),
            warning_type=WarningType(warning_type) if warning_type else None,
        )


def edit_entities(
    edit: ScheduleEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> Entities:
    """Resolve the staff and client an edit targets."""
    staff_id = None
    client_id = None
    if isinstance(edit, ChangeStaffEdit):
        staff_id, client_id = edit.staff_id, edit.client_id
    elif isinstance(edit, TrainEdit):
        staff_id, client_id = edit.trainee_id, edit.client_id
    elif isinstance(edit, (SplitEdit, TagEdit)):
        staff_id = edit.staff_id
    elif isinstance(edit, CancelEdit):
        client_id = edit.client_id

    staff = next((s for s in staff_list if s.id == staff_id), None)
    client = next((c for c in client_list if c.id == client_id), None)
    return Entities(
        staff_id=staff_id,
        staff_name=staff.name if staff else None,
        client_id=client_id,
        client_name=client.name if client else None,
    )


def edit_time_window(edit: ScheduleEdit) -> Optional[TimeWindow]:
    """Window an edit covers, for the change log."""
    if isinstance(edit, (ChangeStaffEdit, TrainEdit, TagEdit)):
        return edit.window
    if isinstance(edit, SplitEdit):
        return edit.span
    return None


def most_severe(warnings: list[EditorWarning]) -> Optional[WarningType]:
    if any(w.is_hard for w in warnings):
        return WarningType.HARD
    if warnings:
        return WarningType.SOFT
    return None


class ChangeLog:
    """Append-only audit trail of applied edits."""

    def __init__(self, entries: Optional[list[ChangeLogEntry]] = None):
        self._entries: list[ChangeLogEntry] = list(entries or [])

    def next_id(self) -> str:
        return f"log-{len(self._entries) + 1:04d}"

    def append(self, entry: ChangeLogEntry) -> None:
        self._entries.append(entry)

    def record(
        self,
        edit: ScheduleEdit,
        description: str,
        entities: Entities,
        triggered_advisor: bool,
        warnings: list[EditorWarning],
        timestamp: Optional[datetime] = None,
        left_uncovered: bool = False,
    ) -> ChangeLogEntry:
        """Build and append the entry for an applied edit.

        Returns:
            The appended entry.
        """
        entry = ChangeLogEntry(
            id=self.next_id(),
            timestamp=timestamp or datetime.now(),
            edit_type=edit.edit_type,
            description=description,
            entities=entities,
            time_window=edit_time_window(edit),
            triggered_advisor=triggered_advisor,
            left_uncovered=left_uncovered,
            has_warnings=bool(warnings),
            warning_type=most_severe(warnings),
        )
        self.append(entry)
        return entry

    @property
    def entries(self) -> tuple[ChangeLogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChangeLogEntry]:
        return iter(self._entries)

    def to_dict(self) -> list[dict]:
        return [entry.to_dict() for entry in self._entries]

    @classmethod
    def from_dict(cls, data: list[dict]) -> "ChangeLog":
        return cls([ChangeLogEntry.from_dict(item) for item in data])


class UndoStack:
    """Bounded LIFO of schedule snapshots.

    When full, pushing drops the oldest snapshot. Snapshots are cloned on the
    way in and out so callers never share state with the stack.
    """

    def __init__(self, max_items: int = MAX_UNDO_ITEMS):
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self._snapshots: deque[list[StaffSchedule]] = deque(maxlen=max_items)

    @property
    def max_items(self) -> int:
        return self._snapshots.maxlen

    def push(self, schedule: list[StaffSchedule]) -> None:
        self._snapshots.append(clone_schedule(schedule))

    def pop(self) -> Optional[list[StaffSchedule]]:
        """Remove and return the most recent snapshot, or None if empty."""
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def peek(self) -> Optional[list[StaffSchedule]]:
        if not self._snapshots:
            return None
        return clone_schedule(self._snapshots[-1])

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)

    def __bool__(self) -> bool:
        return bool(self._snapshots)

    def to_dict(self) -> list[list[dict]]:
        return [schedule_to_dicts(snapshot) for snapshot in self._snapshots]

    @classmethod
    def from_dict(cls, data: list[list[dict]], max_items: int = MAX_UNDO_ITEMS) -> "UndoStack":
        stack = cls(max_items)
        for snapshot in data:
            stack._snapshots.append(schedule_from_dicts(snapshot))
        return stack
