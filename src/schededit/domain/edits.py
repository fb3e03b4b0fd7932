"""Edit variants a coordinator can submit against a day schedule.

``ScheduleEdit`` is a closed union of frozen dataclasses, one per edit kind.
Exactly one variant is carried by a submitted edit; components dispatch on
the concrete type.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from schededit.domain.models import TimeWindow
from schededit.domain.timeutils import (
    DAY_END_MINUTE,
    DAY_START_MINUTE,
    format_minutes,
    parse_time,
)


class EditType(Enum):
    """Kinds of schedule edit."""

    CHANGE_STAFF = "change_staff"
    SPLIT = "split"
    TRAIN = "train"
    CANCEL = "cancel"
    TAG = "tag"


class CancelType(Enum):
    """How much of the day a cancellation covers."""

    ALL_DAY = "all_day"
    CANCELLED_UNTIL = "cancelled_until"  # Cancelled from start of day until a time
    CANCELLED_AT = "cancelled_at"  # Cancelled from a time until end of day


class TrainingPhase(Enum):
    """Stage of a training plan a session belongs to."""

    SHADOW = "shadow"
    SUPPORT = "support"
    SIGN_OFF = "sign_off"
    HALF = "half"
    EXPEDITED = "expedited"


@dataclass(frozen=True)
class ChangeStaffEdit:
    """Reassign a client to a different staff member for a window."""

    staff_id: str
    client_id: str
    window: TimeWindow

    edit_type = EditType.CHANGE_STAFF


@dataclass(frozen=True)
class SplitSegment:
    """One client/window piece of a split shift."""

    client_id: str
    window: TimeWindow


@dataclass(frozen=True)
class SplitEdit:
    """Split a staff member's schedule into consecutive client segments."""

    staff_id: str
    segments: tuple[SplitSegment, ...] = field(default_factory=tuple)

    edit_type = EditType.SPLIT

    @property
    def span(self) -> Optional[TimeWindow]:
        """Window from the earliest segment start to the latest segment end."""
        if not self.segments:
            return None
        return TimeWindow(
            start=min(s.window.start for s in self.segments),
            end=max(s.window.end for s in self.segments),
        )


@dataclass(frozen=True)
class TrainEdit:
    """Insert a training session for a trainee with a client."""

    trainee_id: str
    client_id: str
    trainer_id: str
    phase: TrainingPhase
    window: TimeWindow

    edit_type = EditType.TRAIN


@dataclass(frozen=True)
class CancelEdit:
    """Cancel a client for all or part of the day.

    Attributes:
        client_id: Client being cancelled.
        cancel_type: Extent of the cancellation.
        time: Cut-over minute for ``CANCELLED_UNTIL`` / ``CANCELLED_AT``.
    """

    client_id: str
    cancel_type: CancelType = CancelType.ALL_DAY
    time: Optional[int] = None

    edit_type = EditType.CANCEL

    @property
    def cancel_window(self) -> TimeWindow:
        """Resolve the cancelled interval of the day."""
        if self.cancel_type == CancelType.CANCELLED_UNTIL and self.time is not None:
            return TimeWindow(DAY_START_MINUTE, self.time)
        if self.cancel_type == CancelType.CANCELLED_AT and self.time is not None:
            return TimeWindow(self.time, DAY_END_MINUTE)
        return TimeWindow.full_day()


@dataclass(frozen=True)
class TagEdit:
    """Attach a free-text tag to a staff member's day.

    Attributes:
        staff_id: Staff member being tagged.
        tag_text: Text shown on the slot.
        window: Tagged part of the day.
        marks_available: The tag marks the staff member as free for
            coverage instead of occupying them.
    """

    staff_id: str
    tag_text: str
    window: TimeWindow
    marks_available: bool = False

    edit_type = EditType.TAG


ScheduleEdit = Union[ChangeStaffEdit, SplitEdit, TrainEdit, CancelEdit, TagEdit]


def _validate_window(window: TimeWindow, label: str) -> list[str]:
    errors = []
    if window.start >= window.end:
        errors.append(f"{label} start {window.start_label} must be before end {window.end_label}")
    if window.start < DAY_START_MINUTE or window.end > DAY_END_MINUTE:
        errors.append(f"{label} {window} falls outside the day")
    return errors


def validate_edit(edit: ScheduleEdit) -> list[str]:
    """Structurally validate an edit before it reaches an applier.

    Args:
        edit: The edit to validate.

    Returns:
        List of error messages; empty when the edit is well formed.
    """
    errors: list[str] = []

    if isinstance(edit, (ChangeStaffEdit, TagEdit, TrainEdit)):
        errors.extend(_validate_window(edit.window, "Time window"))

    if isinstance(edit, TagEdit) and not edit.tag_text.strip():
        errors.append("Tag text must not be blank")

    if isinstance(edit, SplitEdit):
        if not edit.segments:
            errors.append("Split needs at least one segment")
        for i, segment in enumerate(edit.segments, 1):
            errors.extend(_validate_window(segment.window, f"Segment {i}"))
        for i, first in enumerate(edit.segments):
            for j, second in enumerate(edit.segments[i + 1 :], i + 1):
                if first.window.overlaps(second.window):
                    errors.append(f"Segment {i + 1} overlaps segment {j + 1}")

    if isinstance(edit, CancelEdit) and edit.cancel_type != CancelType.ALL_DAY:
        if edit.time is None:
            errors.append(f"Cancel type {edit.cancel_type.value} requires a time")
        elif not DAY_START_MINUTE < edit.time < DAY_END_MINUTE:
            errors.append("Cancel time falls outside the day")

    return errors


def edit_to_dict(edit: ScheduleEdit) -> dict:
    """Serialize an edit to a JSON-compatible dict tagged by ``type``."""
    data: dict = {"type": edit.edit_type.value}
    if isinstance(edit, ChangeStaffEdit):
        data.update(
            staff_id=edit.staff_id,
            client_id=edit.client_id,
            window=edit.window.to_dict(),
        )
    elif isinstance(edit, SplitEdit):
        data.update(
            staff_id=edit.staff_id,
            segments=[
                {"client_id": s.client_id, "window": s.window.to_dict()}
                for s in edit.segments
            ],
        )
    elif isinstance(edit, TrainEdit):
        data.update(
            trainee_id=edit.trainee_id,
            client_id=edit.client_id,
            trainer_id=edit.trainer_id,
            phase=edit.phase.value,
            window=edit.window.to_dict(),
        )
    elif isinstance(edit, CancelEdit):
        data.update(client_id=edit.client_id, cancel_type=edit.cancel_type.value)
        if edit.time is not None:
            data["time"] = format_minutes(edit.time)
    elif isinstance(edit, TagEdit):
        data.update(
            staff_id=edit.staff_id,
            tag_text=edit.tag_text,
            window=edit.window.to_dict(),
        )
        if edit.marks_available:
            data["marks_available"] = True
    return data


def edit_from_dict(data: dict) -> ScheduleEdit:
    """Rebuild an edit from :func:`edit_to_dict` output.

    Raises:
        ValueError: If the ``type`` tag is not a known edit type.
    """
    edit_type = EditType(data["type"])

    if edit_type == EditType.CHANGE_STAFF:
        return ChangeStaffEdit(
            staff_id=data["staff_id"],
            client_id=data["client_id"],
            window=TimeWindow.from_dict(data["window"]),
        )
    if edit_type == EditType.SPLIT:
        return SplitEdit(
            staff_id=data["staff_id"],
            segments=tuple(
                SplitSegment(
                    client_id=s["client_id"],
                    window=TimeWindow.from_dict(s["window"]),
                )
                for s in data.get("segments", [])
            ),
        )
    if edit_type == EditType.TRAIN:
        return TrainEdit(
            trainee_id=data["trainee_id"],
            client_id=data["client_id"],
            trainer_id=data["trainer_id"],
            phase=TrainingPhase(data["phase"]),
            window=TimeWindow.from_dict(data["window"]),
        )
    if edit_type == EditType.CANCEL:
        time_value = data.get("time")
        if isinstance(time_value, str):
            time_value = parse_time(time_value)
        return CancelEdit(
            client_id=data["client_id"],
            cancel_type=CancelType(data.get("cancel_type", CancelType.ALL_DAY.value)),
            time=time_value,
        )
    return TagEdit(
        staff_id=data["staff_id"],
        tag_text=data["tag_text"],
        window=TimeWindow.from_dict(data["window"]),
        marks_available=data.get("marks_available", False),
    )
