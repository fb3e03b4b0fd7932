"""Domain models for the daily schedule editor.

This module contains the core data structures shared by every component:
the roster (staff and clients), the per-staff day schedule made of slots,
time windows, and the cascade metadata produced when an edit displaces
existing assignments.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from schededit.domain.timeutils import (
    DAY_END_MINUTE,
    DAY_START_MINUTE,
    format_minutes,
    parse_time,
    ranges_overlap,
)

# Indicators attached to slots created by the editor
INDICATOR_MANUAL = "Manual"
INDICATOR_TAG = "Tag"
INDICATOR_SPLIT = "Split"
INDICATOR_TRAINING = "Training"
INDICATOR_AVAILABLE = "Available"

OPEN_VALUE = "OPEN"


class StaffRole(Enum):
    """Roles a staff member can hold."""

    BT = "BT"
    RBT = "RBT"
    FLOAT = "Float"  # Unqualified floating role
    LEAD_RBT = "Lead RBT"
    BCBA = "BCBA"
    LEAD_BCBA = "Lead BCBA"
    ADMIN = "Admin"
    CLINICAL_MANAGER = "Clinical Manager"


class SourceTag(Enum):
    """Origin of a schedule slot."""

    TEMPLATE = "TEMPLATE"  # Produced by the day generation
    REPAIR = "REPAIR"  # Manual edit
    CANCEL = "CANCEL"  # Client cancellation marker
    SUB = "SUB"  # Approved substitute
    EXCEPTION = "EXCEPTION"
    UNFILLED = "UNFILLED"
    OFF_SCHEDULE = "OFF_SCHEDULE"


class StaffStatus(Enum):
    """Day-level status of a staff member's schedule."""

    ACTIVE = "ACTIVE"
    OUT = "OUT"


@dataclass(frozen=True)
class TimeWindow:
    """A half-open ``[start, end)`` interval in minutes from midnight.

    Attributes:
        start: First minute of the window (inclusive).
        end: Last minute of the window (exclusive).
    """

    start: int
    end: int

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeWindow":
        """Create a window from two ``"H:MM"`` strings."""
        return cls(start=parse_time(start), end=parse_time(end))

    @classmethod
    def full_day(cls) -> "TimeWindow":
        return cls(start=DAY_START_MINUTE, end=DAY_END_MINUTE)

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def start_label(self) -> str:
        return format_minutes(self.start)

    @property
    def end_label(self) -> str:
        return format_minutes(self.end)

    def overlaps(self, other: "TimeWindow") -> bool:
        """Check if this window overlaps with another."""
        return ranges_overlap(self.start, self.end, other.start, other.end)

    def contains(self, other: "TimeWindow") -> bool:
        """Check if another window lies entirely within this one."""
        return self.start <= other.start and other.end <= self.end

    def to_dict(self) -> dict:
        return {"start": self.start_label, "end": self.end_label}

    @classmethod
    def from_dict(cls, data: dict) -> "TimeWindow":
        start, end = data["start"], data["end"]
        if isinstance(start, str):
            return cls.parse(start, end)
        return cls(start=int(start), end=int(end))

    def __str__(self) -> str:
        return f"{self.start_label}-{self.end_label}"


@dataclass
class Staff:
    """A staff member who can be scheduled.

    Attributes:
        id: Unique identifier.
        name: Display name.
        role: Staff role.
        active: Inactive staff are never suggested for coverage.
        is_trainer: Whether this staff member can train others.
    """

    id: str
    name: str
    role: StaffRole = StaffRole.BT
    active: bool = True
    is_trainer: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "active": self.active,
            "is_trainer": self.is_trainer,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Staff":
        return cls(
            id=data["id"],
            name=data["name"],
            role=StaffRole(data.get("role", StaffRole.BT.value)),
            active=data.get("active", True),
            is_trainer=data.get("is_trainer", False),
        )


@dataclass
class Client:
    """A client receiving services.

    Attributes:
        id: Unique identifier.
        name: Display name.
        active: Whether the client is currently active.
        is_crisis_client: Crisis clients may not be staffed by float staff.
        excluded_staff_ids: Staff who must never work with this client.
        trained_staff_ids: Staff trained on this client.
        focus_staff_ids: Preferred staff for this client.
        no_longer_trained_ids: Staff whose training has lapsed.
        allowed_trainer_ids: Staff approved to train others on this client.
    """

    id: str
    name: str
    active: bool = True
    is_crisis_client: bool = False
    excluded_staff_ids: list[str] = field(default_factory=list)
    trained_staff_ids: list[str] = field(default_factory=list)
    focus_staff_ids: list[str] = field(default_factory=list)
    no_longer_trained_ids: list[str] = field(default_factory=list)
    allowed_trainer_ids: list[str] = field(default_factory=list)

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part)

    def is_excluded(self, staff_id: str) -> bool:
        return staff_id in self.excluded_staff_ids

    def is_trained(self, staff_id: str) -> bool:
        return staff_id in self.trained_staff_ids

    def is_focus(self, staff_id: str) -> bool:
        return staff_id in self.focus_staff_ids

    def is_no_longer_trained(self, staff_id: str) -> bool:
        return staff_id in self.no_longer_trained_ids

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "active": self.active,
            "is_crisis_client": self.is_crisis_client,
            "excluded_staff_ids": list(self.excluded_staff_ids),
            "trained_staff_ids": list(self.trained_staff_ids),
            "focus_staff_ids": list(self.focus_staff_ids),
            "no_longer_trained_ids": list(self.no_longer_trained_ids),
            "allowed_trainer_ids": list(self.allowed_trainer_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Client":
        return cls(
            id=data["id"],
            name=data["name"],
            active=data.get("active", True),
            is_crisis_client=data.get("is_crisis_client", False),
            excluded_staff_ids=list(data.get("excluded_staff_ids") or []),
            trained_staff_ids=list(data.get("trained_staff_ids") or []),
            focus_staff_ids=list(data.get("focus_staff_ids") or []),
            no_longer_trained_ids=list(data.get("no_longer_trained_ids") or []),
            allowed_trainer_ids=list(data.get("allowed_trainer_ids") or []),
        )


@dataclass(frozen=True)
class ScheduleSlot:
    """One contiguous, time-bounded assignment on a staff member's day.

    Slots are immutable values; edits replace them rather than mutate them.
    A slot without explicit bounds is treated as covering the whole day.

    Attributes:
        id: Unique slot identifier.
        block: Half-day block label (``"AM"``/``"PM"``) or a block range.
        value: Display text.
        source: Origin of the slot.
        reason: Human-readable explanation.
        client_id: Client served during the slot, if any.
        start_minute: First minute of the slot.
        end_minute: Last minute of the slot (exclusive).
        indicator: Optional short marker (``Manual``, ``Tag``, ...).
    """

    id: str
    block: str
    value: str
    source: SourceTag = SourceTag.TEMPLATE
    reason: str = ""
    client_id: Optional[str] = None
    start_minute: Optional[int] = None
    end_minute: Optional[int] = None
    indicator: Optional[str] = None

    @property
    def start(self) -> int:
        return self.start_minute if self.start_minute is not None else DAY_START_MINUTE

    @property
    def end(self) -> int:
        return self.end_minute if self.end_minute is not None else DAY_END_MINUTE

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start, self.end)

    @property
    def is_open(self) -> bool:
        """An open slot leaves the staff member on site with nothing to do."""
        if self.indicator == INDICATOR_AVAILABLE:
            return True
        return self.source == SourceTag.CANCEL or (
            self.client_id is None and self.value == OPEN_VALUE
        )

    @property
    def is_busy(self) -> bool:
        """Whether the slot occupies the staff member."""
        if self.client_id is not None:
            return True
        return self.indicator in (INDICATOR_TAG, INDICATOR_TRAINING)

    def overlaps(self, window: TimeWindow) -> bool:
        return ranges_overlap(self.start, self.end, window.start, window.end)

    def with_bounds(self, start: int, end: int, slot_id: Optional[str] = None) -> "ScheduleSlot":
        """Return a copy of this slot narrowed to ``[start, end)``."""
        return replace(
            self,
            id=slot_id or self.id,
            start_minute=start,
            end_minute=end,
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "block": self.block,
            "value": self.value,
            "source": self.source.value,
            "reason": self.reason,
        }
        if self.client_id is not None:
            data["client_id"] = self.client_id
        if self.start_minute is not None:
            data["start_minute"] = self.start_minute
        if self.end_minute is not None:
            data["end_minute"] = self.end_minute
        if self.indicator is not None:
            data["indicator"] = self.indicator
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleSlot":
        return cls(
            id=data["id"],
            block=data["block"],
            value=data["value"],
            source=SourceTag(data.get("source", SourceTag.TEMPLATE.value)),
            reason=data.get("reason", ""),
            client_id=data.get("client_id"),
            start_minute=data.get("start_minute"),
            end_minute=data.get("end_minute"),
            indicator=data.get("indicator"),
        )


@dataclass
class StaffSchedule:
    """All slots on one staff member's day.

    Slots are unordered; overlap is always decided by interval comparison.

    Attributes:
        staff_id: ID of the staff member.
        status: Day-level status.
        slots: The staff member's slots.
    """

    staff_id: str
    status: StaffStatus = StaffStatus.ACTIVE
    slots: list[ScheduleSlot] = field(default_factory=list)

    def clone(self) -> "StaffSchedule":
        """Structural copy; slots are immutable so only the list is copied."""
        return StaffSchedule(
            staff_id=self.staff_id,
            status=self.status,
            slots=list(self.slots),
        )

    def slots_overlapping(self, window: TimeWindow) -> list[ScheduleSlot]:
        return [slot for slot in self.slots if slot.overlaps(window)]

    def holds_client(self, client_id: str, window: TimeWindow) -> bool:
        """Check if this staff member serves a client during a window."""
        return any(
            slot.client_id == client_id and slot.overlaps(window)
            for slot in self.slots
        )

    def is_free(self, window: TimeWindow) -> bool:
        """Check that no busy slot overlaps the window."""
        if self.status == StaffStatus.OUT:
            return False
        return not any(slot.is_busy for slot in self.slots_overlapping(window))

    def has_open_slot(self, window: TimeWindow) -> bool:
        return any(slot.is_open for slot in self.slots_overlapping(window))

    def to_dict(self) -> dict:
        return {
            "staff_id": self.staff_id,
            "status": self.status.value,
            "slots": [slot.to_dict() for slot in self.slots],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StaffSchedule":
        return cls(
            staff_id=data["staff_id"],
            status=StaffStatus(data.get("status", StaffStatus.ACTIVE.value)),
            slots=[ScheduleSlot.from_dict(s) for s in data.get("slots", [])],
        )


class GapKind(Enum):
    """Kinds of coverage gap an edit can leave behind."""

    CLIENT_UNCOVERED = "client_uncovered"  # A client lost its staff
    STAFF_IDLE = "staff_idle"  # A staff member lost their assignment


@dataclass(frozen=True)
class CoverageGap:
    """A cascade side effect of an edit.

    Attributes:
        kind: What kind of gap this is.
        window: When the gap occurs.
        client_id: Client left without staff (``CLIENT_UNCOVERED``).
        staff_id: Staff member involved; for ``STAFF_IDLE`` the idle staff,
            for ``CLIENT_UNCOVERED`` the staff who previously held the client.
    """

    kind: GapKind
    window: TimeWindow
    client_id: Optional[str] = None
    staff_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"kind": self.kind.value, "window": self.window.to_dict()}
        if self.client_id is not None:
            data["client_id"] = self.client_id
        if self.staff_id is not None:
            data["staff_id"] = self.staff_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CoverageGap":
        return cls(
            kind=GapKind(data["kind"]),
            window=TimeWindow.from_dict(data["window"]),
            client_id=data.get("client_id"),
            staff_id=data.get("staff_id"),
        )


@dataclass(frozen=True)
class Entities:
    """Entity references carried by warnings and log entries."""

    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    time: Optional[str] = None

    def to_dict(self) -> dict:
        return {key: value for key, value in self.__dict__.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "Entities":
        return cls(**{key: data.get(key) for key in cls.__dataclass_fields__})


def clone_schedule(schedule: list[StaffSchedule]) -> list[StaffSchedule]:
    """Structurally copy a full day schedule."""
    return [staff_schedule.clone() for staff_schedule in schedule]


def find_staff_schedule(
    schedule: list[StaffSchedule],
    staff_id: str,
) -> Optional[StaffSchedule]:
    for staff_schedule in schedule:
        if staff_schedule.staff_id == staff_id:
            return staff_schedule
    return None


def schedule_to_dicts(schedule: list[StaffSchedule]) -> list[dict]:
    return [staff_schedule.to_dict() for staff_schedule in schedule]


def schedule_from_dicts(data: list[dict]) -> list[StaffSchedule]:
    return [StaffSchedule.from_dict(item) for item in data]
