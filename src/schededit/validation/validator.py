"""Integrity validation for edited day schedules.

The applier preserves the no-overlap invariant, but schedules also arrive
from upstream where nothing guarantees it. This module reports structural
problems in any day schedule so they can be surfaced instead of being
resolved silently by list order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from schededit.domain.models import (
    Client,
    ScheduleSlot,
    Staff,
    StaffSchedule,
    TimeWindow,
)
from schededit.domain.timeutils import DAY_END_MINUTE, DAY_START_MINUTE


class ValidationErrorType(Enum):
    """Types of validation errors."""

    SLOT_OUTSIDE_DAY = "slot_outside_day"
    INVALID_SLOT_WINDOW = "invalid_slot_window"
    SLOTS_OVERLAP = "slots_overlap"
    DUPLICATE_HOLDER = "duplicate_holder"
    DUPLICATE_STAFF_SCHEDULE = "duplicate_staff_schedule"
    UNKNOWN_STAFF = "unknown_staff"
    UNKNOWN_CLIENT = "unknown_client"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    staff_id: Optional[str] = None
    slot_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.staff_id:
            parts.append(f"Staff {self.staff_id}:")
        parts.append(self.message)
        if self.slot_id is not None:
            parts.append(f"(slot {self.slot_id})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_of_type(self, error_type: ValidationErrorType) -> list[ValidationError]:
        return [e for e in self.errors if e.error_type == error_type]


@dataclass(frozen=True)
class DuplicateHolding:
    """Two staff members serving the same client at overlapping times.

    Attributes:
        client_id: The doubly-held client.
        staff_ids: The two holders, in schedule order.
        window: The overlapping part of their slots.
    """

    client_id: str
    staff_ids: tuple[str, str]
    window: TimeWindow


def find_duplicate_holders(
    schedule: list[StaffSchedule],
    client_id: Optional[str] = None,
    window: Optional[TimeWindow] = None,
) -> list[DuplicateHolding]:
    """Find clients held by more than one staff member at the same time.

    Args:
        schedule: Day schedule to scan.
        client_id: If given, only this client is considered.
        window: If given, only overlaps intersecting this window are reported.

    Returns:
        One entry per pair of overlapping holders.
    """
    holdings: dict[str, list[tuple[str, ScheduleSlot]]] = {}
    for staff_schedule in schedule:
        for slot in staff_schedule.slots:
            if slot.client_id is None:
                continue
            if client_id is not None and slot.client_id != client_id:
                continue
            holdings.setdefault(slot.client_id, []).append((staff_schedule.staff_id, slot))

    duplicates = []
    for held_client, held in holdings.items():
        for i, (staff_a, slot_a) in enumerate(held):
            for staff_b, slot_b in held[i + 1 :]:
                if staff_a == staff_b or not slot_a.overlaps(slot_b.window):
                    continue
                overlap = TimeWindow(
                    max(slot_a.start, slot_b.start),
                    min(slot_a.end, slot_b.end),
                )
                if window is not None and not overlap.overlaps(window):
                    continue
                duplicates.append(
                    DuplicateHolding(
                        client_id=held_client,
                        staff_ids=(staff_a, staff_b),
                        window=overlap,
                    )
                )
    return duplicates


class ScheduleValidator:
    """Validates day schedules against the structural invariants.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule, staff_list, client_list)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate(
        self,
        schedule: list[StaffSchedule],
        staff_list: Optional[list[Staff]] = None,
        client_list: Optional[list[Client]] = None,
    ) -> ValidationResult:
        """Validate a complete day schedule.

        Args:
            schedule: The schedule to validate.
            staff_list: Roster used to detect unknown staff ids.
            client_list: Roster used to detect unknown client ids.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)
        staff_ids = {s.id for s in staff_list} if staff_list is not None else None
        client_ids = {c.id for c in client_list} if client_list is not None else None

        seen_staff: set[str] = set()
        for staff_schedule in schedule:
            staff_id = staff_schedule.staff_id
            if staff_id in seen_staff:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_STAFF_SCHEDULE,
                        message="Staff member has more than one day schedule",
                        staff_id=staff_id,
                    )
                )
            seen_staff.add(staff_id)

            if staff_ids is not None and staff_id not in staff_ids:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_STAFF,
                        message=f"Unknown staff ID: {staff_id}",
                        staff_id=staff_id,
                    )
                )

            self._validate_staff_schedule(staff_schedule, client_ids, result)

        for duplicate in find_duplicate_holders(schedule):
            first, second = duplicate.staff_ids
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DUPLICATE_HOLDER,
                    message=(
                        f"Client {duplicate.client_id} is held by both "
                        f"{first} and {second} during {duplicate.window}"
                    ),
                    details={
                        "client_id": duplicate.client_id,
                        "staff_ids": list(duplicate.staff_ids),
                        "window": duplicate.window.to_dict(),
                    },
                )
            )

        return result

    def _validate_staff_schedule(
        self,
        staff_schedule: StaffSchedule,
        client_ids: Optional[set[str]],
        result: ValidationResult,
    ) -> None:
        """Validate the slots on one staff member's day."""
        staff_id = staff_schedule.staff_id

        for slot in staff_schedule.slots:
            if slot.start < DAY_START_MINUTE or slot.end > DAY_END_MINUTE:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SLOT_OUTSIDE_DAY,
                        message=f"Slot {slot.window} falls outside the day",
                        staff_id=staff_id,
                        slot_id=slot.id,
                    )
                )
            if slot.start >= slot.end:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_SLOT_WINDOW,
                        message=(
                            f"Slot starts at {slot.window.start_label} "
                            f"but ends at {slot.window.end_label}"
                        ),
                        staff_id=staff_id,
                        slot_id=slot.id,
                    )
                )
            if (
                client_ids is not None
                and slot.client_id is not None
                and slot.client_id not in client_ids
            ):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_CLIENT,
                        message=f"Unknown client ID: {slot.client_id}",
                        staff_id=staff_id,
                        slot_id=slot.id,
                    )
                )

        # Check slots don't overlap each other
        slots = staff_schedule.slots
        for i, slot1 in enumerate(slots):
            for slot2 in slots[i + 1 :]:
                if slot1.overlaps(slot2.window):
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.SLOTS_OVERLAP,
                            message=f"Slot {slot1.id} overlaps with slot {slot2.id}",
                            staff_id=staff_id,
                            slot_id=slot1.id,
                            details={"other_slot_id": slot2.id},
                        )
                    )
