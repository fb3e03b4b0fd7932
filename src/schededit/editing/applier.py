"""Pure transforms applying each edit variant to a day schedule.

Every handler clones its input before touching it and returns an
``EditResult`` carrying the new schedule plus the cascade it caused. The
input schedule and every object reachable from it are left untouched.

Placing a new slot first carves its window out of the receiving staff
member's day, so two slots on one staff member never overlap after an edit.
Client assignments removed by that carve are reported as coverage gaps.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from schededit.domain.edits import (
    CancelEdit,
    ChangeStaffEdit,
    ScheduleEdit,
    SplitEdit,
    TagEdit,
    TrainEdit,
)
from schededit.domain.models import (
    INDICATOR_AVAILABLE,
    INDICATOR_MANUAL,
    INDICATOR_SPLIT,
    INDICATOR_TAG,
    INDICATOR_TRAINING,
    OPEN_VALUE,
    Client,
    CoverageGap,
    GapKind,
    ScheduleSlot,
    SourceTag,
    Staff,
    StaffSchedule,
    TimeWindow,
    clone_schedule,
    find_staff_schedule,
)
from schededit.domain.timeutils import block_for_minute

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of applying one edit.

    Attributes:
        schedule: The new day schedule (the original when not applied).
        applied: False when an id could not be resolved and nothing changed.
        needs_advisor: True if the edit left a coverage gap behind.
        advisor_problem: Human-readable summary of the cascade.
        affected_staff: Staff ids whose day lost an assignment.
        gaps: Structured cascade metadata.
    """

    schedule: list[StaffSchedule]
    applied: bool = True
    needs_advisor: bool = False
    advisor_problem: Optional[str] = None
    affected_staff: list[str] = field(default_factory=list)
    gaps: list[CoverageGap] = field(default_factory=list)

    @property
    def uncovered_gaps(self) -> list[CoverageGap]:
        """Gaps where a client lost its staff member."""
        return [g for g in self.gaps if g.kind == GapKind.CLIENT_UNCOVERED]

    @classmethod
    def unchanged(cls, schedule: list[StaffSchedule]) -> "EditResult":
        return cls(schedule=schedule, applied=False)


def _ensure_staff_schedule(schedule: list[StaffSchedule], staff_id: str) -> StaffSchedule:
    """Find a staff member's day, creating an empty one if absent."""
    staff_schedule = find_staff_schedule(schedule, staff_id)
    if staff_schedule is None:
        staff_schedule = StaffSchedule(staff_id=staff_id)
        schedule.append(staff_schedule)
    return staff_schedule


def _cut_slot(slot: ScheduleSlot, window: TimeWindow) -> tuple[list[ScheduleSlot], ScheduleSlot]:
    """Cut a window out of a slot.

    Returns:
        The surviving pieces (zero, one or two) and the removed middle part.
    """
    pieces = []
    if slot.start < window.start:
        pieces.append(slot.with_bounds(slot.start, window.start))
    if slot.end > window.end:
        right_id = f"{slot.id}~{window.end}" if pieces else slot.id
        pieces.append(
            replace(
                slot.with_bounds(window.end, slot.end, slot_id=right_id),
                block=block_for_minute(window.end),
            )
        )
    removed = slot.with_bounds(max(slot.start, window.start), min(slot.end, window.end))
    return pieces, removed


def _carve(
    staff_schedule: StaffSchedule,
    window: TimeWindow,
    keep: Optional[Callable[[ScheduleSlot], bool]] = None,
) -> list[ScheduleSlot]:
    """Remove a window from a staff member's slots in place.

    Args:
        staff_schedule: A cloned staff day; its slot list is replaced.
        window: Window to clear.
        keep: Slots for which this returns True are left alone.

    Returns:
        The removed parts of slots that served a client.
    """
    new_slots = []
    removed_client_parts = []
    for slot in staff_schedule.slots:
        if not slot.overlaps(window) or (keep is not None and keep(slot)):
            new_slots.append(slot)
            continue
        pieces, removed = _cut_slot(slot, window)
        new_slots.extend(pieces)
        if removed.client_id is not None:
            removed_client_parts.append(removed)
    staff_schedule.slots = new_slots
    return removed_client_parts


def _displace_holders(
    schedule: list[StaffSchedule],
    client_id: str,
    window: TimeWindow,
    new_holder_id: str,
) -> list[CoverageGap]:
    """Trim a client's slots held by anyone other than the new holder.

    Only the overlapping part of the client's slots is removed; other slots on
    the displaced staff member's day are untouched. Every holder found is
    displaced, so an ambiguous double assignment cannot survive the edit.
    """
    gaps = []
    for staff_schedule in schedule:
        if staff_schedule.staff_id == new_holder_id:
            continue
        removed = _carve(
            staff_schedule,
            window,
            keep=lambda slot: slot.client_id != client_id,
        )
        for part in removed:
            gaps.append(
                CoverageGap(
                    kind=GapKind.STAFF_IDLE,
                    window=part.window,
                    client_id=client_id,
                    staff_id=staff_schedule.staff_id,
                )
            )
    return gaps


def _place_slot(
    schedule: list[StaffSchedule],
    staff_id: str,
    slot: ScheduleSlot,
) -> list[CoverageGap]:
    """Carve a slot's window from a staff day and append the slot.

    Returns:
        ``CLIENT_UNCOVERED`` gaps for other clients the staff member lost.
    """
    staff_schedule = _ensure_staff_schedule(schedule, staff_id)
    removed = _carve(staff_schedule, slot.window)
    staff_schedule.slots.append(slot)
    return [
        CoverageGap(
            kind=GapKind.CLIENT_UNCOVERED,
            window=part.window,
            client_id=part.client_id,
            staff_id=staff_id,
        )
        for part in removed
        if part.client_id != slot.client_id
    ]


def describe_gaps(
    gaps: list[CoverageGap],
    staff_map: dict[str, Staff],
    client_map: dict[str, Client],
    window: Optional[TimeWindow] = None,
) -> Optional[str]:
    """Summarise cascade gaps as one problem statement.

    Args:
        gaps: Gaps left by an edit.
        staff_map: Roster lookup for staff names.
        client_map: Roster lookup for client names.
        window: If given, idle staff are reported against this window rather
            than against each trimmed piece.
    """
    messages = []
    named_staff: set[str] = set()
    for gap in gaps:
        if gap.kind == GapKind.STAFF_IDLE:
            if gap.staff_id in named_staff:
                continue
            named_staff.add(gap.staff_id)
            staff = staff_map.get(gap.staff_id)
            name = staff.name if staff else "Previous staff"
            messages.append(f"{name} no longer has an assignment during {window or gap.window}")
        else:
            client = client_map.get(gap.client_id)
            name = client.name if client else "A client"
            messages.append(f"{name} is no longer covered during {gap.window}")
    return "; ".join(messages) if messages else None


def _finish(
    schedule: list[StaffSchedule],
    gaps: list[CoverageGap],
    staff_map: dict[str, Staff],
    client_map: dict[str, Client],
    window: Optional[TimeWindow] = None,
) -> EditResult:
    affected = []
    for gap in gaps:
        if gap.kind == GapKind.STAFF_IDLE and gap.staff_id not in affected:
            affected.append(gap.staff_id)
    return EditResult(
        schedule=schedule,
        needs_advisor=bool(gaps),
        advisor_problem=describe_gaps(gaps, staff_map, client_map, window),
        affected_staff=affected,
        gaps=gaps,
    )


def apply_change_staff_edit(
    schedule: list[StaffSchedule],
    edit: ChangeStaffEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> EditResult:
    """Reassign a client to a staff member for a window.

    Every other staff member holding the client during the window loses the
    overlapping part of that slot and is reported as idle.
    """
    staff_map = {s.id: s for s in staff_list}
    client_map = {c.id: c for c in client_list}
    staff = staff_map.get(edit.staff_id)
    client = client_map.get(edit.client_id)
    if staff is None or client is None:
        logger.debug("Change staff skipped: unresolved staff or client id")
        return EditResult.unchanged(schedule)

    new_schedule = clone_schedule(schedule)
    window = edit.window

    gaps = _displace_holders(new_schedule, client.id, window, staff.id)
    gaps += _place_slot(
        new_schedule,
        staff.id,
        ScheduleSlot(
            id=f"manual-{staff.id}-{client.id}-{window.start}",
            block=block_for_minute(window.start),
            value=client.initials,
            source=SourceTag.REPAIR,
            reason="Manual editor change",
            client_id=client.id,
            start_minute=window.start,
            end_minute=window.end,
            indicator=INDICATOR_MANUAL,
        ),
    )
    return _finish(new_schedule, gaps, staff_map, client_map, window)


def apply_cancel_edit(
    schedule: list[StaffSchedule],
    edit: CancelEdit,
    client_list: list[Client],
) -> EditResult:
    """Convert a client's slots inside the cancellation interval to open slots.

    Slots are replaced in place and keep their original bounds, even when
    they extend past the cancellation interval.
    """
    client = next((c for c in client_list if c.id == edit.client_id), None)
    if client is None:
        logger.debug("Cancel skipped: unresolved client id %s", edit.client_id)
        return EditResult.unchanged(schedule)

    new_schedule = clone_schedule(schedule)
    cancel_window = edit.cancel_window
    affected_staff: list[str] = []
    gaps = []

    for staff_schedule in new_schedule:
        for i, slot in enumerate(staff_schedule.slots):
            if slot.client_id != client.id or not slot.overlaps(cancel_window):
                continue
            staff_schedule.slots[i] = replace(
                slot,
                source=SourceTag.CANCEL,
                value=OPEN_VALUE,
                client_id=None,
                reason=f"Client {client.name} cancelled",
            )
            gaps.append(
                CoverageGap(
                    kind=GapKind.STAFF_IDLE,
                    window=slot.window,
                    client_id=client.id,
                    staff_id=staff_schedule.staff_id,
                )
            )
            if staff_schedule.staff_id not in affected_staff:
                affected_staff.append(staff_schedule.staff_id)

    problem = None
    if affected_staff:
        problem = (
            f"{len(affected_staff)} staff member(s) need reassignment "
            f"after {client.name} cancellation"
        )
    return EditResult(
        schedule=new_schedule,
        needs_advisor=bool(affected_staff),
        advisor_problem=problem,
        affected_staff=affected_staff,
        gaps=gaps,
    )


def apply_tag_edit(
    schedule: list[StaffSchedule],
    edit: TagEdit,
    staff_list: list[Staff],
) -> EditResult:
    """Attach a free-text tag to a staff member's day.

    A tag never triggers the advisor, even if it displaces an assignment.
    An availability tag leaves the staff member open for coverage.
    """
    staff = next((s for s in staff_list if s.id == edit.staff_id), None)
    if staff is None:
        logger.debug("Tag skipped: unresolved staff id %s", edit.staff_id)
        return EditResult.unchanged(schedule)

    new_schedule = clone_schedule(schedule)
    window = edit.window
    gaps = _place_slot(
        new_schedule,
        staff.id,
        ScheduleSlot(
            id=f"tag-{staff.id}-{window.start}",
            block=block_for_minute(window.start),
            value=edit.tag_text,
            source=SourceTag.REPAIR,
            reason="Marked available" if edit.marks_available else "Custom tag",
            start_minute=window.start,
            end_minute=window.end,
            indicator=INDICATOR_AVAILABLE if edit.marks_available else INDICATOR_TAG,
        ),
    )
    return EditResult(schedule=new_schedule, gaps=gaps)


def apply_split_edit(
    schedule: list[StaffSchedule],
    edit: SplitEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> EditResult:
    """Split a staff member's day into consecutive client segments.

    Each segment behaves like a change of staff for its client and window.
    """
    staff_map = {s.id: s for s in staff_list}
    client_map = {c.id: c for c in client_list}
    staff = staff_map.get(edit.staff_id)
    if staff is None or any(s.client_id not in client_map for s in edit.segments):
        logger.debug("Split skipped: unresolved staff or client id")
        return EditResult.unchanged(schedule)

    new_schedule = clone_schedule(schedule)
    total = len(edit.segments)
    gaps = []

    for number, segment in enumerate(edit.segments, 1):
        client = client_map[segment.client_id]
        window = segment.window
        gaps += _displace_holders(new_schedule, client.id, window, staff.id)
        gaps += _place_slot(
            new_schedule,
            staff.id,
            ScheduleSlot(
                id=f"split-{staff.id}-{client.id}-{window.start}",
                block=block_for_minute(window.start),
                value=client.initials,
                source=SourceTag.REPAIR,
                reason=f"Split shift segment {number} of {total}",
                client_id=client.id,
                start_minute=window.start,
                end_minute=window.end,
                indicator=INDICATOR_SPLIT,
            ),
        )

    return _finish(new_schedule, gaps, staff_map, client_map)


def apply_train_edit(
    schedule: list[StaffSchedule],
    edit: TrainEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> EditResult:
    """Insert a training session on the trainee's day.

    Training is not a reassignment: the client's current holder keeps the
    client. The advisor is only needed if the trainee gave up a client.
    """
    staff_map = {s.id: s for s in staff_list}
    client_map = {c.id: c for c in client_list}
    trainee = staff_map.get(edit.trainee_id)
    trainer = staff_map.get(edit.trainer_id)
    client = client_map.get(edit.client_id)
    if trainee is None or trainer is None or client is None:
        logger.debug("Training skipped: unresolved trainee, trainer or client id")
        return EditResult.unchanged(schedule)

    new_schedule = clone_schedule(schedule)
    window = edit.window
    phase = edit.phase.value.replace("_", " ")
    gaps = _place_slot(
        new_schedule,
        trainee.id,
        ScheduleSlot(
            id=f"train-{trainee.id}-{client.id}-{window.start}",
            block=block_for_minute(window.start),
            value=f"{client.initials} Trn",
            source=SourceTag.REPAIR,
            reason=f"Training with {client.name} ({phase}), trainer {trainer.name}",
            start_minute=window.start,
            end_minute=window.end,
            indicator=INDICATOR_TRAINING,
        ),
    )
    return _finish(new_schedule, gaps, staff_map, client_map)


_HANDLERS = {
    ChangeStaffEdit: apply_change_staff_edit,
    SplitEdit: apply_split_edit,
    TrainEdit: apply_train_edit,
    CancelEdit: lambda schedule, edit, staff_list, client_list: apply_cancel_edit(
        schedule, edit, client_list
    ),
    TagEdit: lambda schedule, edit, staff_list, client_list: apply_tag_edit(
        schedule, edit, staff_list
    ),
}


def apply_edit(
    schedule: list[StaffSchedule],
    edit: ScheduleEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> EditResult:
    """Apply any edit variant by dispatching on its type.

    Raises:
        TypeError: If ``edit`` is not a known edit variant.
    """
    handler = _HANDLERS.get(type(edit))
    if handler is None:
        raise TypeError(f"Unsupported edit: {edit!r}")
    return handler(schedule, edit, staff_list, client_list)
