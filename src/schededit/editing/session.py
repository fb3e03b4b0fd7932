"""Editor session: the state machine coordinating one day's edits.

A session is seeded from the official schedule. Edits are checked against
the constraint rules, applied to the working schedule (the simulation in
what-if mode, the draft in draft mode), recorded in the change log and
snapshotted for undo. Gaps left behind activate the advisor.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from schededit.advisor.advisor import Advisor, AdvisorState, AdvisorSuggestion
from schededit.domain.edits import (
    ScheduleEdit,
    edit_from_dict,
    edit_to_dict,
    validate_edit,
)
from schededit.domain.models import (
    Client,
    CoverageGap,
    Entities,
    Staff,
    StaffSchedule,
    clone_schedule,
    schedule_from_dicts,
    schedule_to_dicts,
)
from schededit.domain.policies import DefaultSuggestionPolicy, SuggestionPolicy
from schededit.editing.applier import EditResult, apply_edit
from schededit.editing.description import generate_edit_description
from schededit.editing.history import (
    MAX_UNDO_ITEMS,
    ChangeLog,
    ChangeLogEntry,
    UndoStack,
    edit_entities,
)
from schededit.validation.constraints import (
    ConstraintChecker,
    EditorWarning,
    WarningType,
    assignment_pairs,
)
from schededit.validation.validator import find_duplicate_holders

logger = logging.getLogger(__name__)


class EditorMode(Enum):
    """Operating modes of an editor session."""

    WHAT_IF = "what_if"  # Disposable simulation
    DRAFT = "draft"  # Schedule intended for commit


@dataclass
class EditorConfig:
    """Configuration for an editor session.

    Attributes:
        max_undo_items: Undo snapshots kept; older ones are dropped.
        suggestion_policy: Ranking policy used by the advisor.
        warn_duplicate_holders: Raise a soft warning when an edit touches a
            client already held by more than one staff member.
    """

    max_undo_items: int = MAX_UNDO_ITEMS
    suggestion_policy: SuggestionPolicy = field(default_factory=DefaultSuggestionPolicy)
    warn_duplicate_holders: bool = True


@dataclass
class ApplyOutcome:
    """Result of submitting an edit to the editor.

    Attributes:
        applied: Whether the working schedule changed.
        result: Applier result, when the applier ran.
        warnings: Constraint warnings raised for the edit.
        errors: Structural validation errors; the edit was rejected.
        blocked: True if a hard warning stopped the edit.
        log_entry: Change log entry written for the edit.
    """

    applied: bool
    result: Optional[EditResult] = None
    warnings: list[EditorWarning] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    blocked: bool = False
    log_entry: Optional[ChangeLogEntry] = None

    @property
    def uncovered_gaps(self) -> list[CoverageGap]:
        return self.result.uncovered_gaps if self.result is not None else []


@dataclass
class EditorState:
    """Aggregate state of an editing session."""

    official_schedule: list[StaffSchedule]
    simulation_schedule: list[StaffSchedule]
    draft_schedule: list[StaffSchedule]
    mode: EditorMode = EditorMode.WHAT_IF
    change_log: ChangeLog = field(default_factory=ChangeLog)
    undo_stack: UndoStack = field(default_factory=UndoStack)
    warnings: list[EditorWarning] = field(default_factory=list)
    advisor: AdvisorState = field(default_factory=AdvisorState)
    current_edit: Optional[ScheduleEdit] = None

    @classmethod
    def create(
        cls,
        official_schedule: list[StaffSchedule],
        max_undo_items: int = MAX_UNDO_ITEMS,
    ) -> "EditorState":
        """Seed a session by cloning the official schedule."""
        return cls(
            official_schedule=clone_schedule(official_schedule),
            simulation_schedule=clone_schedule(official_schedule),
            draft_schedule=clone_schedule(official_schedule),
            undo_stack=UndoStack(max_undo_items),
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "official_schedule": schedule_to_dicts(self.official_schedule),
            "simulation_schedule": schedule_to_dicts(self.simulation_schedule),
            "draft_schedule": schedule_to_dicts(self.draft_schedule),
            "change_log": self.change_log.to_dict(),
            "undo_stack": self.undo_stack.to_dict(),
            "undo_limit": self.undo_stack.max_items,
            "warnings": [w.to_dict() for w in self.warnings],
            "advisor": self.advisor.to_dict(),
            "current_edit": edit_to_dict(self.current_edit) if self.current_edit else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EditorState":
        current_edit = data.get("current_edit")
        return cls(
            official_schedule=schedule_from_dicts(data["official_schedule"]),
            simulation_schedule=schedule_from_dicts(data["simulation_schedule"]),
            draft_schedule=schedule_from_dicts(data["draft_schedule"]),
            mode=EditorMode(data.get("mode", EditorMode.WHAT_IF.value)),
            change_log=ChangeLog.from_dict(data.get("change_log", [])),
            undo_stack=UndoStack.from_dict(
                data.get("undo_stack", []),
                data.get("undo_limit", MAX_UNDO_ITEMS),
            ),
            warnings=[EditorWarning.from_dict(w) for w in data.get("warnings", [])],
            advisor=AdvisorState.from_dict(data.get("advisor", {})),
            current_edit=edit_from_dict(current_edit) if current_edit else None,
        )


class ScheduleEditor:
    """Coordinates checking, applying and undoing edits for one day.

    Example:
        >>> editor = ScheduleEditor(schedule, staff_list, client_list)
        >>> outcome = editor.apply(ChangeStaffEdit("s2", "c1", TimeWindow(540, 600)))
        >>> if editor.advisor.is_active:
        ...     editor.execute_suggestion(editor.advisor.suggestions[0])
    """

    def __init__(
        self,
        official_schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        config: Optional[EditorConfig] = None,
    ):
        self.config = config or EditorConfig()
        self.staff_list = list(staff_list)
        self.client_list = list(client_list)
        self.checker = ConstraintChecker()
        self.advisor_engine = Advisor(
            policy=self.config.suggestion_policy,
            checker=self.checker,
        )
        self.state = EditorState.create(official_schedule, self.config.max_undo_items)

    @property
    def mode(self) -> EditorMode:
        return self.state.mode

    @property
    def working_schedule(self) -> list[StaffSchedule]:
        """The schedule edits currently apply to."""
        if self.state.mode == EditorMode.WHAT_IF:
            return self.state.simulation_schedule
        return self.state.draft_schedule

    def _install(self, schedule: list[StaffSchedule]) -> None:
        if self.state.mode == EditorMode.WHAT_IF:
            self.state.simulation_schedule = schedule
        else:
            self.state.draft_schedule = schedule

    @property
    def change_log(self) -> ChangeLog:
        return self.state.change_log

    @property
    def warnings(self) -> list[EditorWarning]:
        return self.state.warnings

    @property
    def advisor(self) -> AdvisorState:
        return self.state.advisor

    @property
    def can_undo(self) -> bool:
        return len(self.state.undo_stack) > 0

    def _reset_feedback(self) -> None:
        self.state.warnings = []
        self.state.advisor = AdvisorState.inactive()
        self.state.current_edit = None

    def collect_warnings(self, edit: ScheduleEdit) -> list[EditorWarning]:
        """Constraint warnings for an edit against the working schedule."""
        warnings = self.checker.check(
            edit,
            self.staff_list,
            self.client_list,
            schedule=self.working_schedule,
        )
        if self.config.warn_duplicate_holders:
            warnings.extend(self._duplicate_holder_warnings(edit))
        return warnings

    def _duplicate_holder_warnings(self, edit: ScheduleEdit) -> list[EditorWarning]:
        staff_names = {s.id: s.name for s in self.staff_list}
        client_names = {c.id: c.name for c in self.client_list}
        warnings = []
        for pair in assignment_pairs(edit):
            if pair.is_training:
                continue
            duplicates = find_duplicate_holders(self.working_schedule, pair.client_id, pair.window)
            if not duplicates:
                continue
            holders = []
            for duplicate in duplicates:
                for staff_id in duplicate.staff_ids:
                    if staff_id not in holders:
                        holders.append(staff_id)
            client_name = client_names.get(pair.client_id, pair.client_id)
            names = ", ".join(staff_names.get(s, s) for s in holders)
            warnings.append(
                EditorWarning(
                    id=f"soft-duplicate-{pair.client_id}-{pair.window.start}",
                    type=WarningType.SOFT,
                    rule="Duplicate Assignment",
                    description=(
                        f"{client_name} is held by {len(holders)} staff during "
                        f"{pair.window} ({names}); the edit replaces every other holder"
                    ),
                    entities=Entities(
                        client_id=pair.client_id,
                        client_name=client_names.get(pair.client_id),
                        time=str(pair.window),
                    ),
                    suggestions=("Review the schedule for double assignments",),
                )
            )
        return warnings

    def check(self, edit: ScheduleEdit) -> list[EditorWarning]:
        """Record an edit in progress and recompute its warnings."""
        self.state.current_edit = edit
        self.state.warnings = self.collect_warnings(edit)
        return self.state.warnings

    def simulate(self, edit: ScheduleEdit) -> EditResult:
        """Preview an edit over the working schedule without changing state.

        Structurally invalid edits produce an unapplied result.
        """
        if validate_edit(edit):
            return EditResult.unchanged(self.working_schedule)
        return apply_edit(self.working_schedule, edit, self.staff_list, self.client_list)

    def apply(self, edit: ScheduleEdit, override_hard: bool = False) -> ApplyOutcome:
        """Check and apply an edit to the working schedule.

        Args:
            edit: The edit to apply.
            override_hard: Apply even if a hard warning is raised.

        Returns:
            ApplyOutcome describing what happened.
        """
        errors = validate_edit(edit)
        if errors:
            logger.info("Rejected invalid %s edit: %s", edit.edit_type.value, "; ".join(errors))
            return ApplyOutcome(applied=False, errors=errors)

        warnings = self.check(edit)
        hard = [w for w in warnings if w.is_hard]
        if hard and not override_hard:
            logger.warning(
                "Blocked %s edit: %s",
                edit.edit_type.value,
                ", ".join(w.rule for w in hard),
            )
            return ApplyOutcome(applied=False, warnings=warnings, blocked=True)
        if hard:
            logger.warning("Hard warnings overridden for %s edit", edit.edit_type.value)

        previous = self.working_schedule
        result = apply_edit(previous, edit, self.staff_list, self.client_list)
        if not result.applied:
            logger.info("No-op %s edit: unresolved staff or client", edit.edit_type.value)
            return ApplyOutcome(applied=False, result=result, warnings=warnings)

        self.state.undo_stack.push(previous)
        self._install(result.schedule)

        uncovered = result.uncovered_gaps
        if uncovered and not result.needs_advisor:
            logger.warning(
                "%s edit left %d client gap(s) uncovered",
                edit.edit_type.value,
                len(uncovered),
            )

        entry = self.state.change_log.record(
            edit,
            description=generate_edit_description(edit, self.staff_list, self.client_list),
            entities=edit_entities(edit, self.staff_list, self.client_list),
            triggered_advisor=result.needs_advisor,
            left_uncovered=bool(uncovered),
            warnings=warnings,
        )
        self.state.advisor = self.advisor_engine.evaluate(
            result,
            result.schedule,
            self.staff_list,
            self.client_list,
        )
        self.state.current_edit = None
        logger.info("Applied %s: %s", entry.id, entry.description)

        return ApplyOutcome(
            applied=True,
            result=result,
            warnings=warnings,
            log_entry=entry,
        )

    def execute_suggestion(
        self,
        suggestion: AdvisorSuggestion,
        override_hard: bool = False,
    ) -> ApplyOutcome:
        """Apply an advisor suggestion as a regular edit."""
        from schededit.advisor.executor import SuggestionExecutor

        return SuggestionExecutor(self).execute(suggestion, override_hard=override_hard)

    def undo(self) -> bool:
        """Restore the working schedule from before the last applied edit.

        The change log keeps the undone edit's entry.

        Returns:
            False if there was nothing to undo.
        """
        snapshot = self.state.undo_stack.pop()
        if snapshot is None:
            return False
        self._install(snapshot)
        self._reset_feedback()
        logger.info("Undo: %d snapshot(s) remaining", len(self.state.undo_stack))
        return True

    def set_mode(self, mode: EditorMode) -> None:
        """Switch between what-if and draft editing.

        Undo snapshots belong to one working schedule, so switching clears them.
        """
        if mode == self.state.mode:
            return
        self.state.mode = mode
        self.state.undo_stack.clear()
        self._reset_feedback()
        logger.debug("Editor mode set to %s", mode.value)

    def promote_simulation(self) -> None:
        """Copy the simulation into the draft and continue in draft mode."""
        self.state.draft_schedule = clone_schedule(self.state.simulation_schedule)
        self.state.mode = EditorMode.DRAFT
        self.state.undo_stack.clear()
        self._reset_feedback()
        logger.info("Simulation promoted to draft")

    def discard_simulation(self) -> None:
        """Reset the simulation to the official schedule."""
        self.state.simulation_schedule = clone_schedule(self.state.official_schedule)
        if self.state.mode == EditorMode.WHAT_IF:
            self.state.undo_stack.clear()
        self._reset_feedback()
        logger.info("Simulation discarded")

    def finalize(self) -> list[StaffSchedule]:
        """Promote the working schedule to official and reset the session.

        Returns:
            The new official schedule.
        """
        official = clone_schedule(self.working_schedule)
        self.state.official_schedule = official
        self.state.simulation_schedule = clone_schedule(official)
        self.state.draft_schedule = clone_schedule(official)
        self.state.mode = EditorMode.WHAT_IF
        self.state.undo_stack.clear()
        self._reset_feedback()
        logger.info("Finalized schedule after %d logged edit(s)", len(self.state.change_log))
        return clone_schedule(official)
