"""Hard and soft placement rules evaluated against a proposed edit.

Each rule is an independent predicate over the edit and the roster. The
checker runs every registered rule and aggregates all warnings rather than
stopping at the first, so the caller sees the full picture before deciding
whether to block or override.

Example:
    >>> checker = ConstraintChecker()
    >>> warnings = checker.check(edit, staff_list, client_list)
    >>> blocked = any(w.is_hard for w in warnings)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from schededit.domain.edits import (
    ChangeStaffEdit,
    ScheduleEdit,
    SplitEdit,
    TrainEdit,
)
from schededit.domain.models import (
    Client,
    Entities,
    Staff,
    StaffRole,
    StaffSchedule,
    TimeWindow,
)


class WarningType(Enum):
    """Severity tiers of an editor warning."""

    HARD = "hard"  # Blocks commit unless explicitly overridden
    SOFT = "soft"  # Advisory only


@dataclass(frozen=True)
class EditorWarning:
    """A rule violation raised against a proposed edit.

    Warnings are always recomputed and never stored as schedule state.
    """

    id: str
    type: WarningType
    rule: str
    description: str
    entities: Entities = field(default_factory=Entities)
    suggestions: tuple[str, ...] = ()

    @property
    def is_hard(self) -> bool:
        return self.type == WarningType.HARD

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "rule": self.rule,
            "description": self.description,
            "entities": self.entities.to_dict(),
            "suggestions": list(self.suggestions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EditorWarning":
        return cls(
            id=data["id"],
            type=WarningType(data["type"]),
            rule=data["rule"],
            description=data["description"],
            entities=Entities.from_dict(data.get("entities", {})),
            suggestions=tuple(data.get("suggestions", [])),
        )


@dataclass(frozen=True)
class Assignment:
    """A staff/client pairing that an edit would create."""

    staff_id: str
    client_id: str
    window: TimeWindow
    is_training: bool = False


def assignment_pairs(edit: ScheduleEdit) -> list[Assignment]:
    """List the staff/client pairings an edit would create."""
    if isinstance(edit, ChangeStaffEdit):
        return [Assignment(edit.staff_id, edit.client_id, edit.window)]
    if isinstance(edit, SplitEdit):
        return [
            Assignment(edit.staff_id, segment.client_id, segment.window)
            for segment in edit.segments
        ]
    if isinstance(edit, TrainEdit):
        return [Assignment(edit.trainee_id, edit.client_id, edit.window, is_training=True)]
    return []


def _entities(staff: Staff, client: Client) -> Entities:
    return Entities(
        staff_id=staff.id,
        staff_name=staff.name,
        client_id=client.id,
        client_name=client.name,
    )


class ConstraintRule(ABC):
    """Abstract base class for a placement rule."""

    rule_name: str = ""
    warning_type: WarningType = WarningType.SOFT

    @abstractmethod
    def evaluate(
        self,
        edit: ScheduleEdit,
        staff_map: dict[str, Staff],
        client_map: dict[str, Client],
        schedule: Optional[list[StaffSchedule]] = None,
    ) -> list[EditorWarning]:
        """Return the warnings this rule raises for an edit."""
        pass


class AssignmentRule(ConstraintRule):
    """A rule checked once per staff/client pairing created by an edit.

    Pairings whose staff or client cannot be resolved are skipped.
    """

    applies_to_training = False

    def evaluate(
        self,
        edit: ScheduleEdit,
        staff_map: dict[str, Staff],
        client_map: dict[str, Client],
        schedule: Optional[list[StaffSchedule]] = None,
    ) -> list[EditorWarning]:
        warnings = []
        for pair in assignment_pairs(edit):
            if pair.is_training and not self.applies_to_training:
                continue
            staff = staff_map.get(pair.staff_id)
            client = client_map.get(pair.client_id)
            if staff is None or client is None:
                continue
            warning = self.check(staff, client, pair.window)
            if warning is not None:
                warnings.append(warning)
        return warnings

    @abstractmethod
    def check(self, staff: Staff, client: Client, window: TimeWindow) -> Optional[EditorWarning]:
        pass


class ExcludedStaffRule(AssignmentRule):
    """Hard: the client's exclusion list names the staff member."""

    rule_name = "Staff Excluded Restriction"
    warning_type = WarningType.HARD
    applies_to_training = True

    def check(self, staff: Staff, client: Client, window: TimeWindow) -> Optional[EditorWarning]:
        if not client.is_excluded(staff.id):
            return None
        return EditorWarning(
            id=f"hard-excluded-{staff.id}-{client.id}",
            type=self.warning_type,
            rule=self.rule_name,
            description=f"{staff.name} is excluded from working with {client.name}",
            entities=_entities(staff, client),
            suggestions=(
                "Select a different staff member",
                "Remove this edit",
                "Check client's excluded staff list",
            ),
        )


class CrisisProtectionRule(AssignmentRule):
    """Hard: crisis clients may not be staffed by the unqualified role."""

    rule_name = "No Crisis Clients Restriction"
    warning_type = WarningType.HARD
    applies_to_training = True

    def __init__(self, unqualified_role: StaffRole = StaffRole.FLOAT):
        self.unqualified_role = unqualified_role

    def check(self, staff: Staff, client: Client, window: TimeWindow) -> Optional[EditorWarning]:
        if not (client.is_crisis_client and staff.role == self.unqualified_role):
            return None
        return EditorWarning(
            id=f"hard-crisis-{staff.id}-{client.id}",
            type=self.warning_type,
            rule=self.rule_name,
            description=(
                f"{client.name} has crisis restrictions that prevent "
                f"{self.unqualified_role.value.lower()} staff assignment"
            ),
            entities=_entities(staff, client),
            suggestions=(
                "Select trained staff for this client",
                "Remove this edit",
            ),
        )


class UntrainedAssignmentRule(AssignmentRule):
    """Soft: the staff member is neither trained nor focus for the client."""

    rule_name = "Untrained Staff Assignment"
    warning_type = WarningType.SOFT

    def check(self, staff: Staff, client: Client, window: TimeWindow) -> Optional[EditorWarning]:
        if client.is_trained(staff.id) or client.is_focus(staff.id):
            return None
        return EditorWarning(
            id=f"soft-untrained-{staff.id}-{client.id}",
            type=self.warning_type,
            rule=self.rule_name,
            description=f"{staff.name} is not in the trained or focus staff list for {client.name}",
            entities=_entities(staff, client),
            suggestions=(
                "Consider selecting trained staff instead",
                "Proceed if this is intentional",
            ),
        )


class TrainerApprovalRule(ConstraintRule):
    """Soft: a training session's trainer is not approved for the client.

    When the client lists approved trainers the trainer must be on that list;
    otherwise the trainer must be flagged as a trainer on the roster.
    """

    rule_name = "Trainer Not Approved"
    warning_type = WarningType.SOFT

    def evaluate(
        self,
        edit: ScheduleEdit,
        staff_map: dict[str, Staff],
        client_map: dict[str, Client],
        schedule: Optional[list[StaffSchedule]] = None,
    ) -> list[EditorWarning]:
        if not isinstance(edit, TrainEdit):
            return []
        trainer = staff_map.get(edit.trainer_id)
        client = client_map.get(edit.client_id)
        if trainer is None or client is None:
            return []

        if client.allowed_trainer_ids:
            approved = trainer.id in client.allowed_trainer_ids
        else:
            approved = trainer.is_trainer
        if approved:
            return []

        return [
            EditorWarning(
                id=f"soft-trainer-{trainer.id}-{client.id}",
                type=self.warning_type,
                rule=self.rule_name,
                description=f"{trainer.name} is not an approved trainer for {client.name}",
                entities=_entities(trainer, client),
                suggestions=(
                    "Select an approved trainer",
                    "Proceed if this is intentional",
                ),
            )
        ]


def default_rules() -> list[ConstraintRule]:
    """The standard rule set, in evaluation order."""
    return [
        ExcludedStaffRule(),
        CrisisProtectionRule(),
        UntrainedAssignmentRule(),
        TrainerApprovalRule(),
    ]


class ConstraintChecker:
    """Evaluates every registered rule against a proposed edit.

    Output order is deterministic: rule registration order, then warning id.
    The checker never mutates its inputs.
    """

    def __init__(self, rules: Optional[list[ConstraintRule]] = None):
        self.rules = list(rules) if rules is not None else default_rules()

    def register(self, rule: ConstraintRule) -> None:
        """Append a rule to the end of the evaluation order."""
        self.rules.append(rule)

    def check(
        self,
        edit: ScheduleEdit,
        staff_list: list[Staff],
        client_list: list[Client],
        schedule: Optional[list[StaffSchedule]] = None,
        warning_type: Optional[WarningType] = None,
    ) -> list[EditorWarning]:
        """Evaluate the rules against an edit.

        Args:
            edit: The proposed edit.
            staff_list: Staff roster.
            client_list: Client roster.
            schedule: Current schedule, for rules that need it.
            warning_type: If given, only rules of this tier are evaluated.

        Returns:
            All warnings raised, in deterministic order.
        """
        staff_map = {s.id: s for s in staff_list}
        client_map = {c.id: c for c in client_list}

        warnings: list[EditorWarning] = []
        seen_ids: set[str] = set()
        for rule in self.rules:
            if warning_type is not None and rule.warning_type != warning_type:
                continue
            raised = rule.evaluate(edit, staff_map, client_map, schedule)
            for warning in sorted(raised, key=lambda w: w.id):
                if warning.id in seen_ids:
                    continue
                seen_ids.add(warning.id)
                warnings.append(warning)
        return warnings

    def hard_violations(
        self,
        staff: Staff,
        client: Client,
        window: TimeWindow,
    ) -> list[EditorWarning]:
        """Hard warnings raised by assigning one staff member to one client."""
        return self.check(
            ChangeStaffEdit(staff_id=staff.id, client_id=client.id, window=window),
            [staff],
            [client],
            warning_type=WarningType.HARD,
        )


def check_hard_constraints(
    edit: ScheduleEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> list[EditorWarning]:
    """Evaluate the default hard rules against an edit."""
    return ConstraintChecker().check(
        edit, staff_list, client_list, warning_type=WarningType.HARD
    )


def check_soft_constraints(
    edit: ScheduleEdit,
    staff_list: list[Staff],
    client_list: list[Client],
    current_schedule: Optional[list[StaffSchedule]] = None,
) -> list[EditorWarning]:
    """Evaluate the default soft rules against an edit."""
    return ConstraintChecker().check(
        edit,
        staff_list,
        client_list,
        schedule=current_schedule,
        warning_type=WarningType.SOFT,
    )


def check_constraints(
    edit: ScheduleEdit,
    staff_list: list[Staff],
    client_list: list[Client],
    current_schedule: Optional[list[StaffSchedule]] = None,
) -> list[EditorWarning]:
    """Evaluate every default rule, hard rules first."""
    return ConstraintChecker().check(
        edit, staff_list, client_list, schedule=current_schedule
    )
