"""Remediation suggestions for coverage gaps left by an edit.

The advisor turns an edit's cascade into a problem statement and a ranked
list of suggestions. Suggestions are plain data describing what to do and to
whom; executing one is a separate, explicit step (see ``executor``).

Ranking for an uncovered client:
1. Only active staff who are free for the whole gap window are considered.
2. Staff blocked by a hard rule or whose training has lapsed are dropped.
3. Remaining staff are scored by the suggestion policy (focus > trained >
   untrained) with a bonus for staff who are idle, then ordered by score
   and name.

For a staff member left idle, the advisor proposes taking over clients
currently held by staff who are not trained on them, then tagging the staff
member as available.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from schededit.domain.models import (
    Client,
    CoverageGap,
    GapKind,
    Staff,
    StaffSchedule,
    TimeWindow,
    find_staff_schedule,
)
from schededit.domain.policies import DefaultSuggestionPolicy, MatchLevel, SuggestionPolicy
from schededit.validation.constraints import ConstraintChecker

if TYPE_CHECKING:
    from schededit.editing.applier import EditResult

logger = logging.getLogger(__name__)

DEFAULT_PROBLEM = "Schedule conflict detected"


class SuggestionAction(Enum):
    """Remediation intents the advisor can propose."""

    REASSIGN_STAFF = "reassign_staff"
    TAG_AVAILABLE = "tag_available"


@dataclass(frozen=True)
class AdvisorSuggestion:
    """A proposed remediation.

    Attributes:
        id: Stable identifier.
        action: What the suggestion would do.
        description: Human-readable summary.
        staff_id: Staff member the action targets.
        window: When the action applies.
        client_id: Client to assign (``REASSIGN_STAFF``).
        tag_text: Tag to attach (``TAG_AVAILABLE``).
        score: Ranking score; higher is better.
    """

    id: str
    action: SuggestionAction
    description: str
    staff_id: str
    window: TimeWindow
    client_id: Optional[str] = None
    tag_text: Optional[str] = None
    score: int = 0

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "action": self.action.value,
            "description": self.description,
            "staff_id": self.staff_id,
            "window": self.window.to_dict(),
            "score": self.score,
        }
        if self.client_id is not None:
            data["client_id"] = self.client_id
        if self.tag_text is not None:
            data["tag_text"] = self.tag_text
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AdvisorSuggestion":
        return cls(
            id=data["id"],
            action=SuggestionAction(data["action"]),
            description=data["description"],
            staff_id=data["staff_id"],
            window=TimeWindow.from_dict(data["window"]),
            client_id=data.get("client_id"),
            tag_text=data.get("tag_text"),
            score=data.get("score", 0),
        )


@dataclass
class AdvisorState:
    """Advisor output for the most recent edit; never persisted as schedule."""

    is_active: bool = False
    problem: str = ""
    suggestions: list[AdvisorSuggestion] = field(default_factory=list)
    gaps: list[CoverageGap] = field(default_factory=list)

    @classmethod
    def inactive(cls) -> "AdvisorState":
        return cls()

    def to_dict(self) -> dict:
        return {
            "is_active": self.is_active,
            "problem": self.problem,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "gaps": [g.to_dict() for g in self.gaps],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AdvisorState":
        return cls(
            is_active=data.get("is_active", False),
            problem=data.get("problem", ""),
            suggestions=[AdvisorSuggestion.from_dict(s) for s in data.get("suggestions", [])],
            gaps=[CoverageGap.from_dict(g) for g in data.get("gaps", [])],
        )


@dataclass(frozen=True)
class RankedCandidate:
    """A staff member eligible to cover a client, with their score."""

    staff: Staff
    score: int
    match_level: str
    is_idle: bool


class Advisor:
    """Builds advisor state from an edit's cascade.

    Example:
        >>> advisor = Advisor()
        >>> state = advisor.evaluate(result, result.schedule, staff, clients)
        >>> for suggestion in state.suggestions:
        ...     print(suggestion.description)
    """

    def __init__(
        self,
        policy: Optional[SuggestionPolicy] = None,
        checker: Optional[ConstraintChecker] = None,
    ):
        self.policy = policy or DefaultSuggestionPolicy()
        self.checker = checker or ConstraintChecker()

    def evaluate(
        self,
        result: "EditResult",
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
    ) -> AdvisorState:
        """Compute advisor state for an applied edit.

        Args:
            result: The applier's result.
            schedule: The schedule after the edit.
            staff_list: Staff roster.
            client_list: Client roster.

        Returns:
            Inactive state unless the edit needs the advisor.
        """
        if not result.needs_advisor:
            return AdvisorState.inactive()

        staff_map = {s.id: s for s in staff_list}
        client_map = {c.id: c for c in client_list}
        idle_staff = {g.staff_id for g in result.gaps if g.kind == GapKind.STAFF_IDLE}

        suggestions: list[AdvisorSuggestion] = []
        seen: set[str] = set()
        for gap in result.gaps:
            if gap.kind == GapKind.CLIENT_UNCOVERED:
                client = client_map.get(gap.client_id)
                if client is None:
                    continue
                found = self.suggest_coverage(client, gap.window, schedule, staff_list, idle_staff)
            else:
                staff = staff_map.get(gap.staff_id)
                if staff is None:
                    continue
                found = self.suggest_for_idle(staff, gap.window, schedule, staff_map, client_map)
            for suggestion in found:
                if suggestion.id not in seen:
                    seen.add(suggestion.id)
                    suggestions.append(suggestion)

        logger.debug("Advisor produced %d suggestions for %d gaps", len(suggestions), len(result.gaps))
        return AdvisorState(
            is_active=True,
            problem=result.advisor_problem or DEFAULT_PROBLEM,
            suggestions=suggestions,
            gaps=list(result.gaps),
        )

    def rank_candidates(
        self,
        client: Client,
        window: TimeWindow,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        idle_staff: Optional[set[str]] = None,
    ) -> list[RankedCandidate]:
        """Rank every staff member eligible to cover a client for a window.

        Args:
            client: Client needing coverage.
            window: When coverage is needed.
            schedule: Current day schedule.
            staff_list: Staff roster.
            idle_staff: Staff ids left idle by the current edit.

        Returns:
            Eligible candidates, best first.
        """
        idle_staff = idle_staff or set()
        ranked = []
        for staff in staff_list:
            if not staff.active:
                continue
            staff_schedule = find_staff_schedule(schedule, staff.id)
            if staff_schedule is not None and not staff_schedule.is_free(window):
                continue
            if self.checker.hard_violations(staff, client, window):
                continue

            is_idle = staff.id in idle_staff or (
                staff_schedule is not None and staff_schedule.has_open_slot(window)
            )
            score = self.policy.score(staff, client, is_idle)
            if score is None:
                continue
            ranked.append(
                RankedCandidate(
                    staff=staff,
                    score=score,
                    match_level=self.policy.match_level(staff, client),
                    is_idle=is_idle,
                )
            )

        ranked.sort(key=lambda c: (-c.score, c.staff.name, c.staff.id))
        return ranked

    def suggest_coverage(
        self,
        client: Client,
        window: TimeWindow,
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        idle_staff: Optional[set[str]] = None,
    ) -> list[AdvisorSuggestion]:
        """Suggest staff to cover an uncovered client."""
        ranked = self.rank_candidates(client, window, schedule, staff_list, idle_staff)
        return [
            AdvisorSuggestion(
                id=f"reassign-{candidate.staff.id}-{client.id}-{window.start}",
                action=SuggestionAction.REASSIGN_STAFF,
                description=(
                    f"Assign {candidate.staff.name} to {client.name} during {window} "
                    f"({candidate.match_level} staff)"
                ),
                staff_id=candidate.staff.id,
                window=window,
                client_id=client.id,
                score=candidate.score,
            )
            for candidate in ranked[: self.policy.max_suggestions()]
        ]

    def suggest_for_idle(
        self,
        staff: Staff,
        window: TimeWindow,
        schedule: list[StaffSchedule],
        staff_map: dict[str, Staff],
        client_map: dict[str, Client],
    ) -> list[AdvisorSuggestion]:
        """Suggest work for a staff member left idle during a window.

        Upgrades are clients held during the window by someone neither trained
        nor focus for them, where the idle staff member is. A tag marking the
        staff member available is always offered last.
        """
        upgrades = []
        if staff.active:
            for holder_schedule in schedule:
                if holder_schedule.staff_id == staff.id:
                    continue
                for slot in holder_schedule.slots_overlapping(window):
                    client = client_map.get(slot.client_id) if slot.client_id else None
                    if client is None:
                        continue
                    holder_id = holder_schedule.staff_id
                    if client.is_focus(holder_id) or client.is_trained(holder_id):
                        continue
                    if self.policy.match_level(staff, client) not in (
                        MatchLevel.FOCUS,
                        MatchLevel.TRAINED,
                    ):
                        continue
                    overlap = TimeWindow(max(slot.start, window.start), min(slot.end, window.end))
                    if self.checker.hard_violations(staff, client, overlap):
                        continue
                    score = self.policy.score(staff, client, True)
                    if score is None:
                        continue
                    holder = staff_map.get(holder_id)
                    holder_name = holder.name if holder else "current staff"
                    upgrades.append(
                        AdvisorSuggestion(
                            id=f"reassign-{staff.id}-{client.id}-{overlap.start}",
                            action=SuggestionAction.REASSIGN_STAFF,
                            description=(
                                f"Move {staff.name} to {client.name} during {overlap} "
                                f"(replaces untrained {holder_name})"
                            ),
                            staff_id=staff.id,
                            window=overlap,
                            client_id=client.id,
                            score=score,
                        )
                    )

        upgrades.sort(key=lambda s: (-s.score, client_map[s.client_id].name, s.window.start))
        tag_text = self.policy.idle_tag_text()
        suggestions = upgrades[: self.policy.max_suggestions()]
        suggestions.append(
            AdvisorSuggestion(
                id=f"tag-{staff.id}-{window.start}",
                action=SuggestionAction.TAG_AVAILABLE,
                description=f'Tag {staff.name} as "{tag_text}" during {window}',
                staff_id=staff.id,
                window=window,
                tag_text=tag_text,
            )
        )
        return suggestions
