"""Remediation advice for coverage gaps left by edits."""

from schededit.advisor.advisor import (
    Advisor,
    AdvisorState,
    AdvisorSuggestion,
    RankedCandidate,
    SuggestionAction,
)
from schededit.advisor.executor import SuggestionExecutor, suggestion_to_edit
from schededit.advisor.planner import (
    CoveragePlanner,
    PlanResult,
    PlannedAssignment,
    PlannerConfig,
)

__all__ = [
    "Advisor",
    "AdvisorState",
    "AdvisorSuggestion",
    "CoveragePlanner",
    "PlanResult",
    "PlannedAssignment",
    "PlannerConfig",
    "RankedCandidate",
    "SuggestionAction",
    "SuggestionExecutor",
    "suggestion_to_edit",
]
