"""OR-Tools CP-SAT planner for covering several client gaps at once.

Ranking suggestions gap by gap can propose the same staff member for two
gaps at the same time. The planner chooses one candidate per gap jointly so
that no staff member is placed on overlapping gaps, maximising the number of
covered gaps first and the match quality second.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ortools.sat.python import cp_model

from schededit.advisor.advisor import Advisor, RankedCandidate
from schededit.domain.edits import ChangeStaffEdit
from schededit.domain.models import (
    Client,
    CoverageGap,
    GapKind,
    Staff,
    StaffSchedule,
)
from schededit.domain.policies import SuggestionPolicy
from schededit.validation.constraints import ConstraintChecker

logger = logging.getLogger(__name__)


@dataclass
class PlannerConfig:
    """Configuration for the coverage planner.

    Attributes:
        time_limit_seconds: Maximum solver runtime.
        num_workers: Number of parallel workers (0 = auto).
        coverage_weight: Objective weight of covering a gap, added to the
            candidate's score. Must exceed the largest policy score for
            coverage to dominate match quality.
    """

    time_limit_seconds: float = 10.0
    num_workers: int = 0
    coverage_weight: int = 100


@dataclass(frozen=True)
class PlannedAssignment:
    """One gap covered by one staff member."""

    gap: CoverageGap
    staff_id: str
    score: int

    def to_edit(self) -> ChangeStaffEdit:
        return ChangeStaffEdit(
            staff_id=self.staff_id,
            client_id=self.gap.client_id,
            window=self.gap.window,
        )


@dataclass
class PlanResult:
    """Result from the coverage planner.

    Attributes:
        assignments: Chosen staff per covered gap.
        uncovered: Gaps no eligible staff member could take.
        status: Solver status (OPTIMAL, FEASIBLE, GREEDY, ...).
        objective_value: Final objective value.
        solve_time_seconds: Time taken to solve.
    """

    assignments: list[PlannedAssignment] = field(default_factory=list)
    uncovered: list[CoverageGap] = field(default_factory=list)
    status: str = "OPTIMAL"
    objective_value: int = 0
    solve_time_seconds: float = 0.0

    @property
    def is_optimal(self) -> bool:
        return self.status == "OPTIMAL"

    @property
    def is_feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE", "GREEDY")

    def to_edits(self) -> list[ChangeStaffEdit]:
        return [assignment.to_edit() for assignment in self.assignments]


class CoveragePlanner:
    """Jointly assigns staff to uncovered client gaps using CP-SAT.

    Candidates per gap come from the advisor's ranking, so the same
    availability, hard-rule and training filters apply.
    """

    def __init__(
        self,
        policy: Optional[SuggestionPolicy] = None,
        checker: Optional[ConstraintChecker] = None,
        config: Optional[PlannerConfig] = None,
    ):
        self.advisor = Advisor(policy=policy, checker=checker)
        self.config = config or PlannerConfig()

    def plan(
        self,
        gaps: list[CoverageGap],
        schedule: list[StaffSchedule],
        staff_list: list[Staff],
        client_list: list[Client],
        idle_staff: Optional[set[str]] = None,
    ) -> PlanResult:
        """Choose staff for every uncovered client gap.

        Args:
            gaps: Gaps from an edit; only ``CLIENT_UNCOVERED`` gaps are planned.
            schedule: Current day schedule.
            staff_list: Staff roster.
            client_list: Client roster.
            idle_staff: Staff ids left idle by the edit.

        Returns:
            PlanResult with assignments and solver statistics.
        """
        client_map = {c.id: c for c in client_list}
        client_gaps = [
            gap
            for gap in gaps
            if gap.kind == GapKind.CLIENT_UNCOVERED and gap.client_id in client_map
        ]
        if not client_gaps:
            return PlanResult()

        candidates: dict[int, list[RankedCandidate]] = {
            g_idx: self.advisor.rank_candidates(
                client_map[gap.client_id], gap.window, schedule, staff_list, idle_staff
            )
            for g_idx, gap in enumerate(client_gaps)
        }
        if not any(candidates.values()):
            return PlanResult(uncovered=client_gaps)

        model = cp_model.CpModel()

        # Decision variables: x[g][s] = 1 if staff s covers gap g
        x: dict[int, dict[str, cp_model.IntVar]] = {}
        for g_idx, gap_candidates in candidates.items():
            x[g_idx] = {}
            for candidate in gap_candidates:
                x[g_idx][candidate.staff.id] = model.NewBoolVar(f"x_{g_idx}_{candidate.staff.id}")

        # Constraint 1: Each gap gets at most one staff member
        for g_idx in candidates:
            if x[g_idx]:
                model.AddAtMostOne(x[g_idx].values())

        # Constraint 2: No staff member on two overlapping gaps
        for g1 in range(len(client_gaps)):
            for g2 in range(g1 + 1, len(client_gaps)):
                if not client_gaps[g1].window.overlaps(client_gaps[g2].window):
                    continue
                for staff_id in set(x[g1]) & set(x[g2]):
                    model.AddAtMostOne([x[g1][staff_id], x[g2][staff_id]])

        objective_terms = []
        for g_idx, gap_candidates in candidates.items():
            for candidate in gap_candidates:
                weight = self.config.coverage_weight + candidate.score
                objective_terms.append(x[g_idx][candidate.staff.id] * weight)
        model.Maximize(sum(objective_terms))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.time_limit_seconds
        if self.config.num_workers > 0:
            solver.parameters.num_workers = self.config.num_workers

        status = solver.Solve(model)

        status_map = {
            cp_model.OPTIMAL: "OPTIMAL",
            cp_model.FEASIBLE: "FEASIBLE",
            cp_model.INFEASIBLE: "INFEASIBLE",
            cp_model.MODEL_INVALID: "MODEL_INVALID",
            cp_model.UNKNOWN: "UNKNOWN",
        }
        status_str = status_map.get(status, "UNKNOWN")

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            logger.warning("Coverage solver returned %s, falling back to greedy plan", status_str)
            return self._greedy_plan(client_gaps, candidates)

        assignments = []
        uncovered = []
        for g_idx, gap in enumerate(client_gaps):
            chosen = next(
                (c for c in candidates[g_idx] if solver.Value(x[g_idx][c.staff.id])),
                None,
            )
            if chosen is None:
                uncovered.append(gap)
            else:
                assignments.append(PlannedAssignment(gap=gap, staff_id=chosen.staff.id, score=chosen.score))

        return PlanResult(
            assignments=assignments,
            uncovered=uncovered,
            status=status_str,
            objective_value=int(solver.ObjectiveValue()),
            solve_time_seconds=solver.WallTime(),
        )

    def _greedy_plan(
        self,
        client_gaps: list[CoverageGap],
        candidates: dict[int, list[RankedCandidate]],
    ) -> PlanResult:
        """Cover the most constrained gaps first with their best free candidate."""
        order = sorted(range(len(client_gaps)), key=lambda g: (len(candidates[g]), g))
        taken: dict[str, list[CoverageGap]] = {}
        chosen: dict[int, RankedCandidate] = {}

        for g_idx in order:
            gap = client_gaps[g_idx]
            for candidate in candidates[g_idx]:
                busy = taken.get(candidate.staff.id, [])
                if any(other.window.overlaps(gap.window) for other in busy):
                    continue
                chosen[g_idx] = candidate
                taken.setdefault(candidate.staff.id, []).append(gap)
                break

        assignments = []
        uncovered = []
        objective = 0
        for g_idx, gap in enumerate(client_gaps):
            candidate = chosen.get(g_idx)
            if candidate is None:
                uncovered.append(gap)
                continue
            assignments.append(PlannedAssignment(gap=gap, staff_id=candidate.staff.id, score=candidate.score))
            objective += self.config.coverage_weight + candidate.score

        return PlanResult(
            assignments=assignments,
            uncovered=uncovered,
            status="GREEDY",
            objective_value=objective,
        )
