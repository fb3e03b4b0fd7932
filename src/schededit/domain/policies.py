"""Policy definitions for remediation suggestions.

Policies hold the tunable business rules used to rank coverage candidates.
They are kept separate from the advisor so the ranking can be tested and
changed independently.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from schededit.domain.models import Client, Staff


class MatchLevel:
    """How well a staff member matches a client."""

    FOCUS = "focus"
    TRAINED = "trained"
    UNTRAINED = "untrained"


class SuggestionPolicy(ABC):
    """Abstract base class for coverage suggestion ranking."""

    @abstractmethod
    def match_level(self, staff: Staff, client: Client) -> Optional[str]:
        """Classify a staff/client pairing.

        Returns:
            One of the ``MatchLevel`` values, or None if the staff member
            must not be proposed for this client at all.
        """
        pass

    @abstractmethod
    def score(self, staff: Staff, client: Client, is_idle: bool) -> Optional[int]:
        """Score a candidate for covering a client.

        Args:
            staff: Candidate staff member.
            client: Client needing coverage.
            is_idle: True if the staff member is on site with nothing to do.

        Returns:
            Higher is better; None if the candidate is not eligible.
        """
        pass

    @abstractmethod
    def max_suggestions(self) -> int:
        """Maximum number of ranked candidates proposed per gap."""
        pass

    @abstractmethod
    def idle_tag_text(self) -> str:
        """Tag text proposed for a staff member left with nothing to do."""
        pass


@dataclass
class DefaultSuggestionPolicy(SuggestionPolicy):
    """Default ranking policy.

    Scores:
    - Focus staff: 3
    - Trained staff: 2
    - Untrained staff: 0 (only if ``include_untrained``)
    - Idle bonus: +1 for staff freed by the edit or sitting on an open slot

    Staff whose training on the client has lapsed are never proposed.
    """

    focus_weight: int = 3
    trained_weight: int = 2
    untrained_weight: int = 0
    idle_bonus: int = 1
    include_untrained: bool = True
    suggestion_limit: int = 5
    available_tag_text: str = "Available"

    def match_level(self, staff: Staff, client: Client) -> Optional[str]:
        if client.is_no_longer_trained(staff.id):
            return None
        if client.is_focus(staff.id):
            return MatchLevel.FOCUS
        if client.is_trained(staff.id):
            return MatchLevel.TRAINED
        return MatchLevel.UNTRAINED

    def score(self, staff: Staff, client: Client, is_idle: bool) -> Optional[int]:
        level = self.match_level(staff, client)
        if level is None:
            return None
        if level == MatchLevel.UNTRAINED and not self.include_untrained:
            return None

        weights = {
            MatchLevel.FOCUS: self.focus_weight,
            MatchLevel.TRAINED: self.trained_weight,
            MatchLevel.UNTRAINED: self.untrained_weight,
        }
        return weights[level] + (self.idle_bonus if is_idle else 0)

    def max_suggestions(self) -> int:
        return self.suggestion_limit

    def idle_tag_text(self) -> str:
        return self.available_tag_text
