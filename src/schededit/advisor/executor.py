"""Turns advisor suggestions into edits and applies them."""

import logging
from typing import TYPE_CHECKING

from schededit.advisor.advisor import AdvisorSuggestion, SuggestionAction
from schededit.domain.edits import ChangeStaffEdit, ScheduleEdit, TagEdit

if TYPE_CHECKING:
    from schededit.editing.session import ApplyOutcome, ScheduleEditor

logger = logging.getLogger(__name__)


def suggestion_to_edit(suggestion: AdvisorSuggestion) -> ScheduleEdit:
    """Build the edit a suggestion describes.

    Raises:
        ValueError: If the suggestion is missing the field its action needs.
    """
    if suggestion.action == SuggestionAction.REASSIGN_STAFF:
        if suggestion.client_id is None:
            raise ValueError(f"Suggestion {suggestion.id} has no client to assign")
        return ChangeStaffEdit(
            staff_id=suggestion.staff_id,
            client_id=suggestion.client_id,
            window=suggestion.window,
        )
    if suggestion.action == SuggestionAction.TAG_AVAILABLE:
        if not suggestion.tag_text:
            raise ValueError(f"Suggestion {suggestion.id} has no tag text")
        return TagEdit(
            staff_id=suggestion.staff_id,
            tag_text=suggestion.tag_text,
            window=suggestion.window,
            marks_available=True,
        )
    raise ValueError(f"Unsupported suggestion action: {suggestion.action}")


class SuggestionExecutor:
    """Applies suggestions through an editor session.

    The edit goes through the same checks as a hand-entered edit, so a
    suggestion can still be blocked by a hard warning.
    """

    def __init__(self, editor: "ScheduleEditor"):
        self.editor = editor

    def execute(self, suggestion: AdvisorSuggestion, override_hard: bool = False) -> "ApplyOutcome":
        edit = suggestion_to_edit(suggestion)
        logger.info("Executing suggestion %s (%s)", suggestion.id, suggestion.action.value)
        return self.editor.apply(edit, override_hard=override_hard)
