"""Edit application, change history and the editor session."""

from schededit.editing.applier import (
    EditResult,
    apply_cancel_edit,
    apply_change_staff_edit,
    apply_edit,
    apply_split_edit,
    apply_tag_edit,
    apply_train_edit,
)
from schededit.editing.description import generate_edit_description
from schededit.editing.history import (
    MAX_UNDO_ITEMS,
    ChangeLog,
    ChangeLogEntry,
    UndoStack,
)
from schededit.editing.session import (
    ApplyOutcome,
    EditorConfig,
    EditorMode,
    EditorState,
    ScheduleEditor,
)

__all__ = [
    # Applier
    "EditResult",
    "apply_cancel_edit",
    "apply_change_staff_edit",
    "apply_edit",
    "apply_split_edit",
    "apply_tag_edit",
    "apply_train_edit",
    # History
    "MAX_UNDO_ITEMS",
    "ChangeLog",
    "ChangeLogEntry",
    "UndoStack",
    "generate_edit_description",
    # Session
    "ApplyOutcome",
    "EditorConfig",
    "EditorMode",
    "EditorState",
    "ScheduleEditor",
]
