"""One-line change log descriptions for edits."""

from schededit.domain.edits import (
    CancelEdit,
    ChangeStaffEdit,
    ScheduleEdit,
    SplitEdit,
    TagEdit,
    TrainEdit,
)
from schededit.domain.models import Client, Staff

UNKNOWN_NAME = "Unknown"


def generate_edit_description(
    edit: ScheduleEdit,
    staff_list: list[Staff],
    client_list: list[Client],
) -> str:
    """Render an edit as a human-readable log line.

    Unresolved staff or client ids are rendered as ``"Unknown"``.
    """
    staff_names = {s.id: s.name for s in staff_list}
    client_names = {c.id: c.name for c in client_list}

    def staff_name(staff_id: str) -> str:
        return staff_names.get(staff_id, UNKNOWN_NAME)

    def client_name(client_id: str) -> str:
        return client_names.get(client_id, UNKNOWN_NAME)

    if isinstance(edit, ChangeStaffEdit):
        return (
            f"Changed {client_name(edit.client_id)} to {staff_name(edit.staff_id)} "
            f"({edit.window})"
        )
    if isinstance(edit, SplitEdit):
        return f"Split {staff_name(edit.staff_id)}'s schedule into {len(edit.segments)} segments"
    if isinstance(edit, TrainEdit):
        return (
            f"Added training: {staff_name(edit.trainee_id)} with "
            f"{client_name(edit.client_id)} ({edit.phase.value})"
        )
    if isinstance(edit, CancelEdit):
        cancel_type = edit.cancel_type.value.replace("_", " ", 1)
        return f"Cancelled {client_name(edit.client_id)} ({cancel_type})"
    if isinstance(edit, TagEdit):
        return f'Added tag "{edit.tag_text}" to {staff_name(edit.staff_id)}'
    return "Unknown edit"
