"""Domain models and business rules for schedule editing."""

from schededit.domain.edits import (
    CancelEdit,
    CancelType,
    ChangeStaffEdit,
    EditType,
    ScheduleEdit,
    SplitEdit,
    SplitSegment,
    TagEdit,
    TrainEdit,
    TrainingPhase,
    edit_from_dict,
    edit_to_dict,
    validate_edit,
)
from schededit.domain.models import (
    Client,
    CoverageGap,
    Entities,
    GapKind,
    ScheduleSlot,
    SourceTag,
    Staff,
    StaffRole,
    StaffSchedule,
    StaffStatus,
    TimeWindow,
    clone_schedule,
    find_staff_schedule,
)
from schededit.domain.policies import (
    DefaultSuggestionPolicy,
    MatchLevel,
    SuggestionPolicy,
)

__all__ = [
    # Models
    "Client",
    "CoverageGap",
    "Entities",
    "GapKind",
    "ScheduleSlot",
    "SourceTag",
    "Staff",
    "StaffRole",
    "StaffSchedule",
    "StaffStatus",
    "TimeWindow",
    "clone_schedule",
    "find_staff_schedule",
    # Edits
    "CancelEdit",
    "CancelType",
    "ChangeStaffEdit",
    "EditType",
    "ScheduleEdit",
    "SplitEdit",
    "SplitSegment",
    "TagEdit",
    "TrainEdit",
    "TrainingPhase",
    "edit_from_dict",
    "edit_to_dict",
    "validate_edit",
    # Policies
    "DefaultSuggestionPolicy",
    "MatchLevel",
    "SuggestionPolicy",
]
