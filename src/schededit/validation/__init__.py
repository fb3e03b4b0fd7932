"""Constraint checking for edits and integrity validation for schedules."""

from schededit.validation.constraints import (
    ConstraintChecker,
    ConstraintRule,
    EditorWarning,
    WarningType,
    check_constraints,
    check_hard_constraints,
    check_soft_constraints,
)
from schededit.validation.validator import (
    DuplicateHolding,
    ScheduleValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    find_duplicate_holders,
)

__all__ = [
    "ConstraintChecker",
    "ConstraintRule",
    "DuplicateHolding",
    "EditorWarning",
    "ScheduleValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "WarningType",
    "check_constraints",
    "check_hard_constraints",
    "check_soft_constraints",
    "find_duplicate_holders",
]
