# maintenance_sdk/forms/__init__.py
from .errors import SubmissionErrors, map_submission_errors
from .identity import record_identity, row_id
from .options import OptionsResolver
from .rules import FieldRule, RuleKind, RuleSet, UniqueCheckResult, build_rules
from .session import FormContract, MaintenanceFormSession, SubmissionOutcome
from .state import build_initial_values, empty_value_for

__all__ = [
    "SubmissionErrors",
    "map_submission_errors",
    "record_identity",
    "row_id",
    "OptionsResolver",
    "FieldRule",
    "RuleKind",
    "RuleSet",
    "UniqueCheckResult",
    "build_rules",
    "FormContract",
    "MaintenanceFormSession",
    "SubmissionOutcome",
    "build_initial_values",
    "empty_value_for",
]
