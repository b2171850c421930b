"""The gauntlet: a gated, proctored, three-stage candidate assessment.

The state machine lives in `controller`, its persistence in `persistence` and
the per-process session table in `registry`; those are imported from their
modules directly.
"""

__all__ = [
    # Errors
    "CandidateNotFound",
    "CollaboratorError",
    "GateInFlight",
    "GauntletError",
    "IllegalTransition",
    "InvalidOperation",
    "JudgeError",
    "MalformedJudgment",
    "PermissionRequired",
    # Phases
    "check_transition",
    "FORWARD_ORDER",
    "TRANSITIONS",
    # Derived views
    "compile_grand_report",
    "compute_deadline",
    "report_filename",
]

from .errors import CandidateNotFound, CollaboratorError, GateInFlight, GauntletError, IllegalTransition, \
    InvalidOperation, JudgeError, MalformedJudgment, PermissionRequired  # isort: skip
from .deadline import compute_deadline
from .phase import check_transition, FORWARD_ORDER, TRANSITIONS
from .report import compile_grand_report, report_filename
