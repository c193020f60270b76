"""
CloudFormation stack submission and convergence utilities.
"""

from .errors import (
    PollError,
    StackError,
    StackLookupError,
    StackNotFoundError,
    StackOperationFailed,
    StackQueryError,
    StackRejectedError,
    StackTimeoutError,
    SubmitError,
)
from .models import (
    AbsencePolicy,
    FailureDetail,
    OperationKind,
    Outcome,
    PollResult,
    StackOperation,
    SubmitAck,
    TemplateRef,
)
from .poller import ConvergencePoller
from .provider import CloudFormationProvider
from .stack_manager import StackSubmitter

__all__ = [
    "AbsencePolicy",
    "CloudFormationProvider",
    "ConvergencePoller",
    "FailureDetail",
    "OperationKind",
    "Outcome",
    "PollError",
    "PollResult",
    "StackError",
    "StackLookupError",
    "StackNotFoundError",
    "StackOperation",
    "StackOperationFailed",
    "StackQueryError",
    "StackRejectedError",
    "StackSubmitter",
    "StackTimeoutError",
    "SubmitAck",
    "SubmitError",
    "TemplateRef",
]
