"""
Errors raised by stack submission and convergence polling.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .models import FailureDetail


class StackError(Exception):
    """Base class for stack operation errors."""


class SubmitError(StackError):
    """A stack operation could not be submitted."""


@dataclass
class StackNotFoundError(SubmitError):
    """The stack targeted by an operation does not exist."""

    stack_name: str

    def __str__(self) -> str:
        return f"Stack {self.stack_name} does not exist"


@dataclass
class StackRejectedError(SubmitError):
    """The provider rejected the request (template, parameters, capabilities)."""

    stack_name: str
    message: str
    code: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.code}: " if self.code else ""
        return f"Request for stack {self.stack_name} rejected: {prefix}{self.message}"


@dataclass
class StackLookupError(SubmitError):
    """The existence check before submitting failed (network, credentials, access)."""

    stack_name: str
    message: str
    code: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.code}: " if self.code else ""
        return f"Failed to look up stack {self.stack_name}: {prefix}{self.message}"


class PollError(StackError):
    """A polling session ended without success."""


@dataclass
class StackQueryError(PollError):
    """A status query failed in a way that is not a convergence signal."""

    stack_name: str
    message: str

    def __str__(self) -> str:
        return f"Failed to query stack {self.stack_name}: {self.message}"


@dataclass
class StackOperationFailed(PollError):
    """The stack reached a failure or rollback status."""

    stack_name: str
    status: str
    failures: List[FailureDetail] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"Stack {self.stack_name} failed with status {self.status} "
            f"({len(self.failures)} failed resources)"
        )


@dataclass
class StackTimeoutError(PollError):
    """Convergence did not finish within the configured timeout."""

    stack_name: str
    last_status: Optional[str]
    elapsed_seconds: float

    def __str__(self) -> str:
        return (
            f"Timed out after {self.elapsed_seconds:.0f}s waiting for stack "
            f"{self.stack_name} (last status: {self.last_status or 'unknown'})"
        )
