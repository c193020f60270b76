"""
Data types shared by the stack submitter and the convergence poller.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional


class OperationKind(Enum):
    """Kind of mutating stack operation."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Outcome(Enum):
    """Classification of a single poll tick."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    NOT_FOUND = "not_found"


class AbsencePolicy(Enum):
    """How a poller treats a stack that no longer exists."""

    SUCCESS = "success"
    NOT_APPLICABLE = "not_applicable"


# Status that marks convergence for each operation kind
COMPLETE_STATUS = {
    OperationKind.CREATE: "CREATE_COMPLETE",
    OperationKind.UPDATE: "UPDATE_COMPLETE",
    OperationKind.DELETE: "DELETE_COMPLETE",
}


def is_failure_status(status: str, kind: Optional[OperationKind] = None) -> bool:
    """
    Check whether a raw stack status means the operation failed.

    A delete only fails with DELETE_FAILED; rollback statuses left over from
    an earlier create or update do not count against it.
    """
    if kind is OperationKind.DELETE:
        return status == "DELETE_FAILED"
    return status.endswith("_FAILED") or "ROLLBACK" in status


@dataclass(frozen=True)
class TemplateRef:
    """Reference to a CloudFormation template: a local file or a URL."""

    location: str

    @property
    def is_url(self) -> bool:
        return "://" in self.location

    def ensure_readable(self) -> None:
        """
        Raises:
            ValueError: If a URL does not use https (TemplateURL only accepts https)
            OSError: If a local template does not exist or cannot be opened
        """
        if self.is_url:
            if not self.location.startswith("https://"):
                raise ValueError(
                    f"Template URL must use https, got {self.location}"
                )
            return
        with open(self.location, "r"):
            pass

    def to_request(self) -> Dict[str, str]:
        """
        Build the template portion of a create/update request.

        Raises:
            OSError: If a local template cannot be read
        """
        if self.is_url:
            return {"TemplateURL": self.location}
        return {"TemplateBody": Path(self.location).read_text()}


@dataclass(frozen=True)
class StackOperation:
    """A create, update or delete request for one stack."""

    kind: OperationKind
    stack_name: str
    region: str
    template: Optional[TemplateRef] = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.stack_name:
            raise ValueError("Stack name must not be empty")
        if self.kind is not OperationKind.DELETE and self.template is None:
            raise ValueError(f"A template is required to {self.kind.value} a stack")

    def with_kind(self, kind: OperationKind) -> "StackOperation":
        """Same request, dispatched as a different operation kind."""
        return StackOperation(
            kind=kind,
            stack_name=self.stack_name,
            region=self.region,
            template=self.template,
            parameters=self.parameters,
            tags=self.tags,
        )


@dataclass(frozen=True)
class SubmitAck:
    """Acknowledgement of a submitted operation."""

    kind: OperationKind
    stack_name: str
    stack_id: Optional[str] = None
    no_changes: bool = False
    already_absent: bool = False

    @property
    def needs_polling(self) -> bool:
        return not (self.no_changes or self.already_absent)


@dataclass(frozen=True)
class PollResult:
    """Observation from one poll tick."""

    raw_status: Optional[str]
    elapsed_seconds: float
    outcome: Outcome

    @property
    def terminal(self) -> bool:
        return self.outcome is not Outcome.PENDING


@dataclass(frozen=True)
class FailureDetail:
    """A resource that failed during a stack operation."""

    logical_resource_id: str
    reason: str
    resource_type: str = ""
    status: str = ""
