"""Exception hierarchy."""

from __future__ import annotations


class TaskMasterError(Exception):
    """Base exception for taskmaster errors."""


class OperationContractError(TaskMasterError):
    """An operation broke its execution contract.

    Operations must absorb their own faults and return a timed result.
    Raising, or returning anything else, is fatal to the enclosing run.

    Attributes:
        kind: Kind of the offending operation.
        message: Human-readable error message.
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"Operation '{kind}' violated its contract: {message}")
        self.kind = kind
        self.message = message


class OperationCancelledError(TaskMasterError):
    """The cancellation signal was set before an operation's work finished."""

    def __init__(self, message: str = "cancelled") -> None:
        super().__init__(message)
        self.message = message
