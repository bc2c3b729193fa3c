"""Exception types raised by scoped-containers."""

from __future__ import annotations

from enum import Enum


class EngineOperation(str, Enum):
    """Container engine primitives the reaper relies on."""

    CONNECT = "connect"
    LIST = "list"
    STOP = "stop"
    PRUNE = "prune"


class ScopedContainersError(Exception):
    """Base class for all package errors."""


class EngineOperationError(ScopedContainersError):
    """A call to the container engine failed.

    Every engine-originating failure (connecting, listing, stopping or
    pruning) is wrapped into this single error kind. The original exception
    is kept on ``cause`` and chained as ``__cause__``.

    Attributes:
        operation: The engine primitive that failed
        cause: The underlying exception raised by the engine client
    """

    def __init__(self, operation: EngineOperation, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"engine operation failed ({operation.value}): {cause}")
