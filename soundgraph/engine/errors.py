"""
Typed errors raised by the engine.

Routers never see storage exceptions directly: the storage layer converts
them to StorageFailure, and main.py maps every EngineError to an HTTP status.
"""


class EngineError(Exception):
    """Base class for every error the engine raises."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(EngineError):
    """Malformed identifier or pagination parameter."""


class NotFound(EngineError):
    """A referenced user does not exist."""


class StorageFailure(EngineError):
    """The store is unreachable or rejected a write (e.g. a write conflict)."""


class InconsistentState(EngineError):
    """The follow graph did not end up in the state a toggle reported."""
