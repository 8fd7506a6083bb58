"""Error types for taskhier.

Every failure surfaced by the client, the cache or the free functions is a
TaskError carrying an ErrorKind, so callers can branch on the kind without
matching exception classes.
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Machine-readable failure categories."""

    IO = "io"  # process could not be spawned or its output read
    DECODE = "decode"  # output is not valid text or not parseable
    NOT_FOUND = "not_found"  # uuid missing from cache, export or feedback
    HIERARCHY = "hierarchy"  # partof links form a cycle


class TaskError(Exception):
    """Standard error for task store and cache failures.

    Attributes:
        message: Human-readable error message
        kind: Failure category
        details: Additional error details (command, uuid, ...)
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": False,
            "error": {
                "message": self.message,
                "kind": self.kind.value,
                "details": self.details,
            },
        }

    @classmethod
    def not_found(cls, message: str, **details: Any) -> "TaskError":
        return cls(message, ErrorKind.NOT_FOUND, details)

    @classmethod
    def decode(cls, message: str, **details: Any) -> "TaskError":
        return cls(message, ErrorKind.DECODE, details)

    @classmethod
    def io(cls, message: str, **details: Any) -> "TaskError":
        return cls(message, ErrorKind.IO, details)
