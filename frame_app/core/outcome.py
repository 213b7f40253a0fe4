from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "InvalidArgument"
    WINDOW_CREATION_BLOCKED = "WindowCreationBlocked"
    INVALID_PAYLOAD = "InvalidPayload"
    MISSING_REQUIRED_FIELDS = "MissingRequiredFields"
    UNRESOLVED_TARGET = "UnresolvedTarget"
    INVALID_TARGET_TYPE = "InvalidTargetType"
    STORAGE_FAILURE = "StorageFailure"
    REMOTE_FAILURE = "RemoteFailure"
    UNEXPECTED = "Unexpected"


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    missing: Tuple[str, ...] = ()
    stage: Optional[str] = None


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Tagged success/failure. Truthiness follows `ok`, so callers that only
    care about the boolean can write `if publisher.publish(props): ...`.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[Failure] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Failure) -> "Outcome[T]":
        return cls(ok=False, error=error)
