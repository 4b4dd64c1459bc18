# pos_backend/utils/results.py
"""Explicit success/failure values returned by the service layer.

Services never raise for validation or business-rule problems; they return a
``Failure`` and the HTTP layer decides how to present it (JSON error or
redirect with the error in the query string).
"""
import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from fastapi import HTTPException

T = TypeVar("T")


class FailureKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


HTTP_STATUS = {
    FailureKind.VALIDATION: 400,
    FailureKind.NOT_FOUND: 404,
    FailureKind.CONFLICT: 409,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


Result = Union[Ok[T], Failure]


def invalid(message: str) -> Failure:
    return Failure(FailureKind.VALIDATION, message)


def not_found(message: str) -> Failure:
    return Failure(FailureKind.NOT_FOUND, message)


def conflict(message: str) -> Failure:
    return Failure(FailureKind.CONFLICT, message)


def unwrap(result: "Result[T]") -> T:
    """Return the value of an ``Ok`` or raise the matching ``HTTPException``."""
    if isinstance(result, Failure):
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return result.value
