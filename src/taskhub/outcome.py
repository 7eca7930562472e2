"""Typed operation outcomes.

Core operations never raise for expected failures. They return either
``Ok(value)`` or a ``Failure`` tagged with one of the kinds below, and
every call site checks which one it got before going further:

    result = await gate.resolve_project(project_id, principal_id)
    if isinstance(result, Failure):
        return result
    project = result.value

Only the HTTP boundary turns a Failure into a status code (see
taskhub.errors). Infrastructure problems (database down, bugs)
still propagate as ordinary exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    NOT_FOUND = "not_found"
    VALIDATION = "validation_error"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str


Outcome = Union[Ok[T], Failure]


# ─── Constructors for the failures the core produces ─────


def unauthorized() -> Failure:
    # One message for unknown account and wrong password alike.
    return Failure(FailureKind.UNAUTHORIZED, "Invalid email or password")


def token_expired() -> Failure:
    return Failure(FailureKind.TOKEN_EXPIRED, "Token has expired")


def token_invalid() -> Failure:
    return Failure(FailureKind.TOKEN_INVALID, "Invalid token")


def not_found(resource: str) -> Failure:
    return Failure(FailureKind.NOT_FOUND, f"{resource} not found")


def validation_error(message: str) -> Failure:
    return Failure(FailureKind.VALIDATION, message)


def conflict(message: str) -> Failure:
    return Failure(FailureKind.CONFLICT, message)
