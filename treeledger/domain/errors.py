"""
Domain errors raised by the registries.

Every error carries a ``kind`` that the ledger reports back to callers
in an ``Err`` result.
"""
from enum import Enum
from typing import Type, TypeVar

E = TypeVar("E", bound=Enum)


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    ALREADY_EXISTS = "AlreadyExists"
    UNAUTHORIZED = "Unauthorized"
    INVALID_INPUT = "InvalidInput"
    INVALID_TRANSITION = "InvalidTransition"


class RegistryError(Exception):
    """Base exception for rejected registry operations."""
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RegistryError):
    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(RegistryError):
    kind = ErrorKind.ALREADY_EXISTS


class UnauthorizedError(RegistryError):
    kind = ErrorKind.UNAUTHORIZED


class InvalidInputError(RegistryError):
    kind = ErrorKind.INVALID_INPUT


class InvalidTransitionError(RegistryError):
    kind = ErrorKind.INVALID_TRANSITION


def parse_enum(enum_cls: Type[E], value) -> E:
    """Coerce a raw value into a closed enum, rejecting unknown members."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(
            f"Invalid {enum_cls.__name__} '{value}' (expected one of: {allowed})"
        )
