"""Failure kinds raised by the scheduling core.

Every core operation raises exactly one of these on failure. Mapping a kind to a
transport status code is left to the HTTP layer.
"""

import enum


class FailureKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHORIZATION = "authorization"
    STATE_CONFLICT = "state_conflict"
    UNAUTHENTICATED = "unauthenticated"
    INTERNAL = "internal"


class SchedulingError(Exception):
    kind: FailureKind = FailureKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(SchedulingError):
    kind = FailureKind.VALIDATION


class NotFound(SchedulingError):
    kind = FailureKind.NOT_FOUND

    def __init__(self, resource: str, resource_id: int | None = None):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class AuthorizationFailure(SchedulingError):
    kind = FailureKind.AUTHORIZATION


class StateConflict(SchedulingError):
    kind = FailureKind.STATE_CONFLICT


class Unauthenticated(SchedulingError):
    kind = FailureKind.UNAUTHENTICATED


class InternalFailure(SchedulingError):
    kind = FailureKind.INTERNAL
