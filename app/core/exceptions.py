"""Application-wide exception hierarchy for CreatorSync.

Every error the core raises subclasses ``MatchmakingError`` so the HTTP layer
can turn the whole family into a stable response shape with one handler.

Hierarchy::

    MatchmakingError
    ├── ValidationError      (400)
    ├── ForbiddenError       (403)
    ├── NotFoundError        (404)
    ├── ConflictError        (409)
    ├── InvalidStateError    (409)
    └── UnavailableError     (503)
"""

from __future__ import annotations


class MatchmakingError(Exception):
    """Base class for all CreatorSync exceptions.

    Args:
        detail: Human-readable description shown to the client.
    """

    code = "error"
    status_code = 500

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail or self.__class__.__doc__.strip().splitlines()[0]


class ValidationError(MatchmakingError):
    """Missing or malformed input."""

    code = "validation"
    status_code = 400


class ForbiddenError(MatchmakingError):
    """Caller's role or ownership does not allow this operation."""

    code = "forbidden"
    status_code = 403


class NotFoundError(MatchmakingError):
    """Entity does not exist or does not belong to the caller."""

    code = "not_found"
    status_code = 404


class ConflictError(MatchmakingError):
    """Entity already exists."""

    code = "conflict"
    status_code = 409


class InvalidStateError(MatchmakingError):
    """Transition is not allowed from the current state.

    Args:
        detail: Human-readable description.
        current: Status the entity was found in, when known.
    """

    code = "invalid_state"
    status_code = 409

    def __init__(self, detail: str = "", current: str | None = None) -> None:
        super().__init__(detail)
        self.current = current


class UnavailableError(MatchmakingError):
    """Storage backend is unavailable. Not retried by the core."""

    code = "unavailable"
    status_code = 503
