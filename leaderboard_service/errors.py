"""Typed failures raised by the leaderboard services.

The HTTP layer maps ``status_code`` onto the response; the services never
deal with transport concerns themselves.
"""
from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

F = TypeVar("F", bound=Callable[..., Any])


class LeaderboardError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LeaderboardError):
    """Missing or malformed input, detected before any data access."""

    status_code = 400


class NotFoundError(LeaderboardError):
    status_code = 404


class ConflictError(LeaderboardError):
    status_code = 409


class InternalError(LeaderboardError):
    """Unclassified data-access failure. Carries the diagnostic message."""

    status_code = 500

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.detail = detail


def internal_errors(message: str) -> Callable[[F], F]:
    """Surface unclassified data-access failures as :class:`InternalError`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as exc:
                raise InternalError(message, detail=str(exc)) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
