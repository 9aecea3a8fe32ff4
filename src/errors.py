#!/usr/bin/env python3
"""
Error taxonomy and caller-facing responses for the challenge updater.
"""

from __future__ import annotations

from typing import Any

SERVICE_UNAVAILABLE: dict[str, Any] = {
    "statusCode": 503,
    "error": "Service Unavailable",
    "message": "Please try again soon",
}


class ChallengeUpdaterError(Exception):
    """Base class for all challenge updater errors."""


class ConfigError(ChallengeUpdaterError):
    """Configuration could not be loaded."""


class ValidationError(ChallengeUpdaterError):
    """The incoming request is malformed."""

    def __init__(self, field: str):
        super().__init__(f"Invalid {field}")
        self.field = field

    def to_response(self) -> dict[str, Any]:
        return {"statusCode": 400, "error": "Bad Request", "message": str(self)}


class NotFoundError(ChallengeUpdaterError):
    """No hosted zone matches the requested domain."""

    def __init__(self, domain: str):
        super().__init__(f"Domain {domain} not found")
        self.domain = domain

    def to_response(self) -> dict[str, Any]:
        return {"statusCode": 404, "error": "Not Found", "message": str(self)}


class DependencyError(ChallengeUpdaterError):
    """
    A call to the DNS provider or the notification transport failed.

    The underlying exception is kept as ``__cause__`` for logging only; it is
    never part of the response.
    """

    def __init__(self, operation: str, detail: str = ""):
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.operation = operation

    def to_response(self) -> dict[str, Any]:
        return dict(SERVICE_UNAVAILABLE)


def service_unavailable() -> dict[str, Any]:
    """Return a fresh copy of the generic 503 response."""
    return dict(SERVICE_UNAVAILABLE)
