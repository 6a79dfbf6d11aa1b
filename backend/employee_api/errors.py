"""
Error taxonomy for the employee API.

EmployeeApiError
├── InvalidInput         -> 400
├── NotFound             -> 404
└── UpstreamFailure      -> 500
    └── UpstreamRateLimited

Anything that is not an EmployeeApiError is treated as unexpected (500).
"""

from __future__ import annotations


class EmployeeApiError(Exception):
    """Base class for all errors raised by this service."""


class InvalidInput(EmployeeApiError):
    """Bad search string or bad create payload."""


class NotFound(EmployeeApiError):
    """Unknown employee id."""


class UpstreamFailure(EmployeeApiError):
    """Network error, non-2xx status, malformed body or error envelope from upstream."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamRateLimited(UpstreamFailure):
    """Upstream kept answering 429 after every retry attempt."""
