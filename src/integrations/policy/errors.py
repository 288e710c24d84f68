"""
Client error taxonomy.

Every failure that leaves the integrations layer is one of these exceptions.
Messages are safe to show directly to an end user; structured details
(HTTP status, raw payload, attempted URLs, field errors) travel as attributes.

- ConfigurationError: base URL missing/invalid, bad config file. Never retried.
- TransportError: the server could not be reached after the scheme-swap retry.
- AuthError: no access token, HTTP 401, or an envelope reporting an expired session.
- ValidationError: a client-side precondition failed; nothing was sent.
- ApiError: non-2xx response or an envelope whose status is not SUCCESS.
- IntegrationResponseError: a 2xx response whose body could not be validated.
- SigningSequenceError: a PIN signing step was called out of order; nothing was sent.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class RentalClientError(Exception):
    """Base class for all errors raised by the rental client."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(RentalClientError):
    pass


class TransportError(RentalClientError):
    def __init__(self, message: str, *, attempted_urls: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.attempted_urls = attempted_urls or []


class AuthError(RentalClientError):
    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ValidationError(RentalClientError):
    """Raised before any network call when the caller's input is unusable.

    Attributes:
        field_errors: mapping of field name -> human-readable error message.
    """

    def __init__(self, message: str, *, field_errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class ApiError(RentalClientError):
    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        business_status: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.business_status = business_status
        self.payload = payload or {}


class IntegrationResponseError(ApiError):
    pass


class SigningSequenceError(RentalClientError):
    """A signing step was attempted out of order (e.g. sign before a PIN was requested)."""

    def __init__(self, message: str, *, state: Optional[str] = None) -> None:
        super().__init__(message)
        self.state = state
