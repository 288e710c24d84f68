from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from src.integrations.contracts.interfaces import EnvelopeStatus, SessionCredentials
from src.integrations.policy.errors import (
    ApiError,
    AuthError,
    IntegrationResponseError,
    RentalClientError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
AUTH_ENVELOPE_STATUSES = {EnvelopeStatus.UNAUTHORIZED.value, EnvelopeStatus.TOKEN_EXPIRED.value}


class ApiEnvelope(BaseModel):
    """Uniform wrapper returned by every backend endpoint."""

    model_config = ConfigDict(extra="ignore")

    status: str
    message: Optional[str] = None
    details: Optional[str] = None
    code: Optional[int] = None
    data: Any = None

    @property
    def is_success(self) -> bool:
        return self.status == EnvelopeStatus.SUCCESS.value


# ---------------------------------------------------------------------------
# Tagged results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: RentalClientError

    @property
    def status(self) -> Optional[int]:
        return getattr(self.error, "status", None)


EnvelopeResult = Union[Ok[T], Err]


def unwrap(result: "EnvelopeResult[T]") -> T:
    """Return the value of an Ok result, raise the error of an Err."""
    if isinstance(result, Err):
        raise result.error
    return result.value


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def require_session(session: Optional[SessionCredentials], action: str) -> SessionCredentials:
    if session is None or not (session.access_token or "").strip():
        raise AuthError(f"An access token is required to {action}.")
    return session


def validate_envelope(
    response: httpx.Response,
    model: Optional[Type[M]] = None,
    *,
    action: str,
    many: bool = False,
    allow_null_data: bool = False,
) -> "EnvelopeResult[Any]":
    """
    Validate one backend response against the envelope contract.

    Success iff HTTP 2xx, envelope status SUCCESS and data present. With
    ``many`` the data must be a list (an empty list is a valid result); with
    ``allow_null_data`` a null data field yields ``Ok(None)``. ``model``
    validates the data; without it the raw data is returned.

    Args:
        action: human phrase used in fallback messages, e.g. "load rental orders".
    """
    if not response.is_success:
        return Err(_http_error(response, action))

    payload = _json_or_none(response)
    if not isinstance(payload, dict):
        return Err(IntegrationResponseError(
            f"The server returned an unreadable response while trying to {action}.",
            status=response.status_code,
        ))

    try:
        envelope = ApiEnvelope(**payload)
    except PydanticValidationError:
        return Err(IntegrationResponseError(
            f"The server returned an unexpected response while trying to {action}.",
            status=response.status_code,
            payload=payload,
        ))

    if not envelope.is_success:
        return Err(_envelope_error(envelope, payload, action, response.status_code))

    data = envelope.data
    if data is None:
        if many:
            return Err(IntegrationResponseError(
                envelope.message or f"Failed to {action}. Please try again.",
                status=response.status_code,
                payload=payload,
            ))
        if allow_null_data:
            return Ok(None)
        return Err(IntegrationResponseError(
            envelope.message or f"Failed to {action}. Please try again.",
            status=response.status_code,
            payload=payload,
        ))

    if many and not isinstance(data, list):
        return Err(IntegrationResponseError(
            f"Expected a list while trying to {action}.",
            status=response.status_code,
            payload=payload,
        ))

    if model is None:
        return Ok(data)

    try:
        if many:
            return Ok([model.model_validate(item) for item in data])
        return Ok(model.model_validate(data))
    except PydanticValidationError as exc:
        logger.error("Response validation failed while trying to %s: %s", action, exc)
        return Err(IntegrationResponseError(
            f"The server returned invalid data while trying to {action}.",
            status=response.status_code,
            payload=payload,
        ))


def ensure_success_status(response: httpx.Response, *, action: str) -> "EnvelopeResult[None]":
    """Status-only check for endpoints whose body carries nothing the caller needs."""
    if not response.is_success:
        return Err(_http_error(response, action))
    return Ok(None)


def extract_error_message(payload: Any) -> Optional[str]:
    """First non-empty of message / details / error."""
    if not isinstance(payload, dict):
        return None
    for key in ("message", "details", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def is_not_found(err: Err) -> bool:
    """
    True when the failure means "nothing there yet" rather than a real error.

    Important:
    - An HTTP 404 always counts.
    - A "not found" message only counts on an envelope error, i.e. a 2xx
      response whose envelope status is not SUCCESS. The same wording on a
      4xx/5xx status is still a failure.
    - Auth failures never count, whatever their message says.
    """
    error = err.error
    if isinstance(error, AuthError) or not isinstance(error, ApiError):
        return False
    if err.status == 404:
        return True
    if isinstance(error, IntegrationResponseError) or error.business_status is None:
        return False
    return "not found" in error.message.lower()


def _http_error(response: httpx.Response, action: str) -> RentalClientError:
    payload = _json_or_none(response)
    message = extract_error_message(payload)
    if response.status_code == 401:
        return AuthError(message or SESSION_EXPIRED_MESSAGE, status=401)
    logger.warning("Request to %s failed with status %s", action, response.status_code)
    return ApiError(
        message or f"Unable to {action} (status {response.status_code}).",
        status=response.status_code,
        payload=payload if isinstance(payload, dict) else {},
    )


def _envelope_error(envelope: ApiEnvelope, payload: Dict[str, Any], action: str, http_status: int) -> RentalClientError:
    message = extract_error_message(payload)
    status = envelope.code if envelope.code is not None else http_status
    if envelope.code == 401 or envelope.status.upper() in AUTH_ENVELOPE_STATUSES:
        return AuthError(message or SESSION_EXPIRED_MESSAGE, status=401)
    return ApiError(
        message or f"Failed to {action}. Please try again.",
        status=status,
        business_status=envelope.status,
        payload=payload,
    )


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


__all__: List[str] = [
    "ApiEnvelope",
    "Err",
    "EnvelopeResult",
    "Ok",
    "ensure_success_status",
    "extract_error_message",
    "is_not_found",
    "require_session",
    "unwrap",
    "validate_envelope",
]
