from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EnvelopeStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"


class SignatureMethod(str, Enum):
    EMAIL_OTP = "EMAIL_OTP"


class HandoverType(str, Enum):
    CHECKOUT = "CHECKOUT"      # delivery
    CHECKIN = "CHECKIN"        # return


# ---------------------------------------------------------------------------
# Shared base model
# ---------------------------------------------------------------------------

class ApiModel(BaseModel):
    """Wire model: snake_case attributes, camelCase JSON, unknown fields ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionCredentials:
    access_token: str
    token_type: Optional[str] = None

    def authorization_header(self) -> str:
        token_type = self.token_type if self.token_type else "Bearer"
        return f"{token_type} {self.access_token}"


class SessionProvider(ABC):
    """Supplies credentials; the integrations layer never owns their lifecycle."""

    @abstractmethod
    def current_session(self) -> Optional[SessionCredentials]:
        """Return the cached session, if any."""

    @abstractmethod
    async def ensure_session(self) -> Optional[SessionCredentials]:
        """Return a usable session, refreshing it if the provider can."""


class StaticSessionProvider(SessionProvider):
    """Fixed credentials, for scripts and tests."""

    def __init__(self, session: Optional[SessionCredentials]) -> None:
        self._session = session

    def current_session(self) -> Optional[SessionCredentials]:
        return self._session

    async def ensure_session(self) -> Optional[SessionCredentials]:
        return self._session


async def resolve_session(provider: SessionProvider) -> Optional[SessionCredentials]:
    """Use the cached session when it has a token, otherwise ask the provider."""
    session = provider.current_session()
    if session is not None and session.access_token:
        return session
    return await provider.ensure_session()
