"""
PIN signing workflow.

Purpose:
- Holds the caller-side state of one signing attempt:

      UNSIGNED --request_pin--> PIN_REQUESTED --sign--> SIGNED
                                     |   ^
                                     |   +-- request_pin (resend)
                                     +-- sign rejected by the server --> UNSIGNED

- One flow drives contracts, annexes and handover reports through a
  SigningTarget, so the three documents share the same rules.

Important:
- sign() outside PIN_REQUESTED raises SigningSequenceError before any
  network call.
- A rejected sign (ApiError, e.g. wrong or expired PIN) reverts to UNSIGNED;
  the caller must request a fresh PIN.
- A transport failure during sign keeps PIN_REQUESTED; the PIN is still valid
  server-side and the caller may retry.
- The HTTP clients themselves do not enforce this ordering. Calling them
  directly out of order is rejected by the server and surfaces as ApiError.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from src.integrations.clients.real_http.annexes import AnnexesClient
from src.integrations.clients.real_http.contracts import ContractsClient
from src.integrations.clients.real_http.handover_reports import HandoverReportsClient
from src.integrations.contracts.agreements import Contract, ContractAnnex
from src.integrations.contracts.handover import HandoverReport
from src.integrations.contracts.interfaces import SessionCredentials, SessionProvider, resolve_session
from src.integrations.policy.errors import ApiError, SigningSequenceError, TransportError
from src.integrations.policy.input_checks import require_email

logger = logging.getLogger(__name__)


class SigningState(str, Enum):
    UNSIGNED = "UNSIGNED"
    PIN_REQUESTED = "PIN_REQUESTED"
    SIGNED = "SIGNED"


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------

class SigningTarget(ABC):
    """A document that is signed with an emailed PIN."""

    subject: str = "document"

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Stable id used in log lines, e.g. 'contract 12'."""

    @abstractmethod
    async def send_pin(self, session: Optional[SessionCredentials], email: str) -> Any:
        ...

    @abstractmethod
    async def sign(self, session: Optional[SessionCredentials], pin_code: str, email: str) -> Any:
        ...


class ContractSigningTarget(SigningTarget):
    subject = "contract"

    def __init__(self, client: ContractsClient, contract_id: int) -> None:
        self.client = client
        self.contract_id = contract_id

    @property
    def identifier(self) -> str:
        return f"contract {self.contract_id}"

    async def send_pin(self, session: Optional[SessionCredentials], email: str) -> Any:
        return await self.client.send_contract_pin(session, self.contract_id, email)

    async def sign(self, session: Optional[SessionCredentials], pin_code: str, email: str) -> Any:
        return await self.client.sign_contract(session, self.contract_id, pin_code)


class AnnexSigningTarget(SigningTarget):
    subject = "annex"

    def __init__(self, client: AnnexesClient, contract_id: int, annex_id: int) -> None:
        self.client = client
        self.contract_id = contract_id
        self.annex_id = annex_id

    @property
    def identifier(self) -> str:
        return f"annex {self.annex_id} of contract {self.contract_id}"

    async def send_pin(self, session: Optional[SessionCredentials], email: str) -> Any:
        return await self.client.send_annex_pin(session, self.contract_id, self.annex_id, email)

    async def sign(self, session: Optional[SessionCredentials], pin_code: str, email: str) -> Any:
        return await self.client.sign_annex(session, self.contract_id, self.annex_id, pin_code)


class HandoverSigningTarget(SigningTarget):
    """The customer's signature on a handover report is the email that received the PIN."""

    subject = "handover report"

    def __init__(self, client: HandoverReportsClient, report_id: int) -> None:
        self.client = client
        self.report_id = report_id

    @property
    def identifier(self) -> str:
        return f"handover report {self.report_id}"

    async def send_pin(self, session: Optional[SessionCredentials], email: str) -> Any:
        return await self.client.send_handover_pin(session, self.report_id, email)

    async def sign(self, session: Optional[SessionCredentials], pin_code: str, email: str) -> Any:
        return await self.client.sign_handover_report(session, self.report_id, pin_code, customer_signature=email)


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------

class SigningFlow:
    def __init__(
        self,
        target: SigningTarget,
        sessions: SessionProvider,
        *,
        initial_state: SigningState = SigningState.UNSIGNED,
    ) -> None:
        self.target = target
        self.sessions = sessions
        self.state = initial_state
        self.email: Optional[str] = None
        self.result: Any = None

    # -- Factories --

    @classmethod
    def for_contract(cls, client: ContractsClient, contract: Contract, sessions: SessionProvider) -> "SigningFlow":
        state = SigningState.SIGNED if contract.is_signed_by_customer else SigningState.UNSIGNED
        return cls(ContractSigningTarget(client, contract.contract_id), sessions, initial_state=state)

    @classmethod
    def for_annex(cls, client: AnnexesClient, annex: ContractAnnex, sessions: SessionProvider) -> "SigningFlow":
        state = SigningState.SIGNED if annex.is_fully_signed else SigningState.UNSIGNED
        return cls(AnnexSigningTarget(client, annex.contract_id, annex.annex_id), sessions, initial_state=state)

    @classmethod
    def for_handover_report(
        cls, client: HandoverReportsClient, report: HandoverReport, sessions: SessionProvider
    ) -> "SigningFlow":
        state = SigningState.SIGNED if report.customer_signed else SigningState.UNSIGNED
        return cls(HandoverSigningTarget(client, report.handover_report_id), sessions, initial_state=state)

    # -- Transitions --

    @property
    def can_sign(self) -> bool:
        return self.state is SigningState.PIN_REQUESTED

    async def request_pin(self, email: str) -> Any:
        """Send (or resend) the PIN email. Allowed from UNSIGNED and PIN_REQUESTED."""
        if self.state is SigningState.SIGNED:
            raise SigningSequenceError(
                f"The {self.target.subject} is already signed.", state=self.state.value
            )
        address = require_email(email, check_format=True)
        session = await resolve_session(self.sessions)

        result = await self.target.send_pin(session, address)
        resend = self.state is SigningState.PIN_REQUESTED
        self.state = SigningState.PIN_REQUESTED
        self.email = address
        logger.info("PIN %s for %s", "resent" if resend else "requested", self.target.identifier)
        return result

    async def sign(self, pin_code: str) -> Any:
        if self.state is not SigningState.PIN_REQUESTED:
            raise SigningSequenceError(
                f"Request a verification code before signing the {self.target.subject}.",
                state=self.state.value,
            )
        session = await resolve_session(self.sessions)

        try:
            result = await self.target.sign(session, pin_code, self.email or "")
        except ApiError as exc:
            logger.warning(
                "Signing %s rejected (status %s), a new PIN is required", self.target.identifier, exc.status
            )
            self.state = SigningState.UNSIGNED
            raise
        except TransportError:
            logger.warning("Signing %s did not reach the server, PIN kept", self.target.identifier)
            raise

        self.state = SigningState.SIGNED
        self.result = result
        logger.info("%s signed", self.target.identifier.capitalize())
        return result

    def reset(self) -> None:
        self.state = SigningState.UNSIGNED
        self.email = None
        self.result = None
