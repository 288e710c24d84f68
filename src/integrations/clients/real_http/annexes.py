"""
Contract Annexes HTTP Client.

An annex amends a signed contract, typically after an extension request.
It is signed with the same email PIN pattern as the contract itself.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.agreements import ContractAnnex, SendPinRequest, SignRequest
from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.policy.input_checks import require_email, require_pin, require_positive_id
from src.integrations.policy.response_wrappers import require_session, unwrap, validate_envelope

logger = logging.getLogger(__name__)


class AnnexesClient:
    def __init__(self, transport: ApiTransport) -> None:
        self.transport = transport

    def _annex_url(self, contract_id: int, annex_id: int, *segments: str) -> str:
        require_positive_id(contract_id, "contractId", label="contract identifier")
        require_positive_id(annex_id, "annexId", label="annex identifier")
        return self.transport.build_url("contracts", contract_id, "annexes", annex_id, *segments)

    async def fetch_annexes(self, session: Optional[SessionCredentials], contract_id: int) -> List[ContractAnnex]:
        session = require_session(session, "load contract annexes")
        require_positive_id(contract_id, "contractId", label="contract identifier")
        response = await self.transport.get("contracts", contract_id, "annexes", session=session)
        return unwrap(validate_envelope(response, ContractAnnex, action="load contract annexes", many=True))

    async def send_annex_pin(
        self,
        session: Optional[SessionCredentials],
        contract_id: int,
        annex_id: int,
        email: str,
    ) -> Any:
        session = require_session(session, "request a verification code")
        url = self._annex_url(contract_id, annex_id, "send-pin", "email")
        body = SendPinRequest(email=require_email(email))

        response = await self.transport.execute_with_retry("POST", url, session=session, json=body.to_payload())
        data = unwrap(validate_envelope(response, action="send the verification code", allow_null_data=True))
        logger.info("Verification code requested for annex %s of contract %s", annex_id, contract_id)
        return data

    async def sign_annex(
        self,
        session: Optional[SessionCredentials],
        contract_id: int,
        annex_id: int,
        pin_code: str,
    ) -> Any:
        session = require_session(session, "sign the annex")
        url = self._annex_url(contract_id, annex_id, "sign", "customer")
        pin = require_pin(pin_code, subject="annex")
        body = SignRequest(digital_signature=pin, pin_code=pin)

        response = await self.transport.execute_with_retry("POST", url, session=session, json=body.to_payload())
        data = unwrap(validate_envelope(response, action="sign the annex", allow_null_data=True))
        logger.info("Annex %s of contract %s signed by customer", annex_id, contract_id)
        return data
