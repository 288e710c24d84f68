"""
Rental Contracts HTTP Client.

Purpose:
- Looks up the customer's rental contracts
- Requests an email PIN and signs a contract with it

Important:
- The backend decides whether a sign call is allowed; this client does not
  track whether a PIN was sent. See src/rentals/signing.py for the
  client-side sequencing guard.
- PINs and tokens are never logged.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.agreements import Contract, SendPinRequest, SignatureRecord, SignRequest
from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.policy.input_checks import require_email, require_pin, require_positive_id
from src.integrations.policy.response_wrappers import require_session, unwrap, validate_envelope

logger = logging.getLogger(__name__)


class ContractsClient:
    def __init__(self, transport: ApiTransport, *, device_info: Optional[str] = None) -> None:
        self.transport = transport
        self.device_info = device_info

    async def fetch_contracts(self, session: Optional[SessionCredentials]) -> List[Contract]:
        session = require_session(session, "load contracts")
        response = await self.transport.get("contracts", "my-contracts", session=session)
        return unwrap(validate_envelope(response, Contract, action="load contracts", many=True))

    async def fetch_contract(self, session: Optional[SessionCredentials], contract_id: int) -> Contract:
        session = require_session(session, "load the contract")
        require_positive_id(contract_id, "contractId", label="contract identifier")
        response = await self.transport.get("contracts", contract_id, session=session)
        return unwrap(validate_envelope(response, Contract, action=f"load contract {contract_id}"))

    async def fetch_contract_for_order(self, session: Optional[SessionCredentials], order_id: int) -> Optional[Contract]:
        """The contract generated for an order, or None when there is none yet."""
        require_positive_id(order_id, "orderId", label="order identifier")
        for contract in await self.fetch_contracts(session):
            if contract.order_id == order_id:
                return contract
        return None

    async def send_contract_pin(self, session: Optional[SessionCredentials], contract_id: int, email: str) -> Any:
        session = require_session(session, "request a verification code")
        require_positive_id(contract_id, "contractId", label="contract identifier")
        body = SendPinRequest(email=require_email(email))

        response = await self.transport.execute_with_retry(
            "POST",
            self.transport.build_url("contracts", contract_id, "send-pin", "email"),
            session=session,
            json=body.to_payload(),
        )
        data = unwrap(validate_envelope(response, action="send the verification code", allow_null_data=True))
        logger.info("Verification code requested for contract %s", contract_id)
        return data

    async def sign_contract(
        self,
        session: Optional[SessionCredentials],
        contract_id: int,
        pin_code: str,
        *,
        ip_address: Optional[str] = None,
    ) -> SignatureRecord:
        session = require_session(session, "sign the contract")
        require_positive_id(contract_id, "contractId", label="contract identifier")
        pin = require_pin(pin_code, subject="contract")
        body = SignRequest(
            digital_signature=pin,
            pin_code=pin,
            device_info=self.device_info,
            ip_address=ip_address,
        )

        response = await self.transport.execute_with_retry(
            "POST",
            self.transport.build_url("contracts", contract_id, "sign"),
            session=session,
            json=body.to_payload(),
        )
        record = unwrap(validate_envelope(response, SignatureRecord, action="sign the contract"))
        logger.info("Contract %s signed (signature status %s)", contract_id, record.signature_status)
        return record
