"""
Deposit Settlements HTTP Client.

Purpose:
- Fetches the settlement proposed for an order once its devices are returned
- Sends the customer's single accept / reject answer

Important:
- "No settlement yet" is a normal state, returned as None and never raised.
- respond_settlement is irreversible and is not retried once the request
  may have reached the server.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.contracts.settlements import RespondSettlementRequest, Settlement
from src.integrations.policy.input_checks import require_positive_id
from src.integrations.policy.response_wrappers import Err, is_not_found, require_session, unwrap, validate_envelope

logger = logging.getLogger(__name__)


class SettlementsClient:
    def __init__(self, transport: ApiTransport) -> None:
        self.transport = transport

    async def fetch_settlement(self, session: Optional[SessionCredentials], order_id: int) -> Optional[Settlement]:
        session = require_session(session, "load the settlement")
        require_positive_id(order_id, "orderId", label="order identifier")

        response = await self.transport.get("settlements", "order", order_id, session=session)
        result = validate_envelope(
            response, Settlement, action=f"load the settlement for order {order_id}", allow_null_data=True
        )
        if isinstance(result, Err) and is_not_found(result):
            logger.info("No settlement proposed yet for order %s", order_id)
            return None
        return unwrap(result)

    async def respond_settlement(
        self,
        session: Optional[SessionCredentials],
        settlement_id: int,
        accepted: bool,
        note: Optional[str] = None,
    ) -> Settlement:
        session = require_session(session, "respond to the settlement")
        require_positive_id(settlement_id, "settlementId", label="settlement identifier")
        body = RespondSettlementRequest(accepted=bool(accepted), customer_note=(note or "").strip() or None)

        response = await self.transport.execute_with_retry(
            "POST",
            self.transport.build_url("settlements", settlement_id, "respond"),
            session=session,
            json=body.to_payload(),
            idempotent=False,
        )
        settlement = unwrap(validate_envelope(response, Settlement, action="respond to the settlement"))
        logger.info(
            "Settlement %s %s by customer, state now %s",
            settlement_id,
            "accepted" if accepted else "rejected",
            settlement.state,
        )
        return settlement
