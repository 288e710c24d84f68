"""
Handover Reports HTTP Client.

Handover reports attest the condition of the devices at delivery and at
return. The customer counter-signs a staff-signed report with an email PIN.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.agreements import SendPinRequest
from src.integrations.contracts.handover import HandoverReport, SignHandoverRequest
from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.policy.input_checks import require_email, require_pin, require_positive_id
from src.integrations.policy.response_wrappers import (
    ensure_success_status,
    require_session,
    unwrap,
    validate_envelope,
)

logger = logging.getLogger(__name__)


class HandoverReportsClient:
    def __init__(self, transport: ApiTransport) -> None:
        self.transport = transport

    async def fetch_handover_reports(
        self,
        session: Optional[SessionCredentials],
        order_id: Optional[int] = None,
    ) -> List[HandoverReport]:
        """All of the customer's reports, or only those of one order."""
        session = require_session(session, "load handover reports")
        segments: List[object] = ["customers", "handover-reports"]
        if order_id is not None:
            require_positive_id(order_id, "orderId", label="order identifier")
            segments += ["orders", order_id]

        response = await self.transport.get(*segments, session=session)
        return unwrap(validate_envelope(response, HandoverReport, action="load handover reports", many=True))

    async def send_handover_pin(self, session: Optional[SessionCredentials], report_id: int, email: str) -> None:
        session = require_session(session, "request a verification code")
        require_positive_id(report_id, "handoverReportId", label="handover report ID")
        body = SendPinRequest(email=require_email(email))

        response = await self.transport.execute_with_retry(
            "POST",
            self.transport.build_url("customers", "handover-reports", report_id, "pin"),
            session=session,
            json=body.to_payload(),
        )
        unwrap(ensure_success_status(response, action="send PIN"))
        logger.info("Verification code requested for handover report %s", report_id)

    async def sign_handover_report(
        self,
        session: Optional[SessionCredentials],
        report_id: int,
        pin_code: str,
        customer_signature: Optional[str] = None,
    ) -> HandoverReport:
        session = require_session(session, "sign the handover report")
        require_positive_id(report_id, "handoverReportId", label="handover report ID")
        pin = require_pin(pin_code, subject="handover report")
        signature = (customer_signature or "").strip() or pin
        body = SignHandoverRequest(pin_code=pin, customer_signature=signature)

        response = await self.transport.execute_with_retry(
            "PATCH",
            self.transport.build_url("customers", "handover-reports", report_id, "signature"),
            session=session,
            json=body.to_payload(),
        )
        report = unwrap(validate_envelope(response, HandoverReport, action="sign handover report"))
        logger.info("Handover report %s signed by customer, status now %s", report_id, report.status)
        return report
