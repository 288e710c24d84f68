"""
Contract loading for an open order view.

The view that shows an order's contract can be closed, or switched to another
order, while a lookup is still in flight. Each load takes a ticket; when the
response arrives for a ticket that is no longer current (or after close())
the result is discarded and None is returned. In-flight requests are not
aborted, only ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.integrations.clients.real_http.contracts import ContractsClient
from src.integrations.contracts.agreements import Contract
from src.integrations.contracts.interfaces import SessionProvider, resolve_session
from src.integrations.policy.errors import AuthError, RentalClientError

logger = logging.getLogger(__name__)

NO_CONTRACT_MESSAGE = "No rental contract is available for this order yet."
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
LOAD_FAILED_MESSAGE = "Failed to load rental contract. Please try again."


@dataclass(frozen=True)
class ContractViewResult:
    order_id: int
    contract: Optional[Contract] = None
    error_message: Optional[str] = None

    @property
    def already_signed(self) -> bool:
        return self.contract is not None and self.contract.is_signed_by_customer


class ContractViewLoader:
    def __init__(self, contracts: ContractsClient, sessions: SessionProvider) -> None:
        self.contracts = contracts
        self.sessions = sessions
        self._ticket = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_current(self, ticket: int) -> bool:
        return not self._closed and ticket == self._ticket

    async def load_for_order(self, order_id: int) -> Optional[ContractViewResult]:
        """Load the order's contract; None when this load was superseded or the view closed."""
        self._ticket += 1
        ticket = self._ticket
        result = await self._fetch(order_id)

        if not self.is_current(ticket):
            logger.debug("Discarding stale contract load for order %s (ticket %d)", order_id, ticket)
            return None
        return result

    async def _fetch(self, order_id: int) -> ContractViewResult:
        try:
            session = await resolve_session(self.sessions)
            contract = await self.contracts.fetch_contract_for_order(session, order_id)
        except AuthError:
            return ContractViewResult(order_id=order_id, error_message=SESSION_EXPIRED_MESSAGE)
        except RentalClientError as exc:
            logger.warning("Failed to load contract for order %s: %s", order_id, exc)
            return ContractViewResult(order_id=order_id, error_message=exc.message or LOAD_FAILED_MESSAGE)

        if contract is None:
            return ContractViewResult(order_id=order_id, error_message=NO_CONTRACT_MESSAGE)
        return ContractViewResult(order_id=order_id, contract=contract)

    def close(self) -> None:
        self._closed = True
