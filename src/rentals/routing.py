"""
Post-order routing.

After an order is created (or reloaded) the caller must land on the right
next workflow. Orders waiting for identity verification go to KYC, orders in
the deposit settlement phase go to the settlement review; everything else
goes to the regular order confirmation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from src.integrations.clients.real_http.rental_orders import RentalOrdersClient
from src.integrations.contracts.interfaces import SessionProvider, resolve_session
from src.integrations.contracts.orders import OrderDetailRequest, RentalOrder, RentalWindow
from src.rentals.status import StatusMeta, is_settlement_phase, normalize_status, requires_kyc

logger = logging.getLogger(__name__)


class NextStep(str, Enum):
    KYC_VERIFICATION = "KYC_VERIFICATION"
    SETTLEMENT_REVIEW = "SETTLEMENT_REVIEW"
    ORDER_CONFIRMATION = "ORDER_CONFIRMATION"


@dataclass(frozen=True)
class PlacedOrder:
    order: RentalOrder
    status: StatusMeta
    next_step: NextStep


def route_after_order(order: RentalOrder) -> NextStep:
    if requires_kyc(order.order_status):
        return NextStep.KYC_VERIFICATION
    if is_settlement_phase(order.order_status):
        return NextStep.SETTLEMENT_REVIEW
    return NextStep.ORDER_CONFIRMATION


async def place_order(
    orders: RentalOrdersClient,
    sessions: SessionProvider,
    window: RentalWindow,
    shipping_address: str,
    order_details: Sequence[OrderDetailRequest],
) -> PlacedOrder:
    """Create the order and decide where the customer goes next."""
    # Local validation first so an invalid cart never triggers a session refresh
    orders.build_create_payload(window, shipping_address, order_details)
    session = await resolve_session(sessions)
    order = await orders.create_order(window, shipping_address, order_details, session)

    next_step = route_after_order(order)
    logger.info("Order %s placed (%s), next step %s", order.order_id, order.order_status, next_step.value)
    return PlacedOrder(order=order, status=normalize_status(order.order_status), next_step=next_step)
