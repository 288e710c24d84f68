"""
Rental Orders HTTP Client.

Creates, lists, searches, extends and confirms the return of rental orders.
All status transitions are owned by the backend; this client validates the
caller's input, sends the request and unwraps the envelope. Nothing is cached.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.contracts.orders import (
    OrderDetailRequest,
    PaginatedOrders,
    RentalOrder,
    RentalWindow,
    format_wire_datetime,
    to_naive_local,
)
from src.integrations.policy.errors import ValidationError
from src.integrations.policy.input_checks import require_positive_id
from src.integrations.policy.response_wrappers import require_session, unwrap, validate_envelope

logger = logging.getLogger(__name__)

# Trailing zone designator: Z, +07:00, -0530, ...
ZONE_SUFFIX = re.compile(r"(?:[Zz]|[+-]\d{2}(?::?\d{2})?)$")

ALL_STATUSES = "ALL"


def normalize_extension_time(value: Union[str, datetime, date]) -> str:
    """
    Render an extension end time as a bare local YYYY-MM-DDTHH:MM:SS.

    The backend parses this as a local date-time; a zone suffix would be
    misread server-side, so it is stripped rather than converted.
    """
    if isinstance(value, (datetime, date)):
        return format_wire_datetime(value)

    raw = (value or "").strip()
    if not raw:
        raise ValidationError("Extended end time is required.", field_errors={"extendedEndTime": "required"})

    # Only strip after the time part so a date's own hyphens stay intact
    if "T" in raw or " " in raw:
        raw = ZONE_SUFFIX.sub("", raw)
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(
            f"Extended end time {value!r} is not a valid date-time.",
            field_errors={"extendedEndTime": "invalid date-time"},
        ) from exc
    return format_wire_datetime(parsed)


def report_inconsistent_orders(orders: Sequence[RentalOrder]) -> List[RentalOrder]:
    """Log a warning for every order whose data breaks its bookkeeping rules; returns the orders unchanged."""
    for order in orders:
        for issue in order.consistency_issues:
            logger.warning("Rental order %s has inconsistent data: %s", order.order_id, issue)
    return list(orders)


class RentalOrdersClient:
    def __init__(self, transport: ApiTransport, *, use_plan_dates: bool = False) -> None:
        self.transport = transport
        self.use_plan_dates = use_plan_dates

    # -- Creation --

    def build_create_payload(
        self,
        window: RentalWindow,
        shipping_address: str,
        order_details: Sequence[OrderDetailRequest],
    ) -> Dict[str, Any]:
        """Validate the order locally and build the request body. Raises ValidationError."""
        errors: Dict[str, str] = {}

        if not order_details:
            errors["orderDetails"] = "Your cart is empty. Add at least one device."
        else:
            for index, detail in enumerate(order_details):
                if detail.device_model_id <= 0:
                    errors[f"orderDetails[{index}].deviceModelId"] = "must be a positive integer"
                if detail.quantity < 1:
                    errors[f"orderDetails[{index}].quantity"] = "must be at least 1"

        if window.start is None or window.end is None:
            errors["window"] = "Both a start and an end date are required."
        elif to_naive_local(window.end) <= to_naive_local(window.start):
            errors["window"] = "The rental end date must be after the start date."

        address = (shipping_address or "").strip()
        if not address:
            errors["shippingAddress"] = "A shipping address is required."

        if errors:
            message = next(iter(errors.values()))
            raise ValidationError(message, field_errors=errors)

        start_key, end_key = ("planStartDate", "planEndDate") if self.use_plan_dates else ("startDate", "endDate")
        return {
            start_key: format_wire_datetime(window.start),
            end_key: format_wire_datetime(window.end),
            "shippingAddress": address,
            "orderDetails": [detail.to_payload() for detail in order_details],
        }

    async def create_order(
        self,
        window: RentalWindow,
        shipping_address: str,
        order_details: Sequence[OrderDetailRequest],
        session: Optional[SessionCredentials],
    ) -> RentalOrder:
        payload = self.build_create_payload(window, shipping_address, order_details)
        session = require_session(session, "create a rental order")

        response = await self.transport.execute_with_retry(
            "POST",
            self.transport.build_url("rental-orders"),
            session=session,
            json=payload,
            idempotent=False,
        )
        order = unwrap(validate_envelope(response, RentalOrder, action="create the rental order"))
        logger.info("Created rental order %s with status %s", order.order_id, order.order_status)
        return order

    # -- Queries --

    async def list_orders(self, session: Optional[SessionCredentials]) -> List[RentalOrder]:
        session = require_session(session, "load rental orders")
        response = await self.transport.get("rental-orders", session=session)
        orders = unwrap(validate_envelope(response, RentalOrder, action="load rental orders", many=True))
        return report_inconsistent_orders(orders)

    async def fetch_order(self, session: Optional[SessionCredentials], order_id: int) -> RentalOrder:
        session = require_session(session, "load the rental order")
        require_positive_id(order_id, "orderId")
        response = await self.transport.get("rental-orders", order_id, session=session)
        order = unwrap(validate_envelope(response, RentalOrder, action=f"load rental order {order_id}"))
        report_inconsistent_orders([order])
        return order

    async def search_orders(
        self,
        session: Optional[SessionCredentials],
        *,
        page: int = 0,
        size: int = 10,
        order_status: Optional[str] = None,
        sort: Optional[Sequence[str]] = None,
    ) -> PaginatedOrders:
        session = require_session(session, "search rental orders")
        if page < 0 or size < 1:
            raise ValidationError("Page must be >= 0 and size >= 1.", field_errors={"page": str(page), "size": str(size)})

        params: List[Tuple[str, Any]] = [("page", page), ("size", size)]
        if order_status and order_status.strip().upper() != ALL_STATUSES:
            params.append(("orderStatus", order_status.strip()))
        for key in sort or []:
            params.append(("sort", key))

        response = await self.transport.get("rental-orders", "search", session=session, params=params)
        page_of_orders = unwrap(validate_envelope(response, PaginatedOrders, action="search rental orders"))
        report_inconsistent_orders(page_of_orders.content)
        return page_of_orders

    # -- Lifecycle transitions --

    async def confirm_return(self, session: Optional[SessionCredentials], order_id: int) -> RentalOrder:
        session = require_session(session, "confirm the return")
        require_positive_id(order_id, "orderId")

        response = await self.transport.execute_with_retry(
            "PATCH",
            self.transport.build_url("rental-orders", order_id, "confirm-return"),
            session=session,
            idempotent=False,
        )
        order = unwrap(validate_envelope(response, RentalOrder, action=f"confirm the return of order {order_id}"))
        logger.info("Return confirmed for order %s, status now %s", order_id, order.order_status)
        return order

    async def extend_order(
        self,
        session: Optional[SessionCredentials],
        order_id: int,
        new_end: Union[str, datetime, date],
    ) -> RentalOrder:
        session = require_session(session, "extend the rental order")
        require_positive_id(order_id, "rentalOrderId")
        payload = {
            "rentalOrderId": order_id,
            "extendedEndTime": normalize_extension_time(new_end),
        }

        response = await self.transport.execute_with_retry(
            "POST",
            self.transport.build_url("rental-orders", "extend"),
            session=session,
            json=payload,
            idempotent=False,
        )
        order = unwrap(validate_envelope(response, RentalOrder, action=f"extend rental order {order_id}"))
        logger.info("Extension requested for order %s until %s", order_id, payload["extendedEndTime"])
        return order
