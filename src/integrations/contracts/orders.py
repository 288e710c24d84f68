from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import Field

from .interfaces import ApiModel

"""
Rental order contracts.

Request and response shapes for the rental-orders endpoints:
- creating an order (window, shipping address, order details)
- listing / searching orders (paginated)
- confirm-return and extension transitions

Both the real HTTP client and the mock backend use these models.
"""


@dataclass(frozen=True)
class RentalWindow:
    start: Union[date, datetime]
    end: Union[date, datetime]


class OrderDetailRequest(ApiModel):
    device_model_id: int
    quantity: int = 1


class OrderDetail(ApiModel):
    order_detail_id: Optional[int] = None
    device_model_id: int
    quantity: int = 1
    price_per_day: float = 0.0
    deposit_amount_per_unit: float = 0.0


class RentalOrder(ApiModel):
    order_id: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    plan_start_date: Optional[datetime] = None
    plan_end_date: Optional[datetime] = None
    shipping_address: Optional[str] = None
    order_status: str = ""
    deposit_amount: float = 0.0
    deposit_amount_held: float = 0.0
    deposit_amount_used: float = 0.0
    deposit_amount_refunded: float = 0.0
    total_price: float = 0.0
    price_per_day: float = 0.0
    created_at: Optional[datetime] = None
    customer_id: Optional[int] = None
    order_details: List[OrderDetail] = Field(default_factory=list)

    @property
    def deposit_balance(self) -> float:
        """Deposit still held and not yet used or refunded."""
        return self.deposit_amount_held - self.deposit_amount_used - self.deposit_amount_refunded

    @property
    def window_start(self) -> Optional[datetime]:
        return self.start_date or self.plan_start_date

    @property
    def window_end(self) -> Optional[datetime]:
        return self.end_date or self.plan_end_date

    @property
    def consistency_issues(self) -> List[str]:
        """
        Backend data that breaks the order's bookkeeping rules.

        Reported, not rejected: one bad order must not hide the customer's
        other orders, so callers log these and keep the order.
        """
        issues: List[str] = []
        if self.deposit_balance < 0:
            issues.append(
                f"deposit held ({self.deposit_amount_held}) is less than used + refunded "
                f"({self.deposit_amount_used} + {self.deposit_amount_refunded})"
            )
        start, end = self.window_start, self.window_end
        if start is not None and end is not None and to_naive_local(end) <= to_naive_local(start):
            issues.append("rental window end is not after its start")
        return issues

    @property
    def is_consistent(self) -> bool:
        return not self.consistency_issues


class PaginatedOrders(ApiModel):
    content: List[RentalOrder] = Field(default_factory=list)
    page: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0
    number_of_elements: Optional[int] = None
    last: bool = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

DateLike = Union[date, datetime]

WIRE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def to_naive_local(value: DateLike) -> datetime:
    """Drop any zone information, keeping the wall-clock time as given."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None, microsecond=0)
    return datetime(value.year, value.month, value.day)


def format_wire_datetime(value: DateLike) -> str:
    """Serialize as the bare YYYY-MM-DDTHH:MM:SS the backend expects."""
    return to_naive_local(value).strftime(WIRE_DATETIME_FORMAT)
