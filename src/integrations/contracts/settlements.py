from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .interfaces import ApiModel

"""
Settlement contracts.

A settlement is the backend's proposed resolution of the security deposit
after the devices come back:

    final_return_amount = total_deposit - (damage_fee + late_fee + accessory_fee)

positive -> refunded to the customer, negative -> the customer owes the difference.
The customer answers once (accept / reject); there is no undo.
"""

# States after which the customer can no longer respond
SETTLEMENT_CLOSED_STATES = {"ISSUED", "REJECTED", "CANCELLED", "CLOSED"}


class Settlement(ApiModel):
    settlement_id: int
    order_id: Optional[int] = None
    state: str = ""
    total_deposit: float = 0.0
    damage_fee: float = 0.0
    late_fee: float = 0.0
    accessory_fee: float = 0.0
    final_return_amount: float = 0.0
    customer_note: Optional[str] = None
    staff_note: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    responded_at: Optional[str] = None

    @property
    def can_respond(self) -> bool:
        return can_respond_settlement(self.state)

    def split_amounts(self) -> "SettlementAmounts":
        return split_settlement_amounts(self.final_return_amount)


class RespondSettlementRequest(ApiModel):
    accepted: bool
    customer_note: Optional[str] = None


@dataclass(frozen=True)
class SettlementAmounts:
    refund_amount: float
    customer_due_amount: float
    net_amount: float


def split_settlement_amounts(final_amount: float) -> SettlementAmounts:
    """Split the signed final amount into what is refunded and what is owed."""
    return SettlementAmounts(
        refund_amount=final_amount if final_amount > 0 else 0.0,
        customer_due_amount=abs(final_amount) if final_amount < 0 else 0.0,
        net_amount=final_amount,
    )


def can_respond_settlement(state: Optional[str]) -> bool:
    return (state or "").strip().upper() not in SETTLEMENT_CLOSED_STATES
