"""
Handover report contracts.

A handover report records the physical condition of the devices at delivery
(CHECKOUT) or return (CHECKIN). Staff sign first; the customer then signs with
the same email-PIN pattern used for contracts.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field

from .interfaces import ApiModel, HandoverType


class HandoverStaff(ApiModel):
    staff_id: Optional[int] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class HandoverReportItem(ApiModel):
    device_id: Optional[int] = None
    device_serial_number: Optional[str] = None
    device_model_name: Optional[str] = None
    evidence_urls: List[str] = Field(default_factory=list)


class HandoverReport(ApiModel):
    handover_report_id: int
    order_id: Optional[int] = None
    task_id: Optional[int] = None
    handover_type: Optional[HandoverType] = None
    status: str = ""
    handover_date_time: Optional[str] = None
    handover_location: Optional[str] = None
    customer_signed: bool = False
    staff_signed: bool = False
    customer_signed_at: Optional[str] = None
    staff_signed_at: Optional[str] = None
    items: List[HandoverReportItem] = Field(default_factory=list)
    delivery_staff: List[HandoverStaff] = Field(default_factory=list)
    device_conditions: List[Any] = Field(default_factory=list)
    discrepancies: List[Any] = Field(default_factory=list)

    @property
    def awaits_customer_signature(self) -> bool:
        return not self.customer_signed and self.status.upper() in {"DRAFT", "STAFF_SIGNED"}


class SignHandoverRequest(ApiModel):
    pin_code: str
    customer_signature: str
