from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from .interfaces import ApiModel, SignatureMethod

"""
Contract and annex contracts.

Defines the rental contract, its amendments (annexes), the signing payloads
and the signature record returned by the backend once a PIN is accepted.
The contract/annex content is rich text and stays opaque here.
"""


ANNEX_AWAITING_CUSTOMER = {"PENDING_CUSTOMER_SIGNATURE", "PENDING_SIGNATURE"}
ANNEX_FULLY_SIGNED = {"SIGNED", "ACTIVE"}


class Contract(ApiModel):
    contract_id: int
    contract_number: Optional[str] = None
    order_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    contract_type: Optional[str] = None
    status: str = ""
    customer_id: Optional[int] = None
    contract_content: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    rental_period_days: Optional[int] = None
    total_amount: Optional[float] = None
    deposit_amount: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    signed_at: Optional[str] = None
    admin_signed_at: Optional[str] = None
    customer_signed_at: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_signed_by_customer(self) -> bool:
        signed_at = (self.signed_at or "").strip()
        return bool(signed_at) and signed_at.lower() != "null"


class ContractAnnex(ApiModel):
    annex_id: int
    contract_id: int
    extension_id: Optional[int] = None
    original_order_id: Optional[int] = None
    annex_number: Optional[str] = None
    contract_number: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    annex_content: Optional[str] = None
    extension_start_date: Optional[datetime] = None
    extension_end_date: Optional[datetime] = None
    extension_days: Optional[int] = None
    extension_fee: Optional[float] = None
    total_payable: Optional[float] = None
    status: str = ""
    admin_signed_at: Optional[str] = None
    customer_signed_at: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def needs_customer_signature(self) -> bool:
        return self.status.upper() in ANNEX_AWAITING_CUSTOMER

    @property
    def is_fully_signed(self) -> bool:
        return self.status.upper() in ANNEX_FULLY_SIGNED


class SignatureRecord(ApiModel):
    """Proof object returned by the backend. Stored for display, never verified locally."""

    signature_id: Optional[int] = None
    contract_id: Optional[int] = None
    signature_hash: Optional[str] = None
    signature_method: Optional[str] = None
    signed_at: Optional[str] = None
    signature_status: Optional[str] = None
    audit_trail: List[Any] = Field(default_factory=list)


class SendPinRequest(ApiModel):
    email: str


class SignRequest(ApiModel):
    digital_signature: str
    pin_code: str
    signature_method: SignatureMethod = SignatureMethod.EMAIL_OTP
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
