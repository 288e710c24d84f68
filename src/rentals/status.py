"""
Order status normalization.

The backend reports order status as free text. This module collapses it into
four display buckets while keeping the original value for display:

    Pending    PENDING, PENDING_KYC, PROCESSING, APPROVED, AWAITING_*, ...
    Delivered  DELIVERING, DELIVERED, SHIPPED, OUT_FOR_DELIVERY, ...
    In Use     IN_USE, ACTIVE, IN_PROGRESS, EXTENSION_REQUESTED, ...
    Completed  COMPLETED, RETURNED, CLOSED, FINISHED, CANCELLED, REJECTED

normalize_status is total and pure: any input (None and "" included) maps to
a StatusMeta, and the same input always maps to the same StatusMeta.
Unknown values land in Pending with no follow-up action.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class StatusBucket(str, Enum):
    PENDING = "Pending"
    DELIVERED = "Delivered"
    IN_USE = "In Use"
    COMPLETED = "Completed"


class OrderAction(str, Enum):
    CONTINUE_PROCESS = "continueProcess"
    COMPLETE_KYC = "completeKyc"
    CONFIRM_RECEIPT = "confirmReceipt"
    RENT_AGAIN = "rentAgain"


ACTION_LABELS: Dict[OrderAction, str] = {
    OrderAction.CONTINUE_PROCESS: "Continue",
    OrderAction.COMPLETE_KYC: "Complete KYC",
    OrderAction.CONFIRM_RECEIPT: "Confirm receipt",
    OrderAction.RENT_AGAIN: "Rent again",
}


@dataclass(frozen=True)
class StatusMeta:
    bucket: StatusBucket
    label: str
    raw: str
    code: str
    color: str
    background: str
    action: Optional[OrderAction] = None

    @property
    def action_label(self) -> Optional[str]:
        return ACTION_LABELS.get(self.action) if self.action else None


@dataclass(frozen=True)
class _BucketTemplate:
    default_label: str
    color: str
    background: str
    action: Optional[OrderAction]


# In Use has no default action; the expiry / extension prompt replaces it
BUCKET_TEMPLATES: Dict[StatusBucket, _BucketTemplate] = {
    StatusBucket.PENDING: _BucketTemplate("Pending", "#b45309", "#fef3c7", OrderAction.CONTINUE_PROCESS),
    StatusBucket.DELIVERED: _BucketTemplate("Delivered", "#047857", "#d1fae5", OrderAction.CONFIRM_RECEIPT),
    StatusBucket.IN_USE: _BucketTemplate("In Use", "#1d4ed8", "#dbeafe", None),
    StatusBucket.COMPLETED: _BucketTemplate("Completed", "#111111", "#f3f4f6", OrderAction.RENT_AGAIN),
}


@dataclass(frozen=True)
class _StatusRule:
    bucket: StatusBucket
    label: Optional[str] = None
    include_action: bool = True
    action: Optional[OrderAction] = None


# ---------------------------------------------------------------------------
# Synonym table
# ---------------------------------------------------------------------------

STATUS_RULES: Dict[str, _StatusRule] = {
    # before payment / delivery
    "PENDING": _StatusRule(StatusBucket.PENDING, "Pending"),
    "PENDING_KYC": _StatusRule(StatusBucket.PENDING, "Awaiting KYC verification", action=OrderAction.COMPLETE_KYC),
    "PROCESSING": _StatusRule(StatusBucket.PENDING, "Processing"),
    "APPROVED": _StatusRule(StatusBucket.PENDING, "Approved"),
    "DELIVERY_CONFIRMED": _StatusRule(StatusBucket.PENDING, "Ready for delivery", include_action=False),
    # on the way / handed over
    "DELIVERING": _StatusRule(StatusBucket.DELIVERED, "Delivering", include_action=False),
    "RESCHEDULED": _StatusRule(StatusBucket.DELIVERED, "Rescheduled", include_action=False),
    "DELIVERED": _StatusRule(StatusBucket.DELIVERED, "Delivered"),
    "SHIPPED": _StatusRule(StatusBucket.DELIVERED, "Shipped"),
    "OUT_FOR_DELIVERY": _StatusRule(StatusBucket.DELIVERED, "Out for delivery"),
    # customer has the device
    "IN_USE": _StatusRule(StatusBucket.IN_USE, "In use"),
    "ACTIVE": _StatusRule(StatusBucket.IN_USE, "Active"),
    "IN_PROGRESS": _StatusRule(StatusBucket.IN_USE, "In progress"),
    "EXTENSION_REQUESTED": _StatusRule(StatusBucket.IN_USE, "Extension requested"),
    "RETURN_CONFIRMED": _StatusRule(StatusBucket.IN_USE, "Return confirmed", include_action=False),
    "SETTLEMENT_PENDING": _StatusRule(StatusBucket.IN_USE, "Awaiting deposit settlement", include_action=False),
    # finished
    "COMPLETED": _StatusRule(StatusBucket.COMPLETED, "Completed"),
    "RETURNED": _StatusRule(StatusBucket.COMPLETED, "Returned"),
    "CLOSED": _StatusRule(StatusBucket.COMPLETED, "Closed"),
    "FINISHED": _StatusRule(StatusBucket.COMPLETED, "Finished"),
    "CANCELLED": _StatusRule(StatusBucket.COMPLETED, "Cancelled", include_action=False),
    "CANCELED": _StatusRule(StatusBucket.COMPLETED, "Cancelled", include_action=False),
    "REJECTED": _StatusRule(StatusBucket.COMPLETED, "Rejected", include_action=False),
}

AWAITING_PREFIX = "AWAITING_"
_AWAITING_RULE = _StatusRule(StatusBucket.PENDING)
_UNKNOWN_RULE = _StatusRule(StatusBucket.PENDING, include_action=False)

KYC_STATUSES = {"PENDING_KYC"}
SETTLEMENT_PHASE_STATUSES = {"RETURN_CONFIRMED", "SETTLEMENT_PENDING"}

ALL_FILTER = "All"

# Filter chips offered by the orders screen, in display order
ORDER_FILTERS: List[str] = [
    ALL_FILTER,
    "PENDING_KYC",
    "PENDING",
    "PROCESSING",
    "DELIVERY_CONFIRMED",
    "RESCHEDULED",
    "DELIVERING",
    "IN_USE",
    "CANCELLED",
    "REJECTED",
    "COMPLETED",
]

_SEPARATORS = re.compile(r"[\s\-]+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def status_code(raw: Any) -> str:
    """Uppercase, trimmed, with spaces and hyphens turned into underscores."""
    if raw is None:
        return ""
    return _SEPARATORS.sub("_", str(raw).strip()).upper()


def to_title_case(value: str) -> str:
    """'IN_PROGRESS' -> 'In Progress'."""
    return " ".join(part.capitalize() for part in re.split(r"[_\s]+", value.lower()) if part)


def _rule_for(code: str) -> _StatusRule:
    rule = STATUS_RULES.get(code)
    if rule is not None:
        return rule
    if code.startswith(AWAITING_PREFIX):
        return _AWAITING_RULE
    return _UNKNOWN_RULE


def normalize_status(raw: Any) -> StatusMeta:
    code = status_code(raw)
    rule = _rule_for(code)
    template = BUCKET_TEMPLATES[rule.bucket]

    label = rule.label or to_title_case(code) or template.default_label
    if rule.action is not None:
        action = rule.action
    else:
        action = template.action if rule.include_action else None

    return StatusMeta(
        bucket=rule.bucket,
        label=label,
        raw="" if raw is None else str(raw).strip(),
        code=code,
        color=template.color,
        background=template.background,
        action=action,
    )


def requires_kyc(raw: Any) -> bool:
    return status_code(raw) in KYC_STATUSES


def is_settlement_phase(raw: Any) -> bool:
    return status_code(raw) in SETTLEMENT_PHASE_STATUSES


def matches_filter(raw: Any, status_filter: Optional[str]) -> bool:
    """
    True when an order status passes a filter chip.

    The filter is either "All" (or empty), a bucket name such as "In Use",
    or an exact backend status such as "PENDING_KYC". Bucket names are
    matched case-sensitively so "Pending" (bucket) and "PENDING" (status)
    stay distinct.
    """
    if not status_filter or status_filter.strip().lower() == ALL_FILTER.lower():
        return True
    wanted = status_filter.strip()
    for bucket in StatusBucket:
        if wanted == bucket.value:
            return normalize_status(raw).bucket is bucket
    return status_code(raw) == status_code(wanted)
