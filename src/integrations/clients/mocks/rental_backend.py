"""
Mock Rental Backend.

Purpose:
- In-memory FastAPI stand-in for the rental backend, serving every endpoint
  the rental clients call under /api with the same response envelope
- Does NOT persist anything; state lives in a MockRentalStore

Usage:
- Tests and scripts/run_order_demo.py route the real clients into it with
  httpx.ASGITransport(app=create_mock_backend()), so the full client stack
  (URL building, retry, envelope validation) is exercised without a network
- Staff-side actions (delivering an order, proposing a settlement, filing a
  handover report) are MockRentalStore methods called directly by the test

Server-side rules enforced (the clients rely on the server for these):
- 401 without a known bearer token
- sign rejected unless a PIN was sent for the same document; wrong PIN rejected
- confirm-return only from IN_USE
- a settlement can be answered once
- 404 for missing settlements
- customers without KYC get PENDING_KYC orders
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from src.integrations.contracts.interfaces import EnvelopeStatus, HandoverType, SignatureMethod
from src.integrations.contracts.orders import WIRE_DATETIME_FORMAT, format_wire_datetime

logger = logging.getLogger(__name__)

DEFAULT_PIN = "123456"
SETTLEMENT_OPEN_STATES = {"PENDING", "AWAITING_RESPONSE"}


class MockBackendError(Exception):
    def __init__(self, http_status: int, message: str, business_status: str = EnvelopeStatus.ERROR.value):
        super().__init__(message)
        self.http_status = http_status
        self.message = message
        self.business_status = business_status


def envelope(data: Any, message: str = "OK", code: int = 200) -> Dict[str, Any]:
    return {"status": EnvelopeStatus.SUCCESS.value, "message": message, "details": None, "code": code, "data": data}


@dataclass
class MockCustomer:
    customer_id: int
    email: str
    kyc_verified: bool = True


@dataclass
class SentPin:
    kind: str
    document_id: int
    email: str
    pin: str


@dataclass
class MockRentalStore:
    """All backend state. Dict payloads are kept in wire (camelCase) form."""

    pin_code: str = DEFAULT_PIN
    customers: Dict[str, MockCustomer] = field(default_factory=dict)
    device_models: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    orders: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    contracts: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    annexes: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    settlements: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    handover_reports: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    pins: Dict[Tuple[str, int], str] = field(default_factory=dict)
    outbox: List[SentPin] = field(default_factory=list)
    request_log: List[Tuple[str, str]] = field(default_factory=list)
    _ids: Dict[str, int] = field(default_factory=dict)

    # -- Seeding --

    @classmethod
    def with_defaults(cls, pin_code: str = DEFAULT_PIN) -> "MockRentalStore":
        store = cls(pin_code=pin_code)
        store.add_customer("token-verified", MockCustomer(1, "customer@example.com", kyc_verified=True))
        store.add_customer("token-no-kyc", MockCustomer(2, "new.customer@example.com", kyc_verified=False))
        store.add_device_model(7, "iPhone 15 Pro", brand="Apple", price_per_day=150000, device_value=30000000)
        store.add_device_model(8, "Sony A7 IV", brand="Sony", price_per_day=250000, device_value=55000000)
        store.add_device_model(9, "DJI Mini 4 Pro", brand="DJI", price_per_day=200000, device_value=22000000)
        return store

    def next_id(self, kind: str) -> int:
        self._ids[kind] = self._ids.get(kind, 0) + 1
        return self._ids[kind]

    def add_customer(self, token: str, customer: MockCustomer) -> MockCustomer:
        self.customers[token] = customer
        return customer

    def add_device_model(
        self,
        device_model_id: int,
        name: str,
        *,
        brand: str = "",
        price_per_day: float = 100000,
        device_value: float = 10000000,
        deposit_percent: float = 0.3,
        image_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        model = {
            "deviceModelId": device_model_id,
            "deviceName": name,
            "brand": brand,
            "imageURL": image_url or f"https://images.example.com/models/{device_model_id}.png",
            "specifications": None,
            "deviceCategoryId": 1,
            "deviceValue": device_value,
            "pricePerDay": price_per_day,
            "depositPercent": deposit_percent,
            "active": True,
        }
        self.device_models[device_model_id] = model
        return model

    # -- Staff-side actions --

    def set_order_status(self, order_id: int, status: str) -> Dict[str, Any]:
        order = self.orders[order_id]
        order["orderStatus"] = status
        return order

    def mark_in_use(self, order_id: int) -> Dict[str, Any]:
        """Payment captured and devices handed over."""
        order = self.set_order_status(order_id, "IN_USE")
        order["depositAmountHeld"] = order["depositAmount"]
        return order

    def propose_settlement(
        self,
        order_id: int,
        *,
        damage_fee: float = 0.0,
        late_fee: float = 0.0,
        accessory_fee: float = 0.0,
        state: str = "AWAITING_RESPONSE",
    ) -> Dict[str, Any]:
        order = self.orders[order_id]
        total_deposit = order["depositAmountHeld"] or order["depositAmount"]
        settlement_id = self.next_id("settlement")
        settlement = {
            "settlementId": settlement_id,
            "orderId": order_id,
            "state": state,
            "totalDeposit": total_deposit,
            "damageFee": damage_fee,
            "lateFee": late_fee,
            "accessoryFee": accessory_fee,
            "finalReturnAmount": total_deposit - (damage_fee + late_fee + accessory_fee),
            "customerNote": None,
            "staffNote": None,
            "createdAt": _now(),
            "updatedAt": None,
            "respondedAt": None,
        }
        self.settlements[settlement_id] = settlement
        order["orderStatus"] = "SETTLEMENT_PENDING"
        return settlement

    def add_handover_report(
        self,
        order_id: int,
        handover_type: HandoverType = HandoverType.CHECKOUT,
        *,
        staff_signed: bool = True,
    ) -> Dict[str, Any]:
        order = self.orders[order_id]
        report_id = self.next_id("handover")
        report = {
            "handoverReportId": report_id,
            "orderId": order_id,
            "taskId": None,
            "handoverType": handover_type.value,
            "status": "STAFF_SIGNED" if staff_signed else "DRAFT",
            "handoverDateTime": _now(),
            "handoverLocation": order["shippingAddress"],
            "customerSigned": False,
            "staffSigned": staff_signed,
            "customerSignedAt": None,
            "staffSignedAt": _now() if staff_signed else None,
            "items": [
                {
                    "deviceId": index + 1,
                    "deviceSerialNumber": f"SN-{order_id}-{index + 1}",
                    "deviceModelName": self.device_models.get(detail["deviceModelId"], {}).get("deviceName"),
                    "evidenceUrls": [],
                }
                for index, detail in enumerate(order["orderDetails"])
            ],
            "deliveryStaff": [{"staffId": 1, "fullName": "Delivery Staff", "role": "TECHNICIAN"}],
            "customerSignature": None,
        }
        self.handover_reports[report_id] = report
        return report

    # -- PIN bookkeeping --

    def issue_pin(self, kind: str, document_id: int, email: str) -> None:
        self.pins[(kind, document_id)] = self.pin_code
        self.outbox.append(SentPin(kind=kind, document_id=document_id, email=email, pin=self.pin_code))

    def consume_pin(self, kind: str, document_id: int, pin_code: Optional[str]) -> None:
        expected = self.pins.get((kind, document_id))
        if expected is None:
            raise MockBackendError(400, "Please request a verification code before signing.")
        if (pin_code or "").strip() != expected:
            raise MockBackendError(400, "Invalid or expired verification code.", "INVALID_PIN")
        del self.pins[(kind, document_id)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> str:
    return format_wire_datetime(datetime.now())


def _store(request: Request) -> MockRentalStore:
    return request.app.state.store


def _customer(request: Request) -> MockCustomer:
    store = _store(request)
    store.request_log.append((request.method, request.url.path))
    header = request.headers.get("authorization", "")
    token = header.split(" ", 1)[1].strip() if " " in header else ""
    customer = store.customers.get(token)
    if customer is None:
        raise MockBackendError(401, "Your session has expired. Please sign in again.", EnvelopeStatus.UNAUTHORIZED.value)
    return customer


async def _body(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        raise MockBackendError(400, "Request body must be JSON.")
    if not isinstance(payload, dict):
        raise MockBackendError(400, "Request body must be a JSON object.")
    return payload


def _parse_wire_datetime(value: Any, field_name: str) -> datetime:
    """The backend only accepts bare local date-times."""
    try:
        return datetime.strptime(str(value), WIRE_DATETIME_FORMAT)
    except ValueError:
        raise MockBackendError(400, f"{field_name} must be formatted as yyyy-MM-dd'T'HH:mm:ss.")


def _owned(collection: Dict[int, Dict[str, Any]], key: int, customer: MockCustomer, label: str) -> Dict[str, Any]:
    item = collection.get(key)
    if item is None or item.get("customerId", customer.customer_id) != customer.customer_id:
        raise MockBackendError(404, f"{label} {key} not found.", "NOT_FOUND")
    return item


def _order_for(store: MockRentalStore, order_id: Optional[int], customer: MockCustomer) -> Dict[str, Any]:
    return _owned(store.orders, order_id or 0, customer, "Rental order")


def _sort_orders(orders: List[Dict[str, Any]], sort_keys: List[str]) -> List[Dict[str, Any]]:
    ordered = list(orders)
    for key in reversed(sort_keys):
        name, _, direction = key.partition(",")
        ordered.sort(key=lambda o: (o.get(name) is None, o.get(name) or 0), reverse=direction.lower() == "desc")
    return ordered


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api", tags=["Mock Rental Backend"])


@router.get("/device-models")
async def list_device_models(request: Request):
    return envelope(list(_store(request).device_models.values()))


@router.post("/rental-orders")
async def create_order(request: Request):
    customer = _customer(request)
    store = _store(request)
    body = await _body(request)

    details = body.get("orderDetails") or []
    if not details:
        raise MockBackendError(400, "Order must contain at least one device.")
    start = _parse_wire_datetime(body.get("startDate") or body.get("planStartDate"), "startDate")
    end = _parse_wire_datetime(body.get("endDate") or body.get("planEndDate"), "endDate")
    if end <= start:
        raise MockBackendError(400, "End date must be after start date.")
    address = str(body.get("shippingAddress") or "").strip()
    if not address:
        raise MockBackendError(400, "Shipping address is required.")

    days = max(1, (end - start).days)
    order_id = store.next_id("order")
    order_details = []
    total_price = deposit = price_per_day = 0.0
    for detail in details:
        model = store.device_models.get(detail.get("deviceModelId"))
        if model is None:
            raise MockBackendError(404, f"Device model {detail.get('deviceModelId')} not found.", "NOT_FOUND")
        quantity = int(detail.get("quantity") or 1)
        unit_deposit = model["deviceValue"] * model["depositPercent"]
        order_details.append({
            "orderDetailId": store.next_id("order_detail"),
            "deviceModelId": model["deviceModelId"],
            "quantity": quantity,
            "pricePerDay": model["pricePerDay"],
            "depositAmountPerUnit": unit_deposit,
        })
        price_per_day += model["pricePerDay"] * quantity
        total_price += model["pricePerDay"] * quantity * days
        deposit += unit_deposit * quantity

    order = {
        "orderId": order_id,
        "startDate": format_wire_datetime(start),
        "endDate": format_wire_datetime(end),
        "planStartDate": format_wire_datetime(start),
        "planEndDate": format_wire_datetime(end),
        "shippingAddress": address,
        "orderStatus": "PENDING" if customer.kyc_verified else "PENDING_KYC",
        "depositAmount": deposit,
        "depositAmountHeld": 0.0,
        "depositAmountUsed": 0.0,
        "depositAmountRefunded": 0.0,
        "totalPrice": total_price,
        "pricePerDay": price_per_day,
        "createdAt": _now(),
        "customerId": customer.customer_id,
        "orderDetails": order_details,
    }
    store.orders[order_id] = order

    # A contract is generated once the customer may sign, i.e. KYC passed
    if customer.kyc_verified:
        contract_id = store.next_id("contract")
        store.contracts[contract_id] = {
            "contractId": contract_id,
            "contractNumber": f"HD-{order_id:06d}",
            "orderId": order_id,
            "title": f"Rental contract for order #{order_id}",
            "contractType": "RENTAL",
            "status": "PENDING_SIGNATURE",
            "customerId": customer.customer_id,
            "contractContent": "<p>Rental terms</p>",
            "termsAndConditions": "<p>Return devices in the condition received.</p>",
            "rentalPeriodDays": days,
            "totalAmount": total_price,
            "depositAmount": deposit,
            "startDate": order["startDate"],
            "endDate": order["endDate"],
            "signedAt": None,
            "customerSignedAt": None,
            "adminSignedAt": _now(),
            "createdAt": _now(),
        }
    logger.info("Mock backend created order %s (%s)", order_id, order["orderStatus"])
    return envelope(order, "Rental order created")


@router.get("/rental-orders")
async def list_orders(request: Request):
    customer = _customer(request)
    orders = [o for o in _store(request).orders.values() if o["customerId"] == customer.customer_id]
    return envelope(orders)


@router.get("/rental-orders/search")
async def search_orders(request: Request, page: int = 0, size: int = 10, orderStatus: Optional[str] = None):
    customer = _customer(request)
    orders = [o for o in _store(request).orders.values() if o["customerId"] == customer.customer_id]
    if orderStatus:
        orders = [o for o in orders if o["orderStatus"] == orderStatus.upper()]
    orders = _sort_orders(orders, request.query_params.getlist("sort"))

    total = len(orders)
    content = orders[page * size:(page + 1) * size]
    total_pages = (total + size - 1) // size if size else 0
    return envelope({
        "content": content,
        "page": page,
        "size": size,
        "totalElements": total,
        "totalPages": total_pages,
        "numberOfElements": len(content),
        "last": page >= total_pages - 1,
    })


@router.post("/rental-orders/extend")
async def extend_order(request: Request):
    customer = _customer(request)
    store = _store(request)
    body = await _body(request)

    order = _order_for(store, body.get("rentalOrderId"), customer)
    if order["orderStatus"] != "IN_USE":
        raise MockBackendError(409, f"Order {order['orderId']} cannot be extended from status {order['orderStatus']}.")
    new_end = _parse_wire_datetime(body.get("extendedEndTime"), "extendedEndTime")
    current_end = _parse_wire_datetime(order["endDate"], "endDate")
    if new_end <= current_end:
        raise MockBackendError(400, "The new end time must be after the current end time.")

    order["orderStatus"] = "EXTENSION_REQUESTED"
    contract = next((c for c in store.contracts.values() if c["orderId"] == order["orderId"]), None)
    if contract is not None:
        annex_id = store.next_id("annex")
        extra_days = max(1, (new_end - current_end).days)
        fee = order["pricePerDay"] * extra_days
        store.annexes[annex_id] = {
            "annexId": annex_id,
            "contractId": contract["contractId"],
            "extensionId": annex_id,
            "originalOrderId": order["orderId"],
            "annexNumber": f"{contract['contractNumber']}-PL{annex_id:02d}",
            "contractNumber": contract["contractNumber"],
            "title": "Rental extension annex",
            "annexContent": "<p>Extension terms</p>",
            "extensionStartDate": order["endDate"],
            "extensionEndDate": format_wire_datetime(new_end),
            "extensionDays": extra_days,
            "extensionFee": fee,
            "totalPayable": fee,
            "status": "PENDING_CUSTOMER_SIGNATURE",
            "adminSignedAt": _now(),
            "customerSignedAt": None,
            "createdAt": _now(),
        }
    return envelope(order, "Extension requested")


@router.get("/rental-orders/{order_id}")
async def get_order(order_id: int, request: Request):
    customer = _customer(request)
    return envelope(_order_for(_store(request), order_id, customer))


@router.patch("/rental-orders/{order_id}/confirm-return")
async def confirm_return(order_id: int, request: Request):
    customer = _customer(request)
    order = _order_for(_store(request), order_id, customer)
    if order["orderStatus"] != "IN_USE":
        raise MockBackendError(409, f"Order {order_id} cannot be returned from status {order['orderStatus']}.")
    order["orderStatus"] = "RETURN_CONFIRMED"
    return envelope(order, "Return confirmed")


@router.get("/contracts/my-contracts")
async def my_contracts(request: Request):
    customer = _customer(request)
    contracts = [c for c in _store(request).contracts.values() if c["customerId"] == customer.customer_id]
    return envelope(contracts)


@router.get("/contracts/{contract_id}")
async def get_contract(contract_id: int, request: Request):
    customer = _customer(request)
    return envelope(_owned(_store(request).contracts, contract_id, customer, "Contract"))


@router.post("/contracts/{contract_id}/send-pin/email")
async def send_contract_pin(contract_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    contract = _owned(store.contracts, contract_id, customer, "Contract")
    email = str((await _body(request)).get("email") or "").strip()
    if not email:
        raise MockBackendError(400, "Email is required.")
    store.issue_pin("contract", contract["contractId"], email)
    return envelope({"contractId": contract_id, "email": email}, "Verification code sent")


@router.post("/contracts/{contract_id}/sign")
async def sign_contract(contract_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    contract = _owned(store.contracts, contract_id, customer, "Contract")
    body = await _body(request)
    if body.get("signatureMethod") != SignatureMethod.EMAIL_OTP.value:
        raise MockBackendError(400, "Unsupported signature method.")
    if contract["status"] == "SIGNED":
        raise MockBackendError(409, "Contract is already signed.")
    store.consume_pin("contract", contract_id, body.get("pinCode"))

    signed_at = _now()
    contract.update({"status": "SIGNED", "signedAt": signed_at, "customerSignedAt": signed_at})
    signature_hash = hashlib.sha256(f"{contract_id}:{customer.customer_id}:{signed_at}".encode("utf-8")).hexdigest()
    record = {
        "signatureId": store.next_id("signature"),
        "contractId": contract_id,
        "signatureHash": signature_hash,
        "signatureMethod": SignatureMethod.EMAIL_OTP.value,
        "signedAt": signed_at,
        "signatureStatus": "VALID",
        "auditTrail": [{"event": "PIN_VERIFIED", "at": signed_at}],
    }
    return envelope(record, "Contract signed")


@router.get("/contracts/{contract_id}/annexes")
async def list_annexes(contract_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    _owned(store.contracts, contract_id, customer, "Contract")
    return envelope([a for a in store.annexes.values() if a["contractId"] == contract_id])


def _annex_for(store: MockRentalStore, contract_id: int, annex_id: int, customer: MockCustomer) -> Dict[str, Any]:
    _owned(store.contracts, contract_id, customer, "Contract")
    annex = store.annexes.get(annex_id)
    if annex is None or annex["contractId"] != contract_id:
        raise MockBackendError(404, f"Annex {annex_id} not found.", "NOT_FOUND")
    return annex


@router.post("/contracts/{contract_id}/annexes/{annex_id}/send-pin/email")
async def send_annex_pin(contract_id: int, annex_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    _annex_for(store, contract_id, annex_id, customer)
    email = str((await _body(request)).get("email") or "").strip()
    if not email:
        raise MockBackendError(400, "Email is required.")
    store.issue_pin("annex", annex_id, email)
    return envelope(None, "Verification code sent")


@router.post("/contracts/{contract_id}/annexes/{annex_id}/sign/customer")
async def sign_annex(contract_id: int, annex_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    annex = _annex_for(store, contract_id, annex_id, customer)
    body = await _body(request)
    if annex["status"] in {"SIGNED", "ACTIVE"}:
        raise MockBackendError(409, "Annex is already signed.")
    store.consume_pin("annex", annex_id, body.get("pinCode"))

    annex.update({"status": "ACTIVE", "customerSignedAt": _now()})
    order = store.orders.get(annex["originalOrderId"])
    if order is not None and order["orderStatus"] == "EXTENSION_REQUESTED":
        order.update({"orderStatus": "IN_USE", "endDate": annex["extensionEndDate"], "planEndDate": annex["extensionEndDate"]})
    return envelope(annex, "Annex signed")


@router.get("/settlements/order/{order_id}")
async def get_settlement(order_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    _order_for(store, order_id, customer)
    settlement = next((s for s in store.settlements.values() if s["orderId"] == order_id), None)
    if settlement is None:
        raise MockBackendError(404, f"Settlement not found for order {order_id}.", "NOT_FOUND")
    return envelope(settlement)


@router.post("/settlements/{settlement_id}/respond")
async def respond_settlement(settlement_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    settlement = store.settlements.get(settlement_id)
    if settlement is None:
        raise MockBackendError(404, f"Settlement {settlement_id} not found.", "NOT_FOUND")
    order = _order_for(store, settlement["orderId"], customer)
    if settlement["state"] not in SETTLEMENT_OPEN_STATES:
        raise MockBackendError(409, f"Settlement has already been answered ({settlement['state']}).")

    body = await _body(request)
    accepted = bool(body.get("accepted"))
    settlement.update({
        "state": "ISSUED" if accepted else "REJECTED",
        "customerNote": body.get("customerNote"),
        "respondedAt": _now(),
        "updatedAt": _now(),
    })
    if accepted:
        order["orderStatus"] = "COMPLETED"
    return envelope(settlement, "Settlement response recorded")


@router.get("/customers/handover-reports")
async def list_handover_reports(request: Request):
    customer = _customer(request)
    store = _store(request)
    owned = {o["orderId"] for o in store.orders.values() if o["customerId"] == customer.customer_id}
    return envelope([r for r in store.handover_reports.values() if r["orderId"] in owned])


@router.get("/customers/handover-reports/orders/{order_id}")
async def list_order_handover_reports(order_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    _order_for(store, order_id, customer)
    return envelope([r for r in store.handover_reports.values() if r["orderId"] == order_id])


def _report_for(store: MockRentalStore, report_id: int, customer: MockCustomer) -> Dict[str, Any]:
    report = store.handover_reports.get(report_id)
    if report is None:
        raise MockBackendError(404, f"Handover report {report_id} not found.", "NOT_FOUND")
    _order_for(store, report["orderId"], customer)
    return report


@router.post("/customers/handover-reports/{report_id}/pin")
async def send_handover_pin(report_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    _report_for(store, report_id, customer)
    email = str((await _body(request)).get("email") or "").strip()
    if not email:
        raise MockBackendError(400, "Email is required.")
    store.issue_pin("handover", report_id, email)
    return envelope(None, "PIN sent")


@router.patch("/customers/handover-reports/{report_id}/signature")
async def sign_handover_report(report_id: int, request: Request):
    customer = _customer(request)
    store = _store(request)
    report = _report_for(store, report_id, customer)
    body = await _body(request)
    if report["customerSigned"]:
        raise MockBackendError(409, "Handover report is already signed.")
    store.consume_pin("handover", report_id, body.get("pinCode"))

    report.update({
        "customerSigned": True,
        "customerSignedAt": _now(),
        "customerSignature": body.get("customerSignature"),
        "status": "BOTH_SIGNED" if report["staffSigned"] else "CUSTOMER_SIGNED",
    })
    return envelope(report, "Handover report signed")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_mock_backend(store: Optional[MockRentalStore] = None) -> FastAPI:
    app = FastAPI(title="Mock Rental Backend")
    app.state.store = store if store is not None else MockRentalStore.with_defaults()

    @app.exception_handler(MockBackendError)
    async def _envelope_error(request: Request, exc: MockBackendError):
        return JSONResponse(
            status_code=exc.http_status,
            content={
                "status": exc.business_status,
                "message": exc.message,
                "details": None,
                "code": exc.http_status,
                "data": None,
            },
        )

    app.include_router(router)
    return app
