"""
Order overview loader.

Purpose:
- Loads the customer's orders and decorates them for display: device names,
  normalized status, the contract generated for each order

Concurrency:
- Device names are resolved with one concurrent lookup per distinct device
  model id (asyncio.gather). The lookups share one catalog load. A failed
  lookup degrades to a placeholder name; it never fails the overview.
- A failing contract lookup is tolerated too: orders are returned without
  contracts and `contracts_available` is False.
- Failing to load the orders themselves is an error and propagates.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from src.integrations.clients.real_http.device_models import DeviceModelCatalog
from src.integrations.contracts.agreements import Contract
from src.integrations.contracts.interfaces import SessionProvider, resolve_session
from src.integrations.contracts.orders import RentalOrder, to_naive_local
from src.integrations.policy.errors import RentalClientError
from src.integrations.rental_api import RentalApi
from src.rentals.status import StatusMeta, matches_filter, normalize_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceLookupEntry:
    name: str
    image_url: Optional[str] = None
    resolved: bool = True


@dataclass(frozen=True)
class OrderCard:
    order_id: int
    title: str
    device_summary: str
    device_image_urls: List[str]
    status: StatusMeta
    window_start: Optional[datetime]
    window_end: Optional[datetime]
    total_price: float
    deposit_amount: float
    contract: Optional[Contract] = None

    @property
    def total_due(self) -> float:
        return self.total_price + self.deposit_amount

    @property
    def needs_contract_signature(self) -> bool:
        return self.contract is not None and not self.contract.is_signed_by_customer


@dataclass
class OrderOverview:
    cards: List[OrderCard] = field(default_factory=list)
    contracts_by_order_id: Dict[int, Contract] = field(default_factory=dict)
    device_lookup: Dict[int, DeviceLookupEntry] = field(default_factory=dict)
    contracts_available: bool = True

    def filtered(self, status_filter: Optional[str]) -> List[OrderCard]:
        return [card for card in self.cards if matches_filter(card.status.code, status_filter)]


# ---------------------------------------------------------------------------
# Device name fan-out
# ---------------------------------------------------------------------------

def placeholder_device_name(device_model_id: int) -> str:
    return f"Device model {device_model_id}"


async def _lookup_device(catalog: DeviceModelCatalog, device_model_id: int) -> Tuple[int, DeviceLookupEntry]:
    placeholder = DeviceLookupEntry(name=placeholder_device_name(device_model_id), resolved=False)
    try:
        model = await catalog.fetch_device_model(device_model_id)
    except RentalClientError as exc:
        logger.warning("Failed to load device model %s for rental orders: %s", device_model_id, exc)
        return device_model_id, placeholder

    if model is None or model.display_name is None:
        logger.warning("Device model %s not found in catalog", device_model_id)
        return device_model_id, placeholder
    image_url = (model.image_url or "").strip() or None
    return device_model_id, DeviceLookupEntry(name=model.display_name, image_url=image_url)


async def resolve_device_names(
    catalog: DeviceModelCatalog,
    device_model_ids: Iterable[int],
    *,
    force_refresh: bool = False,
) -> Dict[int, DeviceLookupEntry]:
    """Concurrently resolve each distinct id; always returns an entry per id."""
    unique_ids = list(dict.fromkeys(i for i in device_model_ids if i))
    if not unique_ids:
        return {}
    if force_refresh:
        catalog.invalidate()
    results = await asyncio.gather(*(_lookup_device(catalog, i) for i in unique_ids))
    return dict(results)


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

def derive_device_summary(order: RentalOrder, device_lookup: Dict[int, DeviceLookupEntry]) -> str:
    if not order.order_details:
        return "No devices"
    names = [
        device_lookup[detail.device_model_id].name
        if detail.device_model_id in device_lookup
        else placeholder_device_name(detail.device_model_id)
        for detail in order.order_details
    ]
    if len(names) == 1:
        return names[0]
    return f"{names[0]} + {len(names) - 1} more"


def build_order_card(
    order: RentalOrder,
    device_lookup: Dict[int, DeviceLookupEntry],
    contract: Optional[Contract] = None,
) -> OrderCard:
    image_urls = [
        device_lookup[detail.device_model_id].image_url
        for detail in order.order_details
        if detail.device_model_id in device_lookup and device_lookup[detail.device_model_id].image_url
    ]
    return OrderCard(
        order_id=order.order_id,
        title=f"Order #{order.order_id}",
        device_summary=derive_device_summary(order, device_lookup),
        device_image_urls=image_urls,
        status=normalize_status(order.order_status),
        window_start=order.window_start,
        window_end=order.window_end,
        total_price=order.total_price,
        deposit_amount=order.deposit_amount,
        contract=contract,
    )


def sort_newest_first(orders: Iterable[RentalOrder]) -> List[RentalOrder]:
    """Newest first by creation time (or window start); undated orders last."""

    def key(order: RentalOrder) -> Tuple[int, float]:
        stamp = order.created_at or order.window_start
        if stamp is None:
            return (1, 0.0)
        return (0, -to_naive_local(stamp).timestamp())

    return sorted(orders, key=key)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

async def _contracts_by_order(api: RentalApi, session) -> Optional[Dict[int, Contract]]:
    try:
        contracts = await api.contracts.fetch_contracts(session)
    except RentalClientError as exc:
        logger.warning("Failed to load contracts for rental orders: %s", exc)
        return None
    return {contract.order_id: contract for contract in contracts if contract.order_id is not None}


async def load_order_overview(
    api: RentalApi,
    sessions: SessionProvider,
    *,
    force_refresh_devices: bool = False,
) -> OrderOverview:
    session = await resolve_session(sessions)
    orders = await api.orders.list_orders(session)

    device_ids = [detail.device_model_id for order in orders for detail in order.order_details]
    device_lookup, contracts = await asyncio.gather(
        resolve_device_names(api.device_models, device_ids, force_refresh=force_refresh_devices),
        _contracts_by_order(api, session),
    )

    contract_lookup = contracts or {}
    cards = [
        build_order_card(order, device_lookup, contract_lookup.get(order.order_id))
        for order in sort_newest_first(orders)
    ]
    logger.info(
        "Loaded overview: %d orders, %d device models, %d contracts", len(cards), len(device_lookup), len(contract_lookup)
    )
    return OrderOverview(
        cards=cards,
        contracts_by_order_id=contract_lookup,
        device_lookup=device_lookup,
        contracts_available=contracts is not None,
    )
