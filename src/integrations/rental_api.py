"""
Rental API wiring.

Purpose:
- Builds every rental client over ONE shared ApiTransport
- The only place where the transport (real network vs. in-process mock
  backend) is chosen

Usage:
    api = build_rental_api(load_client_config())
    orders = await api.orders.list_orders(session)

    # tests / demo: route every request into the FastAPI mock backend
    api = build_rental_api(config, transport=httpx.ASGITransport(app=create_mock_backend()))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from src.integrations.clients.real_http.annexes import AnnexesClient
from src.integrations.clients.real_http.contracts import ContractsClient
from src.integrations.clients.real_http.device_models import DeviceModelCatalog
from src.integrations.clients.real_http.handover_reports import HandoverReportsClient
from src.integrations.clients.real_http.rental_orders import RentalOrdersClient
from src.integrations.clients.real_http.settlements import SettlementsClient
from src.integrations.clients.real_http.transport import ApiTransport
from src.utils.config_loader import ClientConfig, load_client_config

logger = logging.getLogger(__name__)


@dataclass
class RentalApi:
    config: ClientConfig
    transport: ApiTransport
    orders: RentalOrdersClient
    contracts: ContractsClient
    annexes: AnnexesClient
    settlements: SettlementsClient
    handover_reports: HandoverReportsClient
    device_models: DeviceModelCatalog


def build_rental_api(
    config: Optional[ClientConfig] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    device_info: Optional[str] = None,
) -> RentalApi:
    config = config or load_client_config()
    api_transport = ApiTransport(config, transport=transport)
    logger.info(
        "Rental API wired (base=%s, transport=%s)",
        config.api_base_url or "<unset>",
        type(transport).__name__ if transport is not None else "network",
    )
    return RentalApi(
        config=config,
        transport=api_transport,
        orders=RentalOrdersClient(api_transport, use_plan_dates=config.use_plan_dates),
        contracts=ContractsClient(api_transport, device_info=device_info),
        annexes=AnnexesClient(api_transport),
        settlements=SettlementsClient(api_transport),
        handover_reports=HandoverReportsClient(api_transport),
        device_models=DeviceModelCatalog(api_transport),
    )
