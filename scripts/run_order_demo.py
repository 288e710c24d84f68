#!/usr/bin/env python3
"""
Run a full rental order lifecycle and print each stage to the terminal.
Order -> contract signing -> delivery -> extension annex -> return -> settlement.

By default every request goes to the in-process mock backend. With --live the
script only loads the order overview from RENTAL_API_URL using the access
token in RENTAL_ACCESS_TOKEN.

Usage (from repo root):
  python scripts/run_order_demo.py
  python scripts/run_order_demo.py --live
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import httpx
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.integrations.clients.mocks.rental_backend import MockRentalStore, create_mock_backend
from src.integrations.contracts.interfaces import HandoverType, SessionCredentials, StaticSessionProvider
from src.integrations.contracts.orders import OrderDetailRequest, RentalWindow
from src.integrations.policy.errors import RentalClientError
from src.integrations.rental_api import build_rental_api
from src.rentals.order_overview import load_order_overview
from src.rentals.routing import place_order
from src.rentals.signing import SigningFlow
from src.utils.config_loader import load_client_config

MOCK_BASE_URL = "http://mock-rental.local/api"
DEMO_EMAIL = "customer@example.com"


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def print_stage(title: str, data):
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    if isinstance(data, (dict, list)):
        print(json.dumps(data, indent=2, default=str))
    else:
        print(data)
    print()


async def run_mock_lifecycle():
    store = MockRentalStore.with_defaults()
    config = load_client_config(use_env=False).model_copy(update={"api_base_url": MOCK_BASE_URL})
    api = build_rental_api(config, transport=httpx.ASGITransport(app=create_mock_backend(store)))
    sessions = StaticSessionProvider(SessionCredentials(access_token="token-verified"))
    session = sessions.current_session()

    start = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0) + timedelta(days=1)
    placed = await place_order(
        api.orders,
        sessions,
        RentalWindow(start=start, end=start + timedelta(days=7)),
        "123 Main St",
        [OrderDetailRequest(device_model_id=7, quantity=1), OrderDetailRequest(device_model_id=8)],
    )
    order_id = placed.order.order_id
    print_stage(f"ORDER CREATED: {placed.status.label} -> {placed.next_step.value}", placed.order)

    contract = await api.contracts.fetch_contract_for_order(session, order_id)
    flow = SigningFlow.for_contract(api.contracts, contract, sessions)
    await flow.request_pin(DEMO_EMAIL)
    record = await flow.sign(store.outbox[-1].pin)
    print_stage(f"CONTRACT {contract.contract_number} SIGNED", record)

    store.mark_in_use(order_id)
    report = store.add_handover_report(order_id, HandoverType.CHECKOUT)
    reports = await api.handover_reports.fetch_handover_reports(session, order_id)
    handover_flow = SigningFlow.for_handover_report(api.handover_reports, reports[0], sessions)
    await handover_flow.request_pin(DEMO_EMAIL)
    signed_report = await handover_flow.sign(store.outbox[-1].pin)
    print_stage(f"HANDOVER REPORT {report['handoverReportId']} SIGNED", signed_report)

    extended = await api.orders.extend_order(session, order_id, (start + timedelta(days=10)).isoformat() + "Z")
    annex = (await api.annexes.fetch_annexes(session, contract.contract_id))[-1]
    annex_flow = SigningFlow.for_annex(api.annexes, annex, sessions)
    await annex_flow.request_pin(DEMO_EMAIL)
    await annex_flow.sign(store.outbox[-1].pin)
    print_stage(f"EXTENSION ({extended.order_status}) SIGNED", await api.orders.fetch_order(session, order_id))

    returned = await api.orders.confirm_return(session, order_id)
    settlement = await api.settlements.fetch_settlement(session, order_id)
    print_stage(f"RETURN CONFIRMED ({returned.order_status})", settlement or "No settlement proposed yet")

    store.propose_settlement(order_id, damage_fee=500000)
    settlement = await api.settlements.fetch_settlement(session, order_id)
    amounts = settlement.split_amounts()
    print_stage(f"SETTLEMENT PROPOSED: refund {amounts.refund_amount:,.0f}, due {amounts.customer_due_amount:,.0f}", settlement)
    answered = await api.settlements.respond_settlement(session, settlement.settlement_id, True, "Thanks")
    print_stage("SETTLEMENT ACCEPTED", answered)

    overview = await load_order_overview(api, sessions)
    print_stage(
        "ORDER OVERVIEW",
        [{"title": c.title, "devices": c.device_summary, "status": c.status.label} for c in overview.cards],
    )


async def run_live_overview():
    token = os.getenv("RENTAL_ACCESS_TOKEN", "").strip()
    if not token:
        raise SystemExit("RENTAL_ACCESS_TOKEN is not set")
    api = build_rental_api(load_client_config())
    sessions = StaticSessionProvider(SessionCredentials(access_token=token))
    overview = await load_order_overview(api, sessions)
    print_stage(
        f"ORDER OVERVIEW ({len(overview.cards)} orders)",
        [{"title": c.title, "devices": c.device_summary, "status": c.status.label} for c in overview.cards],
    )


def main():
    parser = argparse.ArgumentParser(description="Walk through the rental order lifecycle")
    parser.add_argument("--live", action="store_true", help="Load the order overview from RENTAL_API_URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    load_dotenv()
    setup_logging(args.verbose)
    try:
        asyncio.run(run_live_overview() if args.live else run_mock_lifecycle())
    except RentalClientError as exc:
        logging.getLogger(__name__).error("Demo failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
