import json

import httpx
import pytest

from src.integrations.clients.real_http.contracts import ContractsClient
from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.handover import HandoverType
from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.policy.errors import ApiError, SigningSequenceError, TransportError, ValidationError
from src.rentals.signing import ContractSigningTarget, SigningFlow, SigningState
from src.utils.config_loader import ClientConfig


async def _order_with_contract(api, session, window, cart):
    order = await api.orders.create_order(window, "123 Main St", cart, session)
    contract = await api.contracts.fetch_contract_for_order(session, order.order_id)
    return order, contract


# ---------------------------------------------------------------------------
# Contracts client
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_sign_without_prior_pin_is_rejected_as_api_error(api, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)

    with pytest.raises(ApiError) as exc_info:
        await api.contracts.sign_contract(session, contract.contract_id, "246810")

    assert exc_info.value.status == 400
    assert "verification code" in exc_info.value.message


@pytest.mark.asyncio
async def test_send_pin_then_sign_returns_signature_record(api, store, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)

    await api.contracts.send_contract_pin(session, contract.contract_id, "  customer@example.com ")
    record = await api.contracts.sign_contract(session, contract.contract_id, " 246810 ")

    assert store.outbox[-1].email == "customer@example.com"
    assert record.contract_id == contract.contract_id
    assert record.signature_method == "EMAIL_OTP"
    assert len(record.signature_hash) == 64
    refreshed = await api.contracts.fetch_contract(session, contract.contract_id)
    assert refreshed.is_signed_by_customer
    assert refreshed.status == "SIGNED"


@pytest.mark.asyncio
async def test_pin_is_scoped_to_the_contract_it_was_sent_for(api, session, week_window, cart):
    _, first = await _order_with_contract(api, session, week_window, cart)
    _, second = await _order_with_contract(api, session, week_window, cart)

    await api.contracts.send_contract_pin(session, first.contract_id, "customer@example.com")

    with pytest.raises(ApiError):
        await api.contracts.sign_contract(session, second.contract_id, "246810")


@pytest.mark.asyncio
async def test_contract_for_order_without_contract_is_none(api, session, no_kyc_session, week_window, cart):
    order = await api.orders.create_order(week_window, "123 Main St", cart, no_kyc_session)
    assert await api.contracts.fetch_contract_for_order(no_kyc_session, order.order_id) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["", "   "])
async def test_blank_email_is_rejected_locally(mock_transport, recorded_requests, email):
    client = ContractsClient(
        ApiTransport(ClientConfig(api_base_url="http://rental.test/api"), transport=mock_transport(lambda r: httpx.Response(500)))
    )

    with pytest.raises(ValidationError):
        await client.send_contract_pin(SessionCredentials("tok"), 1, email)
    with pytest.raises(ValidationError):
        await client.sign_contract(SessionCredentials("tok"), 1, "  ")
    assert recorded_requests == []


@pytest.mark.asyncio
async def test_sign_payload_declares_email_otp(mock_transport, recorded_requests):
    record = {"signatureId": 1, "contractId": 3, "signatureStatus": "VALID"}
    client = ContractsClient(
        ApiTransport(
            ClientConfig(api_base_url="https://rental.test/api"),
            transport=mock_transport(lambda r: httpx.Response(200, json={"status": "SUCCESS", "data": record})),
        ),
        device_info="pytest",
    )

    await client.sign_contract(SessionCredentials("tok"), 3, " 1234 ")

    body = json.loads(recorded_requests[0].content)
    assert str(recorded_requests[0].url) == "https://rental.test/api/contracts/3/sign"
    assert body == {"digitalSignature": "1234", "pinCode": "1234", "signatureMethod": "EMAIL_OTP", "deviceInfo": "pytest"}


# ---------------------------------------------------------------------------
# Signing flow
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_flow_blocks_sign_before_pin_without_network(mock_transport, recorded_requests, sessions):
    client = ContractsClient(
        ApiTransport(ClientConfig(api_base_url="http://rental.test/api"), transport=mock_transport(lambda r: httpx.Response(500)))
    )
    flow = SigningFlow(ContractSigningTarget(client, 1), sessions)

    with pytest.raises(SigningSequenceError) as exc_info:
        await flow.sign("246810")

    assert exc_info.value.state == "UNSIGNED"
    assert recorded_requests == []


@pytest.mark.asyncio
async def test_flow_happy_path(api, store, sessions, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)
    flow = SigningFlow.for_contract(api.contracts, contract, sessions)

    assert flow.state is SigningState.UNSIGNED
    await flow.request_pin("customer@example.com")
    assert flow.can_sign
    record = await flow.sign(store.outbox[-1].pin)

    assert flow.state is SigningState.SIGNED
    assert flow.result == record
    with pytest.raises(SigningSequenceError):
        await flow.request_pin("customer@example.com")


@pytest.mark.asyncio
async def test_wrong_pin_reverts_to_unsigned(api, sessions, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)
    flow = SigningFlow.for_contract(api.contracts, contract, sessions)
    await flow.request_pin("customer@example.com")

    with pytest.raises(ApiError):
        await flow.sign("000000")

    assert flow.state is SigningState.UNSIGNED
    with pytest.raises(SigningSequenceError):
        await flow.sign("246810")


@pytest.mark.asyncio
async def test_resend_keeps_pin_requested(api, store, sessions, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)
    flow = SigningFlow.for_contract(api.contracts, contract, sessions)

    await flow.request_pin("customer@example.com")
    await flow.request_pin("other@example.com")

    assert flow.state is SigningState.PIN_REQUESTED
    assert flow.email == "other@example.com"
    assert len(store.outbox) == 2


@pytest.mark.asyncio
async def test_invalid_email_format_rejected_by_flow(api, sessions, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)
    flow = SigningFlow.for_contract(api.contracts, contract, sessions)

    with pytest.raises(ValidationError):
        await flow.request_pin("not-an-email")
    assert flow.state is SigningState.UNSIGNED


@pytest.mark.asyncio
async def test_transport_failure_during_sign_keeps_pin_requested(mock_transport, sessions):
    def handler(request):
        if request.url.path.endswith("/sign"):
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"status": "SUCCESS", "data": None})

    client = ContractsClient(
        ApiTransport(ClientConfig(api_base_url="http://rental.test/api"), transport=mock_transport(handler))
    )
    flow = SigningFlow(ContractSigningTarget(client, 9), sessions)
    await flow.request_pin("customer@example.com")

    with pytest.raises(TransportError):
        await flow.sign("246810")

    assert flow.state is SigningState.PIN_REQUESTED


@pytest.mark.asyncio
async def test_already_signed_contract_starts_signed(api, store, sessions, session, week_window, cart):
    _, contract = await _order_with_contract(api, session, week_window, cart)
    await api.contracts.send_contract_pin(session, contract.contract_id, "customer@example.com")
    await api.contracts.sign_contract(session, contract.contract_id, store.pin_code)

    signed = await api.contracts.fetch_contract(session, contract.contract_id)

    assert SigningFlow.for_contract(api.contracts, signed, sessions).state is SigningState.SIGNED


# ---------------------------------------------------------------------------
# Annexes and handover reports share the flow
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_annex_signing_completes_the_extension(api, store, sessions, session, week_window, cart):
    order, contract = await _order_with_contract(api, session, week_window, cart)
    store.mark_in_use(order.order_id)
    await api.orders.extend_order(session, order.order_id, "2024-06-12T09:00:00")
    annex = (await api.annexes.fetch_annexes(session, contract.contract_id))[0]

    with pytest.raises(ApiError):
        await api.annexes.sign_annex(session, contract.contract_id, annex.annex_id, store.pin_code)

    flow = SigningFlow.for_annex(api.annexes, annex, sessions)
    await flow.request_pin("customer@example.com")
    await flow.sign(store.pin_code)

    refreshed = (await api.annexes.fetch_annexes(session, contract.contract_id))[0]
    reloaded = await api.orders.fetch_order(session, order.order_id)
    assert refreshed.is_fully_signed
    assert reloaded.order_status == "IN_USE"
    assert reloaded.end_date.day == 12


@pytest.mark.asyncio
async def test_handover_report_signature_is_the_pin_email(api, store, sessions, session, week_window, cart):
    order, _ = await _order_with_contract(api, session, week_window, cart)
    store.mark_in_use(order.order_id)
    created = store.add_handover_report(order.order_id, HandoverType.CHECKOUT)

    reports = await api.handover_reports.fetch_handover_reports(session, order.order_id)
    assert [r.handover_report_id for r in reports] == [created["handoverReportId"]]
    assert reports[0].awaits_customer_signature
    assert reports[0].handover_type is HandoverType.CHECKOUT

    flow = SigningFlow.for_handover_report(api.handover_reports, reports[0], sessions)
    await flow.request_pin("customer@example.com")
    signed = await flow.sign(store.pin_code)

    assert signed.customer_signed
    assert signed.status == "BOTH_SIGNED"
    assert store.handover_reports[created["handoverReportId"]]["customerSignature"] == "customer@example.com"
    assert len(await api.handover_reports.fetch_handover_reports(session)) == 1


@pytest.mark.asyncio
async def test_direct_handover_sign_defaults_signature_to_pin(mock_transport, recorded_requests):
    from src.integrations.clients.real_http.handover_reports import HandoverReportsClient

    report = {"handoverReportId": 2, "status": "BOTH_SIGNED", "customerSigned": True}
    client = HandoverReportsClient(
        ApiTransport(
            ClientConfig(api_base_url="https://rental.test/api"),
            transport=mock_transport(lambda r: httpx.Response(200, json={"status": "SUCCESS", "data": report})),
        )
    )

    await client.sign_handover_report(SessionCredentials("tok"), 2, "1111")

    sent = recorded_requests[0]
    assert sent.method == "PATCH"
    assert str(sent.url) == "https://rental.test/api/customers/handover-reports/2/signature"
    assert json.loads(sent.content) == {"pinCode": "1111", "customerSignature": "1111"}


@pytest.mark.asyncio
async def test_handover_pin_failure_surfaces_message(mock_transport):
    from src.integrations.clients.real_http.handover_reports import HandoverReportsClient

    client = HandoverReportsClient(
        ApiTransport(
            ClientConfig(api_base_url="https://rental.test/api"),
            transport=mock_transport(lambda r: httpx.Response(429, json={"message": "Too many PIN requests"})),
        )
    )

    with pytest.raises(ApiError) as exc_info:
        await client.send_handover_pin(SessionCredentials("tok"), 2, "customer@example.com")
    assert exc_info.value.message == "Too many PIN requests"
    assert exc_info.value.status == 429
