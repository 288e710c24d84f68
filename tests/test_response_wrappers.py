import httpx
import pytest

from src.integrations.contracts.orders import RentalOrder
from src.integrations.policy.errors import ApiError, AuthError, IntegrationResponseError
from src.integrations.policy.response_wrappers import (
    Err,
    Ok,
    ensure_success_status,
    extract_error_message,
    is_not_found,
    require_session,
    unwrap,
    validate_envelope,
)


def _order(**overrides):
    order = {
        "orderId": 5,
        "startDate": "2024-06-01T09:00:00",
        "endDate": "2024-06-08T09:00:00",
        "orderStatus": "PENDING",
        "depositAmountHeld": 100.0,
        "depositAmountUsed": 20.0,
        "depositAmountRefunded": 30.0,
    }
    order.update(overrides)
    return order


def test_success_envelope_is_validated_into_model():
    response = httpx.Response(200, json={"status": "SUCCESS", "data": _order()})

    result = validate_envelope(response, RentalOrder, action="load the order")

    assert isinstance(result, Ok)
    assert result.value.order_id == 5
    assert result.value.deposit_balance == 50.0


def test_http_401_becomes_auth_error():
    response = httpx.Response(401, json={"message": "Token expired"})

    result = validate_envelope(response, action="load orders")

    assert isinstance(result, Err)
    assert isinstance(result.error, AuthError)
    assert result.error.message == "Token expired"


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "TOKEN_EXPIRED", "data": None},
        {"status": "UNAUTHORIZED", "data": None},
        {"status": "ERROR", "code": 401, "data": None},
    ],
)
def test_envelope_session_errors_become_auth_error(payload):
    result = validate_envelope(httpx.Response(200, json=payload), action="load orders")
    assert isinstance(result.error, AuthError)


def test_non_2xx_carries_status_and_best_message():
    response = httpx.Response(409, json={"details": "Order is not in use", "error": "Conflict"})

    error = validate_envelope(response, action="confirm the return").error

    assert isinstance(error, ApiError)
    assert error.status == 409
    assert error.message == "Order is not in use"


def test_unparseable_error_body_falls_back_to_status_message():
    response = httpx.Response(502, content=b"<html>Bad gateway</html>")

    error = validate_envelope(response, action="load orders").error

    assert error.message == "Unable to load orders (status 502)."
    assert error.status == 502


def test_business_error_keeps_code_and_business_status():
    payload = {"status": "ORDER_LOCKED", "message": "Order is locked", "code": 423, "data": None}

    error = validate_envelope(httpx.Response(200, json=payload), action="extend the order").error

    assert isinstance(error, ApiError)
    assert error.status == 423
    assert error.business_status == "ORDER_LOCKED"
    assert error.message == "Order is locked"


def test_null_data_is_an_error_unless_allowed():
    response = httpx.Response(200, json={"status": "SUCCESS", "data": None})

    assert isinstance(validate_envelope(response, action="x"), Err)
    assert isinstance(validate_envelope(response, action="x", many=True), Err)
    assert validate_envelope(response, action="x", allow_null_data=True) == Ok(None)


def test_empty_list_is_a_valid_many_result():
    response = httpx.Response(200, json={"status": "SUCCESS", "data": []})
    assert unwrap(validate_envelope(response, RentalOrder, action="x", many=True)) == []


def test_many_requires_a_list():
    response = httpx.Response(200, json={"status": "SUCCESS", "data": {"orderId": 1}})
    assert isinstance(validate_envelope(response, RentalOrder, action="x", many=True).error, IntegrationResponseError)


def test_inconsistent_orders_are_kept_and_flagged():
    overdrawn = httpx.Response(200, json={"status": "SUCCESS", "data": _order(depositAmountUsed=90.0)})
    backwards = httpx.Response(200, json={"status": "SUCCESS", "data": _order(endDate="2024-05-01T09:00:00")})

    for response in (overdrawn, backwards):
        order = validate_envelope(response, RentalOrder, action="load the order").value
        assert order.order_id == 5
        assert not order.is_consistent
        assert len(order.consistency_issues) == 1

    consistent = validate_envelope(
        httpx.Response(200, json={"status": "SUCCESS", "data": _order()}), RentalOrder, action="load the order"
    ).value
    assert consistent.is_consistent
    assert consistent.deposit_balance == 50.0


def test_non_json_success_body_is_integration_error():
    error = validate_envelope(httpx.Response(200, content=b"OK"), action="x").error
    assert isinstance(error, IntegrationResponseError)


def test_unwrap_raises_the_carried_error():
    with pytest.raises(ApiError):
        unwrap(Err(ApiError("nope", status=500)))


def test_ensure_success_status_ignores_body():
    assert ensure_success_status(httpx.Response(204), action="send PIN") == Ok(None)
    error = ensure_success_status(httpx.Response(400, json={"message": "Bad email"}), action="send PIN").error
    assert error.message == "Bad email"


def test_is_not_found():
    assert is_not_found(Err(ApiError("whatever", status=404)))
    assert is_not_found(Err(ApiError("Settlement Not Found for order 9", status=200, business_status="ERROR")))
    assert not is_not_found(Err(ApiError("Settlement Not Found for order 9", status=400)))
    assert not is_not_found(Err(ApiError("Settlement not found", status=503)))
    assert not is_not_found(Err(ApiError("Server error", status=500)))


def test_auth_errors_are_never_not_found():
    assert not is_not_found(Err(AuthError("Account not found", status=401)))
    assert not is_not_found(Err(AuthError("Account not found", status=404)))

    envelope = httpx.Response(200, json={"status": "UNAUTHORIZED", "message": "Account not found"})
    assert not is_not_found(validate_envelope(envelope, action="load the settlement"))


def test_not_found_envelope_on_success_status():
    response = httpx.Response(200, json={"status": "ERROR", "message": "Settlement not found"})
    assert is_not_found(validate_envelope(response, action="load the settlement"))

    response = httpx.Response(400, json={"status": "ERROR", "message": "Settlement not found"})
    assert not is_not_found(validate_envelope(response, action="load the settlement"))


def test_extract_error_message_precedence():
    assert extract_error_message({"message": " ", "details": "d", "error": "e"}) == "d"
    assert extract_error_message({"error": "e"}) == "e"
    assert extract_error_message("oops") is None


def test_require_session_rejects_missing_token():
    from src.integrations.contracts.interfaces import SessionCredentials

    with pytest.raises(AuthError):
        require_session(None, "load orders")
    with pytest.raises(AuthError):
        require_session(SessionCredentials(access_token="  "), "load orders")
