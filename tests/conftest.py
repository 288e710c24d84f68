"""Pytest fixtures for the rental client tests."""

from datetime import datetime
from typing import Callable, List

import httpx
import pytest

from src.integrations.clients.mocks.rental_backend import MockRentalStore, create_mock_backend
from src.integrations.contracts.interfaces import SessionCredentials, StaticSessionProvider
from src.integrations.contracts.orders import OrderDetailRequest, RentalWindow
from src.integrations.rental_api import build_rental_api
from src.utils.config_loader import ClientConfig

BASE_URL = "http://rental.test/api"


@pytest.fixture
def config():
    return ClientConfig(api_base_url=BASE_URL, timeout_seconds=5)


@pytest.fixture
def store():
    """In-memory backend state with two customers and three device models."""
    return MockRentalStore.with_defaults(pin_code="246810")


@pytest.fixture
def api(config, store):
    """Every client wired to the FastAPI mock backend."""
    return build_rental_api(config, transport=httpx.ASGITransport(app=create_mock_backend(store)))


@pytest.fixture
def session():
    return SessionCredentials(access_token="token-verified")


@pytest.fixture
def sessions(session):
    return StaticSessionProvider(session)


@pytest.fixture
def no_kyc_session():
    return SessionCredentials(access_token="token-no-kyc", token_type="Bearer")


@pytest.fixture
def week_window():
    return RentalWindow(start=datetime(2024, 6, 1, 9, 0), end=datetime(2024, 6, 8, 9, 0))


@pytest.fixture
def cart():
    return [OrderDetailRequest(device_model_id=7, quantity=1)]


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def mock_transport(recorded_requests) -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.MockTransport]:
    """Build an httpx.MockTransport that records every request before handling it."""

    def factory(handler):
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.MockTransport(recording_handler)

    return factory
