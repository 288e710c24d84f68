import asyncio

import httpx
import pytest

from src.integrations.clients.real_http.device_models import DeviceModelCatalog
from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.policy.errors import ApiError
from src.rentals.order_overview import resolve_device_names
from src.utils.config_loader import ClientConfig
from src.utils.ttl_cache import CacheEntry, TTLCache, is_fresh


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_is_fresh():
    assert not is_fresh(None, 60, 0)
    assert is_fresh(CacheEntry(value=1, timestamp=100.0), 60, 159.9)
    assert not is_fresh(CacheEntry(value=1, timestamp=100.0), 60, 160.0)


def test_cache_expires_and_can_be_bypassed_or_invalidated():
    clock = FakeClock()
    cache = TTLCache(30, clock)

    assert cache.get() is None
    assert cache.set(["a"]) == ["a"]
    assert cache.get() == ["a"]
    assert cache.get(force_refresh=True) is None

    clock.now += 31
    assert cache.get() is None

    cache.set(["b"])
    cache.invalidate()
    assert cache.get() is None


# ---------------------------------------------------------------------------
# Device model catalog
# ---------------------------------------------------------------------------

MODELS = [
    {"deviceModelId": 7, "deviceName": "iPhone 15 Pro", "imageURL": "https://img/7.png"},
    {"deviceModelId": 8, "deviceName": "  "},
]


def _catalog(mock_transport, clock, handler=None):
    handler = handler or (lambda request: httpx.Response(200, json={"status": "SUCCESS", "data": MODELS}))
    transport = ApiTransport(
        ClientConfig(api_base_url="https://rental.test/api", device_model_cache_ttl_seconds=60),
        transport=mock_transport(handler),
    )
    return DeviceModelCatalog(transport, clock=clock)


@pytest.mark.asyncio
async def test_catalog_is_cached_within_ttl(mock_transport, recorded_requests):
    clock = FakeClock()
    catalog = _catalog(mock_transport, clock)

    first = await catalog.fetch_device_models()
    await catalog.fetch_device_model(7)
    clock.now += 59
    await catalog.fetch_device_models()

    assert len(recorded_requests) == 1
    assert "Authorization" not in recorded_requests[0].headers
    assert first[0].image_url == "https://img/7.png"
    assert first[1].display_name is None


@pytest.mark.asyncio
async def test_force_refresh_expiry_and_invalidate_refetch(mock_transport, recorded_requests):
    clock = FakeClock()
    catalog = _catalog(mock_transport, clock)

    await catalog.fetch_device_models()
    await catalog.fetch_device_models(force_refresh=True)
    clock.now += 61
    await catalog.fetch_device_models()
    catalog.invalidate()
    await catalog.fetch_device_models()

    assert len(recorded_requests) == 4


@pytest.mark.asyncio
async def test_unknown_model_is_none(mock_transport):
    assert await _catalog(mock_transport, FakeClock()).fetch_device_model(42) is None


@pytest.mark.asyncio
async def test_failed_load_is_not_cached(mock_transport, recorded_requests):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503, json={"message": "Catalog unavailable"})
        return httpx.Response(200, json={"status": "SUCCESS", "data": MODELS})

    catalog = _catalog(mock_transport, FakeClock(), handler)

    with pytest.raises(ApiError):
        await catalog.fetch_device_models()
    assert len(await catalog.fetch_device_models()) == 2


@pytest.mark.asyncio
async def test_concurrent_lookups_on_cold_cache_share_one_load(mock_transport, recorded_requests):
    async def slow_handler(request):
        await asyncio.sleep(0.01)
        return httpx.Response(200, json={"status": "SUCCESS", "data": MODELS})

    catalog = _catalog(mock_transport, FakeClock(), slow_handler)

    found = await asyncio.gather(*(catalog.fetch_device_model(i) for i in (7, 8, 42, 7)))

    assert len(recorded_requests) == 1
    assert [m.device_model_id if m else None for m in found] == [7, 8, None, 7]


@pytest.mark.asyncio
async def test_forced_name_resolution_reloads_catalog_once(mock_transport, recorded_requests):
    async def slow_handler(request):
        await asyncio.sleep(0.01)
        return httpx.Response(200, json={"status": "SUCCESS", "data": MODELS})

    catalog = _catalog(mock_transport, FakeClock(), slow_handler)
    await catalog.fetch_device_models()

    names = await resolve_device_names(catalog, [7, 8, 9], force_refresh=True)

    assert len(recorded_requests) == 2
    assert names[7].name == "iPhone 15 Pro"
    assert not names[9].resolved
