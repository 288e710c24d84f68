"""
Device Model Catalog HTTP Client.

Purpose:
- Loads the public device-model catalog (no session required)
- Resolves single models by id for order summaries

Caching:
- The full catalog is kept in a TTLCache owned by this client
  (device_model_cache_ttl_seconds, default 60s)
- force_refresh=True bypasses the cached copy and replaces it
- Concurrent callers on a cold cache share one refill: the first caller
  loads the catalog, the rest wait on the lock and read the fresh copy
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from src.integrations.clients.real_http.transport import ApiTransport
from src.integrations.contracts.catalog import DeviceModel
from src.integrations.policy.response_wrappers import unwrap, validate_envelope
from src.utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


class DeviceModelCatalog:
    def __init__(
        self,
        transport: ApiTransport,
        *,
        ttl_seconds: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.transport = transport
        ttl = ttl_seconds if ttl_seconds is not None else transport.config.device_model_cache_ttl_seconds
        self._cache: TTLCache[List[DeviceModel]] = (
            TTLCache(ttl, clock) if clock is not None else TTLCache(ttl)
        )
        self._refill_lock = asyncio.Lock()

    async def fetch_device_models(self, force_refresh: bool = False) -> List[DeviceModel]:
        cached = self._cache.get(force_refresh=force_refresh)
        if cached is not None:
            logger.debug("Device model catalog served from cache (%d models)", len(cached))
            return cached

        async with self._refill_lock:
            # Another caller may have refilled the cache while this one waited.
            if not force_refresh:
                cached = self._cache.get()
                if cached is not None:
                    return cached

            response = await self.transport.get("device-models")
            models = unwrap(validate_envelope(response, DeviceModel, action="load device models", many=True))
            logger.info("Loaded %d device models", len(models))
            return self._cache.set(models)

    async def fetch_device_model(self, device_model_id: int, force_refresh: bool = False) -> Optional[DeviceModel]:
        """The catalog entry for one model, or None when the catalog has no such id."""
        for model in await self.fetch_device_models(force_refresh=force_refresh):
            if model.device_model_id == device_model_id:
                return model
        return None

    def invalidate(self) -> None:
        self._cache.invalidate()
