"""
Rental backend HTTP transport.

Purpose:
- Builds absolute endpoint URLs from the configured base URL
- Executes requests with httpx, recovering once from a wrong-scheme guess

Retry protocol:
- A logical call gets an ordered list of transport candidates: the URL as
  given, then its https:// rewrite when the URL is plain http://.
- Candidates share one attempt budget (max_attempts, default 2).
- Only network-level failures move on to the next candidate; an HTTP error
  status is a response and is returned to the caller untouched.
- Non-idempotent calls only move on when the connection itself failed,
  i.e. the request never reached a server.

Important:
- This is the ONLY place where the rental client performs HTTP I/O.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

import httpx

from src.integrations.contracts.interfaces import SessionCredentials
from src.integrations.policy.errors import ConfigurationError, TransportError
from src.utils.config_loader import ClientConfig

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "We can't reach the server right now. Please check your connection and try again."

Segment = Union[str, int]
QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


def normalize_base_url(value: Optional[str]) -> str:
    base = (value or "").strip().rstrip("/")
    if not base:
        raise ConfigurationError("API URL is not configured. Please set RENTAL_API_URL.")
    if not base.startswith(("http://", "https://")):
        raise ConfigurationError(f"API URL must start with http:// or https:// (got {base!r}).")
    return base


def join_url(base_url: str, *segments: Segment) -> str:
    path = "/".join(
        part
        for part in (str(segment).strip("/") for segment in segments)
        if part
    )
    return f"{base_url}/{path}" if path else base_url


def transport_candidates(url: str) -> List[str]:
    """Ordered URLs to try for one logical call."""
    candidates = [url]
    if url.startswith("http://"):
        candidates.append("https://" + url[len("http://"):])
    return candidates


class ApiTransport:
    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.timeout_seconds = config.timeout_seconds
        self.max_attempts = config.max_attempts
        # Injected for tests and the in-process mock backend
        self._transport = transport

    def build_url(self, *segments: Segment) -> str:
        return join_url(normalize_base_url(self.config.api_base_url), *segments)

    @staticmethod
    def headers(session: Optional[SessionCredentials] = None, *, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        if session is not None:
            headers["Authorization"] = session.authorization_header()
        return headers

    async def execute_with_retry(
        self,
        method: str,
        url: str,
        *,
        session: Optional[SessionCredentials] = None,
        json: Any = None,
        params: Optional[QueryParams] = None,
        max_attempts: Optional[int] = None,
        idempotent: bool = True,
    ) -> httpx.Response:
        budget = max_attempts if max_attempts is not None else self.max_attempts
        if budget < 1:
            raise ValueError("max_attempts must be at least 1")

        candidates = transport_candidates(url)[:budget]
        retryable: Tuple[Type[Exception], ...] = (httpx.TransportError,) if idempotent else (httpx.ConnectError,)
        headers = self.headers(session, json_body=json is not None)
        attempted: List[str] = []
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            for candidate in candidates:
                attempted.append(candidate)
                try:
                    logger.debug("%s %s (attempt %d/%d)", method, candidate, len(attempted), len(candidates))
                    response = await client.request(method, candidate, json=json, params=params, headers=headers)
                    logger.info("%s %s -> %s", method, candidate, response.status_code)
                    return response
                except retryable as exc:
                    last_error = exc
                    if candidate != candidates[-1]:
                        logger.warning(
                            "Failed to reach %s (%s), retrying with %s", candidate, type(exc).__name__, candidates[len(attempted)]
                        )
                except httpx.TransportError as exc:
                    last_error = exc
                    logger.error("Request to %s failed and is not safe to retry: %s", candidate, exc)
                    break

        logger.error("Giving up on %s %s after %d attempt(s): %s", method, url, len(attempted), last_error)
        raise TransportError(UNREACHABLE_MESSAGE, attempted_urls=attempted) from last_error

    async def get(self, *segments: Segment, session: Optional[SessionCredentials] = None, params: Optional[QueryParams] = None) -> httpx.Response:
        return await self.execute_with_retry("GET", self.build_url(*segments), session=session, params=params)
