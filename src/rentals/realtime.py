"""
Realtime (chat / notification) endpoint derivation.

The chat and notification collaborators connect over STOMP on a SockJS
websocket. This module only works out which URLs to try, in order:

1. The explicit chat_ws_url, if configured
2. The REST base URL with a trailing /api removed

Each candidate gets a ws:// or wss:// scheme and a trailing /ws/websocket path.
"""

from __future__ import annotations

import logging
from typing import List

from src.integrations.clients.real_http.transport import normalize_base_url
from src.integrations.policy.errors import ConfigurationError
from src.utils.config_loader import ClientConfig

logger = logging.getLogger(__name__)

SOCKJS_PATH = "/ws/websocket"


def to_websocket_scheme(url: str) -> str:
    if url.startswith("http://"):
        return "ws://" + url[len("http://"):]
    if url.startswith("https://"):
        return "wss://" + url[len("https://"):]
    return url


def ensure_sockjs_path(url: str) -> str:
    base = url.rstrip("/")
    if base.endswith(SOCKJS_PATH):
        return base
    if base.endswith("/ws"):
        return base + "/websocket"
    return base + SOCKJS_PATH


def resolve_realtime_socket_candidates(config: ClientConfig) -> List[str]:
    candidates: List[str] = []

    explicit = (config.chat_ws_url or "").strip()
    if explicit:
        candidates.append(ensure_sockjs_path(to_websocket_scheme(explicit.rstrip("/"))))

    try:
        api_base = normalize_base_url(config.api_base_url)
    except ConfigurationError as exc:
        logger.warning("Unable to derive websocket endpoint from API base URL: %s", exc)
    else:
        if api_base.endswith("/api"):
            api_base = api_base[: -len("/api")]
        candidates.append(ensure_sockjs_path(to_websocket_scheme(api_base)))

    unique = list(dict.fromkeys(candidates))
    if not unique:
        raise ConfigurationError("No websocket endpoint configured. Please set RENTAL_CHAT_WS_URL.")
    return unique
