from pathlib import Path

import pytest

from src.integrations.policy.errors import ConfigurationError
from src.rentals.realtime import ensure_sockjs_path, resolve_realtime_socket_candidates, to_websocket_scheme
from src.utils.config_loader import ENV_OVERRIDES, ClientConfig, load_client_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "client_config.yml"
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------

def test_yaml_values_are_loaded(tmp_path, clean_env):
    path = _write(tmp_path, "api_base_url: https://rental.example.com/api\ntimeout_seconds: 7.5\nuse_plan_dates: true\n")

    config = load_client_config(path)

    assert config.api_base_url == "https://rental.example.com/api"
    assert config.timeout_seconds == 7.5
    assert config.use_plan_dates is True
    assert config.max_attempts == 2


def test_environment_overrides_yaml(tmp_path, clean_env):
    path = _write(tmp_path, "api_base_url: https://file.example.com/api\n")
    clean_env.setenv("RENTAL_API_URL", " http://env.example.com/api ")
    clean_env.setenv("RENTAL_HTTP_TIMEOUT", "3")

    config = load_client_config(path)

    assert config.api_base_url == "http://env.example.com/api"
    assert config.timeout_seconds == 3.0


def test_environment_is_ignored_when_disabled(tmp_path, clean_env):
    path = _write(tmp_path, "api_base_url: https://file.example.com/api\n")
    clean_env.setenv("RENTAL_API_URL", "http://env.example.com/api")

    assert load_client_config(path, use_env=False).api_base_url == "https://file.example.com/api"


def test_empty_file_gives_defaults(tmp_path, clean_env):
    config = load_client_config(_write(tmp_path, ""), use_env=False)
    assert config == ClientConfig()


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_client_config(tmp_path / "nope.yml")


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "timeout_seconds: 0\n",
        "max_attempts: 5\n",
    ],
)
def test_invalid_config_is_configuration_error(tmp_path, clean_env, text):
    with pytest.raises(ConfigurationError):
        load_client_config(_write(tmp_path, text), use_env=False)


# ---------------------------------------------------------------------------
# Realtime endpoints
# ---------------------------------------------------------------------------

def test_scheme_and_path_helpers():
    assert to_websocket_scheme("http://x.test") == "ws://x.test"
    assert to_websocket_scheme("https://x.test") == "wss://x.test"
    assert to_websocket_scheme("wss://x.test") == "wss://x.test"
    assert ensure_sockjs_path("wss://x.test/") == "wss://x.test/ws/websocket"
    assert ensure_sockjs_path("wss://x.test/ws") == "wss://x.test/ws/websocket"
    assert ensure_sockjs_path("wss://x.test/ws/websocket") == "wss://x.test/ws/websocket"


def test_candidates_prefer_explicit_then_api_base():
    config = ClientConfig(api_base_url="https://rental.example.com/api", chat_ws_url="https://chat.example.com/ws/")

    assert resolve_realtime_socket_candidates(config) == [
        "wss://chat.example.com/ws/websocket",
        "wss://rental.example.com/ws/websocket",
    ]


def test_candidates_are_deduplicated():
    config = ClientConfig(api_base_url="http://rental.example.com/api", chat_ws_url="ws://rental.example.com")

    assert resolve_realtime_socket_candidates(config) == ["ws://rental.example.com/ws/websocket"]


def test_invalid_api_base_still_uses_explicit_url():
    config = ClientConfig(api_base_url="not a url", chat_ws_url="wss://chat.example.com")
    assert resolve_realtime_socket_candidates(config) == ["wss://chat.example.com/ws/websocket"]


def test_no_endpoint_is_configuration_error():
    with pytest.raises(ConfigurationError):
        resolve_realtime_socket_candidates(ClientConfig())
