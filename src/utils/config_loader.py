"""
Configuration loader for the rental client
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from src.integrations.policy.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "client_config.yml"

# Environment variable -> config field
ENV_OVERRIDES = {
    "RENTAL_API_URL": "api_base_url",
    "RENTAL_CHAT_WS_URL": "chat_ws_url",
    "RENTAL_HTTP_TIMEOUT": "timeout_seconds",
    "RENTAL_HTTP_MAX_ATTEMPTS": "max_attempts",
}


class ClientConfig(BaseModel):
    """Rental backend client configuration"""

    api_base_url: Optional[str] = None
    chat_ws_url: Optional[str] = None
    timeout_seconds: float = Field(default=20.0, gt=0)
    max_attempts: int = Field(default=2, ge=1, le=2)
    device_model_cache_ttl_seconds: float = Field(default=60.0, ge=0)
    use_plan_dates: bool = False


def load_client_config(config_path: Optional[Path] = None, *, use_env: bool = True) -> ClientConfig:
    """
    Load and validate the client configuration

    Values come from the YAML file first, then environment variables
    (including a local .env file) override them.

    Args:
        config_path: Path to config file. Defaults to config/client_config.yml;
            a missing default file is not an error.
        use_env: Apply RENTAL_* environment overrides.

    Returns:
        Validated ClientConfig object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ConfigurationError: If the config doesn't match the schema
    """
    data: Dict[str, Any] = {}

    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping.")
    else:
        logger.info("No client config at %s, using defaults", path)

    if use_env:
        load_dotenv()
        for env_name, field_name in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[field_name] = value.strip()

    try:
        config = ClientConfig(**data)
    except ValidationError as e:
        logger.error(f"Client config validation failed: {e}")
        raise ConfigurationError(f"Invalid client configuration: {e}") from e

    logger.info("Loaded client config (api_base_url=%s)", config.api_base_url or "<unset>")
    return config
