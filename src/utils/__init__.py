"""
Utility modules for the rental client
"""
from .config_loader import ClientConfig, load_client_config
from .ttl_cache import TTLCache

__all__ = [
    'ClientConfig',
    'load_client_config',
    'TTLCache',
]
