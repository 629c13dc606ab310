"""
Configuration management for dexmetrics.

Use get_config() to access all configuration settings.

Example:
    from dexmetrics.config import get_config

    config = get_config()

    # Chain settings
    rpc_url = config.chains.get_rpc_url("lisk_sepolia")

    # Pool settings
    pair = config.pool.token_pair()
    window_blocks = config.get_window_blocks()

    # Preference storage and NATS
    backend = config.storage.PREFERENCE_BACKEND
    nats_url = config.nats.get_nats_url()
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config
from .nats_config import NatsConfig
from .pool import PoolConfig
from .storage import StorageConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "PoolConfig",
    "StorageConfig",
    "NatsConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
