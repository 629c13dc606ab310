"""
Single entry point to dexmetrics settings.

ConfigManager builds every settings class once and exposes them as
properties, plus the few derived views (reader settings, NATS publishing
settings) that combine more than one of them.
"""

import logging
from typing import Any, Dict, Optional

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .nats_config import NatsConfig
from .pool import PoolConfig
from .storage import StorageConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Holds the chain, pool, storage and NATS settings of one process."""

    def __init__(self, environment: Optional[str] = None):
        """
        Args:
            environment: Overrides ENVIRONMENT (local, dev, test, staging, production)
        """
        try:
            overrides = {"ENVIRONMENT": environment} if environment else {}
            self._base_config = BaseConfig(**overrides)
            self._chain_config = ChainConfig(**overrides)
            self._pool_config = PoolConfig(**overrides)
            self._storage_config = StorageConfig(**overrides)
            self._nats_config = NatsConfig(**overrides)
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

        logger.info(f"Configuration initialized for environment: {self.environment}")

    @property
    def environment(self) -> str:
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        return self._base_config

    @property
    def chains(self) -> ChainConfig:
        return self._chain_config

    @property
    def pool(self) -> PoolConfig:
        return self._pool_config

    @property
    def storage(self) -> StorageConfig:
        return self._storage_config

    @property
    def nats(self) -> NatsConfig:
        return self._nats_config

    def _chain(self, chain_name: Optional[str]) -> str:
        return chain_name or self.chains.DEFAULT_CHAIN

    def get_window_blocks(self, chain_name: Optional[str] = None) -> int:
        """Rolling metrics window in blocks: WINDOW_HOURS at the chain's block rate."""
        return self.chains.get_window_blocks(self._chain(chain_name), self.pool.WINDOW_HOURS)

    def get_reader_config(self, chain_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Everything needed to build the ledger and reserves readers.

        Raises:
            ValueError: If the chain is not supported
        """
        chain = self._chain(chain_name)
        chain_config = self.chains.get_chain_config(chain)
        return {
            "chain_name": chain,
            "chain_id": chain_config["chain_id"],
            "rpc_url": chain_config["rpc_url"],
            "pool_address": self.pool.POOL_ADDRESS,
            "window_blocks": self.get_window_blocks(chain),
            "history_blocks": self.pool.HISTORY_BLOCKS,
            "max_retries": self.chains.MAX_RETRY_ATTEMPTS,
            "retry_delay": self.chains.RETRY_DELAY_SECONDS,
            "request_timeout": self.chains.REQUEST_TIMEOUT_SECONDS,
        }

    def get_nats_publishing_config(self) -> Dict[str, Any]:
        pool = self.pool.POOL_ADDRESS
        return {
            "enabled": self.nats.NATS_ENABLED,
            "url": self.nats.get_nats_url(),
            "stream_name": self.nats.STREAM_NAME,
            "connection_params": self.nats.connection_params,
            "metrics_subject": self.nats.get_metrics_subject(pool, "metrics"),
            "summary_subject": self.nats.get_metrics_subject(pool, "summary"),
        }

    def validate_configuration(self) -> bool:
        """
        Cross-check settings that individual classes cannot validate alone.

        Raises:
            ConfigError: If DEFAULT_CHAIN is not a supported chain
        """
        try:
            self.chains.get_chain_config(self.chains.DEFAULT_CHAIN)
        except ValueError as e:
            raise ConfigError(f"Configuration validation failed: {e}")

        if not self.pool.POOL_ADDRESS:
            logger.warning("POOL_ADDRESS is not set; ledger reads will fail until it is configured")

        missing_tokens = [
            name for name in ("TOKEN_A_ADDRESS", "TOKEN_B_ADDRESS") if not getattr(self.pool, name)
        ]
        if missing_tokens:
            logger.warning(
                f"{' and '.join(missing_tokens)} not set; swaps cannot be attributed to a token "
                f"and metrics refreshes will fail until configured"
            )
        elif self.pool.TOKEN_A_ADDRESS.lower() == self.pool.TOKEN_B_ADDRESS.lower():
            raise ConfigError("TOKEN_A_ADDRESS and TOKEN_B_ADDRESS must differ")

        logger.debug("Configuration validation successful")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "base": self.base.to_dict(),
            "chains": self.chains.to_dict(),
            "pool": self.pool.to_dict(),
            "storage": self.storage.to_dict(),
            "nats": self.nats.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Process-wide ConfigManager, built and validated on first use.

    Args:
        environment: Override environment
        force_reload: Rebuild even if a manager already exists
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
        _config_manager.validate_configuration()

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    return get_config(environment=environment, force_reload=True)
