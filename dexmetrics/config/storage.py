"""
Storage configuration for dexmetrics.

Covers the preference persistence backend and its Redis connection.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .base import BaseConfig, ConfigError

SUPPORTED_PREFERENCE_BACKENDS = ["json", "redis", "memory"]


@dataclass
class StorageConfig(BaseConfig):
    """Preference storage configuration."""

    # Backend selection
    PREFERENCE_BACKEND: str = BaseConfig.get_env("PREFERENCE_BACKEND", "json")
    PREFERENCE_KEY: str = BaseConfig.get_env("PREFERENCE_KEY", "dexmetrics:preferences")
    PREFERENCE_FILE: str = BaseConfig.get_env("PREFERENCE_FILE", "preferences.json")

    # Redis Configuration
    REDIS_HOST: str = BaseConfig.get_env("REDIS_HOST", "localhost")
    REDIS_PORT: int = BaseConfig.get_env_int("REDIS_PORT", 6379)
    REDIS_PASSWORD: Optional[str] = BaseConfig.get_env("REDIS_PASSWORD") or None
    REDIS_DB: int = BaseConfig.get_env_int("REDIS_DB", 0)
    REDIS_MAX_CONNECTIONS: int = BaseConfig.get_env_int("REDIS_MAX_CONNECTIONS", 10)

    # Connection settings
    CONNECTION_TIMEOUT: int = BaseConfig.get_env_int("CONNECTION_TIMEOUT", 30)

    def __post_init__(self):
        super().__post_init__()
        if self.PREFERENCE_BACKEND not in SUPPORTED_PREFERENCE_BACKENDS:
            raise ConfigError(
                f"Invalid PREFERENCE_BACKEND: {self.PREFERENCE_BACKEND} "
                f"(expected one of {SUPPORTED_PREFERENCE_BACKENDS})"
            )

    @property
    def preference_path(self) -> Path:
        """Location of the JSON preference file."""
        path = Path(self.PREFERENCE_FILE)
        return path if path.is_absolute() else Path(self.DATA_DIR) / path

    def get_redis_connection_kwargs(self) -> dict:
        """Get Redis connection parameters."""
        kwargs = {
            "host": self.REDIS_HOST,
            "port": self.REDIS_PORT,
            "db": self.REDIS_DB,
            "decode_responses": True,
            "socket_timeout": self.CONNECTION_TIMEOUT,
            "socket_connect_timeout": self.CONNECTION_TIMEOUT,
            "max_connections": self.REDIS_MAX_CONNECTIONS,
        }

        # Only add password if it's actually set and not empty/whitespace
        if self.REDIS_PASSWORD and self.REDIS_PASSWORD.strip():
            kwargs["password"] = self.REDIS_PASSWORD.strip()

        return kwargs
