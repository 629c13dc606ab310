"""
NATS settings for publishing pool snapshots.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import BaseConfig, ConfigError

SNAPSHOT_VIEWS = ("metrics", "summary", "status")


@dataclass
class NatsConfig(BaseConfig):
    """Where snapshots are published and how the connection behaves."""

    NATS_ENABLED: bool = BaseConfig.get_env_bool("NATS_ENABLED", False)

    # An explicit NATS_URL wins over the per-environment defaults
    NATS_URL: str = BaseConfig.get_env("NATS_URL", "")
    NATS_URL_LOCAL: str = BaseConfig.get_env("NATS_URL_LOCAL", "nats://localhost:4222")
    NATS_URL_DEV: str = BaseConfig.get_env("NATS_URL_DEV", "nats://nats:4222")
    NATS_URL_PRODUCTION: str = BaseConfig.get_env("NATS_URL_PRODUCTION", "nats://nats-server:4222")

    NATS_TIMEOUT: int = BaseConfig.get_env_int("NATS_TIMEOUT", 30)
    NATS_MAX_RECONNECT_ATTEMPTS: int = BaseConfig.get_env_int("NATS_MAX_RECONNECT_ATTEMPTS", 60)
    NATS_RECONNECT_TIME_WAIT: int = BaseConfig.get_env_int("NATS_RECONNECT_TIME_WAIT", 2)

    STREAM_NAME: str = BaseConfig.get_env("STREAM_NAME", "POOL_METRICS")
    SUBJECT_PREFIX: str = BaseConfig.get_env("NATS_SUBJECT_PREFIX", "pool")

    def __post_init__(self):
        super().__post_init__()
        if not self.SUBJECT_PREFIX or any(c in self.SUBJECT_PREFIX for c in " *>"):
            raise ConfigError(f"Invalid NATS_SUBJECT_PREFIX: {self.SUBJECT_PREFIX!r}")

    def get_nats_url(self, environment: Optional[str] = None) -> str:
        """Server URL for the given (or current) environment."""
        if self.NATS_URL:
            return self.NATS_URL
        env = environment or self.ENVIRONMENT
        if env == "production":
            return self.NATS_URL_PRODUCTION
        if env in ("dev", "staging"):
            return self.NATS_URL_DEV
        return self.NATS_URL_LOCAL

    def get_metrics_subject(self, pool_address: str, view: str = "metrics") -> str:
        """<prefix>.<view>.<pool address in lower case>"""
        pool = pool_address.lower() if pool_address else "default"
        return f"{self.SUBJECT_PREFIX}.{view}.{pool}"

    @property
    def metrics_subjects(self) -> List[str]:
        """Wildcard subjects captured by the JetStream stream."""
        return [f"{self.SUBJECT_PREFIX}.{view}.*" for view in SNAPSHOT_VIEWS]

    @property
    def connection_params(self) -> Dict[str, Any]:
        """Keyword arguments for nats.connect()."""
        return {
            "servers": [self.get_nats_url()],
            "max_reconnect_attempts": self.NATS_MAX_RECONNECT_ATTEMPTS,
            "reconnect_time_wait": self.NATS_RECONNECT_TIME_WAIT,
            "allow_reconnect": True,
            "connect_timeout": self.NATS_TIMEOUT,
        }
