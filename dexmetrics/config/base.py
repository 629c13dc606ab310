"""
Shared configuration plumbing for dexmetrics.

Every settings class is a dataclass whose defaults are read from the
environment (and from a .env file, loaded once on import). Values can be
overridden per instance through keyword arguments, which is how tests
build configurations without touching os.environ.
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SUPPORTED_ENVIRONMENTS = ["local", "dev", "test", "staging", "production"]

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty transport loggers, kept at WARNING unless LOG_LEVEL is DEBUG
NOISY_LOGGERS = ("web3.providers", "web3.RequestManager", "urllib3", "aiohttp")


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class BaseConfig:
    """Environment, logging and data directory shared by all settings classes."""

    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT)

    def __post_init__(self):
        self.DATA_DIR = Path(self.DATA_DIR)
        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")

        # No-op once the root logger has handlers
        logging.basicConfig(level=level, format=self.LOG_FORMAT)

        if level > logging.DEBUG:
            for name in NOISY_LOGGERS:
                logging.getLogger(name).setLevel(max(level, logging.WARNING))

    def _validate_config(self):
        if self.ENVIRONMENT not in SUPPORTED_ENVIRONMENTS:
            raise ConfigError(
                f"Invalid environment: {self.ENVIRONMENT} (expected one of {SUPPORTED_ENVIRONMENTS})"
            )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Read an environment variable.

        Raises:
            ConfigError: If required is set and the variable is missing
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        value = BaseConfig.get_env(key, str(default) if default is not None else None, required)
        try:
            return int(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be an integer, got: {value}")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        value = BaseConfig.get_env(key, str(default) if default is not None else None, required)
        try:
            return float(value)
        except (ValueError, TypeError):
            raise ConfigError(f"Environment variable '{key}' must be a number, got: {value}")

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        """Truthy values: true, 1, yes, on (case-insensitive)."""
        value = BaseConfig.get_env(key, str(default))
        return value.strip().lower() in ("true", "1", "yes", "on")

    def to_dict(self) -> Dict[str, Any]:
        """Settings as a dict, with passwords masked."""
        data = {}
        for name in self.__dataclass_fields__:
            if name.startswith("_"):
                continue
            value = getattr(self, name)
            if "PASSWORD" in name and value:
                value = "***"
            data[name] = value
        return data
