"""
Redis preference storage.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from .base import ConnectionError, DataError, PreferenceStore

logger = logging.getLogger(__name__)


class RedisPreferenceStore(PreferenceStore):
    """
    Keeps the preference as a JSON string under one Redis key.
    """

    def __init__(self, config: Dict[str, Any], key: str = "dexmetrics:preferences"):
        """
        Initialize Redis storage.

        Args:
            config: Connection kwargs as returned by
                StorageConfig.get_redis_connection_kwargs()
            key: Key holding the preference
        """
        super().__init__(config)
        self.key = key
        self.client: Optional[Redis] = None

    async def connect(self) -> None:
        """Establish connection to Redis."""
        try:
            pool_kwargs = {
                "host": self.config.get("host", "localhost"),
                "port": self.config.get("port", 6379),
                "db": self.config.get("db", 0),
                "decode_responses": self.config.get("decode_responses", True),
                "socket_timeout": self.config.get("socket_timeout", 5),
            }
            for optional in ("password", "socket_connect_timeout", "max_connections"):
                if self.config.get(optional) is not None:
                    pool_kwargs[optional] = self.config[optional]

            pool = redis.ConnectionPool(**pool_kwargs)
            self.client = redis.Redis(connection_pool=pool)

            # Test connection
            await self.client.ping()

            self.is_connected = True
            logger.info("Redis connection established")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise ConnectionError(f"Redis connection failed: {e}")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
        self.is_connected = False
        logger.info("Redis connection closed")

    async def health_check(self) -> bool:
        if not self.client:
            return False
        try:
            return await self.client.ping() is True
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    def _require_client(self) -> Redis:
        if not self.client:
            raise ConnectionError("Not connected to Redis")
        return self.client

    async def load(self) -> Optional[Dict[str, Any]]:
        client = self._require_client()
        try:
            raw = await client.get(self.key)
        except Exception as e:
            logger.error(f"Failed to read {self.key}: {e}")
            raise DataError(f"Redis get failed: {e}")
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise DataError(f"Stored preference under {self.key} is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise DataError(f"Expected a JSON object under {self.key}, got {type(data).__name__}")
        return data

    async def save(self, data: Dict[str, Any]) -> None:
        client = self._require_client()
        try:
            await client.set(self.key, json.dumps(data))
        except Exception as e:
            logger.error(f"Failed to write {self.key}: {e}")
            raise DataError(f"Redis set failed: {e}")

    async def clear(self) -> None:
        client = self._require_client()
        await client.delete(self.key)
