"""
Base classes and interfaces for preference storage.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for storage-related errors."""
    pass


class ConnectionError(StorageError):
    """Raised when connection to storage backend fails."""
    pass


class DataError(StorageError):
    """Raised when data operations fail."""
    pass


class StorageBase(ABC):
    """
    Abstract base class for storage implementations.
    All storage backends must implement these methods.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.is_connected = False

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the storage backend."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the storage backend."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the storage backend is healthy and accessible.

        Returns:
            bool: True if healthy, False otherwise
        """
        pass

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


class PreferenceStore(StorageBase):
    """
    Persistence port for the user's slippage preference.

    Stores a plain dict {"tolerance_bps": int, "deadline_minutes": int};
    validation and clamping belong to PreferenceService.
    """

    @abstractmethod
    async def load(self) -> Optional[Dict[str, Any]]:
        """
        Stored preference, or None if nothing was saved yet.

        Raises:
            DataError: If the stored value cannot be read
        """
        pass

    @abstractmethod
    async def save(self, data: Dict[str, Any]) -> None:
        """
        Persist the preference, replacing any previous value.

        Raises:
            DataError: If the value cannot be written
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove the stored preference."""
        pass
