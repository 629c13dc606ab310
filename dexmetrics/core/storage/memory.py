"""
In-process preference storage, for tests and ephemeral sessions.
"""

import copy
from typing import Any, Dict, Optional

from .base import PreferenceStore


class MemoryPreferenceStore(PreferenceStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._data = copy.deepcopy(initial) if initial is not None else None

    async def connect(self) -> None:
        self.is_connected = True

    async def disconnect(self) -> None:
        self.is_connected = False

    async def health_check(self) -> bool:
        return True

    async def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)

    async def save(self, data: Dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)

    async def clear(self) -> None:
        self._data = None
