"""
JSON file preference storage.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .base import DataError, PreferenceStore

logger = logging.getLogger(__name__)


class JsonPreferenceStore(PreferenceStore):
    """
    Keeps the preference in a single JSON file.

    Writes go to a temporary file that is then renamed over the target,
    so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, path: Union[str, Path], pretty: bool = True):
        super().__init__({"path": str(path)})
        self.path = Path(path)
        self.pretty = pretty

    async def connect(self) -> None:
        """Ensure the parent directory exists."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.is_connected = True
        logger.info(f"JSON preference storage at {self.path}")

    async def disconnect(self) -> None:
        """No-op for JSON storage."""
        self.is_connected = False

    async def health_check(self) -> bool:
        return self.path.parent.exists() and self.path.parent.is_dir()

    async def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load preferences from {self.path}: {e}")
            raise DataError(f"JSON load failed: {e}")
        if not isinstance(data, dict):
            raise DataError(f"Expected a JSON object in {self.path}, got {type(data).__name__}")
        return data

    async def save(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2 if self.pretty else None)
            temp_path.replace(self.path)
            logger.debug(f"Saved preferences to {self.path}")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save preferences to {self.path}: {e}")
            raise DataError(f"JSON save failed: {e}")

    async def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
