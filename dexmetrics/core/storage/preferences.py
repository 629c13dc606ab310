"""
Loading and saving the slippage preference.
"""

import logging
from typing import Optional

from ...config.storage import StorageConfig
from ...models import SlippagePreference
from ...pricing.slippage import DEFAULT_PREFERENCE, clamp_preference, validate_preference
from .base import DataError, PreferenceStore
from .json_storage import JsonPreferenceStore
from .memory import MemoryPreferenceStore
from .redis import RedisPreferenceStore

logger = logging.getLogger(__name__)


class PreferenceService:
    """
    Validating front of a PreferenceStore.

    load() never fails the caller for bad stored data: missing values give
    the defaults, out-of-range values are clamped, unreadable data falls
    back to the defaults with a warning. save() rejects invalid input.
    """

    def __init__(self, store: PreferenceStore):
        self.store = store

    async def load(self) -> SlippagePreference:
        try:
            data = await self.store.load()
        except DataError as e:
            logger.warning(f"Stored preference unreadable, using defaults: {e}")
            return DEFAULT_PREFERENCE

        if data is None:
            return DEFAULT_PREFERENCE

        try:
            tolerance = int(data.get("tolerance_bps", DEFAULT_PREFERENCE.tolerance_bps))
            deadline = int(data.get("deadline_minutes", DEFAULT_PREFERENCE.deadline_minutes))
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Stored preference malformed ({data!r}), using defaults: {e}")
            return DEFAULT_PREFERENCE

        return clamp_preference(tolerance, deadline)

    async def save(self, preference: SlippagePreference) -> SlippagePreference:
        """
        Persist a preference.

        Raises:
            InvalidPreferenceError: If either value is out of range
            DataError: If the store cannot write
        """
        validate_preference(preference)
        await self.store.save(
            {
                "tolerance_bps": preference.tolerance_bps,
                "deadline_minutes": preference.deadline_minutes,
            }
        )
        logger.info(
            f"Saved preference: {preference.tolerance_percent}% tolerance, "
            f"{preference.deadline_minutes} min deadline"
        )
        return preference

    async def update(
        self,
        tolerance_bps: Optional[int] = None,
        deadline_minutes: Optional[int] = None,
    ) -> SlippagePreference:
        """Change one or both values, keeping the other as stored."""
        current = await self.load()
        updated = SlippagePreference(
            tolerance_bps=current.tolerance_bps if tolerance_bps is None else tolerance_bps,
            deadline_minutes=current.deadline_minutes if deadline_minutes is None else deadline_minutes,
        )
        return await self.save(updated)

    async def reset(self) -> SlippagePreference:
        await self.store.clear()
        return DEFAULT_PREFERENCE


def create_preference_store(config: StorageConfig) -> PreferenceStore:
    """Preference store for the configured backend."""
    backend = config.PREFERENCE_BACKEND
    if backend == "json":
        return JsonPreferenceStore(config.preference_path)
    if backend == "redis":
        return RedisPreferenceStore(config.get_redis_connection_kwargs(), key=config.PREFERENCE_KEY)
    if backend == "memory":
        return MemoryPreferenceStore()
    raise ValueError(f"Unsupported preference backend: {backend}")
