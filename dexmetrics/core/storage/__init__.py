"""
Preference storage backends.
"""

from .base import ConnectionError, DataError, PreferenceStore, StorageBase, StorageError
from .json_storage import JsonPreferenceStore
from .memory import MemoryPreferenceStore
from .preferences import PreferenceService, create_preference_store
from .redis import RedisPreferenceStore

__all__ = [
    "ConnectionError",
    "DataError",
    "PreferenceStore",
    "StorageBase",
    "StorageError",
    "JsonPreferenceStore",
    "MemoryPreferenceStore",
    "PreferenceService",
    "create_preference_store",
    "RedisPreferenceStore",
]
