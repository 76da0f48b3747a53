"""Storage and caching."""

from majorpredictor.storage.cache import CacheStore, MemoryCache, PredictionCache
from majorpredictor.storage.json_storage import JsonStorage
from majorpredictor.storage.settings_store import Settings, SettingsStore
from majorpredictor.storage.log_store import PredictionLogStore

__all__ = [
    "CacheStore",
    "MemoryCache",
    "PredictionCache",
    "JsonStorage",
    "Settings",
    "SettingsStore",
    "PredictionLogStore",
]
