"""Two-tier score cache: in-memory TTL tier over a durable store."""

from readiness_engine.cache.coordinator import CacheCoordinator, reconstruct_breakdown
from readiness_engine.cache.durable import DurableStore, InMemoryDurableStore, JsonFileDurableStore
from readiness_engine.cache.keys import CacheKey
from readiness_engine.cache.memory import CacheStats, MemoryCache

__all__ = [
    "CacheCoordinator",
    "CacheKey",
    "CacheStats",
    "DurableStore",
    "InMemoryDurableStore",
    "JsonFileDurableStore",
    "MemoryCache",
    "reconstruct_breakdown",
]
