"""
Snapshot cache for computed trader networks.
Owned by the caller and handed to the network service explicitly.
"""
from __future__ import annotations
from typing import Hashable, Optional

from cachetools import LRUCache, TTLCache

from tradernet.models.schemas import NetworkSnapshot


class NetworkSnapshotCache:
    """
    Holds the most recent NetworkSnapshot per request key.
    A put replaces the previous snapshot for that key in one step.

    Fresh snapshots expire after `ttl` seconds. The last snapshot per key is
    kept past expiry as the baseline for change detection.
    """

    def __init__(self, ttl: float, maxsize: int = 64):
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._latest: LRUCache = LRUCache(maxsize=maxsize)

    def get(self, key: Hashable) -> Optional[NetworkSnapshot]:
        return self._cache.get(key)

    def latest(self, key: Hashable) -> Optional[NetworkSnapshot]:
        """Last snapshot stored under `key`, expired or not."""
        return self._latest.get(key)

    def put(self, key: Hashable, snapshot: NetworkSnapshot) -> None:
        self._cache[key] = snapshot
        self._latest[key] = snapshot

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when no key is given."""
        if key is None:
            self._cache.clear()
            self._latest.clear()
        else:
            self._cache.pop(key, None)
            self._latest.pop(key, None)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
