"""
Snapshot Cache Tests
"""

import time

from tradernet.models.schemas import GraphData, NetworkSnapshot
from tradernet.services.cache import NetworkSnapshotCache

from conftest import NOW


def _snapshot(cycle_at=NOW):
    return NetworkSnapshot(traders=(), connections=(), graph=GraphData(), cycle_at=cycle_at)


def test_put_and_get():
    cache = NetworkSnapshotCache(ttl=60)
    snapshot = _snapshot()

    cache.put("k", snapshot)

    assert cache.get("k") is snapshot
    assert "k" in cache
    assert len(cache) == 1


def test_put_replaces_previous_cycle():
    cache = NetworkSnapshotCache(ttl=60)
    cache.put("k", _snapshot())
    newer = _snapshot()
    cache.put("k", newer)
    assert cache.get("k") is newer
    assert len(cache) == 1


def test_missing_key():
    assert NetworkSnapshotCache(ttl=60).get("nope") is None


def test_invalidate_one_and_all():
    cache = NetworkSnapshotCache(ttl=60)
    cache.put("a", _snapshot())
    cache.put("b", _snapshot())

    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") is not None

    cache.invalidate()
    assert len(cache) == 0

    cache.invalidate("missing")


def test_expiry():
    cache = NetworkSnapshotCache(ttl=0.05)
    cache.put("k", _snapshot())
    time.sleep(0.1)
    assert cache.get("k") is None


def test_latest_outlives_expiry():
    cache = NetworkSnapshotCache(ttl=0.05)
    snapshot = _snapshot()
    cache.put("k", snapshot)
    time.sleep(0.1)

    assert cache.get("k") is None
    assert cache.latest("k") is snapshot
    assert cache.latest("other") is None


def test_invalidate_drops_latest():
    cache = NetworkSnapshotCache(ttl=60)
    cache.put("a", _snapshot())
    cache.put("b", _snapshot())

    cache.invalidate("a")
    assert cache.latest("a") is None
    assert cache.latest("b") is not None

    cache.invalidate()
    assert cache.latest("b") is None
