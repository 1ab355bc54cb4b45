"""Tests for PersistentVerificationCache.

Tests cover:
- Get/set in memory and across restarts
- Lazy TTL expiry on read
- Dirty tracking and batched flush
- Stats and clear
- Corrupt or missing backing files
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from event_trust.data_management.schemas import VerificationResult
from event_trust.data_management.verification_cache import (
    CACHE_FILE_VERSION,
    PersistentVerificationCache,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_file(tmp_path):
    return tmp_path / "cache" / "event-verification.json"


@pytest.fixture
def verdict() -> VerificationResult:
    return VerificationResult(
        verified=True,
        confidence="high",
        reasoning="Dice listing confirms the date.",
    )


# ── Tests ─────────────────────────────────────────────────────────────────


class TestGetSet:
    def test_missing_key_returns_none(self, clock):
        cache = PersistentVerificationCache(clock=clock)
        assert cache.get("nope") is None

    def test_set_then_get(self, clock, verdict):
        cache = PersistentVerificationCache(clock=clock)
        cache.set("jazz-night|lagniappe|2026-03-14", verdict)
        assert cache.get("jazz-night|lagniappe|2026-03-14") == verdict
        assert len(cache) == 1

    def test_set_marks_dirty(self, clock, verdict):
        cache = PersistentVerificationCache(clock=clock)
        assert cache.dirty is False
        cache.set("k", verdict)
        assert cache.dirty is True

    def test_survives_restart(self, clock, cache_file, verdict):
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        cache.set("k", verdict)
        assert cache.flush() is True

        reloaded = PersistentVerificationCache(str(cache_file), clock=clock)
        assert reloaded.get("k") == verdict

    def test_invalid_entry_dropped(self, clock, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(
            json.dumps(
                {
                    "version": 1,
                    "entries": {
                        "k": {
                            "value": {"verified": "perhaps"},
                            "cached_at": clock().isoformat(),
                        }
                    },
                }
            )
        )
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        assert cache.get("k") is None
        assert len(cache) == 0
        assert cache.dirty is True


class TestTTL:
    def test_valid_within_ttl(self, clock, verdict):
        cache = PersistentVerificationCache(ttl_days=7, clock=clock)
        cache.set("k", verdict)
        clock.advance(days=6, hours=23)
        assert cache.get("k") == verdict

    def test_expired_entry_treated_as_absent(self, clock, verdict):
        cache = PersistentVerificationCache(ttl_days=7, clock=clock)
        cache.set("k", verdict)
        cache.dirty = False
        clock.advance(days=7, seconds=1)

        assert cache.get("k") is None
        assert len(cache) == 0
        assert cache.dirty is True

    def test_stats_counts_expired_before_read(self, clock, verdict):
        cache = PersistentVerificationCache(ttl_days=7, clock=clock)
        cache.set("old", verdict)
        clock.advance(days=8)
        cache.set("new", verdict)

        stats = cache.stats()
        assert stats.total == 2
        assert stats.valid == 1
        assert stats.expired == 1
        # stats never evicts
        assert len(cache) == 2

    def test_naive_timestamp_treated_as_utc(self, clock, cache_file, verdict):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(
            json.dumps(
                {
                    "version": 1,
                    "entries": {
                        "k": {
                            "value": verdict.model_dump(mode="json"),
                            "cached_at": "2026-03-01T11:00:00",
                        }
                    },
                }
            )
        )
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        assert cache.get("k") == verdict


class TestFlush:
    def test_flush_writes_versioned_file(self, clock, cache_file, verdict):
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        cache.set("k", verdict)
        cache.flush()

        data = json.loads(cache_file.read_text())
        assert data["version"] == CACHE_FILE_VERSION
        assert data["entries"]["k"]["value"]["verified"] is True
        assert data["entries"]["k"]["cached_at"] == clock().isoformat()

    def test_flush_only_when_dirty(self, clock, cache_file, verdict):
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        assert cache.flush() is False
        assert not cache_file.exists()

        cache.set("k", verdict)
        assert cache.flush() is True
        assert cache.flush() is False

    def test_in_memory_cache_never_writes(self, clock, verdict):
        cache = PersistentVerificationCache(clock=clock)
        cache.set("k", verdict)
        assert cache.flush() is False

    def test_clear(self, clock, cache_file, verdict):
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        cache.set("k", verdict)
        cache.flush()
        cache.clear()
        assert len(cache) == 0
        assert cache.flush() is True
        assert json.loads(cache_file.read_text())["entries"] == {}


class TestLoad:
    def test_missing_file_starts_empty(self, clock, cache_file):
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        assert len(cache) == 0

    def test_corrupt_file_starts_empty(self, clock, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text("{not json")
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        assert len(cache) == 0

    def test_wrong_shape_starts_empty(self, clock, cache_file):
        cache_file.parent.mkdir(parents=True)
        cache_file.write_text(json.dumps({"version": 1, "entries": ["a", "b"]}))
        cache = PersistentVerificationCache(str(cache_file), clock=clock)
        assert len(cache) == 0
