"""Disk-backed TTL cache of verification verdicts.

Recurrence templates regenerate near-identical (title, venue, date) tuples
on every run, so verdicts are kept for a TTL window (7 days by default)
and survive restarts.

File layout:
{
    "version": 1,
    "entries": {
        cache_key: {"value": VerificationResult, "cached_at": ISO timestamp},
        ...
    }
}

TTL is enforced lazily: an expired entry is dropped when read and is never
returned. Writes are batched: set() marks the cache dirty and flush()
persists once per batch. Single writer; concurrent runs are not safe.

Usage:
    from event_trust.data_management.verification_cache import PersistentVerificationCache

    cache = PersistentVerificationCache("cache/event-verification.json")
    result = cache.get(candidate.cache_key)
    cache.set(candidate.cache_key, verdict)
    cache.flush()
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError

from event_trust.data_management.schemas.event_schema import cache_key
from event_trust.data_management.schemas.verification_schema import (
    CacheStats,
    VerificationResult,
)
from event_trust.utils.logging import get_structured_logger

CACHE_FILE_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PersistentVerificationCache:
    """TTL-keyed store of prior verification outcomes.

    Attributes:
        ttl: Validity window of an entry
        dirty: True when in-memory state differs from the file
    """

    def __init__(
        self,
        persistence_path: Optional[str] = None,
        ttl_days: int = 7,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the cache and load any existing file.

        Args:
            persistence_path: JSON file backing the cache. None keeps it in memory.
            ttl_days: Days an entry stays valid.
            clock: Returns the current aware datetime (injectable for tests).
        """
        self._persistence_path = Path(persistence_path) if persistence_path else None
        self.ttl = timedelta(days=ttl_days)
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] = {}
        self.dirty = False
        self._logger = get_structured_logger("VerificationCache")

        if self._persistence_path:
            self._load_from_file()

    def get(self, key: str) -> Optional[VerificationResult]:
        """Return the cached verdict, or None when absent or expired.

        Args:
            key: Composite key from cache_key().

        Returns:
            VerificationResult if a valid entry exists, None otherwise.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            del self._entries[key]
            self.dirty = True
            self._logger.debug("entry_expired", key=key)
            return None

        try:
            return VerificationResult.model_validate(entry["value"])
        except (ValidationError, KeyError, TypeError):
            del self._entries[key]
            self.dirty = True
            self._logger.warning("entry_invalid", key=key)
            return None

    def set(self, key: str, value: VerificationResult) -> None:
        """Store a verdict stamped with the current time."""
        self._entries[key] = {
            "value": value.model_dump(mode="json"),
            "cached_at": self._clock().isoformat(),
        }
        self.dirty = True

    def flush(self) -> bool:
        """Write to disk only if changed.

        Returns:
            True if the file was written.
        """
        if not self.dirty or not self._persistence_path:
            return False
        self._save_to_file()
        self.dirty = False
        return True

    def stats(self) -> CacheStats:
        """Count valid and expired entries without evicting anything."""
        valid = 0
        expired = 0
        for entry in self._entries.values():
            if self._is_expired(entry):
                expired += 1
            else:
                valid += 1
        return CacheStats(total=valid + expired, valid=valid, expired=expired)

    def clear(self) -> None:
        """Drop every entry."""
        if self._entries:
            self._entries.clear()
            self.dirty = True

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: dict[str, Any]) -> bool:
        try:
            cached_at = datetime.fromisoformat(entry["cached_at"])
        except (KeyError, TypeError, ValueError):
            return True
        if cached_at.tzinfo is None:
            cached_at = cached_at.replace(tzinfo=timezone.utc)
        return self._clock() - cached_at > self.ttl

    def _save_to_file(self) -> None:
        """Save to JSON file (synchronous)."""
        self._persistence_path.parent.mkdir(parents=True, exist_ok=True)
        data = {"version": CACHE_FILE_VERSION, "entries": self._entries}
        with open(self._persistence_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        self._logger.debug(
            "cache_flushed",
            path=str(self._persistence_path),
            entries=len(self._entries),
        )

    def _load_from_file(self) -> None:
        """Load entries from JSON file; a missing or corrupt file starts empty."""
        if not self._persistence_path.exists():
            return
        try:
            with open(self._persistence_path, encoding="utf-8") as f:
                data = json.load(f)
            entries = data.get("entries", {})
            if not isinstance(entries, dict):
                raise ValueError("entries is not an object")
            self._entries = entries
        except (OSError, ValueError, AttributeError) as e:
            self._logger.warning(
                "cache_load_failed",
                path=str(self._persistence_path),
                error=str(e),
            )
            self._entries = {}


__all__ = ["PersistentVerificationCache", "cache_key", "CACHE_FILE_VERSION"]
