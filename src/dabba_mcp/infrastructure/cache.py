from __future__ import annotations

import time


class ReadingCache:
    """In-process TTL cache for rain gauge readings (mm), keyed by gauge name.

    Thread-safe via GIL for CPython; no locking added.
    """

    def __init__(self, default_ttl: int = 600) -> None:
        self._default_ttl = default_ttl
        self._store: dict[str, tuple[float, float]] = {}
        # Value tuple: (reading_mm, expires_at_monotonic)

    def get(self, gauge: str) -> float | None:
        """Return the cached reading or None if missing or expired."""
        entry = self._store.get(gauge)
        if entry is None:
            return None
        reading, expires_at = entry
        if time.monotonic() > expires_at:
            del self._store[gauge]
            return None
        return reading

    def set(self, gauge: str, reading: float, ttl: int | None = None) -> None:
        effective_ttl = ttl if ttl is not None else self._default_ttl
        self._store[gauge] = (reading, time.monotonic() + effective_ttl)

    def clear(self) -> None:
        self._store.clear()
