"""Tests for the rain gauge reading cache."""
from __future__ import annotations

import time
from unittest.mock import patch

from dabba_mcp.infrastructure.cache import ReadingCache


def test_cache_miss_returns_none() -> None:
    cache = ReadingCache()
    assert cache.get("kurla") is None


def test_cache_hit() -> None:
    cache = ReadingCache()
    cache.set("kurla", 12.5)
    assert cache.get("kurla") == 12.5


def test_zero_reading_is_a_hit() -> None:
    cache = ReadingCache()
    cache.set("parel", 0.0)
    assert cache.get("parel") == 0.0


def test_cache_expiry() -> None:
    """After TTL seconds, get returns None and the entry is dropped."""
    cache = ReadingCache(default_ttl=1)
    cache.set("kurla", 3.0)
    with patch("dabba_mcp.infrastructure.cache.time") as mock_time:
        mock_time.monotonic.return_value = time.monotonic() + 2.0
        assert cache.get("kurla") is None
    assert cache.get("kurla") is None


def test_per_entry_ttl_overrides_default() -> None:
    cache = ReadingCache(default_ttl=1)
    cache.set("kurla", 3.0, ttl=600)
    with patch("dabba_mcp.infrastructure.cache.time") as mock_time:
        mock_time.monotonic.return_value = time.monotonic() + 2.0
        assert cache.get("kurla") == 3.0


def test_clear() -> None:
    cache = ReadingCache()
    cache.set("kurla", 1.0)
    cache.set("parel", 2.0)
    cache.clear()
    assert cache.get("kurla") is None
    assert cache.get("parel") is None
