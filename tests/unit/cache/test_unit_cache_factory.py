# tests/unit/cache/test_unit_cache_factory.py — v4
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from notedigest.cache.cache_factory import create_cache_store
from notedigest.cache.json_store import JsonCacheStore
from notedigest.cache.sqlite_store import SqliteCacheStore
from notedigest.config.settings import ConfigurationError, Settings


class TestCreateCacheStore:
    def test_default_json(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        store = create_cache_store()
        assert isinstance(store, JsonCacheStore)
        assert store.root == tmp_path / ".notedigest" / "cache"

    def test_json_backend_root(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="json", cache_root=tmp_path)
        store = create_cache_store(s)
        assert isinstance(store, JsonCacheStore)
        assert store.root == tmp_path

    def test_sqlite_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="sqlite", cache_root=tmp_path)
        store = create_cache_store(s)
        try:
            assert isinstance(store, SqliteCacheStore)
            assert (tmp_path / "notedigest_cache.db").exists()
        finally:
            store.close()

    def test_redis_backend(self):
        s = Settings(_env_file=None, cache_backend="redis", cache_redis_url="redis://localhost:6379/0")
        with patch("notedigest.cache.redis_store.RedisCacheStore.__init__", return_value=None) as init:
            create_cache_store(s)
        init.assert_called_once_with(redis_url="redis://localhost:6379/0")

    def test_redis_missing_url_rejected_by_settings(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis", cache_redis_url="")

    def test_redis_missing_url(self):
        s = MagicMock(cache_backend="redis", cache_root="/tmp", cache_redis_url="")
        with pytest.raises(ValueError, match="CACHE_REDIS_URL"):
            create_cache_store(s)

    def test_unsupported_backend(self):
        s = MagicMock(cache_backend="memcached", cache_root="/tmp")
        with pytest.raises(ValueError, match="Unsupported"):
            create_cache_store(s)
