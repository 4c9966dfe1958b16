"""
Tests for OutputCache
"""

from unittest.mock import MagicMock, patch

import redis

from dataengine.cache import CACHE_PREFIX, OutputCache
from dataengine.config import Config


class CacheConfig(Config):
    ENABLE_CACHING = True
    CACHE_EXPIRATION = 60
    CACHE_REDIS_URL = ''


class TestLocalStore:
    """Test the in-process backend"""

    def test_set_get(self):
        cache = OutputCache(CacheConfig)
        cache.set('k', '<p>x</p>')

        assert cache.backend == 'local'
        assert cache.get('k') == '<p>x</p>'
        assert cache.get('other') is None

    def test_expiry(self):
        cache = OutputCache(CacheConfig)

        with patch('dataengine.cache.time.monotonic', return_value=1000.0):
            cache.set('k', 'v')
        with patch('dataengine.cache.time.monotonic', return_value=1059.0):
            assert cache.get('k') == 'v'
        with patch('dataengine.cache.time.monotonic', return_value=1061.0):
            assert cache.get('k') is None

    def test_clear_all(self):
        cache = OutputCache(CacheConfig)
        cache.set('a', '1')
        cache.set('b', '2')

        assert cache.clear_all() == 2
        assert cache.get('a') is None

    def test_is_enabled(self):
        assert OutputCache(CacheConfig).is_enabled() is True
        assert OutputCache(Config).is_enabled() is Config.ENABLE_CACHING


class TestKeys:
    """Test key generation"""

    def test_key_format(self):
        key = OutputCache(CacheConfig).generate_key(42, 'w1', {'a': 1})
        record_id, widget_id, digest = key.split('_')

        assert record_id == '42'
        assert widget_id == 'w1'
        assert len(digest) == 32

    def test_key_ignores_settings_order(self):
        cache = OutputCache(CacheConfig)
        assert cache.generate_key(1, 'w', {'a': 1, 'b': 2}) == cache.generate_key(1, 'w', {'b': 2, 'a': 1})

    def test_key_changes_with_settings(self):
        cache = OutputCache(CacheConfig)
        assert cache.generate_key(1, 'w', {'a': 1}) != cache.generate_key(1, 'w', {'a': 2})


class TestRedisBackend:
    """Test the Redis backend with a mocked client"""

    def test_get_set(self):
        client = MagicMock()
        client.get.return_value = '<p>cached</p>'
        cache = OutputCache(CacheConfig, client=client)

        cache.set('k', '<p>x</p>')

        assert cache.backend == 'redis'
        client.setex.assert_called_once_with(f'{CACHE_PREFIX}k', 60, '<p>x</p>')
        assert cache.get('k') == '<p>cached</p>'
        client.get.assert_called_with(f'{CACHE_PREFIX}k')

    def test_clear_all(self):
        client = MagicMock()
        client.scan_iter.return_value = iter([f'{CACHE_PREFIX}a', f'{CACHE_PREFIX}b'])
        client.delete.return_value = 2
        cache = OutputCache(CacheConfig, client=client)

        assert cache.clear_all() == 2
        client.scan_iter.assert_called_once_with(match=f'{CACHE_PREFIX}*')
        client.delete.assert_called_once_with(f'{CACHE_PREFIX}a', f'{CACHE_PREFIX}b')

    def test_connection_error_degrades(self, caplog):
        client = MagicMock()
        client.setex.side_effect = redis.ConnectionError('gone')
        cache = OutputCache(CacheConfig, client=client)

        cache.set('k', 'v')

        assert cache.backend == 'local'
        assert cache.get('k') == 'v'
        assert 'falling back to local store' in caplog.text

    def test_unreachable_url(self):
        class UrlConfig(CacheConfig):
            CACHE_REDIS_URL = 'redis://cache:6379/0'

        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError('refused')

        with patch('dataengine.cache.redis.Redis.from_url', return_value=client) as from_url:
            cache = OutputCache(UrlConfig)

        from_url.assert_called_once_with('redis://cache:6379/0', decode_responses=True)
        assert cache.backend == 'local'
