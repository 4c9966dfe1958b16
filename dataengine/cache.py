"""
Widget output cache.

Stores rendered HTML under keys derived from the record, the widget and a
hash of its settings, so a settings change invalidates the entry.

Backends:
- Redis, when CACHE_REDIS_URL is set or a client is injected
- A process-local dict with expiry timestamps otherwise

The render pipeline never reads this cache; widgets do.
"""

import hashlib
import json
import time
from typing import Any, Dict, Optional, Tuple
import logging

import redis

from dataengine.config import Config

logger = logging.getLogger(__name__)

CACHE_PREFIX = 'de_cache_'


class OutputCache:
    """
    Cache for rendered widget output.

    Usage:
        cache = OutputCache()
        key = cache.generate_key(42, 'repeater-1', settings)
        html = cache.get(key)
        if html is None:
            html = render()
            cache.set(key, html)
    """

    def __init__(self, config=Config, client: Optional[redis.Redis] = None):
        self.config = config
        self.expiration = int(config.CACHE_EXPIRATION)
        self._local: Dict[str, Tuple[float, str]] = {}
        self._redis = client

        if self._redis is None and config.CACHE_REDIS_URL:
            try:
                self._redis = redis.Redis.from_url(config.CACHE_REDIS_URL, decode_responses=True)
                self._redis.ping()
                logger.info("Output cache connected to Redis")
            except redis.ConnectionError as e:
                logger.warning(f"Redis not available for output cache, using local store: {e}")
                self._redis = None

    @property
    def backend(self) -> str:
        return 'redis' if self._redis is not None else 'local'

    def is_enabled(self) -> bool:
        """Whether caching is switched on in the configuration."""
        return bool(self.config.ENABLE_CACHING)

    def get(self, key: str) -> Optional[str]:
        """Cached HTML for a key, or None."""
        full_key = CACHE_PREFIX + key

        if self._redis is not None:
            try:
                return self._redis.get(full_key)
            except redis.ConnectionError as e:
                self._degrade(e)

        entry = self._local.get(full_key)
        if entry is None:
            return None

        expires_at, html = entry
        if expires_at <= time.monotonic():
            del self._local[full_key]
            return None
        return html

    def set(self, key: str, html: str):
        """Cache HTML for CACHE_EXPIRATION seconds."""
        full_key = CACHE_PREFIX + key

        if self._redis is not None:
            try:
                self._redis.setex(full_key, self.expiration, html)
                return
            except redis.ConnectionError as e:
                self._degrade(e)

        self._local[full_key] = (time.monotonic() + self.expiration, html)

    def generate_key(self, record_id: Any, widget_id: str, settings: Optional[Dict[str, Any]] = None) -> str:
        """
        Key for one widget instance on one record.

        Returns:
            "{record_id}_{widget_id}_{md5 of the settings as JSON}"
        """
        payload = json.dumps(settings or {}, sort_keys=True, default=str)
        settings_hash = hashlib.md5(payload.encode('utf-8')).hexdigest()
        return f"{record_id}_{widget_id}_{settings_hash}"

    def clear_all(self) -> int:
        """
        Remove every cached entry.

        Returns:
            Number of entries removed
        """
        removed = len(self._local)
        self._local.clear()

        if self._redis is not None:
            try:
                keys = list(self._redis.scan_iter(match=f"{CACHE_PREFIX}*"))
                if keys:
                    removed += self._redis.delete(*keys)
            except redis.ConnectionError as e:
                self._degrade(e)

        logger.info(f"Output cache cleared ({removed} entries)")
        return removed

    def _degrade(self, error: Exception):
        logger.warning(f"Redis error in output cache, falling back to local store: {error}")
        self._redis = None
