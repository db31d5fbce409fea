import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Generic, Hashable, Optional, TypeVar

K = TypeVar('K', bound=Hashable)

logger = logging.getLogger(__name__)


class FlexibleCache(Generic[K]):
    """LRU cache whose entries expire `ttl` seconds after they were set"""

    def __init__(self, ttl: float, maxsize: int = 256):
        self.cache: OrderedDict = OrderedDict()
        self.ttl = ttl
        self.maxsize = maxsize
        self._purge_task: Optional[asyncio.Task] = None

    def _expired(self, expires_at: float) -> bool:
        return expires_at <= time.monotonic()

    def get(self, key: K) -> Any:
        if key not in self.cache:
            return None
        expires_at, value = self.cache[key]
        if self._expired(expires_at):
            del self.cache[key]
            return None
        self.cache.move_to_end(key)
        return value

    def set(self, key: K, value: Any, ttl: float = None):
        self.cache[key] = (time.monotonic() + (self.ttl if ttl is None else ttl), value)
        self.cache.move_to_end(key)
        if len(self.cache) > self.maxsize:
            self.cache.popitem(last=False)

    def has(self, key: K) -> bool:
        if key not in self.cache:
            return False
        if self._expired(self.cache[key][0]):
            del self.cache[key]
            return False
        return True

    def delete(self, key: K) -> bool:
        return self.cache.pop(key, None) is not None

    def purge(self) -> int:
        expired = [k for k, (expires_at, _) in self.cache.items() if self._expired(expires_at)]
        for k in expired:
            del self.cache[k]
        return len(expired)

    def __len__(self):
        return len(self.cache)

    async def _auto_purge(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            purged = self.purge()
            if purged:
                logger.debug(f'purged {purged} expired cache entries')

    def start_auto_purge(self, interval: float = None):
        """Expire entries in the background, needs a running event loop"""
        if self._purge_task and not self._purge_task.done():
            return
        self._purge_task = asyncio.get_running_loop().create_task(self._auto_purge(interval or max(self.ttl, 1)))

    def stop_auto_purge(self):
        if self._purge_task:
            self._purge_task.cancel()
            self._purge_task = None


def hash_object(obj) -> str:
    """Stable cache key for request parameters"""
    if hasattr(obj, 'model_dump'):
        obj = obj.model_dump(mode='json')
    return hashlib.sha1(json.dumps(obj, sort_keys=True, default=str).encode('utf-8')).hexdigest()
