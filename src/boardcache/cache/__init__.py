"""
boardcache Cache Module

- FsCacheDriver: Directory-backed store with advisory locking and lazy expiry
- MemoryCacheDriver / NoneCacheDriver: In-process and no-op backends
- RedisCacheDriver: Remote key-value backend
- CacheFacade: Lazily built backend with default TTL and debug observer
- build_cache_driver: Configuration -> backend factory
- normalize: Logical key -> file name
"""

from .keys import normalize, escape_key, unescape_key
from .entry import CacheEntry
from .lock import FileLock
from .collect import CollectTrigger, is_collect_due
from .fs import FsCacheDriver
from .memory import MemoryCacheDriver, NoneCacheDriver
from .redis import RedisCacheDriver
from .facade import CacheFacade, DebugRecorder
from .factory import build_cache_driver

__all__ = [
    'normalize',
    'escape_key',
    'unescape_key',
    'CacheEntry',
    'FileLock',
    'CollectTrigger',
    'is_collect_due',
    'FsCacheDriver',
    'MemoryCacheDriver',
    'NoneCacheDriver',
    'RedisCacheDriver',
    'CacheFacade',
    'DebugRecorder',
    'build_cache_driver',
]
