"""
Backend selection.

``build_cache_driver`` is the single place mapping the ``cache`` configuration
block to one concrete driver.
"""

import logging
import random
from typing import Optional, TYPE_CHECKING

from ..constants import BackendKind
from ..exceptions import UnsupportedBackendError
from ..protocols import CacheDriverProtocol
from .fs import FsCacheDriver
from .memory import MemoryCacheDriver, NoneCacheDriver
from .redis import RedisCacheDriver

if TYPE_CHECKING:
    from ..config import CacheModel

logger = logging.getLogger(__name__)


def build_cache_driver(cache: "CacheModel", rng: Optional[random.Random] = None) -> CacheDriverProtocol:
    """
    Build the driver named by ``cache.enabled``.

    Args:
        cache: The validated ``cache`` configuration block
        rng: Random source handed to the fs driver's collection trigger

    Returns:
        CacheDriverProtocol: The configured driver

    Raises:
        StoreUnavailableError: If the backend cannot be opened
        UnsupportedBackendError: If the backend kind is unknown
    """
    kind = cache.enabled
    logger.debug(f"Building '{kind.value}' cache driver (prefix='{cache.prefix}')")

    if kind is BackendKind.FS:
        return FsCacheDriver(
            prefix=cache.prefix,
            base_path=cache.fs.base_path,
            lock_file=cache.fs.lock_file,
            collect_chance_den=cache.fs.collect_chance_den,
            rng=rng,
        )
    if kind is BackendKind.REDIS:
        return RedisCacheDriver.connect(
            prefix=cache.prefix,
            host=cache.redis.host,
            port=cache.redis.port,
            password=cache.redis.password,
            database=cache.redis.database,
        )
    if kind is BackendKind.MEMORY:
        return MemoryCacheDriver()
    if kind is BackendKind.NONE:
        return NoneCacheDriver()
    raise UnsupportedBackendError(f"Unknown cache backend: {kind!r}")
