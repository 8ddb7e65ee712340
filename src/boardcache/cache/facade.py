"""
Process-wide cache access point.

The facade builds its backend the first time it is used and keeps it for its
own lifetime. It fills in the default TTL and, in debug mode, reports every
operation to an observer.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Optional

from .. import constants
from ..protocols import CacheDriverProtocol

logger = logging.getLogger(__name__)

CacheObserver = Callable[[str, str], None]


class DebugRecorder:
    """
    Observer logging every operation as ``"<key> (<outcome>)"`` and keeping
    the most recent ones for display.
    """

    def __init__(self, size: int = constants.DEBUG_RECORDER_SIZE):
        self.entries: Deque[str] = deque(maxlen=size)

    def __call__(self, key: str, outcome: str):
        record = f"{key} ({outcome})"
        self.entries.append(record)
        logger.debug(f"cache: {record}")


class CacheFacade:
    """
    Lazily built cache backend with a default TTL.

    Keys reach the backend unchanged. The fs and redis drivers apply the
    configured prefix themselves; the in-process memory driver needs none.
    """

    def __init__(
        self,
        driver_factory: Callable[[], CacheDriverProtocol],
        default_timeout: int = constants.DEFAULT_CACHE_TIMEOUT,
        observer: Optional[CacheObserver] = None,
    ):
        """
        Args:
            driver_factory: Called once, on first use, to build the backend
            default_timeout: TTL used when ``set`` is called without one
            observer: Receives ``(key, outcome)`` for every operation
        """
        self._driver_factory = driver_factory
        self._driver: Optional[CacheDriverProtocol] = None
        self.default_timeout = default_timeout
        self.observer = observer

    @property
    def driver(self) -> CacheDriverProtocol:
        if self._driver is None:
            self._driver = self._driver_factory()
            logger.debug(f"Cache backend ready: {self._driver!r}")
        return self._driver

    def _notify(self, key: str, outcome: str):
        if self.observer is not None:
            self.observer(key, outcome)

    def get(self, key: str) -> Any:
        value = self.driver.get(key)
        self._notify(key, "miss" if value is None else "hit")
        return value

    def set(self, key: str, value: Any, expires: Optional[int] = None) -> None:
        """
        Store a value.

        Args:
            key: The logical key
            value: The value
            expires: Seconds to live; None uses the default TTL, 0 never expires
        """
        if expires is None:
            expires = self.default_timeout
        self.driver.set(key, value, expires)
        self._notify(key, "set")

    def delete(self, key: str) -> None:
        self.driver.delete(key)
        self._notify(key, "deleted")

    def flush(self) -> None:
        self.driver.flush()
        logger.info("Cache flushed")

    def close(self):
        """Release the backend if it was ever built and holds resources."""
        if self._driver is None:
            return
        close = getattr(self._driver, "close", None)
        if close is not None:
            close()
