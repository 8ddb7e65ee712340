"""In-process cache drivers: a plain dict with expiry, and a no-op sink."""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class MemoryCacheDriver:
    """
    Dict-backed cache living as long as the process.

    Expired entries are dropped lazily when read. Values are stored by
    reference, not serialized.

    Parameters:
        clock: Source of the current time in seconds.
    """

    __slots__ = ("_clock", "_data")

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}

    def get(self, key: str) -> Any:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: Any, expires: Optional[int] = None) -> None:
        expires_at = self._clock() + expires if expires else None
        self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def flush(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryCacheDriver(entries={len(self._data)})"


class NoneCacheDriver:
    """No-op cache: every read misses. Useful for testing."""

    def get(self, key: str) -> Any:
        return None

    def set(self, key: str, value: Any, expires: Optional[int] = None) -> None:
        pass

    def delete(self, key: str) -> None:
        pass

    def flush(self) -> None:
        pass
