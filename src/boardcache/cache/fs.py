"""
File system cache driver.

One JSON envelope file per key, all inside a single directory, guarded by one
advisory lock file:

- ``get`` and ``collect`` hold the lock shared
- ``set``, ``delete`` and ``flush`` hold it exclusive

The lock is coarse on purpose: a reader never sees a half-written entry, and
processes serialize on every write. Expired entries are not removed on read;
a sweep runs with a configurable chance on ordinary operations, at most once
per driver instance (that is, once per process when the driver is built lazily
as a process-wide singleton).

Corrupt entries are reported as misses and logged, never raised to the caller,
and collection leaves them in place.
"""

import logging
import os
import random
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from .. import constants
from ..exceptions import ConfigurationError, DecodeError, StoreUnavailableError
from .collect import CollectTrigger
from .entry import CacheEntry
from .keys import is_entry_name, normalize
from .lock import FileLock

logger = logging.getLogger(__name__)


class FsCacheDriver:
    """Durable key-value store scoped to one directory, safe across processes."""

    def __init__(
        self,
        prefix: str,
        base_path: Union[str, Path],
        lock_file: str = constants.DEFAULT_LOCK_FILE,
        collect_chance_den: Union[int, bool, None] = constants.DEFAULT_COLLECT_CHANCE_DEN,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        """
        Open the store.

        Args:
            prefix: Prefix of every entry file name
            base_path: Existing, writable directory holding the entries
            lock_file: Name of the lock file inside ``base_path``
            collect_chance_den: Sweep chance denominator; False or None disables sweeps
            clock: Source of the current Unix time
            rng: Random source for the sweep trigger

        Raises:
            StoreUnavailableError: If the directory is missing or not writable,
                or the lock file cannot be opened
            ConfigurationError: If some key would normalize to the lock file name
        """
        self.base_path = Path(base_path)
        if not self.base_path.is_dir():
            raise StoreUnavailableError(f"{self.base_path} is not a directory!")
        if not os.access(self.base_path, os.W_OK):
            raise StoreUnavailableError(f"{self.base_path} is not writable!")
        if is_entry_name(prefix, lock_file):
            raise ConfigurationError(f"Lock file name '{lock_file}' can be produced by a cache key with prefix '{prefix}'")

        self.prefix = prefix
        self.lock_file = lock_file
        self._clock = clock
        self._trigger = CollectTrigger(collect_chance_den, rng)
        self._lock = FileLock(str(self.base_path / lock_file))
        logger.debug(
            f"Opened fs cache at {self.base_path} (prefix='{prefix}', "
            f"collect chance 1/{self._trigger.chance_den})"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entry_path(self, key: str) -> Path:
        return self.base_path / normalize(self.prefix, key)

    def _iter_entry_files(self) -> Iterator[Path]:
        """Every regular file of this store, the lock file excluded."""
        with os.scandir(self.base_path) as it:
            for dirent in it:
                if dirent.name == self.lock_file or not dirent.name.startswith(self.prefix):
                    continue
                if dirent.is_file(follow_symlinks=False):
                    yield Path(dirent.path)

    def _read_entry(self, path: Path) -> Optional[CacheEntry]:
        """Read an envelope; missing, unreadable and corrupt files are all None."""
        try:
            data = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Unable to read cache entry {path}: {e}")
            return None
        try:
            return CacheEntry.decode(data)
        except DecodeError as e:
            logger.warning(f"Ignoring corrupt cache entry {path}: {e}")
            return None

    def _collect_impl(self) -> int:
        # Deleting expired entries under a shared lock is fine: removal is
        # idempotent and only ever hits keys that already read as absent.
        # Unreadable and undecodable files are left alone.
        now = self._clock()
        count = 0
        for path in self._iter_entry_files():
            entry = self._read_entry(path)
            if entry is None or not entry.is_expired(now):
                continue
            try:
                path.unlink()
                count += 1
            except OSError:
                continue
        return count

    def _maybe_collect(self):
        if self._trigger.roll():
            count = self._collect_impl()
            logger.debug(f"Opportunistic collection removed {count} entries from {self.base_path}")

    # ------------------------------------------------------------------
    # CacheDriverProtocol
    # ------------------------------------------------------------------

    def get(self, key: str) -> Any:
        """
        Get a value.

        Args:
            key: The logical key

        Returns:
            The value, or None if absent, expired or corrupt
        """
        path = self._entry_path(key)
        with self._lock.shared():
            entry = self._read_entry(path)
            self._maybe_collect()

        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry.inner

    def set(self, key: str, value: Any, expires: Optional[int] = None) -> None:
        """
        Store a value, replacing the entry file atomically.

        Args:
            key: The logical key
            value: A JSON-serializable value
            expires: Seconds to live; None or 0 never expires
        """
        path = self._entry_path(key)
        data = CacheEntry.create(value, expires or constants.NEVER, self._clock()).encode()

        with self._lock.exclusive():
            try:
                fd, tmp_path = tempfile.mkstemp(dir=self.base_path, prefix=f"{path.name}.", suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(data)
                    os.replace(tmp_path, path)
                except BaseException:
                    Path(tmp_path).unlink(missing_ok=True)
                    raise
            except OSError as e:
                logger.error(f"Failed to write cache entry for '{key}' to {path}: {e}")
            self._maybe_collect()

    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        path = self._entry_path(key)
        with self._lock.exclusive():
            try:
                path.unlink()
            except OSError:
                pass
            self._maybe_collect()

    def collect(self) -> int:
        """
        Remove every expired entry.

        Returns:
            int: Number of entry files removed
        """
        with self._lock.shared():
            count = self._collect_impl()
        logger.debug(f"Collected {count} expired entries from {self.base_path}")
        return count

    def flush(self) -> None:
        """Remove every entry of this store, expired or not."""
        with self._lock.exclusive():
            for path in self._iter_entry_files():
                try:
                    path.unlink()
                except OSError:
                    continue
        logger.info(f"Flushed fs cache at {self.base_path} (prefix='{self.prefix}')")

    def close(self):
        """Release the lock file. Safe to call again at teardown."""
        self._lock.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_path={self.base_path!s}, prefix={self.prefix!r})"
