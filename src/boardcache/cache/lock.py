"""
Advisory lock over a single file, shared between processes.

The descriptor is opened once and kept for the lifetime of the owner; every
operation only toggles ``flock`` on it.
"""

import atexit
import fcntl
import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from ..exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class FileLock:
    """Shared/exclusive ``flock`` on one lock file."""

    def __init__(self, path: str):
        """
        Open the lock file.

        Args:
            path: Lock file path, created if missing

        Raises:
            StoreUnavailableError: If the lock file cannot be opened
        """
        self.path = path
        try:
            self._fd: Optional[int] = os.open(path, os.O_WRONLY | os.O_CREAT, 0o644)
        except OSError as e:
            raise StoreUnavailableError(f"Unable to open the lock file '{path}': {e}") from e
        atexit.register(self.close)
        logger.debug(f"Opened lock file {path}")

    @property
    def closed(self) -> bool:
        return self._fd is None

    def _flock(self, operation: int):
        if self._fd is None:
            raise StoreUnavailableError(f"Lock file '{self.path}' is already closed")
        fcntl.flock(self._fd, operation)

    @contextmanager
    def shared(self) -> Iterator[None]:
        """Hold a shared lock for the duration of the block."""
        self._flock(fcntl.LOCK_SH)
        try:
            yield
        finally:
            self._flock(fcntl.LOCK_UN)

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold an exclusive lock for the duration of the block."""
        self._flock(fcntl.LOCK_EX)
        try:
            yield
        finally:
            self._flock(fcntl.LOCK_UN)

    def close(self):
        """Release the descriptor. Safe to call more than once."""
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            os.close(fd)
        except OSError as e:
            logger.debug(f"Closing lock file {self.path} failed: {e}")
        atexit.unregister(self.close)
