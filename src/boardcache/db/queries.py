"""
Board queries wrapped with cache-or-compute.

Every public method returns cached data when present, otherwise runs the query
once and caches its result with the TTL of its family. Empty results are
cached too; ``None`` ("does not exist") is never stored as such.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional

from .. import constants
from ..exceptions import InvalidArgumentError, TableNotFoundError
from ..protocols import CacheDriverProtocol, QuerySourceProtocol

logger = logging.getLogger(__name__)

BOARD_URI_PATTERN = re.compile(r"^\w+$")


def check_board_uri(uri: str) -> str:
    """Board uris end up in table names, only word characters are allowed."""
    if not isinstance(uri, str) or not BOARD_URI_PATTERN.match(uri):
        raise InvalidArgumentError(f"Invalid board uri: {uri!r}")
    return uri


class DbQueries:
    """
    Cached read queries over the board database.

    Methods raise only when a query fails; missing data is an empty result or
    None.
    """

    def __init__(self, source: QuerySourceProtocol, cache: CacheDriverProtocol):
        self.source = source
        self.cache = cache

    def _cached_or(self, key: str, expires: int, compute: Callable[[], Any]) -> Any:
        value = self.cache.get(key)
        if value is not None:
            return value

        value = compute()
        if value is None:
            return None
        self.cache.set(key, value, expires)
        return value

    def _get_boards_ordered(self) -> List[Dict[str, Any]]:
        return self._cached_or(
            "boards_all_ordered",
            constants.BOARD_INFO_TIMEOUT,
            lambda: self.source.fetch_all("SELECT * FROM boards ORDER BY uri"),
        )

    # --- Boards ---

    def get_boards(self) -> List[Dict[str, Any]]:
        """All boards, ordered by uri."""
        return self._get_boards_ordered()

    def get_boards_uris(self) -> List[str]:
        return [board["uri"] for board in self._get_boards_ordered()]

    def get_board_info(self, uri: str) -> Optional[Dict[str, Any]]:
        """
        Get information about a board.

        Args:
            uri: The board uri

        Returns:
            The board's row, or None if the board does not exist
        """
        for board in self._get_boards_ordered():
            if board["uri"] == uri:
                return board
        return None

    def get_board_title(self, uri: str) -> Optional[str]:
        board = self.get_board_info(uri)
        if board is None:
            return None
        return board.get("title")

    # --- Themes ---

    def get_themes_empty(self) -> List[Dict[str, Any]]:
        """Installed themes: their marker rows without name or value."""
        return self._cached_or(
            "themes_empty",
            constants.THEME_SETTINGS_TIMEOUT,
            lambda: self.source.fetch_all(
                "SELECT theme FROM theme_settings WHERE name IS NULL AND value IS NULL"
            ),
        )

    def get_theme_settings(self, theme: str) -> Dict[str, Any]:
        """The settings of a theme as a name -> value mapping."""
        def compute():
            rows = self.source.fetch_all(
                "SELECT name, value FROM theme_settings WHERE theme = :theme AND name IS NOT NULL",
                {"theme": theme},
            )
            return {row["name"]: row["value"] for row in rows}

        return self._cached_or(f"theme_settings_of_{theme}", constants.THEME_SETTINGS_TIMEOUT, compute)

    # --- Bans ---

    def get_ban_files_of(self, post_id: int, board_uri: str) -> List[Dict[str, Any]]:
        """
        The files of a banned post.

        Args:
            post_id: The post id
            board_uri: The board uri; a board without posts table yields no files
        """
        check_board_uri(board_uri)

        def compute():
            try:
                return self.source.fetch_all(
                    f"SELECT files FROM posts_{board_uri} WHERE id = :id",
                    {"id": int(post_id)},
                )
            except TableNotFoundError:
                logger.debug(f"No posts table for board '{board_uri}'")
                return []

        return self._cached_or(f"ban_files_in_{board_uri}_of_{post_id}", constants.BAN_INFO_TIMEOUT, compute)

    def get_ban_appeals(self, ban_id: int) -> List[Dict[str, Any]]:
        return self._cached_or(
            f"ban_appeals_of_{ban_id}",
            constants.BAN_INFO_TIMEOUT,
            lambda: self.source.fetch_all(
                "SELECT time, denied FROM ban_appeals WHERE ban_id = :id",
                {"id": int(ban_id)},
            ),
        )

    # --- Threads ---

    def get_thread(self, thread_id: int, board_uri: str) -> Optional[Dict[str, Any]]:
        """
        The locked and sage flags of a thread.

        A thread that does not exist, or a board without posts table, is cached
        as CACHE_FALSE and reported as None.

        Returns:
            A mapping with ``locked`` and ``sage``, or None
        """
        check_board_uri(board_uri)

        def compute():
            try:
                rows = self.source.fetch_all(
                    f"SELECT locked, sage FROM posts_{board_uri} WHERE id = :id AND thread IS NULL LIMIT 1",
                    {"id": int(thread_id)},
                )
            except TableNotFoundError:
                return constants.CACHE_FALSE
            return rows[0] if rows else constants.CACHE_FALSE

        thread = self._cached_or(f"thread_in_{board_uri}_{thread_id}", constants.THREAD_INFO_TIMEOUT, compute)
        if thread == constants.CACHE_FALSE:
            return None
        return thread

    def get_thread_locked(self, thread_id: int, board_uri: str) -> Optional[bool]:
        thread = self.get_thread(thread_id, board_uri)
        if thread is None:
            return None
        return bool(thread["locked"])

    def get_thread_sage(self, thread_id: int, board_uri: str) -> Optional[bool]:
        thread = self.get_thread(thread_id, board_uri)
        if thread is None:
            return None
        return bool(thread["sage"])
