"""
Theme rebuilding.

A theme lives in ``<themes_dir>/<name>/`` with an ``info.yml`` descriptor and a
``theme.py`` builder module. The descriptor may name the builder function
(``build_function``), ``build`` otherwise. The function is called with
``(action, settings, board)``. Both files are read through the injected file
system.
"""

import importlib.util
import logging
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Optional

import yaml

from . import constants
from .db.queries import DbQueries
from .exceptions import ThemeError
from .io.fs import FileSystem, DiskFileSystem

logger = logging.getLogger(__name__)


class ThemePages:
    """Runs the builders of the installed themes."""

    def __init__(self, themes_dir: str, queries: DbQueries, fs: Optional[FileSystem] = None):
        self.themes_dir = PurePosixPath(themes_dir)
        self.queries = queries
        self.fs = fs or DiskFileSystem()

    def _load_theme_info(self, path: PurePosixPath) -> Optional[Dict[str, Any]]:
        if not self.fs.is_file(path):
            return None
        try:
            info = yaml.safe_load(self.fs.read_text(path))
        except yaml.YAMLError as e:
            raise ThemeError(f"Invalid theme descriptor {path}: {e}")
        if info is None:
            return {}
        if not isinstance(info, dict):
            raise ThemeError(f"Theme descriptor {path} must be a mapping")
        return info

    def _load_theme_builder(self, path: PurePosixPath, function_name: str) -> Optional[Callable]:
        if not self.fs.is_file(path):
            return None
        source = self.fs.read_text(path)
        module_name = f"boardcache_theme_{path.parent.name}"
        spec = importlib.util.spec_from_loader(module_name, loader=None, origin=str(path))
        module = importlib.util.module_from_spec(spec)
        module.__file__ = str(path)
        try:
            exec(compile(source, str(path), "exec"), module.__dict__)
        except Exception as e:
            raise ThemeError(f"Theme builder {path} failed to load: {e}") from e

        build = getattr(module, function_name, None)
        if not callable(build):
            raise ThemeError(f"Theme builder {path} has no function '{function_name}'")
        return build

    def rebuild_theme(self, theme_name: str, action: str, board: Optional[str] = None) -> bool:
        """
        Run one theme's builder.

        Args:
            theme_name: The theme directory name
            action: What triggered the rebuild (e.g. "all", "post", "boards")
            board: The board concerned, if any

        Returns:
            bool: Whether the theme's code has been run

        Raises:
            ThemeError: If the descriptor or the builder is broken
        """
        settings = self.queries.get_theme_settings(theme_name)
        if not settings:
            logger.debug(f"Theme '{theme_name}' has no settings, skipping")
            return False

        theme_dir = self.themes_dir / theme_name
        info = self._load_theme_info(theme_dir / constants.THEME_INFO_FILENAME)
        if info is None:
            logger.warning(f"Theme '{theme_name}' has no {constants.THEME_INFO_FILENAME}, skipping")
            return False

        function_name = info.get("build_function", constants.DEFAULT_BUILD_FUNCTION)
        build = self._load_theme_builder(theme_dir / constants.THEME_BUILDER_FILENAME, function_name)
        if build is None:
            logger.warning(f"Theme '{theme_name}' has no {constants.THEME_BUILDER_FILENAME}, skipping")
            return False

        build(action, settings, board)
        return True

    def rebuild_themes(self, action: str, board: Optional[str] = None) -> List[str]:
        """
        Run the builder of every installed theme.

        Returns:
            List[str]: The themes whose code has been run
        """
        rebuilt = []
        for row in self.queries.get_themes_empty():
            name = row["theme"]
            logger.info(f"Rebuilding theme {name}...")
            if self.rebuild_theme(name, action, board):
                rebuilt.append(name)
        return rebuilt
