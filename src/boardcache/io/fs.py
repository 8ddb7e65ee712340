from abc import ABC, abstractmethod
from typing import Union
from pathlib import Path, PurePosixPath
import functools
import logging
import fsspec
from morefs.memory import MemFS
from typing_extensions import override
from ..exceptions import (
    PathExistsError,
    PathNotFoundError,
    NotAFileError,
    NotADirError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, PurePosixPath, Path]


def wrap_io_error(func):
    """Decorator to wrap IO errors into boardcache exceptions."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FileExistsError as e:
            raise PathExistsError(e) from e
        except FileNotFoundError as e:
            raise PathNotFoundError(e) from e
        except IsADirectoryError as e:
            raise NotAFileError(e) from e
        except NotADirectoryError as e:
            raise NotADirError(e) from e

    return wrapper


class FileSystem(ABC):
    """
    Read-only view of the files boardcache loads at runtime:
    the configuration, theme descriptors and theme builders.
    """

    @abstractmethod
    def read_text(self, path: PathLike) -> str:
        """Read text from a file"""
        pass

    @abstractmethod
    def is_file(self, path: PathLike) -> bool:
        """Check if a path is a regular file"""
        pass


class GenericFileSystem(FileSystem, ABC):
    """Common base of the fsspec-compatible implementations"""

    def __init__(self, fs_instance, name=None):
        """
        Args:
            fs_instance: The underlying fsspec-compatible filesystem
            name: Optional name for logging purposes
        """
        self.fs = fs_instance
        self.name = name or f"{type(fs_instance).__name__}"

    @abstractmethod
    def path2str(self, path: PathLike) -> str:
        """Convert a path to the backend's string form"""
        pass

    @override
    @wrap_io_error
    def read_text(self, path: PathLike, encoding: str = "utf-8") -> str:
        logger.debug(f"[{self.name}] Reading from: {path}")
        with self.fs.open(self.path2str(path), "r", encoding=encoding) as f:
            return f.read()

    @override
    def is_file(self, path: PathLike) -> bool:
        return self.fs.isfile(self.path2str(path))


class DiskFileSystem(GenericFileSystem):
    """Local disk file system using fsspec"""

    def __init__(self):
        super().__init__(fsspec.filesystem("file"), name="fileFS")

    @override
    def path2str(self, path: PathLike) -> str:
        return str(path)


class MemoryFileSystem(GenericFileSystem):
    """
    Isolated in-memory filesystem backed by morefs, one tree per instance.
    Populate it through ``self.fs``.
    """

    def __init__(self):
        super().__init__(MemFS(), name="MorefsMemFS")

    @override
    def path2str(self, path: PathLike) -> str:
        path_str = str(path)
        if not path_str.startswith("/"):
            path_str = "/" + path_str
        return path_str
