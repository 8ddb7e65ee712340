"""
boardcache IO Module

- FileSystem: Read-only file system interface
- DiskFileSystem: Local disk file system
- MemoryFileSystem: Isolated morefs in-memory file system

Usage:
    from boardcache.io import DiskFileSystem

    fs = DiskFileSystem()
    content = fs.read_text("config.yml")
"""

from .fs import (
    FileSystem,
    GenericFileSystem,
    DiskFileSystem,
    MemoryFileSystem,
    wrap_io_error,
)

__all__ = [
    'FileSystem',
    'GenericFileSystem',
    'DiskFileSystem',
    'MemoryFileSystem',
    'wrap_io_error',
]
