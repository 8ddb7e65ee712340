import logging
import random
from pathlib import PurePosixPath
from typing import Dict, List, Optional

import pytest

from boardcache.cache.memory import MemoryCacheDriver


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class StubResolver:
    """Resolver answering from canned tables and counting every call."""

    def __init__(self, names: Optional[Dict[str, List[str]]] = None, addresses: Optional[Dict[str, List[str]]] = None):
        self.names = names or {}
        self.addresses = addresses or {}
        self.name_calls: List[str] = []
        self.ip_calls: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.name_calls) + len(self.ip_calls)

    def name_to_ips(self, name: str) -> Optional[List[str]]:
        self.name_calls.append(name)
        return self.names.get(name) or None

    def ip_to_names(self, ip: str) -> Optional[List[str]]:
        self.ip_calls.append(ip)
        return self.addresses.get(ip) or None


class NeverRandom(random.Random):
    """Random source whose draws never trigger a collection."""

    def randrange(self, *args, **kwargs):
        return 1


class AlwaysRandom(random.Random):
    """Random source whose draws always trigger a collection."""

    def randrange(self, *args, **kwargs):
        return 0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_cache():
    return MemoryCacheDriver()


@pytest.fixture
def store_dir(tmp_path):
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def always_rng():
    return AlwaysRandom()


@pytest.fixture
def never_rng():
    return NeverRandom()


@pytest.fixture
def make_resolver():
    return StubResolver


def _put_text(fs, path, content: str):
    """Write a file straight into the backend of a GenericFileSystem."""
    fs.fs.mkdirs(fs.path2str(PurePosixPath(str(path)).parent), exist_ok=True)
    with fs.fs.open(fs.path2str(path), "w", encoding="utf-8") as f:
        f.write(content)


@pytest.fixture
def put_text():
    return _put_text


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


@pytest.hookimpl(hookwrapper=True, trylast=True)
def pytest_runtest_call(item):
    """Keep pytest's own log-capture handlers off the root logger for tests using ``clean_root``."""
    if "clean_root" not in getattr(item, "fixturenames", ()):
        yield
        return
    from _pytest.logging import LogCaptureHandler, _LiveLoggingNullHandler
    root = logging.getLogger()
    captured = [h for h in root.handlers if isinstance(h, (LogCaptureHandler, _LiveLoggingNullHandler))]
    for handler in captured:
        root.removeHandler(handler)
    try:
        yield
    finally:
        for handler in captured:
            root.addHandler(handler)
