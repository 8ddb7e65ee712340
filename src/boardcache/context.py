"""
Dependency wiring.

A ``DependencyFactory`` knows how to build every collaborator; a ``Context``
builds each one on first request and hands the same instance out afterwards.
The context is created once at process start and passed to whatever needs a
store, resolver or logger.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .cache.facade import CacheFacade, DebugRecorder
from .cache.factory import build_cache_driver
from .config import Config
from .db.queries import DbQueries
from .db.source import SqlSource, create_source
from .dnsbl.queries import DnsQueries
from .dnsbl.resolvers import create_resolver
from .io.fs import FileSystem, DiskFileSystem
from .protocols import QuerySourceProtocol, ResolverProtocol
from .themes import ThemePages
from .utils.logger import setup_logger

logger = logging.getLogger(__name__)


class DependencyFactory(ABC):
    """Builds the collaborators of a Context."""

    @abstractmethod
    def build_logger(self) -> logging.Logger:
        pass

    @abstractmethod
    def build_cache(self) -> CacheFacade:
        pass

    @abstractmethod
    def build_resolver(self) -> ResolverProtocol:
        pass

    @abstractmethod
    def build_dns_queries(self, resolver: ResolverProtocol, cache: CacheFacade) -> DnsQueries:
        pass

    @abstractmethod
    def build_source(self) -> QuerySourceProtocol:
        pass

    @abstractmethod
    def build_db_queries(self, source: QuerySourceProtocol, cache: CacheFacade) -> DbQueries:
        pass

    @abstractmethod
    def build_theme_pages(self, queries: DbQueries) -> ThemePages:
        pass


class ConfigDependencyFactory(DependencyFactory):
    """Builds every collaborator from a validated Config."""

    def __init__(self, config: Config, fs: Optional[FileSystem] = None):
        self.config = config
        self.fs = fs or DiskFileSystem()
        self.recorder: Optional[DebugRecorder] = DebugRecorder() if config.debug else None

    def build_logger(self) -> logging.Logger:
        log = self.config.log
        setup_logger(
            debug=self.config.debug,
            module_levels=log.levels or None,
            log_type=log.type,
            log_file=log.file_path,
            syslog_address=log.syslog_address,
            name=log.name,
        )
        return logging.getLogger(log.name)

    def build_cache(self) -> CacheFacade:
        cache = self.config.cache
        return CacheFacade(
            lambda: build_cache_driver(cache),
            default_timeout=cache.timeout,
            observer=self.recorder,
        )

    def build_resolver(self) -> ResolverProtocol:
        return create_resolver(self.config.dns.resolver, self.config.dns.timeout)

    def build_dns_queries(self, resolver: ResolverProtocol, cache: CacheFacade) -> DnsQueries:
        dns = self.config.dns
        return DnsQueries(
            resolver,
            cache,
            providers=dns.blacklists,
            exceptions=dns.exceptions,
            rdns_validate=dns.rdns_validate,
            skip_reserved=dns.skip_reserved,
        )

    def build_source(self) -> QuerySourceProtocol:
        return create_source(self.config.database.url, echo=self.config.database.echo)

    def build_db_queries(self, source: QuerySourceProtocol, cache: CacheFacade) -> DbQueries:
        return DbQueries(source, cache)

    def build_theme_pages(self, queries: DbQueries) -> ThemePages:
        return ThemePages(self.config.themes.dir, queries, fs=self.fs)


class Context:
    """Lazily built, memoized collaborators of one process."""

    def __init__(self, factory: DependencyFactory):
        self.factory = factory
        self._logger: Optional[logging.Logger] = None
        self._cache: Optional[CacheFacade] = None
        self._resolver: Optional[ResolverProtocol] = None
        self._dns_queries: Optional[DnsQueries] = None
        self._source: Optional[QuerySourceProtocol] = None
        self._db_queries: Optional[DbQueries] = None
        self._theme_pages: Optional[ThemePages] = None

    @classmethod
    def from_config(cls, config: Config) -> "Context":
        return cls(ConfigDependencyFactory(config))

    def get_logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = self.factory.build_logger()
        return self._logger

    def get_cache(self) -> CacheFacade:
        if self._cache is None:
            self._cache = self.factory.build_cache()
        return self._cache

    def get_resolver(self) -> ResolverProtocol:
        if self._resolver is None:
            self._resolver = self.factory.build_resolver()
        return self._resolver

    def get_dns_queries(self) -> DnsQueries:
        if self._dns_queries is None:
            self._dns_queries = self.factory.build_dns_queries(self.get_resolver(), self.get_cache())
        return self._dns_queries

    def get_source(self) -> QuerySourceProtocol:
        if self._source is None:
            self._source = self.factory.build_source()
        return self._source

    def get_db_queries(self) -> DbQueries:
        if self._db_queries is None:
            self._db_queries = self.factory.build_db_queries(self.get_source(), self.get_cache())
        return self._db_queries

    def get_theme_pages(self) -> ThemePages:
        if self._theme_pages is None:
            self._theme_pages = self.factory.build_theme_pages(self.get_db_queries())
        return self._theme_pages

    def close(self):
        """Release the cache backend and the database engine, if built."""
        if self._cache is not None:
            self._cache.close()
        if isinstance(self._source, SqlSource):
            self._source.close()
        logger.debug("Context closed")
