"""
boardcache

Data-access and caching layer of a message board: a process-shared file cache
with advisory locking and lazy expiry, DNS blacklist checks and cached board
queries, wired together by a configuration-driven dependency context.

Main modules:
- cache: Cache drivers (fs, memory, redis, none), the facade and the backend factory
- dnsbl: DNS blacklist checks, reverse DNS and resolvers
- db: SQL source and cached board queries
- themes: Theme rebuilding
- config: Configuration loading and validation
- context: Dependency factories and the process context
- io: File system abstraction
- utils: Logging setup

Quick start example:
```python
from boardcache import Config, Context

context = Context.from_config(Config("config.yml"))
cache = context.get_cache()
cache.set("greeting", {"text": "hello"}, 60)
spam = context.get_dns_queries().is_spam_ip("203.0.113.7")
context.close()
```
"""

__version__ = "0.4.0"

from .protocols import CacheDriverProtocol, ResolverProtocol, QuerySourceProtocol
from .config import Config, ConfigModel
from .context import Context, DependencyFactory, ConfigDependencyFactory
from .cache import CacheFacade, FsCacheDriver, build_cache_driver
from .dnsbl import DnsQueries
from .db import DbQueries, SqlSource
from .themes import ThemePages
from .exceptions import (
    BoardCacheError,
    ConfigurationError,
    StoreUnavailableError,
    DecodeError,
    QueryExecutionError,
    TableNotFoundError,
    InvalidArgumentError,
)

__all__ = [
    # Version
    '__version__',
    # Protocols
    'CacheDriverProtocol',
    'ResolverProtocol',
    'QuerySourceProtocol',
    # Config and context
    'Config',
    'ConfigModel',
    'Context',
    'DependencyFactory',
    'ConfigDependencyFactory',
    # Components
    'CacheFacade',
    'FsCacheDriver',
    'build_cache_driver',
    'DnsQueries',
    'DbQueries',
    'SqlSource',
    'ThemePages',
    # Exceptions
    'BoardCacheError',
    'ConfigurationError',
    'StoreUnavailableError',
    'DecodeError',
    'QueryExecutionError',
    'TableNotFoundError',
    'InvalidArgumentError',
]
