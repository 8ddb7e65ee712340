from enum import Enum

# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "fs": "boardcache.cache.fs",
    "lock": "boardcache.cache.lock",
    "facade": "boardcache.cache.facade",
    "redis": "boardcache.cache.redis",
    "dnsbl": "boardcache.dnsbl.queries",
    "rsv": "boardcache.dnsbl.resolvers",
    "db": "boardcache.db",
    "sql": "boardcache.db.source",
    "themes": "boardcache.themes",
    "conf": "boardcache.config",
    "ctx": "boardcache.context",
    "io": "boardcache.io",
}

# Top-level modules within boardcache for auto-prefixing
KNOWN_TOP_MODULES = {
    "cache",
    "dnsbl",
    "db",
    "io",
    "utils",
    "themes",
    "config",
    "context",
    "cli",
}

LOG_LEVELS_ENV = "BOARDCACHE_LOG_LEVELS"


# --- Cache ---
class BackendKind(str, Enum):
    """Cache backends selectable from configuration."""

    FS = "fs"
    MEMORY = "memory"
    REDIS = "redis"
    NONE = "none"


# Legacy spellings accepted for `cache.enabled`
BACKEND_ALIASES = {
    "php": BackendKind.MEMORY,
    "array": BackendKind.MEMORY,
    "filesystem": BackendKind.FS,
    "disabled": BackendKind.NONE,
}

# Expiry value meaning "keep until deleted or flushed"
NEVER = 0

DEFAULT_CACHE_TIMEOUT = 60 * 60 * 12
DEFAULT_FS_BASE_PATH = "/tmp/cache"
# "%" is always escaped in entry names, so no key can name the lock file
DEFAULT_LOCK_FILE = "%lock"
DEFAULT_COLLECT_CHANCE_DEN = 1000
DEBUG_RECORDER_SIZE = 200

# On-disk envelope fields
ENVELOPE_EXPIRES = "expires"
ENVELOPE_INNER = "inner"

# Key escaping
KEY_ESCAPES = {
    "%": "%25",
    "/": "%2F",
}

# --- DNS ---
DNS_CACHE_TIMEOUT = 60 * 15
DNS_CACHE_PREFIX = "dns_queries_dns_"
RDNS_CACHE_PREFIX = "dns_queries_rdns_"
DNSBL_PLACEHOLDER = "%"
DNSBL_RETURN_PREFIX = "127.0.0."

# A cached value may not be a bare boolean, since a miss is reported as None
CACHE_FALSE = 0x00

DEFAULT_DNS_TIMEOUT = 1


class ResolverKind(str, Enum):
    """DNS resolver implementations selectable from configuration."""

    DNSPYTHON = "dnspython"
    HOST = "host"


# --- Queries ---
BAN_INFO_TIMEOUT = 60 * 5
BOARD_INFO_TIMEOUT = 60 * 10
THREAD_INFO_TIMEOUT = 60 * 2
THEME_SETTINGS_TIMEOUT = NEVER

# SQLSTATE / driver codes reporting a missing table
MISSING_TABLE_SQLSTATES = {"42S02", "42P01"}
MISSING_TABLE_ERRNOS = {1146}
MISSING_TABLE_MESSAGES = ("no such table", "doesn't exist")

# --- Themes ---
THEME_INFO_FILENAME = "info.yml"
THEME_BUILDER_FILENAME = "theme.py"
DEFAULT_BUILD_FUNCTION = "build"
DEFAULT_THEMES_DIR = "templates/themes"


# --- Logging ---
class LogKind(str, Enum):
    """Log sinks selectable from configuration."""

    STDERR = "stderr"
    FILE = "file"
    SYSLOG = "syslog"
    NONE = "none"


DEFAULT_LOG_NAME = "boardcache"
