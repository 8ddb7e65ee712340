class BoardCacheError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to configuration and store construction ---
class ConfigurationError(BoardCacheError):
    """Base class for errors that prevent the process from starting."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when the main configuration file cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML configuration file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration fails structural validation (e.g., Pydantic)."""

    pass


class StoreUnavailableError(ConfigurationError):
    """Raised when a cache store cannot be opened: missing directory, lock file or remote backend."""

    pass


class UnsupportedBackendError(ConfigurationError):
    """Raised when the configuration names a backend that does not exist."""

    pass


# --- 2. Errors related to cached values ---
class CacheError(BoardCacheError):
    """Base class for errors coming from a cache backend."""

    pass


class DecodeError(CacheError):
    """Raised when a stored envelope cannot be parsed."""

    pass


# --- 3. Errors related to the external store ---
class QueryError(BoardCacheError):
    """Base class for errors executing a query against the external store."""

    pass


class TableNotFoundError(QueryError):
    """Raised when the queried table does not exist. Callers treat it as no data."""

    pass


class QueryExecutionError(QueryError):
    """Raised for any other failure while executing a query."""

    pass


# --- 4. Caller mistakes ---
class InvalidArgumentError(BoardCacheError, ValueError):
    """Raised when a caller passes a malformed argument, like an invalid IP address."""

    pass


# --- 5. Errors related to themes ---
class ThemeError(BoardCacheError):
    """Raised when a theme builder cannot be loaded."""

    pass


# --- 6. Errors related to IO operations ---
class BoardCacheIOError(BoardCacheError):
    """Base class for IO-related errors."""

    pass


class PathExistsError(BoardCacheIOError):
    """Raised when a file or directory already exists."""

    pass


class PathNotFoundError(BoardCacheIOError):
    """Raised when a file or directory is not found."""

    pass


class NotAFileError(BoardCacheIOError):
    """Raised when a file is expected, but a directory is found."""

    pass


class NotADirError(BoardCacheIOError):
    """Raised when a directory is expected, but a file is found."""

    pass
