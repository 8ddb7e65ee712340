"""
boardcache Protocol Definitions

This module contains the capability interfaces shared by the cache, DNS and
query layers.

Protocols are the foundation layer with zero dependencies on other boardcache modules.
"""

from typing import Protocol, Dict, Any, List, Optional, Mapping, runtime_checkable


# ============================================================================
# Cache Protocols
# ============================================================================

@runtime_checkable
class CacheDriverProtocol(Protocol):
    """
    Protocol for every cache backend.

    A miss is always reported as ``None``; for this reason no backend can
    store ``None`` itself.
    """

    def get(self, key: str) -> Any:
        """
        Get the value associated with the key.

        Args:
            key: The logical key

        Returns:
            The stored value, or None if absent or expired
        """
        ...

    def set(self, key: str, value: Any, expires: Optional[int] = None) -> None:
        """
        Store a key-value pair.

        Args:
            key: The logical key
            value: A JSON-serializable value
            expires: Seconds until expiry; None or 0 keeps the pair until removed
        """
        ...

    def delete(self, key: str) -> None:
        """Delete a key-value pair. Deleting an absent key is not an error."""
        ...

    def flush(self) -> None:
        """Delete all the key-value pairs."""
        ...


# ============================================================================
# DNS Protocols
# ============================================================================

@runtime_checkable
class ResolverProtocol(Protocol):
    """
    Protocol for DNS resolvers.

    Both lookups are bounded by the resolver's own timeout and return None
    when nothing could be resolved.
    """

    def name_to_ips(self, name: str) -> Optional[List[str]]:
        """Resolve a host name to its IPv4 and IPv6 addresses."""
        ...

    def ip_to_names(self, ip: str) -> Optional[List[str]]:
        """Resolve an address to its host names (PTR records)."""
        ...


# ============================================================================
# External Store Protocols
# ============================================================================

@runtime_checkable
class QuerySourceProtocol(Protocol):
    """
    Protocol for the external store consumed by the query cache.

    Implementations raise TableNotFoundError when the queried table does not
    exist and QueryExecutionError for any other failure.
    """

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a parameterized query and return every row as a mapping."""
        ...
