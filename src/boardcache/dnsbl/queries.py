"""
DNS blacklist and reverse DNS queries, memoized through the cache.
"""

import ipaddress
import logging
from typing import Iterable, List, Optional, Union

from .. import constants
from ..exceptions import InvalidArgumentError
from ..protocols import CacheDriverProtocol, ResolverProtocol
from .providers import BlacklistProvider

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_ip(ip: str) -> IPAddress:
    """
    Parse a textual IPv4 or IPv6 address.

    Raises:
        InvalidArgumentError: If ``ip`` is not a valid address
    """
    try:
        return ipaddress.ip_address(str(ip).strip())
    except ValueError:
        raise InvalidArgumentError(f"{ip} is not a valid ip address.")


def reverse_ip(addr: IPAddress) -> str:
    """Reversed octets (IPv4) or nibbles (IPv6), as used under a DNSBL zone."""
    pointer = addr.reverse_pointer
    suffix = ".in-addr.arpa" if addr.version == 4 else ".ip6.arpa"
    return pointer[: -len(suffix)]


class DnsQueries:
    """Spam checks against DNS blacklists, and reverse DNS lookups."""

    def __init__(
        self,
        resolver: ResolverProtocol,
        cache: CacheDriverProtocol,
        providers: Iterable = (),
        exceptions: Iterable[str] = (),
        rdns_validate: bool = False,
        skip_reserved: bool = True,
    ):
        """
        Args:
            resolver: Answers the DNS lookups
            cache: Memoizes every lookup for 15 minutes
            providers: Blacklist providers, or their configuration entries
            exceptions: Addresses never considered spam
            rdns_validate: Keep only reverse names that resolve back to the address
            skip_reserved: Never look up private or reserved addresses
        """
        self.resolver = resolver
        self.cache = cache
        self.providers = [BlacklistProvider.from_config(p) for p in providers]
        self.exceptions = set()
        for entry in exceptions:
            self.exceptions.add(str(entry))
            try:
                self.exceptions.add(str(ipaddress.ip_address(entry)))
            except ValueError:
                logger.warning(f"DNSBL exception '{entry}' is not an ip address")
        self.rdns_validate = rdns_validate
        self.skip_reserved = skip_reserved

    def _is_whitelisted(self, ip: str, addr: IPAddress) -> bool:
        if ip in self.exceptions or str(addr) in self.exceptions:
            return True
        return self.skip_reserved and not addr.is_global

    def _resolve_cached(self, name: str) -> List[str]:
        """
        Addresses ``name`` resolves to, memoized.

        The cache holds the address list when the name resolves and CACHE_FALSE
        when it does not, so that a miss (None) stays distinguishable.
        """
        key = f"{constants.DNS_CACHE_PREFIX}{name}"
        value = self.cache.get(key)
        if value is None:
            ips = self.resolver.name_to_ips(name)
            value = list(ips) if ips else constants.CACHE_FALSE
            self.cache.set(key, value, constants.DNS_CACHE_TIMEOUT)
        if isinstance(value, list):
            return value
        return []

    def is_spam_ip(self, ip: str) -> bool:
        """
        Is the given IP known to a blacklist?

        Args:
            ip: The IPv4 or IPv6 address to look up

        Returns:
            bool: True if the first zone answering for it blocks it

        Raises:
            InvalidArgumentError: If ``ip`` is not a valid address
        """
        addr = parse_ip(ip)
        if self._is_whitelisted(ip, addr):
            logger.debug(f"{ip} is whitelisted, skipping blacklist lookups")
            return False

        rip = reverse_ip(addr)
        for provider in self.providers:
            name = provider.endpoint(rip)
            addresses = self._resolve_cached(name)
            if addresses and provider.blocks(addresses):
                logger.info(f"{ip} is listed by {provider.zone} ({', '.join(addresses)})")
                return True
        return False

    def ip_to_names(self, ip: str) -> List[str]:
        """
        Reverse DNS lookup of the given IP. May be slow when validating.

        Args:
            ip: The address to look up

        Returns:
            List[str]: Its host names, empty when it has none

        Raises:
            InvalidArgumentError: If ``ip`` is not a valid address
        """
        addr = parse_ip(ip)
        key = f"{constants.RDNS_CACHE_PREFIX}{addr}"
        cached: Optional[List[str]] = self.cache.get(key)
        if cached is not None:
            return cached

        names = self.resolver.ip_to_names(str(addr))
        if not names:
            self.cache.set(key, [], constants.DNS_CACHE_TIMEOUT)
            return []

        if self.rdns_validate:
            names = [name for name in names if self._resolves_back(name, addr)]

        self.cache.set(key, names, constants.DNS_CACHE_TIMEOUT)
        return names

    def _resolves_back(self, name: str, addr: IPAddress) -> bool:
        resolved = self.resolver.name_to_ips(name) or []
        for candidate in resolved:
            try:
                if ipaddress.ip_address(candidate) == addr:
                    return True
            except ValueError:
                continue
        logger.debug(f"Dropping reverse name '{name}': it does not resolve back to {addr}")
        return False
