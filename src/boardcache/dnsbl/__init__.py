"""
boardcache DNSBL Module

- DnsQueries: Blacklist checks and reverse DNS, memoized through the cache
- BlacklistProvider: A zone and its blocking policy
- DnsPythonResolver / HostCommandResolver: Resolver implementations
"""

from .providers import BlacklistProvider, build_endpoint
from .queries import DnsQueries, parse_ip, reverse_ip
from .resolvers import DnsPythonResolver, HostCommandResolver, create_resolver

__all__ = [
    'BlacklistProvider',
    'build_endpoint',
    'DnsQueries',
    'parse_ip',
    'reverse_ip',
    'DnsPythonResolver',
    'HostCommandResolver',
    'create_resolver',
]
