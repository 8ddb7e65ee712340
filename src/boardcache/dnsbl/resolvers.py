"""
DNS resolvers.

Both implementations answer the two questions the blacklist checks need:
which addresses a name has, and which names an address has. Every lookup is
bounded by the resolver's timeout and reports failure as None.
"""

import logging
import re
import subprocess
from typing import List, Optional

import dns.exception
import dns.resolver
import dns.reversename

from .. import constants

logger = logging.getLogger(__name__)


class DnsPythonResolver:
    """Resolver backed by dnspython, querying A and AAAA or PTR records."""

    def __init__(self, timeout: int = constants.DEFAULT_DNS_TIMEOUT, resolver: Optional[dns.resolver.Resolver] = None):
        """
        Args:
            timeout: Seconds allowed for each lookup
            resolver: A configured dnspython resolver, the system one by default
        """
        self.timeout = timeout
        self._resolver = resolver

    @property
    def resolver(self) -> dns.resolver.Resolver:
        # Reading the system configuration is deferred to the first lookup
        if self._resolver is None:
            self._resolver = dns.resolver.Resolver()
        return self._resolver

    def _query(self, qname, rdtype: str) -> List[str]:
        try:
            answer = self.resolver.resolve(qname, rdtype, lifetime=self.timeout)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer, dns.resolver.NoNameservers):
            return []
        except dns.exception.Timeout:
            logger.warning(f"DNS {rdtype} lookup of '{qname}' timed out after {self.timeout}s")
            return []
        except dns.exception.DNSException as e:
            logger.warning(f"DNS {rdtype} lookup of '{qname}' failed: {e}")
            return []
        return [rdata.to_text() for rdata in answer]

    def name_to_ips(self, name: str) -> Optional[List[str]]:
        ips = self._query(name, "A") + self._query(name, "AAAA")
        return ips or None

    def ip_to_names(self, ip: str) -> Optional[List[str]]:
        try:
            qname = dns.reversename.from_address(ip)
        except (dns.exception.SyntaxError, ValueError):
            return None
        names = [name.rstrip(".") for name in self._query(qname, "PTR")]
        return names or None


class HostCommandResolver:
    """Resolver relying on the `host` command line executable."""

    IPV4_PATTERN = re.compile(r"has address ([^\s]+)$", re.M)
    IPV6_PATTERN = re.compile(r"has IPv6 address ([^\s]+)$", re.M)
    PTR_PATTERN = re.compile(r"domain name pointer ([^\s]+)$", re.M)

    def __init__(self, timeout: int = constants.DEFAULT_DNS_TIMEOUT, executable: str = "host"):
        self.timeout = timeout
        self.executable = executable

    def _run(self, target: str) -> Optional[str]:
        cmd = [self.executable, "-W", str(self.timeout), target]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                # `host` retries internally, allow it one extra window before giving up
                timeout=self.timeout * 2 + 1,
            )
        except subprocess.CalledProcessError as e:
            logger.debug(f"'{' '.join(cmd)}' exited with {e.returncode}")
            return None
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Unable to run '{' '.join(cmd)}': {e}")
            return None
        return result.stdout

    def name_to_ips(self, name: str) -> Optional[List[str]]:
        output = self._run(name)
        if output is None:
            return None
        ips = self.IPV4_PATTERN.findall(output) + self.IPV6_PATTERN.findall(output)
        return ips or None

    def ip_to_names(self, ip: str) -> Optional[List[str]]:
        output = self._run(ip)
        if output is None:
            return None
        names = self.PTR_PATTERN.findall(output)
        if not names:
            return None
        return [name.rstrip(".") for name in names]


def create_resolver(kind: constants.ResolverKind, timeout: int):
    """Build the resolver named by the `dns.resolver` setting."""
    if kind is constants.ResolverKind.HOST:
        return HostCommandResolver(timeout)
    return DnsPythonResolver(timeout)
