"""
DNS blacklist providers.

A provider is a zone plus an optional policy deciding, once the zone answers
for an address, whether the answer means "block":

- no policy: any answer blocks
- a collection of values: block when one of the returned addresses is a value
  or ``127.0.0.<value>``
- a callable: block when it returns true for the returned addresses
- any other single value: as a collection of one value
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Union

from .. import constants

Policy = Union[None, Callable[[List[str]], bool], Iterable[Any], Any]


def build_endpoint(zone: str, reversed_ip: str) -> str:
    """
    Build the name looked up for an address in a zone.

    Args:
        zone: The zone, optionally holding a ``%`` placeholder
        reversed_ip: The reversed octets or nibbles of the address

    Returns:
        str: The placeholder replaced, or ``<reversed_ip>.<zone>`` without one
    """
    if constants.DNSBL_PLACEHOLDER in zone:
        return zone.replace(constants.DNSBL_PLACEHOLDER, reversed_ip)
    return f"{reversed_ip}.{zone}"


def _value_matches(value: Any, addresses: List[str]) -> bool:
    value = str(value)
    return any(addr == value or addr == f"{constants.DNSBL_RETURN_PREFIX}{value}" for addr in addresses)


@dataclass(frozen=True)
class BlacklistProvider:
    zone: str
    policy: Policy = None

    @classmethod
    def from_config(cls, entry: Union[str, List[Any], "BlacklistProvider"]) -> "BlacklistProvider":
        """Accept a zone string or a ``[zone, policy]`` pair."""
        if isinstance(entry, BlacklistProvider):
            return entry
        if isinstance(entry, str):
            return cls(entry)
        zone, *rest = entry
        policy = rest[0] if rest else None
        if isinstance(policy, list):
            policy = tuple(policy)
        return cls(zone, policy)

    def endpoint(self, reversed_ip: str) -> str:
        return build_endpoint(self.zone, reversed_ip)

    def blocks(self, addresses: List[str]) -> bool:
        """
        Decide whether a positive answer from this zone blocks the address.

        Args:
            addresses: What the endpoint resolved to

        Returns:
            bool: True to block
        """
        if self.policy is None:
            return True
        if callable(self.policy):
            return bool(self.policy(addresses))
        if isinstance(self.policy, (set, frozenset, tuple, list)):
            return any(_value_matches(value, addresses) for value in self.policy)
        return _value_matches(self.policy, addresses)
