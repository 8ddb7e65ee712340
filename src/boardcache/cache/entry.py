"""
On-disk cache envelope.

Every entry file holds a compact JSON object with exactly two fields::

    {"expires": 1700000000, "inner": <payload>}

``expires`` is an integer Unix timestamp, or ``false`` for entries that never
expire. The payload goes through JSON as-is, so tuples come back as lists and
non-string mapping keys come back as strings.
"""

import json
import math
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from .. import constants
from ..exceptions import DecodeError


class CacheEntry(BaseModel):
    """A stored value together with its absolute expiry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    expires: Union[Literal[False], StrictInt] = False
    inner: Any = None

    @classmethod
    def create(cls, value: Any, ttl: int, now: float) -> "CacheEntry":
        """
        Wrap a value, computing its expiry.

        Args:
            value: The payload
            ttl: Seconds to live; 0 means never expire
            now: Current Unix time

        Returns:
            CacheEntry: The envelope
        """
        # Whole seconds, rounded up: never earlier than now + ttl
        expires = math.ceil(now + ttl) if ttl else False
        return cls(expires=expires, inner=value)

    def is_expired(self, now: float) -> bool:
        """Expired entries behave as absent even if still on storage."""
        return self.expires is not False and self.expires <= now

    def encode(self) -> str:
        return json.dumps(
            {constants.ENVELOPE_EXPIRES: self.expires, constants.ENVELOPE_INNER: self.inner},
            separators=(",", ":"),
        )

    @classmethod
    def decode(cls, data: str) -> "CacheEntry":
        """
        Parse an envelope.

        Raises:
            DecodeError: If the text is not JSON or not a valid envelope
        """
        try:
            wrapped = json.loads(data)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Cache envelope is not valid JSON: {e}") from e
        if not isinstance(wrapped, dict) or constants.ENVELOPE_INNER not in wrapped:
            raise DecodeError("Cache envelope must be an object with 'expires' and 'inner'")
        try:
            return cls.model_validate(wrapped)
        except ValidationError as e:
            raise DecodeError(f"Malformed cache envelope: {e}") from e
