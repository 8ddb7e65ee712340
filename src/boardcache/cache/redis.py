"""
Redis cache driver.

Values travel as JSON strings under ``prefix + key``. Runtime errors from the
server degrade to misses and are logged; only the initial connection is fatal.
"""

import json
import logging
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from ..exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class RedisCacheDriver:
    """Remote key-value backend over a single Redis logical database."""

    def __init__(self, client: "redis.Redis", prefix: str = ""):
        """
        Args:
            client: A connected client, decoding responses to str
            prefix: Prefix prepended to every key
        """
        self.client = client
        self.prefix = prefix

    @classmethod
    def connect(
        cls,
        prefix: str,
        host: str,
        port: int,
        password: Optional[str] = None,
        database: int = 0,
    ) -> "RedisCacheDriver":
        """
        Connect, authenticate and select the logical database.

        Raises:
            StoreUnavailableError: If the server cannot be reached or rejects the credentials
        """
        client = redis.Redis(
            host=host,
            port=port,
            password=password or None,
            db=database,
            decode_responses=True,
        )
        try:
            client.ping()
        except RedisError as e:
            raise StoreUnavailableError(
                f"Unable to connect to redis at {host}:{port} (db {database}): {e}"
            ) from e
        logger.debug(f"Connected to redis at {host}:{port}, db {database}")
        return cls(client, prefix)

    def _key(self, key: str) -> str:
        return self.prefix + key

    def get(self, key: str) -> Any:
        try:
            raw = self.client.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Redis get failed for '{key}': {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt redis value for '{key}': {e}")
            return None

    def set(self, key: str, value: Any, expires: Optional[int] = None) -> None:
        data = json.dumps(value)
        try:
            if expires:
                self.client.setex(self._key(key), expires, data)
            else:
                self.client.set(self._key(key), data)
        except RedisError as e:
            logger.warning(f"Redis set failed for '{key}': {e}")

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except RedisError as e:
            logger.warning(f"Redis delete failed for '{key}': {e}")

    def flush(self) -> None:
        """Empty the whole selected database, not only this prefix."""
        try:
            self.client.flushdb()
        except RedisError as e:
            logger.warning(f"Redis flush failed: {e}")

    def close(self):
        self.client.close()
