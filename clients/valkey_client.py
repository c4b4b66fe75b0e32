"""
Valkey (Redis-compatible) client for shared ledger snapshots.

Simple wrapper around redis-py. Connection URL from LedgerConfig.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import logging
from typing import Callable

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        value = client.get("key")  # Returns None if missing
        client.set_if("key", "value", lambda current: current is None)
        client.close()
    """

    def __init__(self, url: str):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def get(self, key: str) -> str | None:
        """
        Get value by key.

        Returns None if key doesn't exist (not an error).
        Raises on connection failure.
        """
        return self._client.get(key)

    def set_if(self, key: str, value: str, condition: Callable[[str | None], bool]) -> bool:
        """
        Set key only if its current value satisfies condition.

        Uses WATCH/MULTI so the check and the write are atomic with respect
        to other clients.

        Args:
            key: Key to set
            value: Value to store
            condition: Called with the current value (None if missing)

        Returns:
            True if written. False if condition rejected the current value or
            another client modified the key between check and write.
        """
        with self._client.pipeline() as pipe:
            try:
                pipe.watch(key)
                if not condition(pipe.get(key)):
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(key, value)
                pipe.execute()
                return True
            except redis.WatchError:
                logger.info(f"Key '{key}' changed during conditional set")
                return False

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
