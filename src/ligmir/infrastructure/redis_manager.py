from __future__ import annotations

from redis import Redis
from redis.exceptions import RedisError

from ligmir.infrastructure.errors import StoreError


class RedisManager:
    """
    Per-user preference storage on Redis.

    One logical table maps a user identifier to the integer id of their default
    character. Keys are ``<namespace>:character:<user_id>``; values never expire and
    the last write wins.

    This class is designed for dependency injection: callers provide a configured
    Redis client (e.g., via Redis.from_url) and the key namespace.

    Args:
        redis_client (Redis): A configured Redis client instance.
        namespace (str): Key namespace/prefix for generated keys.
    """

    def __init__(self, redis_client: Redis, *, namespace: str = "ligmir") -> None:
        self._redis: Redis = redis_client
        self._namespace: str = namespace.rstrip(":")

    def get_character_key(self, user_id: str) -> str:
        """
        Build the namespaced key holding a user's default character.

        Args:
            user_id (str): Chat user identifier.

        Returns:
            str: A namespaced Redis key.
        """
        return f"{self._namespace}:character:{user_id}"

    def get_character_id(self, user_id: str) -> int | None:
        """
        Look up the default character id stored for `user_id`.

        Returns:
            int | None: The stored id, or None if nothing (valid) is stored.

        Raises:
            StoreError: If Redis cannot be queried.
        """
        try:
            raw = self._redis.get(self.get_character_key(user_id))
        except RedisError as e:
            raise StoreError(f"Failed to read default character of {user_id}: {e}") from e
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None

    def set_character_id(self, user_id: str, character_id: int) -> None:
        """
        Store `character_id` as the default character of `user_id`.

        Raises:
            StoreError: If Redis rejects the write.
        """
        try:
            self._redis.set(self.get_character_key(user_id), str(character_id))
        except RedisError as e:
            raise StoreError(f"Failed to save default character of {user_id}: {e}") from e


def build_redis_manager(
    redis_url: str | None = None,
    *,
    redis_client: Redis | None = None,
    namespace: str = "ligmir",
) -> RedisManager:
    """
    Factory to create a RedisManager.

    You can provide either `redis_url` (preferred) and this function will initialize
    the client, or pass an existing `redis_client` (for tests/advanced use).

    Args:
        redis_url (str | None): Redis connection URL (e.g., "redis://:pwd@host:6379/0").
        redis_client (Redis | None): Pre-configured Redis client instance.
        namespace (str): Key namespace/prefix for generated keys.

    Returns:
        RedisManager: Configured manager instance.
    """
    if redis_client is None:
        if not redis_url:
            raise ValueError("Provide either redis_url or redis_client")
        redis_client = Redis.from_url(redis_url, decode_responses=True)

    return RedisManager(redis_client, namespace=namespace)
