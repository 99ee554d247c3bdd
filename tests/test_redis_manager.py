"""
Tests for the Redis-backed preference store.
"""

from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from ligmir.infrastructure.errors import StoreError
from ligmir.infrastructure.redis_manager import RedisManager, build_redis_manager


@pytest.fixture
def redis_client():
    return MagicMock()


@pytest.fixture
def manager(redis_client):
    return RedisManager(redis_client, namespace="ligmir:")


def test_key_layout(manager):
    assert manager.get_character_key("42") == "ligmir:character:42"


def test_get_character_id(manager, redis_client):
    redis_client.get.return_value = "123"

    assert manager.get_character_id("42") == 123
    redis_client.get.assert_called_once_with("ligmir:character:42")


def test_missing_character_id(manager, redis_client):
    redis_client.get.return_value = None
    assert manager.get_character_id("42") is None


def test_garbage_character_id_is_ignored(manager, redis_client):
    redis_client.get.return_value = "not a number"
    assert manager.get_character_id("42") is None


def test_set_character_id(manager, redis_client):
    manager.set_character_id("42", 123)
    redis_client.set.assert_called_once_with("ligmir:character:42", "123")


def test_read_failure_raises_store_error(manager, redis_client):
    redis_client.get.side_effect = RedisConnectionError("refused")
    with pytest.raises(StoreError):
        manager.get_character_id("42")


def test_write_failure_raises_store_error(manager, redis_client):
    redis_client.set.side_effect = RedisConnectionError("refused")
    with pytest.raises(StoreError):
        manager.set_character_id("42", 123)


def test_build_requires_url_or_client():
    with pytest.raises(ValueError):
        build_redis_manager()


def test_build_from_url():
    with patch("ligmir.infrastructure.redis_manager.Redis.from_url") as from_url:
        manager = build_redis_manager("redis://localhost:6379/0")

    from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)
    assert manager.get_character_key("1") == "ligmir:character:1"
