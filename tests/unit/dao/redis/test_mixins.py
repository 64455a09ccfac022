"""Unit tests for Redis-based mixins.

Test coverage includes:
    1. Initialization and configuration
       - Ensures correct initialization with or without a Redis client.
       - Confirms created clients carry bounded socket timeouts.
       - Confirms invalid Redis configuration raises DataStoreError.
    2. Healthcheck behavior
       - Healthcheck pings Redis.
       - Missed pong from Redis raises error in strict mode.
       - Missed pong from Redis is only logged in non-strict mode.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import redis

from idemshort.constants import Timeout
from idemshort.dao.exceptions import DataStoreError
from idemshort.dao.redis import RedisKeySchema
from idemshort.dao.redis.mixins import RedisClientMixin


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def redis_client():
    _redis_client = MagicMock(
        spec=redis.Redis, connection_pool=MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0})
    )
    _redis_client.ping.return_value = True
    return _redis_client


# -------------------------------
# 1. Initialization and configuration
# -------------------------------


def test_initialize_without_redis_client():
    """Ensure DAO creates a Redis client with bounded timeouts when none is provided."""
    redis_config = {
        'redis_host': 'redis',
        'redis_port': 6379,
        'redis_db': 0,
        'redis_decode_responses': True,
        'redis_username': 'default',
        'redis_password': 'password',
    }

    with patch('idemshort.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        redis_mock_instance = redis_mock.return_value
        mixin = RedisClientMixin(**redis_config, prefix='testapp:test')

        redis_mock.assert_called_once_with(
            host='redis',
            port=6379,
            db=0,
            decode_responses=True,
            username='default',
            password='password',
            socket_timeout=Timeout.REDIS_SOCKET,
            socket_connect_timeout=Timeout.REDIS_CONNECT,
        )
        assert mixin.redis is redis_mock_instance


def test_initialize_with_redis_client(redis_client):
    """Ensure DAO correctly uses a pre-initialized Redis client."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')

    assert mixin.redis is redis_client
    assert isinstance(mixin.keys, RedisKeySchema)
    assert mixin.keys.prefix == 'testapp:test'


def test_initialize_with_invalid_redis_config():
    """Ensure invalid Redis config raises DataStoreError."""
    redis_config = {
        'redis_host': '203.0.113.1',
        'redis_port': 18000,
        'redis_db': 5,
    }
    exception_message = "Can't connect to Redis at 203.0.113.1:18000/5. Check the provided configuration parameters."

    with patch('idemshort.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        redis_mock_instance = redis_mock.return_value
        redis_mock_instance.ping.side_effect = redis.exceptions.ConnectionError('Connection error')
        redis_mock_instance.connection_pool = MagicMock()
        redis_mock_instance.connection_pool.connection_kwargs = {'host': '203.0.113.1', 'port': 18000, 'db': 5}

        with pytest.raises(DataStoreError, match=exception_message):
            RedisClientMixin(**redis_config, prefix='testapp:test')


# -------------------------------
# 2. Healthcheck behavior
# -------------------------------


def test_healthcheck_passes(redis_client):
    """Ensure healthcheck passes when Redis responds."""
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    redis_client.ping.assert_called_once()  # initialization performs a healthcheck

    pong = mixin._healthcheck()

    assert pong
    assert redis_client.ping.call_count == 2  # once in initialization, once separately


def test_healthcheck_fails(redis_client):
    """Ensure healthcheck raises DataStoreError when Redis is unreachable."""
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError):
        RedisClientMixin(redis_client=redis_client, prefix='testapp:test')


def test_healthcheck_timeout_is_a_connectivity_failure(redis_client):
    redis_client.ping.side_effect = redis.exceptions.TimeoutError('Timeout connecting to server')

    with pytest.raises(DataStoreError):
        RedisClientMixin(redis_client=redis_client, prefix='testapp:test')


def test_non_strict_initialization_logs_instead_of_raising(redis_client, caplog):
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('Connection error')

    with caplog.at_level(logging.WARNING, logger='idemshort.dao.redis.mixins'):
        mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test', strict=False)

    assert mixin.redis is redis_client
    assert "Can't connect to Redis at redis:6379/0" in caplog.text
    assert mixin._healthcheck(raise_error=False) is False
