from unittest.mock import MagicMock

import pytest
import redis


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def compare_and_delete() -> MagicMock:
    """Registered Lua script stand-in (callable like redis.commands.core.Script)."""
    script = MagicMock()
    script.return_value = 1
    return script


@pytest.fixture
def redis_client(compare_and_delete) -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.ping.return_value = True
    client.exists.return_value = 0
    client.get.return_value = None
    client.set.return_value = True
    client.register_script.return_value = compare_and_delete
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    return client
