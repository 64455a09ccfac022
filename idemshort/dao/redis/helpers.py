import functools
from typing import TypeVar, Any
from collections.abc import Callable

import redis

from idemshort.dao.exceptions import DataStoreError


__all__ = ['handle_redis_connection_error', 'handle_redis_error', 'describe_connection']

F = TypeVar('F', bound=Callable[..., Any])


def describe_connection(client: redis.Redis) -> str:
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connectivity errors

    Connection failures and timeouts (every client is created with bounded
    socket timeouts) are both reported as DataStoreError.

    Example:
        >>> @handle_redis_connection_error
        ... def get_count(self):
        ...     return self.redis.get('count')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.TimeoutError as e:
            raise DataStoreError(f'Timed out talking to Redis at {describe_connection(self.redis)}.') from e
        except redis.exceptions.ConnectionError as e:
            raise DataStoreError(f"Can't connect to Redis at {describe_connection(self.redis)}.") from e

    return wrapper


def handle_redis_error[F](method: F) -> F:
    """Like handle_redis_connection_error, but also reports server-side errors as DataStoreError

    Meant for best-effort stores whose callers degrade on DataStoreError:
    a read-only replica after failover (ReadOnlyError) or an OOM reply
    (ResponseError) must not abort the request either.
    """
    connection_safe = handle_redis_connection_error(method)

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return connection_safe(self, *args, **kwargs)
        except redis.exceptions.RedisError as e:
            raise DataStoreError(f'Redis at {describe_connection(self.redis)} rejected the command: {e}') from e

    return wrapper
