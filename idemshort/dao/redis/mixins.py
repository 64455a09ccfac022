"""Redis mixin providing shared client initialization and connectivity checks.

Classes:
    - RedisClientMixin: Base mixin to inject Redis client setup, key schema & healthcheck.

Example:
    >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortURLRedisDAO(prefix="myapp:prod")
    >>> dao._healthcheck()
    True
"""

import logging

import redis

from idemshort.constants import Timeout
from idemshort.dao.exceptions import DataStoreError
from idemshort.dao.redis.helpers import describe_connection
from idemshort.dao.redis.redis_key_schema import RedisKeySchema


logger = logging.getLogger(__name__)


class RedisClientMixin:
    """Mixin Redis client setup and health check for Redis-backed DAOs.

    Attributes:
        redis (redis.Redis):
            Active Redis client instance used by subclasses.

        keys (RedisKeySchema):
            Helper class for generating namespaced Redis key names.
    """

    key_schema = RedisKeySchema

    def __init__(
        self,
        redis_host: str | None = 'localhost',
        redis_port: int | None = 6379,
        redis_db: int | None = 0,
        redis_decode_responses: bool | None = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_socket_timeout: float | None = Timeout.REDIS_SOCKET,
        redis_connect_timeout: float | None = Timeout.REDIS_CONNECT,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
        strict: bool = True,
    ):
        """Initialize a Redis-based DAO

        Either reuse an existing Redis client or create one from connection
        parameters. Created clients always carry bounded socket timeouts.

        Args:
            redis_* :
                Redis connection parameters (ignored when redis_client is given).

            redis_client (redis.Redis | None):
                Pre-initialized Redis client. If None, a new client is created.

            prefix (str | None):
                Namespace prefix for all Redis keys, e.g. 'app:env'.

            strict (bool):
                If True, an unreachable Redis raises DataStoreError right away.
                If False, the failure is logged and surfaces on first use instead.

        Raises:
            DataStoreError:
                If strict and the Redis healthcheck fails (connectivity issues).
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
                socket_connect_timeout=redis_connect_timeout,
            )

        self.redis = redis_client
        self.keys = self.key_schema(prefix=prefix)

        self._healthcheck(raise_error=strict)

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis to healthcheck connectivity

        Returns:
            bool:
                True if Redis is reachable, False otherwise (only if raise_error=False).

        Raises:
            DataStoreError:
                If Redis connection cannot be established and raise_error=True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            message = f"Can't connect to Redis at {describe_connection(self.redis)}. Check the provided configuration parameters."
            if raise_error:
                raise DataStoreError(message) from e
            logger.warning(message)
            return False
        else:
            return True
