"""Long-lived connections to the store.

A :class:`ConnectionManager` owns two clients, each on its own connection pool:

- the command client, byte-oriented (``decode_responses=False``), used for every
  key/value command;
- the pub/sub client, text-oriented (``decode_responses=True``), used for
  ``PUBLISH`` and as the pool new subscriptions draw their dedicated
  connection from.

Both are created and verified with ``PING`` once, when the manager is built, and
are never reopened by normal operations. The driver reconnects on its own:
failed commands are retried with exponential backoff, and idle connections are
health-checked before reuse. Properties with ``ssl`` set connect through the
library's TLS connection class.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from layercache_redis.config import RedisProperties

# Try to import redis-py and/or valkey-py
_REDIS_AVAILABLE = False
_VALKEY_AVAILABLE = False

try:
    import redis
    from redis.backoff import ExponentialBackoff as RedisExponentialBackoff
    from redis.retry import Retry as RedisRetry

    _REDIS_AVAILABLE = True
except ImportError:
    redis = None  # type: ignore[assignment]

try:
    import valkey
    from valkey.backoff import ExponentialBackoff as ValkeyExponentialBackoff
    from valkey.retry import Retry as ValkeyRetry

    _VALKEY_AVAILABLE = True
except ImportError:
    valkey = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Builds and holds the command and pub/sub clients.

    Subclasses must set:
    - _client_class: The client class (e.g., redis.Redis)
    - _pool_class: The connection pool class (e.g., redis.ConnectionPool)
    - _ssl_connection_class: The TLS connection class (e.g., redis.SSLConnection)
    - _retry_class / _backoff_class: Retry policy classes of the same library
    """

    _client_class: type | None = None
    _pool_class: type | None = None
    _ssl_connection_class: type | None = None
    _retry_class: type | None = None
    _backoff_class: type | None = None

    # Reconnect attempts per failed command
    _retries: int = 3

    # Seconds a pooled connection may idle before it is pinged on checkout
    _health_check_interval: int = 30

    def __init__(self, properties: RedisProperties) -> None:
        self.properties = properties
        self.command_client = self._create_client(decode_responses=False)
        self.pubsub_client = self._create_client(decode_responses=True)
        self._ping(self.command_client)
        self._ping(self.pubsub_client)

    def _pool_options(self, *, decode_responses: bool) -> dict[str, Any]:
        """Get options to pass to the connection pool constructor."""
        props = self.properties
        options: dict[str, Any] = {
            "host": props.host,
            "port": props.port,
            "db": props.database,
            "password": props.password,
            "socket_timeout": props.timeout,
            "socket_connect_timeout": props.timeout,
            "socket_keepalive": True,
            "retry_on_timeout": True,
            "health_check_interval": self._health_check_interval,
            "decode_responses": decode_responses,
        }
        if props.ssl:
            assert self._ssl_connection_class is not None, "Subclasses must set _ssl_connection_class"  # noqa: S101
            options["connection_class"] = self._ssl_connection_class
        if self._retry_class is not None and self._backoff_class is not None:
            options["retry"] = self._retry_class(self._backoff_class(), self._retries)
        return options

    def _create_client(self, *, decode_responses: bool) -> Any:
        """Create a client on a fresh connection pool."""
        assert self._pool_class is not None, "Subclasses must set _pool_class"  # noqa: S101
        assert self._client_class is not None, "Subclasses must set _client_class"  # noqa: S101
        pool = self._pool_class(**self._pool_options(decode_responses=decode_responses))
        return self._client_class(connection_pool=pool)

    def _ping(self, client: Any) -> None:
        """Verify a client is live before handing it out."""
        client.ping()

    def new_pubsub(self) -> Any:
        """Open a PubSub object that holds its own dedicated connection.

        Subscribe confirmations are not filtered out, so callers can wait for them.
        """
        return self.pubsub_client.pubsub()

    def close(self) -> None:
        """Disconnect both pools. Owned by the enclosing application."""
        for client in (self.command_client, self.pubsub_client):
            client.connection_pool.disconnect()
        logger.debug("Closed connections to %s:%s", self.properties.host, self.properties.port)


if _REDIS_AVAILABLE:

    class RedisConnectionManager(ConnectionManager):
        """Connections through redis-py."""

        _client_class = redis.Redis
        _pool_class = redis.ConnectionPool
        _ssl_connection_class = redis.SSLConnection
        _retry_class = RedisRetry
        _backoff_class = RedisExponentialBackoff

else:

    class RedisConnectionManager(ConnectionManager):  # type: ignore[no-redef]
        """Connections through redis-py (not installed)."""

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            msg = "RedisConnectionManager requires redis-py. Install with: pip install redis"
            raise ImportError(msg)


if _VALKEY_AVAILABLE:

    class ValkeyConnectionManager(ConnectionManager):
        """Connections through valkey-py."""

        _client_class = valkey.Valkey
        _pool_class = valkey.ConnectionPool
        _ssl_connection_class = valkey.SSLConnection
        _retry_class = ValkeyRetry
        _backoff_class = ValkeyExponentialBackoff

else:

    class ValkeyConnectionManager(ConnectionManager):  # type: ignore[no-redef]
        """Connections through valkey-py (not installed)."""

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            msg = "ValkeyConnectionManager requires valkey-py. Install with: pip install valkey"
            raise ImportError(msg)
