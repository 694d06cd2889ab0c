"""Client classes for Redis-compatible stores.

Architecture:
- KeyValueClient: Base class with all logic, library-agnostic
- RedisClient: Uses redis-py connections
- ValkeyClient: Uses valkey-py connections

The class attribute pattern lets subclasses swap the underlying library while
inheriting every operation.

Every operation takes ``str`` keys, runs them through the client's key
serializer, and uses the value serializer (or a per-call ``serializer=``
override) for values. Failures follow one policy, applied by
:func:`~layercache_redis.wrap_exception.wrap_exception`: ``SerializationError``
propagates unchanged, everything else becomes ``ClientOperationError``.

Thread safety: a client may be shared between threads. The default serializers
are plain attributes swapped by their setters; swapping them while other threads
have operations in flight must be synchronized by the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from layercache_redis.compat import DEFAULT_KEY_SERIALIZER, DEFAULT_VALUE_SERIALIZER, create_serializer
from layercache_redis.config import RedisProperties
from layercache_redis.connection import ConnectionManager, RedisConnectionManager, ValkeyConnectionManager
from layercache_redis.pubsub import MessageListener, PubSubManager, Subscription
from layercache_redis.scan import DEFAULT_SCAN_COUNT, KeyScanner
from layercache_redis.types import TimeUnit, to_seconds
from layercache_redis.wrap_exception import wrap_exception

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from layercache_redis.serializers.base import BaseSerializer
    from layercache_redis.types import ExpiryT, KeyT

logger = logging.getLogger(__name__)

# Status reported by the store for a successful SET
STATUS_OK = "OK"


class KeyValueClient:
    """Typed facade over one store connection.

    Subclasses must set:
    - _connection_manager_class: The ConnectionManager subclass for the library

    Args:
        properties: Connection settings. Defaults to ``RedisProperties()``.
        key_serializer: Overrides ``properties.key_serializer``.
        value_serializer: Overrides ``properties.value_serializer``.
    """

    _connection_manager_class: type[ConnectionManager] | None = None

    def __init__(
        self,
        properties: RedisProperties | None = None,
        *,
        key_serializer: Any = None,
        value_serializer: Any = None,
    ) -> None:
        self.properties = properties or RedisProperties()
        self._key_serializer = create_serializer(
            key_serializer or self.properties.key_serializer,
            default=DEFAULT_KEY_SERIALIZER,
        )
        self._value_serializer = create_serializer(
            value_serializer or self.properties.value_serializer,
            default=DEFAULT_VALUE_SERIALIZER,
        )

        logger.info("Connecting to redis with %r", self.properties)
        assert self._connection_manager_class is not None, "Subclasses must set _connection_manager_class"  # noqa: S101
        self._connections = self._connection_manager_class(self.properties)
        self._pubsub = PubSubManager(self._connections)

    # =========================================================================
    # Serializers
    # =========================================================================

    @property
    def key_serializer(self) -> BaseSerializer:
        return self._key_serializer

    @key_serializer.setter
    def key_serializer(self, serializer: Any) -> None:
        if serializer is None:
            msg = "key_serializer must not be None"
            raise ValueError(msg)
        self._key_serializer = create_serializer(serializer)

    @property
    def value_serializer(self) -> BaseSerializer:
        return self._value_serializer

    @value_serializer.setter
    def value_serializer(self, serializer: Any) -> None:
        if serializer is None:
            msg = "value_serializer must not be None"
            raise ValueError(msg)
        self._value_serializer = create_serializer(serializer)

    def _serializer(self, override: BaseSerializer | None) -> BaseSerializer:
        return override if override is not None else self._value_serializer

    def make_key(self, key: KeyT) -> bytes:
        """Serialize a key with the client's key serializer."""
        return self._key_serializer.serialize(key)

    # =========================================================================
    # Connections
    # =========================================================================

    @property
    def connections(self) -> ConnectionManager:
        return self._connections

    def get_client(self) -> Any:
        """Get the raw byte-oriented command client."""
        return self._connections.command_client

    def close(self) -> None:
        """Disconnect the shared connections. Never called by operations."""
        self._connections.close()

    # =========================================================================
    # Single-key Operations
    # =========================================================================

    @wrap_exception
    def get(self, key: KeyT, result_type: type | None = None, *, serializer: BaseSerializer | None = None) -> Any:
        """Fetch a value, or None when the key does not exist."""
        val = self.get_client().get(self.make_key(key))
        return self._serializer(serializer).deserialize(val, result_type)

    @wrap_exception
    def set(
        self,
        key: KeyT,
        value: Any,
        timeout: ExpiryT | None = None,
        unit: TimeUnit = TimeUnit.SECONDS,
        *,
        serializer: BaseSerializer | None = None,
    ) -> str | None:
        """Store a value, with a TTL when ``timeout`` is given.

        The TTL is truncated to whole seconds, so a sub-second timeout is sent as
        0 and rejected by the store.
        """
        client = self.get_client()
        nkey = self.make_key(key)
        nvalue = self._serializer(serializer).serialize(value)

        if timeout is None:
            result = client.set(nkey, nvalue)
        else:
            result = client.set(nkey, nvalue, ex=to_seconds(timeout, unit))
        return STATUS_OK if result else None

    @wrap_exception
    def set_if_absent(
        self,
        key: KeyT,
        value: Any,
        timeout: ExpiryT,
        unit: TimeUnit = TimeUnit.SECONDS,
        *,
        serializer: BaseSerializer | None = None,
    ) -> str | None:
        """Atomically store a value with a TTL only if the key does not exist.

        Returns ``"OK"`` when stored, None when the key was already present.
        """
        nkey = self.make_key(key)
        nvalue = self._serializer(serializer).serialize(value)
        result = self.get_client().set(nkey, nvalue, nx=True, ex=to_seconds(timeout, unit))
        return STATUS_OK if result else None

    def delete(self, *keys: KeyT) -> int:
        """Remove keys, returning how many existed."""
        return self.delete_many(keys)

    @wrap_exception
    def delete_many(self, keys: Iterable[KeyT] | None) -> int:
        """Remove multiple keys. An empty or None collection makes no round trip.

        A bare ``str`` is a single key, not a collection of one-character keys.
        """
        if not keys:
            return 0
        if isinstance(keys, str):
            keys = [keys]
        nkeys = [self.make_key(k) for k in keys]
        if not nkeys:
            return 0
        return cast("int", self.get_client().delete(*nkeys))

    @wrap_exception
    def has_key(self, key: KeyT) -> bool:
        """Check if a key exists."""
        return self.get_client().exists(self.make_key(key)) > 0

    # =========================================================================
    # Expiry
    # =========================================================================

    @wrap_exception
    def expire(self, key: KeyT, timeout: ExpiryT, unit: TimeUnit = TimeUnit.SECONDS) -> bool:
        """Set or update the TTL of a key without touching its value."""
        return bool(self.get_client().expire(self.make_key(key), to_seconds(timeout, unit)))

    @wrap_exception
    def ttl(self, key: KeyT) -> int:
        """Get TTL in seconds. Returns -1 if the key has no expiry, -2 if it doesn't exist."""
        return cast("int", self.get_client().ttl(self.make_key(key)))

    # =========================================================================
    # List Operations
    # =========================================================================

    @wrap_exception
    def lpush(self, key: KeyT, *values: str, serializer: BaseSerializer | None = None) -> int:
        """Push values to the head of a list, returning its new length.

        Values are pushed one after another, so the last value ends up first.
        """
        if not values:
            return 0
        value_serializer = self._serializer(serializer)
        nvalues = [value_serializer.serialize(v) for v in values]
        return cast("int", self.get_client().lpush(self.make_key(key), *nvalues))

    @wrap_exception
    def llen(self, key: KeyT) -> int:
        """Get the length of a list (0 if it doesn't exist)."""
        return cast("int", self.get_client().llen(self.make_key(key)))

    @wrap_exception
    def lrange(self, key: KeyT, start: int, end: int, *, serializer: BaseSerializer | None = None) -> list[str]:
        """Get elements ``start`` through ``end`` inclusive; negative indices count from the tail."""
        values = self.get_client().lrange(self.make_key(key), start, end)
        if not values:
            return []
        value_serializer = self._serializer(serializer)
        return [value_serializer.deserialize(v, str) for v in values]

    # =========================================================================
    # Keyspace Enumeration
    # =========================================================================

    def iter_scan_pages(self, pattern: str = "*", count: int = DEFAULT_SCAN_COUNT) -> KeyScanner:
        """Get a page iterator over keys matching ``pattern``.

        Each page is one SCAN round trip, made lazily while iterating. Failures
        follow the same policy as every other operation.
        """
        return KeyScanner(self.get_client(), self._key_serializer, pattern, count)

    @wrap_exception
    def scan(self, pattern: str = "*", count: int = DEFAULT_SCAN_COUNT) -> set[str]:
        """Collect every key matching ``pattern``.

        Keys are gathered page by page with SCAN, ``count`` being the page size
        hint. Keys created or deleted during the walk may be missed, and
        termination relies on the store eventually reporting the end of the walk.
        """
        return self.iter_scan_pages(pattern, count).collect()

    # =========================================================================
    # Scripts
    # =========================================================================

    @wrap_exception
    def eval(
        self,
        script: str,
        keys: Sequence[KeyT] = (),
        args: Sequence[Any] = (),
        *,
        serializer: BaseSerializer | None = None,
    ) -> Any:
        """Run a Lua script and return its raw result.

        Keys go through the key serializer and args through the value serializer
        before dispatch, so scripts see them exactly as stored.
        """
        value_serializer = self._serializer(serializer)
        nkeys = [self.make_key(k) for k in keys]
        nargs = [value_serializer.serialize(a) for a in args]
        return self.get_client().eval(script, len(nkeys), *nkeys, *nargs)

    # =========================================================================
    # Pub/Sub
    # =========================================================================

    @wrap_exception
    def publish(self, channel: str, message: str) -> int:
        """Publish a text message, returning how many subscribers received it."""
        return self._pubsub.publish(channel, message)

    def subscribe(self, listener: MessageListener | Callable[[str, str], Any], *channels: str) -> Subscription:
        """Register ``listener`` for ``channels`` on a new dedicated connection.

        Messages are delivered on a background thread owned by the subscription.
        """
        if not channels:
            msg = "subscribe() requires at least one channel"
            raise ValueError(msg)
        return self._subscribe(listener, *channels)

    @wrap_exception
    def _subscribe(self, listener: MessageListener | Callable[[str, str], Any], *channels: str) -> Subscription:
        return self._pubsub.subscribe(listener, *channels)


# =============================================================================
# RedisClient - concrete implementation for redis-py
# =============================================================================


class RedisClient(KeyValueClient):
    """Client using redis-py."""

    _connection_manager_class = RedisConnectionManager


# =============================================================================
# ValkeyClient - concrete implementation for valkey-py
# =============================================================================


class ValkeyClient(KeyValueClient):
    """Client using valkey-py."""

    _connection_manager_class = ValkeyConnectionManager


__all__ = [
    "STATUS_OK",
    "KeyValueClient",
    "RedisClient",
    "ValkeyClient",
]
