"""Exceptions for layercache-redis.

Every store-facing operation fails with one of two kinds:

- :class:`SerializationError` when a key or value cannot be encoded or decoded.
  It is always propagated unmodified, since it points at caller data.
- :class:`ClientOperationError` for anything else that goes wrong while talking
  to the store (connection refused, timeout, authentication, ``ResponseError``).

Callers key retry logic off this split: retrying a ``ClientOperationError`` can
succeed, retrying a ``SerializationError`` never will.
"""

from __future__ import annotations


class SerializationError(Exception):
    """Raised when serialization or deserialization fails.

    This can occur when:
    - The value has a type the serializer cannot encode
    - The stored bytes are corrupted or were written by another serializer
    - The decoded value is not an instance of the requested result type
    """


class ClientOperationError(Exception):
    """Raised when a store interaction fails for a non-serialization reason.

    Attributes:
        message: The message of the original exception.
        cause: The original exception raised by the driver.

    Example:
        Retrying transient failures::

            from layercache_redis.exceptions import ClientOperationError

            try:
                value = client.get("user:1")
            except ClientOperationError as e:
                logger.warning("Store unavailable: %s", e.message)
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)
