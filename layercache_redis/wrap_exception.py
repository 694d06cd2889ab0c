from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from layercache_redis.exceptions import ClientOperationError, SerializationError


def wrap_exception(method: Callable) -> Callable:
    """Decorator that applies the client failure policy to a store operation.

    ``SerializationError`` passes through untouched, as does a
    ``ClientOperationError`` raised by a nested operation. Any other exception is
    re-raised as :class:`ClientOperationError`, chained to the original.

    Usage:
        @wrap_exception
        def get(self, key): ...
    """

    @functools.wraps(method)
    def _decorator(*args: Any, **kwargs: Any) -> Any:
        try:
            return method(*args, **kwargs)
        except (SerializationError, ClientOperationError):
            raise
        except Exception as e:
            raise ClientOperationError(str(e), e) from e

    return _decorator
