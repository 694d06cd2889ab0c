from typing import Any

from layercache_redis.exceptions import SerializationError


class BaseSerializer:
    """Base class for key and value serializers.

    Subclasses implement ``dumps`` and ``loads``; the public ``serialize`` and
    ``deserialize`` wrap them with the rules every serializer shares:

    - ``None`` serializes to empty bytes, and ``None`` or empty bytes (a store miss)
      deserialize to ``None``.
    - Any failure inside ``dumps``/``loads`` surfaces as ``SerializationError``.
    - ``deserialize`` checks the decoded value against ``result_type`` when given.

    Serializers hold only configuration set in ``__init__``, so a single instance
    can be shared by any number of clients and threads.

    Serializers accept ``**kwargs`` for configuration (e.g., ``protocol`` for
    pickle version); ``create_serializer()`` in ``layercache_redis.compat``
    passes them through.
    """

    def __init__(self, **kwargs: Any) -> None:
        pass

    def serialize(self, value: Any) -> bytes:
        if value is None:
            return b""
        try:
            return self.dumps(value)
        except SerializationError:
            raise
        except Exception as e:
            msg = f"Cannot serialize {type(value).__name__} with {type(self).__name__}: {e}"
            raise SerializationError(msg) from e

    def deserialize(self, data: bytes | None, result_type: type | None = None) -> Any:
        if not data:
            return None
        try:
            value = self.loads(data)
        except SerializationError:
            raise
        except Exception as e:
            msg = f"Cannot deserialize data with {type(self).__name__}: {e}"
            raise SerializationError(msg) from e
        if result_type is not None and not isinstance(value, result_type):
            msg = f"Expected {result_type.__name__}, got {type(value).__name__}"
            raise SerializationError(msg)
        return value

    def dumps(self, obj: Any) -> bytes:
        raise NotImplementedError

    def loads(self, data: bytes) -> Any:
        raise NotImplementedError
