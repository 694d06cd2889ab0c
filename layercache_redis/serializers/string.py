from typing import Any

from layercache_redis.exceptions import SerializationError
from layercache_redis.serializers.base import BaseSerializer


class StringSerializer(BaseSerializer):
    """Identity serializer between ``str`` and its encoded bytes.

    This is the default key serializer. Only ``str`` values are accepted; a
    ``None`` key is rejected rather than written as an empty key.

    Attributes:
        encoding: Text encoding, ``utf-8`` unless given.
    """

    def __init__(self, *, encoding: str = "utf-8", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.encoding = encoding

    def serialize(self, value: Any) -> bytes:
        if not isinstance(value, str):
            msg = f"StringSerializer only accepts str, got {type(value).__name__}"
            raise SerializationError(msg)
        return super().serialize(value)

    def deserialize(self, data: bytes | None, result_type: type | None = None) -> Any:
        # An empty stored string is still a string, not a miss
        if data is not None and len(data) == 0:
            return ""
        return super().deserialize(data, result_type)

    def dumps(self, obj: str) -> bytes:
        return obj.encode(self.encoding)

    def loads(self, data: bytes) -> str:
        if isinstance(data, str):
            return data
        return data.decode(self.encoding)
