from typing import Any

import msgpack

from layercache_redis.serializers.base import BaseSerializer


class MessagePackSerializer(BaseSerializer):
    """MessagePack-based serializer for efficient binary serialization.

    MessagePack is a binary format that is more compact and faster than JSON,
    while supporting similar data types.

    Note:
        MessagePack has different type support than pickle or JSON:
        - Supports: bool, int, float, str, bytes, list, dict
        - Does NOT support: datetime, Decimal, custom objects (without extension)
        - Tuples decode as lists
    """

    def dumps(self, obj: Any) -> bytes:
        return msgpack.dumps(obj)

    def loads(self, data: bytes) -> Any:
        return msgpack.loads(data, raw=False)
