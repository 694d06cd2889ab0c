import json
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder

from layercache_redis.serializers.base import BaseSerializer


class JSONSerializer(BaseSerializer):
    """JSON-based serializer using Django's DjangoJSONEncoder.

    Serializes values to JSON format, which is human-readable and interoperable
    with non-Python readers of the store, but limited to JSON-compatible types
    (strings, numbers, lists, dicts, bools).

    DjangoJSONEncoder adds encoding support for datetime, date, time, timedelta,
    Decimal and UUID. These decode back as strings.

    Attributes:
        encoder_class: The JSON encoder class to use. Defaults to DjangoJSONEncoder.
            Can be overridden by subclasses for custom encoding.
    """

    encoder_class = DjangoJSONEncoder

    def dumps(self, obj: Any) -> bytes:
        return json.dumps(obj, cls=self.encoder_class).encode()

    def loads(self, data: bytes) -> Any:
        return json.loads(data.decode())
