import pickle
from typing import Any

from django.core.exceptions import ImproperlyConfigured

from layercache_redis.serializers.base import BaseSerializer


class PickleSerializer(BaseSerializer):
    """Pickle-based serializer for arbitrary Python objects.

    This is the default value serializer. Any picklable object round-trips,
    at the cost of the payload only being readable from Python.

    Attributes:
        protocol: Pickle protocol version. Defaults to ``pickle.DEFAULT_PROTOCOL``.
    """

    def __init__(self, *, protocol: int | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if protocol is None:
            protocol = pickle.DEFAULT_PROTOCOL
        if protocol > pickle.HIGHEST_PROTOCOL:
            msg = f"protocol can't be higher than pickle.HIGHEST_PROTOCOL: {pickle.HIGHEST_PROTOCOL}"
            raise ImproperlyConfigured(msg)
        self.protocol = protocol

    def dumps(self, obj: Any) -> bytes:
        return pickle.dumps(obj, self.protocol)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)  # noqa: S301
