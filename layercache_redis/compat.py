"""Utilities for serializer instantiation."""

from __future__ import annotations

from typing import Any

from django.utils.module_loading import import_string

DEFAULT_KEY_SERIALIZER = "layercache_redis.serializers.string.StringSerializer"
DEFAULT_VALUE_SERIALIZER = "layercache_redis.serializers.pickle.PickleSerializer"


def is_serializer_instance(obj: Any) -> bool:
    """Check if an object is a serializer instance (has serialize/deserialize methods)."""
    if isinstance(obj, type):
        return False
    return (
        hasattr(obj, "serialize")
        and hasattr(obj, "deserialize")
        and callable(obj.serialize)
        and callable(obj.deserialize)
    )


def create_serializer(config: str | type | Any | None, default: str = DEFAULT_VALUE_SERIALIZER, **kwargs: Any) -> Any:
    """Create a serializer instance from config.

    Args:
        config: A dotted path string, a class, an instance, or None for ``default``
        default: Dotted path used when ``config`` is None
        **kwargs: Keyword arguments to pass to serializer constructor
    """
    if config is None:
        config = default

    # Already an instance
    if is_serializer_instance(config):
        return config

    # A class (not a string path)
    if isinstance(config, type):
        return config(**kwargs)

    # Dotted path string
    cls = import_string(config)
    return cls(**kwargs)
