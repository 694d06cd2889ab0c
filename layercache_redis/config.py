"""Connection settings for layercache-redis.

Settings can be built directly, parsed from a ``redis://`` URL, or read from a
Django setting shaped like an entry of ``CACHES``::

    LAYERCACHE_REDIS = {
        "HOST": "localhost",
        "PORT": 6379,
        "DATABASE": 1,
        "TIMEOUT": 5,
        "PASSWORD": None,
        "OPTIONS": {
            "value_serializer": "layercache_redis.serializers.json.JSONSerializer",
        },
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any
from urllib.parse import parse_qs, unquote, urlparse

from django.core.exceptions import ImproperlyConfigured

DEFAULT_SETTING_NAME = "LAYERCACHE_REDIS"

_URL_SCHEMES = frozenset({"redis", "rediss", "valkey", "valkeys"})

# Schemes that connect over TLS
_TLS_SCHEMES = frozenset({"rediss", "valkeys"})

# Options read from the OPTIONS dict of the Django setting
_KNOWN_OPTIONS = frozenset({"key_serializer", "value_serializer"})


@dataclass
class RedisProperties:
    """Where and how to connect to the store.

    Attributes:
        host: Server host name or address.
        port: Server port.
        database: Numeric database index selected on connect.
        timeout: Seconds before a connect or command round trip is abandoned.
        password: Optional authentication secret.
        ssl: Connect over TLS.
        key_serializer: Key serializer instance, class or dotted path.
        value_serializer: Value serializer instance, class or dotted path.
    """

    host: str = "127.0.0.1"
    port: int = 6379
    database: int = 0
    timeout: float = 10
    password: str | None = field(default=None, repr=False)
    ssl: bool = False
    key_serializer: Any = None
    value_serializer: Any = None

    def __post_init__(self) -> None:
        try:
            self.port = int(self.port)
            self.database = int(self.database)
            self.timeout = float(self.timeout)
        except (TypeError, ValueError) as e:
            msg = f"Invalid redis connection settings: {e}"
            raise ImproperlyConfigured(msg) from e
        if not self.host:
            msg = "Redis host must not be empty"
            raise ImproperlyConfigured(msg)
        if not 0 < self.port < 65536:
            msg = f"Redis port out of range: {self.port}"
            raise ImproperlyConfigured(msg)
        if self.database < 0:
            msg = f"Redis database index must not be negative: {self.database}"
            raise ImproperlyConfigured(msg)
        if self.timeout <= 0:
            msg = f"Redis timeout must be positive: {self.timeout}"
            raise ImproperlyConfigured(msg)
        if self.password == "":
            self.password = None
        self.ssl = bool(self.ssl)

    def __repr__(self) -> str:
        password = "'******'" if self.password else "None"
        return (
            f"RedisProperties(host={self.host!r}, port={self.port}, database={self.database}, "
            f"timeout={self.timeout}, password={password}, ssl={self.ssl})"
        )

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> RedisProperties:
        """Parse ``redis://[:password@]host[:port][/database][?timeout=seconds]``.

        ``rediss://`` and ``valkeys://`` URLs connect over TLS.
        """
        parsed = urlparse(url)
        if parsed.scheme not in _URL_SCHEMES:
            msg = f"Unsupported redis URL scheme: {parsed.scheme!r}"
            raise ImproperlyConfigured(msg)

        kwargs: dict[str, Any] = {"ssl": parsed.scheme in _TLS_SCHEMES}
        if parsed.hostname:
            kwargs["host"] = parsed.hostname
        try:
            port = parsed.port
        except ValueError as e:
            msg = f"Invalid port in redis URL: {url!r}"
            raise ImproperlyConfigured(msg) from e
        if port is not None:
            kwargs["port"] = port
        if parsed.password:
            kwargs["password"] = unquote(parsed.password)

        path = parsed.path.lstrip("/")
        query = parse_qs(parsed.query)
        if path:
            kwargs["database"] = path
        elif "db" in query:
            kwargs["database"] = query["db"][0]
        if "timeout" in query:
            kwargs["timeout"] = query["timeout"][0]

        kwargs.update(overrides)
        return cls(**kwargs)

    @classmethod
    def from_settings(cls, setting_name: str = DEFAULT_SETTING_NAME) -> RedisProperties:
        """Build properties from a Django setting.

        The setting may be a dict (``HOST``, ``PORT``, ``DATABASE``, ``TIMEOUT``,
        ``PASSWORD``, ``SSL``, ``OPTIONS``) or a plain URL string.
        """
        from django.conf import settings

        config = getattr(settings, setting_name, None)
        if config is None:
            msg = f"The {setting_name} setting is missing"
            raise ImproperlyConfigured(msg)
        if isinstance(config, str):
            return cls.from_url(config)
        if not isinstance(config, dict):
            msg = f"The {setting_name} setting must be a dict or a URL string"
            raise ImproperlyConfigured(msg)

        config = dict(config)
        options = dict(config.pop("OPTIONS", None) or {})
        unknown = set(options) - _KNOWN_OPTIONS
        if unknown:
            msg = f"Unknown {setting_name} OPTIONS: {', '.join(sorted(unknown))}"
            raise ImproperlyConfigured(msg)

        names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in config.items():
            name = key.lower()
            if name not in names or name in _KNOWN_OPTIONS:
                msg = f"Unknown {setting_name} key: {key}"
                raise ImproperlyConfigured(msg)
            kwargs[name] = value
        kwargs.update(options)
        return cls(**kwargs)
