VERSION = (1, 0, 0)
__version__ = ".".join(map(str, VERSION))


def get_redis_client(setting_name="LAYERCACHE_REDIS", client_class=None):
    """Helper used for building a client from Django settings.

    ``client_class`` may be a class or a dotted path; it defaults to
    :class:`~layercache_redis.client.RedisClient`.
    """
    from django.utils.module_loading import import_string

    from layercache_redis.client import RedisClient
    from layercache_redis.config import RedisProperties

    if isinstance(client_class, str):
        client_class = import_string(client_class)
    client_class = client_class or RedisClient
    return client_class(RedisProperties.from_settings(setting_name))
