# Clients (do actual store operations)
from layercache_redis.client.default import (
    STATUS_OK,
    KeyValueClient,
    RedisClient,
    ValkeyClient,
)

__all__ = [
    "STATUS_OK",
    "KeyValueClient",
    "RedisClient",
    "ValkeyClient",
]
