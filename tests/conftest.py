"""Pytest configuration for layercache-redis tests."""

import django
from django.conf import settings

from tests.fixtures import client, fake_server, redis_container

if not settings.configured:
    settings.configure(
        INSTALLED_APPS=[],
        LAYERCACHE_REDIS={
            "HOST": "localhost",
            "PORT": 6379,
            "DATABASE": 0,
        },
    )
    django.setup()

# Re-export fixtures so pytest can discover them
__all__ = [
    "client",
    "fake_server",
    "redis_container",
]
