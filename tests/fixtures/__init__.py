"""Test fixtures for layercache-redis."""

from tests.fixtures.client import client, fake_server, make_fake_client, make_fake_client_class
from tests.fixtures.containers import ContainerInfo, redis_container

__all__ = [
    "ContainerInfo",
    "client",
    "fake_server",
    "make_fake_client",
    "make_fake_client_class",
    "redis_container",
]
