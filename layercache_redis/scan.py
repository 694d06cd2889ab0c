"""Cursor-driven enumeration of the keyspace.

``SCAN`` walks the keyspace a page at a time. The store hands back a new cursor
with every page and returns cursor ``0`` once the walk is complete. Its
guarantees are deliberately weak:

- a key present for the whole walk is returned at least once, but may be
  returned more than once;
- a key added or removed during the walk may or may not be returned.

Collected results are therefore sets, and callers that need an exact snapshot
must not mutate the matched keys while scanning.

Termination is trusted to the store: no page limit is imposed here, and a store
that never reports cursor ``0`` keeps the scan going.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from layercache_redis.exceptions import ClientOperationError, SerializationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from layercache_redis.serializers.base import BaseSerializer

logger = logging.getLogger(__name__)

INITIAL_CURSOR = 0

# COUNT hint sent with every SCAN round trip
DEFAULT_SCAN_COUNT = 10000


class KeyScanner:
    """Iterator over the pages of a ``SCAN ... MATCH pattern`` walk.

    Each iteration performs one round trip and yields the deserialized keys of
    that page (possibly empty). A failed round trip raises
    ``ClientOperationError``; an undecodable key raises ``SerializationError``. Iteration stops after the page that carries the
    final cursor. A scanner walks once; create a new one to restart from
    :data:`INITIAL_CURSOR`.

    Example:
        Streaming pages instead of materialising everything::

            scanner = KeyScanner(redis_client, StringSerializer(), "user:*")
            for page in scanner:
                process(page)
            assert scanner.finished
    """

    def __init__(
        self,
        client: Any,
        key_serializer: BaseSerializer,
        pattern: str = "*",
        count: int = DEFAULT_SCAN_COUNT,
    ) -> None:
        self._client = client
        self._key_serializer = key_serializer
        self.pattern = pattern
        self.count = count
        self.cursor = INITIAL_CURSOR
        self.pages = 0
        self._finished = False

    @property
    def finished(self) -> bool:
        """True once the store has reported the end of the walk."""
        return self._finished

    def __iter__(self) -> Iterator[list[str]]:
        return self

    def __next__(self) -> list[str]:
        if self._finished:
            raise StopIteration
        next_cursor, raw_keys = self._scan_page()
        keys = [self._key_serializer.deserialize(key, str) for key in raw_keys]
        self.cursor = int(next_cursor)
        self.pages += 1
        self._finished = self.cursor == INITIAL_CURSOR
        logger.debug(
            "SCAN %r page %d returned %d keys (next cursor %d)",
            self.pattern,
            self.pages,
            len(keys),
            self.cursor,
        )
        return keys

    def _scan_page(self) -> tuple[Any, list[Any]]:
        try:
            return self._client.scan(cursor=self.cursor, match=self.pattern, count=self.count)
        except SerializationError:
            raise
        except Exception as e:
            raise ClientOperationError(str(e), e) from e

    def collect(self) -> set[str]:
        """Walk the remaining pages and return every key seen, deduplicated."""
        keys: set[str] = set()
        for page in self:
            keys.update(page)
        return keys
