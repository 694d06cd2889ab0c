"""Publish/subscribe on named channels.

Channel traffic is always plain text: messages are published and delivered as
``str``, never passed through the configurable value serializer.

Each :meth:`PubSubManager.subscribe` call opens its own pub/sub connection with
its own worker thread, so a slow listener only delays its own subscription.
Nothing here unsubscribes or closes those connections; the returned
:class:`Subscription` exposes them for the enclosing application to close.
Repeated subscribe calls therefore grow the number of open connections.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from layercache_redis.connection import ConnectionManager

logger = logging.getLogger(__name__)


class MessageListener:
    """Base class for channel listeners.

    ``on_message`` runs on the subscription's worker thread, not on the thread
    that called ``subscribe``.
    """

    def on_message(self, channel: str, message: str) -> None:
        raise NotImplementedError


class CallbackListener(MessageListener):
    """Adapts a plain ``callback(channel, message)`` to a listener."""

    def __init__(self, callback: Callable[[str, str], Any]) -> None:
        self.callback = callback

    def on_message(self, channel: str, message: str) -> None:
        self.callback(channel, message)


@dataclass
class Subscription:
    """A listener registered on channels over a dedicated connection.

    Attributes:
        channels: The subscribed channel names.
        listener: The listener messages are dispatched to.
        pubsub: The driver's PubSub object owning the dedicated connection.
        thread: The driver's worker thread dispatching messages.
    """

    channels: tuple[str, ...]
    listener: MessageListener
    pubsub: Any = field(repr=False)
    thread: Any = field(default=None, repr=False)


class PubSubManager:
    """Publishes on the shared pub/sub connection, subscribes on new ones."""

    # Seconds the worker thread blocks waiting for the next message
    _poll_interval: float = 0.1

    def __init__(self, connections: ConnectionManager) -> None:
        self._connections = connections

    def publish(self, channel: str, message: str) -> int:
        """Publish ``message`` and return how many subscribers received it."""
        return int(self._connections.pubsub_client.publish(channel, message))

    def subscribe(self, listener: MessageListener | Callable[[str, str], Any], *channels: str) -> Subscription:
        """Register ``listener`` for ``channels`` on a new dedicated connection.

        SUBSCRIBE is issued for all channels with the listener installed as the
        handler, and the call blocks until the store has confirmed every channel
        (up to the connection timeout). A message published after this returns
        is therefore delivered. The worker thread only starts once all channels
        are confirmed.
        """
        if not channels:
            msg = "subscribe() requires at least one channel"
            raise ValueError(msg)
        if not isinstance(listener, MessageListener):
            listener = CallbackListener(listener)

        pubsub = self._connections.new_pubsub()
        logger.info("Subscribing to channels %s", list(channels))
        try:
            pubsub.subscribe(**dict.fromkeys(channels, self._make_handler(listener)))
            self._wait_for_confirmation(pubsub, channels)
        except Exception:
            pubsub.close()
            raise
        thread = pubsub.run_in_thread(sleep_time=self._poll_interval, daemon=True)
        return Subscription(channels=tuple(channels), listener=listener, pubsub=pubsub, thread=thread)

    def _wait_for_confirmation(self, pubsub: Any, channels: tuple[str, ...]) -> None:
        """Read replies until every channel's subscribe confirmation has arrived.

        Messages arriving on already confirmed channels meanwhile are dispatched
        to their handler by the driver.
        """
        pending = set(channels)
        deadline = time.monotonic() + self._connections.properties.timeout
        while pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                msg = f"Subscription to {sorted(pending)} not confirmed by the server"
                raise TimeoutError(msg)
            message = pubsub.get_message(timeout=remaining)
            if message and message["type"] == "subscribe":
                pending.discard(message["channel"])
        logger.debug("Subscription to %s confirmed", list(channels))

    def _make_handler(self, listener: MessageListener) -> Callable[[dict[str, Any]], None]:
        def handler(message: dict[str, Any]) -> None:
            channel = message["channel"]
            try:
                listener.on_message(channel, message["data"])
            except Exception:
                logger.exception("Listener %r failed handling a message on %s", listener, channel)

        return handler
