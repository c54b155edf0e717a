"""Cross-context broadcast for stores sharing one logical name.

Stores publish every committed state under their storage name and apply what
other contexts publish. Delivery is best-effort and in send order; there is
no versioning, so the last message received wins.

- ``InProcessBus``: stores living in the same process (one per "tab")
- ``RedisBus``: stores in different processes, over Redis pub/sub
- ``NullBus``: no other contexts
"""

import asyncio
import json
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger(__name__)

Handler = Callable[[dict[str, Any]], None]
Unsubscribe = Callable[[], None]


class MessageBus(Protocol):
    def publish(self, topic: str, payload: dict[str, Any]) -> None: ...

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe: ...


def _dispatch(handlers: list[Handler], topic: str, payload: dict[str, Any]) -> None:
    for handler in list(handlers):
        try:
            handler(payload)
        except Exception as exc:
            logger.error(
                "broadcast_handler_failed",
                topic=topic,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )


class NullBus:
    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        return None

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe:
        return lambda: None


class InProcessBus:
    """Synchronous fan-out to every handler subscribed to a topic.

    Senders receive their own messages too; stores drop them by origin.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        _dispatch(self._handlers.get(topic, []), topic, payload)

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe:
        self._handlers[topic].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe


class RedisBus:
    """Pub/sub over Redis channels ``broadcast:{topic}``.

    Usage::

        bus = RedisBus(get_redis())
        await bus.start()
        store = create_onboarding_store(actions, bus=bus)
        ...
        await bus.close()
    """

    CHANNEL_PREFIX = "broadcast:"
    POLL_TIMEOUT_SECONDS = 1.0

    def __init__(self, redis_client: redis.Redis) -> None:
        self.redis = redis_client
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._pubsub = None
        self._listener: asyncio.Task | None = None
        self._publishing: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Subscribe to every broadcast channel and start the listener task."""
        if self._listener is not None:
            return
        self._pubsub = self.redis.pubsub()
        await self._pubsub.psubscribe(f"{self.CHANNEL_PREFIX}*")
        self._listener = asyncio.create_task(self._listen())

    async def _listen(self) -> None:
        while True:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self.POLL_TIMEOUT_SECONDS,
                )
            except RedisError as exc:
                logger.error("broadcast_listen_failed", error=str(exc), error_type=type(exc).__name__)
                await asyncio.sleep(self.POLL_TIMEOUT_SECONDS)
                continue
            if not message or message["type"] != "pmessage":
                continue

            topic = message["channel"].removeprefix(self.CHANNEL_PREFIX)
            try:
                payload = json.loads(message["data"])
            except (json.JSONDecodeError, TypeError):
                logger.warning("broadcast_message_unreadable", topic=topic)
                continue

            _dispatch(self._handlers.get(topic, []), topic, payload)

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(self._publish(topic, payload))
        self._publishing.add(task)
        task.add_done_callback(self._publishing.discard)

    async def _publish(self, topic: str, payload: dict[str, Any]) -> None:
        try:
            await self.redis.publish(f"{self.CHANNEL_PREFIX}{topic}", json.dumps(payload))
        except Exception as exc:
            logger.error("broadcast_publish_failed", topic=topic, error=str(exc), error_type=type(exc).__name__)

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe:
        self._handlers[topic].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def close(self) -> None:
        if self._publishing:
            await asyncio.gather(*self._publishing, return_exceptions=True)

        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None

        if self._pubsub is not None:
            await self._pubsub.punsubscribe()
            await self._pubsub.aclose()
            self._pubsub = None
