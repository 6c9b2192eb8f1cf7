"""Redis publisher service for table events.

When several backend instances serve the same tables, every accepted action
is announced on a Redis channel so the other instances drop their cached copy
and reload the table from MongoDB on next access.
"""

import asyncio
import contextlib
import json
import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from bearos.config import settings

logger = logging.getLogger(__name__)

TABLE_CHANNEL_PREFIX = "table_events:"

# Signature: async def handler(event_type, table_id, data)
EventHandler = Callable[[str, str, dict[str, Any]], Coroutine[Any, Any, None]]


class PublisherService:
    """Publishes and receives table events through Redis pub/sub."""

    def __init__(self) -> None:
        """Initialize publisher service."""
        self.redis_client: redis.Redis | None = None
        self.pubsub: redis.client.PubSub | None = None
        self._handlers: dict[str, list[EventHandler]] = {}
        self._subscriber_task: asyncio.Task[None] | None = None
        self._running = False
        self.instance_id = f"instance_{int(time.time() * 1000)}"
        self.reconnect_delay = 5.0

    async def connect(self) -> None:
        """Connect to Redis, leaving the client unset if it is unreachable."""
        try:
            self.redis_client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            await self.redis_client.ping()
            logger.info("Connected to Redis (instance: %s)", self.instance_id)
        except (RedisError, TimeoutError, OSError):
            logger.warning("Redis not available, running without pub/sub")
            self.redis_client = None

    async def publish(self, channel: str, message: dict[str, Any]) -> bool:
        """Publish a message to a Redis channel.

        Args:
            channel: Channel name
            message: Message payload

        Returns:
            True if successful

        """
        if not self.redis_client:
            return False

        try:
            # Tag with our instance ID so we can ignore our own echo
            payload = json.dumps({**message, "_instance_id": self.instance_id})
            await self.redis_client.publish(channel, payload)
            logger.debug("Published message to channel %s", channel)
        except (RedisError, TypeError):
            logger.exception("Error publishing message")
            return False
        else:
            return True

    async def publish_table_event(self, event_type: str, table_id: str, data: dict[str, Any]) -> bool:
        """Announce a change on a table.

        Args:
            event_type: Name of the accepted action, e.g. "PlayCard"
            table_id: Table identifier
            data: Event data

        Returns:
            True if successful
        """
        message = {
            "event": event_type,
            "table_id": table_id,
            "data": data,
            "timestamp": time.time(),
        }
        return await self.publish(f"{TABLE_CHANNEL_PREFIX}{table_id}", message)

    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register a handler for a channel pattern such as ``table_events:*``."""
        self._handlers.setdefault(pattern, []).append(handler)
        logger.info("Registered handler for pattern: %s", pattern)

    async def start_subscriber(self) -> None:
        """Start the background subscriber task."""
        if not self.redis_client or self._running:
            return

        self._running = True
        self.pubsub = self.redis_client.pubsub()
        for pattern in self._handlers:
            await self.pubsub.psubscribe(pattern)
            logger.info("Subscribed to pattern: %s", pattern)

        self._subscriber_task = asyncio.create_task(self._subscriber_loop())
        logger.info("Redis subscriber started")

    async def _subscriber_loop(self) -> None:
        if not self.pubsub:
            return

        while self._running:
            try:
                message = await self.pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message and message["type"] == "pmessage":
                    await self.handle_message(message)
            except asyncio.CancelledError:
                break
            except (RedisError, ConnectionError):
                logger.warning("Redis connection lost, reconnecting in %ss", self.reconnect_delay)
                await asyncio.sleep(self.reconnect_delay)
                try:
                    await self._resubscribe()
                except Exception:
                    logger.exception("Failed to reconnect to Redis")
            except Exception:
                logger.exception("Error in subscriber loop")
                await asyncio.sleep(1)

    async def _resubscribe(self) -> None:
        """Open a fresh connection and subscribe every registered pattern again."""
        await self.connect()
        if not self.redis_client:
            return

        self.pubsub = self.redis_client.pubsub()
        for pattern in self._handlers:
            await self.pubsub.psubscribe(pattern)
        logger.info("Resubscribed to %d pattern(s)", len(self._handlers))

    async def handle_message(self, message: dict[str, Any]) -> None:
        """Dispatch an incoming pub/sub message to the registered handlers.

        Messages published by this instance are skipped.
        """
        pattern = message.get("pattern") or ""
        if isinstance(pattern, bytes):
            pattern = pattern.decode()

        try:
            data = json.loads(message.get("data") or "{}")
        except json.JSONDecodeError:
            logger.warning("Invalid JSON in pub/sub message")
            return

        if data.get("_instance_id") == self.instance_id:
            return

        event_type = data.get("event", "unknown")
        table_id = data.get("table_id", "")
        logger.debug(
            "Received event %s for table %s from instance %s",
            event_type,
            table_id,
            data.get("_instance_id", "unknown"),
        )
        for handler in self._handlers.get(pattern, []):
            try:
                await handler(event_type, table_id, data.get("data", {}))
            except Exception:
                logger.exception("Error in event handler for table %s", table_id)

    async def stop_subscriber(self) -> None:
        """Stop the background subscriber task."""
        self._running = False

        if self._subscriber_task:
            self._subscriber_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._subscriber_task
            self._subscriber_task = None

        if self.pubsub:
            await self.pubsub.close()
            self.pubsub = None

    async def close(self) -> None:
        """Close the Redis connection."""
        await self.stop_subscriber()

        if self.redis_client:
            await self.redis_client.close()
            self.redis_client = None
            logger.info("Redis connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        return self.redis_client is not None
