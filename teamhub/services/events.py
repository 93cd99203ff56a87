from __future__ import annotations

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, DefaultDict, List, Set

from teamhub.core.logging import logger

Listener = Callable[[Any], None]


class EventHub:
    """In-process fan-out of collection snapshots and identity changes.

    One hub is created per application and shared by every request's store
    and identity provider.
    """

    def __init__(self) -> None:
        self._queues: DefaultDict[str, Set[asyncio.Queue]] = defaultdict(set)
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)

    def has_subscribers(self, topic: str) -> bool:
        return bool(self._queues.get(topic)) or bool(self._listeners.get(topic))

    @asynccontextmanager
    async def subscription(self, topic: str, *, depth: int = 1) -> AsyncIterator[asyncio.Queue]:
        """Queue of payloads for ``topic``, holding at most ``depth`` unread items.

        When a reader falls behind, the oldest unread payload is dropped.
        """

        queue: asyncio.Queue = asyncio.Queue(maxsize=depth)
        self._queues[topic].add(queue)
        try:
            yield queue
        finally:
            self._queues[topic].discard(queue)

    def add_listener(self, topic: str, callback: Listener) -> Callable[[], None]:
        self._listeners[topic].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[topic]:
                self._listeners[topic].remove(callback)

        return unsubscribe

    def publish(self, topic: str, payload: Any) -> None:
        for queue in list(self._queues.get(topic, ())):
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(payload)
        for callback in list(self._listeners.get(topic, ())):
            try:
                callback(payload)
            except Exception:
                logger.exception("events.listener_failed", topic=topic)
