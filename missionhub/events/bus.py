"""In-process publish/subscribe bus for domain events."""
import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Set, Union

from missionhub.events.types import DomainEvent, EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Union[Awaitable[None], None]]


class EventBus:
    """
    Fan domain events out to subscribers without blocking the publisher.

    Every delivery runs in its own task so a slow or failing subscriber never
    affects the caller or the other subscribers. Must be used from a running
    event loop.
    """

    def __init__(self):
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers[event_type]
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, ()))

    def publish(self, event: DomainEvent) -> int:
        """
        Schedule delivery of ``event`` to every subscriber of its type.

        Returns:
            int: Number of deliveries scheduled
        """
        if self._closed:
            logger.warning(f"Event bus closed, dropping {event.event_type}")
            return 0

        handlers = list(self._handlers.get(event.event_type, ()))
        if not handlers:
            logger.debug(f"No subscribers for {event.event_type}, event dropped")
            return 0

        for handler in handlers:
            task = asyncio.create_task(self._deliver(handler, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return len(handlers)

    def publish_all(self, events: list[DomainEvent]) -> int:
        return sum(self.publish(event) for event in events)

    async def _deliver(self, handler: EventHandler, event: DomainEvent) -> None:
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(
                f"Subscriber {getattr(handler, '__qualname__', handler)!r} failed on {event.event_type}"
            )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every in-flight delivery, including ones scheduled while waiting."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Stop accepting events and cancel outstanding deliveries."""
        self._closed = True
        tasks = list(self._pending)
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
        self._handlers.clear()
        logger.info("Event bus closed")
