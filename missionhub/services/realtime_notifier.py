"""Real-time fan-out of domain events to connected users."""
import asyncio
import logging
from typing import AsyncIterator, Optional

from missionhub.core.constants import RealtimeMessageType
from missionhub.events.bus import EventBus
from missionhub.events.types import (
    BadgeEarned,
    DomainEvent,
    EventType,
    MissionCompleted,
    MissionCreated,
    MissionEvent,
    MissionStatusChanged,
    MissionUpdated,
    TransactionsLinked,
)
from missionhub.interfaces.realtime import IConnectionRegistry
from missionhub.schemas.realtime import RealtimeMessage

logger = logging.getLogger(__name__)

_CLOSED = object()


class RealtimeChannel:
    """Bounded mailbox for one connected user."""

    def __init__(self, user_id: str, max_pending: int = 256):
        self.user_id = user_id
        self._queue: asyncio.Queue = asyncio.Queue()
        self._max_pending = max_pending
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def push(self, message: RealtimeMessage) -> bool:
        if self._closed:
            return False
        if self._queue.qsize() >= self._max_pending:
            self.dropped += 1
            logger.warning(f"Channel for user {self.user_id} is full, dropping {message.type}")
            return False
        self._queue.put_nowait(message)
        return True

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def get(self):
        return await self._queue.get()


class InMemoryConnectionRegistry(IConnectionRegistry):
    """Single-process registry; every mutation happens under one lock."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._channels: dict[str, RealtimeChannel] = {}
        self._households: dict[str, set[str]] = {}

    async def register(
        self, user_id: str, channel: RealtimeChannel, household_id: Optional[str] = None
    ) -> Optional[RealtimeChannel]:
        async with self._lock:
            previous = self._channels.get(user_id)
            self._channels[user_id] = channel
            self._discard_from_households(user_id)
            if household_id:
                self._households.setdefault(household_id, set()).add(user_id)
            return previous

    async def unregister(
        self, user_id: str, channel: Optional[RealtimeChannel] = None
    ) -> Optional[RealtimeChannel]:
        async with self._lock:
            current = self._channels.get(user_id)
            if current is None or (channel is not None and current is not channel):
                return None
            del self._channels[user_id]
            self._discard_from_households(user_id)
            return current

    def _discard_from_households(self, user_id: str) -> None:
        for household_id in list(self._households):
            members = self._households[household_id]
            members.discard(user_id)
            if not members:
                del self._households[household_id]

    async def get_channel(self, user_id: str) -> Optional[RealtimeChannel]:
        async with self._lock:
            return self._channels.get(user_id)

    async def household_members(self, household_id: str) -> set[str]:
        async with self._lock:
            return set(self._households.get(household_id, ()))

    async def connected_count(self) -> int:
        async with self._lock:
            return len(self._channels)


class RealtimeNotifier:
    """
    Pushes domain events to the actor and their household.

    Each subscriber gets a stream of queued messages interleaved with
    heartbeats every ``heartbeat_seconds``. Delivery is best effort; a user
    with no open stream simply misses the message.
    """

    def __init__(
        self,
        registry: IConnectionRegistry,
        heartbeat_seconds: float = 30.0,
        max_pending: int = 256,
    ):
        self._registry = registry
        self._heartbeat_seconds = heartbeat_seconds
        self._max_pending = max_pending

    @property
    def heartbeat_seconds(self) -> float:
        return self._heartbeat_seconds

    def register(self, bus: EventBus) -> None:
        for event_type in EventType:
            bus.subscribe(event_type, self.handle_event)

    async def subscribe(self, user_id: str, household_id: Optional[str] = None) -> AsyncIterator[RealtimeMessage]:
        """Register a connection for ``user_id`` and return its message stream."""
        channel = RealtimeChannel(user_id, self._max_pending)
        previous = await self._registry.register(user_id, channel, household_id)
        if previous is not None:
            logger.info(f"Replacing existing realtime connection for user {user_id}")
            previous.close()
        logger.info(f"User {user_id} subscribed to realtime events (household={household_id})")
        return self._stream(channel)

    async def _stream(self, channel: RealtimeChannel) -> AsyncIterator[RealtimeMessage]:
        loop = asyncio.get_running_loop()
        next_heartbeat = loop.time() + self._heartbeat_seconds
        try:
            while True:
                remaining = next_heartbeat - loop.time()
                if remaining <= 0:
                    next_heartbeat = loop.time() + self._heartbeat_seconds
                    yield RealtimeMessage.heartbeat()
                    continue
                try:
                    item = await asyncio.wait_for(channel.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    continue
                if item is _CLOSED:
                    return
                yield item
        finally:
            await self.unsubscribe(channel.user_id, channel)

    async def unsubscribe(self, user_id: str, channel: Optional[RealtimeChannel] = None) -> None:
        removed = await self._registry.unregister(user_id, channel)
        if removed is not None:
            removed.close()
            logger.info(f"User {user_id} unsubscribed from realtime events")

    async def send_to_user(self, user_id: str, message: RealtimeMessage) -> bool:
        channel = await self._registry.get_channel(user_id)
        if channel is None:
            return False
        return channel.push(message)

    async def send_to_household(
        self,
        household_id: str,
        message: RealtimeMessage,
        exclude_user_id: Optional[str] = None,
    ) -> int:
        sent = 0
        for member_id in await self._registry.household_members(household_id):
            if member_id == exclude_user_id:
                continue
            if await self.send_to_user(member_id, message):
                sent += 1
        return sent

    async def connected_users_count(self) -> int:
        return await self._registry.connected_count()

    async def handle_event(self, event: DomainEvent) -> None:
        if isinstance(event, BadgeEarned):
            await self.send_to_user(
                event.actor_id,
                RealtimeMessage(
                    type=RealtimeMessageType.BADGE_EARNED,
                    data={
                        "badge": event.badge.model_dump(mode="json"),
                        "user_badge": event.user_badge.model_dump(mode="json"),
                    },
                ),
            )
            return

        if not isinstance(event, MissionEvent):
            logger.debug(f"No realtime mapping for {event.event_type}")
            return

        data = {"mission": event.mission.model_dump(mode="json")}
        household_type: Optional[RealtimeMessageType] = None

        if isinstance(event, MissionCreated):
            actor_type = RealtimeMessageType.MISSION_CREATED
            household_type = RealtimeMessageType.FAMILY_MISSION_CREATED
            data["created_by"] = event.actor_id
        elif isinstance(event, MissionUpdated):
            actor_type = RealtimeMessageType.MISSION_UPDATED
        elif isinstance(event, MissionStatusChanged):
            actor_type = RealtimeMessageType.MISSION_STATUS_CHANGED
            household_type = RealtimeMessageType.FAMILY_DATA_UPDATED
            data["old_status"] = str(event.old_status)
            data["new_status"] = str(event.new_status)
        elif isinstance(event, MissionCompleted):
            actor_type = RealtimeMessageType.MISSION_COMPLETED
            household_type = RealtimeMessageType.PARTNER_MISSION_COMPLETED
            data["completed_by"] = event.actor_id
        elif isinstance(event, TransactionsLinked):
            actor_type = RealtimeMessageType.TRANSACTIONS_LINKED
            data["transaction_ids"] = list(event.transaction_ids)
        else:
            logger.debug(f"No realtime mapping for {event.event_type}")
            return

        await self.send_to_user(event.actor_id, RealtimeMessage(type=actor_type, data=data))
        if household_type and event.household_id:
            await self.send_to_household(
                event.household_id,
                RealtimeMessage(type=household_type, data=data),
                exclude_user_id=event.actor_id,
            )
