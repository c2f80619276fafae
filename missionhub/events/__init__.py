from missionhub.events.bus import EventBus, EventHandler
from missionhub.events.types import (
    BadgeEarned,
    DomainEvent,
    EventType,
    MissionCompleted,
    MissionCreated,
    MissionStatusChanged,
    MissionUpdated,
    TransactionsLinked,
)
