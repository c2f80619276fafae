"""Domain events exchanged over the in-process event bus."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import ClassVar

from missionhub.core.constants import MissionStatus
from missionhub.schemas.badge import Badge, UserBadge
from missionhub.schemas.mission import Mission


class EventType(StrEnum):
    MISSION_CREATED = "mission.created"
    MISSION_UPDATED = "mission.updated"
    MISSION_STATUS_CHANGED = "mission.status_changed"
    MISSION_COMPLETED = "mission.completed"
    TRANSACTIONS_LINKED = "transactions.linked"
    BADGE_EARNED = "badge.earned"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base for every event; subclasses pin ``event_type``."""
    event_type: ClassVar[EventType]

    actor_id: str
    occurred_at: datetime = field(default_factory=_utcnow, kw_only=True)


@dataclass(frozen=True)
class MissionEvent(DomainEvent):
    mission: Mission

    @property
    def household_id(self) -> str | None:
        return self.mission.family_group_id


@dataclass(frozen=True)
class MissionCreated(MissionEvent):
    event_type: ClassVar[EventType] = EventType.MISSION_CREATED


@dataclass(frozen=True)
class MissionUpdated(MissionEvent):
    event_type: ClassVar[EventType] = EventType.MISSION_UPDATED


@dataclass(frozen=True)
class MissionStatusChanged(MissionEvent):
    event_type: ClassVar[EventType] = EventType.MISSION_STATUS_CHANGED

    old_status: MissionStatus
    new_status: MissionStatus


@dataclass(frozen=True)
class MissionCompleted(MissionEvent):
    event_type: ClassVar[EventType] = EventType.MISSION_COMPLETED


@dataclass(frozen=True)
class TransactionsLinked(MissionEvent):
    event_type: ClassVar[EventType] = EventType.TRANSACTIONS_LINKED

    transaction_ids: tuple[str, ...]


@dataclass(frozen=True)
class BadgeEarned(DomainEvent):
    """``actor_id`` is the user who received the badge."""
    event_type: ClassVar[EventType] = EventType.BADGE_EARNED

    badge: Badge
    user_badge: UserBadge
