"""Mission status transitions."""
import logging
from datetime import datetime, timezone
from typing import Callable

from missionhub.core.constants import MissionStatus
from missionhub.core.exceptions import InvalidTransitionException, MissionImmutableException
from missionhub.events.types import DomainEvent, MissionCompleted, MissionStatusChanged
from missionhub.schemas.mission import Mission

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

TRANSITIONS: dict[MissionStatus, frozenset[MissionStatus]] = {
    MissionStatus.PENDING: frozenset({MissionStatus.IN_PROGRESS, MissionStatus.FAILED}),
    MissionStatus.IN_PROGRESS: frozenset(
        {MissionStatus.COMPLETED, MissionStatus.FAILED, MissionStatus.PENDING}
    ),
    MissionStatus.COMPLETED: frozenset(),
    MissionStatus.FAILED: frozenset({MissionStatus.PENDING}),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def allowed_transitions(status: MissionStatus) -> frozenset[MissionStatus]:
    return TRANSITIONS.get(MissionStatus(status), frozenset())


def can_transition(old_status: MissionStatus, new_status: MissionStatus) -> bool:
    return MissionStatus(new_status) in allowed_transitions(old_status)


def ensure_mutable(mission: Mission) -> None:
    """Reject field updates on a completed mission."""
    if mission.status == MissionStatus.COMPLETED:
        raise MissionImmutableException()


class MissionStateMachine:
    """
    Validates and applies status changes to an in-memory mission.

    Performs no I/O: the caller persists the mission, commits, then publishes
    the returned events.
    """

    def __init__(self, clock: Clock = _utcnow):
        self._clock = clock

    def transition(self, mission: Mission, new_status: MissionStatus, actor_id: str) -> list[DomainEvent]:
        old_status = MissionStatus(mission.status)
        new_status = MissionStatus(new_status)

        if not can_transition(old_status, new_status):
            raise InvalidTransitionException(old_status, new_status)

        now = self._clock()
        mission.status = new_status
        if new_status == MissionStatus.COMPLETED and mission.completed_at is None:
            mission.completed_at = now
        if new_status == MissionStatus.IN_PROGRESS and mission.start_date is None:
            mission.start_date = now.date()

        logger.info(f"Mission {mission.id} moved {old_status} -> {new_status} by {actor_id}")

        snapshot = mission.model_copy()
        events: list[DomainEvent] = [
            MissionStatusChanged(
                actor_id=actor_id,
                mission=snapshot,
                old_status=old_status,
                new_status=new_status,
                occurred_at=now,
            )
        ]
        if new_status == MissionStatus.COMPLETED:
            events.append(MissionCompleted(actor_id=actor_id, mission=snapshot, occurred_at=now))
        return events
