"""Links bank transactions to missions and recomputes mission progress."""
import logging
from typing import Iterable

from missionhub.core.constants import MissionStatus
from missionhub.core.exceptions import TransactionsLockedException, TransactionsNotFoundException
from missionhub.events.types import DomainEvent, MissionUpdated, TransactionsLinked
from missionhub.interfaces.unit_of_work import IUnitOfWork
from missionhub.schemas.mission import Mission
from missionhub.services.mission_state_machine import MissionStateMachine
from missionhub.utils.money import sum_amounts

logger = logging.getLogger(__name__)


class TransactionAggregator:
    """
    Sole writer of ``Mission.current_amount``.

    The accumulated amount is always recomputed from every linked deposit, so
    running it twice, or concurrently, converges on the same value.
    Withdrawals never count towards progress.
    """

    def __init__(self, state_machine: MissionStateMachine):
        self._state_machine = state_machine

    async def link_transactions(
        self,
        uow: IUnitOfWork,
        mission: Mission,
        transaction_ids: Iterable[str],
        actor_id: str,
    ) -> list[DomainEvent]:
        """
        Link transactions to ``mission`` and recompute it.

        Transactions taken over from another mission leave it too, so that
        mission is recomputed in the same unit of work. Transactions backing a
        completed mission stay where they are.
        """
        ids = list(dict.fromkeys(transaction_ids))

        found = await uow.transactions.get_by_ids(ids)
        missing = set(ids) - {transaction.id for transaction in found}
        if missing:
            logger.warning(f"Mission {mission.id}: {len(missing)} of {len(ids)} transactions not found")
            raise TransactionsNotFoundException(missing)

        previous_ids = sorted({t.mission_id for t in found if t.mission_id and t.mission_id != mission.id})
        previous: list[Mission] = []
        for previous_id in previous_ids:
            other = await uow.missions.get_for_update(previous_id)
            if other is not None:
                previous.append(other)
        completed_ids = {other.id for other in previous if other.status == MissionStatus.COMPLETED}
        if completed_ids:
            locked = [t.id for t in found if t.mission_id in completed_ids]
            logger.warning(f"Mission {mission.id}: {len(locked)} transactions belong to completed missions")
            raise TransactionsLockedException(locked)

        await uow.transactions.link_to_mission(ids, mission.id)
        logger.info(f"Linked {len(ids)} transactions to mission {mission.id}")

        completion_events = await self.recompute(uow, mission, actor_id)
        snapshot = mission.model_copy()
        events: list[DomainEvent] = [
            TransactionsLinked(actor_id=actor_id, mission=snapshot, transaction_ids=tuple(ids)),
            MissionUpdated(actor_id=actor_id, mission=snapshot),
        ]
        for other in previous:
            logger.info(f"Mission {other.id} gave up transactions to mission {mission.id}")
            events.extend(await self.recompute(uow, other, actor_id))
            events.append(MissionUpdated(actor_id=actor_id, mission=other.model_copy()))
        return events + completion_events

    async def recompute(self, uow: IUnitOfWork, mission: Mission, actor_id: str) -> list[DomainEvent]:
        """
        Recompute the accumulated amount and auto-complete when the goal is met.

        Only ``in_progress`` missions complete automatically. The mission is
        saved through ``uow``; committing is left to the caller.
        """
        linked = await uow.transactions.list_by_mission(mission.id)
        mission.current_amount = sum_amounts(t.amount for t in linked if t.is_deposit)

        events: list[DomainEvent] = []
        if mission.current_amount >= mission.goal_amount and mission.status == MissionStatus.IN_PROGRESS:
            logger.info(f"Mission {mission.id} reached its goal of {mission.goal_amount}")
            events = self._state_machine.transition(mission, MissionStatus.COMPLETED, actor_id)

        saved = await uow.missions.save(mission)
        mission.updated_at = saved.updated_at
        return events
