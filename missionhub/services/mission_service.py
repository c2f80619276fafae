"""Mission use cases: the entry point for every mission read and write."""
import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, AsyncIterator, Iterable, Optional

from missionhub.core.constants import MissionLevel, MissionStatus, MissionType
from missionhub.core.exceptions import (
    CategoryNotFoundException,
    ForbiddenMissionAccessException,
    MissionNotFoundException,
    ParentMissionNotFoundException,
    TemplateNotFoundException,
)
from missionhub.events.bus import EventBus
from missionhub.events.types import DomainEvent, MissionCreated, MissionUpdated
from missionhub.interfaces.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from missionhub.schemas.catalog import Category, MissionTemplate
from missionhub.schemas.mission import Mission, MissionFilter, MissionSummary
from missionhub.schemas.realtime import RealtimeMessage
from missionhub.services.mission_state_machine import MissionStateMachine, ensure_mutable
from missionhub.services.realtime_notifier import RealtimeNotifier
from missionhub.services.transaction_aggregator import TransactionAggregator
from missionhub.utils.money import ZERO, sum_amounts, to_decimal
from missionhub.utils.progress import overall_progress

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("name", "description", "goal_amount", "start_date", "due_date", "mission_level")
_NULLABLE_FIELDS = ("description", "start_date")


class MissionService:
    """
    Mission operations for an authenticated actor.

    Every mutation runs in one unit of work and publishes its events only
    after the commit succeeded. Only the owner may change a mission; household
    members may read shared missions.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        bus: EventBus,
        state_machine: Optional[MissionStateMachine] = None,
        aggregator: Optional[TransactionAggregator] = None,
        notifier: Optional[RealtimeNotifier] = None,
    ):
        self._uow_factory = uow_factory
        self._bus = bus
        self._state_machine = state_machine or MissionStateMachine()
        self._aggregator = aggregator or TransactionAggregator(self._state_machine)
        self._notifier = notifier

    def _publish(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            self._bus.publish(event)

    async def _get_owned(self, uow: IUnitOfWork, actor_id: str, mission_id: str) -> Mission:
        """Load a mission for writing, locked for the rest of the unit of work."""
        mission = await uow.missions.get_for_update(mission_id)
        if mission is None:
            raise MissionNotFoundException()
        if mission.user_id != actor_id:
            logger.warning(f"User {actor_id} tried to modify mission {mission_id} owned by {mission.user_id}")
            raise ForbiddenMissionAccessException()
        return mission

    async def _household_id(self, uow: IUnitOfWork, user_id: str) -> Optional[str]:
        family = await uow.families.get_by_member(user_id)
        return family.id if family else None

    async def create_mission(
        self,
        actor_id: str,
        category_id: str,
        name: str,
        goal_amount: Decimal,
        due_date: date,
        template_id: Optional[str] = None,
        parent_mission_id: Optional[str] = None,
        start_date: Optional[date] = None,
        description: Optional[str] = None,
        mission_level: Optional[MissionLevel] = None,
        share_with_family: bool = False,
    ) -> Mission:
        async with self._uow_factory() as uow:
            if await uow.categories.get_by_id(category_id) is None:
                raise CategoryNotFoundException()

            if template_id and await uow.templates.get_by_id(template_id) is None:
                raise TemplateNotFoundException()

            family_group_id = None
            if parent_mission_id:
                parent = await uow.missions.get_by_id(parent_mission_id)
                # Missions nest one level deep
                if parent is None or parent.user_id != actor_id or not parent.is_top_level:
                    raise ParentMissionNotFoundException()
                family_group_id = parent.family_group_id

            if share_with_family:
                family_group_id = await self._household_id(uow, actor_id)

            mission = Mission(
                id=str(uuid.uuid4()),
                user_id=actor_id,
                family_group_id=family_group_id,
                parent_mission_id=parent_mission_id,
                category_id=category_id,
                template_id=template_id,
                name=name,
                description=description,
                goal_amount=to_decimal(goal_amount),
                current_amount=ZERO,
                mission_type=MissionType.TEMPLATE if template_id else MissionType.CUSTOM,
                mission_level=mission_level or (MissionLevel.MONTHLY if parent_mission_id else MissionLevel.MAIN),
                status=MissionStatus.PENDING,
                start_date=start_date,
                due_date=due_date,
            )
            mission = await uow.missions.add(mission)
            if template_id:
                await uow.templates.increment_usage(template_id)
            await uow.commit()

        logger.info(f"Mission {mission.id} created by user {actor_id}")
        self._publish([MissionCreated(actor_id=actor_id, mission=mission.model_copy())])
        return mission

    async def update_mission(self, actor_id: str, mission_id: str, fields: dict[str, Any]) -> Mission:
        """Apply a partial update; ``fields`` holds only the values that were sent."""
        async with self._uow_factory() as uow:
            mission = await self._get_owned(uow, actor_id, mission_id)
            ensure_mutable(mission)

            for field in _UPDATABLE_FIELDS:
                if field in fields and (fields[field] is not None or field in _NULLABLE_FIELDS):
                    setattr(mission, field, fields[field])
            goal_changed = fields.get("goal_amount") is not None
            if goal_changed:
                mission.goal_amount = to_decimal(fields["goal_amount"])
            if fields.get("share_with_family") is not None:
                mission.family_group_id = (
                    await self._household_id(uow, actor_id) if fields["share_with_family"] else None
                )

            completion_events: list[DomainEvent] = []
            if goal_changed:
                # A lower goal may already be met
                completion_events = await self._aggregator.recompute(uow, mission, actor_id)
            else:
                mission = await uow.missions.save(mission)
            await uow.commit()

        logger.info(f"Mission {mission_id} updated by user {actor_id}")
        self._publish([MissionUpdated(actor_id=actor_id, mission=mission.model_copy()), *completion_events])
        return mission

    async def transition_status(self, actor_id: str, mission_id: str, new_status: MissionStatus) -> Mission:
        async with self._uow_factory() as uow:
            mission = await self._get_owned(uow, actor_id, mission_id)
            events = self._state_machine.transition(mission, new_status, actor_id)
            if mission.status == MissionStatus.IN_PROGRESS:
                # Deposits linked while pending may already cover the goal
                events += await self._aggregator.recompute(uow, mission, actor_id)
            else:
                mission = await uow.missions.save(mission)
            await uow.commit()

        self._publish(events)
        return mission

    async def link_transactions(self, actor_id: str, mission_id: str, transaction_ids: list[str]) -> Mission:
        async with self._uow_factory() as uow:
            mission = await self._get_owned(uow, actor_id, mission_id)
            ensure_mutable(mission)
            events = await self._aggregator.link_transactions(uow, mission, transaction_ids, actor_id)
            await uow.commit()

        self._publish(events)
        return mission

    async def get_mission(self, actor_id: str, mission_id: str) -> Mission:
        async with self._uow_factory() as uow:
            mission = await uow.missions.get_by_id(mission_id)
            if mission is None:
                raise MissionNotFoundException()
            if mission.user_id != actor_id:
                household_id = await self._household_id(uow, actor_id)
                if not household_id or mission.family_group_id != household_id:
                    raise ForbiddenMissionAccessException()
            return mission

    async def list_missions(self, actor_id: str, filters: Optional[MissionFilter] = None) -> list[Mission]:
        filters = filters or MissionFilter()
        async with self._uow_factory() as uow:
            household_id = await self._household_id(uow, actor_id) if filters.include_family else None
            return await uow.missions.list_missions(actor_id, household_id, filters)

    async def get_summary(self, actor_id: str) -> MissionSummary:
        """Totals over the actor's own missions."""
        async with self._uow_factory() as uow:
            missions = await uow.missions.list_missions(actor_id, None, MissionFilter(include_family=False))

        by_status = {status: 0 for status in MissionStatus}
        for mission in missions:
            by_status[MissionStatus(mission.status)] += 1

        total_goal = sum_amounts(m.goal_amount for m in missions)
        total_current = sum_amounts(m.current_amount for m in missions)
        return MissionSummary(
            total_missions=len(missions),
            pending_missions=by_status[MissionStatus.PENDING],
            in_progress_missions=by_status[MissionStatus.IN_PROGRESS],
            completed_missions=by_status[MissionStatus.COMPLETED],
            failed_missions=by_status[MissionStatus.FAILED],
            total_goal_amount=total_goal,
            total_current_amount=total_current,
            overall_progress=overall_progress(total_current, total_goal),
        )

    async def delete_mission(self, actor_id: str, mission_id: str) -> None:
        """Delete a mission with its sub-missions; their transactions stay, unlinked."""
        async with self._uow_factory() as uow:
            mission = await self._get_owned(uow, actor_id, mission_id)
            children = await uow.missions.list_children(mission.id)
            unlinked = 0
            for child in children:
                unlinked += await uow.transactions.unlink_mission(child.id)
            unlinked += await uow.transactions.unlink_mission(mission.id)
            await uow.missions.delete(mission.id)
            await uow.commit()

        logger.info(
            f"Mission {mission_id} deleted by user {actor_id} "
            f"({len(children)} sub-missions, {unlinked} transactions unlinked)"
        )

    async def list_categories(self) -> list[Category]:
        async with self._uow_factory() as uow:
            return await uow.categories.list_active()

    async def list_templates(self, category_id: Optional[str] = None) -> list[MissionTemplate]:
        async with self._uow_factory() as uow:
            return await uow.templates.list_active(category_id)

    async def subscribe_realtime(
        self, actor_id: str, household_id: Optional[str] = None
    ) -> AsyncIterator[RealtimeMessage]:
        """
        Open the actor's live stream.

        The household defaults to the one the actor belongs to. A household the
        actor is not a member of is ignored in favour of their own.
        """
        if self._notifier is None:
            raise RuntimeError("Realtime notifier is not configured")
        async with self._uow_factory() as uow:
            member_of = await self._household_id(uow, actor_id)
        if household_id is not None and household_id != member_of:
            logger.warning(f"User {actor_id} asked for household {household_id} but belongs to {member_of}")
        return await self._notifier.subscribe(actor_id, member_of)
