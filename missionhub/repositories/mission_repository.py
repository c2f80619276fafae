"""Mission repository implementation using SQLAlchemy."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, or_, select

from sqlalchemy.ext.asyncio import AsyncSession

from missionhub.core.constants import MissionStatus
from missionhub.interfaces.mission import IMissionRepository
from missionhub.models.mission import Mission as MissionModel
from missionhub.schemas.mission import Mission, MissionFilter
from missionhub.utils.money import to_decimal

_MUTABLE_FIELDS = (
    "family_group_id",
    "name",
    "description",
    "goal_amount",
    "current_amount",
    "mission_level",
    "status",
    "start_date",
    "due_date",
    "completed_at",
)


class MissionRepository(IMissionRepository):
    """SQLAlchemy implementation of the mission repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_row(self, mission_id: str) -> Optional[MissionModel]:
        result = await self._session.execute(select(MissionModel).where(MissionModel.id == mission_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, mission_id: str) -> Optional[Mission]:
        row = await self._get_row(mission_id)
        return Mission.model_validate(row) if row else None

    async def get_for_update(self, mission_id: str) -> Optional[Mission]:
        # Concurrent writers of the same mission queue here until the holder commits
        stmt = (
            select(MissionModel)
            .where(MissionModel.id == mission_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return Mission.model_validate(row) if row else None

    async def add(self, mission: Mission) -> Mission:
        row = MissionModel(**mission.model_dump(exclude={"created_at", "updated_at"}))
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return Mission.model_validate(row)

    async def save(self, mission: Mission) -> Mission:
        row = await self._get_row(mission.id)
        if row is None:
            raise LookupError(f"Mission {mission.id} does not exist")
        for field in _MUTABLE_FIELDS:
            setattr(row, field, getattr(mission, field))
        await self._session.flush()
        await self._session.refresh(row)
        return Mission.model_validate(row)

    async def delete(self, mission_id: str) -> None:
        # Children first: SQLite ignores ON DELETE CASCADE without the foreign_keys pragma
        await self._session.execute(delete(MissionModel).where(MissionModel.parent_mission_id == mission_id))
        await self._session.execute(delete(MissionModel).where(MissionModel.id == mission_id))
        await self._session.flush()

    async def list_missions(
        self,
        user_id: str,
        family_group_id: Optional[str],
        filters: MissionFilter,
    ) -> list[Mission]:
        if filters.include_family and family_group_id:
            stmt = select(MissionModel).where(
                or_(MissionModel.user_id == user_id, MissionModel.family_group_id == family_group_id)
            )
        else:
            stmt = select(MissionModel).where(MissionModel.user_id == user_id)

        if filters.status:
            stmt = stmt.where(MissionModel.status == filters.status)
        if filters.category_id:
            stmt = stmt.where(MissionModel.category_id == filters.category_id)
        if filters.mission_level:
            stmt = stmt.where(MissionModel.mission_level == filters.mission_level)
        if filters.parent_mission_id:
            stmt = stmt.where(MissionModel.parent_mission_id == filters.parent_mission_id)
        elif filters.top_level_only:
            stmt = stmt.where(MissionModel.parent_mission_id.is_(None))

        result = await self._session.execute(stmt.order_by(MissionModel.created_at.desc()))
        return [Mission.model_validate(row) for row in result.scalars().all()]

    async def list_children(self, parent_mission_id: str) -> list[Mission]:
        stmt = (
            select(MissionModel)
            .where(MissionModel.parent_mission_id == parent_mission_id)
            .order_by(MissionModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [Mission.model_validate(row) for row in result.scalars().all()]

    async def count_completed(self, user_id: str, category_id: Optional[str] = None) -> int:
        stmt = select(func.count(MissionModel.id)).where(
            MissionModel.user_id == user_id,
            MissionModel.status == MissionStatus.COMPLETED,
        )
        if category_id:
            stmt = stmt.where(MissionModel.category_id == category_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list_completion_times(self, user_id: str) -> list[datetime]:
        stmt = (
            select(MissionModel.completed_at)
            .where(
                MissionModel.user_id == user_id,
                MissionModel.status == MissionStatus.COMPLETED,
                MissionModel.completed_at.is_not(None),
            )
            .order_by(MissionModel.completed_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_completed_in_family(self, family_group_id: str) -> int:
        stmt = select(func.count(MissionModel.id)).where(
            MissionModel.family_group_id == family_group_id,
            MissionModel.status == MissionStatus.COMPLETED,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_by_user(self, user_id: str) -> int:
        result = await self._session.execute(
            select(func.count(MissionModel.id)).where(MissionModel.user_id == user_id)
        )
        return result.scalar_one()

    async def total_saved(self, user_id: str) -> Decimal:
        result = await self._session.execute(
            select(func.coalesce(func.sum(MissionModel.current_amount), 0)).where(MissionModel.user_id == user_id)
        )
        return to_decimal(result.scalar_one())
