from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from missionhub.core.constants import FamilyGroupStatus
from missionhub.interfaces.family import IFamilyGroupRepository
from missionhub.models.family import FamilyGroup as FamilyGroupModel, FamilyGroupMember
from missionhub.schemas.family import FamilyGroup


class FamilyGroupRepository(IFamilyGroupRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, family_group_id: str) -> Optional[FamilyGroup]:
        result = await self._session.execute(
            select(FamilyGroupModel).where(FamilyGroupModel.id == family_group_id)
        )
        row = result.scalar_one_or_none()
        return FamilyGroup.model_validate(row) if row else None

    async def get_by_member(self, user_id: str) -> Optional[FamilyGroup]:
        stmt = (
            select(FamilyGroupModel)
            .join(FamilyGroupMember, FamilyGroupMember.family_group_id == FamilyGroupModel.id)
            .where(
                FamilyGroupMember.user_id == user_id,
                FamilyGroupModel.status == FamilyGroupStatus.ACTIVE,
            )
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return FamilyGroup.model_validate(row) if row else None
