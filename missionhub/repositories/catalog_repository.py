"""Category and template repositories using SQLAlchemy."""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from missionhub.core.constants import CategoryStatus
from missionhub.interfaces.catalog import ICategoryRepository, ITemplateRepository
from missionhub.models.mission import LifeCycleCategory, MissionTemplate as MissionTemplateModel
from missionhub.schemas.catalog import Category, MissionTemplate


class CategoryRepository(ICategoryRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        result = await self._session.execute(
            select(LifeCycleCategory).where(LifeCycleCategory.id == category_id)
        )
        row = result.scalar_one_or_none()
        return Category.model_validate(row) if row else None

    async def list_active(self) -> list[Category]:
        stmt = (
            select(LifeCycleCategory)
            .where(LifeCycleCategory.status == CategoryStatus.ACTIVE)
            .order_by(LifeCycleCategory.display_order.asc())
        )
        result = await self._session.execute(stmt)
        return [Category.model_validate(row) for row in result.scalars().all()]


class TemplateRepository(ITemplateRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, template_id: str) -> Optional[MissionTemplate]:
        result = await self._session.execute(
            select(MissionTemplateModel).where(MissionTemplateModel.id == template_id)
        )
        row = result.scalar_one_or_none()
        return MissionTemplate.model_validate(row) if row else None

    async def list_active(self, category_id: Optional[str] = None) -> list[MissionTemplate]:
        stmt = select(MissionTemplateModel).where(MissionTemplateModel.status == CategoryStatus.ACTIVE)
        if category_id:
            stmt = stmt.where(MissionTemplateModel.category_id == category_id)
        result = await self._session.execute(stmt.order_by(MissionTemplateModel.usage_count.desc()))
        return [MissionTemplate.model_validate(row) for row in result.scalars().all()]

    async def increment_usage(self, template_id: str) -> None:
        await self._session.execute(
            update(MissionTemplateModel)
            .where(MissionTemplateModel.id == template_id)
            .values(usage_count=MissionTemplateModel.usage_count + 1)
        )
