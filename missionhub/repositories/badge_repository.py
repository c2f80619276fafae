"""Badge and user badge repositories using SQLAlchemy."""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from missionhub.core.constants import BadgeIssueType, BadgeType, CategoryStatus
from missionhub.core.exceptions import AlreadyAwardedException
from missionhub.interfaces.badge import IBadgeRepository, IUserBadgeRepository
from missionhub.models._types import new_id, utcnow
from missionhub.models.badge import Badge as BadgeModel, UserBadge as UserBadgeModel
from missionhub.schemas.badge import Badge, UserBadge

logger = logging.getLogger(__name__)


class BadgeRepository(IBadgeRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, badge_id: str) -> Optional[Badge]:
        result = await self._session.execute(select(BadgeModel).where(BadgeModel.id == badge_id))
        row = result.scalar_one_or_none()
        return Badge.model_validate(row) if row else None

    async def list_active(self, badge_type: Optional[BadgeType] = None) -> list[Badge]:
        stmt = select(BadgeModel).where(BadgeModel.status == CategoryStatus.ACTIVE)
        if badge_type:
            stmt = stmt.where(BadgeModel.badge_type == badge_type)
        result = await self._session.execute(stmt.order_by(BadgeModel.name.asc()))
        return [Badge.model_validate(row) for row in result.scalars().all()]


class UserBadgeRepository(IUserBadgeRepository):
    """
    User badge repository.

    Awarding relies on the unique (user_id, badge_id) constraint through
    ``INSERT ... ON CONFLICT DO NOTHING``, so concurrent awards of the same
    badge leave exactly one row.
    """

    _CONFLICT_DIALECTS = {
        "postgresql": postgresql.insert,
        "sqlite": sqlite.insert,
    }

    def __init__(self, session: AsyncSession):
        self._session = session

    async def award(
        self,
        user_id: str,
        badge_id: str,
        issue_type: BadgeIssueType = BadgeIssueType.AUTO,
        issued_by: Optional[str] = None,
    ) -> UserBadge:
        values = {
            "id": new_id(),
            "user_id": user_id,
            "badge_id": badge_id,
            "issue_type": issue_type,
            "issued_by": issued_by,
            "issued_at": utcnow(),
        }
        dialect = self._session.get_bind().dialect.name
        insert = self._CONFLICT_DIALECTS.get(dialect)

        if insert is not None:
            stmt = (
                insert(UserBadgeModel)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
                .returning(UserBadgeModel.id)
            )
            result = await self._session.execute(stmt)
            if result.scalar_one_or_none() is None:
                raise AlreadyAwardedException(user_id, badge_id)
        else:
            logger.debug(f"No conflict-free insert for dialect {dialect}, relying on IntegrityError")
            try:
                async with self._session.begin_nested():
                    self._session.add(UserBadgeModel(**values))
            except IntegrityError as e:
                raise AlreadyAwardedException(user_id, badge_id) from e

        return UserBadge(**values)

    async def list_by_user(self, user_id: str) -> list[UserBadge]:
        stmt = (
            select(UserBadgeModel)
            .where(UserBadgeModel.user_id == user_id)
            .order_by(UserBadgeModel.issued_at.desc())
        )
        result = await self._session.execute(stmt)
        return [UserBadge.model_validate(row) for row in result.scalars().all()]
