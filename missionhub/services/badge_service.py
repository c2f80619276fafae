"""Badge queries for the current user."""
import logging

from missionhub.interfaces.unit_of_work import UnitOfWorkFactory
from missionhub.schemas.badge import BadgeWithStatus, UserBadge

logger = logging.getLogger(__name__)


class BadgeService:
    def __init__(self, uow_factory: UnitOfWorkFactory):
        self._uow_factory = uow_factory

    async def list_badges(self, user_id: str) -> list[BadgeWithStatus]:
        """Every active badge, flagged with whether ``user_id`` has earned it."""
        async with self._uow_factory() as uow:
            badges = await uow.badges.list_active()
            held = {user_badge.badge_id: user_badge for user_badge in await uow.user_badges.list_by_user(user_id)}

        return [
            BadgeWithStatus(
                **badge.model_dump(),
                earned=badge.id in held,
                issued_at=held[badge.id].issued_at if badge.id in held else None,
            )
            for badge in badges
        ]

    async def list_user_badges(self, user_id: str) -> list[UserBadge]:
        async with self._uow_factory() as uow:
            return await uow.user_badges.list_by_user(user_id)
