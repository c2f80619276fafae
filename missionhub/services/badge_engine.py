"""Badge rule engine driven by mission completion events."""
import logging
from datetime import datetime
from typing import Iterable, Optional

from missionhub.core.constants import BadgeIssueType, BadgeType, FirstActionType
from missionhub.core.exceptions import AlreadyAwardedException
from missionhub.events.bus import EventBus
from missionhub.events.types import BadgeEarned, EventType, MissionCompleted
from missionhub.interfaces.unit_of_work import UnitOfWorkFactory
from missionhub.schemas.badge import Badge, UserBadge

logger = logging.getLogger(__name__)


def consecutive_month_streak(completion_times: Iterable[datetime]) -> int:
    """
    Length of the run of consecutive calendar months ending at the most recent
    completion month. ``completion_times`` must be sorted most recent first.
    """
    streak = 0
    previous: Optional[tuple[int, int]] = None
    for completed_at in completion_times:
        month = (completed_at.year, completed_at.month)
        if month == previous:
            continue
        if previous is None:
            streak = 1
        else:
            year, mon = previous
            expected = (year - 1, 12) if mon == 1 else (year, mon - 1)
            if month != expected:
                break
            streak += 1
        previous = month
    return streak


class BadgeEngine:
    """
    Awards lifecycle, streak, family and achievement badges when a mission completes.

    Awarding is idempotent: the user badge repository inserts the (user, badge)
    pair only when absent, so a duplicate delivery of the same completion never
    produces a second badge.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, bus: EventBus):
        self._uow_factory = uow_factory
        self._bus = bus

    def register(self) -> None:
        self._bus.subscribe(EventType.MISSION_COMPLETED, self.on_mission_completed)

    def unregister(self) -> None:
        self._bus.unsubscribe(EventType.MISSION_COMPLETED, self.on_mission_completed)

    async def on_mission_completed(self, event: MissionCompleted) -> None:
        checks = (
            ("lifecycle", self.check_lifecycle_badges),
            ("streak", self.check_streak_badges),
            ("family", self.check_family_badges),
            ("achievement", self.check_achievement_badges),
        )
        for name, check in checks:
            try:
                await check(event)
            except Exception:
                logger.exception(f"{name} badge check failed for mission {event.mission.id}")

    async def check_lifecycle_badges(self, event: MissionCompleted) -> list[UserBadge]:
        user_id = event.actor_id
        eligible: list[Badge] = []
        async with self._uow_factory() as uow:
            badges = await uow.badges.list_active(BadgeType.LIFECYCLE)
            counts: dict[Optional[str], int] = {}
            for badge in badges:
                condition = badge.condition_value
                if condition.category_id and condition.category_id != event.mission.category_id:
                    continue
                if condition.category_id not in counts:
                    counts[condition.category_id] = await uow.missions.count_completed(
                        user_id, condition.category_id
                    )
                if counts[condition.category_id] >= (condition.completed_count or 1):
                    eligible.append(badge)
        return await self._award_all(user_id, eligible)

    async def check_streak_badges(self, event: MissionCompleted) -> list[UserBadge]:
        user_id = event.actor_id
        async with self._uow_factory() as uow:
            badges = await uow.badges.list_active(BadgeType.STREAK)
            if not badges:
                return []
            completion_times = await uow.missions.list_completion_times(user_id)

        streak = consecutive_month_streak(completion_times)
        logger.debug(f"User {user_id} has a {streak} month completion streak")
        eligible = [
            badge for badge in badges
            if badge.condition_value.consecutive_months and streak >= badge.condition_value.consecutive_months
        ]
        return await self._award_all(user_id, eligible)

    async def check_family_badges(self, event: MissionCompleted) -> list[UserBadge]:
        family_group_id = event.mission.family_group_id
        if not family_group_id:
            return []

        async with self._uow_factory() as uow:
            badges = await uow.badges.list_active(BadgeType.FAMILY)
            if not badges:
                return []
            family_count = await uow.missions.count_completed_in_family(family_group_id)

        eligible = [
            badge for badge in badges
            if family_count >= (badge.condition_value.family_completed_count or 1)
        ]
        return await self._award_all(event.actor_id, eligible)

    async def check_achievement_badges(self, event: MissionCompleted) -> list[UserBadge]:
        """Savings-amount achievements and first-action specials."""
        user_id = event.actor_id
        eligible: list[Badge] = []
        async with self._uow_factory() as uow:
            achievements = await uow.badges.list_active(BadgeType.ACHIEVEMENT)
            specials = await uow.badges.list_active(BadgeType.SPECIAL)
            if not achievements and not specials:
                return []

            saved = await uow.missions.total_saved(user_id)
            for badge in achievements:
                amount = badge.condition_value.amount
                if amount is not None and saved >= amount:
                    eligible.append(badge)

            for badge in specials:
                action = badge.condition_value.action_type
                if action == FirstActionType.MISSION:
                    done = await uow.missions.count_by_user(user_id) >= 1
                elif action == FirstActionType.FAMILY:
                    done = await uow.families.get_by_member(user_id) is not None
                else:
                    continue
                if done:
                    eligible.append(badge)
        return await self._award_all(user_id, eligible)

    async def _award_all(self, user_id: str, badges: list[Badge]) -> list[UserBadge]:
        awarded = []
        for badge in badges:
            user_badge = await self.attempt_award(user_id, badge)
            if user_badge is not None:
                awarded.append(user_badge)
        return awarded

    async def attempt_award(
        self,
        user_id: str,
        badge: Badge,
        issue_type: BadgeIssueType = BadgeIssueType.AUTO,
        issued_by: Optional[str] = None,
    ) -> Optional[UserBadge]:
        """Award ``badge`` once; returns None when the user already holds it."""
        try:
            async with self._uow_factory() as uow:
                user_badge = await uow.user_badges.award(user_id, badge.id, issue_type, issued_by)
                await uow.commit()
        except AlreadyAwardedException:
            logger.debug(f"User {user_id} already holds badge {badge.id}")
            return None

        logger.info(f"Badge '{badge.name}' awarded to user {user_id}")
        self._bus.publish(BadgeEarned(actor_id=user_id, badge=badge, user_badge=user_badge))
        return user_badge
