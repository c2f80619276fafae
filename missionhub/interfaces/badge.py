from abc import ABC, abstractmethod
from typing import Optional

from missionhub.core.constants import BadgeIssueType, BadgeType
from missionhub.schemas.badge import Badge, UserBadge


class IBadgeRepository(ABC):
    """Read-only access to the badge catalogue."""

    @abstractmethod
    async def get_by_id(self, badge_id: str) -> Optional[Badge]:
        pass

    @abstractmethod
    async def list_active(self, badge_type: Optional[BadgeType] = None) -> list[Badge]:
        pass


class IUserBadgeRepository(ABC):
    @abstractmethod
    async def award(
        self,
        user_id: str,
        badge_id: str,
        issue_type: BadgeIssueType = BadgeIssueType.AUTO,
        issued_by: Optional[str] = None,
    ) -> UserBadge:
        """Insert the (user, badge) pair if absent.

        Raises:
            AlreadyAwardedException: The user already holds the badge
        """
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[UserBadge]:
        """Badges held by a user, most recent first."""
        pass
