from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from missionhub.schemas.mission import Mission, MissionFilter


class IMissionRepository(ABC):
    @abstractmethod
    async def get_by_id(self, mission_id: str) -> Optional[Mission]:
        """Retrieve a mission by id."""
        pass

    @abstractmethod
    async def get_for_update(self, mission_id: str) -> Optional[Mission]:
        """Retrieve a mission and lock its row until the unit of work ends."""
        pass

    @abstractmethod
    async def add(self, mission: Mission) -> Mission:
        """Insert a new mission and return it as stored."""
        pass

    @abstractmethod
    async def save(self, mission: Mission) -> Mission:
        """Write every mutable field of an existing mission."""
        pass

    @abstractmethod
    async def delete(self, mission_id: str) -> None:
        """Delete a mission; sub-missions go with it."""
        pass

    @abstractmethod
    async def list_missions(
        self,
        user_id: str,
        family_group_id: Optional[str],
        filters: MissionFilter,
    ) -> list[Mission]:
        """List a user's missions, plus the household's when ``filters.include_family`` is set.

        Newest first.
        """
        pass

    @abstractmethod
    async def list_children(self, parent_mission_id: str) -> list[Mission]:
        """List the direct sub-missions of a mission."""
        pass

    @abstractmethod
    async def count_completed(self, user_id: str, category_id: Optional[str] = None) -> int:
        """Count a user's completed missions, optionally within one category."""
        pass

    @abstractmethod
    async def list_completion_times(self, user_id: str) -> list[datetime]:
        """Completion timestamps of a user's completed missions, most recent first."""
        pass

    @abstractmethod
    async def count_completed_in_family(self, family_group_id: str) -> int:
        """Count completed missions of a household, whoever owns them."""
        pass

    @abstractmethod
    async def count_by_user(self, user_id: str) -> int:
        """Count every mission a user owns, whatever its status."""
        pass

    @abstractmethod
    async def total_saved(self, user_id: str) -> Decimal:
        """Sum of the accumulated amounts over a user's missions."""
        pass
