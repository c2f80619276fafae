from abc import ABC, abstractmethod
from typing import Optional

from missionhub.schemas.family import FamilyGroup


class IFamilyGroupRepository(ABC):
    @abstractmethod
    async def get_by_id(self, family_group_id: str) -> Optional[FamilyGroup]:
        pass

    @abstractmethod
    async def get_by_member(self, user_id: str) -> Optional[FamilyGroup]:
        """Active household the user belongs to, if any."""
        pass
