from abc import ABC, abstractmethod
from typing import Optional

from missionhub.schemas.catalog import Category, MissionTemplate


class ICategoryRepository(ABC):
    @abstractmethod
    async def get_by_id(self, category_id: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def list_active(self) -> list[Category]:
        """Active categories ordered for display."""
        pass


class ITemplateRepository(ABC):
    @abstractmethod
    async def get_by_id(self, template_id: str) -> Optional[MissionTemplate]:
        pass

    @abstractmethod
    async def list_active(self, category_id: Optional[str] = None) -> list[MissionTemplate]:
        """Active templates, most used first."""
        pass

    @abstractmethod
    async def increment_usage(self, template_id: str) -> None:
        """Record that a mission was created from the template."""
        pass
