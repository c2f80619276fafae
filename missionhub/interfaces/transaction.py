from abc import ABC, abstractmethod
from typing import Iterable

from missionhub.schemas.transaction import Transaction


class ITransactionRepository(ABC):
    @abstractmethod
    async def get_by_ids(self, transaction_ids: Iterable[str]) -> list[Transaction]:
        """Return the transactions that exist among ``transaction_ids``."""
        pass

    @abstractmethod
    async def link_to_mission(self, transaction_ids: Iterable[str], mission_id: str) -> None:
        """Point every given transaction at ``mission_id``."""
        pass

    @abstractmethod
    async def list_by_mission(self, mission_id: str) -> list[Transaction]:
        """All transactions currently linked to a mission."""
        pass

    @abstractmethod
    async def unlink_mission(self, mission_id: str) -> int:
        """Clear the link of every transaction pointing at ``mission_id``; returns the count."""
        pass
