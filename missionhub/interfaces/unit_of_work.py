from abc import ABC, abstractmethod
from typing import Callable

from missionhub.interfaces.badge import IBadgeRepository, IUserBadgeRepository
from missionhub.interfaces.catalog import ICategoryRepository, ITemplateRepository
from missionhub.interfaces.family import IFamilyGroupRepository
from missionhub.interfaces.mission import IMissionRepository
from missionhub.interfaces.transaction import ITransactionRepository


class IUnitOfWork(ABC):
    """
    One database transaction and the repositories bound to it.

    Used as ``async with uow_factory() as uow:``. Nothing is persisted unless
    ``commit`` is awaited inside the block.
    """

    missions: IMissionRepository
    transactions: ITransactionRepository
    categories: ICategoryRepository
    templates: ITemplateRepository
    badges: IBadgeRepository
    user_badges: IUserBadgeRepository
    families: IFamilyGroupRepository

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc, tb) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass


UnitOfWorkFactory = Callable[[], IUnitOfWork]
