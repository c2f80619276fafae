"""SQLAlchemy unit of work over one session."""
from contextlib import AbstractAsyncContextManager
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from missionhub.interfaces.unit_of_work import IUnitOfWork
from missionhub.repositories.badge_repository import BadgeRepository, UserBadgeRepository
from missionhub.repositories.catalog_repository import CategoryRepository, TemplateRepository
from missionhub.repositories.family_repository import FamilyGroupRepository
from missionhub.repositories.mission_repository import MissionRepository
from missionhub.repositories.transaction_repository import TransactionRepository

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """
    Binds every repository to one session opened from ``session_scope``
    (normally ``db_manager.session``). Uncommitted work is rolled back on exit.
    """

    def __init__(self, session_scope: SessionScope):
        self._session_scope = session_scope
        self._scope: Optional[AbstractAsyncContextManager[AsyncSession]] = None
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._scope = self._session_scope()
        self._session = await self._scope.__aenter__()
        self.missions = MissionRepository(self._session)
        self.transactions = TransactionRepository(self._session)
        self.categories = CategoryRepository(self._session)
        self.templates = TemplateRepository(self._session)
        self.badges = BadgeRepository(self._session)
        self.user_badges = UserBadgeRepository(self._session)
        self.families = FamilyGroupRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        scope, self._scope, self._session = self._scope, None, None
        await scope.__aexit__(exc_type, exc, tb)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()


def sqlalchemy_uow_factory(session_scope: SessionScope) -> Callable[[], SqlAlchemyUnitOfWork]:
    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_scope)
    return factory
