"""Transaction repository implementation using SQLAlchemy."""
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from missionhub.interfaces.transaction import ITransactionRepository
from missionhub.models.transaction import Transaction as TransactionModel
from missionhub.schemas.transaction import Transaction


class TransactionRepository(ITransactionRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_ids(self, transaction_ids: Iterable[str]) -> list[Transaction]:
        ids = list(transaction_ids)
        if not ids:
            return []
        result = await self._session.execute(select(TransactionModel).where(TransactionModel.id.in_(ids)))
        return [Transaction.model_validate(row) for row in result.scalars().all()]

    async def link_to_mission(self, transaction_ids: Iterable[str], mission_id: str) -> None:
        ids = list(transaction_ids)
        if not ids:
            return
        await self._session.execute(
            update(TransactionModel)
            .where(TransactionModel.id.in_(ids))
            .values(mission_id=mission_id)
        )

    async def list_by_mission(self, mission_id: str) -> list[Transaction]:
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.mission_id == mission_id)
            .order_by(TransactionModel.transaction_date.asc())
        )
        result = await self._session.execute(stmt)
        return [Transaction.model_validate(row) for row in result.scalars().all()]

    async def unlink_mission(self, mission_id: str) -> int:
        result = await self._session.execute(
            update(TransactionModel)
            .where(TransactionModel.mission_id == mission_id)
            .values(mission_id=None)
        )
        return result.rowcount or 0
