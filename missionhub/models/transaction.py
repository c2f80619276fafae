"""Bank transaction SQLAlchemy model."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from missionhub.core.database import Base
from missionhub.models._types import new_id


class Transaction(Base):
    """Transaction retrieved from open banking; rows are written by the import job."""

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bank_account_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # deposit, withdrawal
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balance_after: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    counterparty: Mapped[str | None] = mapped_column(String(100), nullable=True)
    transaction_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    mission_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("missions.id", ondelete="SET NULL"), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type={self.type}, amount={self.amount})>"
