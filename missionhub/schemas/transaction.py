from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from missionhub.core.constants import TransactionType


class Transaction(BaseModel):
    """Bank transaction imported from open banking. Only ``mission_id`` ever changes."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    bank_account_id: Optional[str] = None
    external_id: Optional[str] = None
    type: TransactionType
    amount: Decimal
    balance_after: Optional[Decimal] = None
    description: Optional[str] = None
    counterparty: Optional[str] = None
    transaction_date: datetime
    mission_id: Optional[str] = None

    @property
    def is_deposit(self) -> bool:
        return self.type == TransactionType.DEPOSIT
