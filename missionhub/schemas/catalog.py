"""Life-cycle categories and mission templates."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from missionhub.core.constants import CategoryStatus, GoalType


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    display_order: int = 0
    status: CategoryStatus = CategoryStatus.ACTIVE


class MissionTemplate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category_id: str
    name: str
    description: Optional[str] = None
    goal_type: GoalType = GoalType.AMOUNT
    default_goal_amount: Optional[Decimal] = None
    status: CategoryStatus = CategoryStatus.ACTIVE
    usage_count: int = 0
