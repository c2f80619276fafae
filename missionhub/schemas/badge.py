"""Badge schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from missionhub.core.constants import BadgeIssueType, BadgeType, CategoryStatus


class BadgeCondition(BaseModel):
    """Threshold payload stored in ``badges.condition_value``.

    Keys arrive camelCased from the admin tools, so both spellings are accepted.
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    category_id: Optional[str] = Field(default=None, alias="categoryId")
    completed_count: Optional[int] = Field(default=None, alias="completedCount")
    consecutive_months: Optional[int] = Field(default=None, alias="consecutiveMonths")
    family_completed_count: Optional[int] = Field(default=None, alias="familyCompletedCount")
    amount: Optional[Decimal] = None
    action_type: Optional[str] = Field(default=None, alias="actionType")


class Badge(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    badge_type: BadgeType
    condition_type: Optional[str] = None
    condition_value: BadgeCondition = Field(default_factory=BadgeCondition)
    status: CategoryStatus = CategoryStatus.ACTIVE

    @field_validator('condition_value', mode='before')
    @classmethod
    def default_condition(cls, v):
        return v if v is not None else {}


class UserBadge(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    badge_id: str
    issue_type: BadgeIssueType = BadgeIssueType.AUTO
    issued_by: Optional[str] = None
    issued_at: datetime


class BadgeWithStatus(Badge):
    """Badge as listed to a user, flagged with whether they hold it."""
    earned: bool = False
    issued_at: Optional[datetime] = None
