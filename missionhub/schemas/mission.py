"""Mission domain models and request/response schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from missionhub.core.constants import MissionLevel, MissionStatus, MissionType
from missionhub.utils.money import to_decimal
from missionhub.utils.progress import days_remaining, progress_percent, remaining_amount


class Mission(BaseModel):
    """A savings mission as seen by the services.

    ``current_amount`` is owned by the transaction aggregator; other code paths
    never assign it.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    family_group_id: Optional[str] = None
    parent_mission_id: Optional[str] = None
    category_id: str
    template_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    goal_amount: Decimal
    current_amount: Decimal = Decimal("0.00")
    mission_type: MissionType = MissionType.CUSTOM
    mission_level: MissionLevel = MissionLevel.MAIN
    status: MissionStatus = MissionStatus.PENDING
    start_date: Optional[date] = None
    due_date: date
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == MissionStatus.COMPLETED

    @property
    def is_top_level(self) -> bool:
        return self.parent_mission_id is None


class MissionResponse(Mission):
    """Mission with its derived progress figures."""
    progress: int = 0
    remaining_amount: Decimal = Decimal("0.00")
    days_remaining: int = 0

    @classmethod
    def from_mission(cls, mission: Mission, today: date) -> "MissionResponse":
        return cls(
            **mission.model_dump(),
            progress=progress_percent(mission.current_amount, mission.goal_amount),
            remaining_amount=remaining_amount(mission.current_amount, mission.goal_amount),
            days_remaining=days_remaining(mission.due_date, today),
        )


class MissionCreateRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    category_id: str
    name: str = Field(max_length=100)
    goal_amount: Decimal = Field(gt=0)
    due_date: date
    template_id: Optional[str] = None
    parent_mission_id: Optional[str] = None
    start_date: Optional[date] = None
    description: Optional[str] = None
    mission_level: Optional[MissionLevel] = None
    share_with_family: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Mission name must not be empty")
        return v

    @field_validator('goal_amount')
    @classmethod
    def validate_goal_amount(cls, v: Decimal) -> Decimal:
        return to_decimal(v)

    @model_validator(mode='after')
    def validate_dates(self):
        if self.start_date and self.due_date < self.start_date:
            raise ValueError("Due date must not be before the start date")
        return self


class MissionUpdateRequest(BaseModel):
    """Partial update; only the fields that were sent are applied."""
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    goal_amount: Optional[Decimal] = Field(default=None, gt=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    mission_level: Optional[MissionLevel] = None
    share_with_family: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Mission name must not be empty")
        return v


class MissionStatusUpdateRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')
    status: MissionStatus


class LinkTransactionsRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')
    transaction_ids: list[str] = Field(min_length=1)


class MissionFilter(BaseModel):
    """Query filters for listing missions."""
    status: Optional[MissionStatus] = None
    category_id: Optional[str] = None
    mission_level: Optional[MissionLevel] = None
    parent_mission_id: Optional[str] = None
    top_level_only: bool = False
    include_family: bool = True


class MissionSummary(BaseModel):
    total_missions: int = 0
    pending_missions: int = 0
    in_progress_missions: int = 0
    completed_missions: int = 0
    failed_missions: int = 0
    total_goal_amount: Decimal = Decimal("0.00")
    total_current_amount: Decimal = Decimal("0.00")
    overall_progress: int = 0
