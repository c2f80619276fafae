from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from missionhub.core.constants import FamilyGroupStatus, MAX_FAMILY_MEMBERS


class FamilyGroup(BaseModel):
    """Household sharing missions; at most two members."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by: str
    status: FamilyGroupStatus = FamilyGroupStatus.ACTIVE
    member_ids: list[str] = Field(default_factory=list, max_length=MAX_FAMILY_MEMBERS)
    created_at: Optional[datetime] = None

    def partner_of(self, user_id: str) -> Optional[str]:
        for member_id in self.member_ids:
            if member_id != user_id:
                return member_id
        return None
