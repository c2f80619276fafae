"""Messages pushed to live subscribers."""
import json
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from missionhub.core.constants import RealtimeMessageType


class RealtimeMessage(BaseModel):
    type: RealtimeMessageType
    data: Optional[Any] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def heartbeat(cls) -> "RealtimeMessage":
        now = datetime.now(timezone.utc)
        return cls(type=RealtimeMessageType.HEARTBEAT, data={"timestamp": now.isoformat()}, timestamp=now)

    def to_sse(self) -> str:
        """Encode as a single server-sent event frame."""
        return f"data: {json.dumps(self.model_dump(mode='json'))}\n\n"


class RealtimeStatus(BaseModel):
    connected_users: int
    heartbeat_seconds: float
