"""Health check schemas for monitoring application status."""
from pydantic import BaseModel, Field
from typing import Dict, Optional, Literal
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComponentHealth(BaseModel):
    """Health status of a single component."""
    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        description="Component health status"
    )
    message: Optional[str] = Field(
        default=None,
        description="Additional information about the component status"
    )
    latency_ms: Optional[float] = Field(
        default=None,
        description="Component response latency in milliseconds"
    )
    details: Optional[Dict] = Field(
        default=None,
        description="Component-specific details"
    )


class HealthCheckResponse(BaseModel):
    """Health of the database, the host and the live connection registry."""
    status: Literal["healthy", "unhealthy", "degraded"]
    timestamp: datetime = Field(default_factory=_utcnow)
    version: str
    uptime_seconds: float
    components: Dict[str, ComponentHealth]


class LivenessResponse(BaseModel):
    status: str = Field(default="alive")
    timestamp: datetime = Field(default_factory=_utcnow)
