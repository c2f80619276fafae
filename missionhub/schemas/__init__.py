"""Pydantic schemas for domain objects and request/response validation."""
from missionhub.schemas.badge import Badge, BadgeCondition, BadgeWithStatus, UserBadge
from missionhub.schemas.catalog import Category, MissionTemplate
from missionhub.schemas.family import FamilyGroup
from missionhub.schemas.mission import (
    LinkTransactionsRequest,
    Mission,
    MissionCreateRequest,
    MissionFilter,
    MissionResponse,
    MissionStatusUpdateRequest,
    MissionSummary,
    MissionUpdateRequest,
)
from missionhub.schemas.realtime import RealtimeMessage
from missionhub.schemas.transaction import Transaction
