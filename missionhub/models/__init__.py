"""SQLAlchemy ORM models."""
from missionhub.models.mission import LifeCycleCategory, MissionTemplate, Mission
from missionhub.models.transaction import Transaction
from missionhub.models.badge import Badge, UserBadge
from missionhub.models.family import FamilyGroup, FamilyGroupMember

__all__ = [
    "LifeCycleCategory",
    "MissionTemplate",
    "Mission",
    "Transaction",
    "Badge",
    "UserBadge",
    "FamilyGroup",
    "FamilyGroupMember",
]
