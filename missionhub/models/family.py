"""Household (family group) SQLAlchemy models."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from missionhub.core.constants import FamilyGroupStatus
from missionhub.core.database import Base
from missionhub.models._types import new_id, utcnow


class FamilyGroup(Base):
    __tablename__ = "family_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=FamilyGroupStatus.ACTIVE)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    members: Mapped[list["FamilyGroupMember"]] = relationship(
        "FamilyGroupMember",
        back_populates="family_group",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def member_ids(self) -> list[str]:
        return [member.user_id for member in self.members]

    def __repr__(self) -> str:
        return f"<FamilyGroup(id={self.id}, status={self.status})>"


class FamilyGroupMember(Base):
    """Membership row; a user belongs to at most one household."""

    __tablename__ = "family_group_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    family_group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("family_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    family_group: Mapped["FamilyGroup"] = relationship("FamilyGroup", back_populates="members")
