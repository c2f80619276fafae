"""Mission, life-cycle category and mission template SQLAlchemy models."""
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from missionhub.core.constants import CategoryStatus, GoalType, MissionLevel, MissionStatus, MissionType
from missionhub.core.database import Base
from missionhub.models._types import new_id, utcnow


class LifeCycleCategory(Base):
    __tablename__ = "life_cycle_categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=CategoryStatus.ACTIVE)

    def __repr__(self) -> str:
        return f"<LifeCycleCategory(id={self.id}, name={self.name})>"


class MissionTemplate(Base):
    __tablename__ = "mission_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("life_cycle_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    goal_type: Mapped[str] = mapped_column(String(20), nullable=False, default=GoalType.AMOUNT)
    default_goal_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=CategoryStatus.ACTIVE)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<MissionTemplate(id={self.id}, name={self.name})>"


class Mission(Base):
    """Savings mission owned by one user and optionally shared with their household."""

    __tablename__ = "missions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    family_group_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("family_groups.id", ondelete="SET NULL"), nullable=True, index=True
    )
    parent_mission_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("missions.id", ondelete="CASCADE"), nullable=True, index=True
    )
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("life_cycle_categories.id"), nullable=False, index=True
    )
    template_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("mission_templates.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    goal_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    mission_type: Mapped[str] = mapped_column(String(20), nullable=False, default=MissionType.CUSTOM)
    mission_level: Mapped[str] = mapped_column(String(20), nullable=False, default=MissionLevel.MAIN)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MissionStatus.PENDING, index=True
    )  # pending, in_progress, completed, failed
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Mission(id={self.id}, name={self.name}, status={self.status})>"
