"""In-memory unit of work and repositories for service tests."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Optional

from missionhub.core.constants import BadgeIssueType, BadgeType, CategoryStatus, MissionStatus
from missionhub.core.exceptions import AlreadyAwardedException
from missionhub.interfaces.badge import IBadgeRepository, IUserBadgeRepository
from missionhub.interfaces.catalog import ICategoryRepository, ITemplateRepository
from missionhub.interfaces.family import IFamilyGroupRepository
from missionhub.interfaces.mission import IMissionRepository
from missionhub.interfaces.transaction import ITransactionRepository
from missionhub.interfaces.unit_of_work import IUnitOfWork
from missionhub.schemas.badge import Badge, UserBadge
from missionhub.schemas.catalog import Category, MissionTemplate
from missionhub.schemas.family import FamilyGroup
from missionhub.schemas.mission import Mission, MissionFilter
from missionhub.schemas.transaction import Transaction
from missionhub.utils.money import sum_amounts


class InMemoryStore:
    """Shared state behind every fake unit of work. Writes are visible immediately."""

    def __init__(self):
        self.missions: dict[str, Mission] = {}
        self.transactions: dict[str, Transaction] = {}
        self.categories: dict[str, Category] = {}
        self.templates: dict[str, MissionTemplate] = {}
        self.badges: dict[str, Badge] = {}
        self.user_badges: list[UserBadge] = []
        self.families: dict[str, FamilyGroup] = {}
        self.commits = 0
        self.locked: list[str] = []
        self._seq = 0

    def next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}-{self._seq}"


class FakeMissionRepository(IMissionRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, mission_id: str) -> Optional[Mission]:
        mission = self._store.missions.get(mission_id)
        return mission.model_copy() if mission else None

    async def get_for_update(self, mission_id: str) -> Optional[Mission]:
        self._store.locked.append(mission_id)
        return await self.get_by_id(mission_id)

    async def add(self, mission: Mission) -> Mission:
        now = datetime.now(timezone.utc)
        stored = mission.model_copy(update={"created_at": now, "updated_at": now})
        self._store.missions[stored.id] = stored
        return stored.model_copy()

    async def save(self, mission: Mission) -> Mission:
        if mission.id not in self._store.missions:
            raise LookupError(f"Mission {mission.id} does not exist")
        stored = mission.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        self._store.missions[stored.id] = stored
        return stored.model_copy()

    async def delete(self, mission_id: str) -> None:
        for child_id in [m.id for m in self._store.missions.values() if m.parent_mission_id == mission_id]:
            del self._store.missions[child_id]
        self._store.missions.pop(mission_id, None)

    async def list_missions(self, user_id, family_group_id, filters: MissionFilter) -> list[Mission]:
        result = []
        for mission in self._store.missions.values():
            visible = mission.user_id == user_id or (
                filters.include_family and family_group_id and mission.family_group_id == family_group_id
            )
            if not visible:
                continue
            if filters.status and mission.status != filters.status:
                continue
            if filters.category_id and mission.category_id != filters.category_id:
                continue
            if filters.mission_level and mission.mission_level != filters.mission_level:
                continue
            if filters.parent_mission_id and mission.parent_mission_id != filters.parent_mission_id:
                continue
            if not filters.parent_mission_id and filters.top_level_only and mission.parent_mission_id:
                continue
            result.append(mission.model_copy())
        return sorted(result, key=lambda m: m.created_at, reverse=True)

    async def list_children(self, parent_mission_id: str) -> list[Mission]:
        return [m.model_copy() for m in self._store.missions.values() if m.parent_mission_id == parent_mission_id]

    def _completed(self):
        return [m for m in self._store.missions.values() if m.status == MissionStatus.COMPLETED]

    async def count_completed(self, user_id: str, category_id: Optional[str] = None) -> int:
        return sum(
            1 for m in self._completed()
            if m.user_id == user_id and (category_id is None or m.category_id == category_id)
        )

    async def list_completion_times(self, user_id: str) -> list[datetime]:
        times = [m.completed_at for m in self._completed() if m.user_id == user_id and m.completed_at]
        return sorted(times, reverse=True)

    async def count_completed_in_family(self, family_group_id: str) -> int:
        return sum(1 for m in self._completed() if m.family_group_id == family_group_id)

    async def count_by_user(self, user_id: str) -> int:
        return sum(1 for m in self._store.missions.values() if m.user_id == user_id)

    async def total_saved(self, user_id: str) -> Decimal:
        return sum_amounts(m.current_amount for m in self._store.missions.values() if m.user_id == user_id)


class FakeTransactionRepository(ITransactionRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_ids(self, transaction_ids: Iterable[str]) -> list[Transaction]:
        return [self._store.transactions[i].model_copy() for i in transaction_ids if i in self._store.transactions]

    async def link_to_mission(self, transaction_ids: Iterable[str], mission_id: str) -> None:
        for transaction_id in transaction_ids:
            self._store.transactions[transaction_id].mission_id = mission_id

    async def list_by_mission(self, mission_id: str) -> list[Transaction]:
        return [t.model_copy() for t in self._store.transactions.values() if t.mission_id == mission_id]

    async def unlink_mission(self, mission_id: str) -> int:
        count = 0
        for transaction in self._store.transactions.values():
            if transaction.mission_id == mission_id:
                transaction.mission_id = None
                count += 1
        return count


class FakeCategoryRepository(ICategoryRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        return self._store.categories.get(category_id)

    async def list_active(self) -> list[Category]:
        active = [c for c in self._store.categories.values() if c.status == CategoryStatus.ACTIVE]
        return sorted(active, key=lambda c: c.display_order)


class FakeTemplateRepository(ITemplateRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, template_id: str) -> Optional[MissionTemplate]:
        return self._store.templates.get(template_id)

    async def list_active(self, category_id: Optional[str] = None) -> list[MissionTemplate]:
        templates = [
            t for t in self._store.templates.values()
            if t.status == CategoryStatus.ACTIVE and (category_id is None or t.category_id == category_id)
        ]
        return sorted(templates, key=lambda t: t.usage_count, reverse=True)

    async def increment_usage(self, template_id: str) -> None:
        self._store.templates[template_id].usage_count += 1


class FakeBadgeRepository(IBadgeRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, badge_id: str) -> Optional[Badge]:
        return self._store.badges.get(badge_id)

    async def list_active(self, badge_type: Optional[BadgeType] = None) -> list[Badge]:
        return [
            b for b in self._store.badges.values()
            if b.status == CategoryStatus.ACTIVE and (badge_type is None or b.badge_type == badge_type)
        ]


class FakeUserBadgeRepository(IUserBadgeRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def award(self, user_id, badge_id, issue_type=BadgeIssueType.AUTO, issued_by=None) -> UserBadge:
        if any(ub.user_id == user_id and ub.badge_id == badge_id for ub in self._store.user_badges):
            raise AlreadyAwardedException(user_id, badge_id)
        user_badge = UserBadge(
            id=self._store.next_id("user-badge"),
            user_id=user_id,
            badge_id=badge_id,
            issue_type=issue_type,
            issued_by=issued_by,
            issued_at=datetime.now(timezone.utc),
        )
        self._store.user_badges.append(user_badge)
        return user_badge

    async def list_by_user(self, user_id: str) -> list[UserBadge]:
        return [ub for ub in self._store.user_badges if ub.user_id == user_id]


class FakeFamilyGroupRepository(IFamilyGroupRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, family_group_id: str) -> Optional[FamilyGroup]:
        return self._store.families.get(family_group_id)

    async def get_by_member(self, user_id: str) -> Optional[FamilyGroup]:
        for family in self._store.families.values():
            if user_id in family.member_ids:
                return family
        return None


class FakeUnitOfWork(IUnitOfWork):
    def __init__(self, store: InMemoryStore):
        self._store = store
        self.missions = FakeMissionRepository(store)
        self.transactions = FakeTransactionRepository(store)
        self.categories = FakeCategoryRepository(store)
        self.templates = FakeTemplateRepository(store)
        self.badges = FakeBadgeRepository(store)
        self.user_badges = FakeUserBadgeRepository(store)
        self.families = FakeFamilyGroupRepository(store)

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def commit(self) -> None:
        self._store.commits += 1

    async def rollback(self) -> None:
        return None


def fake_uow_factory(store: InMemoryStore):
    def factory() -> FakeUnitOfWork:
        return FakeUnitOfWork(store)
    return factory


def make_mission(store: InMemoryStore, **overrides) -> Mission:
    """Store a mission with sensible defaults and return a copy."""
    now = datetime.now(timezone.utc)
    values = {
        "id": store.next_id("mission"),
        "user_id": "user-a",
        "category_id": "cat-home",
        "name": "Emergency fund",
        "goal_amount": Decimal("1000000.00"),
        "current_amount": Decimal("0.00"),
        "status": MissionStatus.IN_PROGRESS,
        "due_date": now.date() + timedelta(days=365),
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    mission = Mission(**values)
    store.missions[mission.id] = mission
    return mission.model_copy()


def make_transaction(store: InMemoryStore, amount, type="deposit", mission_id=None, **overrides) -> Transaction:
    values = {
        "id": store.next_id("txn"),
        "type": type,
        "amount": Decimal(str(amount)),
        "transaction_date": datetime.now(timezone.utc),
        "mission_id": mission_id,
    }
    values.update(overrides)
    transaction = Transaction(**values)
    store.transactions[transaction.id] = transaction
    return transaction


def make_badge(store: InMemoryStore, badge_type: BadgeType, condition: dict, **overrides) -> Badge:
    values = {
        "id": store.next_id("badge"),
        "name": f"{badge_type} badge {store._seq}",
        "badge_type": badge_type,
        "condition_value": condition,
    }
    values.update(overrides)
    badge = Badge(**values)
    store.badges[badge.id] = badge
    return badge
