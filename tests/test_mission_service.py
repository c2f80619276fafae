import unittest
from datetime import date
from decimal import Decimal

from missionhub.core.constants import MissionLevel, MissionStatus, MissionType
from missionhub.core.exceptions import (
    CategoryNotFoundException,
    ForbiddenMissionAccessException,
    InvalidTransitionException,
    MissionImmutableException,
    MissionNotFoundException,
    ParentMissionNotFoundException,
    TemplateNotFoundException,
    TransactionsNotFoundException,
)
from missionhub.events.bus import EventBus
from missionhub.events.types import EventType
from missionhub.schemas.catalog import Category, MissionTemplate
from missionhub.schemas.family import FamilyGroup
from missionhub.schemas.mission import MissionFilter
from missionhub.services.mission_service import MissionService
from missionhub.services.realtime_notifier import InMemoryConnectionRegistry, RealtimeNotifier
from tests.fakes import InMemoryStore, fake_uow_factory, make_mission, make_transaction

DUE = date(2030, 6, 30)


class TestMissionService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryStore()
        self.store.categories["cat-home"] = Category(id="cat-home", name="Home", display_order=2)
        self.store.categories["cat-travel"] = Category(id="cat-travel", name="Travel", display_order=1)
        self.store.templates["tpl-1"] = MissionTemplate(id="tpl-1", category_id="cat-home", name="Deposit")
        self.store.families["fam-1"] = FamilyGroup(id="fam-1", created_by="user-a", member_ids=["user-a", "user-b"])

        self.bus = EventBus()
        self.events = []
        for event_type in EventType:
            self.bus.subscribe(event_type, self.events.append)
        self.notifier = RealtimeNotifier(InMemoryConnectionRegistry(), heartbeat_seconds=60)
        self.service = MissionService(fake_uow_factory(self.store), self.bus, notifier=self.notifier)

    async def asyncTearDown(self):
        await self.bus.close()

    async def _event_types(self):
        await self.bus.drain()
        return [event.event_type for event in self.events]

    async def test_create_mission_defaults_and_event(self):
        mission = await self.service.create_mission("user-a", "cat-home", "New flat", Decimal("2500"), DUE)

        self.assertEqual(mission.status, MissionStatus.PENDING)
        self.assertEqual(mission.current_amount, Decimal("0.00"))
        self.assertEqual(mission.goal_amount, Decimal("2500.00"))
        self.assertEqual(mission.mission_type, MissionType.CUSTOM)
        self.assertEqual(mission.mission_level, MissionLevel.MAIN)
        self.assertIsNone(mission.family_group_id)
        self.assertIn(mission.id, self.store.missions)
        self.assertEqual(await self._event_types(), [EventType.MISSION_CREATED])

    async def test_create_from_template_counts_usage(self):
        mission = await self.service.create_mission(
            "user-a", "cat-home", "Deposit", Decimal("100"), DUE, template_id="tpl-1"
        )

        self.assertEqual(mission.mission_type, MissionType.TEMPLATE)
        self.assertEqual(self.store.templates["tpl-1"].usage_count, 1)

    async def test_create_shared_with_family(self):
        mission = await self.service.create_mission(
            "user-a", "cat-home", "Sofa", Decimal("800"), DUE, share_with_family=True
        )
        self.assertEqual(mission.family_group_id, "fam-1")

    async def test_create_rejects_unknown_references(self):
        with self.assertRaises(CategoryNotFoundException):
            await self.service.create_mission("user-a", "cat-none", "X", Decimal("1"), DUE)
        with self.assertRaises(TemplateNotFoundException):
            await self.service.create_mission("user-a", "cat-home", "X", Decimal("1"), DUE, template_id="tpl-none")
        with self.assertRaises(ParentMissionNotFoundException):
            await self.service.create_mission("user-a", "cat-home", "X", Decimal("1"), DUE, parent_mission_id="none")
        self.assertEqual(self.store.missions, {})

    async def test_sub_missions_nest_one_level(self):
        parent = make_mission(self.store)
        child = await self.service.create_mission(
            "user-a", "cat-home", "Monthly", Decimal("100"), DUE, parent_mission_id=parent.id
        )
        self.assertEqual(child.mission_level, MissionLevel.MONTHLY)

        with self.assertRaises(ParentMissionNotFoundException):
            await self.service.create_mission(
                "user-a", "cat-home", "Weekly", Decimal("10"), DUE, parent_mission_id=child.id
            )

    async def test_update_applies_sent_fields_only(self):
        mission = make_mission(self.store, description="keep me")

        updated = await self.service.update_mission("user-a", mission.id, {"name": "Renamed", "goal_amount": None})

        self.assertEqual(updated.name, "Renamed")
        self.assertEqual(updated.description, "keep me")
        self.assertEqual(updated.goal_amount, mission.goal_amount)
        self.assertEqual(await self._event_types(), [EventType.MISSION_UPDATED])

    async def test_lowering_goal_can_complete_mission(self):
        mission = make_mission(self.store, goal_amount=Decimal("1000"))
        make_transaction(self.store, "600", mission_id=mission.id)

        updated = await self.service.update_mission("user-a", mission.id, {"goal_amount": Decimal("500")})

        self.assertEqual(updated.status, MissionStatus.COMPLETED)
        self.assertEqual(
            await self._event_types(),
            [EventType.MISSION_UPDATED, EventType.MISSION_STATUS_CHANGED, EventType.MISSION_COMPLETED],
        )

    async def test_update_rules(self):
        completed = make_mission(self.store, status=MissionStatus.COMPLETED)
        partner_owned = make_mission(self.store, user_id="user-b")

        with self.assertRaises(MissionImmutableException):
            await self.service.update_mission("user-a", completed.id, {"name": "Nope"})
        with self.assertRaises(ForbiddenMissionAccessException):
            await self.service.update_mission("user-a", partner_owned.id, {"name": "Nope"})
        with self.assertRaises(MissionNotFoundException):
            await self.service.update_mission("user-a", "missing", {"name": "Nope"})
        self.assertEqual(await self._event_types(), [])

    async def test_transition_status_persists_and_publishes(self):
        mission = make_mission(self.store, status=MissionStatus.PENDING)

        result = await self.service.transition_status("user-a", mission.id, MissionStatus.IN_PROGRESS)

        self.assertEqual(result.status, MissionStatus.IN_PROGRESS)
        self.assertEqual(self.store.missions[mission.id].status, MissionStatus.IN_PROGRESS)
        self.assertIsNotNone(self.store.missions[mission.id].start_date)
        self.assertEqual(await self._event_types(), [EventType.MISSION_STATUS_CHANGED])

    async def test_invalid_transition_changes_nothing(self):
        mission = make_mission(self.store, status=MissionStatus.COMPLETED)

        with self.assertRaises(InvalidTransitionException):
            await self.service.transition_status("user-a", mission.id, MissionStatus.IN_PROGRESS)

        self.assertEqual(self.store.missions[mission.id].status, MissionStatus.COMPLETED)
        self.assertEqual(self.store.commits, 0)

    async def test_link_transactions_publishes_after_commit(self):
        mission = make_mission(self.store, goal_amount=Decimal("1000000"))
        deposit = make_transaction(self.store, "1000000")

        result = await self.service.link_transactions("user-a", mission.id, [deposit.id])

        self.assertEqual(result.status, MissionStatus.COMPLETED)
        self.assertEqual(self.store.commits, 1)
        self.assertEqual(
            await self._event_types(),
            [
                EventType.TRANSACTIONS_LINKED,
                EventType.MISSION_UPDATED,
                EventType.MISSION_STATUS_CHANGED,
                EventType.MISSION_COMPLETED,
            ],
        )

    async def test_link_with_unknown_transaction_publishes_nothing(self):
        mission = make_mission(self.store)
        deposit = make_transaction(self.store, "10")

        with self.assertRaises(TransactionsNotFoundException):
            await self.service.link_transactions("user-a", mission.id, [deposit.id, "ghost"])

        self.assertEqual(self.store.missions[mission.id].current_amount, Decimal("0.00"))
        self.assertEqual(self.store.commits, 0)
        self.assertEqual(await self._event_types(), [])

    async def test_household_member_can_read_shared_mission(self):
        shared = make_mission(self.store, user_id="user-b", family_group_id="fam-1")
        private = make_mission(self.store, user_id="user-b")

        self.assertEqual((await self.service.get_mission("user-a", shared.id)).id, shared.id)
        with self.assertRaises(ForbiddenMissionAccessException):
            await self.service.get_mission("user-a", private.id)
        with self.assertRaises(MissionNotFoundException):
            await self.service.get_mission("user-a", "missing")

    async def test_list_missions_includes_household(self):
        own = make_mission(self.store)
        shared = make_mission(self.store, user_id="user-b", family_group_id="fam-1")
        make_mission(self.store, user_id="user-b")

        with_family = await self.service.list_missions("user-a")
        own_only = await self.service.list_missions("user-a", MissionFilter(include_family=False))

        self.assertCountEqual([m.id for m in with_family], [own.id, shared.id])
        self.assertEqual([m.id for m in own_only], [own.id])

    async def test_summary(self):
        make_mission(self.store, status=MissionStatus.COMPLETED, goal_amount=Decimal("100"), current_amount=Decimal("100"))
        make_mission(self.store, status=MissionStatus.IN_PROGRESS, goal_amount=Decimal("300"), current_amount=Decimal("50"))
        make_mission(self.store, status=MissionStatus.PENDING, goal_amount=Decimal("100"))
        make_mission(self.store, user_id="user-b", goal_amount=Decimal("999"))

        summary = await self.service.get_summary("user-a")

        self.assertEqual(summary.total_missions, 3)
        self.assertEqual(summary.completed_missions, 1)
        self.assertEqual(summary.in_progress_missions, 1)
        self.assertEqual(summary.pending_missions, 1)
        self.assertEqual(summary.total_goal_amount, Decimal("500.00"))
        self.assertEqual(summary.total_current_amount, Decimal("150.00"))
        self.assertEqual(summary.overall_progress, 30)

    async def test_delete_cascades_and_unlinks(self):
        parent = make_mission(self.store)
        child = make_mission(self.store, parent_mission_id=parent.id)
        parent_txn = make_transaction(self.store, "10", mission_id=parent.id)
        child_txn = make_transaction(self.store, "20", mission_id=child.id)

        await self.service.delete_mission("user-a", parent.id)

        self.assertEqual(self.store.missions, {})
        self.assertIsNone(self.store.transactions[parent_txn.id].mission_id)
        self.assertIsNone(self.store.transactions[child_txn.id].mission_id)

    async def test_catalog_listing(self):
        categories = await self.service.list_categories()
        templates = await self.service.list_templates("cat-travel")

        self.assertEqual([c.id for c in categories], ["cat-travel", "cat-home"])
        self.assertEqual(templates, [])

    async def test_subscribe_realtime_uses_actor_household(self):
        stream = await self.service.subscribe_realtime("user-a")

        self.assertEqual(await self.notifier._registry.household_members("fam-1"), {"user-a"})
        await self.notifier.unsubscribe("user-a")
        await stream.aclose()

    async def test_subscribe_realtime_ignores_foreign_household(self):
        self.store.families["fam-2"] = FamilyGroup(id="fam-2", created_by="user-c", member_ids=["user-c"])

        stream = await self.service.subscribe_realtime("user-a", "fam-2")

        self.assertEqual(await self.notifier._registry.household_members("fam-2"), set())
        self.assertEqual(await self.notifier._registry.household_members("fam-1"), {"user-a"})
        await self.notifier.unsubscribe("user-a")
        await stream.aclose()

    async def test_starting_a_funded_pending_mission_completes_it(self):
        mission = make_mission(self.store, status=MissionStatus.PENDING, goal_amount=Decimal("100"))
        deposit = make_transaction(self.store, "150")
        await self.service.link_transactions("user-a", mission.id, [deposit.id])
        self.assertEqual(self.store.missions[mission.id].status, MissionStatus.PENDING)
        await self.bus.drain()
        self.events.clear()

        result = await self.service.transition_status("user-a", mission.id, MissionStatus.IN_PROGRESS)

        self.assertEqual(result.status, MissionStatus.COMPLETED)
        self.assertIsNotNone(self.store.missions[mission.id].completed_at)
        self.assertEqual(
            await self._event_types(),
            [EventType.MISSION_STATUS_CHANGED, EventType.MISSION_STATUS_CHANGED, EventType.MISSION_COMPLETED],
        )
        self.assertEqual(self.events[0].new_status, MissionStatus.IN_PROGRESS)

    async def test_write_paths_lock_the_mission(self):
        mission = make_mission(self.store)
        deposit = make_transaction(self.store, "10")

        await self.service.update_mission("user-a", mission.id, {"name": "Renamed"})
        await self.service.link_transactions("user-a", mission.id, [deposit.id])
        await self.service.transition_status("user-a", mission.id, MissionStatus.FAILED)

        self.assertEqual(self.store.locked, [mission.id] * 3)


if __name__ == "__main__":
    unittest.main()
