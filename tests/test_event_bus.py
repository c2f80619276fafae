import asyncio
import unittest
from datetime import date
from decimal import Decimal

from missionhub.events.bus import EventBus
from missionhub.events.types import EventType, MissionCreated, MissionUpdated
from missionhub.schemas.mission import Mission


def _event(cls=MissionCreated):
    mission = Mission(
        id="m-1",
        user_id="user-a",
        category_id="cat-1",
        name="Car",
        goal_amount=Decimal("100.00"),
        due_date=date(2030, 1, 1),
    )
    return cls(actor_id="user-a", mission=mission)


class TestEventBus(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.bus = EventBus()

    async def asyncTearDown(self):
        await self.bus.close()

    async def test_publish_without_subscribers_drops_event(self):
        with self.assertLogs("missionhub.events.bus", level="DEBUG") as logs:
            self.assertEqual(self.bus.publish(_event()), 0)
        self.assertIn("event dropped", logs.output[0])
        self.assertEqual(self.bus.pending_count, 0)

    async def test_publish_does_not_wait_for_subscribers(self):
        received = []
        release = asyncio.Event()

        async def slow_handler(event):
            await release.wait()
            received.append(event)

        self.bus.subscribe(EventType.MISSION_CREATED, slow_handler)
        scheduled = self.bus.publish(_event())

        self.assertEqual(scheduled, 1)
        self.assertEqual(received, [])
        release.set()
        await self.bus.drain()
        self.assertEqual(len(received), 1)

    async def test_failing_subscriber_does_not_affect_others(self):
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        def sync_handler(event):
            received.append(("sync", event.event_type))

        async def async_handler(event):
            received.append(("async", event.event_type))

        self.bus.subscribe(EventType.MISSION_CREATED, broken)
        self.bus.subscribe(EventType.MISSION_CREATED, sync_handler)
        self.bus.subscribe(EventType.MISSION_CREATED, async_handler)

        with self.assertLogs("missionhub.events.bus", level="ERROR"):
            self.bus.publish(_event())
            await self.bus.drain()

        self.assertCountEqual(
            received,
            [("sync", EventType.MISSION_CREATED), ("async", EventType.MISSION_CREATED)],
        )

    async def test_subscribers_only_receive_their_event_type(self):
        created, updated = [], []
        self.bus.subscribe(EventType.MISSION_CREATED, created.append)
        self.bus.subscribe(EventType.MISSION_UPDATED, updated.append)

        self.bus.publish(_event(MissionUpdated))
        await self.bus.drain()

        self.assertEqual(created, [])
        self.assertEqual(len(updated), 1)

    async def test_unsubscribe_stops_delivery(self):
        received = []
        self.bus.subscribe(EventType.MISSION_CREATED, received.append)
        self.bus.unsubscribe(EventType.MISSION_CREATED, received.append)

        self.assertEqual(self.bus.publish(_event()), 0)

    async def test_drain_waits_for_events_published_by_subscribers(self):
        received = []

        async def relay(event):
            await asyncio.sleep(0)
            self.bus.publish(_event(MissionUpdated))

        async def sink(event):
            await asyncio.sleep(0.01)
            received.append(event)

        self.bus.subscribe(EventType.MISSION_CREATED, relay)
        self.bus.subscribe(EventType.MISSION_UPDATED, sink)

        self.bus.publish(_event())
        await self.bus.drain()

        self.assertEqual(len(received), 1)
        self.assertEqual(self.bus.pending_count, 0)

    async def test_close_cancels_pending_deliveries(self):
        started = asyncio.Event()
        finished = []

        async def never_finishes(event):
            started.set()
            await asyncio.sleep(3600)
            finished.append(event)

        self.bus.subscribe(EventType.MISSION_CREATED, never_finishes)
        self.bus.publish(_event())
        await started.wait()

        await self.bus.close()

        self.assertEqual(finished, [])
        self.assertEqual(self.bus.pending_count, 0)
        self.assertEqual(self.bus.publish(_event()), 0)


if __name__ == "__main__":
    unittest.main()
