import json
import tempfile
import unittest
from pathlib import Path

from core.models import AppStateSnapshot, DailyChallenge
from services.notifications import (
    NOTIFICATION_TITLE,
    NotificationContext,
    NotificationManager,
    Notifier,
    QueueNotifier,
    TrackingStore,
)
from tests.fakes import FixedClock

LEADERBOARD_USER = {"leetUsername": "alice"}
INCOMPLETE = {"dailyComplete": False}


class StubDailyService:
    def __init__(self, challenge=None):
        self.challenge = challenge
        self.calls = 0

    async def get_todays_challenge(self):
        self.calls += 1
        return self.challenge


class UnsupportedNotifier(Notifier):
    def __init__(self):
        self.shown = []

    def is_supported(self):
        return False

    async def show(self, title, body):
        self.shown.append((title, body))


class AppStateSnapshotTest(unittest.TestCase):
    def test_welcome_does_not_notify(self) -> None:
        self.assertFalse(AppStateSnapshot.welcome().should_notify())

    def test_leaderboard_with_incomplete_daily(self) -> None:
        state = AppStateSnapshot(step="leaderboard", user_data=LEADERBOARD_USER, daily_data=INCOMPLETE)
        self.assertTrue(state.should_notify())

    def test_missing_daily_flag_does_not_notify(self) -> None:
        state = AppStateSnapshot(step="leaderboard", user_data=LEADERBOARD_USER, daily_data={})
        self.assertFalse(state.should_notify())

    def test_missing_username_does_not_notify(self) -> None:
        state = AppStateSnapshot(step="leaderboard", user_data={"leetUsername": ""}, daily_data=INCOMPLETE)
        self.assertFalse(state.should_notify())

    def test_capture_records_timestamp(self) -> None:
        state = AppStateSnapshot.capture("leaderboard", LEADERBOARD_USER, None, FixedClock()())
        self.assertEqual(state.to_dict()["lastUpdated"], "2024-05-10T12:00:00+00:00")


class TrackingStoreTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / "tracking.json"
        self.tracking = TrackingStore(self.path)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_missing_file_is_empty(self) -> None:
        self.assertEqual(self.tracking.load(), {})

    def test_save_creates_directories(self) -> None:
        self.tracking.save({"2024-05-10": True})
        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8")), {"2024-05-10": True})
        self.assertEqual(self.tracking.load(), {"2024-05-10": True})

    def test_corrupt_file_is_empty(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        self.assertEqual(self.tracking.load(), {})

    def test_prune_keeps_last_week(self) -> None:
        tracking = {"2024-05-10": True, "2024-05-03": True, "2024-05-02": True, "2024-04-30": True}
        self.assertEqual(TrackingStore.prune(tracking, "2024-05-10"), {"2024-05-10": True, "2024-05-03": True})


class QueueNotifierTest(unittest.IsolatedAsyncioTestCase):
    def test_base_notifier_requires_show(self) -> None:
        with self.assertRaises(TypeError):
            Notifier()

    async def test_drain_empties_queue(self) -> None:
        notifier = QueueNotifier()
        await notifier.show("title", "body")
        self.assertEqual(notifier.drain(), [{"title": "title", "body": "body"}])
        self.assertEqual(notifier.drain(), [])

    async def test_queue_is_bounded(self) -> None:
        notifier = QueueNotifier(max_pending=2)
        for i in range(5):
            await notifier.show(f"t{i}", "b")
        self.assertEqual([n["title"] for n in notifier.drain()], ["t3", "t4"])


class NotificationManagerTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.tracking = TrackingStore(Path(self.tmp.name) / "tracking.json")
        self.clock = FixedClock()
        self.daily = StubDailyService(DailyChallenge(date="2024-05-10", slug="two-sum", title="Two Sum"))
        self.notifier = QueueNotifier()
        self.manager = NotificationManager(
            self.daily, self.tracking, self.notifier, context=NotificationContext(self.clock),
        )

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def on_leaderboard(self) -> None:
        self.manager.update_app_state("leaderboard", LEADERBOARD_USER, INCOMPLETE)

    async def test_notifies_once_per_day(self) -> None:
        self.on_leaderboard()

        await self.manager.check_for_new_daily_challenge()
        await self.manager.check_for_new_daily_challenge()

        sent = self.notifier.drain()
        self.assertEqual(sent, [{
            "title": NOTIFICATION_TITLE,
            "body": "Today's problem: Two Sum\nEarn 200 XP by solving it!",
        }])
        self.assertEqual(self.tracking.load(), {"2024-05-10": True})
        self.assertEqual(self.daily.calls, 1)

    async def test_already_tracked_day_is_not_resent(self) -> None:
        self.tracking.save({"2024-05-10": True})
        self.on_leaderboard()

        await self.manager.check_for_new_daily_challenge()

        self.assertEqual(self.notifier.drain(), [])

    async def test_ineligible_state_marks_checked(self) -> None:
        await self.manager.check_for_new_daily_challenge()

        self.assertEqual(self.manager.context.last_checked_date, "2024-05-10")
        self.assertEqual(self.daily.calls, 0)
        self.assertEqual(self.tracking.load(), {})

    async def test_completed_daily_does_not_notify(self) -> None:
        self.manager.update_app_state("leaderboard", LEADERBOARD_USER, {"dailyComplete": True})
        await self.manager.check_for_new_daily_challenge()
        self.assertEqual(self.notifier.drain(), [])

    async def test_no_challenge_today(self) -> None:
        self.daily.challenge = None
        self.on_leaderboard()

        await self.manager.check_for_new_daily_challenge()

        self.assertEqual(self.notifier.drain(), [])
        self.assertIsNone(self.manager.context.last_checked_date)

    async def test_unsupported_notifier_records_nothing(self) -> None:
        notifier = UnsupportedNotifier()
        self.manager.notifier = notifier
        self.on_leaderboard()

        await self.manager.check_for_new_daily_challenge()

        self.assertEqual(notifier.shown, [])
        self.assertEqual(self.tracking.load(), {})
        self.assertEqual(self.manager.context.last_checked_date, "2024-05-10")

    async def test_manual_trigger_resends(self) -> None:
        self.on_leaderboard()
        await self.manager.check_for_new_daily_challenge()
        self.notifier.drain()

        result = await self.manager.test_notification()

        self.assertEqual(result, {"success": True})
        self.assertEqual(len(self.notifier.drain()), 1)

    async def test_old_entries_pruned_on_save(self) -> None:
        self.tracking.save({"2024-04-01": True, "2024-05-05": True})
        self.on_leaderboard()

        await self.manager.check_for_new_daily_challenge()

        self.assertEqual(self.tracking.load(), {"2024-05-05": True, "2024-05-10": True})

    async def test_errors_are_swallowed(self) -> None:
        async def broken():
            raise RuntimeError("store down")

        self.daily.get_todays_challenge = broken
        self.on_leaderboard()

        await self.manager.check_for_new_daily_challenge()

        self.assertEqual(self.notifier.drain(), [])

    async def test_clear_app_state(self) -> None:
        self.on_leaderboard()
        self.assertEqual(self.manager.clear_app_state(), {"success": True})
        self.assertEqual(self.manager.context.app_state.step, "welcome")

    async def test_scheduler_jobs(self) -> None:
        manager = NotificationManager(self.daily, self.tracking, self.notifier)
        manager.start()
        try:
            self.assertIsNotNone(manager.scheduler.get_job("daily_challenge_startup_check"))
            interval = manager.scheduler.get_job("daily_challenge_check")
            self.assertEqual(interval.trigger.interval.total_seconds(), 3600)
        finally:
            manager.shutdown()


if __name__ == "__main__":
    unittest.main()
