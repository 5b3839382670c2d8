import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient

from config import AppConfig
from core.exceptions import CatalogError, UnknownEndpointError, ValidationError
from handlers.router import Dispatcher
from server.app import create_app
from services import ServiceManager
from tests.fakes import FakeCatalog, FakeValidator, FixedClock, InMemoryRecordStore, daily


class DispatcherTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.dispatcher = Dispatcher()

        async def echo(value, suffix="!"):
            return f"{value}{suffix}"

        self.dispatcher.register("echo", echo, "say")

    async def test_aliases_share_handler(self) -> None:
        self.assertEqual(await self.dispatcher.dispatch("echo", "hi"), "hi!")
        self.assertEqual(await self.dispatcher.dispatch("say", "hi", "?"), "hi?")
        self.assertEqual(self.dispatcher.names(), ["echo", "say"])

    async def test_unknown_endpoint(self) -> None:
        with self.assertRaises(UnknownEndpointError):
            await self.dispatcher.dispatch("shout", "hi")

    async def test_wrong_arity(self) -> None:
        with self.assertRaises(ValidationError):
            await self.dispatcher.dispatch("echo")
        with self.assertRaises(ValidationError):
            await self.dispatcher.dispatch("echo", 1, 2, 3)

    def test_duplicate_registration(self) -> None:
        async def other():
            return None

        with self.assertRaises(ValueError):
            self.dispatcher.register("say", other)


class ServerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        config = AppConfig(environ={
            "AWS_REGION": "us-east-1",
            "NOTIFICATIONS_ENABLED": "false",
            "DATA_DIR": self.tmp.name,
            "NOTIFICATION_TRACKING_FILE": str(Path(self.tmp.name) / "tracking.json"),
        })
        self.store = InMemoryRecordStore()
        self.catalog = FakeCatalog(details={"two-sum": {"title": "Two Sum", "titleSlug": "two-sum"}})
        self.services = ServiceManager(
            config, store=self.store, catalog=self.catalog, validator=FakeValidator(), clock=FixedClock(),
        )
        self.client = TestClient(create_app(self.services))
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        self.tmp.cleanup()

    def call(self, endpoint, *args):
        return self.client.post(f"/api/{endpoint}", json={"args": list(args)})

    def test_health(self) -> None:
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["services"], {"notifications": "stopped", "username_validation": "mock"})
        self.assertIn("get-daily-problem", body["endpoints"])
        self.assertIn("refresh-user-xp", body["endpoints"])

    def test_unknown_endpoint(self) -> None:
        response = self.call("delete-everything")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"ok": False, "result": None, "error": "Unknown endpoint: delete-everything"})

    def test_missing_arguments(self) -> None:
        self.assertEqual(self.call("get-user-data").status_code, 400)
        self.assertEqual(self.client.post("/api/get-user-data").status_code, 400)

    def test_invalid_arguments(self) -> None:
        self.assertEqual(self.call("get-user-data", "  ").status_code, 400)
        self.assertEqual(self.call("update-bounty-progress", "alice", "b1", "lots").status_code, 400)

    def test_validate_username_alias(self) -> None:
        for endpoint in ("validate-leetcode-username", "validate-username"):
            response = self.call(endpoint, "alice")
            self.assertEqual(response.json()["result"], {"exists": True, "error": None})

    def test_group_flow(self) -> None:
        created = self.call("create-group", "alice").json()["result"]
        group_id = created["groupId"]
        self.assertRegex(group_id, r"^\d{5}$")

        self.call("join-group", "bob", group_id)
        board = self.call("get-stats-for-group", group_id).json()["result"]
        self.assertEqual(sorted(row["username"] for row in board), ["alice", "bob"])

        self.assertEqual(self.call("leave-group", "bob").json()["result"], {"left": True})
        self.assertNotIn("group_id", self.call("get-user-data", "bob").json()["result"])

    def test_daily_flow(self) -> None:
        self.store.seed("Daily", daily("2024-05-10"))

        completed = self.call("complete-daily-problem", "alice").json()["result"]
        self.assertEqual(completed["xpAwarded"], 200)

        status = self.call("get-daily-problem", "alice").json()["result"]
        self.assertTrue(status["dailyComplete"])
        self.assertEqual(status["streak"], 1)
        self.assertEqual(status["todaysProblem"]["title"], "Two Sum")

    def test_catalog_failure_is_server_error(self) -> None:
        self.catalog.error = CatalogError("LeetCode request failed: timeout")

        response = self.call("fetch-random-problem", "EASY")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "LeetCode request failed: timeout")

    def test_notification_flow(self) -> None:
        self.store.seed("Daily", daily("2024-05-10", title="Two Sum"))

        self.call("update-app-state", "leaderboard", {"leetUsername": "alice"}, {"dailyComplete": False})
        self.assertEqual(self.call("check-daily-notification").json()["result"], {"success": True})

        pending = self.call("poll-notifications").json()["result"]
        self.assertEqual(len(pending), 1)
        self.assertIn("Two Sum", pending[0]["body"])
        self.assertEqual(self.call("poll-notifications").json()["result"], [])

        self.assertEqual(self.call("clear-app-state").json()["result"], {"success": True})

    def test_open_external_url(self) -> None:
        with mock.patch("handlers.system.webbrowser.open", return_value=True) as opener:
            response = self.call("open-external-url", "https://leetcode.com/problems/two-sum/")
        self.assertEqual(response.json()["result"], {"success": True})
        opener.assert_called_once_with("https://leetcode.com/problems/two-sum/")

        self.assertEqual(self.call("open-external-url", "file:///etc/passwd").status_code, 400)


if __name__ == "__main__":
    unittest.main()
