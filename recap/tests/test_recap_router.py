import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from fastapi import HTTPException
from fastapi.testclient import TestClient

from recap import main
from recap.errors import CheckpointWriteError, InvalidQueryError, LogFileNotFound, LogReadError
from recap.models import CurrentStateSnapshot, ReconstructionResult, StateCheckpoint
from recap.routers import recap as recap_router

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class RecapRouterTests(unittest.IsolatedAsyncioTestCase):
    async def test_get_recap_returns_service_result(self) -> None:
        expected = ReconstructionResult(currentState=CurrentStateSnapshot(recentActivitySummary="Recent actions: read_file"))
        with patch.object(recap_router.recap_service, "reconstruct", return_value=expected) as reconstruct:
            result = await recap_router.get_recap(hours=6)

        reconstruct.assert_called_once_with(6)
        self.assertIs(result, expected)

    async def test_missing_log_maps_to_404(self) -> None:
        with patch.object(
            recap_router.recap_service,
            "reconstruct",
            side_effect=LogFileNotFound([Path("/nowhere/claude_tool_call.log")]),
        ):
            with self.assertRaises(HTTPException) as ctx:
                await recap_router.get_recap(hours=24)

        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("/nowhere/claude_tool_call.log", ctx.exception.detail)

    async def test_read_error_maps_to_500(self) -> None:
        with patch.object(
            recap_router.recap_service,
            "analysis",
            side_effect=LogReadError(Path("/var/log/x.log"), "Permission denied"),
        ):
            with self.assertRaises(HTTPException) as ctx:
                await recap_router.get_analysis(hours=24)

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("Permission denied", ctx.exception.detail)

    async def test_invalid_query_maps_to_400(self) -> None:
        with patch.object(
            recap_router.recap_service,
            "handoff",
            side_effect=InvalidQueryError("hours must be between 1 and 168 (got 500)"),
        ):
            with self.assertRaises(HTTPException) as ctx:
                await recap_router.get_handoff(hours=500)

        self.assertEqual(ctx.exception.status_code, 400)

    async def test_recovery_may_be_empty(self) -> None:
        with patch.object(recap_router.recap_service, "recovery_context", return_value=None):
            self.assertIsNone(await recap_router.get_recovery(hours=24))

    async def test_create_checkpoint_without_session_is_404(self) -> None:
        with patch.object(recap_router.recap_service, "save_checkpoint", return_value=None):
            with self.assertRaises(HTTPException) as ctx:
                await recap_router.create_checkpoint(hours=24)
        self.assertEqual(ctx.exception.status_code, 404)

    async def test_checkpoint_write_failure_maps_to_500(self) -> None:
        with patch.object(
            recap_router.recap_service,
            "save_checkpoint",
            side_effect=CheckpointWriteError(Path("/ro/checkpoint.json"), "Read-only file system"),
        ):
            with self.assertRaises(HTTPException) as ctx:
                await recap_router.create_checkpoint(hours=24)

        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("Read-only file system", ctx.exception.detail)

    async def test_get_checkpoint(self) -> None:
        checkpoint = StateCheckpoint(timestamp=NOW, sessionId="s-1")
        with patch.object(recap_router.recap_service, "last_checkpoint", return_value=checkpoint):
            self.assertIs(await recap_router.get_checkpoint(), checkpoint)

        with patch.object(recap_router.recap_service, "last_checkpoint", return_value=None):
            with self.assertRaises(HTTPException) as ctx:
                await recap_router.get_checkpoint()
        self.assertEqual(ctx.exception.status_code, 404)


class RecapAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(main.app)

    def test_hours_outside_bounds_are_rejected(self) -> None:
        with patch.object(recap_router.recap_service, "reconstruct") as reconstruct:
            response = self.client.get("/api/recap", params={"hours": 0})
        self.assertEqual(response.status_code, 422)
        reconstruct.assert_not_called()

    def test_recap_endpoint_serializes_result(self) -> None:
        expected = ReconstructionResult(currentState=CurrentStateSnapshot(recentActivitySummary="No recent activity detected"))
        with patch.object(recap_router.recap_service, "reconstruct", return_value=expected):
            response = self.client.get("/api/recap", params={"hours": 24})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["sessions"], [])
        self.assertIsNone(payload["recovery"])
        self.assertEqual(payload["currentState"]["recentActivitySummary"], "No recent activity detected")

    def test_health_reports_missing_log(self) -> None:
        with patch.object(main, "locate_log_file", side_effect=LogFileNotFound([Path("/x.log")])):
            response = self.client.get("/api/health")
        self.assertEqual(response.json(), {"status": "ok", "log": "missing", "logPath": None})

    def test_health_reports_resolved_log(self) -> None:
        with patch.object(main, "locate_log_file", return_value=Path("/logs/claude_tool_call.log")):
            response = self.client.get("/api/health")
        self.assertEqual(response.json()["logPath"], "/logs/claude_tool_call.log")


if __name__ == "__main__":
    unittest.main()
