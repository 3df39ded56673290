import unittest
from datetime import datetime, timedelta, timezone

from recap.handoff import build_handoff, infer_current_task, last_edit, last_search, next_steps, project_status
from recap.models import ContextInfo, CurrentStateSnapshot, LogEvent
from recap.sessions import reconstruct_sessions

BASE = datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)


def _session(*calls: tuple[str, dict]):
    events = [
        LogEvent(
            timestamp=BASE + timedelta(seconds=idx * 30),
            toolName=tool,
            contextInfo=ContextInfo(session="s-1", intent="wire up cache", intentConfidence=60),
            arguments=args,
        )
        for idx, (tool, args) in enumerate(calls)
    ]
    return reconstruct_sessions(events)[0]


class CurrentTaskTests(unittest.TestCase):
    def test_search_read_edit_run_is_debugging(self) -> None:
        session = _session(("search_code", {}), ("read_file", {}), ("edit_block", {}))
        self.assertEqual(infer_current_task(session), "Debugging and fixing code based on search results")

    def test_read_then_edit_is_modification(self) -> None:
        session = _session(("search_code", {}), ("list_directory", {}), ("read_file", {}), ("edit_block", {}))
        self.assertEqual(infer_current_task(session), "Modifying existing code")

    def test_command_execution(self) -> None:
        session = _session(("read_file", {}), ("execute_command", {"command": "ls"}))
        self.assertEqual(infer_current_task(session), "Running tests/builds and validating changes")

    def test_investigation(self) -> None:
        session = _session(("search_files", {"pattern": "*.py"}))
        self.assertEqual(infer_current_task(session), "Investigating codebase and exploring files")

    def test_default(self) -> None:
        self.assertEqual(infer_current_task(_session(("list_directory", {}))), "General development work")


class NextStepsTests(unittest.TestCase):
    def test_recent_edit(self) -> None:
        session = _session(("read_file", {}), ("edit_block", {}))
        self.assertEqual(next_steps(session)[0], "Test the recent changes")

    def test_recent_search(self) -> None:
        session = _session(("search_code", {}), ("read_file", {}))
        self.assertEqual(next_steps(session)[0], "Review search results")

    def test_edit_outside_recent_window_is_ignored(self) -> None:
        session = _session(
            ("edit_block", {}),
            ("read_file", {}),
            ("read_file", {}),
            ("execute_command", {"command": "ls"}),
        )
        self.assertEqual(next_steps(session)[0], "Review command output")

    def test_default(self) -> None:
        self.assertEqual(next_steps(_session(("read_file", {})))[0], "Review recent work")


class EditAndSearchTests(unittest.TestCase):
    def test_write_file_is_create(self) -> None:
        edit = last_edit(_session(("write_file", {"path": "/new.py"})))
        self.assertEqual((edit.file, edit.editType), ("/new.py", "create"))
        self.assertEqual(edit.purpose, "wire up cache")

    def test_removal_is_delete(self) -> None:
        edit = last_edit(_session(("edit_block", {"file_path": "/a.py", "old_string": "x = 1", "new_string": ""})))
        self.assertEqual(edit.editType, "delete")

    def test_replacement_is_modify(self) -> None:
        edit = last_edit(_session(("edit_block", {"file_path": "/a.py", "old_string": "x", "new_string": "y"})))
        self.assertEqual(edit.editType, "modify")

    def test_no_edit(self) -> None:
        self.assertIsNone(last_edit(_session(("read_file", {}))))

    def test_last_search_pattern(self) -> None:
        session = _session(("search_code", {"pattern": "first"}), ("search_files", {"pattern": "second"}))
        self.assertEqual(last_search(session), "second")
        self.assertEqual(last_search(_session(("search_code", {}))), "Unknown pattern")
        self.assertIsNone(last_search(_session(("read_file", {}))))


class StatusTests(unittest.TestCase):
    def test_status_progression(self) -> None:
        self.assertEqual(project_status(_session(("read_file", {}))), "Development in progress")
        self.assertEqual(
            project_status(_session(("execute_command", {"command": "npm run build"}))),
            "Tests/builds run, ready to proceed",
        )
        self.assertEqual(
            project_status(
                _session(("execute_command", {"command": "npm test"}), ("search_code", {"pattern": "TypeError"}))
            ),
            "Possible failure after the last test/build run, needs attention",
        )


class BuildHandoffTests(unittest.TestCase):
    def test_empty(self) -> None:
        self.assertIsNone(build_handoff([]))

    def test_location_prefers_current_state(self) -> None:
        session = _session(("read_file", {}), ("edit_block", {"file_path": "/srv/app/a.py"}))
        state = CurrentStateSnapshot(lastWorkingDirectory="/home/dev/app", recentActivitySummary="")

        handoff = build_handoff([session], state)

        self.assertEqual(handoff.location, "/home/dev/app")
        self.assertEqual(handoff.sessionId, "s-1")
        self.assertEqual(handoff.activeEdit.file, "/srv/app/a.py")
        self.assertEqual(len(handoff.nextSteps), 3)


if __name__ == "__main__":
    unittest.main()
