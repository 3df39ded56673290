import itertools
import unittest
from datetime import datetime, timedelta, timezone

from recap.models import ContextInfo, LogEvent
from recap.sessions import finalize_session, reconstruct_sessions

BASE = datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)


def _event(offset_seconds: int, tool: str, session: str | None = "s-1", **context) -> LogEvent:
    return LogEvent(
        timestamp=BASE + timedelta(seconds=offset_seconds),
        toolName=tool,
        contextInfo=ContextInfo(session=session, **context),
    )


class ReconstructSessionsTests(unittest.TestCase):
    def test_groups_events_by_session_in_file_order(self) -> None:
        events = [
            _event(0, "read_file", "a"),
            _event(10, "search_code", "b"),
            _event(20, "edit_block", "a"),
            _event(30, "read_file", None),
            _event(40, "write_file", "b"),
            _event(50, "execute_command", "a"),
        ]

        sessions = reconstruct_sessions(events)

        self.assertEqual([s.id for s in sessions], ["a", "b"])
        for session in sessions:
            expected = [e for e in events if e.session_id == session.id]
            self.assertEqual(session.toolCalls, expected)
        self.assertEqual(sum(len(s.toolCalls) for s in sessions), 5)

    def test_sessions_are_ordered_by_start_time(self) -> None:
        events = [
            _event(600, "read_file", "late"),
            _event(0, "read_file", "early"),
        ]
        self.assertEqual([s.id for s in reconstruct_sessions(events)], ["early", "late"])

    def test_duration_rounds_half_up(self) -> None:
        sessions = reconstruct_sessions([_event(0, "read_file"), _event(150, "edit_block")])
        self.assertEqual(sessions[0].startTime, BASE)
        self.assertEqual(sessions[0].endTime, BASE + timedelta(seconds=150))
        self.assertEqual(sessions[0].duration, 3)

    def test_single_event_session_has_zero_duration(self) -> None:
        session = reconstruct_sessions([_event(0, "read_file")])[0]
        self.assertEqual(session.duration, 0)
        self.assertEqual(session.startTime, session.endTime)

    def test_empty_input(self) -> None:
        self.assertEqual(reconstruct_sessions([]), [])

    def test_workflows_and_files_are_distinct_in_first_seen_order(self) -> None:
        sessions = reconstruct_sessions(
            [
                _event(0, "search_code", workflow="EXPLORATION", files=["/b.py", "/a.py"]),
                _event(10, "edit_block", workflow="EDITING", files=["/a.py", "/c.py"]),
                _event(20, "read_file", workflow="EXPLORATION", files=["/b.py"]),
            ]
        )
        self.assertEqual(sessions[0].workflowPatterns, ["EXPLORATION", "EDITING"])
        self.assertEqual(sessions[0].filesAccessed, ["/b.py", "/a.py", "/c.py"])

    def test_primary_project_is_mode_with_first_seen_tie_break(self) -> None:
        tied = reconstruct_sessions(
            [
                _event(0, "read_file", project="beta"),
                _event(10, "read_file", project="alpha"),
                _event(20, "read_file", project="alpha"),
                _event(30, "read_file", project="beta"),
            ]
        )
        self.assertEqual(tied[0].primaryProject, "beta")

        clear = reconstruct_sessions(
            [
                _event(0, "read_file", project="beta"),
                _event(10, "read_file", project="alpha"),
                _event(20, "read_file", project="alpha"),
            ]
        )
        self.assertEqual(clear[0].primaryProject, "alpha")

    def test_primary_intent_maximizes_confidence_times_count(self) -> None:
        session = reconstruct_sessions(
            [
                _event(0, "read_file", intent="refactor", intentConfidence=80, intentEvidence=["rename"]),
                _event(10, "edit_block", intent="fix bug", intentConfidence=50, intentEvidence=["stack trace"]),
                _event(20, "edit_block", intent="fix bug", intentConfidence=45, intentEvidence=["failing test"]),
            ]
        )[0]
        self.assertEqual(session.primaryIntent, "fix bug")
        self.assertEqual(session.intentConfidence, 50)
        self.assertEqual(session.intentEvidence, ["stack trace", "failing test"])

    def test_primary_intent_ignores_permutation_of_calls(self) -> None:
        pairs = [("fix bug", 60), ("add feature", 90), ("fix bug", 60), ("docs", 30)]
        for order in itertools.permutations(pairs):
            events = [
                _event(idx, "read_file", intent=intent, intentConfidence=conf)
                for idx, (intent, conf) in enumerate(order)
            ]
            session = reconstruct_sessions(events)[0]
            self.assertEqual(session.primaryIntent, "fix bug")
            self.assertEqual(session.intentConfidence, 60)

    def test_primary_intent_tie_prefers_first_seen(self) -> None:
        first = reconstruct_sessions(
            [
                _event(0, "read_file", intent="explore", intentConfidence=70),
                _event(10, "read_file", intent="debug", intentConfidence=70),
            ]
        )[0]
        second = reconstruct_sessions(
            [
                _event(0, "read_file", intent="debug", intentConfidence=70),
                _event(10, "read_file", intent="explore", intentConfidence=70),
            ]
        )[0]
        self.assertEqual(first.primaryIntent, "explore")
        self.assertEqual(second.primaryIntent, "debug")

    def test_no_intent_when_none_reported(self) -> None:
        session = reconstruct_sessions([_event(0, "read_file")])[0]
        self.assertIsNone(session.primaryIntent)
        self.assertIsNone(session.intentConfidence)
        self.assertIsNone(session.workPattern)

    def test_work_pattern_is_mode(self) -> None:
        session = reconstruct_sessions(
            [
                _event(0, "read_file", workPattern="investigative"),
                _event(10, "edit_block", workPattern="reactive"),
                _event(20, "edit_block", workPattern="reactive"),
            ]
        )[0]
        self.assertEqual(session.workPattern, "reactive")


class FinalizeSessionTests(unittest.TestCase):
    def test_finalize_is_idempotent(self) -> None:
        session = reconstruct_sessions(
            [
                _event(0, "search_code", project="recap", workflow="EXPLORATION", files=["/a.py"],
                       intent="explore", intentConfidence=40, workPattern="investigative"),
                _event(95, "edit_block", project="recap", workflow="EDITING", files=["/b.py"],
                       intent="fix", intentConfidence=70, intentEvidence=["error"]),
            ]
        )[0]

        again = finalize_session(session)
        twice = finalize_session(again)

        self.assertEqual(session.model_dump(), again.model_dump())
        self.assertEqual(again.model_dump(), twice.model_dump())

    def test_finalize_does_not_touch_tool_calls(self) -> None:
        session = reconstruct_sessions([_event(0, "read_file"), _event(10, "edit_block")])[0]
        calls = list(session.toolCalls)
        finalized = finalize_session(session)
        self.assertEqual(finalized.toolCalls, calls)


if __name__ == "__main__":
    unittest.main()
