#!/usr/bin/env python3
"""Print a recap of recent Desktop Commander sessions.

Usage:
  python -m recap.scripts.recap_cli
  python -m recap.scripts.recap_cli --hours 4
  python -m recap.scripts.recap_cli --log ~/logs/claude_tool_call.log --json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from recap import config
from recap.errors import RecapError
from recap.models import ReconstructionResult
from recap.services import recap_service


def _print_report(result: ReconstructionResult) -> None:
    state = result.currentState
    print(f"Sessions: {len(result.sessions)}")
    for session in result.sessions:
        project = session.primaryProject or "-"
        workflows = ", ".join(session.workflowPatterns) or "-"
        print(
            f"  {session.id} project={project} calls={len(session.toolCalls)} "
            f"duration={session.duration}m workflows={workflows}"
        )
        if session.primaryIntent:
            print(f"    intent={session.primaryIntent} ({session.intentConfidence}%)")
    print("")
    print(f"Current project: {state.currentProject or '-'}")
    print(f"Working directory: {state.lastWorkingDirectory or '-'}")
    print(f"Activity: {state.recentActivitySummary}")
    if state.recentFiles:
        print(f"Recent files: {', '.join(state.recentFiles)}")

    recovery = result.recovery
    if recovery is None:
        return
    print("")
    print(f"Interrupted session: {recovery.sessionId} (last tool {recovery.lastToolUsed})")
    for op in recovery.pendingOperations:
        target = op.file or op.pattern or op.command or ""
        print(f"  pending {op.type}: {target} {op.description}".rstrip())
    if recovery.uncommittedChanges:
        print(f"  uncommitted: {', '.join(recovery.uncommittedChanges)}")
    if recovery.lastError:
        print(f"  last error: {recovery.lastError}")
    for idx, action in enumerate(recovery.suggestedActions, start=1):
        print(f"  {idx}. {action}")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--hours", type=int, default=config.DEFAULT_HOURS)
    parser.add_argument("--log", default="", help="Explicit log file path")
    parser.add_argument("--json", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    log_path = Path(args.log).expanduser() if args.log else None
    try:
        result = recap_service.reconstruct(args.hours, log_path=log_path)
    except RecapError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0

    _print_report(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
