"""Pydantic models for tool-call events, sessions and recovery data."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WorkPattern = Literal["reactive", "proactive", "investigative", "maintenance"]
WORK_PATTERNS: tuple[str, ...] = ("reactive", "proactive", "investigative", "maintenance")

InterruptedOperationType = Literal["unsaved_edit", "pending_search", "incomplete_command", "unresolved_error"]


# ── Producer context ───────────────────────────────────────────────

class OperationChain(BaseModel):
    id: str = ""
    purpose: str = ""
    progress: str = ""
    toolSequence: str = ""
    pendingSteps: list[str] = Field(default_factory=list)


class FileHeat(BaseModel):
    file: str
    accesses: int = 0
    category: str = ""
    operations: str = ""


class SearchEvolution(BaseModel):
    patterns: list[str] = Field(default_factory=list)
    refinements: list[str] = Field(default_factory=list)


class ContextInfo(BaseModel):
    """Structured annotation the producer attaches to each log line."""

    model_config = ConfigDict(frozen=True)

    session: Optional[str] = None
    sessionAge: Optional[str] = None
    newSession: Optional[bool] = None
    project: Optional[str] = None
    workflow: Optional[str] = None  # "EDITING" | "DEBUGGING" | "EXPLORATION" | ...
    sequence: Optional[str] = None
    files: list[str] = Field(default_factory=list)
    intent: Optional[str] = None
    intentConfidence: Optional[int] = None  # 0-100
    intentEvidence: list[str] = Field(default_factory=list)
    workPattern: Optional[WorkPattern] = None
    operationChains: list[OperationChain] = Field(default_factory=list)
    fileHeatmap: list[FileHeat] = Field(default_factory=list)
    searchEvolution: Optional[SearchEvolution] = None
    pendingTests: list[str] = Field(default_factory=list)


class LogEvent(BaseModel):
    """One tool invocation read from the log."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    toolName: str
    contextInfo: Optional[ContextInfo] = None
    arguments: dict[str, Any] = Field(default_factory=dict)

    @property
    def session_id(self) -> str:
        if self.contextInfo is None:
            return ""
        return self.contextInfo.session or ""


# ── Sessions ───────────────────────────────────────────────────────

class Session(BaseModel):
    id: str
    startTime: datetime
    endTime: datetime
    duration: int = 0  # minutes
    toolCalls: list[LogEvent] = Field(default_factory=list)
    workflowPatterns: list[str] = Field(default_factory=list)
    filesAccessed: list[str] = Field(default_factory=list)
    primaryProject: Optional[str] = None
    primaryIntent: Optional[str] = None
    intentConfidence: Optional[int] = None
    intentEvidence: list[str] = Field(default_factory=list)
    workPattern: Optional[WorkPattern] = None


class CurrentStateSnapshot(BaseModel):
    lastWorkingDirectory: Optional[str] = None
    currentProject: Optional[str] = None
    recentFiles: list[str] = Field(default_factory=list)
    activeSessionId: Optional[str] = None
    activeSessionDuration: int = 0  # minutes
    recentActivitySummary: str = ""


# ── Recovery ───────────────────────────────────────────────────────

class InterruptedOperation(BaseModel):
    type: InterruptedOperationType
    file: Optional[str] = None
    pattern: Optional[str] = None
    command: Optional[str] = None
    timestamp: datetime
    description: str = ""


class RecoveryContext(BaseModel):
    sessionId: str
    lastActivityTime: datetime
    lastToolUsed: str
    lastFile: Optional[str] = None
    workingDirectory: Optional[str] = None
    pendingOperations: list[InterruptedOperation] = Field(default_factory=list)
    uncommittedChanges: list[str] = Field(default_factory=list)
    lastError: Optional[str] = None
    suggestedActions: list[str] = Field(default_factory=list)  # top 3, ranked
    operationChains: list[OperationChain] = Field(default_factory=list)
    fileHeatmap: list[FileHeat] = Field(default_factory=list)
    searchEvolution: Optional[SearchEvolution] = None
    pendingTests: list[str] = Field(default_factory=list)


class ReconstructionResult(BaseModel):
    sessions: list[Session] = Field(default_factory=list)
    currentState: CurrentStateSnapshot
    recovery: Optional[RecoveryContext] = None


# ── Recap analysis ─────────────────────────────────────────────────

class TimeRange(BaseModel):
    start: datetime
    end: datetime


class SessionSummary(BaseModel):
    totalSessions: int = 0
    totalDuration: int = 0  # minutes
    totalOperations: int = 0
    primaryProjects: list[str] = Field(default_factory=list)
    workflowDistribution: dict[str, int] = Field(default_factory=dict)
    filesModified: list[str] = Field(default_factory=list)
    timeRange: TimeRange


class SessionMetadata(BaseModel):
    id: str
    startTime: datetime
    duration: int = 0
    primaryProject: Optional[str] = None
    workflowPatterns: list[str] = Field(default_factory=list)
    filesAccessed: list[str] = Field(default_factory=list)
    operationCount: int = 0
    primaryIntent: Optional[str] = None
    workPattern: Optional[WorkPattern] = None
    intentConfidence: Optional[int] = None


class RecapAnalysis(BaseModel):
    summary: SessionSummary
    sessions: list[SessionMetadata] = Field(default_factory=list)
    currentState: Optional[CurrentStateSnapshot] = None


# ── Handoff & checkpoints ──────────────────────────────────────────

class EditContext(BaseModel):
    file: str
    editType: Literal["create", "modify", "delete"] = "modify"
    purpose: str = ""


class WorkHandoff(BaseModel):
    sessionId: str
    location: Optional[str] = None
    activeEdit: Optional[EditContext] = None
    currentTask: str = ""
    lastSearch: Optional[str] = None
    status: str = ""
    nextSteps: list[str] = Field(default_factory=list)


class CheckpointTool(BaseModel):
    tool: str
    timestamp: datetime
    args: dict[str, Any] = Field(default_factory=dict)


class StateCheckpoint(BaseModel):
    timestamp: datetime
    sessionId: str
    project: Optional[str] = None
    workflowPatterns: list[str] = Field(default_factory=list)
    filesAccessed: list[str] = Field(default_factory=list)
    lastTools: list[CheckpointTool] = Field(default_factory=list)
    intent: Optional[str] = None
    intentConfidence: Optional[int] = None
