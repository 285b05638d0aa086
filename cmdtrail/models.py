"""Pydantic models for discovered sessions and the commands extracted from them."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ToolSource(str, Enum):
    """Which AI coding tool a session came from."""

    CLAUDE_CODE = "claude"
    CODEX_CLI = "codex"
    CLINE = "cline"
    CURSOR = "cursor"

    @property
    def short_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ToolSource.CLAUDE_CODE: "Claude Code",
    ToolSource.CODEX_CLI: "Codex CLI",
    ToolSource.CLINE: "Cline",
    ToolSource.CURSOR: "Cursor",
}


# ── Parser intermediates ────────────────────────────────────────────

class RawInvocation(BaseModel):
    id: str
    command: str
    sequenceIndex: int


class RawResult(BaseModel):
    id: str = ""
    outputLen: int = 0
    outputPreview: str = ""
    isError: bool = False


# ── Extraction output ───────────────────────────────────────────────

class ExtractedCommand(BaseModel):
    command: str
    sessionId: str
    sequenceIndex: int
    outputLen: Optional[int] = None  # UTF-8 byte length of the full output
    outputPreview: Optional[str] = None  # first OUTPUT_PREVIEW_CHARS characters
    isError: bool = False


class ScannedCommand(ExtractedCommand):
    tool: ToolSource
    sourcePath: str


class ToolInfo(BaseModel):
    id: str
    name: str


class SessionArtifactInfo(BaseModel):
    path: str
    tool: ToolSource
    updatedAt: str = ""


class SkippedArtifact(BaseModel):
    tool: ToolSource
    path: str = ""  # empty when the whole provider was skipped
    reason: str


class CommandScan(BaseModel):
    sessionsScanned: int = 0
    commands: list[ScannedCommand] = Field(default_factory=list)
    skipped: list[SkippedArtifact] = Field(default_factory=list)


# ── Session statistics ──────────────────────────────────────────────

class SessionStats(BaseModel):
    sessionsAnalyzed: int = 0
    avgTurnsPerSession: float = 0.0
    avgRemainingTurns: float = 0.0
    cacheMultiplier: float = 0.0
    isEstimated: bool = False


class CacheCompoundingSavings(BaseModel):
    directSaved: int
    effectiveSaved: int
    multiplier: float
    dollarSavings: Optional[float] = None
    stats: SessionStats
