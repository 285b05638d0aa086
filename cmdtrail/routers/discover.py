"""Read-only API over discovered sessions and extracted commands."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from cmdtrail import config
from cmdtrail.models import CommandScan, SessionArtifactInfo, SessionStats, ToolInfo, ToolSource
from cmdtrail.parsers.sessions import discover_artifacts, scan_commands, validate_tool_name
from cmdtrail.session_stats import compute_session_stats

discover_router = APIRouter(prefix="/api/discover", tags=["discover"])


def _checked_tool(tool: str | None) -> str | None:
    try:
        validate_tool_name(tool)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return tool


def _window(since_days: int | None) -> int:
    return config.DEFAULT_SINCE_DAYS if since_days is None else since_days


@discover_router.get("/tools", response_model=list[ToolInfo])
async def list_tools():
    """List the supported AI coding tools."""
    return [ToolInfo(id=source.short_name, name=source.display_name) for source in ToolSource]


@discover_router.get("/sessions", response_model=list[SessionArtifactInfo])
async def list_sessions(
    tool: str | None = Query(None, description="Limit to one tool (claude, codex, cline, cursor)"),
    project: str | None = Query(None, description="Substring of the project path"),
    since_days: int | None = Query(None, ge=0, description="Only sessions modified within this many days"),
):
    tool = _checked_tool(tool)
    return discover_artifacts(tool, project, _window(since_days))


@discover_router.get("/commands", response_model=CommandScan)
async def list_commands(
    tool: str | None = Query(None, description="Limit to one tool (claude, codex, cline, cursor)"),
    project: str | None = Query(None, description="Substring of the project path"),
    since_days: int | None = Query(None, ge=0, description="Only sessions modified within this many days"),
    errors_only: bool = Query(False, description="Only commands whose result was an error"),
):
    tool = _checked_tool(tool)
    scan = scan_commands(tool, project, _window(since_days))
    if errors_only:
        scan.commands = [command for command in scan.commands if command.isError]
    return scan


@discover_router.get("/session-stats", response_model=SessionStats)
async def get_session_stats(
    since_days: int | None = Query(None, ge=0, description="Only sessions modified within this many days"),
):
    return compute_session_stats(_window(since_days))
