"""Codex CLI sessions: ``$CODEX_HOME/sessions/**/*.jsonl``.

Exec-end events carry the command, its output and exit code together, so
no correlation step is needed.
"""
from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

from cmdtrail import config
from cmdtrail.date_utils import cutoff_from_days, is_recent
from cmdtrail.models import ExtractedCommand, ToolSource
from cmdtrail.parsers.correlation import make_result
from cmdtrail.parsers.platforms.base import (
    SessionProvider,
    dir_from_env,
    home_dir,
    iter_jsonl_entries,
    session_matches_project,
    string_field,
    walk_files,
)

EXEC_END_EVENTS = {"ExecCommandEnd", "exec_command_end", "ExecCommand"}

_LINE_MARKERS = ("exec", "Exec")
_SHELL_SCRIPT_FLAGS = {"-c", "-lc"}


def base_dir() -> Path | None:
    root = dir_from_env(config.CODEX_HOME_ENV)
    if root is not None:
        return root
    home = home_dir()
    if home is None:
        return None
    candidate = home / ".codex"
    return candidate if candidate.is_dir() else None


def _event_type(entry: dict[str, Any]) -> str:
    label = string_field(entry, "type", "event") or ""
    if label in EXEC_END_EVENTS:
        return label
    # Newer rollouts wrap events: {"type": "event_msg", "payload": {"type": ...}}
    payload = entry.get("payload")
    if isinstance(payload, dict):
        return string_field(payload, "type") or label
    return label


def _command_text(payload: dict[str, Any]) -> str | None:
    raw = payload.get("command")
    if raw is None:
        raw = payload.get("cmd")
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list) and raw and all(isinstance(part, str) for part in raw):
        if len(raw) == 3 and raw[1] in _SHELL_SCRIPT_FLAGS:
            return raw[2]
        return shlex.join(raw)
    return None


def _exit_code(payload: dict[str, Any]) -> int:
    for name in ("exitCode", "exit_code"):
        value = payload.get(name)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
    return 0


class CodexProvider(SessionProvider):
    source = ToolSource.CODEX_CLI

    def discover_sessions(
        self,
        project_filter: str | None = None,
        since_days: int | None = None,
    ) -> list[Path]:
        base = base_dir()
        if base is None:
            return []
        sessions_dir = base / "sessions"
        if not sessions_dir.is_dir():
            return []

        cutoff = cutoff_from_days(since_days)
        sessions: list[Path] = []
        for path in walk_files(sessions_dir, lambda p: p.suffix == ".jsonl"):
            if not is_recent(path, cutoff):
                continue
            if project_filter and not session_matches_project(path, project_filter):
                continue
            sessions.append(path)
        return sessions

    def extract_commands(self, path: Path) -> list[ExtractedCommand]:
        session_id = path.stem
        commands: list[ExtractedCommand] = []

        for entry in iter_jsonl_entries(path, _LINE_MARKERS):
            if _event_type(entry) not in EXEC_END_EVENTS:
                continue
            payload = entry.get("payload")
            if not isinstance(payload, dict):
                payload = entry

            command = _command_text(payload)
            if command is None:
                continue

            output = string_field(payload, "output", "stdout", "aggregated_output") or ""
            result = make_result(output, _exit_code(payload) != 0)
            commands.append(
                ExtractedCommand(
                    command=command,
                    sessionId=session_id,
                    sequenceIndex=len(commands),
                    outputLen=result.outputLen,
                    outputPreview=result.outputPreview or None,
                    isError=result.isError,
                )
            )

        return commands
