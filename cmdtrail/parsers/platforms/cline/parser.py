"""Cline tasks: one ``api_conversation_history.json`` array per task directory."""
from __future__ import annotations

import json
import sys
from pathlib import Path

from cmdtrail.date_utils import cutoff_from_days, is_recent
from cmdtrail.errors import SessionParseError
from cmdtrail.models import ExtractedCommand, ToolSource
from cmdtrail.parsers.correlation import InvocationCollector
from cmdtrail.parsers.platforms.base import (
    SessionProvider,
    content_blocks,
    home_dir,
    tool_result_to_text,
)

HISTORY_FILENAME = "api_conversation_history.json"
SHELL_TOOL_NAME = "execute_command"
_EXTENSION_TASKS = "globalStorage/saoudrizwan.claude-dev/tasks"


def task_dirs() -> list[Path]:
    home = home_dir()
    if home is None:
        return []

    dirs = [home / ".cline" / "tasks"]
    if sys.platform == "darwin":
        dirs.append(home / "Library/Application Support/Code/User" / _EXTENSION_TASKS)
    elif sys.platform.startswith("linux"):
        dirs.append(home / ".config/Code/User" / _EXTENSION_TASKS)
    return dirs


class ClineProvider(SessionProvider):
    source = ToolSource.CLINE

    def discover_sessions(
        self,
        project_filter: str | None = None,
        since_days: int | None = None,
    ) -> list[Path]:
        # Cline history carries no working directory, so project_filter is ignored.
        cutoff = cutoff_from_days(since_days)
        sessions: list[Path] = []

        for root in task_dirs():
            if not root.is_dir():
                continue
            try:
                entries = sorted(root.iterdir())
            except OSError:
                continue
            for task_dir in entries:
                if not task_dir.is_dir():
                    continue
                history_file = task_dir / HISTORY_FILENAME
                if not history_file.is_file():
                    continue
                if is_recent(history_file, cutoff):
                    sessions.append(history_file)

        return sessions

    def extract_commands(self, path: Path) -> list[ExtractedCommand]:
        try:
            raw = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise SessionParseError(path, f"failed to open task history ({exc.strerror})") from exc
        try:
            messages = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SessionParseError(path, f"failed to parse task history ({exc.msg})") from exc
        except (ValueError, RecursionError) as exc:
            raise SessionParseError(path, "failed to parse task history (value out of range or nested too deeply)") from exc
        if not isinstance(messages, list):
            raise SessionParseError(path, "task history is not a JSON array")

        collector = InvocationCollector()
        for message in messages:
            if not isinstance(message, dict):
                continue
            role = message.get("role")
            if role == "assistant":
                for block in content_blocks(message):
                    if block.get("type") != "tool_use" or block.get("name") != SHELL_TOOL_NAME:
                        continue
                    tool_id = block.get("id")
                    tool_input = block.get("input")
                    command = tool_input.get("command") if isinstance(tool_input, dict) else None
                    if isinstance(tool_id, str) and isinstance(command, str) and command:
                        collector.add_invocation(tool_id, command)
            elif role == "user":
                for block in content_blocks(message):
                    if block.get("type") != "tool_result":
                        continue
                    tool_id = block.get("tool_use_id")
                    if not isinstance(tool_id, str):
                        continue
                    collector.add_result(
                        tool_id,
                        tool_result_to_text(block.get("content")),
                        block.get("is_error") is True,
                    )

        return collector.join(path.parent.name or "unknown")
