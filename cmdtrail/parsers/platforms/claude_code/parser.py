"""Claude Code sessions: ``~/.claude/projects/<encoded-project>/**/*.jsonl``."""
from __future__ import annotations

from pathlib import Path

from cmdtrail import config
from cmdtrail.date_utils import cutoff_from_days, is_recent
from cmdtrail.errors import DiscoveryError
from cmdtrail.models import ExtractedCommand, ToolSource
from cmdtrail.parsers.correlation import InvocationCollector
from cmdtrail.parsers.platforms.base import (
    SessionProvider,
    content_blocks,
    dir_from_env,
    home_dir,
    iter_jsonl_entries,
    tool_result_to_text,
    walk_files,
)

SHELL_TOOL_NAME = "Bash"

# Lines without either marker cannot hold a Bash call or a tool result.
_LINE_MARKERS = ('"Bash"', '"tool_result"')


def encode_project_path(path: str) -> str:
    """Encode a filesystem path the way Claude Code names project directories.

    ``/Users/foo/bar`` becomes ``-Users-foo-bar``.
    """
    return path.replace("/", "-")


def projects_dir() -> Path | None:
    root = dir_from_env(config.CLAUDE_CONFIG_DIR_ENV)
    if root is None:
        home = home_dir()
        if home is None:
            return None
        root = home / ".claude"
    candidate = root / "projects"
    if not candidate.exists():
        return None
    if not candidate.is_dir():
        raise DiscoveryError(f"Claude Code projects path is not a directory: {candidate}")
    return candidate


class ClaudeCodeProvider(SessionProvider):
    source = ToolSource.CLAUDE_CODE

    def discover_sessions(
        self,
        project_filter: str | None = None,
        since_days: int | None = None,
    ) -> list[Path]:
        root = projects_dir()
        if root is None:
            return []

        cutoff = cutoff_from_days(since_days)
        encoded_filter = encode_project_path(project_filter) if project_filter else None

        try:
            project_dirs = sorted(p for p in root.iterdir() if p.is_dir())
        except OSError:
            return []

        sessions: list[Path] = []
        for project_dir in project_dirs:
            if encoded_filter and encoded_filter not in project_dir.name:
                continue
            # Recursive so subagents/ transcripts are included.
            sessions.extend(
                walk_files(
                    project_dir,
                    lambda p: p.suffix == ".jsonl" and is_recent(p, cutoff),
                )
            )
        return sessions

    def extract_commands(self, path: Path) -> list[ExtractedCommand]:
        collector = InvocationCollector()

        for entry in iter_jsonl_entries(path, _LINE_MARKERS):
            entry_type = entry.get("type")
            if entry_type == "assistant":
                for block in content_blocks(entry.get("message")):
                    if block.get("type") != "tool_use" or block.get("name") != SHELL_TOOL_NAME:
                        continue
                    tool_id = block.get("id")
                    tool_input = block.get("input")
                    command = tool_input.get("command") if isinstance(tool_input, dict) else None
                    if isinstance(tool_id, str) and isinstance(command, str):
                        collector.add_invocation(tool_id, command)
            elif entry_type == "user":
                for block in content_blocks(entry.get("message")):
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

        return collector.join(path.stem)
