"""Shared provider contract and helpers used by the platform parsers."""
from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterator

from cmdtrail import config
from cmdtrail.errors import DiscoveryError, SessionParseError
from cmdtrail.models import ExtractedCommand, ToolSource

logger = logging.getLogger("cmdtrail.parsers")


class SessionProvider(ABC):
    """One AI coding tool: where its sessions live and how to read them."""

    source: ToolSource

    def tool_source(self) -> ToolSource:
        return self.source

    @abstractmethod
    def discover_sessions(
        self,
        project_filter: str | None = None,
        since_days: int | None = None,
    ) -> list[Path]:
        """Return session artifact paths in a stable order.

        Nothing found is an empty list, never an error.
        """

    @abstractmethod
    def extract_commands(self, path: Path) -> list[ExtractedCommand]:
        """Return one command per shell invocation recorded in the artifact."""


def home_dir() -> Path | None:
    try:
        return Path.home()
    except RuntimeError:
        return None


def dir_from_env(name: str) -> Path | None:
    """Return the directory named by an environment variable, if it exists."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    path = Path(raw).expanduser()
    if not path.exists():
        return None
    if not path.is_dir():
        raise DiscoveryError(f"{name} points to {path}, which is not a directory")
    return path


def walk_files(root: Path, accept: Callable[[Path], bool]) -> list[Path]:
    """Recursively list files under *root* accepted by *accept*, sorted.

    Symlinked directories are not followed and unreadable directories are skipped.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        for name in sorted(filenames):
            candidate = Path(dirpath) / name
            if accept(candidate):
                found.append(candidate)
    return found


def _log_skipped_line(path: Path, line_no: int, reason: str) -> None:
    if config.LOG_SKIPPED_RECORDS:
        logger.debug("Skipping %s:%d (%s)", path, line_no, reason)


def iter_jsonl_entries(path: Path, markers: tuple[str, ...] = ()) -> Iterator[dict[str, Any]]:
    """Yield the JSON object on each line of *path*.

    Lines containing none of *markers* are skipped before parsing, as are
    lines that are not a JSON object. Raises ``SessionParseError`` only if
    the file cannot be opened.
    """
    try:
        handle = path.open("r", encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SessionParseError(path, f"failed to open session file ({exc.strerror})") from exc

    with handle:
        for line_no, line in enumerate(handle, start=1):
            if markers and not any(marker in line for marker in markers):
                continue
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except (ValueError, RecursionError):
                _log_skipped_line(path, line_no, "invalid JSON")
                continue
            if not isinstance(entry, dict):
                _log_skipped_line(path, line_no, "not an object")
                continue
            yield entry


def tool_result_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        chunks: list[str] = []
        for block in content:
            if isinstance(block, str):
                chunks.append(block)
            elif isinstance(block, dict):
                text = block.get("text")
                if isinstance(text, str):
                    chunks.append(text)
                elif isinstance(block.get("content"), str):
                    chunks.append(block["content"])
        return "\n".join(chunks)
    return ""


def content_blocks(message: Any) -> list[dict[str, Any]]:
    """Return the dict blocks of a message's ``content`` list."""
    if not isinstance(message, dict):
        return []
    content = message.get("content")
    if not isinstance(content, list):
        return []
    return [block for block in content if isinstance(block, dict)]


def string_field(payload: dict[str, Any], *names: str) -> str | None:
    """Return the first of *names* present in *payload* whose value is a string."""
    for name in names:
        value = payload.get(name)
        if isinstance(value, str):
            return value
    return None


def session_matches_project(path: Path, project_filter: str) -> bool:
    """Check whether a session's recorded working directory contains the filter.

    Only the first ``PROJECT_PEEK_LINES`` lines are inspected. A session that
    records no working directory there is included.
    """
    try:
        handle = path.open("r", encoding="utf-8", errors="replace")
    except OSError:
        return False

    with handle:
        for index, line in enumerate(handle):
            if index >= config.PROJECT_PEEK_LINES:
                break
            if "cwd" not in line:
                continue
            try:
                entry = json.loads(line)
            except (ValueError, RecursionError):
                continue
            if not isinstance(entry, dict):
                continue
            payload = entry.get("payload")
            cwd = payload.get("cwd") if isinstance(payload, dict) else None
            if not isinstance(cwd, str):
                cwd = entry.get("cwd")
            if isinstance(cwd, str):
                return project_filter in cwd
    return True
