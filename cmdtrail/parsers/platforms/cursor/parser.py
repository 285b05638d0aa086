"""Cursor sessions stored in SQLite.

Two layouts exist:

* Desktop editor: ``state.vscdb`` with a ``cursorDiskKV`` key/value table.
  Chat bubbles are stored under ``bubbleId:*`` keys. There is no structured
  tool-call record, so commands are recovered from fenced shell blocks in
  assistant bubbles and carry no output.
* Agent CLI: ``chats/<id>/store.db`` with a ``blobs`` table whose JSON
  payloads contain ``tool_call`` and ``tool``/``tool_result`` items. Older
  builds name the payload column ``value`` instead of ``data``.
"""
from __future__ import annotations

import json
import logging
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from cmdtrail.date_utils import cutoff_from_days, is_recent
from cmdtrail.errors import SessionParseError
from cmdtrail.models import ExtractedCommand, ToolSource
from cmdtrail.parsers.correlation import InvocationCollector
from cmdtrail.parsers.platforms.base import (
    SessionProvider,
    home_dir,
    string_field,
    tool_result_to_text,
)

logger = logging.getLogger("cmdtrail.parsers.cursor")

DESKTOP_DB_NAME = "state.vscdb"
AGENT_DB_NAME = "store.db"
DESKTOP_TABLE = "cursorDiskKV"
AGENT_TABLE = "blobs"
AGENT_PAYLOAD_COLUMNS = ("data", "value")
ASSISTANT_BUBBLE_TYPE = 2

# Undocumented; every name seen for the terminal tool across Cursor releases.
TERMINAL_TOOL_NAMES = frozenset(
    {
        "run_terminal_command",
        "terminal",
        "execute_command",
        "run_command",
    }
)

_FENCED_SHELL_BLOCK = re.compile(r"```(?:bash|sh|shell)\r?\n(.*?)```", re.DOTALL)
_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")


def find_db_paths() -> list[Path]:
    """Return every existing Cursor database, desktop first."""
    home = home_dir()
    if home is None:
        return []

    paths: list[Path] = []
    desktop_candidates = [
        home / "Library/Application Support/Cursor/User/globalStorage" / DESKTOP_DB_NAME,
        home / ".config/Cursor/User/globalStorage" / DESKTOP_DB_NAME,
    ]
    paths.extend(candidate for candidate in desktop_candidates if candidate.is_file())

    for agent_dir in (home / ".config/cursor/chats", home / ".cursor/chats"):
        if not agent_dir.is_dir():
            continue
        try:
            chat_dirs = sorted(agent_dir.iterdir())
        except OSError:
            continue
        for chat_dir in chat_dirs:
            store_db = chat_dir / AGENT_DB_NAME
            if store_db.is_file():
                paths.append(store_db)

    return paths


@contextmanager
def open_readonly(path: Path) -> Iterator[sqlite3.Connection]:
    """Open a database read-only; any SQLite failure becomes ``SessionParseError``."""
    uri = f"{path.resolve().as_uri()}?mode=ro"
    try:
        conn = sqlite3.connect(uri, uri=True, timeout=5.0)
    except sqlite3.Error as exc:
        raise SessionParseError(path, f"failed to open Cursor database ({exc})") from exc
    try:
        yield conn
    except sqlite3.Error as exc:
        raise SessionParseError(path, f"failed to read Cursor database ({exc})") from exc
    finally:
        conn.close()


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    if not _IDENTIFIER.match(table):
        return False
    columns = conn.execute(f'PRAGMA table_info("{table}")').fetchall()
    return any(len(col) > 1 and col[1] == column for col in columns)


def _load_json(raw: Any) -> Any:
    if isinstance(raw, memoryview):
        raw = raw.tobytes()
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(raw, str):
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None


def extract_command_from_bubble_text(text: str) -> str | None:
    """Return the first non-empty fenced bash/sh/shell block in *text*."""
    for match in _FENCED_SHELL_BLOCK.finditer(text):
        command = match.group(1).strip()
        if command:
            return command
    return None


def extract_command_from_args(item: dict[str, Any]) -> str | None:
    """Normalize tool-call arguments (JSON string or object) to a command string."""
    args = item.get("arguments")
    if args is None and isinstance(item.get("function"), dict):
        args = item["function"].get("arguments")

    if isinstance(args, str):
        try:
            parsed = json.loads(args)
        except json.JSONDecodeError:
            # Not JSON: the string is the command itself.
            return args or None
        except (ValueError, RecursionError):
            return None
        if isinstance(parsed, dict):
            command = parsed.get("command")
            return command if isinstance(command, str) else None
        return None

    if isinstance(args, dict):
        command = args.get("command")
        return command if isinstance(command, str) else None

    return None


def _tool_call_name(item: dict[str, Any]) -> str:
    name = item.get("name")
    if not isinstance(name, str) and isinstance(item.get("function"), dict):
        name = item["function"].get("name")
    return name if isinstance(name, str) else ""


def _blob_items(parsed: Any) -> list[dict[str, Any]]:
    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("content"), list):
        items = parsed["content"]
    elif isinstance(parsed, dict):
        items = [parsed]
    else:
        return []
    return [item for item in items if isinstance(item, dict)]


def extract_from_desktop_db(path: Path) -> list[ExtractedCommand]:
    """Extract commands from a desktop ``state.vscdb``."""
    session_id = path.parent.name or "cursor-desktop"
    commands: list[ExtractedCommand] = []

    with open_readonly(path) as conn:
        if not table_exists(conn, DESKTOP_TABLE):
            logger.debug("No %s table in %s", DESKTOP_TABLE, path)
            return []

        rows = conn.execute(
            f"SELECT value FROM {DESKTOP_TABLE} WHERE key LIKE ?",
            ("bubbleId:%",),
        )
        for (raw_value,) in rows:
            bubble = _load_json(raw_value)
            if not isinstance(bubble, dict):
                continue
            bubble_type = bubble.get("type")
            if isinstance(bubble_type, bool) or bubble_type != ASSISTANT_BUBBLE_TYPE:
                continue
            text = string_field(bubble, "richText", "text") or ""
            command = extract_command_from_bubble_text(text)
            if command is None:
                continue
            commands.append(
                ExtractedCommand(
                    command=command,
                    sessionId=session_id,
                    sequenceIndex=len(commands),
                )
            )

    return commands


def extract_from_agent_db(path: Path) -> list[ExtractedCommand]:
    """Extract commands from an agent CLI ``store.db``."""
    session_id = path.parent.name or "cursor-agent"
    collector = InvocationCollector()

    with open_readonly(path) as conn:
        if not table_exists(conn, AGENT_TABLE):
            logger.debug("No %s table in %s", AGENT_TABLE, path)
            return []

        column = next(
            (name for name in AGENT_PAYLOAD_COLUMNS if has_column(conn, AGENT_TABLE, name)),
            None,
        )
        if column is None:
            logger.debug("Unrecognized %s schema in %s", AGENT_TABLE, path)
            return []

        for (raw_value,) in conn.execute(f"SELECT {column} FROM {AGENT_TABLE}"):
            for item in _blob_items(_load_json(raw_value)):
                item_type = item.get("type")
                if item_type == "tool_call":
                    if _tool_call_name(item) not in TERMINAL_TOOL_NAMES:
                        continue
                    tool_id = string_field(item, "tool_call_id", "id")
                    if not tool_id:
                        continue
                    command = extract_command_from_args(item)
                    if command is not None:
                        collector.add_invocation(tool_id, command)
                elif item_type in ("tool", "tool_result"):
                    tool_id = string_field(item, "tool_call_id")
                    if not tool_id:
                        continue
                    collector.add_result(
                        tool_id,
                        tool_result_to_text(item.get("content")),
                        item.get("is_error") is True,
                    )

    return collector.join(session_id)


class CursorProvider(SessionProvider):
    source = ToolSource.CURSOR

    def discover_sessions(
        self,
        project_filter: str | None = None,
        since_days: int | None = None,
    ) -> list[Path]:
        # Neither database layout records a project path; project_filter is ignored.
        cutoff = cutoff_from_days(since_days)
        return [path for path in find_db_paths() if is_recent(path, cutoff)]

    def extract_commands(self, path: Path) -> list[ExtractedCommand]:
        if path.name == DESKTOP_DB_NAME:
            return extract_from_desktop_db(path)
        return extract_from_agent_db(path)
