"""Session provider registry for platform-specific implementations."""
from __future__ import annotations

from cmdtrail.models import ToolSource
from cmdtrail.parsers.platforms.base import SessionProvider
from cmdtrail.parsers.platforms.claude_code.parser import ClaudeCodeProvider
from cmdtrail.parsers.platforms.cline.parser import ClineProvider
from cmdtrail.parsers.platforms.codex.parser import CodexProvider
from cmdtrail.parsers.platforms.cursor.parser import CursorProvider

VALID_TOOL_NAMES: tuple[str, ...] = tuple(source.short_name for source in ToolSource)


def build_providers(tool_filter: str | None = None) -> list[SessionProvider]:
    """Build every provider, or only the one whose short name is *tool_filter*.

    An unknown name yields an empty list; callers validate names first.
    """
    providers: list[SessionProvider] = [
        ClaudeCodeProvider(),
        CodexProvider(),
        ClineProvider(),
        CursorProvider(),
    ]
    if tool_filter is None:
        return providers
    return [p for p in providers if p.tool_source().short_name == tool_filter]
