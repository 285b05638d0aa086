import unittest

from cmdtrail.models import ToolSource
from cmdtrail.parsers.platforms.registry import VALID_TOOL_NAMES, build_providers


class ToolSourceTests(unittest.TestCase):
    def test_short_names(self) -> None:
        self.assertEqual(ToolSource.CLAUDE_CODE.short_name, "claude")
        self.assertEqual(ToolSource.CODEX_CLI.short_name, "codex")
        self.assertEqual(ToolSource.CLINE.short_name, "cline")
        self.assertEqual(ToolSource.CURSOR.short_name, "cursor")

    def test_display_names(self) -> None:
        self.assertEqual(ToolSource.CLAUDE_CODE.display_name, "Claude Code")
        self.assertEqual(ToolSource.CODEX_CLI.display_name, "Codex CLI")
        self.assertEqual(ToolSource.CLINE.display_name, "Cline")
        self.assertEqual(ToolSource.CURSOR.display_name, "Cursor")

    def test_lookup_by_short_name(self) -> None:
        self.assertIs(ToolSource("codex"), ToolSource.CODEX_CLI)


class RegistryTests(unittest.TestCase):
    def test_build_all_providers(self) -> None:
        providers = build_providers(None)

        self.assertEqual(
            [p.tool_source() for p in providers],
            [ToolSource.CLAUDE_CODE, ToolSource.CODEX_CLI, ToolSource.CLINE, ToolSource.CURSOR],
        )

    def test_filter_by_short_name(self) -> None:
        providers = build_providers("claude")

        self.assertEqual(len(providers), 1)
        self.assertEqual(providers[0].tool_source(), ToolSource.CLAUDE_CODE)

    def test_unknown_filter_is_empty_not_error(self) -> None:
        self.assertEqual(build_providers("unknown"), [])

    def test_valid_tool_names(self) -> None:
        self.assertEqual(VALID_TOOL_NAMES, ("claude", "codex", "cline", "cursor"))
        for name in VALID_TOOL_NAMES:
            self.assertEqual(len(build_providers(name)), 1)

    def test_providers_are_fresh_per_call(self) -> None:
        self.assertIsNot(build_providers("cursor")[0], build_providers("cursor")[0])


if __name__ == "__main__":
    unittest.main()
