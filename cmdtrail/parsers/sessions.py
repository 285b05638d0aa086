"""Discover sessions and extract commands across all registered providers."""
from __future__ import annotations

import logging

from cmdtrail.date_utils import file_updated_at
from cmdtrail.errors import DiscoveryError, SessionParseError
from cmdtrail.models import (
    CommandScan,
    ScannedCommand,
    SessionArtifactInfo,
    SkippedArtifact,
)
from cmdtrail.parsers.platforms.registry import VALID_TOOL_NAMES, build_providers

logger = logging.getLogger("cmdtrail.scan")


def validate_tool_name(tool: str | None) -> None:
    if tool is not None and tool not in VALID_TOOL_NAMES:
        raise ValueError(f"Unknown tool '{tool}'. Valid options: {', '.join(VALID_TOOL_NAMES)}")


def discover_artifacts(
    tool: str | None = None,
    project: str | None = None,
    since_days: int | None = None,
) -> list[SessionArtifactInfo]:
    """List session artifacts for the selected tools."""
    validate_tool_name(tool)
    artifacts: list[SessionArtifactInfo] = []
    for provider in build_providers(tool):
        source = provider.tool_source()
        try:
            paths = provider.discover_sessions(project, since_days)
        except DiscoveryError as exc:
            logger.warning("Skipping %s sessions: %s", source.display_name, exc)
            continue
        artifacts.extend(
            SessionArtifactInfo(path=str(path), tool=source, updatedAt=file_updated_at(path))
            for path in paths
        )
    return artifacts


def scan_commands(
    tool: str | None = None,
    project: str | None = None,
    since_days: int | None = None,
) -> CommandScan:
    """Extract commands from every discovered session.

    Commands keep their per-session order; sessions follow discovery order.
    Providers and artifacts that fail are recorded in ``skipped`` and the
    scan continues.
    """
    validate_tool_name(tool)
    scan = CommandScan()

    for provider in build_providers(tool):
        source = provider.tool_source()
        try:
            paths = provider.discover_sessions(project, since_days)
        except DiscoveryError as exc:
            logger.warning("Skipping %s sessions: %s", source.display_name, exc)
            scan.skipped.append(SkippedArtifact(tool=source, reason=str(exc)))
            continue

        scan.sessionsScanned += len(paths)
        for path in paths:
            try:
                extracted = provider.extract_commands(path)
            except SessionParseError as exc:
                logger.warning("Skipping %s session %s: %s", source.display_name, path, exc.detail)
                scan.skipped.append(SkippedArtifact(tool=source, path=str(path), reason=exc.detail))
                continue
            scan.commands.extend(
                ScannedCommand(**command.model_dump(), tool=source, sourcePath=str(path))
                for command in extracted
            )

    logger.info(
        "Scanned %d sessions: %d commands, %d skipped",
        scan.sessionsScanned,
        len(scan.commands),
        len(scan.skipped),
    )
    return scan


def commands_with_output(scan: CommandScan) -> list[ScannedCommand]:
    """Commands whose output was captured, in scan order."""
    return [command for command in scan.commands if command.outputPreview is not None]
