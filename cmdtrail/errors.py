"""Errors raised by session providers."""
from __future__ import annotations

from pathlib import Path


class CmdtrailError(Exception):
    """Base class for cmdtrail errors."""


class DiscoveryError(CmdtrailError):
    """A tool root is configured but cannot be used as a session root."""


class SessionParseError(CmdtrailError):
    """A session artifact could not be opened or read as a whole."""

    def __init__(self, path: Path | str, detail: str) -> None:
        self.path = str(path)
        self.detail = detail
        super().__init__(f"{detail}: {self.path}")
