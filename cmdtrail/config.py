"""cmdtrail configuration."""
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Reported by the API and /api/health
APP_VERSION = "0.1.0"

# Max chars kept from tool output for error detection
OUTPUT_PREVIEW_CHARS = 1000

# How many leading lines of a session are inspected for a working directory
PROJECT_PEEK_LINES = _env_int("CMDTRAIL_PROJECT_PEEK_LINES", 20)

# Window used by the HTTP surface when the caller does not pass since_days
DEFAULT_SINCE_DAYS = _env_int("CMDTRAIL_DEFAULT_SINCE_DAYS", 30)

# Tool-root overrides. Read at call time by the providers.
CODEX_HOME_ENV = "CODEX_HOME"
CLAUDE_CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"

# Logging
LOG_LEVEL = os.getenv("CMDTRAIL_LOG_LEVEL", "INFO").upper()
LOG_SKIPPED_RECORDS = _env_bool("CMDTRAIL_LOG_SKIPPED_RECORDS", False)

# CORS
FRONTEND_ORIGIN = os.getenv("CMDTRAIL_FRONTEND_ORIGIN", "http://localhost:3000")
