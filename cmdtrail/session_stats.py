"""Claude Code session length statistics and cache compounding.

Saved tokens avoid a 1.25x cache write on the turn they are produced and a
0.1x cache read on every later turn, so the multiplier applied to direct
savings is ``1.25 + 0.1 * avg_remaining_turns``. Remaining turns are
estimated as half the average session length.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path

from cmdtrail.errors import DiscoveryError, SessionParseError
from cmdtrail.models import CacheCompoundingSavings, SessionStats
from cmdtrail.parsers.platforms.claude_code.parser import ClaudeCodeProvider

logger = logging.getLogger("cmdtrail.stats")

WEIGHT_CACHE_CREATE = 1.25
WEIGHT_CACHE_READ = 0.1
DEFAULT_AVG_TURNS = 20.0

_ASSISTANT_MARKERS = ('"type":"assistant"', '"type": "assistant"')


def count_turns_in_session(path: Path) -> int:
    """Count assistant entries in a JSONL session without parsing each line."""
    try:
        handle = path.open("r", encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SessionParseError(path, f"failed to open session file ({exc.strerror})") from exc
    with handle:
        return sum(1 for line in handle if any(marker in line for marker in _ASSISTANT_MARKERS))


def stats_from_turns(turn_counts: list[int]) -> SessionStats:
    if not turn_counts:
        avg_remaining = DEFAULT_AVG_TURNS / 2.0
        return SessionStats(
            sessionsAnalyzed=0,
            avgTurnsPerSession=DEFAULT_AVG_TURNS,
            avgRemainingTurns=avg_remaining,
            cacheMultiplier=WEIGHT_CACHE_CREATE + WEIGHT_CACHE_READ * avg_remaining,
            isEstimated=True,
        )

    avg = sum(turn_counts) / len(turn_counts)
    avg_remaining = avg / 2.0
    return SessionStats(
        sessionsAnalyzed=len(turn_counts),
        avgTurnsPerSession=avg,
        avgRemainingTurns=avg_remaining,
        cacheMultiplier=WEIGHT_CACHE_CREATE + WEIGHT_CACHE_READ * avg_remaining,
        isEstimated=False,
    )


def compute_session_stats(since_days: int) -> SessionStats:
    """Average turn statistics over recent top-level Claude Code sessions."""
    provider = ClaudeCodeProvider()
    try:
        sessions = provider.discover_sessions(None, since_days)
    except DiscoveryError as exc:
        logger.warning("Falling back to estimated session stats: %s", exc)
        return stats_from_turns([])

    turn_counts: list[int] = []
    for path in sessions:
        if "subagents" in path.parts:
            continue
        try:
            count = count_turns_in_session(path)
        except SessionParseError as exc:
            logger.warning("Skipping %s: %s", path, exc.detail)
            continue
        if count > 0:
            turn_counts.append(count)

    return stats_from_turns(turn_counts)


def compute_compounding(
    direct_saved: int,
    stats: SessionStats,
    weighted_input_cpt: float | None = None,
) -> CacheCompoundingSavings:
    """Apply the cache multiplier to direct token savings.

    *weighted_input_cpt* is a cost per input token; when given, the dollar
    value of the effective savings is included.
    """
    # Half away from zero; the product is never negative.
    effective = math.floor(direct_saved * stats.cacheMultiplier + 0.5)
    dollar_savings = effective * weighted_input_cpt if weighted_input_cpt is not None else None
    return CacheCompoundingSavings(
        directSaved=direct_saved,
        effectiveSaved=effective,
        multiplier=stats.cacheMultiplier,
        dollarSavings=dollar_savings,
        stats=stats,
    )
