"""Join tool invocations with their results by id."""
from __future__ import annotations

from cmdtrail import config
from cmdtrail.models import ExtractedCommand, RawInvocation, RawResult


def make_result(output: str, is_error: bool = False, tool_id: str = "") -> RawResult:
    """Build a result record: full byte length, character-capped preview."""
    return RawResult(
        id=tool_id,
        outputLen=len(output.encode("utf-8", errors="replace")),
        outputPreview=output[: config.OUTPUT_PREVIEW_CHARS],
        isError=is_error,
    )


def join_invocations_with_results(
    invocations: list[RawInvocation],
    results: dict[str, RawResult],
    session_id: str,
) -> list[ExtractedCommand]:
    """Produce one command per invocation, in invocation order.

    Results whose id has no invocation are never consulted. Invocations
    without a result get no output and ``isError=False``.
    """
    commands: list[ExtractedCommand] = []
    for invocation in invocations:
        result = results.get(invocation.id)
        if result is None:
            commands.append(
                ExtractedCommand(
                    command=invocation.command,
                    sessionId=session_id,
                    sequenceIndex=invocation.sequenceIndex,
                )
            )
            continue
        commands.append(
            ExtractedCommand(
                command=invocation.command,
                sessionId=session_id,
                sequenceIndex=invocation.sequenceIndex,
                outputLen=result.outputLen,
                outputPreview=result.outputPreview,
                isError=result.isError,
            )
        )
    return commands


class InvocationCollector:
    """Accumulates invocations and results while one artifact is scanned.

    Sequence indexes are assigned in observation order, starting at 0.
    """

    def __init__(self) -> None:
        self.invocations: list[RawInvocation] = []
        self.results: dict[str, RawResult] = {}

    def add_invocation(self, tool_id: str, command: str) -> None:
        self.invocations.append(
            RawInvocation(id=tool_id, command=command, sequenceIndex=len(self.invocations))
        )

    def add_result(self, tool_id: str, output: str, is_error: bool = False) -> None:
        # Last write wins for a repeated id.
        self.results[tool_id] = make_result(output, is_error, tool_id)

    def join(self, session_id: str) -> list[ExtractedCommand]:
        return join_invocations_with_results(self.invocations, self.results, session_id)
