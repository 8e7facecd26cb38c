"""Per-turn folding of agent events and the post-turn diagnostic."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from rich.console import Console

from .events import StreamError, TextChunk, ToolCall, ToolResult
from .log import get_logger

logger = get_logger(__name__)


class Diagnostic(Enum):
    """Anomalies reported once a turn has finished streaming."""

    TOOL_ERROR = "An error occurred during tool execution or in the agent's response processing."
    EMPTY_ANSWER = "Agent used a tool but provided no text response."


@dataclass
class TurnAccumulator:
    """Fold one turn's events into rendered text plus outcome flags.

    Text chunks are echoed to ``console`` as soon as they are folded so the
    user sees the answer while it streams. Tool results and stream errors are
    never rendered inline; they only flip the flags consulted by ``diagnose``.
    """

    console: Console | None = None
    text_buffer: list[str] = field(default_factory=list)
    tool_invoked: bool = False
    tool_errored: bool = False

    @property
    def text(self) -> str:
        return "".join(self.text_buffer)

    def fold(self, event: object) -> None:
        if isinstance(event, TextChunk):
            content = event.content
            if not isinstance(content, str) or not content:
                return
            self.text_buffer.append(content)
            self._echo(content)
        elif isinstance(event, ToolCall):
            self.tool_invoked = True
            logger.debug("Tool call: %s", event.name or "<unnamed>")
        elif isinstance(event, ToolResult):
            if event.failed:
                self.tool_errored = True
                logger.debug("Tool %s reported an error", event.name or "<unnamed>")
        elif isinstance(event, StreamError):
            self.tool_errored = True
            logger.debug("Stream error (%s): %s", event.code, event.message)
        else:
            logger.debug("Ignoring unrecognised event %r", event)

    def drain(self, events: Iterable[object]) -> "TurnAccumulator":
        """Fold every event of ``events`` in order and return self."""
        for event in events:
            self.fold(event)
        return self

    def _echo(self, content: str) -> None:
        if self.console is None:
            return
        try:
            self.console.print(
                content, end="", markup=False, highlight=False, emoji=False, soft_wrap=True
            )
            self.console.file.flush()
        except (OSError, UnicodeError) as exc:
            # The chunk is already buffered; keep folding the rest of the turn
            logger.debug("Could not echo text chunk: %s", exc)


def diagnose(acc: TurnAccumulator) -> Diagnostic | None:
    """Pick the single diagnostic for a finished turn, errors first."""
    if acc.tool_errored:
        return Diagnostic.TOOL_ERROR
    if acc.tool_invoked and not acc.text:
        return Diagnostic.EMPTY_ANSWER
    return None
