"""Interactive read / stream / diagnose loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from rich.console import Console
from rich.prompt import Prompt

from .client import AgentClient
from .events import StreamError
from .log import get_logger
from .turn import Diagnostic, TurnAccumulator, diagnose

logger = get_logger(__name__)

QUIT_KEYWORD = "quit"
FAREWELL = "Exiting agent."


class LoopState(Enum):
    AWAITING_INPUT = "awaiting_input"
    STREAMING_TURN = "streaming_turn"
    DIAGNOSING = "diagnosing"
    TERMINATED = "terminated"


@dataclass
class TurnOutcome:
    accumulator: TurnAccumulator
    diagnostic: Diagnostic | None


class SessionLoop:
    """Drive one interactive session against an agent client.

    The session handle is created once, up front, and reused for every turn.
    Each turn drains its event stream completely before the next line of
    input is read, so turns never overlap.
    """

    def __init__(
        self,
        client: AgentClient,
        console: Console | None = None,
        read_input: Callable[[], str] | None = None,
    ):
        self.client = client
        self.console = console or Console()
        self.read_input = read_input or self._prompt
        self.session = client.create_session()
        self.state = LoopState.AWAITING_INPUT

    def _prompt(self) -> str:
        return Prompt.ask("\n[bold cyan]You >[/bold cyan]", console=self.console)

    def run(self) -> None:
        while self.state is not LoopState.TERMINATED:
            try:
                user_input = self.read_input()
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                break

            text = user_input.strip()
            if text.lower() == QUIT_KEYWORD:
                break
            if not text:
                continue

            self.run_turn(user_input)

        self.state = LoopState.TERMINATED
        self.console.print(FAREWELL)

        close = getattr(self.client, "close", None)
        if callable(close):
            close()

    def run_turn(self, message: str) -> TurnOutcome:
        """Stream one turn to completion and report its diagnostic."""
        self.state = LoopState.STREAMING_TURN
        self.console.print("\n[bold magenta]Agent >[/bold magenta] ", end="")

        acc = TurnAccumulator(console=self.console)
        try:
            acc.drain(self.client.send(self.session, message))
        except Exception as exc:
            # A client that fails outside its stream is still just a failed turn
            logger.error("Agent error: %s", exc)
            acc.fold(StreamError(code=type(exc).__name__, message=str(exc)))
        self.console.print()

        self.state = LoopState.DIAGNOSING
        diagnostic = diagnose(acc)
        logger.debug(
            "Turn finished: tool_invoked=%s tool_errored=%s chars=%d diagnostic=%s",
            acc.tool_invoked,
            acc.tool_errored,
            len(acc.text),
            diagnostic.name if diagnostic else None,
        )
        if diagnostic is not None:
            self.console.print(f"[yellow]⚠[/yellow]  {diagnostic.value}", highlight=False)

        self.state = LoopState.AWAITING_INPUT
        return TurnOutcome(accumulator=acc, diagnostic=diagnostic)
