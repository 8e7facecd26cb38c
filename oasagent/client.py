"""Agent client: sessions plus the streaming tool-calling loop."""

from __future__ import annotations

import json
import threading
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Protocol, Tuple

from .events import AgentEvent, StreamError, TextChunk, ToolCall, ToolResult
from .llm_client import LLMClient
from .log import get_logger
from .prompts import AGENT_NAME, SYSTEM_PROMPT
from .stream import Emit, EventStream

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionHandle:
    """Opaque identifier correlating all turns of one interactive run."""
    id: str
    app_name: str = AGENT_NAME
    user_id: str = "tmp-user"


class AgentClient(Protocol):
    def create_session(self) -> SessionHandle: ...

    def send(self, session: SessionHandle, message: str) -> Iterable[AgentEvent]: ...


def _format_args_short(args: Dict[str, Any]) -> str:
    """Format arguments for logging in a concise way."""
    parts = []
    for key, value in args.items():
        if isinstance(value, str):
            value_str = f"{value[:47]}..." if len(value) > 50 else value
            parts.append(f"{key}={value_str!r}")
        elif isinstance(value, (list, dict)):
            parts.append(f"{key}={type(value).__name__}[{len(value)}]")
        else:
            parts.append(f"{key}={value!r}")
    return ", ".join(parts)


class LLMAgentClient:
    """Run turns against an OpenAI-compatible model with local tools.

    Each session keeps an in-memory history holding the system prompt, user
    questions and final answers. Tool traffic lives only in the working
    messages of the turn that produced it.
    """

    def __init__(
        self,
        llm: LLMClient,
        tools_spec: Iterable[Dict[str, Any]],
        tool_map: Dict[str, Callable[..., Any]],
        system_prompt: str = SYSTEM_PROMPT,
        max_tool_rounds: int = 8,
        stream_timeout: float | None = None,
        verbose: bool = False,
    ):
        self.llm = llm
        self.tools_spec = list(tools_spec)
        self.tool_map = tool_map
        self.system_prompt = system_prompt
        self.max_tool_rounds = max_tool_rounds
        self.stream_timeout = stream_timeout
        self.verbose = verbose
        self.sessions: Dict[str, List[Dict[str, Any]]] = {}

    def create_session(self) -> SessionHandle:
        session = SessionHandle(id=uuid.uuid4().hex)
        self.sessions[session.id] = [{"role": "system", "content": self.system_prompt}]
        logger.debug("Created session %s", session.id)
        return session

    def send(self, session: SessionHandle, message: str) -> EventStream:
        cancelled = threading.Event()
        return EventStream(
            partial(self._run_turn, session, message, cancelled),
            timeout=self.stream_timeout,
            cancelled=cancelled,
        )

    def close(self) -> None:
        self.llm.close()

    # ------------------------------------------------------------------

    def _run_turn(
        self, session: SessionHandle, message: str, cancelled: threading.Event, emit: Emit
    ) -> None:
        """Run one turn on the stream's producer thread.

        Once ``cancelled`` is set the consumer has moved on; the turn stops at
        the next checkpoint and never writes to the session history.
        """
        history = self.sessions.get(session.id)
        if history is None:
            emit(StreamError(code="unknown_session", message=f"Unknown session: {session.id}"))
            return

        working_messages = history + [{"role": "user", "content": message}]

        for round_no in range(self.max_tool_rounds):
            if cancelled.is_set():
                logger.debug("Turn for session %s cancelled before round %s", session.id, round_no + 1)
                return
            if self.verbose:
                logger.info("Agent round %s/%s", round_no + 1, self.max_tool_rounds)

            try:
                text, tool_calls = self._stream_round(working_messages, emit)
            except Exception as exc:
                logger.error("LLM call failed: %s", exc)
                emit(StreamError(code="llm_error", message=str(exc)))
                return

            assistant: Dict[str, Any] = {"role": "assistant", "content": text or None}
            if tool_calls:
                assistant["tool_calls"] = [
                    {
                        "id": call["id"],
                        "type": "function",
                        "function": {"name": call["name"], "arguments": call["arguments"]},
                    }
                    for call in tool_calls
                ]
            working_messages.append(assistant)

            if not tool_calls:
                if cancelled.is_set():
                    logger.debug("Dropping late answer for cancelled turn in session %s", session.id)
                    return
                # Persist only user question and final answer to history
                history.append({"role": "user", "content": message})
                history.append({"role": "assistant", "content": text})
                return

            for call in tool_calls:
                if cancelled.is_set():
                    return
                try:
                    args = json.loads(call["arguments"] or "{}")
                except json.JSONDecodeError:
                    args = {}
                if not isinstance(args, dict):
                    args = {}

                emit(ToolCall(name=call["name"], arguments=args, call_id=call["id"]))
                result = self._execute_tool(call["name"], args)
                emit(ToolResult(fields=result, name=call["name"]))

                working_messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call["id"],
                        "content": json.dumps(result, default=str),
                    }
                )

        logger.warning("Max tool rounds (%s) reached without a final answer", self.max_tool_rounds)
        emit(
            StreamError(
                code="max_tool_rounds",
                message=f"No final answer after {self.max_tool_rounds} tool rounds",
            )
        )

    def _stream_round(
        self, messages: List[Dict[str, Any]], emit: Emit
    ) -> Tuple[str, List[Dict[str, str]]]:
        """Stream one completion, emitting text as it arrives.

        Returns the full text and the tool calls assembled from their deltas,
        ordered by the index the model gave them.
        """
        text_parts: List[str] = []
        calls: Dict[int, Dict[str, str]] = {}

        for chunk in self.llm.chat_stream(
            messages=messages, tools=self.tools_spec or None, verbose=self.verbose
        ):
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta is None:
                continue

            if delta.content:
                text_parts.append(delta.content)
                emit(TextChunk(content=delta.content))

            for tc in delta.tool_calls or []:
                slot = calls.setdefault(tc.index, {"id": "", "name": "", "arguments": ""})
                if tc.id:
                    slot["id"] = tc.id
                if tc.function is not None:
                    if tc.function.name:
                        slot["name"] += tc.function.name
                    if tc.function.arguments:
                        slot["arguments"] += tc.function.arguments

        tool_calls = [calls[index] for index in sorted(calls)]
        for position, call in enumerate(tool_calls):
            if not call["id"]:
                call["id"] = f"call_{position}"
        return "".join(text_parts), tool_calls

    def _execute_tool(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        handler = self.tool_map.get(name)
        if self.verbose:
            logger.info("Calling tool: %s(%s)", name, _format_args_short(args))

        if handler is None:
            if self.verbose:
                logger.info("Tool %s: ERROR (unknown tool)", name)
            return {"error": f"Unknown tool: {name}"}

        try:
            result = handler(**args)
        except Exception as exc:
            logger.exception("Tool %s failed", name)
            return {"error": str(exc)}

        if self.verbose:
            logger.info("Tool %s: done", name)
        if not isinstance(result, dict):
            return {"result": result}
        return result
