"""Event types streamed by the agent during a turn."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class TextChunk:
    """Fragment of the agent's natural-language answer."""
    content: str


@dataclass(frozen=True)
class ToolCall:
    """Agent invoked a tool."""
    name: str = ""
    arguments: Dict[str, Any] = field(default_factory=dict)
    call_id: str = ""


@dataclass(frozen=True)
class ToolResult:
    """Result returned by a tool invocation."""
    fields: Mapping[str, Any] = field(default_factory=dict)
    name: str = ""

    @property
    def failed(self) -> bool:
        return is_failed_result(self.fields)


@dataclass(frozen=True)
class StreamError:
    """Stream-level error reported by the agent or its transport."""
    code: str | None = None
    message: str | None = None


# Type alias for any event
AgentEvent = TextChunk | ToolCall | ToolResult | StreamError


def is_failed_result(fields: Any) -> bool:
    """Return True if a tool result payload signals failure.

    A result failed when it carries an ``error`` key, or a ``status`` key whose
    value equals ``"error"`` ignoring case. Anything else counts as success.
    """
    if not isinstance(fields, Mapping):
        return False
    if "error" in fields:
        return True
    return "status" in fields and str(fields["status"]).lower() == "error"
