"""OpenAI-compatible chat completions client."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from openai import OpenAI

from .config import Settings
from .log import get_logger

logger = get_logger(__name__)


class LLMClient:
    """Thin wrapper over the OpenAI SDK bound to one model."""

    def __init__(self, settings: Settings):
        self.client = OpenAI(base_url=settings.base_url, api_key=settings.api_key)
        self.model = settings.model
        self.temperature = settings.temperature

    def chat_stream(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]] | None = None,
        verbose: bool = False,
    ) -> Iterator[Any]:
        """Stream a chat completion, yielding ChatCompletionChunk objects."""
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": True,
            "temperature": self.temperature,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        if verbose:
            logger.info("Requesting %s with %d message(s)", self.model, len(messages))

        stream = self.client.chat.completions.create(**kwargs)
        for chunk in stream:
            yield chunk

    def close(self) -> None:
        self.client.close()
