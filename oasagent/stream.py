"""Ordered, single-use event streams fed by a producer."""

from __future__ import annotations

import queue
import threading
from typing import Callable, Iterable, Iterator

from .events import AgentEvent, StreamError
from .log import get_logger

logger = get_logger(__name__)

Emit = Callable[[AgentEvent], None]
Producer = Callable[[Emit], None]

_DONE = object()


class EventStream:
    """Events for one user message, consumed once and in delivery order.

    A producer callable receives an ``emit`` callback and runs on a daemon
    thread; events cross over through a queue, so the consumer renders each
    event as soon as it is emitted. Streams built with ``from_iterable`` are
    pulled lazily on the consumer's thread unless ``threaded=True``. A
    producer exception ends the stream with a ``StreamError`` instead of
    propagating.

    ``cancelled`` is set when the consumer gives up on the stream (idle
    timeout). Producers that outlive their turn must check it and stop
    touching shared state once it is set.
    """

    def __init__(
        self,
        producer: Producer,
        threaded: bool = True,
        timeout: float | None = None,
        name: str = "oasagent-stream",
        cancelled: threading.Event | None = None,
    ):
        self._producer = producer
        self._threaded = threaded
        self._timeout = timeout
        self._name = name
        self._events: Iterable[AgentEvent] | None = None
        self._consumed = False
        self.cancelled = cancelled or threading.Event()

    @classmethod
    def from_iterable(cls, events: Iterable[AgentEvent], threaded: bool = False, **kwargs) -> "EventStream":
        def _produce(emit: Emit) -> None:
            for event in events:
                emit(event)

        stream = cls(_produce, threaded=threaded, **kwargs)
        stream._events = events
        return stream

    def __iter__(self) -> Iterator[AgentEvent]:
        if self._consumed:
            raise RuntimeError("EventStream can only be consumed once")
        self._consumed = True
        if self._events is not None and not self._threaded:
            return self._iter_inline()
        return self._iter_threaded()

    def _iter_inline(self) -> Iterator[AgentEvent]:
        # Pull lazily so each event reaches the consumer as it is produced
        try:
            yield from self._events
        except Exception as exc:
            logger.error("Event source failed: %s", exc)
            yield _error_from(exc)

    def _iter_threaded(self) -> Iterator[AgentEvent]:
        q: queue.Queue = queue.Queue()

        def _run() -> None:
            try:
                self._producer(q.put)
            except Exception as exc:
                logger.error("Event producer failed: %s", exc)
                q.put(_error_from(exc))
            finally:
                q.put(_DONE)

        threading.Thread(target=_run, name=self._name, daemon=True).start()

        while True:
            try:
                item = q.get(timeout=self._timeout)
            except queue.Empty:
                logger.warning("No event received for %ss; abandoning stream", self._timeout)
                self.cancelled.set()
                yield StreamError(code="timeout", message=f"No event received for {self._timeout}s")
                return
            if item is _DONE:
                return
            yield item


def _error_from(exc: BaseException) -> StreamError:
    return StreamError(code=type(exc).__name__, message=str(exc))
