"""Tests for EventStream delivery guarantees."""

import threading
import time

import pytest

from oasagent.events import StreamError, TextChunk, ToolCall, ToolResult
from oasagent.stream import EventStream


def numbered_chunks(count):
    return [TextChunk(str(i)) for i in range(count)]


class TestInlineStream:
    """Iterable streams pulled on the caller's thread, and default producer streams."""

    def test_from_iterable_preserves_order(self):
        events = numbered_chunks(5)
        assert list(EventStream.from_iterable(events)) == events

    def test_from_iterable_is_lazy(self):
        """Each event is handed over before the next one is produced."""
        produced = []

        def source():
            for i in range(3):
                produced.append(i)
                yield TextChunk(str(i))

        seen = []
        for event in EventStream.from_iterable(source()):
            seen.append((event.content, len(produced)))
        assert seen == [("0", 1), ("1", 2), ("2", 3)]

    def test_producer_callable(self):
        def producer(emit):
            emit(ToolCall(name="validate_openapi"))
            emit(ToolResult(fields={"status": "ok"}))

        events = list(EventStream(producer))
        assert [type(e) for e in events] == [ToolCall, ToolResult]

    def test_source_exception_becomes_stream_error(self):
        def source():
            yield TextChunk("before")
            raise ValueError("connection reset")

        events = list(EventStream.from_iterable(source()))
        assert events[0] == TextChunk("before")
        assert events[1] == StreamError(code="ValueError", message="connection reset")
        assert len(events) == 2

    def test_producer_exception_keeps_emitted_events(self):
        def producer(emit):
            emit(TextChunk("kept"))
            raise RuntimeError("boom")

        events = list(EventStream(producer))
        assert events == [TextChunk("kept"), StreamError(code="RuntimeError", message="boom")]

    def test_producer_callable_delivers_incrementally(self):
        """A default-constructed stream hands over events before the producer returns."""
        release = threading.Event()

        def producer(emit):
            emit(TextChunk("first"))
            release.wait(timeout=5)
            emit(TextChunk("second"))

        iterator = iter(EventStream(producer))
        start = time.monotonic()
        assert next(iterator) == TextChunk("first")
        assert time.monotonic() - start < 2
        assert not release.is_set()
        release.set()
        assert list(iterator) == [TextChunk("second")]

    def test_single_use(self):
        stream = EventStream.from_iterable([TextChunk("once")])
        list(stream)
        with pytest.raises(RuntimeError):
            iter(stream)


class TestThreadedStream:
    """Streams fed from a background producer thread."""

    def test_every_event_delivered_once_in_order(self):
        events = numbered_chunks(500)
        stream = EventStream.from_iterable(events, threaded=True)
        assert list(stream) == events

    def test_producer_runs_off_the_consumer_thread(self):
        threads = []

        def producer(emit):
            threads.append(threading.current_thread())
            emit(TextChunk("x"))

        list(EventStream(producer, threaded=True, name="test-producer"))
        assert threads[0] is not threading.current_thread()
        assert threads[0].name == "test-producer"

    def test_consumer_sees_events_before_producer_finishes(self):
        release = threading.Event()

        def producer(emit):
            emit(TextChunk("first"))
            release.wait(timeout=5)
            emit(TextChunk("second"))

        iterator = iter(EventStream(producer, threaded=True))
        assert next(iterator) == TextChunk("first")
        release.set()
        assert next(iterator) == TextChunk("second")
        assert list(iterator) == []

    def test_producer_exception_becomes_stream_error(self):
        def producer(emit):
            emit(TextChunk("partial"))
            raise ConnectionError("lost")

        events = list(EventStream(producer, threaded=True))
        assert events == [
            TextChunk("partial"),
            StreamError(code="ConnectionError", message="lost"),
        ]

    def test_idle_timeout_ends_stream_with_error(self):
        hang = threading.Event()

        def producer(emit):
            emit(TextChunk("started"))
            hang.wait(timeout=5)

        start = time.monotonic()
        stream = EventStream(producer, threaded=True, timeout=0.05)
        events = list(stream)
        hang.set()

        assert events[0] == TextChunk("started")
        assert isinstance(events[1], StreamError)
        assert events[1].code == "timeout"
        assert stream.cancelled.is_set()
        assert time.monotonic() - start < 5

    def test_no_timeout_waits_for_slow_producer(self):
        def producer(emit):
            time.sleep(0.05)
            emit(TextChunk("slow"))

        assert list(EventStream(producer, threaded=True)) == [TextChunk("slow")]
