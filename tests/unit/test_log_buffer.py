from __future__ import annotations

import threading

import pytest

from engine_launcher.launcher.log_buffer import LogBuffer, LogLine


def test_oldest_lines_are_evicted() -> None:
    buffer = LogBuffer(max_lines=3)

    for i in range(5):
        buffer.append(f"line {i}")

    assert [line.message for line in buffer.snapshot()] == ["line 2", "line 3", "line 4"]
    assert len(buffer) == 3


def test_snapshot_limit_keeps_newest() -> None:
    buffer = LogBuffer()
    buffer.append("a")
    buffer.append("b", True)
    buffer.append("c")

    assert [(line.message, line.is_error) for line in buffer.snapshot(2)] == [
        ("b", True),
        ("c", False),
    ]
    assert buffer.snapshot(0) == []


def test_clear() -> None:
    buffer = LogBuffer()
    buffer.append("x")

    buffer.clear()

    assert len(buffer) == 0


def test_sink_and_subscribers() -> None:
    buffer = LogBuffer()
    received: list[LogLine] = []
    unsubscribe = buffer.subscribe(received.append)

    sink = buffer.as_sink()
    sink("hello", False)
    sink("boom", True)
    unsubscribe()
    sink("after", False)

    assert [(line.message, line.is_error) for line in received] == [("hello", False), ("boom", True)]
    assert len(buffer) == 3


def test_failing_subscriber_does_not_break_append() -> None:
    buffer = LogBuffer()

    def broken(_line: LogLine) -> None:
        raise RuntimeError("gone")

    buffer.subscribe(broken)
    buffer.append("still stored")

    assert buffer.snapshot()[0].message == "still stored"


def test_concurrent_appends_are_all_kept() -> None:
    buffer = LogBuffer(max_lines=1000)

    def writer(n: int) -> None:
        for i in range(100):
            buffer.append(f"{n}:{i}")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(buffer) == 500


def test_max_lines_must_be_positive() -> None:
    with pytest.raises(ValueError):
        LogBuffer(max_lines=0)
