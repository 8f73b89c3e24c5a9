"""
Tests for the bounded, batched event log.
"""

import threading

import pytest

from crawler.combat.event_log import EventLog, LogEntry
from crawler.core.constants import LogCategory


@pytest.fixture
def log():
    ticks = iter(range(1_000_000))
    return EventLog(clock=lambda: float(next(ticks)))


def test_log_keeps_newest_entries(log):
    for index in range(3005):
        log.add(f"entry {index}")
    entries = log.entries()
    assert len(log) == 3000
    assert entries[0].text == "entry 5"
    assert entries[-1].text == "entry 3004"


def test_entries_outside_batch_commit_immediately(log):
    received = []
    log.subscribe(received.append)
    entry = log.add("hello", LogCategory.STATUS)
    assert log.entries() == [entry]
    assert received == [[entry]]


def test_batch_commits_once_on_exit(log):
    received = []
    log.subscribe(received.append)
    with log.batch():
        log.add("one")
        log.add("two")
        assert len(log) == 0
        assert log.pending_count() == 2
    assert len(log) == 2
    assert len(received) == 1


def test_nested_batches_commit_on_outermost_exit(log):
    received = []
    log.subscribe(received.append)
    with log.batch():
        log.add("outer")
        with log.batch():
            log.add("inner")
        assert len(log) == 0
    assert [entry.text for entry in log.entries()] == ["outer", "inner"]
    assert len(received) == 1


def test_batch_is_sorted_by_timestamp_and_stable(log):
    with log.batch():
        log.add("late", timestamp=30)
        log.add("early", timestamp=10)
        log.add("middle a", timestamp=20)
        log.add("middle b", timestamp=20)
    assert [entry.text for entry in log.entries()] == [
        "early",
        "middle a",
        "middle b",
        "late",
    ]


def test_extend_and_tail(log):
    log.extend(
        [LogEntry(text=f"bulk {index}", timestamp=index) for index in range(5)]
    )
    assert [entry.text for entry in log.tail(2)] == ["bulk 3", "bulk 4"]
    assert log.tail(0) == []


def test_batch_commits_even_when_block_raises(log):
    with pytest.raises(RuntimeError):
        with log.batch():
            log.add("before failure")
            raise RuntimeError("boom")
    assert [entry.text for entry in log.entries()] == ["before failure"]


def test_unsubscribe_and_clear(log):
    received = []
    log.subscribe(received.append)
    log.unsubscribe(received.append)
    log.add("quiet")
    assert received == []
    log.clear()
    assert len(log) == 0


def test_batches_from_two_threads_are_committed_once():
    log = EventLog(max_entries=100_000)
    batches = []
    log.subscribe(batches.append)

    def write(name: str) -> None:
        for index in range(5000):
            with log.batch():
                log.add(f"{name} {index}")
                log.add(f"{name} {index} follow-up")

    threads = [threading.Thread(target=write, args=(name,)) for name in ("a", "b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    texts = [entry.text for entry in log.entries()]
    assert len(texts) == 20000
    assert len(set(texts)) == 20000
    assert log.pending_count() == 0
    assert len(batches) == 10000
    for batch in batches:
        assert len(batch) == 2
        assert len({entry.text.split()[0] for entry in batch}) == 1


def test_write_outside_batch_waits_for_other_thread(log):
    batches = []
    log.subscribe(batches.append)
    inside = threading.Event()
    release = threading.Event()

    def hold_batch() -> None:
        with log.batch():
            log.add("held")
            inside.set()
            release.wait(2)

    holder = threading.Thread(target=hold_batch)
    holder.start()
    assert inside.wait(2)
    writer = threading.Thread(target=log.add, args=("outside",))
    writer.start()
    writer.join(0.1)
    assert writer.is_alive()
    release.set()
    holder.join()
    writer.join()
    assert [[entry.text for entry in batch] for batch in batches] == [
        ["held"],
        ["outside"],
    ]
