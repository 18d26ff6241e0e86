from __future__ import annotations

import os
import threading
import time
import uuid

import pytest

from ringi.core.errors import LockTimeout
from ringi.domain.locking import ExclusiveSection, FileLock, ProcessLock


class FakeTime:
    """Monotonic clock that only moves when ``sleep`` is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _lock() -> ProcessLock:
    return ProcessLock(f"test-{uuid.uuid4().hex}")


def test_returns_action_result_and_releases_lock() -> None:
    lock = _lock()
    section = ExclusiveSection(lock)

    assert section.with_exclusive(lambda: 42) == 42
    assert not lock.locked()


def test_action_error_resurfaces_unchanged_and_lock_is_released() -> None:
    # Arrange
    lock = _lock()
    section = ExclusiveSection(lock)
    error = ValueError("boom")

    def action():
        raise error

    # Act / Assert
    with pytest.raises(ValueError) as exc:
        section.with_exclusive(action)

    assert exc.value is error
    assert not lock.locked()
    assert section.with_exclusive(lambda: "again") == "again"


def test_timeout_raises_lock_timeout_without_calling_action() -> None:
    # Arrange: another holder of the same named lock
    name = f"test-{uuid.uuid4().hex}"
    holder = ProcessLock(name)
    assert holder.try_acquire()
    clock = FakeTime()
    section = ExclusiveSection(
        ProcessLock(name),
        poll_interval=0.01,
        timeout=0.05,
        sleep=clock.sleep,
        monotonic=clock.monotonic,
    )
    calls = []

    # Act / Assert
    with pytest.raises(LockTimeout) as exc:
        section.with_exclusive(lambda: calls.append(1))

    assert calls == []
    assert exc.value.retryable is True
    assert clock.now == pytest.approx(0.05)
    assert all(s <= 0.01 + 1e-9 for s in clock.sleeps)
    holder.release()


def test_per_call_overrides_take_precedence() -> None:
    name = f"test-{uuid.uuid4().hex}"
    holder = ProcessLock(name)
    holder.try_acquire()
    clock = FakeTime()
    section = ExclusiveSection(ProcessLock(name), timeout=100.0, sleep=clock.sleep, monotonic=clock.monotonic)

    with pytest.raises(LockTimeout):
        section.with_exclusive(lambda: None, poll_interval=0.5, timeout=1.0)

    assert clock.sleeps == [0.5, 0.5]
    holder.release()


def test_waiter_acquires_once_holder_releases() -> None:
    name = f"test-{uuid.uuid4().hex}"
    holder = ProcessLock(name)
    holder.try_acquire()
    section = ExclusiveSection(ProcessLock(name), poll_interval=0.001, timeout=5.0)

    releaser = threading.Timer(0.05, holder.release)
    releaser.start()
    try:
        assert section.with_exclusive(lambda: "got it") == "got it"
    finally:
        releaser.join()


def test_concurrent_read_modify_write_loses_no_updates() -> None:
    # Arrange
    section = ExclusiveSection(_lock(), poll_interval=0.0005, timeout=10.0)
    state = {"count": 0}

    def increment():
        current = state["count"]
        time.sleep(0.001)
        state["count"] = current + 1

    def worker():
        for _ in range(10):
            section.with_exclusive(increment)

    # Act
    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Assert
    assert state["count"] == 50


def test_file_lock_is_exclusive_until_released(tmp_path) -> None:
    first = FileLock("requests", lock_dir=tmp_path)
    second = FileLock("requests", lock_dir=tmp_path)

    assert first.try_acquire()
    assert first.path.read_text().startswith(f"{os.getpid()}:")
    assert not second.try_acquire()

    first.release()
    assert not first.path.exists()
    assert second.try_acquire()
    second.release()


def test_file_lock_breaks_stale_lock(tmp_path) -> None:
    crashed = FileLock("requests", lock_dir=tmp_path, stale_after=60.0)
    crashed.try_acquire()
    old = time.time() - 3600
    os.utime(crashed.path, (old, old))

    fresh = FileLock("requests", lock_dir=tmp_path, stale_after=60.0)

    assert fresh.try_acquire()
    fresh.release()


def test_file_lock_release_leaves_successor_lock_in_place(tmp_path) -> None:
    slow = FileLock("requests", lock_dir=tmp_path, stale_after=60.0)
    assert slow.try_acquire()
    old = time.time() - 3600
    os.utime(slow.path, (old, old))
    successor = FileLock("requests", lock_dir=tmp_path, stale_after=60.0)
    assert successor.try_acquire()

    # Act
    slow.release()

    # Assert
    assert successor.path.exists()
    assert not FileLock("requests", lock_dir=tmp_path, stale_after=60.0).try_acquire()
    successor.release()
    assert not successor.path.exists()


def test_file_lock_does_not_break_a_fresh_lock(tmp_path) -> None:
    holder = FileLock("requests", lock_dir=tmp_path, stale_after=60.0)
    assert holder.try_acquire()

    assert not FileLock("requests", lock_dir=tmp_path, stale_after=60.0).try_acquire()
    assert list(tmp_path.iterdir()) == [holder.path]
    holder.release()


def test_file_lock_release_by_non_holder_is_a_no_op(tmp_path) -> None:
    holder = FileLock("requests", lock_dir=tmp_path)
    bystander = FileLock("requests", lock_dir=tmp_path)
    assert holder.try_acquire()

    bystander.release()

    assert holder.path.exists()
    holder.release()
    assert not holder.path.exists()


def test_section_over_file_lock_releases_on_error(tmp_path) -> None:
    lock = FileLock("requests", lock_dir=tmp_path)
    section = ExclusiveSection(lock)

    def action():
        raise RuntimeError("fail")

    with pytest.raises(RuntimeError):
        section.with_exclusive(action)

    assert not lock.path.exists()
