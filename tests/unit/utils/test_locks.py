"""Unit tests for the ReadWriteLock in locks.py

Test coverage includes:

1. Shared access
   - Ensures several readers hold the lock at once.

2. Exclusive access
   - Ensures a writer waits for readers and excludes new readers.
   - Ensures a pending writer isn't starved by new readers.

3. Misuse
   - Ensures unmatched releases raise RuntimeError.
"""

import time
import threading

import pytest

from shortn.utils.locks import ReadWriteLock


def _start(target) -> threading.Thread:
    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread


# -------------------------------
# 1. Shared access
# -------------------------------


def test_readers_share_lock():
    lock = ReadWriteLock()
    both_inside = threading.Barrier(3)

    def reader():
        with lock.read_locked():
            both_inside.wait(timeout=5)

    threads = [_start(reader), _start(reader)]
    both_inside.wait(timeout=5)
    for thread in threads:
        thread.join(timeout=5)
        assert not thread.is_alive()


# -------------------------------
# 2. Exclusive access
# -------------------------------


def test_writer_waits_for_reader():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def writer():
        with lock.write_locked():
            acquired.set()

    lock.acquire_read()
    thread = _start(writer)
    assert not acquired.wait(timeout=0.1)

    lock.release_read()
    assert acquired.wait(timeout=5)
    thread.join(timeout=5)


def test_reader_waits_for_writer():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def reader():
        with lock.read_locked():
            acquired.set()

    lock.acquire_write()
    thread = _start(reader)
    assert not acquired.wait(timeout=0.1)

    lock.release_write()
    assert acquired.wait(timeout=5)
    thread.join(timeout=5)


def test_pending_writer_blocks_new_readers():
    """Ensure readers arriving after a waiting writer queue behind it."""
    lock = ReadWriteLock()
    order = []
    writer_waiting = threading.Event()

    def writer():
        writer_waiting.set()
        with lock.write_locked():
            order.append('writer')

    def late_reader():
        with lock.read_locked():
            order.append('reader')

    lock.acquire_read()
    writer_thread = _start(writer)
    writer_waiting.wait(timeout=5)
    # Wait until the writer is registered as pending
    for _ in range(500):
        if lock._waiting_writers:
            break
        time.sleep(0.01)
    reader_thread = _start(late_reader)
    time.sleep(0.1)
    assert order == []

    lock.release_read()
    writer_thread.join(timeout=5)
    reader_thread.join(timeout=5)

    assert order == ['writer', 'reader']


# -------------------------------
# 3. Misuse
# -------------------------------


def test_release_read_without_acquire():
    with pytest.raises(RuntimeError, match='release_read'):
        ReadWriteLock().release_read()


def test_release_write_without_acquire():
    with pytest.raises(RuntimeError, match='release_write'):
        ReadWriteLock().release_write()


def test_context_managers_release_on_error():
    lock = ReadWriteLock()

    with pytest.raises(KeyError):
        with lock.write_locked():
            raise KeyError('boom')
    with pytest.raises(KeyError):
        with lock.read_locked():
            raise KeyError('boom')

    # Both sides were released
    with lock.write_locked():
        pass
