# lyric_pad/concurrency/read_write_lock.py
import threading
from contextlib import contextmanager


class ReadWriteLock:
    """
    Readers-writer lock guarding the in-memory library.
    - Readers share the lock; a writer holds it alone.
    - A waiting writer blocks new readers, so a steady stream of reads
      (listing songs, analysis) cannot starve a save.
    Not reentrant: never take it again while holding it.
    """
    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._active_readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: not self._writer_active and self._writers_waiting == 0)
            self._active_readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._active_readers -= 1
            if not self._active_readers:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                self._cond.wait_for(lambda: not self._writer_active and self._active_readers == 0)
            finally:
                self._writers_waiting -= 1
            self._writer_active = True

    def release_write(self) -> None:
        with self._cond:
            self._writer_active = False
            self._cond.notify_all()

    @contextmanager
    def read_lock(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
