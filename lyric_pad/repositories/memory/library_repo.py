from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import logging
import queue
import threading

from lyric_pad.repositories.base import ChangeCallback, Unsubscribe

logger = logging.getLogger(__name__)


class LibraryRepo:
    """
    In-process key-value store for library snapshots.
    Every write to a watched key is queued and delivered to the key's
    subscribers on a dispatch thread, the way Redis pub/sub delivers on its
    listener thread. A put never runs a subscriber on the writer's thread, so
    several stores sharing one repo cannot block on each other's locks.
    """
    _singleton: "LibraryRepo | None" = None

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}
        self._subscribers: Dict[str, List[ChangeCallback]] = {}
        self._lock = threading.Lock()
        self._events: "queue.Queue[Tuple[str, Optional[str]]]" = queue.Queue()
        self._dispatcher: Optional[threading.Thread] = None

    @classmethod
    def instance(cls) -> "LibraryRepo":
        if not cls._singleton:
            cls._singleton = cls()
        return cls._singleton

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._announce(key, value)

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._values:
                return False
            del self._values[key]
            self._announce(key, None)
        return True

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)
            if self._dispatcher is None:
                self._dispatcher = threading.Thread(target=self._dispatch, name="library-repo-changes", daemon=True)
                self._dispatcher.start()

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
        return unsubscribe

    def wait_for_notifications(self) -> None:
        """Block until every queued change has been delivered."""
        self._events.join()

    # caller holds self._lock; queue order follows write order
    def _announce(self, key: str, value: Optional[str]) -> None:
        if self._subscribers.get(key):
            self._events.put((key, value))

    def _dispatch(self) -> None:
        while True:
            key, value = self._events.get()
            try:
                with self._lock:
                    callbacks = list(self._subscribers.get(key, []))
                for cb in callbacks:
                    try:
                        cb(value)
                    except Exception:
                        logger.exception("Change subscriber for %s failed", key)
            finally:
                self._events.task_done()
