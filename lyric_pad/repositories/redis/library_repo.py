"""
Redis-based repository for library snapshots.
The snapshot lives under one key; every write is announced on a pub/sub
channel so other processes (a second API worker, the wipe script) can reload.
"""

from __future__ import annotations
from typing import Dict, List, Optional
import logging
import threading
import redis

from lyric_pad.repositories.base import ChangeCallback, Unsubscribe

logger = logging.getLogger(__name__)


class LibraryRepoRedis:
    """
    Redis-based snapshot store with change notifications.
    Data survives API restarts!
    """
    _singleton: "LibraryRepoRedis | None" = None

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        channel: str = "lyric-pad:changes",
        client: "redis.Redis | None" = None,
    ) -> None:
        self.redis_client = client or redis.from_url(redis_url, decode_responses=False)
        self.channel = channel
        self._subscribers: Dict[str, List[ChangeCallback]] = {}
        self._lock = threading.Lock()
        self._pubsub = None
        self._listener = None

    @classmethod
    def instance(cls, redis_url: str = "redis://localhost:6379/0", channel: str = "lyric-pad:changes") -> "LibraryRepoRedis":
        if not cls._singleton:
            cls._singleton = cls(redis_url, channel)
        return cls._singleton

    def get(self, key: str) -> Optional[str]:
        data = self.redis_client.get(key)
        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return data

    def put(self, key: str, value: str) -> None:
        self.redis_client.set(key, value.encode("utf-8"))
        self.redis_client.publish(self.channel, key)

    def delete(self, key: str) -> bool:
        deleted = self.redis_client.delete(key)
        if deleted:
            self.redis_client.publish(self.channel, key)
        return deleted > 0

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)
            self._ensure_listener()

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
        return unsubscribe

    def close(self) -> None:
        with self._lock:
            if self._listener is not None:
                self._listener.stop()
                self._listener = None
            if self._pubsub is not None:
                self._pubsub.close()
                self._pubsub = None

    # --------------- pub/sub ---------------
    def _ensure_listener(self) -> None:
        # caller holds self._lock
        if self._listener is not None:
            return
        self._pubsub = self.redis_client.pubsub(ignore_subscribe_messages=True)
        self._pubsub.subscribe(**{self.channel: self._handle_message})
        self._listener = self._pubsub.run_in_thread(sleep_time=0.05, daemon=True)
        logger.info("Listening for library changes on %s", self.channel)

    def _handle_message(self, message: dict) -> None:
        key = message.get("data")
        if isinstance(key, bytes):
            key = key.decode("utf-8")
        with self._lock:
            callbacks = list(self._subscribers.get(key, []))
        if not callbacks:
            return
        try:
            value = self.get(key)
        except redis.RedisError:
            logger.warning("Could not re-read %s after change notification", key, exc_info=True)
            return
        for cb in callbacks:
            try:
                cb(value)
            except Exception:
                logger.exception("Change subscriber for %s failed", key)
