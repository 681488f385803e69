from __future__ import annotations
from typing import Callable, Optional, Protocol

ChangeCallback = Callable[[Optional[str]], None]
Unsubscribe = Callable[[], None]


class SnapshotRepo(Protocol):
    """
    Key-value storage for whole-library snapshots.
    - get returns None when the key was never written
    - put overwrites the full value
    - subscribe calls back with the new raw value whenever the key is written
    """
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        ...
