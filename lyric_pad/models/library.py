from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional

from .song import Song


class Library(BaseModel):
    """
    Every song the user has, in insertion order (newest first).
    Persisted as one snapshot: the JSON list of songs under a single storage key.
    """
    songs: List[Song] = Field(default_factory=list)

    @field_validator('songs')
    @classmethod
    def validate_unique_ids(cls, v: List[Song]) -> List[Song]:
        """Song ids are unique within the library, version ids within their song."""
        seen = set()
        for song in v:
            if song.id in seen:
                raise ValueError(f"duplicate song id {song.id}")
            seen.add(song.id)
            version_ids = [ver.id for ver in song.versions]
            if len(set(version_ids)) != len(version_ids):
                raise ValueError(f"duplicate version id in song {song.id}")
        return v

    @classmethod
    def from_snapshot(cls, data: Any) -> "Library":
        return cls(songs=data)

    def to_snapshot(self) -> List[dict]:
        return [s.model_dump(mode='json', by_alias=True) for s in self.songs]

    def find_song(self, song_id: Optional[str]) -> Optional[Song]:
        if song_id is None:
            return None
        for s in self.songs:
            if s.id == song_id:
                return s
        return None
