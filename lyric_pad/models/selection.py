"""
Editor selection state. Never persisted; the store receives it explicitly
and hands back an updated copy.
"""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class ActiveView(str, Enum):
    EDITOR = "editor"
    CLEANER = "cleaner"
    ANALYZER = "analyzer"


class Selection(BaseModel):
    """
    Active song/version ids. Either may be unset or point at something that
    was deleted since; resolution happens against the library at read time.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    active_song_id: Optional[str] = None
    active_version_id: Optional[str] = None

    @classmethod
    def empty(cls) -> "Selection":
        return cls()
