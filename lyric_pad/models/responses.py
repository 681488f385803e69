"""
Response bodies for the HTTP surface. Mutations report 'saved' so a client
can warn that a change only lives in memory.
"""

from __future__ import annotations
from pydantic import BaseModel
from typing import Optional

from .selection import ActiveView, Selection
from .song import Song, Version


class SongResult(BaseModel):
    song: Song
    selection: Selection
    saved: bool = True


class VersionResult(BaseModel):
    version: Version
    selection: Selection
    saved: bool = True


class SessionState(BaseModel):
    selection: Selection
    view: ActiveView
    song: Optional[Song] = None
    version: Optional[Version] = None
    saved: bool = True


class CleaningActionInfo(BaseModel):
    key: str
    name: str
    description: str
