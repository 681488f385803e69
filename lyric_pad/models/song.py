from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List
from uuid import uuid4


def new_id() -> str:
    return str(uuid4())


class Version(BaseModel):
    """
    One draft of a song's lyrics.
    - id / created_at never change after creation
    - created_at is the only ordering key for "most recent version"
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    name: str = "Verse 1"
    lyrics: str = ""
    created_at: int = 0


class Song(BaseModel):
    """
    A titled collection of versions.
    'updated_at' is refreshed by the store on any change to the song or its versions
    and drives the most-recently-touched listing order.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    title: str = "New Song"
    versions: List[Version] = Field(default_factory=list)
    updated_at: int = 0

    @field_validator('versions')
    @classmethod
    def validate_versions(cls, v: List[Version]) -> List[Version]:
        """A song must always keep at least one version."""
        if not v:
            raise ValueError("a song needs at least one version")
        return v

    def find_version(self, version_id: str | None) -> Version | None:
        if version_id is None:
            return None
        for v in self.versions:
            if v.id == version_id:
                return v
        return None

    def latest_version(self) -> Version:
        return max(self.versions, key=lambda v: v.created_at)
