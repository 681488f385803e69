from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List


class RepeatedPhrase(BaseModel):
    phrase: str
    count: int


class Tone(BaseModel):
    """Raw keyword hit counts; not normalized."""
    positive: int = 0
    negative: int = 0


class AnalysisReport(BaseModel):
    """
    Statistics for one lyric text.
    - line_lengths: raw length of each non-blank line, in order
    - repeated_phrases: at most five 3-word phrases seen more than once
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    word_count: int = 0
    line_count: int = 0
    unique_words: int = 0
    character_count: int = 0
    repeated_phrases: List[RepeatedPhrase] = Field(default_factory=list)
    line_lengths: List[int] = Field(default_factory=list)
    tone: Tone = Field(default_factory=Tone)
