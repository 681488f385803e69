"""
Statistics for a lyric text: counts, per-line lengths, repeated 3-word
phrases and a keyword tone score. Everything here is a pure function of the
input string.
"""

from __future__ import annotations
import re
from collections import Counter
from typing import List

from lyric_pad.models.analysis import AnalysisReport, RepeatedPhrase, Tone

POSITIVE_WORDS = frozenset({"love", "happy", "joy", "beautiful", "sun", "light", "hope", "dream", "good", "great"})
NEGATIVE_WORDS = frozenset({"hate", "sad", "pain", "dark", "lost", "fear", "bad", "cry", "storm", "end"})

PHRASE_LENGTH = 3
MAX_REPEATED_PHRASES = 5

_WORD_RE = re.compile(r"\w+")


def get_words(text: str) -> List[str]:
    """Lower-cased runs of word characters; everything else separates."""
    return _WORD_RE.findall(text.lower())


def get_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line.strip()]


def find_repeated_phrases(words: List[str]) -> List[RepeatedPhrase]:
    if len(words) < PHRASE_LENGTH:
        return []
    counts = Counter(
        " ".join(words[i:i + PHRASE_LENGTH])
        for i in range(len(words) - PHRASE_LENGTH + 1)
    )
    # Counter keeps first-seen order and sorted() is stable, so ties stay in text order
    repeated = [(phrase, n) for phrase, n in counts.items() if n > 1]
    repeated.sort(key=lambda item: item[1], reverse=True)
    return [RepeatedPhrase(phrase=p, count=n) for p, n in repeated[:MAX_REPEATED_PHRASES]]


def get_basic_tone(words: List[str]) -> Tone:
    tone = Tone()
    for word in words:
        if word in POSITIVE_WORDS:
            tone.positive += 1
        if word in NEGATIVE_WORDS:
            tone.negative += 1
    return tone


def analyze_lyrics(lyrics: str) -> AnalysisReport:
    if not lyrics.strip():
        return AnalysisReport()

    words = get_words(lyrics)
    lines = get_lines(lyrics)
    return AnalysisReport(
        word_count=len(words),
        line_count=len(lines),
        unique_words=len(set(words)),
        character_count=len(lyrics),
        repeated_phrases=find_repeated_phrases(words),
        line_lengths=[len(line) for line in lines],
        tone=get_basic_tone(words),
    )
