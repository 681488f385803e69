from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable, Dict, List

from lyric_pad.core.errors import NotFound

_SPACES_RE = re.compile(r" +")
_PUNCTUATION_RE = re.compile(r"[.,?!()\[\]{}\"']")


def trim_whitespace(text: str) -> str:
    return "\n".join(line.strip() for line in text.split("\n"))


def remove_empty_lines(text: str) -> str:
    return "\n".join(line for line in text.split("\n") if line.strip())


def collapse_spaces(text: str) -> str:
    return _SPACES_RE.sub(" ", text)


def remove_punctuation(text: str) -> str:
    return _PUNCTUATION_RE.sub("", text)


@dataclass(frozen=True)
class CleaningAction:
    """A named, stateless lyric transform offered by the cleaner view."""
    key: str
    name: str
    description: str
    apply: Callable[[str], str]


CLEANING_ACTIONS: List[CleaningAction] = [
    CleaningAction("trim-whitespace", "Trim Whitespace",
                   "Remove space from start/end of each line.", trim_whitespace),
    CleaningAction("remove-empty-lines", "Remove Empty Lines",
                   "Delete all lines that are completely empty.", remove_empty_lines),
    CleaningAction("collapse-spaces", "Collapse Spaces",
                   "Replace multiple spaces with a single space.", collapse_spaces),
    CleaningAction("remove-punctuation", "Remove Punctuation",
                   "Removes .,?!()[]{} and quote characters.", remove_punctuation),
]

_BY_KEY: Dict[str, CleaningAction] = {a.key: a for a in CLEANING_ACTIONS}


def get_action(key: str) -> CleaningAction:
    action = _BY_KEY.get(key)
    if action is None:
        raise NotFound("Cleaning action", key)
    return action


def clean(text: str, key: str) -> str:
    return get_action(key).apply(text)
