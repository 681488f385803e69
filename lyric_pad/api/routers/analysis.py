from __future__ import annotations
from fastapi import APIRouter, HTTPException
from fastapi import status as http
from typing import Any, Dict, List

from lyric_pad.api.errors import http_error
from lyric_pad.core.errors import LyricPadError
from lyric_pad.models.analysis import AnalysisReport
from lyric_pad.models.responses import CleaningActionInfo
from lyric_pad.services.analysis_service import analyze_lyrics
from lyric_pad.services.cleaner_service import CLEANING_ACTIONS, clean

router = APIRouter()


def _lyrics_from(payload: Dict[str, Any]) -> str:
    lyrics = payload.get("lyrics")
    if not isinstance(lyrics, str):
        raise HTTPException(http.HTTP_400_BAD_REQUEST, detail="lyrics is required")
    return lyrics


@router.post("/analysis", response_model=AnalysisReport)
def analyze(payload: dict):
    """Analyze arbitrary text without touching the library."""
    return analyze_lyrics(_lyrics_from(payload))


@router.get("/cleaner/actions", response_model=List[CleaningActionInfo])
def list_cleaning_actions():
    return [CleaningActionInfo(key=a.key, name=a.name, description=a.description) for a in CLEANING_ACTIONS]


@router.post("/cleaner/{action}")
def preview_cleaning(action: str, payload: dict) -> Dict[str, str]:
    lyrics = _lyrics_from(payload)
    try:
        return {"lyrics": clean(lyrics, action)}
    except LyricPadError as e:
        raise http_error(e)
