from __future__ import annotations
from fastapi import APIRouter, HTTPException
from fastapi import status as http

from lyric_pad.api.errors import http_error
from lyric_pad.core.errors import LyricPadError
from lyric_pad.models.analysis import AnalysisReport
from lyric_pad.models.responses import SessionState, VersionResult
from lyric_pad.models.selection import ActiveView
from lyric_pad.services.session_service import EditorSession

router = APIRouter()
svc = EditorSession.instance()


def session_state() -> SessionState:
    song, version = svc.current()
    return SessionState(
        selection=svc.selection,
        view=svc.view,
        song=song,
        version=version,
        saved=svc.saved,
    )


@router.get("", response_model=SessionState)
def get_session():
    return session_state()


@router.put("/view", response_model=SessionState)
def set_view(payload: dict):
    try:
        view = ActiveView(payload.get("view"))
    except ValueError:
        allowed = ", ".join(v.value for v in ActiveView)
        raise HTTPException(http.HTTP_400_BAD_REQUEST, detail=f"view must be one of: {allowed}")
    svc.set_view(view)
    return session_state()


@router.put("/lyrics", response_model=VersionResult)
def update_current_lyrics(payload: dict):
    lyrics = payload.get("lyrics")
    if not isinstance(lyrics, str):
        raise HTTPException(http.HTTP_400_BAD_REQUEST, detail="lyrics is required")
    try:
        version = svc.update_current_lyrics(lyrics)
    except LyricPadError as e:
        raise http_error(e)
    return VersionResult(version=version, selection=svc.selection, saved=svc.saved)


@router.get("/analysis", response_model=AnalysisReport)
def analyze_current():
    try:
        return svc.analyze_current()
    except LyricPadError as e:
        raise http_error(e)


@router.post("/clean/{action}", response_model=VersionResult)
def clean_current(action: str):
    try:
        version = svc.clean_current(action)
    except LyricPadError as e:
        raise http_error(e)
    return VersionResult(version=version, selection=svc.selection, saved=svc.saved)
