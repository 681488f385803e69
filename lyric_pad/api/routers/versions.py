from __future__ import annotations
from fastapi import APIRouter, HTTPException
from fastapi import status as http

from lyric_pad.api.errors import http_error
from lyric_pad.api.routers.session import session_state
from lyric_pad.core.errors import LyricPadError
from lyric_pad.models.responses import SessionState, VersionResult
from lyric_pad.services.session_service import EditorSession

router = APIRouter()
svc = EditorSession.instance()


@router.post("/{song_id}/versions", response_model=VersionResult, status_code=http.HTTP_201_CREATED)
def add_version(song_id: str):
    """
    Branch the song: the new version starts with the lyrics of the active
    version and becomes the active one.
    """
    try:
        version = svc.add_version(song_id)
    except LyricPadError as e:
        raise http_error(e)
    return VersionResult(version=version, selection=svc.selection, saved=svc.saved)


@router.put("/{song_id}/versions/{version_id}", response_model=VersionResult)
def rename_version(song_id: str, version_id: str, payload: dict):
    name = payload.get("name")
    if not isinstance(name, str):
        raise HTTPException(http.HTTP_400_BAD_REQUEST, detail="name is required")
    try:
        version = svc.rename_version(song_id, version_id, name)
    except LyricPadError as e:
        raise http_error(e)
    return VersionResult(version=version, selection=svc.selection, saved=svc.saved)


@router.put("/{song_id}/versions/{version_id}/lyrics", response_model=VersionResult)
def set_lyrics(song_id: str, version_id: str, payload: dict):
    """
    Replace a version's lyrics verbatim.
    Expected payload keys:
    - lyrics: str (may be empty)
    """
    lyrics = payload.get("lyrics")
    if not isinstance(lyrics, str):
        raise HTTPException(http.HTTP_400_BAD_REQUEST, detail="lyrics is required")
    try:
        version = svc.set_lyrics(song_id, version_id, lyrics)
    except LyricPadError as e:
        raise http_error(e)
    return VersionResult(version=version, selection=svc.selection, saved=svc.saved)


@router.delete("/{song_id}/versions/{version_id}", status_code=http.HTTP_204_NO_CONTENT)
def delete_version(song_id: str, version_id: str):
    try:
        svc.delete_version(song_id, version_id)
    except LyricPadError as e:
        raise http_error(e)
    return None


@router.post("/{song_id}/versions/{version_id}/select", response_model=SessionState)
def select_version(song_id: str, version_id: str):
    try:
        svc.select_version(song_id, version_id)
    except LyricPadError as e:
        raise http_error(e)
    return session_state()
