from __future__ import annotations
from fastapi import APIRouter, HTTPException
from fastapi import status as http
from typing import List

from lyric_pad.api.errors import http_error
from lyric_pad.api.routers.session import session_state
from lyric_pad.core.errors import LyricPadError
from lyric_pad.models.responses import SessionState, SongResult
from lyric_pad.models.song import Song
from lyric_pad.services.session_service import EditorSession

router = APIRouter()
svc = EditorSession.instance()


@router.get("", response_model=List[Song])
def list_songs():
    # most recently updated first
    return svc.list_songs()


@router.post("", response_model=SongResult, status_code=http.HTTP_201_CREATED)
def create_song():
    song = svc.create_song()
    return SongResult(song=song, selection=svc.selection, saved=svc.saved)


@router.get("/{song_id}", response_model=Song)
def get_song(song_id: str):
    try:
        return svc.store.get_song(song_id)
    except LyricPadError as e:
        raise http_error(e)


@router.put("/{song_id}", response_model=SongResult)
def rename_song(song_id: str, payload: dict):
    # Expect keys: title
    title = payload.get("title")
    if not isinstance(title, str):
        raise HTTPException(http.HTTP_400_BAD_REQUEST, detail="title is required")
    try:
        song = svc.rename_song(song_id, title)
    except LyricPadError as e:
        raise http_error(e)
    return SongResult(song=song, selection=svc.selection, saved=svc.saved)


@router.delete("/{song_id}", status_code=http.HTTP_204_NO_CONTENT)
def delete_song(song_id: str):
    # No confirmation here; clients ask the user before calling.
    try:
        svc.delete_song(song_id)
    except LyricPadError as e:
        raise http_error(e)
    return None


@router.post("/{song_id}/select", response_model=SessionState)
def select_song(song_id: str):
    try:
        svc.select_song(song_id)
    except LyricPadError as e:
        raise http_error(e)
    return session_state()
