from __future__ import annotations
from typing import List, Optional, Tuple
import threading

from lyric_pad.core.errors import NotFound
from lyric_pad.models.analysis import AnalysisReport
from lyric_pad.models.selection import ActiveView, Selection
from lyric_pad.models.song import Song, Version
from lyric_pad.services.analysis_service import analyze_lyrics
from lyric_pad.services.cleaner_service import clean
from lyric_pad.services.library_store import LibraryStore


class EditorSession:
    """
    UI-side state for one editor: which song/version is open and which view
    is showing. Forwards every change to the LibraryStore with the current
    selection and keeps the selection the store hands back.
    """
    _singleton: "EditorSession | None" = None

    def __init__(self, store: LibraryStore | None = None) -> None:
        self.store = store or LibraryStore.instance()
        self.selection = Selection.empty()
        self.view = ActiveView.EDITOR
        self._lock = threading.Lock()

    @classmethod
    def instance(cls) -> "EditorSession":
        if not cls._singleton:
            cls._singleton = cls()
        return cls._singleton

    @property
    def saved(self) -> bool:
        return not self.store.unsaved

    def current(self) -> Tuple[Optional[Song], Optional[Version]]:
        return self.store.resolve(self.selection)

    def _require_current(self) -> Tuple[Song, Version]:
        song, version = self.current()
        if song is None or version is None:
            raise NotFound("Active song")
        return song, version

    def set_view(self, view: ActiveView) -> ActiveView:
        self.view = view
        return view

    # --------------- songs ---------------
    def list_songs(self) -> List[Song]:
        return self.store.list_songs()

    def create_song(self) -> Song:
        with self._lock:
            song, self.selection = self.store.create_song()
        return song

    def select_song(self, song_id: str) -> Selection:
        with self._lock:
            self.selection = self.store.select_song(song_id)
            self.view = ActiveView.EDITOR
            return self.selection

    def select_version(self, song_id: str, version_id: str) -> Selection:
        with self._lock:
            self.selection = self.store.select_version(song_id, version_id)
            return self.selection

    def rename_song(self, song_id: str, title: str) -> Song:
        return self.store.rename_song(song_id, title)

    def delete_song(self, song_id: str) -> None:
        with self._lock:
            self.selection = self.store.delete_song(song_id, self.selection)

    # --------------- versions ---------------
    def set_lyrics(self, song_id: str, version_id: str, text: str) -> Version:
        return self.store.set_lyrics(song_id, version_id, text)

    def add_version(self, song_id: str | None = None) -> Version:
        with self._lock:
            target = song_id or self.selection.active_song_id
            if target is None:
                raise NotFound("Active song")
            version, self.selection = self.store.add_version(target, self.selection)
        return version

    def rename_version(self, song_id: str, version_id: str, name: str) -> Version:
        return self.store.rename_version(song_id, version_id, name)

    def delete_version(self, song_id: str, version_id: str) -> Selection:
        with self._lock:
            self.selection = self.store.delete_version(song_id, version_id, self.selection)
            return self.selection

    # --------------- current version ---------------
    def update_current_lyrics(self, text: str) -> Version:
        song, version = self._require_current()
        return self.store.set_lyrics(song.id, version.id, text)

    def analyze_current(self) -> AnalysisReport:
        _, version = self._require_current()
        return analyze_lyrics(version.lyrics)

    def clean_current(self, action_key: str) -> Version:
        song, version = self._require_current()
        return self.store.set_lyrics(song.id, version.id, clean(version.lyrics, action_key))
