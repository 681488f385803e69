from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple
import json
import logging
import time

import redis

from lyric_pad.concurrency.read_write_lock import ReadWriteLock
from lyric_pad.core.config import settings
from lyric_pad.core.errors import InvalidArgument, NotFound
from lyric_pad.models.library import Library
from lyric_pad.models.selection import Selection
from lyric_pad.models.song import Song, Version
from lyric_pad.repositories.base import SnapshotRepo
from lyric_pad.repositories.memory.library_repo import LibraryRepo

# Import Redis repo if enabled
if settings.USE_REDIS:
    from lyric_pad.repositories.redis.library_repo import LibraryRepoRedis

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (redis.RedisError, OSError)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _resolve(library: Library, selection: Selection) -> Tuple[Optional[Song], Optional[Version]]:
    song = library.find_song(selection.active_song_id)
    if song is None:
        return None, None
    version = song.find_version(selection.active_version_id)
    if version is None:
        version = song.latest_version()
    return song, version


def _clean_name(value: str, what: str) -> str:
    name = (value or "").strip()
    if not name:
        raise InvalidArgument(f"{what} must not be empty")
    return name


class LibraryStore:
    """
    Owns the library and enforces its invariants:
      - every song keeps at least one version
      - updated_at moves on any change to a song or its versions
      - the whole library is written back after every successful mutation

    Mutations run against a deep copy that replaces the live library only when
    the operation completes, so a raised error never leaves partial changes.
    Selection is passed in and handed back; the store keeps none of it.
    """
    _singleton: "LibraryStore | None" = None

    def __init__(
        self,
        repo: SnapshotRepo | None = None,
        *,
        storage_key: str | None = None,
        clock: Callable[[], int] | None = None,
        watch: bool = True,
    ) -> None:
        if repo is None:
            if settings.USE_REDIS:
                repo = LibraryRepoRedis.instance(settings.REDIS_URL, settings.CHANGES_CHANNEL)
            else:
                repo = LibraryRepo.instance()
        self.repo = repo
        self.key = storage_key or settings.STORAGE_KEY
        self.backup_key = f"{self.key}:unreadable"
        self._clock = clock or wall_clock_ms
        self._lock = ReadWriteLock()
        self._last_stamp = 0
        self._last_written: Optional[str] = None
        self._unreadable: Optional[str] = None
        self.unsaved = False
        self.last_save_error: Optional[str] = None
        raw = self._fetch()
        self._install(raw, *self._parse(raw))
        self._unsubscribe = repo.subscribe(self.key, self._on_external_change) if watch else None

    @classmethod
    def instance(cls) -> "LibraryStore":
        if not cls._singleton:
            cls._singleton = cls()
        return cls._singleton

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # --------------- snapshot I/O ---------------
    def _fetch(self) -> Optional[str]:
        try:
            return self.repo.get(self.key)
        except STORAGE_ERRORS:
            logger.warning("Could not read library from storage key %s; starting empty", self.key, exc_info=True)
            return None

    def _parse(self, raw: Optional[str]) -> Tuple[Library, int, bool]:
        """
        Decode a stored snapshot into (library, highest timestamp, readable).
        Touches no store state, so it may run on any thread.
        """
        if raw is None:
            return Library(), 0, True
        try:
            library = Library.from_snapshot(json.loads(raw))
        except (TypeError, ValueError) as e:
            logger.error(
                "Stored library under %s is unreadable, treating it as empty; "
                "it will be kept under %s on the next save: %s",
                self.key, self.backup_key, e,
            )
            return Library(), 0, False
        stamp = 0
        for song in library.songs:
            stamp = max(stamp, song.updated_at, *(v.created_at for v in song.versions))
        return library, stamp, True

    # caller holds the write lock (or is __init__)
    def _install(self, raw: Optional[str], library: Library, stamp: int, readable: bool) -> None:
        self._library = library
        self._last_stamp = max(self._last_stamp, stamp)
        self._last_written = raw
        self._unreadable = None if readable else raw

    def _persist(self) -> bool:
        if self._unreadable is not None:
            try:
                self.repo.put(self.backup_key, self._unreadable)
            except STORAGE_ERRORS as e:
                return self._mark_unsaved(e)
            logger.warning("Kept the unreadable library snapshot under %s", self.backup_key)
            self._unreadable = None
        try:
            raw = json.dumps(self._library.to_snapshot())
        except (TypeError, ValueError) as e:
            return self._mark_unsaved(e)
        self._last_written = raw
        try:
            self.repo.put(self.key, raw)
        except STORAGE_ERRORS as e:
            return self._mark_unsaved(e)
        self.unsaved = False
        self.last_save_error = None
        return True

    def _mark_unsaved(self, error: Exception) -> bool:
        logger.warning("Library change kept in memory but not saved: %s", error)
        self.unsaved = True
        self.last_save_error = str(error)
        return False

    def _on_external_change(self, _value: Optional[str]) -> None:
        # Notifications may arrive late; what is stored now decides, not the payload.
        with self._lock.write_lock():
            try:
                raw = self.repo.get(self.key)
            except STORAGE_ERRORS:
                logger.warning("Could not re-read %s after change notification", self.key, exc_info=True)
                return
            if raw == self._last_written:
                return
            library, stamp, readable = self._parse(raw)
            self._install(raw, library, stamp, readable)
        logger.info("Library replaced from storage (%d songs)", len(library.songs))

    def reload(self) -> None:
        """Drop the in-memory library and re-read the stored snapshot."""
        with self._lock.write_lock():
            raw = self._fetch()
            self._install(raw, *self._parse(raw))

    # --------------- helpers ---------------
    def _now(self) -> int:
        stamp = int(self._clock())
        if stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp
        return stamp

    @contextmanager
    def _mutation(self) -> Iterator[Library]:
        with self._lock.write_lock():
            draft = self._library.model_copy(deep=True)
            yield draft
            self._library = draft
            self._persist()

    @staticmethod
    def _song(library: Library, song_id: str) -> Song:
        song = library.find_song(song_id)
        if song is None:
            raise NotFound("Song", song_id)
        return song

    @staticmethod
    def _version(song: Song, version_id: str) -> Version:
        version = song.find_version(version_id)
        if version is None:
            raise NotFound("Version", version_id)
        return version

    # --------------- reads ---------------
    def list_songs(self) -> List[Song]:
        """Songs, most recently updated first."""
        with self._lock.read_lock():
            songs = self._library.model_copy(deep=True).songs
        return sorted(songs, key=lambda s: s.updated_at, reverse=True)

    def get_song(self, song_id: str) -> Song:
        with self._lock.read_lock():
            return self._song(self._library, song_id).model_copy(deep=True)

    def snapshot(self) -> Library:
        with self._lock.read_lock():
            return self._library.model_copy(deep=True)

    def resolve(self, selection: Selection) -> Tuple[Optional[Song], Optional[Version]]:
        with self._lock.read_lock():
            song, version = _resolve(self._library, selection)
            if song is None:
                return None, None
            song = song.model_copy(deep=True)
            return song, song.find_version(version.id)

    # --------------- songs ---------------
    def create_song(self) -> Tuple[Song, Selection]:
        with self._mutation() as lib:
            now = self._now()
            version = Version(name="Verse 1", lyrics="", created_at=now)
            song = Song(title="New Song", versions=[version], updated_at=now)
            lib.songs.insert(0, song)
        logger.info("Created song %s", song.id)
        return song.model_copy(deep=True), Selection(active_song_id=song.id, active_version_id=version.id)

    def select_song(self, song_id: str) -> Selection:
        with self._lock.read_lock():
            song = self._song(self._library, song_id)
            return Selection(active_song_id=song.id, active_version_id=song.latest_version().id)

    def select_version(self, song_id: str, version_id: str) -> Selection:
        with self._lock.read_lock():
            song = self._song(self._library, song_id)
            version = self._version(song, version_id)
            return Selection(active_song_id=song.id, active_version_id=version.id)

    def rename_song(self, song_id: str, new_title: str) -> Song:
        with self._mutation() as lib:
            song = self._song(lib, song_id)
            song.title = _clean_name(new_title, "Song title")
            song.updated_at = self._now()
        logger.info("Renamed song %s", song_id)
        return song.model_copy(deep=True)

    def delete_song(self, song_id: str, selection: Selection) -> Selection:
        with self._mutation() as lib:
            song = self._song(lib, song_id)
            lib.songs.remove(song)
        logger.info("Deleted song %s (%d versions)", song_id, len(song.versions))
        if selection.active_song_id == song_id:
            return Selection.empty()
        return selection

    # --------------- versions ---------------
    def set_lyrics(self, song_id: str, version_id: str, text: str) -> Version:
        with self._mutation() as lib:
            song = self._song(lib, song_id)
            version = self._version(song, version_id)
            version.lyrics = text
            song.updated_at = self._now()
        logger.debug("Updated lyrics of %s/%s (%d chars)", song_id, version_id, len(text))
        return version.model_copy(deep=True)

    def add_version(self, song_id: str, selection: Selection) -> Tuple[Version, Selection]:
        """Branch the active version: the copy starts with its lyrics."""
        with self._mutation() as lib:
            song = self._song(lib, song_id)
            if selection.active_song_id == song_id:
                _, source = _resolve(lib, selection)
            else:
                source = song.latest_version()
            now = self._now()
            version = Version(
                name=f"Version {len(song.versions) + 1}",
                lyrics=source.lyrics,
                created_at=now,
            )
            song.versions.append(version)
            song.updated_at = now
        logger.info("Added version %s to song %s", version.id, song_id)
        return version.model_copy(deep=True), Selection(active_song_id=song_id, active_version_id=version.id)

    def rename_version(self, song_id: str, version_id: str, new_name: str) -> Version:
        with self._mutation() as lib:
            song = self._song(lib, song_id)
            version = self._version(song, version_id)
            version.name = _clean_name(new_name, "Version name")
            song.updated_at = self._now()
        logger.info("Renamed version %s of song %s", version_id, song_id)
        return version.model_copy(deep=True)

    def delete_version(self, song_id: str, version_id: str, selection: Selection) -> Selection:
        with self._mutation() as lib:
            song = self._song(lib, song_id)
            version = self._version(song, version_id)
            if len(song.versions) <= 1:
                raise InvalidArgument("A song must keep at least one version")
            was_active = (
                selection.active_song_id == song_id
                and _resolve(lib, selection)[1].id == version_id
            )
            song.versions.remove(version)
            song.updated_at = self._now()
            if was_active:
                selection = Selection(active_song_id=song_id, active_version_id=song.versions[0].id)
        logger.info("Deleted version %s of song %s", version_id, song_id)
        return selection
