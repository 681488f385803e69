"""
Store-level tests: invariants, selection handling and persistence.
Each test gets its own in-memory repository and a fixed clock.
"""
import json
import logging
import threading
import time

import pytest

from lyric_pad.core.errors import InvalidArgument, NotFound
from lyric_pad.models.selection import Selection
from lyric_pad.repositories.memory.library_repo import LibraryRepo
from lyric_pad.services.library_store import LibraryStore

KEY = "test-songs"


class FixedClock:
    def __init__(self, now: int = 1_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class FailingRepo(LibraryRepo):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def put(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        super().put(key, value)


class SlowRepo(LibraryRepo):
    """Widens the window in which a writer sits inside put."""

    def put(self, key: str, value: str) -> None:
        time.sleep(0.05)
        super().put(key, value)


def seed(repo: LibraryRepo, songs: list) -> None:
    repo.put(KEY, json.dumps(songs))


@pytest.fixture
def repo():
    return LibraryRepo()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(repo, clock):
    s = LibraryStore(repo, storage_key=KEY, clock=clock)
    yield s
    s.close()


def stored(repo: LibraryRepo) -> list:
    return json.loads(repo.get(KEY))


class TestSongs:
    def test_create_song_defaults(self, store, repo):
        song, selection = store.create_song()
        assert song.title == "New Song"
        assert len(song.versions) == 1
        assert song.versions[0].name == "Verse 1"
        assert song.versions[0].lyrics == ""
        assert selection == Selection(active_song_id=song.id, active_version_id=song.versions[0].id)

        data = stored(repo)
        assert data[0]["id"] == song.id
        assert data[0]["versions"][0]["createdAt"] == song.versions[0].created_at
        assert "updatedAt" in data[0]

    def test_new_song_goes_first_in_library(self, store):
        first, _ = store.create_song()
        second, _ = store.create_song()
        assert [s.id for s in store.snapshot().songs] == [second.id, first.id]

    def test_ids_unique_and_timestamps_increase_with_a_stuck_clock(self, store):
        songs = [store.create_song()[0] for _ in range(5)]
        assert len({s.id for s in songs}) == 5
        stamps = [s.versions[0].created_at for s in songs]
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == 5

    def test_list_orders_by_updated_at(self, store, clock):
        a, _ = store.create_song()
        clock.now = 2_000
        b, _ = store.create_song()
        assert [s.id for s in store.list_songs()] == [b.id, a.id]

        clock.now = 3_000
        store.rename_song(a.id, "Touched")
        assert [s.id for s in store.list_songs()] == [a.id, b.id]

    def test_rename_song(self, store, clock):
        song, _ = store.create_song()
        clock.now = 5_000
        renamed = store.rename_song(song.id, "  Midnight Train  ")
        assert renamed.title == "Midnight Train"
        assert renamed.updated_at == 5_000

    @pytest.mark.parametrize("title", ["", "   ", "\n\t"])
    def test_rename_song_blank_is_rejected(self, store, repo, title):
        song, _ = store.create_song()
        before = repo.get(KEY)
        with pytest.raises(InvalidArgument):
            store.rename_song(song.id, title)
        after = store.get_song(song.id)
        assert after.title == "New Song"
        assert after.updated_at == song.updated_at
        assert repo.get(KEY) == before

    def test_rename_song_not_found(self, store):
        with pytest.raises(NotFound):
            store.rename_song("missing", "Title")

    def test_select_song_picks_most_recent_version(self, repo, clock):
        seed(repo, [{
            "id": "s1", "title": "Old", "updatedAt": 300,
            "versions": [
                {"id": "v100", "name": "A", "lyrics": "", "createdAt": 100},
                {"id": "v300", "name": "B", "lyrics": "", "createdAt": 300},
                {"id": "v200", "name": "C", "lyrics": "", "createdAt": 200},
            ],
        }])
        store = LibraryStore(repo, storage_key=KEY, clock=clock)
        first = store.select_song("s1")
        second = store.select_song("s1")
        assert first.active_version_id == "v300"
        assert second == first

    def test_select_song_not_found(self, store):
        with pytest.raises(NotFound):
            store.select_song("missing")

    def test_delete_active_song_clears_selection(self, store):
        song, selection = store.create_song()
        assert store.delete_song(song.id, selection) == Selection.empty()
        assert store.list_songs() == []

    def test_delete_other_song_keeps_selection(self, store):
        other, _ = store.create_song()
        song, selection = store.create_song()
        assert store.delete_song(other.id, selection) == selection
        assert [s.id for s in store.list_songs()] == [song.id]

    def test_delete_song_not_found(self, store):
        with pytest.raises(NotFound):
            store.delete_song("missing", Selection.empty())


class TestVersions:
    def test_set_lyrics_is_verbatim(self, store, clock):
        song, selection = store.create_song()
        clock.now = 9_000
        text = "  first line  \n\n\tsecond line\n"
        version = store.set_lyrics(song.id, selection.active_version_id, text)
        assert version.lyrics == text
        assert store.get_song(song.id).updated_at == 9_000

    def test_set_lyrics_not_found(self, store):
        song, _ = store.create_song()
        with pytest.raises(NotFound):
            store.set_lyrics(song.id, "missing", "x")
        with pytest.raises(NotFound):
            store.set_lyrics("missing", song.versions[0].id, "x")

    def test_add_version_copies_active_lyrics(self, store):
        song, selection = store.create_song()
        v1 = selection.active_version_id
        store.set_lyrics(song.id, v1, "hello\nworld")

        v2, selection = store.add_version(song.id, selection)
        assert v2.lyrics == "hello\nworld"
        assert v2.name == "Version 2"
        assert selection.active_version_id == v2.id

        selection = store.select_version(song.id, v1)
        store.set_lyrics(song.id, v1, "rewritten")
        v3, selection = store.add_version(song.id, selection)
        assert v3.lyrics == "rewritten"
        assert v3.name == "Version 3"
        assert [v.id for v in store.get_song(song.id).versions] == [v1, v2.id, v3.id]

    def test_add_version_to_inactive_song_uses_latest(self, store):
        other, other_sel = store.create_song()
        store.set_lyrics(other.id, other_sel.active_version_id, "from the other song")
        _, selection = store.create_song()

        version, new_selection = store.add_version(other.id, selection)
        assert version.lyrics == "from the other song"
        assert new_selection.active_song_id == other.id

    def test_add_version_not_found(self, store):
        with pytest.raises(NotFound):
            store.add_version("missing", Selection.empty())

    def test_rename_version(self, store):
        song, selection = store.create_song()
        version = store.rename_version(song.id, selection.active_version_id, " Chorus ")
        assert version.name == "Chorus"

    def test_rename_version_blank_is_rejected(self, store):
        song, selection = store.create_song()
        with pytest.raises(InvalidArgument):
            store.rename_version(song.id, selection.active_version_id, "  ")
        after = store.get_song(song.id)
        assert after.versions[0].name == "Verse 1"
        assert after.updated_at == song.updated_at

    def test_delete_only_version_is_refused(self, store, repo):
        song, selection = store.create_song()
        before = repo.get(KEY)
        with pytest.raises(InvalidArgument):
            store.delete_version(song.id, selection.active_version_id, selection)
        assert len(store.get_song(song.id).versions) == 1
        assert repo.get(KEY) == before

    def test_delete_active_version_selects_first_remaining(self, store):
        song, selection = store.create_song()
        v1 = selection.active_version_id
        _, selection = store.add_version(song.id, selection)
        v3, selection = store.add_version(song.id, selection)

        selection = store.delete_version(song.id, v3.id, selection)
        assert selection.active_version_id == v1

    def test_delete_inactive_version_keeps_selection(self, store):
        song, selection = store.create_song()
        v2, selection = store.add_version(song.id, selection)
        _, selection = store.add_version(song.id, selection)

        assert store.delete_version(song.id, v2.id, selection) == selection
        assert len(store.get_song(song.id).versions) == 2

    def test_delete_version_not_found(self, store):
        song, selection = store.create_song()
        with pytest.raises(NotFound):
            store.delete_version(song.id, "missing", selection)

    def test_every_song_keeps_a_version(self, store):
        song, selection = store.create_song()
        for _ in range(3):
            _, selection = store.add_version(song.id, selection)
        for version in store.get_song(song.id).versions:
            try:
                selection = store.delete_version(song.id, version.id, selection)
            except InvalidArgument:
                pass
        for s in store.list_songs():
            assert len(s.versions) >= 1


class TestSelection:
    def test_dangling_version_falls_back_to_latest(self, store):
        song, selection = store.create_song()
        latest, _ = store.add_version(song.id, selection)
        _, version = store.resolve(Selection(active_song_id=song.id, active_version_id="gone"))
        assert version.id == latest.id

    def test_unknown_song_resolves_to_nothing(self, store):
        assert store.resolve(Selection(active_song_id="gone")) == (None, None)
        assert store.resolve(Selection.empty()) == (None, None)


class TestPersistence:
    @pytest.mark.parametrize("raw", ["{not json", '{"songs": 1}', '[{"id": "s", "versions": []}]', "null"])
    def test_unreadable_snapshot_loads_empty(self, repo, raw):
        repo.put(KEY, raw)
        store = LibraryStore(repo, storage_key=KEY)
        assert store.list_songs() == []

    def test_reads_legacy_timestamp_ids(self, repo):
        seed(repo, [{
            "id": "1700000000000", "title": "Imported", "updatedAt": 1700000000000,
            "versions": [{"id": "1700000000000", "name": "Verse 1", "lyrics": "la la", "createdAt": 1700000000000}],
        }])
        store = LibraryStore(repo, storage_key=KEY)
        song, _ = store.create_song()
        assert song.versions[0].created_at > 1700000000000
        assert store.get_song("1700000000000").versions[0].lyrics == "la la"

    def test_write_failure_keeps_change_in_memory(self, clock):
        repo = FailingRepo()
        store = LibraryStore(repo, storage_key=KEY, clock=clock)
        song, _ = store.create_song()

        repo.fail = True
        store.rename_song(song.id, "Unsaved Title")
        assert store.get_song(song.id).title == "Unsaved Title"
        assert store.unsaved
        assert "disk full" in store.last_save_error
        assert stored(repo)[0]["title"] == "New Song"

        repo.fail = False
        store.rename_song(song.id, "Saved Title")
        assert not store.unsaved
        assert stored(repo)[0]["title"] == "Saved Title"

    def test_other_writer_replaces_library(self, repo):
        a = LibraryStore(repo, storage_key=KEY)
        b = LibraryStore(repo, storage_key=KEY)
        song, _ = a.create_song()
        repo.wait_for_notifications()
        assert [s.id for s in b.list_songs()] == [song.id]

        b.rename_song(song.id, "From B")
        repo.wait_for_notifications()
        assert a.get_song(song.id).title == "From B"
        a.close()
        b.close()

    def test_reload_reads_storage(self, store, repo):
        store.create_song()
        store.close()
        repo.put(KEY, "[]")
        store.reload()
        assert store.list_songs() == []

    def test_unreadable_snapshot_is_kept_before_overwrite(self, repo, caplog):
        repo.put(KEY, "{not json")
        with caplog.at_level(logging.ERROR, logger="lyric_pad.services.library_store"):
            store = LibraryStore(repo, storage_key=KEY)
        assert any(r.levelno == logging.ERROR for r in caplog.records)
        assert repo.get(store.backup_key) is None

        song, _ = store.create_song()
        assert repo.get(KEY + ":unreadable") == "{not json"
        assert [s["id"] for s in stored(repo)] == [song.id]

        store.create_song()
        assert repo.get(KEY + ":unreadable") == "{not json"

    def test_readable_snapshot_writes_no_backup(self, store, repo):
        store.create_song()
        assert repo.get(store.backup_key) is None


class TestSharedRepo:
    def test_concurrent_writers_on_one_repo_finish(self):
        repo = SlowRepo()
        a = LibraryStore(repo, storage_key=KEY)
        b = LibraryStore(repo, storage_key=KEY)

        def write(store):
            for _ in range(5):
                store.create_song()

        threads = [threading.Thread(target=write, args=(s,), daemon=True) for s in (a, b)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not any(t.is_alive() for t in threads)

        repo.wait_for_notifications()
        ids = [s["id"] for s in stored(repo)]
        assert sorted(s.id for s in a.list_songs()) == sorted(ids)
        assert sorted(s.id for s in b.list_songs()) == sorted(ids)
        a.close()
        b.close()

    def test_stamps_keep_rising_after_older_snapshot_arrives(self, repo):
        clock = FixedClock(5_000)
        store = LibraryStore(repo, storage_key=KEY, clock=clock)
        first, _ = store.create_song()
        assert first.updated_at == 5_000

        seed(repo, [{
            "id": "old", "title": "Older", "updatedAt": 100,
            "versions": [{"id": "v", "name": "Verse 1", "lyrics": "", "createdAt": 100}],
        }])
        repo.wait_for_notifications()
        assert [s.id for s in store.list_songs()] == ["old"]

        clock.now = 50
        song, _ = store.create_song()
        assert song.versions[0].created_at > 5_000
        store.close()

    def test_late_notification_does_not_undo_newer_write(self, repo):
        store = LibraryStore(repo, storage_key=KEY)
        song, _ = store.create_song()
        store._on_external_change("[]")
        assert [s.id for s in store.list_songs()] == [song.id]
        store.close()
