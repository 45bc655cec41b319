"""Tests for the in-memory library and its viewed/progress transitions."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from videoshelf.exceptions import InvalidProgressError, StoreWriteError, VideoNotFoundError
from videoshelf.library import VideoLibrary
from videoshelf.store import ViewingStateStore

from .conftest import make_files

INTRO = "1 - Intro.mp4"
BODY = "2 - Body.mp4"


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def library(settings, clock) -> VideoLibrary:
    return VideoLibrary.load(settings, clock=clock)


def stored(settings):
    return ViewingStateStore(settings.root).load()


class TestVideoLibrary:
    def test_load_scans_root(self, library) -> None:
        assert [entry.name for entry in library.entries()] == [INTRO, BODY]

    def test_entries_are_copies(self, library) -> None:
        library.entries()[0].viewed = True
        library.get(INTRO).progress = 99.0

        assert library.get(INTRO).viewed is False
        assert library.get(INTRO).progress == 0.0

    def test_entries_filter_by_viewed(self, library) -> None:
        library.mark_viewed(BODY)

        assert [e.name for e in library.entries(viewed=True)] == [BODY]
        assert [e.name for e in library.entries(viewed=False)] == [INTRO]

    def test_get_unknown(self, library) -> None:
        assert library.get("bad_name.mp4") is None

    def test_mark_viewed_resets_progress_and_persists(self, library, settings, clock) -> None:
        library.update_progress(INTRO, 120.0)

        assert library.mark_viewed(INTRO) is True

        entry = library.get(INTRO)
        assert (entry.viewed, entry.progress, entry.last_played_at) == (True, 0.0, clock.now)
        state = stored(settings)[INTRO]
        assert (state.viewed, state.progress, state.last_played_at) == (True, 0.0, clock.now)

    def test_mark_viewed_twice_only_moves_timestamp(self, library) -> None:
        library.mark_viewed(INTRO)
        first = library.get(INTRO)

        library.mark_viewed(INTRO)
        second = library.get(INTRO)

        assert (second.viewed, second.progress) == (True, 0.0)
        assert second.last_played_at > first.last_played_at

    def test_mark_viewed_unknown_is_ignored(self, library, settings) -> None:
        assert library.mark_viewed("9 - Missing.mp4") is False
        assert not (settings.root / "video_data.json").exists()

    def test_mark_unviewed_keeps_progress(self, library, settings) -> None:
        library.mark_viewed(BODY)
        library.update_progress(BODY, 33.0)

        entry = library.mark_unviewed(BODY)

        assert (entry.viewed, entry.progress) == (False, 33.0)
        assert stored(settings)[BODY].viewed is False

    def test_mark_unviewed_unseen_video(self, library) -> None:
        library.update_progress(INTRO, 5.5)

        assert library.mark_unviewed(INTRO).progress == 5.5

    def test_mark_unviewed_unknown(self, library) -> None:
        with pytest.raises(VideoNotFoundError):
            library.mark_unviewed("bad_name.mp4")

    def test_update_progress_keeps_viewed(self, library, settings, clock) -> None:
        library.mark_viewed(INTRO)

        entry = library.update_progress(INTRO, 42.5)

        assert (entry.viewed, entry.progress, entry.last_played_at) == (True, 42.5, clock.now)
        assert stored(settings)[INTRO].progress == 42.5

    @pytest.mark.parametrize("seconds", [-1.0, float("nan"), float("inf")])
    def test_update_progress_rejects_invalid_seconds(self, library, seconds) -> None:
        with pytest.raises(InvalidProgressError):
            library.update_progress(INTRO, seconds)
        assert library.get(INTRO).progress == 0.0

    def test_update_progress_unknown(self, library) -> None:
        with pytest.raises(VideoNotFoundError):
            library.update_progress("9 - Missing.mp4", 1.0)

    def test_failed_save_rolls_back(self, library, monkeypatch) -> None:
        library.update_progress(INTRO, 10.0)

        def failing_save(entries):
            raise StoreWriteError("disk full")

        monkeypatch.setattr(library.store, "save", failing_save)

        with pytest.raises(StoreWriteError):
            library.mark_viewed(INTRO)
        with pytest.raises(StoreWriteError):
            library.update_progress(BODY, 3.0)

        intro = library.get(INTRO)
        assert (intro.viewed, intro.progress) == (False, 10.0)
        assert library.get(BODY).progress == 0.0

    def test_state_survives_restart(self, library, settings) -> None:
        library.mark_viewed(INTRO)
        library.update_progress(BODY, 61.25)

        reloaded = VideoLibrary.load(settings)

        for name in (INTRO, BODY):
            before, after = library.get(name), reloaded.get(name)
            assert (after.viewed, after.progress, after.last_played_at) == (
                before.viewed, before.progress, before.last_played_at,
            )

    def test_concurrent_updates_are_not_lost(self, settings, library_root) -> None:
        names = [f"{i} - Part.mp4" for i in range(3, 23)]
        make_files(library_root, *names)
        library = VideoLibrary.load(settings)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda item: library.update_progress(item[1], float(item[0])),
                          enumerate(names, start=1)))

        states = stored(settings)
        for seconds, name in enumerate(names, start=1):
            assert library.get(name).progress == float(seconds)
            assert states[name].progress == float(seconds)

    def test_refresh_picks_up_new_and_removed_files(self, library, library_root) -> None:
        library.update_progress(INTRO, 8.0)
        make_files(library_root, "3 - Extra.mp4", "0 - Prelude.webm")
        (library_root / BODY).unlink()

        result = library.refresh()

        assert result == {'videos_found': 3, 'videos_added': 2, 'videos_removed': 1}
        assert [e.name for e in library.entries()] == ["0 - Prelude.webm", INTRO, "3 - Extra.mp4"]
        assert library.get(INTRO).progress == 8.0

    def test_refresh_keeps_memory_state_over_store(self, library, settings) -> None:
        library.mark_viewed(INTRO)
        (settings.root / "video_data.json").write_text("[]")

        library.refresh()

        assert library.get(INTRO).viewed is True
