import math
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional
from .config import Settings
from .exceptions import InvalidProgressError, VideoNotFoundError
from .models import VideoEntry
from .scanner import VideoScanner
from .store import ViewingStateStore
import logging

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


class VideoLibrary:
    """
    The ordered list of videos served by the process.

    Every mutation runs scan/modify/persist under one lock, so concurrent
    requests cannot lose each other's updates; the last write wins. When
    persisting fails the in-memory change is undone and the error is raised.
    """

    def __init__(self, settings: Settings, clock: Callable[[], datetime] = _now):
        self.settings = settings
        self.store = ViewingStateStore(settings.root, settings.state_file)
        self.scanner = VideoScanner(self.store)
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: List[VideoEntry] = []

    @classmethod
    def load(cls, settings: Settings, **kwargs) -> "VideoLibrary":
        library = cls(settings, **kwargs)
        library._entries = library.scanner.scan_directory(settings.root)
        return library

    def entries(self, viewed: Optional[bool] = None) -> List[VideoEntry]:
        with self._lock:
            return [
                entry.model_copy()
                for entry in self._entries
                if viewed is None or entry.viewed == viewed
            ]

    def get(self, name: str) -> Optional[VideoEntry]:
        with self._lock:
            entry = self._find(name)
            return entry.model_copy() if entry else None

    def mark_viewed(self, name: str) -> bool:
        """Flag a finished video as viewed; unknown names are ignored"""
        with self._lock:
            entry = self._find(name)
            if entry is None:
                logger.warning(f"Cannot mark unknown video {name!r} as viewed")
                return False
            self._mutate(entry, viewed=True, last_played_at=self._clock(), progress=0.0)
        logger.info(f"Marked {name!r} as viewed")
        return True

    def mark_unviewed(self, name: str) -> VideoEntry:
        with self._lock:
            entry = self._find(name)
            if entry is None:
                raise VideoNotFoundError(name)
            self._mutate(entry, viewed=False)
            logger.info(f"Marked {name!r} as not viewed")
            return entry.model_copy()

    def update_progress(self, name: str, seconds: float) -> VideoEntry:
        if not math.isfinite(seconds) or seconds < 0:
            raise InvalidProgressError(seconds)

        with self._lock:
            entry = self._find(name)
            if entry is None:
                raise VideoNotFoundError(name)
            self._mutate(entry, last_played_at=self._clock(), progress=seconds)
            logger.debug(f"Progress of {name!r} is now {seconds}s")
            return entry.model_copy()

    def refresh(self) -> Dict[str, int]:
        """
        Rescan the library root.

        Videos already known keep their in-memory state; new ones pick up
        whatever the state file holds for them.
        """
        with self._lock:
            scanned = self.scanner.scan_directory(self.settings.root)
            current = {entry.name: entry for entry in self._entries}
            added = 0
            for entry in scanned:
                known = current.get(entry.name)
                if known is None:
                    added += 1
                else:
                    entry.viewed = known.viewed
                    entry.last_played_at = known.last_played_at
                    entry.progress = known.progress
            names = {entry.name for entry in scanned}
            removed = sum(1 for name in current if name not in names)
            self._entries = scanned

        logger.info(f"Rescanned library: {len(scanned)} videos, {added} added, {removed} removed")
        return {'videos_found': len(scanned), 'videos_added': added, 'videos_removed': removed}

    def _find(self, name: str) -> Optional[VideoEntry]:
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def _mutate(self, entry: VideoEntry, **changes) -> None:
        previous = {field: getattr(entry, field) for field in changes}
        for field, value in changes.items():
            setattr(entry, field, value)
        try:
            self.store.save(self._entries)
        except Exception:
            for field, value in previous.items():
                setattr(entry, field, value)
            raise
