import os
from pathlib import Path
from typing import Iterator, List, Union
from .exceptions import LibraryScanError
from .models import VideoEntry
from .store import ViewingStateStore
from .utils.metadata import is_video_file, parse_order_key
import logging

logger = logging.getLogger(__name__)


def walk_files(directory: Union[str, Path]) -> Iterator[Path]:
    """
    Yield every file below directory, depth-first.

    Files and subdirectories are visited together in lexical name order, so
    "0sub/1 - a.mp4" comes before "1 - b.mp4". Symlinked directories are not
    followed. Any OSError propagates to the caller.
    """
    with os.scandir(directory) as it:
        children = sorted(it, key=lambda child: child.name)
    for child in children:
        if child.is_dir(follow_symlinks=False):
            yield from walk_files(child.path)
        else:
            yield Path(child.path)


class VideoScanner:
    def __init__(self, store: ViewingStateStore):
        self.store = store

    def scan_directory(self, directory: Union[str, Path]) -> List[VideoEntry]:
        """Scan directory for video files and merge in their persisted state"""
        entries = self.find_videos(directory)
        self.store.merge(entries, self.store.load())
        return entries

    def find_videos(self, directory: Union[str, Path]) -> List[VideoEntry]:
        """
        Walk directory recursively and return the ordered video entries.

        Only allow-listed extensions named "<number> - <title>" are kept.
        Entries are sorted by that number; files sharing a number keep walk
        order (see walk_files).
        """
        path = Path(directory)
        if not path.is_dir():
            raise LibraryScanError(f"Directory {directory} does not exist")

        entries = []
        try:
            for file_path in walk_files(path):
                entry = self._process_video_file(file_path)
                if entry is not None:
                    entries.append(entry)
        except OSError as e:
            raise LibraryScanError(f"Error scanning {directory}: {e}") from e

        entries.sort(key=lambda entry: entry.order_key)
        logger.info(f"Found {len(entries)} videos in {directory}")
        return entries

    def _process_video_file(self, file_path: Path):
        if not is_video_file(file_path.name):
            return None

        order_key = parse_order_key(file_path.name)
        if order_key is None:
            logger.debug(f"Skipping {file_path}: name does not start with '<number> - '")
            return None

        return VideoEntry(name=file_path.name, path=str(file_path), order_key=order_key)
