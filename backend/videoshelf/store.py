import os
import math
import json
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Union
from pydantic import ValidationError
from .exceptions import StoreCorruptedError, StoreWriteError
from .models import VideoEntry, VideoState
import logging

logger = logging.getLogger(__name__)

STATE_FILE = "video_data.json"


class ViewingStateStore:
    """
    Sidecar JSON file holding the viewing state of every video in a library.

    The file is a JSON array of {Name, Path, Viewed, Current, Progress}
    records. Only Viewed, Current and Progress are read back; Path is
    re-derived from the filesystem on every scan.
    """

    def __init__(self, root: Union[str, Path], filename: str = STATE_FILE):
        self.root = Path(root)
        self.file_path = self.root / filename

    def load(self) -> Dict[str, VideoState]:
        """Read the state file, returning an empty mapping when it does not exist"""
        if not self.file_path.exists():
            logger.debug(f"No state file at {self.file_path}")
            return {}

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreCorruptedError(f"Cannot read {self.file_path}: {e}") from e

        if not isinstance(raw_data, list):
            raise StoreCorruptedError(f"{self.file_path} does not contain a JSON array")

        states: Dict[str, VideoState] = {}
        for record in raw_data:
            try:
                state = VideoState.model_validate(record)
            except ValidationError as e:
                raise StoreCorruptedError(f"Invalid record in {self.file_path}: {e}") from e
            states[state.name] = state

        logger.debug(f"Loaded {len(states)} state records from {self.file_path}")
        return states

    def save(self, entries: Iterable[VideoEntry]) -> None:
        """
        Overwrite the state file with the given entries.

        The JSON is written to a temporary file next to the target and moved
        into place, so a failed write never leaves a truncated state file.
        """
        temp_path = None
        try:
            dump_data: List[dict] = [
                self._record(entry) for entry in entries
            ]
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.root, prefix=".video_data_", suffix=".json"
            )
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(dump_data, f, indent=4, ensure_ascii=False, allow_nan=False)
            # mkstemp creates the file as 0600
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving viewing state to {self.file_path}: {e}")
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            raise StoreWriteError(f"Cannot write {self.file_path}: {e}") from e

        logger.debug(f"Saved {len(dump_data)} entries to {self.file_path}")

    @staticmethod
    def merge(entries: Iterable[VideoEntry], states: Dict[str, VideoState]) -> None:
        """Copy persisted state onto the entries whose name matches exactly"""
        for entry in entries:
            state = states.get(entry.name)
            if state is not None:
                entry.apply_state(state)

    @staticmethod
    def _record(entry: VideoEntry) -> dict:
        if not math.isfinite(entry.progress):
            raise ValueError(f"progress of {entry.name!r} is not a finite number")
        return entry.model_dump(mode="json", by_alias=True)
