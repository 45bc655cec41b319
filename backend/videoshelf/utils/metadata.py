import re
from pathlib import Path
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {'.mp4', '.avi', '.mkv', '.mov', '.wmv', '.flv', '.webm'}

NAME_SEPARATOR = " - "

README_NAMES = ("README.md", "README.txt", "readme.md", "readme.txt")

_ORDER_KEY_RE = re.compile(r'[0-9]+')


def is_video_file(filename: str) -> bool:
    """Check the file extension against the allow-list (case-insensitive)"""
    return Path(filename).suffix.lower() in VIDEO_EXTENSIONS


def parse_order_key(filename: str) -> Optional[int]:
    """
    Extract the ordering number from a "<number> - <title>" file name.

    The name must contain the separator exactly once and the part before it
    must be a non-negative integer once surrounding whitespace is removed.
    Returns None for any other name.
    """
    parts = filename.split(NAME_SEPARATOR)
    if len(parts) != 2:
        return None

    number = parts[0].strip()
    if not _ORDER_KEY_RE.fullmatch(number):
        return None
    return int(number)


def read_readme(directory: Union[str, Path]) -> str:
    """Return the content of the first README found in directory, or ''"""
    for name in README_NAMES:
        readme = Path(directory) / name
        try:
            content = readme.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        logger.debug(f"Using {readme} as library README")
        return content
    return ""
