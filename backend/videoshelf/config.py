import os
import argparse
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel
from .store import STATE_FILE

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


class Settings(BaseModel):
    root: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    debug: bool = False
    state_file: str = STATE_FILE

    @property
    def folder_name(self) -> str:
        return self.root.resolve().name or str(self.root)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def build_parser(default_root: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="videoshelf",
        description="Serve a directory of videos and remember what you watched.",
    )
    if default_root:
        parser.add_argument("directory", nargs="?", default=default_root,
                            help="library root (default: $VIDEOSHELF_ROOT)")
    else:
        parser.add_argument("directory", help="library root containing the video files")
    # string defaults go through type=int, so a bad env value is reported as a usage error
    parser.add_argument(
        "--port",
        type=int,
        default=os.getenv("VIDEOSHELF_PORT", str(DEFAULT_PORT)),
        help="port to listen on (default: %(default)s)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("VIDEOSHELF_HOST", DEFAULT_HOST),
        help="interface to bind (default: %(default)s)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag("VIDEOSHELF_DEBUG"),
        help="enable debug logging",
    )
    return parser


def parse_settings(argv: Optional[List[str]] = None) -> Settings:
    """
    Build Settings from the command line.

    Environment variables (possibly loaded from a .env file) provide the
    defaults; VIDEOSHELF_ROOT stands in for a missing directory argument.
    """
    parser = build_parser(os.getenv("VIDEOSHELF_ROOT"))
    args = parser.parse_args(argv)
    return Settings(root=Path(args.directory), host=args.host, port=args.port, debug=args.debug)
