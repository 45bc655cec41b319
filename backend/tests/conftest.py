"""Shared fixtures: a throwaway library root with a few videos in it."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from videoshelf.config import Settings
from videoshelf.library import VideoLibrary
from videoshelf.main import create_app

VIDEO_BYTES = b"0123456789"


def make_files(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(VIDEO_BYTES)


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "Course"
    root.mkdir()
    make_files(root, "1 - Intro.mp4", "2 - Body.mp4", "bad_name.mp4")
    return root


@pytest.fixture
def settings(library_root: Path) -> Settings:
    return Settings(root=library_root)


@pytest.fixture
def library(settings: Settings) -> VideoLibrary:
    return VideoLibrary.load(settings)


@pytest.fixture
def client(settings: Settings, library: VideoLibrary):
    with TestClient(create_app(settings, library)) as test_client:
        yield test_client
