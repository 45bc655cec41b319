from pathlib import Path
from fastapi import Request
from fastapi.templating import Jinja2Templates
from .library import VideoLibrary

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def get_library(request: Request) -> VideoLibrary:
    return request.app.state.library
