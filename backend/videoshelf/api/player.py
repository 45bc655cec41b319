import os
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse
from typing import Optional
from ..dependencies import get_library, templates
from ..exceptions import InvalidProgressError, StoreWriteError, VideoNotFoundError
from ..library import VideoLibrary
from ..schemas import ProgressUpdate
from ..utils.metadata import read_readme
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

ENDED_PARAM = "ended"

# plain decimal, optional fraction and exponent; no sign, spaces or underscores
_SECONDS_RE = re.compile(r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _render(request: Request, library: VideoLibrary, current: Optional[str] = None, readme: str = ""):
    current_video = library.get(current) if current else None
    return templates.TemplateResponse(request, "index.html", {
        "videos": library.entries(),
        "current_video": current,
        "current_video_file": current_video,
        "folder_name": library.settings.folder_name,
        "readme_content": readme,
    })


def _parse_seconds(value: str) -> float:
    if not _SECONDS_RE.fullmatch(value):
        raise ValueError(f"not a number of seconds: {value!r}")
    return float(value)


def _strip_ended(referer: str) -> Optional[str]:
    """Drop the ended marker from a referer so the completion is not replayed"""
    try:
        parts = urlsplit(referer)
    except ValueError:
        return None
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != ENDED_PARAM]
    return urlunsplit(parts._replace(query=urlencode(query)))


@router.get("/", response_class=HTMLResponse)
def library_index(request: Request, library: VideoLibrary = Depends(get_library)):
    return _render(request, library, readme=read_readme(library.settings.root))


@router.get("/watch/{name}", response_class=HTMLResponse)
def watch_video(
    name: str,
    request: Request,
    ended: Optional[str] = None,
    library: VideoLibrary = Depends(get_library)
):
    # ended names the video that just finished, name the one to play next
    if ended and library.get(name) is not None:
        try:
            library.mark_viewed(ended)
        except StoreWriteError as e:
            raise HTTPException(status_code=500, detail=str(e))

    return _render(request, library, current=name)


@router.get("/unview/{name}")
def unview_video(name: str, request: Request, library: VideoLibrary = Depends(get_library)):
    try:
        library.mark_unviewed(name)
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    except StoreWriteError as e:
        raise HTTPException(status_code=500, detail=str(e))

    referer = request.headers.get("referer")
    target = _strip_ended(referer) if referer else None
    return RedirectResponse(target or "/", status_code=303)


@router.get("/video/{name}")
def serve_video(name: str, library: VideoLibrary = Depends(get_library)):
    entry = library.get(name)
    if not entry or not os.path.isfile(entry.path):
        raise HTTPException(status_code=404, detail="Video not found")
    return FileResponse(entry.path)


@router.get("/update-progress/{name}/{seconds}", response_model=ProgressUpdate)
def update_progress(name: str, seconds: str, library: VideoLibrary = Depends(get_library)):
    try:
        entry = library.update_progress(name, _parse_seconds(seconds))
    except (ValueError, InvalidProgressError):
        logger.warning(f"Invalid progress value {seconds!r} for {name!r}")
        raise HTTPException(status_code=400, detail="Invalid progress value")
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    except StoreWriteError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ProgressUpdate(name=entry.name, progress=entry.progress, viewed=entry.viewed)
