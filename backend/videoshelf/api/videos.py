from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from ..dependencies import get_library
from ..library import VideoLibrary
from ..schemas import Video

router = APIRouter()

@router.get("/videos", response_model=List[Video])
def get_videos(
    viewed: Optional[bool] = None,
    library: VideoLibrary = Depends(get_library)
):
    return [Video.model_validate(entry) for entry in library.entries(viewed=viewed)]

@router.get("/videos/{name}", response_model=Video)
def get_video(name: str, library: VideoLibrary = Depends(get_library)):
    entry = library.get(name)
    if not entry:
        raise HTTPException(status_code=404, detail="Video not found")
    return Video.model_validate(entry)
