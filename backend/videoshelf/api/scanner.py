from fastapi import APIRouter, Depends, HTTPException
from ..dependencies import get_library
from ..exceptions import LibraryScanError, StoreCorruptedError
from ..library import VideoLibrary
from ..schemas import RescanResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/rescan", response_model=RescanResponse)
def rescan_library(library: VideoLibrary = Depends(get_library)):
    """Walk the library root again to pick up added or removed files"""
    try:
        results = library.refresh()
    except (LibraryScanError, StoreCorruptedError) as e:
        logger.error(f"Rescan failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return RescanResponse(status="completed", **results)
