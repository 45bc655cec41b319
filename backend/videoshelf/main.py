import sys
import logging
from typing import List, Optional
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from . import __version__
from .api import player, scanner, videos
from .config import Settings, parse_settings
from .exceptions import VideoShelfError
from .library import VideoLibrary

logger = logging.getLogger(__name__)


def create_app(settings: Settings, library: Optional[VideoLibrary] = None) -> FastAPI:
    """
    Build the application for one library root.

    Scanning the root and reading the state file happen here, so a missing
    directory or a corrupted state file stops the app before it serves.
    """
    if library is None:
        library = VideoLibrary.load(settings)

    app = FastAPI(title="videoshelf", version=__version__)
    app.state.settings = settings
    app.state.library = library

    # Include routers
    app.include_router(videos.router, prefix="/api", tags=["videos"])
    app.include_router(scanner.router, prefix="/api", tags=["scanner"])
    app.include_router(player.router, tags=["player"])

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    settings = parse_settings(argv)

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not settings.root.is_dir():
        print(f"Error: {settings.root} is not a directory", file=sys.stderr)
        return 1

    logger.debug(f"Loading library from {settings.root}")
    try:
        app = create_app(settings)
    except VideoShelfError as e:
        logger.error(f"Error loading video files: {e}")
        return 1

    print(f"Starting server at http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
