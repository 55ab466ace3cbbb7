"""App factory and uvicorn runner for the gallery server.

``create_app`` takes the frozen settings and stores them, with the shared
thumbnail extractor, on ``app.state``. Handlers read both through the
dependencies in ``api/deps.py``. Nothing request-facing reads module-level
globals.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pocketgallery import __version__
from pocketgallery.config import Settings, get_settings
from pocketgallery.media.thumbnails import ThumbnailExtractor

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the gallery app serving ``settings.root_dir``."""
    from pocketgallery.api.gallery import router as gallery_router

    settings = settings or get_settings()
    extractor = ThumbnailExtractor.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.debug("Serving %s", settings.root_dir)
        yield
        await extractor.shutdown()

    app = FastAPI(
        title="PocketGallery",
        description="Browse a directory tree as a media gallery.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.thumbnails = extractor

    # Catch-all; must stay the only router
    app.include_router(gallery_router)
    return app


def run_server(settings: Settings) -> None:
    """Serve the gallery until interrupted."""
    import uvicorn

    from pocketgallery.network import banner_url

    app = create_app(settings)
    logger.info("Serving %s", settings.root_dir)
    logger.info(banner_url(settings.port, settings.host))
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )
