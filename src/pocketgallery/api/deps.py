# Shared FastAPI dependencies for the gallery routes.
# Created: 2026-10-12

from __future__ import annotations

from fastapi import Request

from pocketgallery.config import Settings
from pocketgallery.media.thumbnails import ThumbnailExtractor


def get_gallery_settings(request: Request) -> Settings:
    """The frozen settings the app was built with (``create_app``)."""
    return request.app.state.settings


def get_thumbnail_extractor(request: Request) -> ThumbnailExtractor:
    """The app-wide extractor; its slot pool is shared by all requests."""
    return request.app.state.thumbnails
