# Gallery router — the single catch-all handler.
# Created: 2026-10-12
#
# Every method on every path lands here. The path is resolved under the
# configured root and answered as a directory page, a raw file stream or,
# for videos with ?poster=..., an ffmpeg thumbnail.

from __future__ import annotations

import logging
import stat as stat_mod
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse, StreamingResponse

from pocketgallery.api.deps import get_gallery_settings, get_thumbnail_extractor
from pocketgallery.config import Settings
from pocketgallery.media.listing import list_directory
from pocketgallery.media.models import MediaCategory
from pocketgallery.media.paths import UnsafePathError, directory_href, resolve_request_path
from pocketgallery.media.probe import sniff_category
from pocketgallery.media.render import THUMBNAIL_PARAM, render_page
from pocketgallery.media.thumbnails import ExtractionError, ThumbnailExtractor, ThumbnailSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Gallery"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
THUMBNAIL_ERROR_MESSAGE = "Error generating image"

_FALSY = {"", "0", "false", "no", "off"}
_THUMBNAIL_HEADERS = {"Cache-Control": "no-cache"}


class ThumbnailResponse(StreamingResponse):
    """Streams a primed session and closes it however the response ends.

    If the client goes away before the body starts, the session generator
    never runs, so its own cleanup cannot be relied on.
    """

    media_type = "image/jpeg"

    def __init__(self, session: ThumbnailSession):
        super().__init__(session.stream(), headers=_THUMBNAIL_HEADERS)
        self.session = session

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.session.close()


def wants_thumbnail(request: Request) -> bool:
    value = request.query_params.get(THUMBNAIL_PARAM)
    return value is not None and value.strip().lower() not in _FALSY


def _raw_path(request: Request) -> str:
    raw = request.scope.get("raw_path")
    if raw:
        return raw.decode("utf-8", errors="surrogateescape").split("?", 1)[0]
    return request.url.path


def _not_found() -> Response:
    return Response(status_code=404)


async def _file_chunks(path: Path, chunk_size: int):
    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(chunk_size):
            yield chunk


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def serve_path(
    request: Request,
    settings: Settings = Depends(get_gallery_settings),
    extractor: ThumbnailExtractor = Depends(get_thumbnail_extractor),
):
    """Directory → gallery page; file → raw bytes or a video thumbnail."""
    raw_path = _raw_path(request)
    try:
        target = resolve_request_path(settings.root_dir, raw_path)
    except UnsafePathError as e:
        logger.warning("Rejected %s: %s", raw_path, e)
        return _not_found()

    if not await aiofiles.os.path.exists(target):
        return _not_found()
    try:
        st = await aiofiles.os.stat(target)
    except OSError:
        # Removed after the existence check
        return _not_found()

    if stat_mod.S_ISDIR(st.st_mode):
        return await _directory_page(target, settings)

    if not stat_mod.S_ISREG(st.st_mode):
        return _not_found()

    if wants_thumbnail(request):
        category = await sniff_category(target, settings.sniff_bytes)
        if category is MediaCategory.VIDEO:
            if request.method == "HEAD":
                # Headers only; no frame is extracted
                return Response(media_type="image/jpeg", headers=_THUMBNAIL_HEADERS)
            return await _thumbnail(target, extractor)

    return StreamingResponse(_file_chunks(target, settings.stream_chunk_size))


async def _directory_page(target: Path, settings: Settings) -> Response:
    try:
        entries = await list_directory(
            target,
            sniff_bytes=settings.sniff_bytes,
            concurrency=settings.probe_concurrency,
        )
    except PermissionError:
        logger.warning("Permission denied listing %s", target)
        return Response(status_code=403)
    except OSError as e:
        logger.warning("Could not list %s: %s", target, e)
        return _not_found()

    parts = target.relative_to(settings.root_dir).parts
    title = "/" + "".join(f"{part}/" for part in parts)
    return HTMLResponse(render_page(title, entries, base_href=directory_href(parts)))


async def _thumbnail(target: Path, extractor: ThumbnailExtractor) -> Response:
    try:
        session = await extractor.open(target)
    except ExtractionError as e:
        logger.error("Thumbnail extraction failed for %s: %s", target, e)
        return PlainTextResponse(THUMBNAIL_ERROR_MESSAGE, status_code=500)

    return ThumbnailResponse(session)
