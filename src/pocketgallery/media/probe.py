"""Metadata prober: stat a directory entry and sniff regular files.

Classification looks at content only. A file named ``clip.mp4`` holding
plain text is ``unknown``; a PNG saved without an extension is ``image``.
Only the first ``sniff_bytes`` of a file are read, and the handle is closed
before this module returns.

Created: 2026-10-12
"""

from __future__ import annotations

import logging
import stat as stat_mod
from datetime import datetime
from pathlib import Path

import aiofiles
import aiofiles.os
import magic

from pocketgallery.media.models import FileEntry, MediaCategory

logger = logging.getLogger(__name__)

DEFAULT_SNIFF_BYTES = 8192


def classify_bytes(head: bytes) -> MediaCategory:
    """Map a file prefix to a media category using libmagic."""
    if not head:
        return MediaCategory.UNKNOWN
    try:
        mime = magic.from_buffer(head, mime=True)
    except magic.MagicException as e:
        logger.debug("libmagic could not classify buffer: %s", e)
        return MediaCategory.UNKNOWN
    return MediaCategory.from_mime(mime)


async def sniff_category(path: str | Path, sniff_bytes: int = DEFAULT_SNIFF_BYTES) -> MediaCategory:
    """Read the leading bytes of *path* and classify them. Never raises."""
    try:
        async with aiofiles.open(path, "rb") as f:
            head = await f.read(sniff_bytes)
    except OSError as e:
        logger.debug("Sniff read failed for %s: %s", path, e)
        return MediaCategory.UNKNOWN
    return classify_bytes(head)


async def probe_entry(
    path: str | Path, sniff_bytes: int = DEFAULT_SNIFF_BYTES
) -> FileEntry | None:
    """Stat *path* and, for regular files, sniff its media category.

    Returns ``None`` when the entry cannot be stat'ed (it vanished between
    enumeration and inspection, a dangling symlink, permission denied).
    """
    path = Path(path)
    try:
        st = await aiofiles.os.stat(path)
    except OSError as e:
        logger.debug("Skipping %s: %s", path, e)
        return None

    is_dir = stat_mod.S_ISDIR(st.st_mode)
    is_file = stat_mod.S_ISREG(st.st_mode)
    category = await sniff_category(path, sniff_bytes) if is_file else None

    return FileEntry(
        name=path.name,
        is_directory=is_dir,
        is_regular_file=is_file,
        size=st.st_size if is_file else 0,
        access_time=datetime.fromtimestamp(st.st_atime),
        media_category=category,
    )
