# Directory lister — probe every direct child, keep enumeration order.
# Created: 2026-10-12

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiofiles.os

from pocketgallery.media.models import FileEntry
from pocketgallery.media.probe import DEFAULT_SNIFF_BYTES, probe_entry

logger = logging.getLogger(__name__)

DEFAULT_PROBE_CONCURRENCY = 16


async def list_directory(
    path: str | Path,
    sniff_bytes: int = DEFAULT_SNIFF_BYTES,
    concurrency: int = DEFAULT_PROBE_CONCURRENCY,
) -> list[FileEntry]:
    """List the direct children of *path*.

    Children are probed concurrently (at most *concurrency* at a time) but
    returned in the order the filesystem enumerated them. Entries that fail
    to stat are dropped. Raises ``OSError`` only if *path* itself cannot be
    read.
    """
    path = Path(path)
    names = await aiofiles.os.listdir(path)
    gate = asyncio.Semaphore(concurrency)

    async def _probe(name: str) -> FileEntry | None:
        async with gate:
            return await probe_entry(path / name, sniff_bytes)

    probed = await asyncio.gather(*(_probe(name) for name in names))
    entries = [entry for entry in probed if entry is not None]

    skipped = len(names) - len(entries)
    if skipped:
        logger.info("Skipped %d unreadable entries in %s", skipped, path)
    return entries
