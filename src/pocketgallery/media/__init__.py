# Media inspection, listing, rendering and thumbnail extraction.
# Created: 2026-10-12

from pocketgallery.media.listing import list_directory
from pocketgallery.media.models import EntryKind, FileEntry, MediaCategory
from pocketgallery.media.probe import probe_entry, sniff_category
from pocketgallery.media.render import render_gallery, render_page
from pocketgallery.media.thumbnails import ExtractionError, ThumbnailExtractor, ThumbnailSession

__all__ = [
    "EntryKind",
    "ExtractionError",
    "FileEntry",
    "MediaCategory",
    "ThumbnailExtractor",
    "ThumbnailSession",
    "list_directory",
    "probe_entry",
    "render_gallery",
    "render_page",
    "sniff_category",
]
