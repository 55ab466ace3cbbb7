# Gallery data model — probed directory entries.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class MediaCategory(str, Enum):
    """Media family derived from a file's leading bytes."""

    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    UNKNOWN = "unknown"

    @classmethod
    def from_mime(cls, mime: str | None) -> MediaCategory:
        if not mime:
            return cls.UNKNOWN
        family = mime.split("/", 1)[0].strip().lower()
        try:
            category = cls(family)
        except ValueError:
            return cls.UNKNOWN
        return category


class EntryKind(str, Enum):
    """How a listing entry is rendered. Every entry has exactly one kind."""

    DIRECTORY = "directory"
    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    FILE = "file"  # regular file, unrecognised content
    OTHER = "other"  # fifo, socket, device


_MEDIA_KINDS = {
    MediaCategory.VIDEO: EntryKind.VIDEO,
    MediaCategory.AUDIO: EntryKind.AUDIO,
    MediaCategory.IMAGE: EntryKind.IMAGE,
    MediaCategory.UNKNOWN: EntryKind.FILE,
}


@dataclass(frozen=True)
class FileEntry:
    """One child of a listed directory."""

    name: str
    is_directory: bool
    is_regular_file: bool
    size: int
    access_time: datetime
    media_category: MediaCategory | None = None

    @property
    def kind(self) -> EntryKind:
        if self.is_directory:
            return EntryKind.DIRECTORY
        if not self.is_regular_file:
            return EntryKind.OTHER
        return _MEDIA_KINDS[self.media_category or MediaCategory.UNKNOWN]

    @property
    def display_time(self) -> str:
        return self.access_time.strftime("%Y-%m-%d %H:%M:%S")
