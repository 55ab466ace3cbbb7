# Request path → filesystem path under the gallery root.
# Created: 2026-10-12

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote, unquote

# Decoded segments that could escape the root or smuggle a separator.
_FORBIDDEN_SEGMENTS = {".", ".."}
_FORBIDDEN_CHARS = ("/", "\\", "\x00")


class UnsafePathError(ValueError):
    """A decoded path segment would step outside the gallery root."""


def split_segments(raw_path: str) -> list[str]:
    """Split a raw (still percent-encoded) URL path and decode each segment.

    Empty segments are dropped so ``//a///b/`` and ``/a/b`` resolve alike.
    Each segment is decoded on its own, so ``%2F`` inside a segment never
    becomes a path separator silently: it is rejected below.
    """
    segments = []
    for part in raw_path.split("/"):
        if not part:
            continue
        segment = unquote(part, errors="surrogateescape")
        if segment in _FORBIDDEN_SEGMENTS or any(c in segment for c in _FORBIDDEN_CHARS):
            raise UnsafePathError(f"Rejected path segment: {part!r}")
        segments.append(segment)
    return segments


def resolve_request_path(root: Path, raw_path: str) -> Path:
    """Join the decoded segments of *raw_path* onto *root*.

    The result is not checked for existence; callers re-check it per request.

    Raises:
        UnsafePathError: a segment is ``.``/``..`` or contains a separator.
    """
    return root.joinpath(*split_segments(raw_path))


def directory_href(parts: tuple[str, ...] | list[str]) -> str:
    """Absolute, percent-encoded URL of a directory, with trailing slash."""
    return "/" + "".join(quote(part, safe="", errors="surrogateescape") + "/" for part in parts)
