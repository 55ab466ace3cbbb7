# Tests for request path resolution.
# Created: 2026-10-12

from pathlib import Path

import pytest

from pocketgallery.media.paths import (
    UnsafePathError,
    directory_href,
    resolve_request_path,
    split_segments,
)

ROOT = Path("/srv/media")


class TestSplitSegments:
    def test_decodes_each_segment(self):
        assert split_segments("/My%20Movies/caf%C3%A9.mp4") == ["My Movies", "café.mp4"]

    def test_drops_empty_segments(self):
        assert split_segments("//a///b/") == ["a", "b"]
        assert split_segments("/") == []
        assert split_segments("") == []

    @pytest.mark.parametrize(
        "raw",
        ["/..", "/a/../b", "/%2E%2E/etc", "/a/%2e%2e", "/.", "/a%2Fb", "/a%5Cb", "/a%00b"],
    )
    def test_rejects_escaping_segments(self, raw):
        with pytest.raises(UnsafePathError):
            split_segments(raw)

    def test_dots_inside_names_are_fine(self):
        assert split_segments("/..hidden/a..b/...") == ["..hidden", "a..b", "..."]


class TestResolveRequestPath:
    def test_root(self):
        assert resolve_request_path(ROOT, "/") == ROOT

    def test_nested(self):
        assert resolve_request_path(ROOT, "/Movies/clip%201.mp4") == ROOT / "Movies" / "clip 1.mp4"

    def test_traversal_rejected(self):
        with pytest.raises(UnsafePathError):
            resolve_request_path(ROOT, "/Movies/%2E%2E/%2E%2E/etc/passwd")


class TestDirectoryHref:
    def test_root(self):
        assert directory_href(()) == "/"

    def test_encodes_parts(self):
        assert directory_href(("My Movies", "a#b")) == "/My%20Movies/a%23b/"
