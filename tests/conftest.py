# Shared fixtures for PocketGallery tests.
# Created: 2026-10-12

from contextlib import contextmanager
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pocketgallery.api.serve import create_app
from pocketgallery.config import Settings, get_settings

from samples import FAKE_JPEG_PRINTF


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    yield
    get_settings.cache_clear()


@pytest.fixture
def gallery_root(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def fake_tool(tmp_path):
    """Factory writing an executable sh script that stands in for ffmpeg."""
    counter = iter(range(1000))

    def _make(body: str) -> str:
        script = tmp_path / f"fake-ffmpeg-{next(counter)}"
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(0o755)
        return str(script)

    return _make


@pytest.fixture
def ok_tool(fake_tool):
    return fake_tool(f"printf '{FAKE_JPEG_PRINTF}'\nexit 0")


@pytest.fixture
def failing_tool(fake_tool):
    return fake_tool("echo 'moov atom not found' >&2\nexit 2")


@pytest.fixture
def gallery_client():
    """Context manager building a TestClient for a root and setting overrides."""

    @contextmanager
    def _client(root: Path, **overrides):
        settings = Settings(root_dir=root, **overrides)
        with TestClient(create_app(settings)) as client:
            yield client

    return _client
