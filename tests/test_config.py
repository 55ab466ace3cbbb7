# Tests for settings and root validation.
# Created: 2026-10-12

from pathlib import Path

import pytest
from pydantic import ValidationError

from pocketgallery.config import (
    DEFAULT_PORT,
    RootValidationError,
    Settings,
    get_settings,
    validate_root,
)


class TestValidateRoot:
    def test_directory(self, tmp_path):
        assert validate_root(tmp_path) == tmp_path.absolute()

    def test_relative_becomes_absolute(self, tmp_path, monkeypatch):
        (tmp_path / "media").mkdir()
        monkeypatch.chdir(tmp_path)
        root = validate_root("media")
        assert root.is_absolute()
        assert root.resolve() == (tmp_path / "media").resolve()

    def test_missing(self, tmp_path):
        with pytest.raises(RootValidationError, match="does not exist"):
            validate_root(tmp_path / "nope")

    def test_not_a_directory(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(RootValidationError, match="is not a directory"):
            validate_root(f)


class TestSettings:
    def test_defaults(self, tmp_path):
        s = Settings(root_dir=tmp_path)
        assert s.port == DEFAULT_PORT == 19992
        assert s.host == "0.0.0.0"
        assert s.ffmpeg_path == "ffmpeg"
        assert s.thumbnail_window_start == 1.0
        assert s.thumbnail_window_end == 10.0
        assert s.thumbnail_max_concurrency > 0

    def test_frozen(self, tmp_path):
        s = Settings(root_dir=tmp_path)
        with pytest.raises(ValidationError):
            s.root_dir = Path("/elsewhere")

    def test_env_prefix(self, tmp_path, monkeypatch):
        monkeypatch.setenv("POCKETGALLERY_PORT", "8123")
        monkeypatch.setenv("POCKETGALLERY_THUMBNAIL_TIMEOUT", "2.5")
        s = Settings(root_dir=tmp_path)
        assert s.port == 8123
        assert s.thumbnail_timeout == 2.5

    def test_load_ignores_none_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("POCKETGALLERY_PORT", "8123")
        s = Settings.load(root_dir=tmp_path, port=None, host="127.0.0.1")
        assert s.port == 8123
        assert s.host == "127.0.0.1"

    @pytest.mark.parametrize(
        "field", ["thumbnail_max_concurrency", "sniff_bytes", "probe_concurrency", "port"]
    )
    def test_rejects_non_positive(self, tmp_path, field):
        with pytest.raises(ValidationError):
            Settings(root_dir=tmp_path, **{field: 0})

    def test_rejects_inverted_window(self, tmp_path):
        with pytest.raises(ValidationError):
            Settings(root_dir=tmp_path, thumbnail_window_start=5, thumbnail_window_end=2)

    def test_log_level_uppercased(self, tmp_path):
        assert Settings(root_dir=tmp_path, log_level="debug").log_level == "DEBUG"


class TestGetSettings:
    def test_cached_and_resettable(self, monkeypatch, tmp_path):
        monkeypatch.setenv("POCKETGALLERY_ROOT_DIR", str(tmp_path))
        get_settings.cache_clear()

        first = get_settings()
        assert get_settings() is first
        assert first.root_dir == tmp_path

        get_settings.cache_clear()
        assert get_settings() is not first
