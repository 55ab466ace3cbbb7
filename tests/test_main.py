# Tests for the command-line entry point.
# Created: 2026-10-12

from unittest.mock import patch

import pytest

from pocketgallery.__main__ import build_parser, main


@pytest.fixture
def mock_run():
    with (
        patch("pocketgallery.api.serve.run_server") as run,
        patch("pocketgallery.__main__.setup_logging"),
    ):
        yield run


class TestStartupValidation:
    def test_missing_argument_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2
        assert "root" in capsys.readouterr().err

    def test_nonexistent_root_exits_nonzero(self, tmp_path, capsys, mock_run):
        missing = tmp_path / "nope"

        assert main([str(missing)]) == 1

        assert f'Path "{missing}" does not exist' in capsys.readouterr().err
        mock_run.assert_not_called()

    def test_file_root_exits_nonzero(self, tmp_path, capsys, mock_run):
        f = tmp_path / "file.txt"
        f.write_text("x")

        assert main([str(f)]) == 1

        assert "is not a directory" in capsys.readouterr().err
        mock_run.assert_not_called()

    def test_invalid_option_value(self, tmp_path, capsys, mock_run):
        assert main([str(tmp_path), "--max-thumbnails", "0"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err
        mock_run.assert_not_called()


class TestStartup:
    def test_valid_root_starts_server(self, tmp_path, mock_run):
        assert main([str(tmp_path)]) == 0

        settings = mock_run.call_args.args[0]
        assert settings.root_dir == tmp_path.absolute()
        assert settings.port == 19992
        assert settings.host == "0.0.0.0"

    def test_flags_override_defaults(self, tmp_path, mock_run):
        main(
            [
                str(tmp_path),
                "--port",
                "8080",
                "--host",
                "127.0.0.1",
                "--ffmpeg",
                "/opt/ffmpeg",
                "--max-thumbnails",
                "2",
            ]
        )

        settings = mock_run.call_args.args[0]
        assert settings.port == 8080
        assert settings.host == "127.0.0.1"
        assert settings.ffmpeg_path == "/opt/ffmpeg"
        assert settings.thumbnail_max_concurrency == 2

    def test_keyboard_interrupt_is_clean(self, tmp_path, mock_run):
        mock_run.side_effect = KeyboardInterrupt
        assert main([str(tmp_path)]) == 0


class TestParser:
    def test_exactly_one_positional(self):
        parser = build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["a", "b"])
