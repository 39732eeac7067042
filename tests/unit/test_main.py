# tests/unit/test_main.py — v2
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from agenticad.config.settings import ConfigurationError
from agenticad.main import _build_parser, _read_data_uri, main


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_analyze_subcommand(self):
        args = _build_parser().parse_args(
            ["analyze", "a lamp", "--image", "photo.jpg", "--style", "industrial"]
        )
        assert args.command == "analyze"
        assert args.text == "a lamp"
        assert args.image == Path("photo.jpg")
        assert args.sketch is None
        assert args.style == "industrial"

    def test_speak_subcommand(self):
        args = _build_parser().parse_args(["speak", "hello", "--voice", "v1"])
        assert args.voice == "v1"
        assert args.out is None

    def test_cache_clear_kind_choices(self):
        args = _build_parser().parse_args(["cache", "clear", "--kind", "voice_synthesis"])
        assert args.kind == "voice_synthesis"
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["cache", "clear", "--kind", "bogus"])


class TestReadDataUri:
    def test_png(self, tmp_path):
        path = tmp_path / "sketch.png"
        path.write_bytes(b"hello")
        assert _read_data_uri(path) == "data:image/png;base64,aGVsbG8="

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="File not found"):
            _read_data_uri(tmp_path / "nope.png")


# ---------------------------------------------------------------------------
# main() tests
# ---------------------------------------------------------------------------

@pytest.fixture
def cli(settings, make_context):
    """Run main() against a mocked-provider context."""
    context = make_context()
    with patch("agenticad.main._load_settings", return_value=settings), \
         patch("agenticad.api.facade.create_context", return_value=context):
        yield context


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_configuration_error(self, capsys):
        with patch(
            "agenticad.main._load_settings",
            side_effect=ConfigurationError("PROVIDER_ORDER has unknown providers: x"),
        ):
            assert main(["cache", "stats"]) == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_analyze(self, cli, capsys):
        assert main(["analyze", "a minimalist desk lamp with a metal base"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["model"]["product_type"] == "Office Organizer"
        assert payload["sources"] == ["heuristic"]
        assert len(payload["alternatives"]) == 2

    def test_analyze_without_input_fails(self, cli):
        assert main(["analyze"]) == 1

    def test_analyze_missing_image_fails(self, cli, tmp_path):
        assert main(["analyze", "x", "--image", str(tmp_path / "nope.png")]) == 1

    def test_speak_unavailable(self, cli):
        assert main(["speak", "hello"]) == 1

    def test_cache_stats(self, cli, capsys):
        assert main(["cache", "stats"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["local_entries"] == 0
        assert payload["session"]["reads"] == 0

    def test_cache_clear(self, cli, capsys):
        assert main(["cache", "clear"]) == 0
        assert json.loads(capsys.readouterr().out) == {"removed": 0, "kind": "all"}
