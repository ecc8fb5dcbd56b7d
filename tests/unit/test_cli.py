"""
Tests for the command-line interface.
"""

import pytest

from tilepanel.cli import main


class TestSimulate:
    """Tests for the headless simulate command."""

    def test_simulate_settles(self, capsys):
        assert main(["simulate", "--items", "10", "--width", "220"]) == 0

        out = capsys.readouterr().out
        assert "Layout: 10 items in 220.0 x 150.0" in out
        assert "Settled after 1 frames" in out

    def test_simulate_add_with_slide(self, capsys):
        code = main(["simulate", "--items", "10", "--width", "220",
                     "--add", "1", "--entry", "slide", "-v"])
        assert code == 0

        out = capsys.readouterr().out
        assert "Added 1: 11 items" in out
        assert "tile-10: offset=(0.00, 0.00)" in out

    def test_frame_limit_reported(self, capsys):
        code = main(["simulate", "--items", "4", "--width", "220", "--add", "1",
                     "--entry", "slide", "--max-frames", "3"])
        assert code == 1
        assert "still animating" in capsys.readouterr().out

    def test_config_file_and_overrides(self, tmp_path, capsys):
        path = tmp_path / "panel.yaml"
        path.write_text("itemWidth: 100\nitemHeight: 40\n")

        code = main(["simulate", "--items", "3", "--width", "250",
                     "--config", str(path), "--attraction", "4", "--seed", "7"])
        assert code == 0
        assert "Layout: 3 items in 250.0 x 80.0" in capsys.readouterr().out

    def test_invalid_override(self, capsys):
        assert main(["simulate", "--dampening", "1.5"]) == 1
        assert "dampening" in capsys.readouterr().out

    def test_missing_config(self, tmp_path, capsys):
        assert main(["simulate", "--config", str(tmp_path / "nope.yaml")]) == 1
        assert "Error" in capsys.readouterr().out


class TestParser:
    """Tests for argument handling."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "tilepanel 0.1.0" in capsys.readouterr().out
