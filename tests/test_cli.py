"""
Tests for the cpar command line interface.
"""

import logging

import pytest
from PIL import Image

from cpar import cli


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch, tmp_path):
    """main() reconfigures the root logger and reads cpar.conf from the cwd."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParser:
    """Test argument parsing."""

    def test_sources_and_output(self):
        args = cli.build_parser().parse_args(["a.png", "b.png", "out"])
        assert args.source == ["a.png", "b.png"]
        assert args.output == "out"

    def test_short_aliases(self):
        args = cli.build_parser().parse_args(
            ["--xt", "240", "--yp", "80", "--ey", "10", "--ex", "3", "-b", "1.5", "-d", "2", "a.png", "out"]
        )
        assert args.x_threshold == 240
        assert args.y_percentile == 80.0
        assert args.y_extra == 10
        assert args.x_extra == 3
        assert args.blur == 1.5
        assert args.downscale == 2.0

    def test_unset_options_are_none(self):
        args = cli.build_parser().parse_args(["a.png", "out"])
        assert all(getattr(args, name) is None for name in cli.SETTING_OPTIONS)

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--help"])
        assert exc.value.code == 0
        assert "SOURCE" in capsys.readouterr().out

    def test_missing_output(self):
        with pytest.raises(SystemExit) as exc:
            cli.main(["only_one.png"])
        assert exc.value.code == 2


class TestMain:
    """Test end-to-end runs."""

    def test_batch_run(self, tmp_path, write_image, make_artwork):
        sources = [
            write_image(make_artwork(1000, 800, box=(200, 150, 800, 650), channels=3), "scans/one.png"),
            write_image(make_artwork(400, 300, box=(50, 40, 350, 260)), "scans/two.png"),
        ]
        (tmp_path / "scans" / "three.png").write_bytes(b"corrupt")
        output_dir = tmp_path / "out"

        code = cli.main([str(p) for p in sources] + [str(tmp_path / "scans" / "three.png"), str(output_dir)])

        assert code == cli.EXIT_OK
        assert sorted(p.name for p in output_dir.iterdir()) == ["one.png", "two.png"]
        with Image.open(output_dir / "one.png") as img:
            assert img.size == (625, 500)

    def test_directory_source_with_options(self, tmp_path, write_image, make_artwork):
        write_image(make_artwork(200, 100, box=(20, 10, 180, 90)), "scans/a.png")
        write_image(make_artwork(200, 100, box=(20, 10, 180, 90)), "scans/b.png")
        output_dir = tmp_path / "out"

        code = cli.main(["-d", "2", "-q", str(tmp_path / "scans"), str(output_dir)])

        assert code == cli.EXIT_OK
        for name in ("a.png", "b.png"):
            with Image.open(output_dir / name) as img:
                assert img.size == (80, 40)

    def test_config_file_used(self, tmp_path, write_image, make_artwork):
        (tmp_path / "cpar.conf").write_text("[OUTPUT]\ndownscale = 4\n", encoding="utf-8")
        source = write_image(make_artwork(200, 100, background=90), "flat.png")

        assert cli.main([str(source), str(tmp_path / "out")]) == cli.EXIT_OK
        with Image.open(tmp_path / "out" / "flat.png") as img:
            assert img.size == (50, 25)

    def test_invalid_percentile(self, tmp_path, write_image, make_artwork):
        source = write_image(make_artwork(20, 20), "a.png")
        output_dir = tmp_path / "out"
        assert cli.main(["-p", "150", str(source), str(output_dir)]) == cli.EXIT_CONFIG_ERROR
        assert not output_dir.exists()

    def test_invalid_downscale(self, tmp_path, write_image, make_artwork):
        source = write_image(make_artwork(20, 20), "a.png")
        assert cli.main(["-d", "0", str(source), str(tmp_path / "out")]) == cli.EXIT_CONFIG_ERROR

    def test_bad_log_level(self, tmp_path, write_image, make_artwork):
        (tmp_path / "cpar.conf").write_text("[LOGGING]\nlevel = chatty\n", encoding="utf-8")
        source = write_image(make_artwork(20, 20), "a.png")
        assert cli.main([str(source), str(tmp_path / "out")]) == cli.EXIT_CONFIG_ERROR

    def test_no_sources(self, tmp_path):
        code = cli.main([str(tmp_path / "missing.png"), str(tmp_path / "out")])
        assert code == cli.EXIT_SETUP_ERROR

    def test_output_not_a_directory(self, tmp_path, write_image, make_artwork):
        source = write_image(make_artwork(20, 20, box=(5, 5, 15, 15)), "a.png")
        blocker = tmp_path / "out"
        blocker.write_text("file")
        assert cli.main([str(source), str(blocker)]) == cli.EXIT_SETUP_ERROR
