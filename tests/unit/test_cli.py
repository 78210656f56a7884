"""
Unit tests for the command line entry point
"""

import runpy
import sys
import zipfile

import pytest
import numpy as np
from PIL import Image

from tilesplit.cli import build_parser, main
from tilesplit.pod2_tile_extraction import TileExtractor


@pytest.fixture
def image_path(tmp_path):
    """100x60 RGB image on disk"""
    path = tmp_path / "map.png"
    array = np.zeros((60, 100, 3), dtype=np.uint8)
    array[..., 0] = 255
    Image.fromarray(array).save(path)
    return path


class TestCli:
    """Test CLI runs"""

    def test_crop_export(self, image_path, tmp_path):
        """Cropped run writes only complete tiles"""
        out_dir = tmp_path / "tiles"
        code = main([str(image_path), "--value", "30", "--output-dir", str(out_dir)])

        assert code == 0
        names = sorted(p.name for p in out_dir.iterdir())
        assert len(names) == 6
        assert names[0] == "map_tile_r01_c01.png"
        assert names[-1] == "map_tile_r02_c03.png"

    def test_pad_export(self, image_path, tmp_path):
        """Padded run adds the edge column and row"""
        out_dir = tmp_path / "tiles"
        code = main([
            str(image_path), "--value", "40", "--strategy", "pad",
            "--background", "#000000", "--output-dir", str(out_dir)
        ])

        assert code == 0
        assert len(list(out_dir.iterdir())) == 6
        corner = np.asarray(Image.open(out_dir / "map_tile_r02_c03.png"))
        assert corner.shape == (40, 40, 3)
        assert (corner[:20, :20, 0] == 255).all()
        assert (corner[20:] == 0).all()

    def test_zip_export(self, image_path, tmp_path):
        """--zip writes one archive"""
        code = main([
            str(image_path), "--unit", "count", "--value", "2",
            "--zip", "--output-dir", str(tmp_path)
        ])

        assert code == 0
        with zipfile.ZipFile(tmp_path / "map_tiles.zip") as archive:
            assert len(archive.namelist()) == 4

    def test_physical_units_use_default_dpi(self, image_path, tmp_path):
        """mm without --dpi falls back to settings.default_dpi"""
        out_dir = tmp_path / "tiles"
        # 2.54mm at 300 DPI is 30px
        code = main([
            str(image_path), "--unit", "mm", "--value", "2.54",
            "--output-dir", str(out_dir)
        ])

        assert code == 0
        assert len(list(out_dir.iterdir())) == 6

    def test_invalid_configuration(self, image_path, tmp_path, capsys):
        """Oversized tiles exit with the failed constraint"""
        with pytest.raises(SystemExit) as exc_info:
            main([str(image_path), "--value", "500", "--output-dir", str(tmp_path)])

        assert exc_info.value.code == 2
        assert "too large" in capsys.readouterr().err

    def test_parser_requires_value(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["image.png"])

    def test_missing_image(self, tmp_path, capsys):
        """A missing input file is reported as a usage error"""
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.png"), "--value", "10"])

        assert exc_info.value.code == 2
        assert "cannot read image" in capsys.readouterr().err

    def test_invalid_background(self, image_path, tmp_path, capsys):
        """An unknown colour is reported as a usage error"""
        with pytest.raises(SystemExit) as exc_info:
            main([
                str(image_path), "--value", "40", "--strategy", "pad",
                "--background", "notacolor", "--output-dir", str(tmp_path)
            ])

        assert exc_info.value.code == 2
        assert "invalid --background" in capsys.readouterr().err


class TestExtractionFailureExit:
    """Test exit status after an aborted extraction"""

    @pytest.fixture
    def failing_encode(self, monkeypatch):
        """Make every tile fail to encode"""
        def fail(buffer):
            raise OSError("encoder unavailable")

        monkeypatch.setattr(TileExtractor, "_encode", staticmethod(fail))

    def test_main_returns_one(self, failing_encode, image_path, tmp_path):
        code = main([str(image_path), "--value", "30", "--output-dir", str(tmp_path / "tiles")])
        assert code == 1

    def test_module_entry_point_exit_status(self, failing_encode, image_path, tmp_path, monkeypatch):
        """python -m tilesplit exits non-zero when extraction aborts"""
        monkeypatch.setattr(sys, "argv", [
            "tilesplit", str(image_path), "--value", "30",
            "--output-dir", str(tmp_path / "tiles")
        ])

        with pytest.raises(SystemExit) as exc_info:
            runpy.run_module("tilesplit", run_name="__main__")

        assert exc_info.value.code == 1
