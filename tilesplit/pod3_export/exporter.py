"""
Tile Exporter - names tiles and writes them to disk or a ZIP archive
"""

import logging
import zipfile
from pathlib import Path, PurePath
from typing import Iterable, Union

from .schemas import ExportResult
from ..pod1_grid_planning.schemas import TileGrid, TilePosition
from ..pod2_tile_extraction.schemas import ExtractedTile

logger = logging.getLogger(__name__)

TILE_EXTENSION = "png"


def base_name(filename: str) -> str:
    """Strip directory and final extension"""
    return PurePath(filename).stem or "image"


def tile_filename(base_filename: str, tile_index: int, grid: TileGrid) -> str:
    """
    Deterministic filename for a tile

    Args:
        base_filename: Original image filename, extension optional
        tile_index: Row-major tile index
        grid: Tile grid

    Returns:
        ``<basename>_tile_rRR_cCC.png`` with 1-based row/column numbers
    """
    position = TilePosition(row=tile_index // grid.columns, col=tile_index % grid.columns)
    return f"{base_name(base_filename)}_tile_{position.to_string()}.{TILE_EXTENSION}"


def archive_filename(base_filename: str) -> str:
    return f"{base_name(base_filename)}_tiles.zip"


class TileExporter:
    """
    Writes extracted tiles for one source image

    Tiles are consumed one at a time, so a lazy tile iterator is never
    materialized in memory.
    """

    def __init__(self, base_filename: str, grid: TileGrid):
        """
        Initialize exporter

        Args:
            base_filename: Source image filename used to derive tile names
            grid: Tile grid the tiles were extracted with
        """
        self.base_filename = base_filename
        self.grid = grid

    def filename_for(self, tile: ExtractedTile) -> str:
        return tile_filename(self.base_filename, tile.index, self.grid)

    def export_to_directory(
        self,
        tiles: Iterable[ExtractedTile],
        output_dir: Union[str, Path]
    ) -> ExportResult:
        """
        Write each tile as its own file

        Args:
            tiles: Tiles in index order
            output_dir: Destination directory, created if missing

        Returns:
            ExportResult listing written files
        """
        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        files = []
        bytes_written = 0
        for tile in tiles:
            tile_path = out_dir / self.filename_for(tile)
            tile_path.write_bytes(tile.data)
            files.append(tile_path.name)
            bytes_written += len(tile.data)

        logger.info(f"Exported {len(files)} tiles to {out_dir}")

        return ExportResult(
            tile_count=len(files),
            files=files,
            output_dir=out_dir,
            bytes_written=bytes_written
        )

    def export_to_zip(
        self,
        tiles: Iterable[ExtractedTile],
        output_dir: Union[str, Path]
    ) -> ExportResult:
        """
        Write all tiles into a single ZIP archive

        PNG data is already compressed, so entries are stored as-is.

        Args:
            tiles: Tiles in index order
            output_dir: Directory receiving ``<basename>_tiles.zip``

        Returns:
            ExportResult with the archive path
        """
        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        archive_path = out_dir / archive_filename(self.base_filename)

        files = []
        bytes_written = 0
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_STORED) as archive:
            for tile in tiles:
                name = self.filename_for(tile)
                archive.writestr(name, tile.data)
                files.append(name)
                bytes_written += len(tile.data)

        logger.info(f"Exported {len(files)} tiles to {archive_path}")

        return ExportResult(
            tile_count=len(files),
            files=files,
            archive_path=archive_path,
            bytes_written=bytes_written
        )
