"""
Grid Planner - converts a TileConfig into pixel-exact tile boundaries
"""

import logging
import math
from typing import Iterator, Optional

from .schemas import (
    MM_PER_INCH,
    MeasurementUnit,
    RemainderStrategy,
    TileConfig,
    TileCoordinates,
    TileGrid
)
from ..common.exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)


def round_half_away_from_zero(value: float) -> int:
    """Round like Math.round for positive sizes (2.5 -> 3, not 2)"""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def mm_to_pixels(mm: float, dpi: int) -> int:
    return round_half_away_from_zero(mm / MM_PER_INCH * dpi)


def inches_to_pixels(inches: float, dpi: int) -> int:
    return round_half_away_from_zero(inches * dpi)


def pixels_to_mm(pixels: float, dpi: int) -> float:
    return pixels * MM_PER_INCH / dpi


def pixels_to_inches(pixels: float, dpi: int) -> float:
    return pixels / dpi


def validate_tile_config(config: TileConfig) -> Optional[str]:
    """
    Check configuration constraints that do not depend on the image

    Args:
        config: Tile configuration

    Returns:
        Description of the first failed constraint, or None if valid
    """
    if not math.isfinite(config.value) or config.value <= 0:
        return "Value must be greater than 0"

    if config.unit.is_physical and config.dpi is None:
        return "DPI is required for physical measurements (mm, inches)"

    if config.dpi is not None and config.dpi < 1:
        return "DPI must be at least 1"

    return None


def compute_grid(source_width: int, source_height: int, config: TileConfig) -> TileGrid:
    """
    Compute the tile grid for an image

    Pure function of its arguments: identical inputs always give an
    identical TileGrid.

    Args:
        source_width: Image width in pixels
        source_height: Image height in pixels
        config: Tile configuration

    Returns:
        TileGrid describing tile size, grid dimensions and padding

    Raises:
        InvalidConfiguration: If a constraint fails; the message names it
    """
    if source_width < 1 or source_height < 1:
        raise InvalidConfiguration(
            f"Image dimensions must be positive: {source_width}x{source_height}"
        )

    error = validate_tile_config(config)
    if error:
        raise InvalidConfiguration(error)

    if config.unit == MeasurementUnit.COUNT:
        columns = rows = math.floor(config.value)
        if columns < 1:
            raise InvalidConfiguration(f"Tile count must be at least 1: {config.value}")
        tile_width_px = source_width // columns
        tile_height_px = source_height // rows
        if tile_width_px == 0 or tile_height_px == 0:
            raise InvalidConfiguration(
                f"Too many tiles ({columns}x{rows}) for image dimensions "
                f"{source_width}x{source_height}"
            )
    else:
        if config.unit == MeasurementUnit.PIXELS:
            tile_size = round_half_away_from_zero(config.value)
        elif config.unit == MeasurementUnit.MILLIMETERS:
            tile_size = mm_to_pixels(config.value, config.dpi)
        else:
            tile_size = inches_to_pixels(config.value, config.dpi)

        if tile_size < 1:
            raise InvalidConfiguration(
                f"Tile size rounds to zero pixels: {config.value} {config.unit.value}"
            )

        tile_width_px = tile_height_px = tile_size
        columns = source_width // tile_width_px
        rows = source_height // tile_height_px

    if columns == 0 or rows == 0:
        raise InvalidConfiguration(
            f"Tile size too large for image dimensions: "
            f"{tile_width_px}px tile, {source_width}x{source_height} image"
        )

    padded_width = None
    padded_height = None

    # Count units never revisit the remainder strategy
    if (config.remainder_strategy == RemainderStrategy.PAD
            and config.unit != MeasurementUnit.COUNT):
        if source_width - columns * tile_width_px > 0:
            padded_width = columns * tile_width_px + tile_width_px
            columns += 1
        if source_height - rows * tile_height_px > 0:
            padded_height = rows * tile_height_px + tile_height_px
            rows += 1

    grid = TileGrid(
        tile_width_px=tile_width_px,
        tile_height_px=tile_height_px,
        columns=columns,
        rows=rows,
        total_tiles=columns * rows,
        source_width=source_width,
        source_height=source_height,
        padded_width=padded_width,
        padded_height=padded_height
    )

    logger.debug(
        f"Planned {grid.columns}x{grid.rows} grid of "
        f"{tile_width_px}x{tile_height_px}px tiles for {source_width}x{source_height} image"
    )

    return grid


def coordinates_of(tile_index: int, grid: TileGrid) -> TileCoordinates:
    """
    Map a tile index to its source-side read rectangle

    Tiles are numbered row-major: left to right, then top to bottom.
    In a padded last column/row the rectangle is clipped to the source
    image; the destination tile keeps its full size.

    Args:
        tile_index: Index in 0..total_tiles-1
        grid: Tile grid

    Returns:
        TileCoordinates for the tile
    """
    if not 0 <= tile_index < grid.total_tiles:
        raise IndexError(
            f"Tile index {tile_index} out of range for {grid.total_tiles} tiles"
        )

    col = tile_index % grid.columns
    row = tile_index // grid.columns

    x = col * grid.tile_width_px
    y = row * grid.tile_height_px

    width = grid.tile_width_px
    height = grid.tile_height_px

    if grid.padded_width and col == grid.columns - 1:
        width = min(grid.tile_width_px, grid.source_width - x)

    if grid.padded_height and row == grid.rows - 1:
        height = min(grid.tile_height_px, grid.source_height - y)

    return TileCoordinates(
        index=tile_index,
        row=row,
        col=col,
        x=x,
        y=y,
        width=width,
        height=height
    )


def iter_coordinates(grid: TileGrid) -> Iterator[TileCoordinates]:
    """Yield coordinates for every tile in index order"""
    for tile_index in range(grid.total_tiles):
        yield coordinates_of(tile_index, grid)
