"""
Schemas for grid planning module
"""

from enum import Enum
from typing import Optional, Dict, Any, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator


MM_PER_INCH = 25.4


class MeasurementUnit(str, Enum):
    """How TileConfig.value is interpreted"""
    PIXELS = "pixels"
    MILLIMETERS = "mm"
    INCHES = "inches"
    COUNT = "count"

    @property
    def is_physical(self) -> bool:
        """Physical units need a resolution to become pixels"""
        return self in (MeasurementUnit.MILLIMETERS, MeasurementUnit.INCHES)


class RemainderStrategy(str, Enum):
    """Edge policy when tiles do not divide the image evenly"""
    CROP = "crop"
    PAD = "pad"


class TileConfig(BaseModel):
    """
    Tile measurement configuration

    Only field types are checked here. Semantic constraints (positive value,
    resolution for physical units) are reported by ``validate_tile_config``
    and enforced by ``compute_grid``.
    """
    model_config = ConfigDict(frozen=True)

    unit: MeasurementUnit = Field(default=MeasurementUnit.PIXELS, description="Measurement unit")
    value: float = Field(description="Tile size or tile count, depending on unit")
    dpi: Optional[int] = Field(default=None, description="Resolution for mm/inch units")
    remainder_strategy: RemainderStrategy = Field(
        default=RemainderStrategy.CROP,
        description="Crop leftover pixels or pad an extra edge row/column"
    )


class TilePosition(BaseModel):
    """Position of tile in the grid (zero-based)"""
    model_config = ConfigDict(frozen=True)

    row: int
    col: int

    @property
    def row_number(self) -> int:
        return self.row + 1

    @property
    def column_number(self) -> int:
        return self.col + 1

    def to_string(self) -> str:
        """Convert to string format for naming"""
        return f"r{self.row_number:02d}_c{self.column_number:02d}"


class TileCoordinates(BaseModel):
    """Source-side read rectangle for one tile"""
    model_config = ConfigDict(frozen=True)

    index: int
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int

    @property
    def position(self) -> TilePosition:
        return TilePosition(row=self.row, col=self.col)

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Pillow-style (left, upper, right, lower) box"""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


class TileGrid(BaseModel):
    """Immutable tile grid derived from an image size and a TileConfig"""
    model_config = ConfigDict(frozen=True)

    tile_width_px: int = Field(gt=0)
    tile_height_px: int = Field(gt=0)
    columns: int = Field(gt=0)
    rows: int = Field(gt=0)
    total_tiles: int = Field(gt=0)
    source_width: int = Field(gt=0)
    source_height: int = Field(gt=0)
    padded_width: Optional[int] = Field(default=None, gt=0)
    padded_height: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_total_tiles(self):
        """total_tiles must always equal columns * rows"""
        if self.total_tiles != self.columns * self.rows:
            raise ValueError(
                f"total_tiles ({self.total_tiles}) != columns * rows "
                f"({self.columns} * {self.rows})"
            )
        return self

    @property
    def has_padding(self) -> bool:
        return self.padded_width is not None or self.padded_height is not None

    @property
    def tile_pixel_count(self) -> int:
        return self.tile_width_px * self.tile_height_px

    @property
    def covered_width(self) -> int:
        """Source pixels covered horizontally by complete tiles"""
        full_columns = self.columns - 1 if self.padded_width else self.columns
        return full_columns * self.tile_width_px

    @property
    def covered_height(self) -> int:
        """Source pixels covered vertically by complete tiles"""
        full_rows = self.rows - 1 if self.padded_height else self.rows
        return full_rows * self.tile_height_px

    @property
    def remainder_width(self) -> int:
        return self.source_width - self.covered_width

    @property
    def remainder_height(self) -> int:
        return self.source_height - self.covered_height

    @property
    def has_remainder(self) -> bool:
        return self.remainder_width > 0 or self.remainder_height > 0

    @property
    def estimated_size_bytes(self) -> int:
        """Uncompressed RGBA size of all tiles"""
        return self.tile_pixel_count * 4 * self.total_tiles

    def physical_tile_size(self, dpi: int) -> Tuple[float, float]:
        """
        Tile width expressed in physical units

        Args:
            dpi: Output resolution

        Returns:
            Tuple of (millimeters, inches)
        """
        inches = self.tile_width_px / dpi
        return inches * MM_PER_INCH, inches

    def describe(self) -> Dict[str, Any]:
        """Summary used for logging and CLI output"""
        if not self.has_remainder:
            remainder = "none"
        elif self.has_padding:
            remainder = "padded"
        else:
            remainder = "cropped"

        return {
            'source_size': (self.source_width, self.source_height),
            'tile_size': (self.tile_width_px, self.tile_height_px),
            'grid_size': (self.columns, self.rows),
            'total_tiles': self.total_tiles,
            'covered': (self.covered_width, self.covered_height),
            'remainder_px': (self.remainder_width, self.remainder_height),
            'remainder': remainder,
            'estimated_size_mb': round(self.estimated_size_bytes / 1024 / 1024)
        }
