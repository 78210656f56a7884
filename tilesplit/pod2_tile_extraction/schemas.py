"""
Schemas for tile extraction module
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, Field

from ..pod1_grid_planning.schemas import TileCoordinates, TileGrid, TilePosition


class ExtractedTile(BaseModel):
    """One encoded tile, delivered in index order"""
    index: int
    coordinates: TileCoordinates
    width: int
    height: int
    data: bytes = Field(repr=False)
    format: str = "PNG"

    @property
    def position(self) -> TilePosition:
        return self.coordinates.position

    @property
    def padded(self) -> bool:
        """True if part of this tile is background fill"""
        return (self.coordinates.width < self.width
                or self.coordinates.height < self.height)


class ExtractionResult(BaseModel):
    """Result of a full extraction run"""
    grid: TileGrid
    tiles: List[ExtractedTile]
    batch_size: int
    batches: int
    processing_time: float  # seconds
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def total_bytes(self) -> int:
        return sum(len(tile.data) for tile in self.tiles)
