"""
POD 1: Grid Planning Module
Converts tile measurements into pixel-exact tile grids
"""

from .planner import compute_grid, coordinates_of, iter_coordinates, validate_tile_config
from .schemas import (
    MeasurementUnit,
    RemainderStrategy,
    TileConfig,
    TileCoordinates,
    TileGrid,
    TilePosition
)

__all__ = [
    "compute_grid",
    "coordinates_of",
    "iter_coordinates",
    "validate_tile_config",
    "MeasurementUnit",
    "RemainderStrategy",
    "TileConfig",
    "TileCoordinates",
    "TileGrid",
    "TilePosition"
]
