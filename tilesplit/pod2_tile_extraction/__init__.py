"""
POD 2: Tile Extraction Module
Streams pixel-exact tiles out of decoded source images
"""

from .engine import TileExtractor, extract_all
from .schemas import ExtractedTile, ExtractionResult
from .sources import (
    ArrayPixelSource,
    PILPixelSource,
    PixelSource,
    RasterioPixelSource,
    open_pixel_source
)

__all__ = [
    "TileExtractor",
    "extract_all",
    "ExtractedTile",
    "ExtractionResult",
    "ArrayPixelSource",
    "PILPixelSource",
    "PixelSource",
    "RasterioPixelSource",
    "open_pixel_source"
]
