"""
Tile Extractor - streams encoded tiles out of a pixel source
"""

import asyncio
import io
import logging
import time
from typing import AsyncIterator, Callable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageColor

from .schemas import ExtractedTile, ExtractionResult
from .sources import BANDS_BY_MODE, PixelSource
from ..common.config import settings
from ..common.exceptions import ExtractionFailed
from ..pod1_grid_planning.planner import coordinates_of
from ..pod1_grid_planning.schemas import TileCoordinates, TileGrid

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
BackgroundColor = Union[str, int, Sequence[int]]

OUTPUT_FORMAT = "PNG"


def resolve_background(color: BackgroundColor, mode: str) -> Union[int, Tuple[int, ...]]:
    """
    Convert a colour spec into a fill value for the given image mode

    Args:
        color: Pillow colour string ("#FFFFFF", "white") or int/tuple
        mode: Image mode of the pixel source

    Returns:
        int for "L", tuple of band values otherwise
    """
    if isinstance(color, str):
        return ImageColor.getcolor(color, mode)

    bands = BANDS_BY_MODE[mode]
    if isinstance(color, int):
        values = (color,) * bands
        if mode == "RGBA":
            values = (color, color, color, 255)
    else:
        values = tuple(int(v) for v in color)
        if mode == "RGBA" and len(values) == 3:
            values = values + (255,)
        elif mode == "L" and len(values) in (3, 4):
            raise ValueError(f"Colour {color} has too many bands for mode L")

    if len(values) != bands or not all(0 <= v <= 255 for v in values):
        raise ValueError(f"Invalid background colour {color} for mode {mode}")

    return values[0] if mode == "L" else values


class TileExtractor:
    """
    Produces encoded tiles for a TileGrid in row-major index order

    A single scratch buffer of one tile's size is reused for every tile,
    and production is grouped into batches of roughly
    ``settings.batch_pixel_budget`` pixels. The async API yields to the
    event loop once per batch boundary and never mid-tile.
    """

    def __init__(
        self,
        source: PixelSource,
        grid: TileGrid,
        background_color: Optional[BackgroundColor] = None,
        pixel_budget: Optional[int] = None
    ):
        """
        Initialize tile extractor

        Args:
            source: Decoded source image
            grid: Tile grid computed for the source dimensions
            background_color: Fill colour for padded tiles
            pixel_budget: Tile pixels per batch (defaults to settings)
        """
        if (source.width, source.height) != (grid.source_width, grid.source_height):
            raise ValueError(
                f"Grid planned for {grid.source_width}x{grid.source_height} "
                f"but source is {source.width}x{source.height}"
            )

        self.source = source
        self.grid = grid
        self.background_color = (
            background_color if background_color is not None else settings.background_color
        )
        if pixel_budget is None:
            pixel_budget = settings.batch_pixel_budget
        if pixel_budget < 1:
            raise ValueError(f"Pixel budget must be at least 1: {pixel_budget}")
        self.pixel_budget = pixel_budget
        self._fill_value = resolve_background(self.background_color, source.mode)
        self._scratch: Optional[np.ndarray] = None
        self._completed = 0

    @property
    def batch_size(self) -> int:
        """Tiles per batch, at least one even if a tile exceeds the budget"""
        return max(1, self.pixel_budget // self.grid.tile_pixel_count)

    def batch_ranges(self) -> List[range]:
        """Tile index ranges for each batch, in order"""
        size = self.batch_size
        return [
            range(start, min(start + size, self.grid.total_tiles))
            for start in range(0, self.grid.total_tiles, size)
        ]

    def _scratch_buffer(self) -> np.ndarray:
        """Allocate the tile-sized scratch buffer on first use"""
        if self._scratch is None:
            shape = (self.grid.tile_height_px, self.grid.tile_width_px)
            bands = BANDS_BY_MODE[self.source.mode]
            if bands > 1:
                shape = shape + (bands,)
            self._scratch = np.empty(shape, dtype=np.uint8)
            logger.debug(f"Allocated scratch buffer {shape}")
        return self._scratch

    def _render(self, coords: TileCoordinates) -> np.ndarray:
        """
        Draw one tile into the scratch buffer

        Args:
            coords: Source read rectangle

        Returns:
            The scratch buffer holding the tile
        """
        scratch = self._scratch_buffer()

        if self.grid.has_padding:
            scratch[...] = self._fill_value

        region = self.source.read_region(coords.x, coords.y, coords.width, coords.height)
        if region.shape[:2] != (coords.height, coords.width):
            raise ValueError(
                f"Source returned {region.shape[1]}x{region.shape[0]} pixels, "
                f"expected {coords.width}x{coords.height}"
            )

        scratch[:coords.height, :coords.width] = region
        return scratch

    @staticmethod
    def _encode(buffer: np.ndarray) -> bytes:
        """Encode a tile buffer losslessly"""
        output = io.BytesIO()
        Image.fromarray(buffer).save(output, format=OUTPUT_FORMAT)
        return output.getvalue()

    def extract_tile(self, tile_index: int) -> ExtractedTile:
        """
        Extract and encode a single tile

        Args:
            tile_index: Index in 0..total_tiles-1

        Returns:
            ExtractedTile with PNG data

        Raises:
            IndexError: If the index is outside the grid
            ExtractionFailed: If reading, allocating or encoding fails
        """
        coords = coordinates_of(tile_index, self.grid)

        try:
            data = self._encode(self._render(coords))
        except Exception as e:
            logger.error(f"Tile {tile_index} extraction failed: {e}")
            raise ExtractionFailed(
                tile_index, self._completed, self.grid.total_tiles, str(e)
            ) from e

        return ExtractedTile(
            index=tile_index,
            coordinates=coords,
            width=self.grid.tile_width_px,
            height=self.grid.tile_height_px,
            data=data,
            format=OUTPUT_FORMAT
        )

    def _produce(
        self,
        indices: range,
        on_progress: Optional[ProgressCallback]
    ) -> Iterator[ExtractedTile]:
        """Produce one batch of tiles without suspension"""
        for tile_index in indices:
            tile = self.extract_tile(tile_index)
            self._completed += 1
            if on_progress:
                on_progress(self._completed, self.grid.total_tiles)
            yield tile

    def iter_batches(
        self,
        on_progress: Optional[ProgressCallback] = None
    ) -> Iterator[List[ExtractedTile]]:
        """
        Yield tiles grouped into pixel-budget batches

        Args:
            on_progress: Called with (completed, total) after each tile

        Yields:
            List of tiles for each batch, in index order
        """
        self._completed = 0
        for indices in self.batch_ranges():
            batch = []
            try:
                for tile in self._produce(indices, on_progress):
                    batch.append(tile)
            except ExtractionFailed as e:
                # tiles finished before the failure stay with the caller
                e.partial_batch = batch
                raise
            yield batch

    def iter_tiles(
        self,
        on_progress: Optional[ProgressCallback] = None
    ) -> Iterator[ExtractedTile]:
        """
        Lazily yield tiles in index order

        Stopping iteration early stops extraction; tiles already yielded
        stay valid.
        """
        self._completed = 0
        for indices in self.batch_ranges():
            yield from self._produce(indices, on_progress)

    async def aiter_tiles(
        self,
        on_progress: Optional[ProgressCallback] = None
    ) -> AsyncIterator[ExtractedTile]:
        """
        Async variant of iter_tiles

        Control returns to the event loop once between batches.
        """
        self._completed = 0
        for batch_number, indices in enumerate(self.batch_ranges()):
            if batch_number:
                await asyncio.sleep(0)
            for tile in self._produce(indices, on_progress):
                yield tile

    async def extract_all(
        self,
        on_progress: Optional[ProgressCallback] = None
    ) -> ExtractionResult:
        """
        Extract every tile

        Args:
            on_progress: Called with (completed, total) after each tile

        Returns:
            ExtractionResult with all tiles in index order
        """
        start_time = time.time()
        batches = self.batch_ranges()

        logger.info(
            f"Extracting {self.grid.total_tiles} tiles "
            f"({self.grid.tile_width_px}x{self.grid.tile_height_px}px) "
            f"in {len(batches)} batches of up to {self.batch_size}"
        )

        tiles = [tile async for tile in self.aiter_tiles(on_progress)]

        processing_time = time.time() - start_time
        logger.info(f"Extraction completed: {len(tiles)} tiles in {processing_time:.2f} seconds")

        return ExtractionResult(
            grid=self.grid,
            tiles=tiles,
            batch_size=self.batch_size,
            batches=len(batches),
            processing_time=processing_time
        )


async def extract_all(
    source: PixelSource,
    grid: TileGrid,
    background_color: Optional[BackgroundColor] = None,
    on_progress: Optional[ProgressCallback] = None
) -> ExtractionResult:
    """Extract all tiles of ``grid`` from ``source``"""
    extractor = TileExtractor(source, grid, background_color)
    return await extractor.extract_all(on_progress)
