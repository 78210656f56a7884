"""
Command line entry point: split an image into tiles
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .common.config import settings, setup_logging
from .common.exceptions import ExtractionFailed, InvalidConfiguration
from .pod1_grid_planning import MeasurementUnit, RemainderStrategy, TileConfig, compute_grid
from .pod2_tile_extraction import TileExtractor, open_pixel_source
from .pod3_export import TileExporter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilesplit",
        description="Split an image into a grid of equally sized square tiles"
    )

    parser.add_argument('image', type=str, help='Input image path')

    parser.add_argument(
        '--unit',
        choices=[unit.value for unit in MeasurementUnit],
        default=MeasurementUnit.PIXELS.value,
        help='How --value is interpreted'
    )

    parser.add_argument(
        '--value',
        type=float,
        required=True,
        help='Tile size (pixels, mm, inches) or tiles per side (count)'
    )

    parser.add_argument(
        '--dpi',
        type=int,
        default=None,
        help=f'Resolution for mm/inches (default: {settings.default_dpi})'
    )

    parser.add_argument(
        '--strategy',
        choices=[strategy.value for strategy in RemainderStrategy],
        default=RemainderStrategy.CROP.value,
        help='Drop leftover pixels (crop) or add padded edge tiles (pad)'
    )

    parser.add_argument(
        '--background',
        type=str,
        default=settings.background_color,
        help='Fill colour for padded tiles'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default=settings.output_dir,
        help='Output directory'
    )

    parser.add_argument(
        '--zip',
        action='store_true',
        help='Write a single ZIP archive instead of individual PNGs'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Verbose logging'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    unit = MeasurementUnit(args.unit)
    dpi = args.dpi
    if dpi is None and unit.is_physical:
        dpi = settings.default_dpi

    config = TileConfig(
        unit=unit,
        value=args.value,
        dpi=dpi,
        remainder_strategy=RemainderStrategy(args.strategy)
    )

    try:
        source = open_pixel_source(args.image)
    except OSError as e:
        parser.error(f"cannot read image: {e}")

    try:
        try:
            grid = compute_grid(source.width, source.height, config)
        except InvalidConfiguration as e:
            parser.error(str(e))

        summary = grid.describe()
        logger.info(f"Grid: {summary['grid_size'][0]} x {summary['grid_size'][1]} "
                    f"= {grid.total_tiles} tiles of {grid.tile_width_px}px "
                    f"(remainder: {summary['remainder']})")

        try:
            extractor = TileExtractor(source, grid, background_color=args.background)
        except ValueError as e:
            parser.error(f"invalid --background: {e}")

        exporter = TileExporter(Path(args.image).name, grid)

        with tqdm(total=grid.total_tiles, desc="Tiling") as pbar:
            def on_progress(current: int, total: int):
                pbar.n = current
                pbar.refresh()

            tiles = extractor.iter_tiles(on_progress)
            try:
                if args.zip:
                    result = exporter.export_to_zip(tiles, args.output_dir)
                else:
                    result = exporter.export_to_directory(tiles, args.output_dir)
            except ExtractionFailed as e:
                logger.error(f"Tiling aborted: {e}")
                return 1
    finally:
        close = getattr(source, "close", None)
        if close:
            close()

    target = result.archive_path or result.output_dir
    logger.info(f"Successfully exported {result.tile_count} tiles to {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
