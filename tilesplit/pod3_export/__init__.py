"""
POD 3: Export Module
Names extracted tiles and writes them to a directory or ZIP archive
"""

from .exporter import TileExporter, archive_filename, tile_filename
from .schemas import ExportResult

__all__ = [
    "TileExporter",
    "archive_filename",
    "tile_filename",
    "ExportResult"
]
