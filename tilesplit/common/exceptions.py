"""
Error types raised by the planning and extraction pods
"""

from typing import Any, List, Optional


class TileSplitError(Exception):
    """Base class for tilesplit errors"""


class InvalidConfiguration(TileSplitError, ValueError):
    """Tile configuration violates a planning precondition"""


class ExtractionFailed(TileSplitError, RuntimeError):
    """
    A tile could not be produced

    Tiles delivered before the failure remain valid; ``completed`` tells the
    caller how many of ``total`` were produced. When raised from
    ``iter_batches``, ``partial_batch`` holds the tiles of the interrupted
    batch that were finished before the failure.
    """

    def __init__(
        self,
        tile_index: int,
        completed: int,
        total: int,
        reason: Optional[str] = None
    ):
        self.tile_index = tile_index
        self.completed = completed
        self.total = total
        self.reason = reason
        self.partial_batch: List[Any] = []
        message = f"Failed to extract tile {tile_index} ({completed} of {total} tiles produced)"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
