"""
Common utilities shared across tilesplit pods
"""

from .config import settings, setup_logging
from .exceptions import TileSplitError, InvalidConfiguration, ExtractionFailed

__all__ = [
    "settings",
    "setup_logging",
    "TileSplitError",
    "InvalidConfiguration",
    "ExtractionFailed"
]
