"""
Pixel sources - read rectangles of decoded source images
"""

import logging
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

import numpy as np
import rasterio
from PIL import Image
from rasterio.errors import RasterioIOError
from rasterio.windows import Window

logger = logging.getLogger(__name__)

MODES_BY_BANDS = {1: "L", 3: "RGB", 4: "RGBA"}
BANDS_BY_MODE = {mode: bands for bands, mode in MODES_BY_BANDS.items()}


@runtime_checkable
class PixelSource(Protocol):
    """
    Capability to read pixel rectangles from a decoded image

    ``read_region`` returns a uint8 array shaped (height, width) for
    mode "L" and (height, width, bands) for "RGB"/"RGBA".
    """

    width: int
    height: int
    mode: str

    def read_region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        ...


def _check_region(source: PixelSource, x: int, y: int, width: int, height: int):
    """Reject rectangles that fall outside the source image"""
    if width < 1 or height < 1:
        raise ValueError(f"Empty region: {width}x{height}")
    if x < 0 or y < 0 or x + width > source.width or y + height > source.height:
        raise ValueError(
            f"Region ({x}, {y}, {width}, {height}) outside "
            f"{source.width}x{source.height} image"
        )


class ArrayPixelSource:
    """Pixel source backed by an in-memory numpy array"""

    def __init__(self, array: np.ndarray):
        """
        Initialize array source

        Args:
            array: uint8 array shaped (H, W), (H, W, 3) or (H, W, 4)
        """
        if array.dtype != np.uint8:
            raise ValueError(f"Pixel array must be uint8, got {array.dtype}")

        if array.ndim == 2:
            self.mode = "L"
        elif array.ndim == 3 and array.shape[2] in (3, 4):
            self.mode = MODES_BY_BANDS[array.shape[2]]
        else:
            raise ValueError(f"Unsupported pixel array shape: {array.shape}")

        self.array = array
        self.height, self.width = array.shape[:2]

    def read_region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        _check_region(self, x, y, width, height)
        return self.array[y:y + height, x:x + width]


class PILPixelSource:
    """Pixel source backed by a Pillow image"""

    def __init__(self, image: Image.Image):
        """
        Initialize Pillow source

        Args:
            image: Decoded image; modes other than L/RGB/RGBA are normalized
        """
        if image.mode not in BANDS_BY_MODE:
            image = self._normalize(image)

        self.image = image
        self.mode = image.mode
        self.width, self.height = image.size

    @staticmethod
    def _normalize(image: Image.Image) -> Image.Image:
        """
        Bring an image into L, RGB or RGBA

        Single-band modes ("1", "I", "I;16", "F") stay single-band; integer
        and float samples are clipped to 0..255 by Pillow's conversion to L.
        Palette and multi-band modes become RGBA if they carry alpha,
        RGB otherwise.
        """
        if image.mode == "P" or len(image.getbands()) > 1:
            has_alpha = "A" in image.getbands() or "transparency" in image.info
            target = "RGBA" if has_alpha else "RGB"
        else:
            target = "L"

        logger.debug(f"Normalizing image mode {image.mode} to {target}")
        return image.convert(target)

    def read_region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        _check_region(self, x, y, width, height)
        # crop copies pixels 1:1, no resampling
        return np.asarray(self.image.crop((x, y, x + width, y + height)))


class RasterioPixelSource:
    """
    Pixel source reading windows straight from a raster on disk

    Only the requested window is read, so very large rasters never have
    to be decoded in full.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Open raster for windowed reads

        Args:
            path: Path to an 8-bit raster with 1, 3 or 4 bands
        """
        self.path = Path(path)
        self._dataset = rasterio.open(self.path)

        count = self._dataset.count
        dtypes = self._dataset.dtypes
        if count not in MODES_BY_BANDS:
            self.close()
            raise ValueError(f"Unsupported band count: {count}")
        if any(dtype != "uint8" for dtype in dtypes):
            self.close()
            raise ValueError(f"Raster must be 8-bit, got {dtypes}")

        self.mode = MODES_BY_BANDS[count]
        self.width = self._dataset.width
        self.height = self._dataset.height

    def read_region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        _check_region(self, x, y, width, height)
        data = self._dataset.read(window=Window(x, y, width, height))
        if self.mode == "L":
            return data[0]
        # (bands, rows, cols) -> (rows, cols, bands)
        return np.transpose(data, (1, 2, 0))

    def close(self):
        self._dataset.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def open_pixel_source(path: Union[str, Path]) -> PixelSource:
    """
    Decode an image file into a pixel source

    GeoTIFFs are read lazily through rasterio; everything else is decoded
    with Pillow.

    Args:
        path: Input image path

    Returns:
        PixelSource for the image
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    if path.suffix.lower() in (".tif", ".tiff"):
        try:
            return RasterioPixelSource(path)
        except (RasterioIOError, ValueError) as e:
            logger.warning(f"Falling back to Pillow for {path.name}: {e}")

    image = Image.open(path)
    image.load()
    return PILPixelSource(image)
