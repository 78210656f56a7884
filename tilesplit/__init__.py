"""
tilesplit - split raster images into grids of square tiles
"""

__version__ = "0.1.0"
