"""
Brick Layout
============

Cover a two-colour grid (a QR code, a bitmap, a text drawing) with as
few rectangular bricks as possible. Each cell is covered exactly once
by a brick of its own colour.

- **GridBuilder**: integer upsampling and baseplate fitting
- **TileCatalog**: normalized, largest-first brick size lists
- **TilingEngine**: deterministic greedy placement with savings report
"""

__version__ = "1.0.0"

from brick_layout.catalog import (
    ALL_TILE_SIZES,
    DEFAULT_TILE_SIZES,
    UNIT_CATALOG,
    TileCatalog,
    build_catalog,
    parse_sizes,
)
from brick_layout.config import LayoutConfig
from brick_layout.engine import optimize, tile, tile_units
from brick_layout.errors import (
    BrickLayoutError,
    InvalidScale,
    InvalidTileSize,
    MalformedGrid,
    TilingCancelled,
)
from brick_layout.grid import as_grid, count_cells, expand, max_scale_factor, validate_fit
from brick_layout.image_io import load_grid, parse_text_grid, render_layout
from brick_layout.models import Placement, SizeCount, TileSize, TilingResult

__all__ = [
    "ALL_TILE_SIZES",
    "DEFAULT_TILE_SIZES",
    "UNIT_CATALOG",
    "BrickLayoutError",
    "InvalidScale",
    "InvalidTileSize",
    "LayoutConfig",
    "MalformedGrid",
    "Placement",
    "SizeCount",
    "TileCatalog",
    "TileSize",
    "TilingCancelled",
    "TilingResult",
    "as_grid",
    "build_catalog",
    "count_cells",
    "expand",
    "load_grid",
    "max_scale_factor",
    "optimize",
    "parse_sizes",
    "parse_text_grid",
    "render_layout",
    "tile",
    "tile_units",
    "validate_fit",
]
