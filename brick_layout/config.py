"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from brick_layout.catalog import DEFAULT_TILE_SIZES
from brick_layout.models import TileSize


@dataclass(frozen=True)
class LayoutConfig:
    """All tuneable parameters for a layout run.

    Attributes:
        baseplate_width:  Container width in cells (0 = unconstrained).
        baseplate_height: Container height in cells (0 = unconstrained).
        scale:            Upscale factor per source cell (None = largest that fits).
        foreground_sizes: Tile sizes allowed on foreground cells.
        background_sizes: Tile sizes allowed on background cells.
        threshold:        Grey level below which an image pixel is foreground.
        invert:           Treat light pixels as foreground instead.
        max_side:         Downsample loaded images so the longest side is this.
        cell_px:          Each grid cell becomes n x n pixels in rendered output.
        foreground_color: RGB fill for foreground tiles.
        background_color: RGB fill for background tiles.
        outline_color:    RGB outline drawn around every tile.
        output_format:    Image format for saved files.
        save_grid:        Persist the scaled grid as an upscaled preview image.
        save_render:      Persist a drawing of the tile layout.
        save_json:        Persist the placements and counts as JSON.
        save_comparison:  Persist a grid | layout side-by-side image.
        input_dir:        Folder to scan for grid sources.
        output_dir:       Folder for results.
    """

    # Baseplate, in cells
    baseplate_width: int = 48
    baseplate_height: int = 48
    scale: int | None = None

    # Catalogs
    foreground_sizes: tuple[TileSize, ...] = DEFAULT_TILE_SIZES
    background_sizes: tuple[TileSize, ...] = DEFAULT_TILE_SIZES

    # Grid source
    threshold: int = 128
    invert: bool = False
    max_side: int | None = None

    # Rendering
    cell_px: int = 12
    foreground_color: tuple[int, int, int] = (20, 20, 20)
    background_color: tuple[int, int, int] = (242, 242, 242)
    outline_color: tuple[int, int, int] = (128, 128, 128)

    # Output
    output_format: str = "png"
    save_grid: bool = False
    save_render: bool = True
    save_json: bool = True
    save_comparison: bool = False

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("grids"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".png", ".bmp", ".gif", ".jpg", ".jpeg", ".tiff", ".tif", ".webp", ".txt"}
    )
