"""Greedy tile placement over a two-colour grid."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from typing import Any

import numpy as np

from brick_layout.catalog import UNIT_CATALOG, TileCatalog, build_catalog
from brick_layout.errors import TilingCancelled
from brick_layout.grid import as_grid
from brick_layout.models import Placement, SizeCount, TileSize, TilingResult

logger = logging.getLogger(__name__)


def _can_place(
    grid: np.ndarray,
    covered: np.ndarray,
    x: int,
    y: int,
    w: int,
    h: int,
    is_foreground: bool,
) -> bool:
    """True if a w x h tile fits at (x, y) on free cells of one colour."""
    height, width = grid.shape
    if x + w > width or y + h > height:
        return False
    if covered[y:y + h, x:x + w].any():
        return False
    region = grid[y:y + h, x:x + w]
    return bool(region.all()) if is_foreground else not region.any()


def _group_counts(placements: Iterable[Placement]) -> tuple[SizeCount, ...]:
    counts: dict[tuple[int, int], int] = {}
    for p in placements:
        key = (max(p.width, p.height), min(p.width, p.height))
        counts[key] = counts.get(key, 0) + 1
    rows = [SizeCount(w, h, n) for (w, h), n in counts.items()]
    rows.sort(key=lambda r: (-r.area, -r.width))
    return tuple(rows)


def _savings_percent(cell_count: int, placement_count: int) -> int:
    """Percentage of tiles saved, rounded half away from zero."""
    if cell_count == 0:
        return 0
    num = (cell_count - placement_count) * 100
    q, r = divmod(abs(num), cell_count)
    if 2 * r >= cell_count:
        q += 1
    return q if num >= 0 else -q


def _as_catalog(catalog: TileCatalog | Iterable[TileSize | tuple[int, int]]) -> TileCatalog:
    if isinstance(catalog, TileCatalog):
        return catalog
    return build_catalog(catalog)


def tile(
    grid: np.ndarray | Sequence[Sequence[Any]],
    foreground_catalog: TileCatalog | Iterable[TileSize | tuple[int, int]],
    background_catalog: TileCatalog | Iterable[TileSize | tuple[int, int]],
    *,
    should_cancel: Callable[[], bool] | None = None,
) -> TilingResult:
    """Cover every cell of *grid* exactly once with catalog tiles.

    Cells are scanned row-major.  At each uncovered cell the catalog of
    the cell's colour is walked largest-first, trying each size as given
    and then transposed; the first one that fits on uncovered cells of
    the same colour is committed.  The 1x1 entry every catalog ends with
    guarantees progress.

    Args:
        grid:               Rectangular boolean matrix (True = foreground).
        foreground_catalog: Sizes for foreground cells; raw size lists
                            are normalized with :func:`build_catalog`.
        background_catalog: Sizes for background cells.
        should_cancel:      Optional callable polled before each row.

    Returns:
        The placements plus per-colour counts and savings.

    Raises:
        MalformedGrid: *grid* is not rectangular.
        InvalidTileSize: a raw catalog entry is invalid.
        TilingCancelled: *should_cancel* returned true.
    """
    g = as_grid(grid)
    fg_sizes = _as_catalog(foreground_catalog).sizes
    bg_sizes = _as_catalog(background_catalog).sizes
    height, width = g.shape

    logger.info(
        "Tiling %dx%d grid (%d foreground / %d background sizes) ...",
        width, height, len(fg_sizes), len(bg_sizes),
    )
    t0 = time.perf_counter()

    covered = np.zeros((height, width), dtype=bool)
    placements: list[Placement] = []

    for y in range(height):
        if should_cancel is not None and should_cancel():
            logger.info("Tiling cancelled at row %d of %d", y, height)
            msg = f"Tiling cancelled at row {y}"
            raise TilingCancelled(msg)
        for x in range(width):
            if covered[y, x]:
                continue
            is_foreground = bool(g[y, x])
            sizes = fg_sizes if is_foreground else bg_sizes
            for size in sizes:
                placed = False
                for w, h in size.orientations():
                    if _can_place(g, covered, x, y, w, h, is_foreground):
                        covered[y:y + h, x:x + w] = True
                        placements.append(Placement(x, y, w, h, is_foreground))
                        placed = True
                        break
                if placed:
                    break

    foreground = _group_counts(p for p in placements if p.is_foreground)
    background = _group_counts(p for p in placements if not p.is_foreground)
    fg_total = sum(r.count for r in foreground)
    bg_total = sum(r.count for r in background)
    cell_count = width * height

    result = TilingResult(
        placements=tuple(placements),
        foreground=foreground,
        background=background,
        foreground_total=fg_total,
        background_total=bg_total,
        cell_count=cell_count,
        savings_percent=_savings_percent(cell_count, len(placements)),
        width=width,
        height=height,
    )
    logger.info(
        "Tiling done  | %d tiles for %d cells, savings %d%%  (%.3f s)",
        result.total, cell_count, result.savings_percent,
        time.perf_counter() - t0,
    )
    return result


def optimize(
    grid: np.ndarray | Sequence[Sequence[Any]],
    foreground_sizes: Iterable[TileSize | tuple[int, int]] = (),
    background_sizes: Iterable[TileSize | tuple[int, int]] = (),
) -> TilingResult:
    """Build both catalogs from raw size lists and run :func:`tile`."""
    return tile(grid, build_catalog(foreground_sizes), build_catalog(background_sizes))


def tile_units(grid: np.ndarray | Sequence[Sequence[Any]]) -> TilingResult:
    """Plain 1x1 layout of *grid* - one tile per cell."""
    return tile(grid, UNIT_CATALOG, UNIT_CATALOG)
