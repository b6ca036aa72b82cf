"""Boolean grids: validation, integer upsampling and baseplate fitting."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Integral
from typing import Any

import numpy as np

from brick_layout.errors import InvalidScale, MalformedGrid


@dataclass(frozen=True)
class FitCheck:
    """Result of :func:`validate_fit`; sizes are in cells."""

    fits: bool
    required_width: int
    required_height: int


@dataclass(frozen=True)
class CellCount:
    """Cell tally of a grid - what an all-1x1 layout would need."""

    foreground: int
    background: int

    @property
    def total(self) -> int:
        return self.foreground + self.background


def as_grid(rows: np.ndarray | Sequence[Sequence[Any]]) -> np.ndarray:
    """Validate *rows* and return a read-only ``(H, W)`` bool array.

    Accepts a 2-D array or a rectangular nested sequence.  ``[]`` is the
    0x0 grid.  The input is copied, never modified.

    Raises:
        MalformedGrid: rows of unequal length, nested cells, or not
            two-dimensional.
    """
    if isinstance(rows, np.ndarray):
        if rows.ndim != 2:
            if rows.size == 0:
                return _freeze(np.zeros((0, 0), dtype=bool))
            msg = f"Grid must be 2-D, got an array with {rows.ndim} dimension(s)"
            raise MalformedGrid(msg)
        return _freeze(rows.astype(bool))

    rows = list(rows)
    if not rows:
        return _freeze(np.zeros((0, 0), dtype=bool))

    widths = set()
    for y, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence | np.ndarray):
            msg = f"Grid row {y} is not a sequence: {row!r}"
            raise MalformedGrid(msg)
        widths.add(len(row))
    if len(widths) != 1:
        msg = f"Grid rows have unequal lengths: {sorted(widths)}"
        raise MalformedGrid(msg)

    width = widths.pop()
    grid = np.zeros((len(rows), width), dtype=bool)
    for y, row in enumerate(rows):
        for x, cell in enumerate(row):
            if isinstance(cell, Sequence | np.ndarray):
                msg = f"Grid cell ({x}, {y}) is not a scalar: {cell!r}"
                raise MalformedGrid(msg)
            grid[y, x] = bool(cell)
    return _freeze(grid)


def _freeze(grid: np.ndarray) -> np.ndarray:
    grid.setflags(write=False)
    return grid


def expand(source_grid: np.ndarray | Sequence[Sequence[Any]], scale_factor: int) -> np.ndarray:
    """Upsample *source_grid* so that every cell becomes a k x k block.

    Output cell ``(x, y)`` equals source cell ``(x // k, y // k)``; the
    output shape is ``(height * k, width * k)``.

    Raises:
        InvalidScale: *scale_factor* is below 1 or not an integer.
        MalformedGrid: *source_grid* is not rectangular.
    """
    if isinstance(scale_factor, bool) or not isinstance(scale_factor, Integral):
        msg = f"Scale factor must be an integer, got {scale_factor!r}"
        raise InvalidScale(msg)
    if scale_factor < 1:
        msg = f"Scale factor must be >= 1, got {scale_factor}"
        raise InvalidScale(msg)

    grid = as_grid(source_grid)
    k = int(scale_factor)
    if k == 1:
        return _freeze(grid.copy())
    block = np.ones((k, k), dtype=bool)
    return _freeze(np.kron(grid, block).astype(bool))


def max_scale_factor(
    source_size: int,
    container_width: int,
    container_height: int,
) -> int:
    """Largest integer scale at which *source_size* fits the container.

    An unconfigured container (either side ``0``) imposes no
    constraint and yields the smallest valid scale, ``1``.
    """
    if container_width == 0 or container_height == 0:
        return 1
    if source_size < 1:
        msg = f"Source size must be >= 1, got {source_size}"
        raise ValueError(msg)
    return max(1, min(container_width // source_size, container_height // source_size))


def validate_fit(
    source_size: int,
    scale: int,
    container_width: int,
    container_height: int,
) -> FitCheck:
    """Check whether a *source_size* grid scaled by *scale* fits the container."""
    required_width = source_size * scale
    required_height = source_size * scale
    fits = required_width <= container_width and required_height <= container_height
    return FitCheck(fits, required_width, required_height)


def count_cells(grid: np.ndarray | Sequence[Sequence[Any]]) -> CellCount:
    """Count foreground and background cells of *grid*."""
    g = as_grid(grid)
    foreground = int(np.count_nonzero(g))
    return CellCount(foreground=foreground, background=int(g.size) - foreground)
