"""Value types shared by the catalog, the engine and the renderers."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import Any

from brick_layout.errors import InvalidTileSize


def _check_dimension(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        msg = f"Tile {name} must be an integer, got {value!r}"
        raise InvalidTileSize(msg)
    if value < 1:
        msg = f"Tile {name} must be >= 1, got {value}"
        raise InvalidTileSize(msg)
    return int(value)


@dataclass(frozen=True, eq=False)
class TileSize:
    """Footprint of a tile before an orientation is chosen.

    Two sizes compare equal when they hold the same pair of dimensions
    in any order, so ``TileSize(2, 4) == TileSize(4, 2)``.  The raw
    ``width`` / ``height`` are kept as supplied because the engine tries
    ``(width, height)`` before the transpose.
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", _check_dimension("width", self.width))
        object.__setattr__(self, "height", _check_dimension("height", self.height))

    @classmethod
    def coerce(cls, value: TileSize | tuple[int, int] | Any) -> TileSize:
        """Accept a ``TileSize`` or any ``(width, height)`` pair."""
        if isinstance(value, TileSize):
            return value
        try:
            width, height = value
        except (TypeError, ValueError):
            msg = f"Expected a (width, height) pair, got {value!r}"
            raise InvalidTileSize(msg) from None
        return cls(width, height)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def long_side(self) -> int:
        return max(self.width, self.height)

    @property
    def short_side(self) -> int:
        return min(self.width, self.height)

    @property
    def is_square(self) -> bool:
        return self.width == self.height

    def normalized(self) -> tuple[int, int]:
        """``(long_side, short_side)`` - the key used for counting."""
        return self.long_side, self.short_side

    def orientations(self) -> tuple[tuple[int, int], ...]:
        """Oriented ``(w, h)`` trials, as-supplied first, transpose second."""
        if self.is_square:
            return ((self.width, self.height),)
        return (self.width, self.height), (self.height, self.width)

    def as_tuple(self) -> tuple[int, int]:
        return self.width, self.height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileSize):
            return NotImplemented
        return self.normalized() == other.normalized()

    def __hash__(self) -> int:
        return hash(self.normalized())

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Placement:
    """One committed tile: top-left cell plus the oriented size used."""

    x: int
    y: int
    width: int
    height: int
    is_foreground: bool


@dataclass(frozen=True)
class SizeCount:
    """Bill-of-materials row; ``width >= height`` (normalized size)."""

    width: int
    height: int
    count: int

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class TilingResult:
    """Everything the engine produces for one grid.

    Attributes:
        placements:       Tiles in the order they were committed.
        foreground:       Foreground counts per normalized size, largest first.
        background:       Background counts per normalized size, largest first.
        foreground_total: Number of foreground tiles.
        background_total: Number of background tiles.
        cell_count:       Cells in the grid (the all-1x1 baseline).
        savings_percent:  Tile reduction versus the baseline, rounded.
        width:            Grid width in cells.
        height:           Grid height in cells.
    """

    placements: tuple[Placement, ...]
    foreground: tuple[SizeCount, ...]
    background: tuple[SizeCount, ...]
    foreground_total: int
    background_total: int
    cell_count: int
    savings_percent: int
    width: int
    height: int

    @property
    def total(self) -> int:
        return self.foreground_total + self.background_total

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""

        def _counts(rows: tuple[SizeCount, ...]) -> list[dict[str, int]]:
            return [
                {"width": r.width, "height": r.height, "count": r.count}
                for r in rows
            ]

        return {
            "width": self.width,
            "height": self.height,
            "cell_count": self.cell_count,
            "foreground": _counts(self.foreground),
            "background": _counts(self.background),
            "foreground_total": self.foreground_total,
            "background_total": self.background_total,
            "total": self.total,
            "savings_percent": self.savings_percent,
            "placements": [
                {
                    "x": p.x,
                    "y": p.y,
                    "width": p.width,
                    "height": p.height,
                    "is_foreground": p.is_foreground,
                }
                for p in self.placements
            ],
        }
