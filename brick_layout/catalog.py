"""Tile catalogs: standard size presets, parsing and normalization."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from brick_layout.errors import InvalidTileSize
from brick_layout.models import TileSize

UNIT = TileSize(1, 1)

# Standard rectangular plates and tiles, larger dimension second
ALL_TILE_SIZES: tuple[TileSize, ...] = tuple(
    TileSize(w, h)
    for w, h in [
        # Large plates
        (8, 16), (6, 12), (6, 10), (6, 8), (6, 6),
        (4, 12), (4, 10), (4, 8), (4, 6), (4, 4), (3, 3),
        # 2 wide
        (2, 16), (2, 14), (2, 12), (2, 10), (2, 8),
        (2, 6), (2, 4), (2, 3), (2, 2),
        # 1 wide
        (1, 12), (1, 10), (1, 8), (1, 6), (1, 5),
        (1, 4), (1, 3), (1, 2), (1, 1),
    ]
)

DEFAULT_TILE_SIZES: tuple[TileSize, ...] = tuple(
    TileSize(w, h)
    for w, h in [(2, 8), (2, 6), (2, 4), (2, 3), (2, 2), (1, 4), (1, 3), (1, 2)]
)

_SIZE_TOKEN_RE = re.compile(r"^(?P<w>\d+)\s*[xX×]\s*(?P<h>\d+)$")
_SEPARATORS_RE = re.compile(r"[,;\s]+")


def _sort_key(size: TileSize) -> tuple[int, int, int]:
    return (-size.area, -size.long_side, -size.width)


@dataclass(frozen=True)
class TileCatalog:
    """Ordered, deduplicated tile sizes; always ends with 1x1.

    Build with :func:`build_catalog`; the ``sizes`` tuple is already
    sorted largest area first.
    """

    sizes: tuple[TileSize, ...]

    def __iter__(self) -> Iterator[TileSize]:
        return iter(self.sizes)

    def __len__(self) -> int:
        return len(self.sizes)

    def __getitem__(self, index: int) -> TileSize:
        return self.sizes[index]

    def as_list(self) -> list[tuple[int, int]]:
        """Fresh ``[(width, height), ...]`` list in catalog order."""
        return [s.as_tuple() for s in self.sizes]


def build_catalog(user_sizes: Iterable[TileSize | tuple[int, int] | Any] = ()) -> TileCatalog:
    """Normalize *user_sizes* into a :class:`TileCatalog`.

    Every entry is validated first.  Sizes are then deduplicated by
    unordered equality (first occurrence kept), ``1x1`` is appended if
    missing, and the result is sorted by descending area, descending
    long side, then descending raw width.  The caller's sequence is not
    modified.

    Raises:
        InvalidTileSize: an entry has a non-positive or non-integer side.
    """
    coerced = [TileSize.coerce(s) for s in user_sizes]

    unique: list[TileSize] = []
    seen: set[TileSize] = set()
    for size in coerced:
        if size not in seen:
            seen.add(size)
            unique.append(size)
    if UNIT not in seen:
        unique.append(UNIT)

    return TileCatalog(tuple(sorted(unique, key=_sort_key)))


UNIT_CATALOG = build_catalog([UNIT])


def parse_sizes(text: str | None) -> list[TileSize]:
    """Parse a size list such as ``"2x8, 1x4 3×3"``.

    Raises:
        InvalidTileSize: a token is not ``<w>x<h>`` or has a zero side.
    """
    if not text:
        return []
    sizes = []
    for token in _SEPARATORS_RE.split(text.strip()):
        if not token:
            continue
        m = _SIZE_TOKEN_RE.match(token)
        if m is None:
            msg = f"Cannot parse tile size '{token}' (expected e.g. '2x4')"
            raise InvalidTileSize(msg)
        sizes.append(TileSize(int(m.group("w")), int(m.group("h"))))
    return sizes
