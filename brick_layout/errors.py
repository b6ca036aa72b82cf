"""Exception types raised on bad caller input."""

from __future__ import annotations


class BrickLayoutError(Exception):
    """Base class for every error raised by brick_layout."""


class InvalidScale(BrickLayoutError, ValueError):
    """A scale factor below 1 (or not an integer) was requested."""


class MalformedGrid(BrickLayoutError, ValueError):
    """The grid is not a rectangular 2-D boolean matrix."""


class InvalidTileSize(BrickLayoutError, ValueError):
    """A tile size has a non-positive or non-integer dimension."""


class TilingCancelled(BrickLayoutError, RuntimeError):
    """The caller's cancellation check asked the engine to stop."""
