"""Grid loading from images or text, and rendering of tile layouts."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from brick_layout.errors import MalformedGrid
from brick_layout.grid import as_grid
from brick_layout.models import TilingResult

_FOREGROUND_CHARS = frozenset("#1Xx*@")
_BACKGROUND_CHARS = frozenset(".0- _")

RGB = tuple[int, int, int]


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int,
) -> tuple[int, int]:
    """Compute downscaled (w, h) preserving aspect ratio.

    The longest side becomes *max_side*; the other is scaled
    proportionally (rounded to the nearest integer, minimum 1).
    """
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


def parse_text_grid(text: str) -> np.ndarray:
    """Parse a text drawing into a grid.

    ``#``, ``1``, ``X`` (and ``*``, ``@``) are foreground; ``.``, ``0``,
    ``-``, ``_`` and spaces are background.  Blank leading/trailing lines
    are ignored.  Lines shorter than the longest one are an error rather
    than being padded.
    """
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    rows = []
    for y, line in enumerate(lines):
        row = []
        for x, ch in enumerate(line):
            if ch in _FOREGROUND_CHARS:
                row.append(True)
            elif ch in _BACKGROUND_CHARS:
                row.append(False)
            else:
                msg = f"Unexpected character {ch!r} at line {y + 1}, column {x + 1}"
                raise MalformedGrid(msg)
        rows.append(row)
    return as_grid(rows)


def load_grid(
    path: str | Path,
    threshold: int = 128,
    invert: bool = False,
    max_side: int | None = None,
) -> np.ndarray:
    """Load a grid from an image or a ``.txt`` drawing.

    Image pixels darker than *threshold* (0-255 grey) are foreground,
    or lighter ones when *invert* is set.  With *max_side* the image is
    first reduced, nearest-neighbour, so its longest side is *max_side*.

    Returns:
        (H, W) read-only bool array.

    Raises:
        MalformedGrid: a text grid is not valid UTF-8 or has unknown cells.
    """
    path = Path(path)
    if path.suffix.lower() == ".txt":
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            msg = f"{path.name} is not a UTF-8 text grid: {exc.reason} at byte {exc.start}"
            raise MalformedGrid(msg) from exc
        return parse_text_grid(text)

    img = Image.open(path).convert("L")
    if max_side is not None:
        w, h = compute_target_size(img.width, img.height, max_side)
        img = img.resize((w, h), Image.NEAREST)
    grey = np.array(img, dtype=np.uint8)
    grid = grey >= threshold if invert else grey < threshold
    return as_grid(grid)


def grid_to_image(
    grid: np.ndarray | Sequence[Sequence[Any]],
    foreground_color: RGB = (20, 20, 20),
    background_color: RGB = (242, 242, 242),
) -> np.ndarray:
    """Colour a grid: (H, W) bool -> (H, W, 3) uint8."""
    g = as_grid(grid)
    out = np.empty((*g.shape, 3), dtype=np.uint8)
    out[g] = foreground_color
    out[~g] = background_color
    return out


def save_upscaled(
    array: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 12,
    foreground_color: RGB = (20, 20, 20),
    background_color: RGB = (242, 242, 242),
) -> None:
    """Save a small array as a nearest-neighbour-upscaled image.

    Bool grids are coloured with *foreground_color* / *background_color*
    first; RGB arrays are saved as they are.
    """
    if array.dtype == bool:
        array = grid_to_image(array, foreground_color, background_color)
    img = Image.fromarray(array.astype(np.uint8))
    h, w = array.shape[:2]
    img = img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)
    img.save(path)


def render_layout(
    result: TilingResult,
    cell_px: int = 12,
    foreground_color: RGB = (20, 20, 20),
    background_color: RGB = (242, 242, 242),
    outline_color: RGB | None = (128, 128, 128),
) -> Image.Image:
    """Draw every placement as a filled, outlined rectangle."""
    canvas = Image.new(
        "RGB",
        (max(1, result.width * cell_px), max(1, result.height * cell_px)),
        background_color,
    )
    draw = ImageDraw.Draw(canvas)
    for p in result.placements:
        x0 = p.x * cell_px
        y0 = p.y * cell_px
        x1 = (p.x + p.width) * cell_px - 1
        y1 = (p.y + p.height) * cell_px - 1
        fill = foreground_color if p.is_foreground else background_color
        draw.rectangle((x0, y0, x1, y1), fill=fill, outline=outline_color)
    return canvas


def save_layout(
    result: TilingResult,
    path: str | Path,
    cell_px: int = 12,
    **colors: Any,
) -> None:
    render_layout(result, cell_px, **colors).save(path)


def make_comparison(
    grid: np.ndarray,
    result: TilingResult,
    output_path: str | Path,
    cell_px: int = 12,
    foreground_color: RGB = (20, 20, 20),
    background_color: RGB = (242, 242, 242),
    outline_color: RGB | None = (128, 128, 128),
) -> None:
    """Create a 2-panel comparison: Grid | Layout."""
    g = as_grid(grid)
    gh, gw = g.shape
    panel_w = max(1, gw * cell_px)
    panel_h = max(1, gh * cell_px)
    label_height = 36

    grid_img = Image.fromarray(
        grid_to_image(g, foreground_color, background_color)
    ).resize((panel_w, panel_h), Image.NEAREST)
    layout_img = render_layout(
        result, cell_px, foreground_color, background_color, outline_color,
    )

    panels = [grid_img, layout_img]
    labels = [
        f"Grid {gw}x{gh}",
        f"{result.total} tiles (-{result.savings_percent}%)",
    ]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=False)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    canvas.save(output_path)
