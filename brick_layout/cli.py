"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from brick_layout.catalog import ALL_TILE_SIZES, DEFAULT_TILE_SIZES, build_catalog, parse_sizes
from brick_layout.config import LayoutConfig
from brick_layout.engine import tile
from brick_layout.errors import BrickLayoutError
from brick_layout.grid import expand, max_scale_factor, validate_fit
from brick_layout.image_io import load_grid, make_comparison, save_layout, save_upscaled
from brick_layout.models import SizeCount, TilingResult

app = typer.Typer(
    name="brick-layout",
    help="Cover two-colour grids (QR codes, bitmaps) with as few bricks as possible.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()

logger = logging.getLogger("brick_layout")

# Defaults come from LayoutConfig - single source of truth
_DEFAULTS = LayoutConfig()
_DEFAULT_SIZES_TEXT = ",".join(str(s) for s in DEFAULT_TILE_SIZES)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_sources(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _choose_scale(grid: np.ndarray, cfg: LayoutConfig) -> int:
    h, w = grid.shape
    source_size = max(w, h, 1)
    if cfg.scale is not None:
        scale = cfg.scale
    else:
        scale = max_scale_factor(source_size, cfg.baseplate_width, cfg.baseplate_height)
    if cfg.baseplate_width and cfg.baseplate_height:
        fit = validate_fit(source_size, scale, cfg.baseplate_width, cfg.baseplate_height)
        if not fit.fits:
            logger.warning(
                "%dx%d cells needed, baseplate is only %dx%d",
                fit.required_width, fit.required_height,
                cfg.baseplate_width, cfg.baseplate_height,
            )
    return scale


def _counts_table(title: str, rows: tuple[SizeCount, ...], total: int) -> Table:
    table = Table(title=title, title_justify="left", show_footer=True)
    table.add_column("Size", footer="Total")
    table.add_column("Count", justify="right", footer=str(total))
    for r in rows:
        table.add_row(f"{r.width}x{r.height}", str(r.count))
    return table


def _print_result(result: TilingResult) -> None:
    console.print(_counts_table("Foreground", result.foreground, result.foreground_total))
    console.print(_counts_table("Background", result.background, result.background_total))
    console.print(
        f"  [green]✓[/green] {result.total} tiles instead of {result.cell_count}  "
        f"[dim]savings={result.savings_percent}%[/dim]"
    )


def _run(source: Path, cfg: LayoutConfig) -> TilingResult:
    """Load, scale, tile and save results for one grid source."""
    grid = load_grid(source, threshold=cfg.threshold, invert=cfg.invert, max_side=cfg.max_side)
    h, w = grid.shape
    logger.info("Source: %dx%d cells from %s", w, h, source.name)

    scale = _choose_scale(grid, cfg)
    layout_grid = expand(grid, scale)
    logger.info("Scale %d -> %dx%d cells", scale, w * scale, h * scale)

    result = tile(
        layout_grid,
        build_catalog(cfg.foreground_sizes),
        build_catalog(cfg.background_sizes),
    )

    stem = source.stem
    colors = {
        "foreground_color": cfg.foreground_color,
        "background_color": cfg.background_color,
        "outline_color": cfg.outline_color,
    }
    if cfg.save_grid:
        out = cfg.output_dir / f"{stem}_grid.{cfg.output_format}"
        save_upscaled(
            layout_grid, out, cfg.cell_px,
            foreground_color=cfg.foreground_color,
            background_color=cfg.background_color,
        )
        logger.info("Grid preview saved: %s", out)
    if cfg.save_render:
        out = cfg.output_dir / f"{stem}_layout.{cfg.output_format}"
        save_layout(result, out, cfg.cell_px, **colors)
        logger.info("Layout saved: %s", out)
    if cfg.save_comparison:
        out = cfg.output_dir / f"{stem}_comparison.{cfg.output_format}"
        make_comparison(layout_grid, result, out, cfg.cell_px, **colors)
    if cfg.save_json:
        out = cfg.output_dir / f"{stem}_layout.json"
        out.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        logger.info("JSON saved: %s", out)
    return result


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with grid images / .txt drawings",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    baseplate: tuple[int, int] = typer.Option(
        (_DEFAULTS.baseplate_width, _DEFAULTS.baseplate_height), "--baseplate", "-b",
        help="Baseplate WIDTH HEIGHT in cells (0 0 = unconstrained)",
    ),
    scale: int | None = typer.Option(
        _DEFAULTS.scale, "--scale", "-s", help="Cells per source cell (default: largest that fits)",
    ),
    fg_sizes: str = typer.Option(
        _DEFAULT_SIZES_TEXT, "--fg-sizes", help="Foreground tile sizes, e.g. '2x4,1x2'",
    ),
    bg_sizes: str = typer.Option(
        _DEFAULT_SIZES_TEXT, "--bg-sizes", help="Background tile sizes",
    ),
    threshold: int = typer.Option(
        _DEFAULTS.threshold, "--threshold", "-t", help="Grey level below which a pixel is foreground",
    ),
    invert: bool = typer.Option(
        _DEFAULTS.invert, "--invert/--no-invert", help="Light pixels are foreground",
    ),
    max_side: int | None = typer.Option(
        _DEFAULTS.max_side, "--max-side", "-m", min=1, help="Downsample images to this longest side",
    ),
    cell_px: int = typer.Option(
        _DEFAULTS.cell_px, "--cell-px", "-u", min=1, help="Pixels per cell in rendered output",
    ),
    grid_preview: bool = typer.Option(
        _DEFAULTS.save_grid, "--grid/--no-grid", help="Save the scaled grid as an image",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison", help="Save grid | layout image",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Lay out every grid source in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)

    try:
        cfg = LayoutConfig(
            baseplate_width=baseplate[0],
            baseplate_height=baseplate[1],
            scale=scale,
            foreground_sizes=tuple(parse_sizes(fg_sizes)),
            background_sizes=tuple(parse_sizes(bg_sizes)),
            threshold=threshold,
            invert=invert,
            max_side=max_side,
            cell_px=cell_px,
            save_grid=grid_preview,
            save_comparison=comparison,
            input_dir=input_dir,
            output_dir=output_dir,
        )
    except BrickLayoutError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    input_dir.mkdir(exist_ok=True)
    output_dir.mkdir(exist_ok=True)

    sources = _collect_sources(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not sources:
        console.print(f"\n[yellow]No grid sources found in {input_dir}/[/yellow]")
        console.print("Place .png / .txt / ... files there and re-run.\n")
        raise typer.Exit(0)

    console.print(Panel.fit(
        f"[bold]BRICK LAYOUT[/bold]\n"
        f"Baseplate: {cfg.baseplate_width}x{cfg.baseplate_height}  |  "
        f"Scale: {cfg.scale or 'auto'}\n"
        f"Foreground sizes: {len(cfg.foreground_sizes)}  |  "
        f"Background sizes: {len(cfg.background_sizes)}\n"
        f"Sources: {len(sources)}",
        border_style="cyan",
    ))

    failed = 0
    for idx, src in enumerate(sources, 1):
        console.rule(f"[bold cyan][{idx}/{len(sources)}] {src.name}[/bold cyan]")
        t0 = time.perf_counter()
        try:
            result = _run(src, cfg)
        except (BrickLayoutError, OSError) as exc:
            failed += 1
            console.print(f"  [red]✗[/red] {src.name}: {exc}")
            continue
        _print_result(result)
        console.print(f"  [dim]time={time.perf_counter() - t0:.2f}s[/dim]")

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]"
        + (f"  [red]({failed} failed)[/red]" if failed else ""),
        border_style="green",
    ))
    if failed:
        raise typer.Exit(1)


# -- single-source command ---------------------------------------------

@app.command()
def single(
    source: Path = typer.Argument(..., help="Grid image or .txt drawing"),
    output_dir: Path = typer.Option(_DEFAULTS.output_dir, "--output", "-o"),
    baseplate: tuple[int, int] = typer.Option(
        (_DEFAULTS.baseplate_width, _DEFAULTS.baseplate_height), "--baseplate", "-b",
    ),
    scale: int | None = typer.Option(_DEFAULTS.scale, "--scale", "-s"),
    fg_sizes: str = typer.Option(_DEFAULT_SIZES_TEXT, "--fg-sizes"),
    bg_sizes: str = typer.Option(_DEFAULT_SIZES_TEXT, "--bg-sizes"),
    threshold: int = typer.Option(_DEFAULTS.threshold, "--threshold", "-t"),
    invert: bool = typer.Option(_DEFAULTS.invert, "--invert/--no-invert"),
    max_side: int | None = typer.Option(_DEFAULTS.max_side, "--max-side", "-m", min=1),
    cell_px: int = typer.Option(_DEFAULTS.cell_px, "--cell-px", "-u", min=1),
    render: bool = typer.Option(_DEFAULTS.save_render, "--render/--no-render"),
    save_json: bool = typer.Option(_DEFAULTS.save_json, "--json/--no-json"),
    grid_preview: bool = typer.Option(_DEFAULTS.save_grid, "--grid/--no-grid"),
    comparison: bool = typer.Option(_DEFAULTS.save_comparison, "--comparison/--no-comparison"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Lay out a single grid source."""
    _setup_logging(verbose)

    try:
        cfg = LayoutConfig(
            baseplate_width=baseplate[0],
            baseplate_height=baseplate[1],
            scale=scale,
            foreground_sizes=tuple(parse_sizes(fg_sizes)),
            background_sizes=tuple(parse_sizes(bg_sizes)),
            threshold=threshold,
            invert=invert,
            max_side=max_side,
            cell_px=cell_px,
            save_grid=grid_preview,
            save_render=render,
            save_json=save_json,
            save_comparison=comparison,
            output_dir=output_dir,
        )
        if render or save_json or comparison or grid_preview:
            output_dir.mkdir(parents=True, exist_ok=True)
        result = _run(source, cfg)
    except (BrickLayoutError, OSError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    _print_result(result)


# -- sizes command -----------------------------------------------------

@app.command()
def sizes() -> None:
    """List the standard tile sizes (defaults marked)."""
    defaults = set(DEFAULT_TILE_SIZES)
    table = Table(title="Standard tile sizes", title_justify="left")
    table.add_column("Size")
    table.add_column("Area", justify="right")
    table.add_column("Default", justify="center")
    for s in ALL_TILE_SIZES:
        table.add_row(str(s), str(s.area), "✓" if s in defaults else "")
    console.print(table)


if __name__ == "__main__":
    app()
