"""Tests for the brick_layout package."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from brick_layout.catalog import (
    ALL_TILE_SIZES,
    DEFAULT_TILE_SIZES,
    UNIT_CATALOG,
    build_catalog,
    parse_sizes,
)
from brick_layout.config import LayoutConfig
from brick_layout.engine import _savings_percent, optimize, tile, tile_units
from brick_layout.errors import (
    InvalidScale,
    InvalidTileSize,
    MalformedGrid,
    TilingCancelled,
)
from brick_layout.grid import as_grid, count_cells, expand, max_scale_factor, validate_fit
from brick_layout.image_io import (
    load_grid,
    make_comparison,
    parse_text_grid,
    render_layout,
    save_upscaled,
)
from brick_layout.models import Placement, SizeCount, TileSize

# -- Fixtures ----------------------------------------------------------

T, F = True, False


@pytest.fixture
def random_grid() -> np.ndarray:
    """Blocky non-square grid with regions of both colours."""
    rng = np.random.default_rng(7)
    return expand(rng.random((6, 9)) < 0.45, 2)


@pytest.fixture
def checker_png(tmp_path: Path) -> Path:
    """4x2 image: black/white columns alternating."""
    arr = np.full((2, 4), 255, dtype=np.uint8)
    arr[:, ::2] = 0
    p = tmp_path / "checker.png"
    Image.fromarray(arr).save(p)
    return p


def _coverage(result, shape: tuple[int, int]) -> np.ndarray:
    hits = np.zeros(shape, dtype=int)
    for p in result.placements:
        hits[p.y:p.y + p.height, p.x:p.x + p.width] += 1
    return hits


# -- Config ------------------------------------------------------------

class TestConfig:
    def test_defaults(self) -> None:
        cfg = LayoutConfig()
        assert (cfg.baseplate_width, cfg.baseplate_height) == (48, 48)
        assert cfg.scale is None
        assert cfg.foreground_sizes == DEFAULT_TILE_SIZES

    def test_frozen(self) -> None:
        cfg = LayoutConfig()
        with pytest.raises(AttributeError):
            cfg.scale = 2  # type: ignore[misc]


# -- Tile sizes --------------------------------------------------------

class TestTileSize:
    def test_unordered_equality(self) -> None:
        assert TileSize(2, 4) == TileSize(4, 2)
        assert hash(TileSize(2, 4)) == hash(TileSize(4, 2))
        assert TileSize(2, 4) != TileSize(2, 3)

    def test_orientations(self) -> None:
        assert TileSize(2, 4).orientations() == ((2, 4), (4, 2))
        assert TileSize(3, 3).orientations() == ((3, 3),)

    def test_normalized(self) -> None:
        assert TileSize(1, 4).normalized() == (4, 1)

    @pytest.mark.parametrize("bad", [(0, 2), (2, -1), (1.5, 2), ("a", 2), (True, 1)])
    def test_invalid_dimensions(self, bad) -> None:
        with pytest.raises(InvalidTileSize):
            TileSize.coerce(bad)

    def test_not_a_pair(self) -> None:
        with pytest.raises(InvalidTileSize):
            TileSize.coerce((1, 2, 3))


# -- Catalog -----------------------------------------------------------

class TestCatalog:
    def test_dedup_and_ordering(self) -> None:
        cat = build_catalog([(2, 4), (4, 2), (2, 4)])
        assert cat.as_list() == [(2, 4), (1, 1)]

    def test_sorted_by_area_then_long_side(self) -> None:
        cat = build_catalog([(1, 2), (2, 2), (3, 3), (1, 4), (2, 4)])
        assert cat.as_list() == [(3, 3), (2, 4), (1, 4), (2, 2), (1, 2), (1, 1)]

    def test_unit_appended_once(self) -> None:
        assert build_catalog([]).as_list() == [(1, 1)]
        assert build_catalog([(1, 1), (1, 2)]).as_list() == [(1, 2), (1, 1)]

    def test_idempotent(self) -> None:
        sizes = [(2, 3), (1, 4), (3, 2), (4, 1), (2, 2)]
        once = build_catalog(sizes)
        assert build_catalog(once.as_list()) == once

    def test_caller_list_untouched(self) -> None:
        sizes = [(1, 2), (2, 4)]
        build_catalog(sizes)
        assert sizes == [(1, 2), (2, 4)]

    def test_invalid_entry(self) -> None:
        with pytest.raises(InvalidTileSize):
            build_catalog([(2, 2), (0, 3)])

    def test_presets(self) -> None:
        full = build_catalog(ALL_TILE_SIZES)
        assert full[0] == TileSize(8, 16)
        assert full[-1] == TileSize(1, 1)
        assert len(full) == len(ALL_TILE_SIZES)
        assert UNIT_CATALOG.as_list() == [(1, 1)]

    def test_parse_sizes(self) -> None:
        assert parse_sizes("2x8, 1x4 3×3;2X2") == [
            TileSize(2, 8), TileSize(1, 4), TileSize(3, 3), TileSize(2, 2),
        ]
        assert parse_sizes("") == []

    @pytest.mark.parametrize("text", ["2x", "axb", "0x3", "2*4"])
    def test_parse_sizes_invalid(self, text: str) -> None:
        with pytest.raises(InvalidTileSize):
            parse_sizes(text)


# -- Grid --------------------------------------------------------------

class TestGrid:
    def test_as_grid_read_only(self) -> None:
        g = as_grid([[1, 0], [0, 1]])
        assert g.dtype == bool
        assert not g.flags.writeable

    def test_empty(self) -> None:
        assert as_grid([]).shape == (0, 0)

    def test_ragged_rows(self) -> None:
        with pytest.raises(MalformedGrid):
            as_grid([[T, F], [T]])

    def test_not_two_dimensional(self) -> None:
        with pytest.raises(MalformedGrid):
            as_grid(np.zeros((2, 2, 2), dtype=bool))

    def test_nested_cells_rejected(self) -> None:
        with pytest.raises(MalformedGrid):
            as_grid([[[0, 0], [0]]])
        with pytest.raises(MalformedGrid):
            as_grid([[T, [T, F]], [F, T]])

    def test_expand_maps_back(self) -> None:
        src = as_grid([[T, F, T], [F, F, T]])
        k = 3
        out = expand(src, k)
        assert out.shape == (6, 9)
        for y in range(out.shape[0]):
            for x in range(out.shape[1]):
                assert out[y, x] == src[y // k, x // k]

    def test_expand_identity(self) -> None:
        src = as_grid([[T, F], [F, F]])
        np.testing.assert_array_equal(expand(src, 1), src)

    @pytest.mark.parametrize("k", [0, -2, 1.5])
    def test_expand_invalid_scale(self, k) -> None:
        with pytest.raises(InvalidScale):
            expand([[T]], k)

    def test_max_scale_factor(self) -> None:
        assert max_scale_factor(21, 48, 48) == 2
        assert max_scale_factor(21, 100, 50) == 2
        assert max_scale_factor(25, 48, 48) == 1
        assert max_scale_factor(50, 48, 48) == 1

    def test_max_scale_unconfigured_container(self) -> None:
        assert max_scale_factor(21, 0, 48) == 1
        assert max_scale_factor(21, 48, 0) == 1

    def test_validate_fit(self) -> None:
        fit = validate_fit(21, 2, 48, 48)
        assert fit.fits
        assert (fit.required_width, fit.required_height) == (42, 42)
        assert not validate_fit(25, 2, 48, 48).fits

    def test_count_cells(self) -> None:
        counts = count_cells([[T, F, F], [T, T, F]])
        assert (counts.foreground, counts.background, counts.total) == (3, 3, 6)


# -- Engine ------------------------------------------------------------

class TestEngine:
    def test_all_foreground_two_by_two(self) -> None:
        grid = [[T] * 4 for _ in range(4)]
        result = tile(grid, build_catalog([(2, 2)]), build_catalog([(2, 2)]))
        assert result.placements == (
            Placement(0, 0, 2, 2, True),
            Placement(2, 0, 2, 2, True),
            Placement(0, 2, 2, 2, True),
            Placement(2, 2, 2, 2, True),
        )
        assert result.foreground == (SizeCount(2, 2, 4),)
        assert result.background == ()
        assert result.foreground_total == 4
        assert result.background_total == 0
        assert result.savings_percent == 75

    def test_checkerboard(self) -> None:
        result = tile([[T, F], [F, T]], build_catalog(ALL_TILE_SIZES),
                      build_catalog(ALL_TILE_SIZES))
        assert len(result.placements) == 4
        assert all(p.width == p.height == 1 for p in result.placements)
        assert result.savings_percent == 0

    def test_empty_grid(self) -> None:
        result = tile([], build_catalog([(2, 2)]), build_catalog([]))
        assert result.placements == ()
        assert result.cell_count == 0
        assert result.savings_percent == 0

    def test_size_tried_as_given_first(self) -> None:
        grid = [[T] * 3 for _ in range(3)]
        upright = tile(grid, build_catalog([(1, 3)]), UNIT_CATALOG)
        assert [(p.x, p.y, p.width, p.height) for p in upright.placements] == [
            (0, 0, 1, 3), (1, 0, 1, 3), (2, 0, 1, 3),
        ]
        flat = tile(grid, build_catalog([(3, 1)]), UNIT_CATALOG)
        assert [(p.x, p.y, p.width, p.height) for p in flat.placements] == [
            (0, 0, 3, 1), (0, 1, 3, 1), (0, 2, 3, 1),
        ]

    def test_transpose_used_when_needed(self) -> None:
        result = tile([[T, T, T]], build_catalog([(1, 3)]), UNIT_CATALOG)
        assert result.placements == (Placement(0, 0, 3, 1, True),)
        assert result.foreground == (SizeCount(3, 1, 1),)

    def test_separate_catalogs_per_colour(self) -> None:
        grid = [[T, T, F], [T, T, F]]
        result = tile(grid, build_catalog([(2, 2)]), build_catalog([(1, 2)]))
        assert result.placements == (
            Placement(0, 0, 2, 2, True),
            Placement(2, 0, 1, 2, False),
        )
        assert result.background == (SizeCount(2, 1, 1),)
        assert result.savings_percent == 67

    def test_counts_grouped_by_normalized_size(self) -> None:
        # One horizontal and one vertical 1x2, plus leftovers
        grid = [
            [T, T, F],
            [F, F, T],
            [F, F, T],
        ]
        result = tile(grid, build_catalog([(1, 2)]), build_catalog([(2, 2)]))
        assert result.foreground == (SizeCount(2, 1, 2),)
        assert result.background == (SizeCount(2, 2, 1), SizeCount(1, 1, 1))

    def test_total_coverage_no_overlap(self, random_grid: np.ndarray) -> None:
        result = tile(random_grid, build_catalog(ALL_TILE_SIZES),
                      build_catalog(DEFAULT_TILE_SIZES))
        hits = _coverage(result, random_grid.shape)
        assert (hits == 1).all()

    def test_colour_fidelity(self, random_grid: np.ndarray) -> None:
        result = tile(random_grid, build_catalog(ALL_TILE_SIZES),
                      build_catalog(ALL_TILE_SIZES))
        for p in result.placements:
            region = random_grid[p.y:p.y + p.height, p.x:p.x + p.width]
            assert (region == p.is_foreground).all()

    def test_totals_consistent(self, random_grid: np.ndarray) -> None:
        result = optimize(random_grid, DEFAULT_TILE_SIZES, DEFAULT_TILE_SIZES)
        assert result.total == len(result.placements)
        assert result.total <= result.cell_count
        assert 0 <= result.savings_percent <= 100
        fg = sum(1 for p in result.placements if p.is_foreground)
        assert result.foreground_total == fg

    def test_counts_sorted(self, random_grid: np.ndarray) -> None:
        result = optimize(random_grid, ALL_TILE_SIZES, ALL_TILE_SIZES)
        for rows in (result.foreground, result.background):
            keys = [(r.area, r.width) for r in rows]
            assert keys == sorted(keys, reverse=True)
            assert all(r.width >= r.height for r in rows)

    def test_deterministic(self, random_grid: np.ndarray) -> None:
        a = optimize(random_grid, [(2, 4), (1, 3)], [(2, 2)])
        b = optimize(random_grid, [(2, 4), (1, 3)], [(2, 2)])
        assert a == b

    def test_raw_orientation_drives_placement(self) -> None:
        grid = [[T] * 4 for _ in range(4)]
        a = optimize(grid, [(1, 4)])
        b = optimize(grid, [(4, 1)])
        assert build_catalog([(1, 4)]) == build_catalog([(4, 1)])
        assert a.placements[0] == Placement(0, 0, 1, 4, True)
        assert b.placements[0] == Placement(0, 0, 4, 1, True)
        assert a.foreground == b.foreground == (SizeCount(4, 1, 4),)

    def test_unit_layout(self, random_grid: np.ndarray) -> None:
        result = tile_units(random_grid)
        assert result.total == random_grid.size
        assert result.savings_percent == 0

    def test_raw_size_lists_accepted(self) -> None:
        grid = [[T] * 4 for _ in range(4)]
        assert tile(grid, [(2, 2)], []) == optimize(grid, [(2, 2)])

    def test_input_not_mutated(self, random_grid: np.ndarray) -> None:
        grid = random_grid.copy()
        tile(grid, build_catalog(ALL_TILE_SIZES), build_catalog(ALL_TILE_SIZES))
        np.testing.assert_array_equal(grid, random_grid)

    def test_malformed_grid(self) -> None:
        with pytest.raises(MalformedGrid):
            tile([[T, T], [T]], UNIT_CATALOG, UNIT_CATALOG)

    def test_cancellation(self) -> None:
        calls = []

        def should_cancel() -> bool:
            calls.append(1)
            return len(calls) > 2

        with pytest.raises(TilingCancelled):
            tile([[T] * 4 for _ in range(4)], UNIT_CATALOG, UNIT_CATALOG,
                 should_cancel=should_cancel)
        assert len(calls) == 3

    def test_savings_rounding(self) -> None:
        assert _savings_percent(3, 2) == 33
        assert _savings_percent(8, 7) == 13
        assert _savings_percent(200, 199) == 1
        assert _savings_percent(0, 0) == 0

    def test_to_dict_is_json_ready(self) -> None:
        result = optimize([[T, T], [T, T]], [(2, 2)])
        data = json.loads(json.dumps(result.to_dict()))
        assert data["total"] == 1
        assert data["savings_percent"] == 75
        assert data["foreground"] == [{"width": 2, "height": 2, "count": 1}]
        assert data["placements"][0] == {
            "x": 0, "y": 0, "width": 2, "height": 2, "is_foreground": True,
        }


# -- Image I/O ---------------------------------------------------------

class TestImageIO:
    def test_load_dark_is_foreground(self, checker_png: Path) -> None:
        g = load_grid(checker_png)
        np.testing.assert_array_equal(g, [[T, F, T, F], [T, F, T, F]])

    def test_load_inverted(self, checker_png: Path) -> None:
        g = load_grid(checker_png, invert=True)
        np.testing.assert_array_equal(g, [[F, T, F, T], [F, T, F, T]])

    def test_load_max_side(self, tmp_path: Path) -> None:
        arr = np.zeros((20, 40), dtype=np.uint8)
        p = tmp_path / "wide.png"
        Image.fromarray(arr).save(p)
        g = load_grid(p, max_side=8)
        assert g.shape == (4, 8)
        assert g.all()

    def test_text_grid(self, tmp_path: Path) -> None:
        p = tmp_path / "grid.txt"
        p.write_text("\n##.\n.#.\n\n", encoding="utf-8")
        np.testing.assert_array_equal(load_grid(p), [[T, T, F], [F, T, F]])

    def test_text_grid_bad_char(self) -> None:
        with pytest.raises(MalformedGrid):
            parse_text_grid("#?\n..")

    def test_text_grid_ragged(self) -> None:
        with pytest.raises(MalformedGrid):
            parse_text_grid("##\n#")

    def test_text_grid_not_utf8(self, tmp_path: Path) -> None:
        p = tmp_path / "bad.txt"
        p.write_bytes(b"\xff\xfe#\n")
        with pytest.raises(MalformedGrid):
            load_grid(p)

    def test_render_layout(self) -> None:
        result = optimize([[T] * 4 for _ in range(4)], [(2, 2)])
        img = render_layout(
            result, cell_px=4,
            foreground_color=(0, 0, 0),
            background_color=(255, 255, 255),
            outline_color=(255, 0, 0),
        )
        assert img.size == (16, 16)
        assert img.getpixel((3, 3)) == (0, 0, 0)
        assert img.getpixel((0, 0)) == (255, 0, 0)
        assert img.getpixel((7, 3)) == (255, 0, 0)

    def test_save_upscaled_grid(self, tmp_path: Path) -> None:
        out = tmp_path / "grid.png"
        save_upscaled(as_grid([[T, F, T], [F, T, F]]), out, pixel_upscale=4)
        assert Image.open(out).size == (12, 8)

    def test_save_upscaled_grid_colours(self, tmp_path: Path) -> None:
        out = tmp_path / "grid.png"
        save_upscaled(
            as_grid([[T, F]]), out, pixel_upscale=2,
            foreground_color=(255, 0, 0), background_color=(0, 0, 255),
        )
        img = Image.open(out).convert("RGB")
        assert img.getpixel((0, 0)) == (255, 0, 0)
        assert img.getpixel((3, 1)) == (0, 0, 255)

    def test_comparison(self, tmp_path: Path) -> None:
        grid = as_grid([[T, T], [F, F]])
        out = tmp_path / "cmp.png"
        make_comparison(grid, optimize(grid, [(1, 2)], [(1, 2)]), out, cell_px=10)
        assert out.exists()
        assert Image.open(out).size == (2 * 20 + 8, 20 + 36)
