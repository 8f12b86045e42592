from __future__ import annotations

import numpy as np
import pytest
from PIL import ImageColor

from beadchart import settings
from beadchart.core.errors import ConfigurationError, SurfaceAllocationError
from beadchart.export.drawing import contrast_text_color, new_surface
from beadchart.export.rasterizer import (
    BLOCK_LINE_COLOR,
    RenderOptions,
    _is_labelled,
    render_cells,
    render_pattern,
    surface_size,
)
from tests.utils import BLACK, BLUE, RED, WHITE, make_pattern, uniform_pattern

BLOCK_RGB = ImageColor.getrgb(BLOCK_LINE_COLOR)

PLAIN = RenderOptions(cell_size=20, margin=10, shape_mode="square", show_id_labels=False)


def test_surface_size_defaults():
    pattern = uniform_pattern(2, 2)
    assert render_pattern(pattern).size == (180, 180)
    titled = render_pattern(pattern, RenderOptions(title="Heart"))
    assert titled.size == (180, 260)


def test_surface_size_matches_render():
    options = RenderOptions(cell_size=16, margin=24, title="t", title_height=30)
    pattern = make_pattern(7, 3)
    assert render_pattern(pattern, options).size == surface_size(7, 3, options) == (136, 102)


def test_cells_are_filled_with_bead_colour():
    pattern = make_pattern(2, 2, [RED, BLUE])
    image = render_pattern(pattern, PLAIN)
    assert image.getpixel((20, 20)) == RED.rgb
    assert image.getpixel((40, 20)) == BLUE.rgb
    assert image.getpixel((20, 40)) == BLUE.rgb


def test_hidden_colours_leave_cells_blank():
    pattern = make_pattern(2, 2, [RED, BLUE])
    image = render_pattern(pattern, PLAIN.model_copy(update={"hidden_ids": frozenset({RED.id})}))
    assert image.getpixel((20, 20)) == (255, 255, 255)
    assert image.getpixel((40, 20)) == BLUE.rgb


def test_circle_mode_leaves_cell_corners_blank():
    image = render_pattern(uniform_pattern(1, 1, RED), PLAIN.model_copy(update={"shape_mode": "circle"}))
    assert image.getpixel((20, 20)) == RED.rgb
    assert image.getpixel((12, 12)) == (255, 255, 255)


def test_render_is_deterministic():
    pattern = make_pattern(12, 7)
    options = RenderOptions(cell_size=20, margin=30, title="Same")
    assert render_pattern(pattern, options).tobytes() == render_pattern(pattern, options).tobytes()


def test_contrast_text_colour():
    assert contrast_text_color(WHITE) == "#000000"
    assert contrast_text_color(BLACK) == "#FFFFFF"
    assert contrast_text_color(RED) == "#FFFFFF"


def _has_block_line(image, x, y):
    return any(image.getpixel((px, y)) == BLOCK_RGB for px in (x - 1, x, x + 1))


def test_block_lines_follow_absolute_coordinates():
    region = uniform_pattern(12, 3, RED).grid
    y = 10 + 20 + 10

    at_origin = render_cells(region, (0, 0), PLAIN)
    assert _has_block_line(at_origin, 10 + 10 * 20, y)
    assert not _has_block_line(at_origin, 10 + 5 * 20, y)

    # same cells cut from further right: absolute column 10 is the sixth boundary
    shifted = render_cells(region, (5, 0), PLAIN)
    assert _has_block_line(shifted, 10 + 5 * 20, y)
    assert not _has_block_line(shifted, 10 + 10 * 20, y)


def test_region_edges_always_get_block_lines():
    image = render_cells(uniform_pattern(3, 3, RED).grid, (21, 21), PLAIN)
    assert _has_block_line(image, 10, 40)
    assert _has_block_line(image, 10 + 3 * 20 - 1, 40)


def test_ruler_labels():
    assert _is_labelled(1, 0, 29)
    assert _is_labelled(5, 4, 29)
    assert _is_labelled(30, 0, 10)
    assert not _is_labelled(7, 6, 29)
    assert _is_labelled(29, 28, 29)
    assert _is_labelled(23, 2, 3)


def test_empty_or_ragged_region_rejected():
    with pytest.raises(ConfigurationError):
        render_cells([])
    with pytest.raises(ConfigurationError):
        render_cells([[RED, RED], [RED]])


def test_invalid_options_rejected():
    with pytest.raises(ConfigurationError):
        render_pattern(uniform_pattern(1, 1), RenderOptions(cell_size=0))
    with pytest.raises(ConfigurationError):
        render_pattern(uniform_pattern(1, 1), RenderOptions(margin=-1))
    with pytest.raises(ConfigurationError):
        render_cells(uniform_pattern(1, 1).grid, (-1, 0))


def test_oversized_surface_fails_cleanly(monkeypatch):
    monkeypatch.setattr(settings, "MAX_SURFACE_PIXELS", 10_000)
    with pytest.raises(SurfaceAllocationError):
        render_pattern(uniform_pattern(4, 4))
    with pytest.raises(SurfaceAllocationError):
        new_surface(0, 10)


def test_block_lines_without_region_edges():
    options = RenderOptions(cell_size=48, margin=20, shape_mode="square", show_id_labels=False, block_line_edges=False)
    region = uniform_pattern(3, 4, RED).grid
    y = 20 + 48 + 24

    # the outer border sits inside the grid, so a leading block line shows up in the margin
    assert render_cells(region, (0, 0), options).getpixel((19, y)) == (255, 255, 255)
    assert render_cells(region, (20, 0), options).getpixel((19, y)) == BLOCK_RGB
    with_edges = options.model_copy(update={"block_line_edges": True})
    assert render_cells(region, (0, 0), with_edges).getpixel((19, y)) == BLOCK_RGB

    wide = render_cells(uniform_pattern(12, 4, RED).grid, (0, 0), options)
    assert _has_block_line(wide, 20 + 10 * 48, y)


def _cell_pixels(image, x0, y0, size):
    return np.asarray(image.crop((x0 + 5, y0 + 5, x0 + size - 5, y0 + size - 5))).reshape(-1, 3)


def test_id_labels_contrast_with_bead():
    options = RenderOptions(cell_size=50, margin=10, shape_mode="square", show_id_labels=True)
    image = render_pattern(make_pattern(2, 1, [BLACK, WHITE]), options)

    dark = _cell_pixels(image, 10, 10, 50)
    assert (dark.min(axis=1) >= 200).any()

    light = _cell_pixels(image, 60, 10, 50)
    assert (light.max(axis=1) <= 60).any()

    plain = render_pattern(make_pattern(2, 1, [BLACK, WHITE]), options.model_copy(update={"show_id_labels": False}))
    assert not (_cell_pixels(plain, 10, 10, 50).min(axis=1) >= 200).any()


def _ruler_has_text(image, index, cell_size=40, margin=40):
    x0 = margin + index * cell_size
    box = np.asarray(image.crop((x0 + 4, 2, x0 + cell_size - 4, margin - 6)))
    return box.min() < 200


def test_column_rulers_use_absolute_numbers():
    options = RenderOptions(cell_size=40, margin=40, shape_mode="square", show_id_labels=False)
    region = uniform_pattern(7, 2, RED).grid

    # columns 4..10: labels on 5 and 10
    near_start = render_cells(region, (3, 0), options)
    assert _ruler_has_text(near_start, 1)
    assert not _ruler_has_text(near_start, 4)
    assert _ruler_has_text(near_start, 6)

    # columns 21..27: labels on 25 and the last column
    further = render_cells(region, (20, 0), options)
    assert not _ruler_has_text(further, 1)
    assert _ruler_has_text(further, 4)
    assert _ruler_has_text(further, 6)
