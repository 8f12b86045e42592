from __future__ import annotations

import pytest
from pydantic import ValidationError

from beadchart.models.pattern import BeadColor, Palette, PatternData
from tests.utils import BLUE, RED, make_pattern


def test_hex_is_normalised():
    color = BeadColor(id="X1", name="Teal", hex="00aabb")
    assert color.hex == "#00AABB"
    assert color.rgb == (0, 170, 187)


def test_invalid_hex_rejected():
    with pytest.raises(ValidationError):
        BeadColor(id="X1", name="Bad", hex="#12345")


def test_luma_uses_yiq_weights():
    assert BeadColor(id="w", hex="#FFFFFF").luma == 255
    assert BeadColor(id="g", hex="#808080").luma == 128
    assert BeadColor(id="r", hex="#FF0000").luma == pytest.approx(76.245)


def test_from_grid_derives_counts():
    pattern = make_pattern(4, 3)
    assert sum(pattern.counts.values()) == 12
    assert pattern.width == 4 and pattern.height == 3


def test_counts_must_match_grid():
    with pytest.raises(ValidationError):
        PatternData(width=1, height=1, grid=[[RED]], counts={RED.id: 2})


def test_zero_counts_for_absent_ids_are_accepted():
    pattern = PatternData(width=1, height=1, grid=[[RED]], counts={RED.id: 1, BLUE.id: 0})
    assert pattern.counts[BLUE.id] == 0


def test_negative_counts_rejected():
    with pytest.raises(ValidationError):
        PatternData(width=1, height=1, grid=[[RED]], counts={RED.id: 1, BLUE.id: -1})


def test_grid_shape_must_match_dimensions():
    with pytest.raises(ValidationError):
        PatternData(width=2, height=1, grid=[[RED]], counts={RED.id: 1})


def test_region_slices_grid():
    pattern = make_pattern(6, 5)
    region = pattern.region(2, 1, 3, 2)
    assert len(region) == 2 and len(region[0]) == 3
    assert region[0][0] == pattern.cell(2, 1)


def test_palette_rejects_duplicate_ids():
    with pytest.raises(ValidationError):
        Palette(id="p", name="Dup", colors=[RED, RED])
