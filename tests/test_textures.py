"""Tests for the procedural texture charts."""

import numpy as np
import pytest

from testgen3d.textures import (
    BORDER,
    DARK,
    LIGHT,
    hsv_to_rgb,
    make_checker,
    make_colored,
    make_gammaramp,
    make_gammarampf,
    make_grid,
    make_rchecker,
    make_rcolored,
)

LDR = [make_grid, make_checker, make_rchecker, make_colored, make_rcolored, make_gammaramp]


# ---------------------------------------------------------------------------
# Buffer layout
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("make", LDR)
def test_ldr_layout(make):
    pixels = make(128)
    assert pixels.shape == (128, 128, 4)
    assert pixels.dtype == np.uint8
    assert np.all(pixels[..., 3] == 255)


@pytest.mark.parametrize("make", LDR + [make_gammarampf])
def test_pure_functions(make):
    assert np.array_equal(make(64), make(64))


@pytest.mark.parametrize("make", [make_grid, make_checker, make_rchecker])
def test_bad_size_rejected(make):
    with pytest.raises(ValueError):
        make(0)


# ---------------------------------------------------------------------------
# Gray charts
# ---------------------------------------------------------------------------


class TestChecker:
    def test_cells(self):
        pixels = make_checker(512)
        assert pixels[0, 0, 0] == LIGHT
        assert pixels[63, 63, 0] == LIGHT
        assert pixels[0, 64, 0] == DARK
        assert pixels[64, 0, 0] == DARK
        assert pixels[64, 64, 0] == LIGHT

    def test_gray(self):
        pixels = make_checker(256)
        assert np.array_equal(pixels[..., 0], pixels[..., 1])
        assert np.array_equal(pixels[..., 0], pixels[..., 2])

    def test_diagonal_translation(self):
        pixels = make_checker(512)
        assert np.array_equal(pixels[:-64, :-64], pixels[64:, 64:])

    def test_period(self):
        pixels = make_checker(512)
        assert np.array_equal(pixels[:-128], pixels[128:])
        assert np.array_equal(pixels[:, :-64, 0], 218 - pixels[:, 64:, 0])


class TestGrid:
    def test_cell_borders(self):
        pixels = make_grid(256)
        assert pixels[0, 10, 0] == DARK
        assert pixels[63, 10, 0] == DARK
        assert pixels[64, 10, 0] == DARK
        assert pixels[10, 127, 0] == DARK
        assert pixels[10, 10, 0] == LIGHT
        assert pixels[32, 32, 0] == LIGHT

    def test_custom_cell(self):
        pixels = make_grid(32, cell=8)
        assert pixels[8, 3, 0] == DARK
        assert pixels[3, 3, 0] == LIGHT

    def test_cell_too_small(self):
        with pytest.raises(ValueError):
            make_grid(32, cell=1)


class TestRChecker:
    def test_border_lines(self):
        pixels = make_rchecker(256)
        assert np.all(pixels[0, :, 0] == BORDER)
        assert np.all(pixels[:, 32, 0] == BORDER)
        assert np.all(pixels[96, :, 0] == BORDER)

    def test_interior_values(self):
        pixels = make_rchecker(256)[..., 0]
        allowed = {128 + a + b + c for a in (-16, 16) for b in (-4, 4) for c in (-1, 1)}
        interior = pixels[1:32, 1:32]
        assert set(np.unique(interior).tolist()) <= allowed
        assert pixels[1, 1] == 128 - 16 - 4 - 1
        assert pixels[1, 5] == 128 - 16 - 4 + 1


# ---------------------------------------------------------------------------
# Color charts
# ---------------------------------------------------------------------------


class TestHsv:
    @pytest.mark.parametrize("v", [0, 1, 77, 128, 255])
    def test_zero_saturation_is_gray(self, v):
        rgb = hsv_to_rgb(np.arange(256), 0, v)
        assert np.all(rgb == v)

    def test_pure_red(self):
        assert hsv_to_rgb(0, 255, 255).tolist() == [255, 0, 0]

    def test_broadcasts(self):
        rgb = hsv_to_rgb(np.arange(256), 200, 180)
        assert rgb.shape == (256, 3)
        assert rgb.dtype == np.uint8
        assert np.all(rgb.max(axis=1) == 180)


class TestColored:
    @pytest.mark.parametrize("make", [make_colored, make_rcolored])
    def test_border_is_desaturated(self, make):
        pixels = make(64)
        expected = hsv_to_rgb(0, 32, BORDER)
        assert np.array_equal(pixels[0, 0, :3], expected)
        assert np.array_equal(pixels[32, 0, :3], expected)

    def test_hue_follows_column_block(self):
        pixels = make_colored(256)
        # block 32 px: hue 32 * (i // 32), saturation from the row block
        expected = hsv_to_rgb(32 * 3, 64 + 16 * 6, 128 + 16)
        assert np.array_equal(pixels[40, 100, :3], expected)

    def test_colored_and_rcolored_differ(self):
        assert not np.array_equal(make_colored(128), make_rcolored(128))

    @pytest.mark.parametrize("make", [make_colored, make_rcolored])
    def test_minimum_size(self, make):
        with pytest.raises(ValueError):
            make(4)
        assert make(8).shape == (8, 8, 4)


# ---------------------------------------------------------------------------
# Gamma ramps
# ---------------------------------------------------------------------------


class TestGammaRamp:
    def test_float_layout(self):
        pixels = make_gammarampf(96)
        assert pixels.shape == (96, 96, 4)
        assert pixels.dtype == np.float32
        assert np.all(pixels[..., 3] == 1.0)
        assert np.all((pixels[..., :3] >= 0) & (pixels[..., :3] <= 1))

    def test_regions(self):
        s = 256
        ramp = make_gammarampf(s)[..., 0]
        u = np.arange(s) / (s - 1)
        assert np.allclose(ramp[:, 10], u**2.2, atol=1e-6)
        assert np.allclose(ramp[:, s // 2], u, atol=1e-6)
        assert np.allclose(ramp[:, s - 10], u ** (1 / 2.2), atol=1e-6)

    def test_monotonic_down_rows(self):
        ramp = make_gammarampf(128)[..., 0]
        assert np.all(np.diff(ramp, axis=0) >= 0)

    def test_endpoints(self):
        ramp = make_gammarampf(64)[..., 0]
        assert np.allclose(ramp[0], 0.0)
        assert np.allclose(ramp[-1], 1.0)

    def test_ldr_truncates_float_ramp(self):
        ramp = make_gammarampf(200)[..., 0]
        ldr = make_gammaramp(200)[..., 0]
        assert np.array_equal(ldr, (ramp * 255).astype(np.uint8))

    def test_minimum_size(self):
        with pytest.raises(ValueError):
            make_gammarampf(1)
