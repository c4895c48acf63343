"""Tests for the analytic sky sampler and its scoped model states."""

import math

import numpy as np
import pytest

from testgen3d.sky import (
    HORIZON_EPSILON,
    SkyModelState,
    acquire_sky_states,
    pixel_angles,
    sample_sky,
    sun_direction,
)

SUN_ZENITH = 0.8
TURBIDITY = 8.0
ALBEDO = 0.2


@pytest.fixture
def states():
    with acquire_sky_states(TURBIDITY, ALBEDO, SUN_ZENITH) as acquired:
        yield acquired


# ---------------------------------------------------------------------------
# Direction grid
# ---------------------------------------------------------------------------


class TestPixelAngles:
    def test_restricted_stays_above_horizon(self):
        theta, phi = pixel_angles(64, 32, restrict_to_hemisphere=True)
        assert theta.shape == (32, 64)
        assert theta.max() <= math.pi / 2 - HORIZON_EPSILON + 1e-12
        assert phi.min() > 0 and phi.max() < 2 * math.pi

    def test_unrestricted_covers_lower_hemisphere(self):
        theta, _ = pixel_angles(64, 32, restrict_to_hemisphere=False)
        assert theta.max() > math.pi / 2
        assert theta[0, 0] == pytest.approx(math.pi * 0.5 / 32)

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            pixel_angles(0, 4)


def test_sun_direction_is_unit():
    sun = sun_direction(SUN_ZENITH)
    assert np.linalg.norm(sun) == pytest.approx(1.0)
    assert sun[2] == pytest.approx(math.cos(SUN_ZENITH))


# ---------------------------------------------------------------------------
# Model states
# ---------------------------------------------------------------------------


class TestModelStates:
    def test_channels(self, states):
        assert [s.channel for s in states] == ["x", "y", "Y"]

    def test_zenith_normalisation(self, states):
        for state in states:
            assert float(state.radiance(0.0, SUN_ZENITH)) == pytest.approx(state.zenith)

    def test_brighter_towards_sun(self, states):
        luminance = states[2]
        assert luminance.radiance(0.5, 0.05) > luminance.radiance(0.5, 2.0)

    def test_below_horizon_uses_albedo(self, states):
        luminance = states[2]
        gamma = 1.2
        horizon = luminance.radiance(math.pi / 2 - HORIZON_EPSILON, gamma)
        below = luminance.radiance(math.pi / 2 + 0.4, gamma)
        assert float(below) == pytest.approx(ALBEDO * float(horizon))

    def test_chromaticity_below_horizon_is_horizon(self, states):
        x = states[0]
        assert float(x.radiance(2.5, 1.0)) == pytest.approx(float(x.radiance(math.pi / 2, 1.0)))

    def test_released_on_exception(self):
        captured = []
        with pytest.raises(KeyError):
            with acquire_sky_states(TURBIDITY, ALBEDO, SUN_ZENITH) as acquired:
                captured.extend(acquired)
                raise KeyError("boom")
        assert len(captured) == 3
        assert all(state.released for state in captured)
        with pytest.raises(RuntimeError):
            captured[0].radiance(0.0, 0.5)

    def test_released_on_normal_exit(self):
        with acquire_sky_states(TURBIDITY, ALBEDO, SUN_ZENITH) as acquired:
            assert not any(state.released for state in acquired)
        assert all(state.released for state in acquired)

    def test_unknown_channel(self):
        with pytest.raises(ValueError):
            SkyModelState.create("Z", TURBIDITY, ALBEDO, SUN_ZENITH)

    @pytest.mark.parametrize(
        "turbidity, albedo, sun_zenith",
        [(0.5, 0.2, 0.8), (20.0, 0.2, 0.8), (8.0, 1.5, 0.8), (8.0, -0.1, 0.8), (8.0, 0.2, 2.0)],
    )
    def test_invalid_inputs(self, turbidity, albedo, sun_zenith):
        with pytest.raises(ValueError):
            with acquire_sky_states(turbidity, albedo, sun_zenith):
                pass


# ---------------------------------------------------------------------------
# Sampled buffers
# ---------------------------------------------------------------------------


class TestSampleSky:
    def test_layout(self):
        pixels = sample_sky(64, 32, SUN_ZENITH, TURBIDITY, ALBEDO)
        assert pixels.shape == (32, 64, 4)
        assert pixels.dtype == np.float32
        assert np.all(pixels[..., 3] == 1.0)
        assert np.all(np.isfinite(pixels))

    def test_unrestricted_is_finite(self):
        pixels = sample_sky(64, 32, SUN_ZENITH, TURBIDITY, ALBEDO, restrict_to_hemisphere=False)
        assert np.all(np.isfinite(pixels))

    def test_lower_rows_repeat_horizon_when_restricted(self):
        pixels = sample_sky(32, 64, SUN_ZENITH, TURBIDITY, ALBEDO)
        assert np.array_equal(pixels[32], pixels[63])

    def test_brightest_pixel_faces_sun(self):
        pixels = sample_sky(64, 32, SUN_ZENITH, TURBIDITY, ALBEDO)
        luminance = pixels[..., :3].mean(axis=2)
        j, i = np.unravel_index(np.argmax(luminance), luminance.shape)
        assert abs(i - 32) <= 2
        assert j < 16

    def test_scale_is_linear(self):
        one = sample_sky(32, 16, SUN_ZENITH, TURBIDITY, ALBEDO, scale=1.0)
        half = sample_sky(32, 16, SUN_ZENITH, TURBIDITY, ALBEDO, scale=0.5)
        assert np.allclose(half[..., :3], one[..., :3] * 0.5)
        assert np.array_equal(half[..., 3], one[..., 3])

    def test_negative_scale_rejected(self):
        with pytest.raises(ValueError):
            sample_sky(8, 4, SUN_ZENITH, TURBIDITY, ALBEDO, scale=-1.0)

    def test_invalid_turbidity_rejected(self):
        with pytest.raises(ValueError):
            sample_sky(8, 4, SUN_ZENITH, 0.5, ALBEDO)
