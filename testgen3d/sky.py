"""Analytic daylight sky sampled into a latitude-longitude HDR buffer.

The sky is the Perez-form model of Preetham, Shirley and Smits: each of the
three CIE xyY channels follows

    F(theta, gamma) = (1 + A exp(B / cos theta)) (1 + C exp(D gamma) + E cos^2 gamma)

normalised so the zenith takes the turbidity dependent zenith value. theta is
the view zenith angle and gamma the angle to the sun. Below the horizon the
model is undefined; states return the horizon value with luminance scaled by
the ground albedo.

Per-channel states are scoped: ``acquire_sky_states`` releases all three on
every exit path, and a released state refuses to evaluate.
"""

from __future__ import annotations

import contextlib
import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, Tuple

import numpy as np

log = logging.getLogger(__name__)

HORIZON_EPSILON = 1e-3
SUN_AZIMUTH = math.pi
TURBIDITY_RANGE = (1.7, 10.0)
CHANNELS = ("x", "y", "Y")

# Distribution coefficients A..E as (slope, intercept) in turbidity.
_PEREZ = {
    "Y": ((0.1787, -1.4630), (-0.3554, 0.4275), (-0.0227, 5.3251), (0.1206, -2.5771), (-0.0670, 0.3703)),
    "x": ((-0.0193, -0.2592), (-0.0665, 0.0008), (-0.0004, 0.2125), (-0.0641, -0.8989), (-0.0033, 0.0452)),
    "y": ((-0.0167, -0.2608), (-0.0950, 0.0092), (-0.0079, 0.2102), (-0.0441, -1.6537), (-0.0109, 0.0529)),
}

# Zenith chromaticity: [T^2, T, 1] @ M @ [ts^3, ts^2, ts, 1]
_ZENITH_X = np.array(
    [
        [0.00166, -0.00375, 0.00209, 0.0],
        [-0.02903, 0.06377, -0.03202, 0.00394],
        [0.11693, -0.21196, 0.06052, 0.25886],
    ]
)
_ZENITH_Y = np.array(
    [
        [0.00275, -0.00610, 0.00317, 0.0],
        [-0.04214, 0.08970, -0.04153, 0.00516],
        [0.15346, -0.26756, 0.06670, 0.26688],
    ]
)

_XYZ_TO_RGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ]
)


def _perez(coeffs: np.ndarray, theta: np.ndarray, gamma: np.ndarray) -> np.ndarray:
    a, b, c, d, e = coeffs
    cos_theta = np.maximum(np.cos(theta), HORIZON_EPSILON)
    cos_gamma = np.cos(gamma)
    return (1.0 + a * np.exp(b / cos_theta)) * (1.0 + c * np.exp(d * gamma) + e * cos_gamma * cos_gamma)


def _zenith_value(channel: str, turbidity: float, sun_zenith: float) -> float:
    if channel == "Y":
        chi = (4.0 / 9.0 - turbidity / 120.0) * (math.pi - 2.0 * sun_zenith)
        return (4.0453 * turbidity - 4.9710) * math.tan(chi) - 0.2155 * turbidity + 2.4192
    t = np.array([turbidity * turbidity, turbidity, 1.0])
    s = np.array([sun_zenith**3, sun_zenith**2, sun_zenith, 1.0])
    matrix = _ZENITH_X if channel == "x" else _ZENITH_Y
    return float(t @ matrix @ s)


def validate_sky_inputs(turbidity: float, albedo: float, sun_zenith: float) -> None:
    lo, hi = TURBIDITY_RANGE
    if not lo <= turbidity <= hi:
        raise ValueError(f"turbidity must be in [{lo}, {hi}], got {turbidity}")
    if not 0.0 <= albedo <= 1.0:
        raise ValueError(f"albedo must be in [0, 1], got {albedo}")
    if not 0.0 <= sun_zenith <= math.pi / 2:
        raise ValueError(f"sun zenith must be in [0, pi/2], got {sun_zenith}")


@dataclass
class SkyModelState:
    """Precomputed coefficients for one channel. Read-only until released."""

    channel: str
    coeffs: np.ndarray | None = field(repr=False)
    zenith: float
    normalizer: float
    albedo: float

    @classmethod
    def create(cls, channel: str, turbidity: float, albedo: float, sun_zenith: float) -> "SkyModelState":
        if channel not in _PEREZ:
            raise ValueError(f"unknown sky channel {channel!r}")
        validate_sky_inputs(turbidity, albedo, sun_zenith)
        coeffs = np.array([slope * turbidity + intercept for slope, intercept in _PEREZ[channel]])
        zenith = _zenith_value(channel, turbidity, sun_zenith)
        normalizer = float(_perez(coeffs, np.array(0.0), np.array(sun_zenith)))
        if not math.isfinite(zenith) or normalizer == 0.0:
            raise ValueError(f"sky model is degenerate for turbidity={turbidity}, sun_zenith={sun_zenith}")
        return cls(channel=channel, coeffs=coeffs, zenith=zenith, normalizer=normalizer, albedo=albedo)

    @property
    def released(self) -> bool:
        return self.coeffs is None

    def release(self) -> None:
        self.coeffs = None

    def radiance(self, theta, gamma) -> np.ndarray:
        if self.coeffs is None:
            raise RuntimeError(f"sky model state for channel {self.channel!r} has been released")
        theta = np.asarray(theta, dtype=float)
        gamma = np.asarray(gamma, dtype=float)
        below = theta > math.pi / 2
        clamped = np.minimum(theta, math.pi / 2 - HORIZON_EPSILON)
        value = self.zenith * _perez(self.coeffs, clamped, gamma) / self.normalizer
        if self.channel == "Y":
            value = np.where(below, value * self.albedo, value)
        return value


@contextlib.contextmanager
def acquire_sky_states(turbidity: float, albedo: float, sun_zenith: float) -> Iterator[Tuple[SkyModelState, ...]]:
    """Yield the x, y, Y states; all of them are released when the block exits."""
    validate_sky_inputs(turbidity, albedo, sun_zenith)
    with contextlib.ExitStack() as stack:
        states = []
        for channel in CHANNELS:
            state = SkyModelState.create(channel, turbidity, albedo, sun_zenith)
            stack.callback(state.release)
            states.append(state)
        yield tuple(states)


def sun_direction(sun_zenith: float) -> np.ndarray:
    return np.array(
        [
            math.cos(SUN_AZIMUTH) * math.sin(sun_zenith),
            math.sin(SUN_AZIMUTH) * math.sin(sun_zenith),
            math.cos(sun_zenith),
        ]
    )


def pixel_angles(width: int, height: int, restrict_to_hemisphere: bool = True) -> Tuple[np.ndarray, np.ndarray]:
    """theta, phi grids of shape (height, width) at pixel centers."""
    if width < 1 or height < 1:
        raise ValueError(f"sky size must be positive, got {width}x{height}")
    j, i = np.indices((height, width))
    theta = math.pi * (j + 0.5) / height
    phi = 2.0 * math.pi * (i + 0.5) / width
    if restrict_to_hemisphere:
        theta = np.clip(theta, 0.0, math.pi / 2 - HORIZON_EPSILON)
    return theta, phi


def xyy_to_rgb(x: np.ndarray, y: np.ndarray, big_y: np.ndarray) -> np.ndarray:
    safe_y = np.where(y == 0, 1.0, y)
    big_x = np.where(y == 0, 0.0, x / safe_y * big_y)
    big_z = np.where(y == 0, 0.0, (1.0 - x - y) / safe_y * big_y)
    xyz = np.stack([big_x, big_y, big_z], axis=-1)
    return xyz @ _XYZ_TO_RGB.T


def sample_sky(
    width: int,
    height: int,
    sun_zenith: float,
    turbidity: float,
    albedo: float,
    scale: float = 1.0,
    restrict_to_hemisphere: bool = True,
) -> np.ndarray:
    """Float32 RGBA buffer (height, width, 4), alpha = 1."""
    if scale < 0:
        raise ValueError(f"scale must be >= 0, got {scale}")
    theta, phi = pixel_angles(width, height, restrict_to_hemisphere)
    sun = sun_direction(sun_zenith)
    with acquire_sky_states(turbidity, albedo, sun_zenith) as (state_x, state_y, state_big_y):
        sin_theta = np.sin(theta)
        view = np.stack([np.cos(phi) * sin_theta, np.sin(phi) * sin_theta, np.cos(theta)], axis=-1)
        gamma = np.arccos(np.clip(view @ sun, -1.0, 1.0))
        rgb = xyy_to_rgb(
            state_x.radiance(theta, gamma),
            state_y.radiance(theta, gamma),
            state_big_y.radiance(theta, gamma),
        )
    out = np.ones((height, width, 4), dtype=np.float32)
    out[..., :3] = scale * rgb
    log.debug("sampled %dx%d sky, turbidity=%.2f, sun_zenith=%.3f", width, height, turbidity, sun_zenith)
    return out
