from __future__ import annotations

"""Batched rain particle field.

Drops are not individual objects.  The field keeps three parallel ``numpy``
arrays (base position, velocity, size) and a single time accumulator; the
apparent position of every drop is derived from them on demand:

``apparent = base + (velocity + wind) * time``

Drops falling below the ground threshold are recycled to the top of the
volume at their base horizontal coordinates and keep falling from there;
horizontal drift wraps around the volume.  A fade factor tapers the opacity
near the top and bottom of the volume so recycled drops never pop.
"""

import logging
import math
from typing import Optional

import numpy as np

import constants

logger = logging.getLogger(__name__)


def smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    """Hermite interpolation between ``edge0`` and ``edge1``."""
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


class RainField:
    """Simulate ``count`` falling drops inside a box centred on the origin.

    The field starts disabled with zero intensity.  While disabled
    :meth:`advance` does nothing; :meth:`set_intensity` and :meth:`set_wind`
    still take effect so the field is ready when it is enabled again.
    """

    def __init__(
        self,
        count: int = 15000,
        width: float = constants.RAIN_AREA_WIDTH,
        height: float = constants.RAIN_AREA_HEIGHT,
        depth: float = constants.RAIN_AREA_DEPTH,
        scene=None,
        seed: Optional[int] = None,
    ) -> None:
        self.count = max(0, int(count))
        self.width = width
        self.height = height
        self.depth = depth
        self.scene = scene
        self.rng = np.random.default_rng(seed)
        self.time = 0.0
        self.wind = np.zeros(3, dtype=np.float32)
        self.base_speed = constants.RAIN_BASE_SPEED
        self.opacity = 0.0
        self.intensity = 0.0
        self.enabled = False
        self.regenerations = 0

        self.positions = self._random_positions()
        self.velocities = np.empty((self.count, 3), dtype=np.float32)
        self.velocities[:, 0] = self._jitter(constants.RAIN_JITTER_XZ)
        self.velocities[:, 1] = self.base_speed + self._jitter(constants.RAIN_JITTER_Y)
        self.velocities[:, 2] = self._jitter(constants.RAIN_JITTER_XZ)
        lo, hi = constants.RAIN_DROP_SIZE
        self.sizes = self.rng.uniform(lo, hi, self.count).astype(np.float32)

        if self.scene is not None:
            self.scene.add(self)

    # ------------------------------------------------------------------
    def _jitter(self, spread: float) -> np.ndarray:
        return ((self.rng.random(self.count) - 0.5) * spread).astype(np.float32)

    def _random_positions(self) -> np.ndarray:
        positions = np.empty((self.count, 3), dtype=np.float32)
        positions[:, 0] = (self.rng.random(self.count) - 0.5) * self.width
        positions[:, 1] = self.rng.random(self.count) * self.height
        positions[:, 2] = (self.rng.random(self.count) - 0.5) * self.depth
        return positions

    # ------------------------------------------------------------------
    @property
    def visible(self) -> bool:
        return self.enabled

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def set_intensity(self, intensity: float) -> None:
        """Scale opacity and fall speed; re-roll every vertical velocity."""

        intensity = min(1.0, max(0.0, float(intensity)))
        self.intensity = intensity
        self.opacity = constants.RAIN_MAX_OPACITY * intensity
        self.base_speed = constants.RAIN_BASE_SPEED + constants.RAIN_SPEED_BOOST * intensity
        self.velocities[:, 1] = self.base_speed + self._jitter(constants.RAIN_JITTER_Y)

    def set_wind(self, speed: float, direction: float) -> None:
        """Set the wind from ``speed`` and a heading in radians."""

        self.wind = np.array(
            [math.sin(direction) * speed, 0.0, math.cos(direction) * speed],
            dtype=np.float32,
        )

    def advance(self, dt: float) -> None:
        if not self.enabled or dt <= 0:
            return
        self.time += dt
        if self.time > constants.RAIN_TIME_LIMIT:
            # Keep the accumulator small to avoid float32 precision loss
            self.time = 0.0
            self.positions = self._random_positions()
            self.regenerations += 1
            logger.debug("Rain field regenerated after %.0fs", constants.RAIN_TIME_LIMIT)

    # ------------------------------------------------------------------
    # Sampling
    def apparent_positions(self) -> np.ndarray:
        """Return the ``(count, 3)`` array of drop positions for this frame."""

        ground = constants.RAIN_GROUND_THRESHOLD
        span = np.float32(self.height - ground)
        t = np.float32(self.time)
        velocity = self.velocities + self.wind

        pos = np.empty_like(self.positions)
        pos[:, 1] = self.positions[:, 1] + velocity[:, 1] * t
        elapsed = np.full(self.count, t, dtype=np.float32)
        below = pos[:, 1] < ground
        if np.any(below):
            # Each pass through the ground restarts the drop at the top
            pos[below, 1] = ground + np.mod(pos[below, 1] - ground, span)
            elapsed[below] = (self.height - pos[below, 1]) / -velocity[below, 1]
        pos[:, 0] = self._wrap(self.positions[:, 0] + velocity[:, 0] * elapsed, self.width)
        pos[:, 2] = self._wrap(self.positions[:, 2] + velocity[:, 2] * elapsed, self.depth)
        return pos

    @staticmethod
    def _wrap(values: np.ndarray, extent: float) -> np.ndarray:
        half = extent / 2
        return np.mod(values + half, extent) - half

    def fade_factors(self, heights: Optional[np.ndarray] = None) -> np.ndarray:
        """Per-drop opacity multiplier tapering at the volume boundaries."""

        if heights is None:
            heights = self.apparent_positions()[:, 1]
        top = smoothstep(self.height - constants.RAIN_TOP_FADE, self.height, heights)
        bottom = smoothstep(
            constants.RAIN_GROUND_THRESHOLD, constants.RAIN_BOTTOM_FADE, heights
        )
        return (1.0 - top) * bottom

    def drop_alphas(self) -> np.ndarray:
        """Final per-drop alpha: field opacity times the boundary fade."""
        if not self.enabled:
            return np.zeros(self.count, dtype=np.float32)
        return (self.fade_factors() * self.opacity).astype(np.float32)
