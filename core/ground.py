from __future__ import annotations

"""Ground wetness, puddles and the friction modifier consumed by physics."""

from dataclasses import dataclass, field
import logging
import random
from typing import Dict, Iterator, Optional

from pygame.math import Vector3

import constants

logger = logging.getLogger(__name__)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def friction_for(rain_intensity: float) -> float:
    """Return the traction multiplier for ``rain_intensity``.

    Monotonically non-increasing, clamped to ``[0.3, 1.0]``; dry ground gives
    1.0 and full rain 0.5.
    """
    rain = min(1.0, max(0.0, rain_intensity))
    value = 1.0 - rain * constants.FRICTION_RAIN_FACTOR
    return min(constants.FRICTION_MAX, max(constants.FRICTION_MIN, value))


@dataclass(frozen=True)
class GroundMaterial:
    roughness: float = 0.8
    metalness: float = 0.0
    normal_scale: float = 0.0


WET_MATERIAL = GroundMaterial(
    roughness=constants.WET_ROUGHNESS,
    metalness=constants.WET_METALNESS,
    normal_scale=constants.WET_NORMAL_SCALE,
)


@dataclass
class Puddle:
    position: Vector3
    radius: float
    max_accumulation: float
    drying_rate: float
    accumulation: float = 0.0
    opacity: float = field(default=0.0)

    def fill(self, dt: float, rain_intensity: float) -> None:
        self.accumulation = min(
            self.accumulation + dt * rain_intensity * constants.PUDDLE_FILL_RATE,
            self.max_accumulation,
        )
        self.opacity = self.accumulation

    def dry(self, dt: float) -> None:
        self.accumulation = max(self.accumulation - dt * self.drying_rate, 0.0)
        self.opacity = self.accumulation


class GroundEffects:
    """Wet ground appearance, puddle lifecycle and traction.

    ``dry_material`` is the ground's original material; it is restored by
    :meth:`cleanup`.  ``material`` holds the blended parameters published to
    the renderer every frame.
    """

    def __init__(
        self,
        scene=None,
        dry_material: Optional[GroundMaterial] = None,
        max_puddles: int = 50,
        ground_size: float = constants.GROUND_SIZE,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.scene = scene
        self.dry_material = dry_material or GroundMaterial()
        self.wet_material = WET_MATERIAL
        self.material = self.dry_material
        self.max_puddles = max_puddles
        self.ground_size = ground_size
        self.rng = rng or random.Random()
        self.wetness = 0.0
        self.exposure = 0.0
        self.friction_modifier = 1.0
        self._puddles: Dict[int, Puddle] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._puddles)

    def __iter__(self) -> Iterator[Puddle]:
        return iter(self._puddles.values())

    @property
    def puddles(self) -> Dict[int, Puddle]:
        return dict(self._puddles)

    # ------------------------------------------------------------------
    def update(self, dt: float, rain_intensity: float) -> None:
        dt = max(0.0, dt)
        rain = min(1.0, max(0.0, rain_intensity))
        self._update_wetness(rain)
        self._update_puddles(dt, rain)
        if rain > 0:
            self.exposure += dt * rain
            threshold = constants.PUDDLE_EXPOSURE_THRESHOLD
            if self.exposure > threshold:
                if len(self._puddles) < self.max_puddles:
                    self.spawn_puddle()
                    self.exposure = 0.0
                else:
                    self.exposure = threshold
        self.friction_modifier = friction_for(rain)

    def _update_wetness(self, rain: float) -> None:
        self.wetness = min(rain * 2.0, 1.0)
        dry, wet = self.dry_material, self.wet_material
        self.material = GroundMaterial(
            roughness=lerp(dry.roughness, wet.roughness, self.wetness),
            metalness=lerp(dry.metalness, wet.metalness, self.wetness),
            normal_scale=self.wetness * constants.WET_NORMAL_SCALE,
        )

    def _update_puddles(self, dt: float, rain: float) -> None:
        for pid, puddle in list(self._puddles.items()):
            if rain > 0:
                puddle.fill(dt, rain)
            else:
                puddle.dry(dt)
                if puddle.accumulation <= 0:
                    self._remove(pid)

    # ------------------------------------------------------------------
    def spawn_puddle(self, position: Optional[Vector3] = None) -> Optional[Puddle]:
        """Create a puddle at ``position`` or a random ground spot.

        Returns ``None`` when the population is already at ``max_puddles``.
        """

        if len(self._puddles) >= self.max_puddles:
            return None
        if position is None:
            half = self.ground_size / 2
            position = Vector3(
                self.rng.uniform(-half, half), 0.0, self.rng.uniform(-half, half)
            )
        size = self.rng.uniform(*constants.PUDDLE_SIZE)
        puddle = Puddle(
            position=Vector3(position.x, position.y + constants.PUDDLE_LIFT, position.z),
            radius=size / 2,
            max_accumulation=self._half_open(constants.PUDDLE_MAX_ACCUMULATION),
            drying_rate=self._half_open(constants.PUDDLE_DRYING_RATE),
        )
        self._puddles[self._next_id] = puddle
        logger.debug("Puddle %d spawned at (%.0f, %.0f)", self._next_id, position.x, position.z)
        self._next_id += 1
        if self.scene is not None:
            self.scene.add(puddle)
        return puddle

    def _half_open(self, bounds) -> float:
        lo, hi = bounds
        return lo + self.rng.random() * (hi - lo)

    def _remove(self, pid: int) -> None:
        puddle = self._puddles.pop(pid, None)
        if puddle is not None and self.scene is not None:
            self.scene.remove(puddle)

    def get_friction_modifier(self) -> float:
        return self.friction_modifier

    def cleanup(self) -> None:
        """Remove all puddles and restore the dry ground material."""

        if self._puddles:
            logger.debug("Removing %d puddles", len(self._puddles))
        for pid in list(self._puddles):
            self._remove(pid)
        self.material = self.dry_material
        self.wetness = 0.0
        self.exposure = 0.0
        self.friction_modifier = 1.0
