from __future__ import annotations

"""Procedural cloud layer.

Clouds live in an index-stable mapping.  Indices ``[0, base_count)`` form the
persistent base population created by :meth:`CloudField.populate_base`; any
index at or above ``base_count`` belongs to a transient *burst* spawned for
the current weather and dropped as a whole by :meth:`CloudField.clear_burst`.

Each cloud is a small cluster of spherical puffs drifting slowly in the
horizontal plane.  Clouds that drift too far from the origin are mirrored to
the opposite side of the field so the sky never empties.
"""

from dataclasses import dataclass, field
import logging
import math
import random
from typing import Dict, Iterator, List, Optional, Tuple

import pygame
from pygame.math import Vector3

import constants

logger = logging.getLogger(__name__)

Colour = Tuple[int, int, int]


@dataclass
class CloudPuff:
    offset: Vector3
    radius: float


@dataclass
class CloudUnit:
    """Cluster of puffs rendered as a single cloud."""

    puffs: List[CloudPuff] = field(default_factory=list)

    @property
    def extent(self) -> float:
        """Distance from the unit centre to the furthest puff edge."""
        if not self.puffs:
            return 0.0
        return max(p.offset.length() + p.radius for p in self.puffs)


@dataclass
class BurstOptions:
    """Placement and look of a transient cloud burst."""

    height_range: Tuple[float, float] = constants.CLOUD_BASE_HEIGHT
    scale_multiplier: float = 1.0
    spread: float = 1.0
    color: Colour = constants.CLOUD_WHITE


@dataclass
class CloudInstance:
    unit: CloudUnit = field(repr=False)
    position: Vector3
    direction: Vector3
    speed: float
    base_scale: float = 1.0
    scale: float = 1.0
    rotation: float = 0.0
    tint: pygame.Color = field(default_factory=lambda: pygame.Color(*constants.CLOUD_WHITE))
    emissive: pygame.Color = field(default_factory=lambda: pygame.Color(0, 0, 0))
    opacity: float = 0.0
    visible: bool = True


def create_cloud(rng: Optional[random.Random] = None) -> CloudUnit:
    """Build a cluster of 5–9 randomly offset and sized puffs."""

    rng = rng or random
    lo, hi = constants.CLOUD_PUFFS
    ox, oy, oz = constants.CLOUD_PUFF_OFFSET
    rmin, rmax = constants.CLOUD_PUFF_RADIUS
    puffs = []
    for _ in range(rng.randint(lo, hi)):
        offset = Vector3(
            (rng.random() - 0.5) * ox,
            (rng.random() - 0.5) * oy,
            (rng.random() - 0.5) * oz,
        )
        puffs.append(CloudPuff(offset, rmin + rng.random() * (rmax - rmin)))
    return CloudUnit(puffs)


def random_drift(rng: random.Random) -> Vector3:
    """Return a random unit vector in the horizontal plane."""
    angle = rng.uniform(0.0, 2 * math.pi)
    return Vector3(math.cos(angle), 0.0, math.sin(angle))


class CloudField:
    """Owns every cloud instance and animates their drift."""

    def __init__(self, scene=None, rng: Optional[random.Random] = None) -> None:
        self.scene = scene
        self.rng = rng or random.Random()
        self._clouds: Dict[int, CloudInstance] = {}
        self.base_count = 0
        self.opacity = 0.0
        self.scale = 1.0
        self.emissive = pygame.Color(0, 0, 0)
        self.visible_base_count = 0

    # ------------------------------------------------------------------
    # Arena access
    def __len__(self) -> int:
        return len(self._clouds)

    def __iter__(self) -> Iterator[CloudInstance]:
        return iter(self._clouds.values())

    def __getitem__(self, index: int) -> CloudInstance:
        return self._clouds[index]

    def indices(self) -> List[int]:
        return sorted(self._clouds)

    @property
    def transient_count(self) -> int:
        return len(self._clouds) - self.base_count

    # ------------------------------------------------------------------
    # Population
    def _insert(self, index: int, cloud: CloudInstance) -> None:
        cloud.opacity = self.opacity
        cloud.scale = cloud.base_scale * self.scale
        cloud.emissive = pygame.Color(*self.emissive)
        self._clouds[index] = cloud
        if self.scene is not None:
            self.scene.add(cloud)

    def populate_base(self, count: int) -> None:
        """Fill indices ``[0, count)`` with the persistent base layer."""

        self.clear_burst()
        for cloud in list(self._clouds.values()):
            if self.scene is not None:
                self.scene.remove(cloud)
        self._clouds.clear()
        extent = constants.CLOUD_FIELD_EXTENT
        y0, y1 = constants.CLOUD_BASE_HEIGHT
        s0, s1 = constants.CLOUD_SPEED_RANGE
        for index in range(count):
            cloud = CloudInstance(
                unit=create_cloud(self.rng),
                position=Vector3(
                    self.rng.uniform(-extent, extent),
                    self.rng.uniform(y0, y1),
                    self.rng.uniform(-extent, extent),
                ),
                direction=random_drift(self.rng),
                speed=self.rng.uniform(s0, s1),
                rotation=self.rng.uniform(0.0, 2 * math.pi),
            )
            self._insert(index, cloud)
        self.base_count = count
        self.visible_base_count = count
        logger.debug("Populated %d base clouds", count)

    def spawn_burst(self, count: int, options: Optional[BurstOptions] = None) -> List[int]:
        """Append up to ``count`` transient clouds and return their indices.

        The transient population is capped at
        :data:`constants.MAX_TRANSIENT_PER_BURST`.
        """

        options = options or BurstOptions()
        room = constants.MAX_TRANSIENT_PER_BURST - self.transient_count
        count = max(0, min(count, room))
        extent = constants.CLOUD_FIELD_EXTENT * options.spread
        y0, y1 = options.height_range
        s0, s1 = constants.CLOUD_SPEED_RANGE
        created: List[int] = []
        for _ in range(count):
            index = len(self._clouds)
            cloud = CloudInstance(
                unit=create_cloud(self.rng),
                position=Vector3(
                    self.rng.uniform(-extent, extent),
                    self.rng.uniform(y0, y1),
                    self.rng.uniform(-extent, extent),
                ),
                direction=random_drift(self.rng),
                speed=self.rng.uniform(s0, s1),
                base_scale=options.scale_multiplier,
                rotation=self.rng.uniform(0.0, 2 * math.pi),
                tint=pygame.Color(*options.color),
            )
            self._insert(index, cloud)
            created.append(index)
        return created

    def clear_burst(self) -> int:
        """Remove every transient cloud; returns how many were removed."""

        doomed = [i for i in self._clouds if i >= self.base_count]
        for index in doomed:
            cloud = self._clouds.pop(index)
            if self.scene is not None:
                self.scene.remove(cloud)
        return len(doomed)

    # ------------------------------------------------------------------
    # Appearance set by the weather controller
    def set_opacity(self, opacity: float) -> None:
        self.opacity = opacity
        for cloud in self._clouds.values():
            cloud.opacity = opacity

    def set_scale(self, scale: float) -> None:
        self.scale = scale
        for cloud in self._clouds.values():
            cloud.scale = cloud.base_scale * scale

    def set_emissive(self, colour: Colour) -> None:
        self.emissive = pygame.Color(*colour)
        for cloud in self._clouds.values():
            cloud.emissive = pygame.Color(*self.emissive)

    def set_visible_base_count(self, count: int) -> None:
        """Hide base clouds from ``count`` upwards without removing them."""

        self.visible_base_count = max(0, min(count, self.base_count))
        for index, cloud in self._clouds.items():
            if index < self.base_count:
                cloud.visible = index < self.visible_base_count

    # ------------------------------------------------------------------
    def advance(self, dt: float) -> None:
        """Drift every cloud and wrap those leaving the field."""

        if dt <= 0:
            return
        max_distance = constants.CLOUD_MAX_DISTANCE
        for cloud in self._clouds.values():
            cloud.position += cloud.direction * (cloud.speed * dt)
            if cloud.position.length() > max_distance:
                cloud.position = -cloud.position.normalize() * max_distance
