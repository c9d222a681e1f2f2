from __future__ import annotations

"""Boundary between the weather simulation and a rendering scene.

The simulation never draws anything itself.  It computes target values
(fog density and colour, visual units to add or remove) and hands them to an
object implementing :class:`SceneLike`.  :class:`RecordingScene` keeps those
values in memory; it is used by the headless runner and the tests and is the
fallback when no scene is supplied.
"""

from dataclasses import dataclass, field
from typing import Any, List, Protocol, Tuple

import pygame


class SceneLike(Protocol):
    """Primitives the weather simulation expects from a scene graph."""

    def add(self, unit: Any) -> None:
        """Insert a visual unit (cloud, puddle, rain field)."""

    def remove(self, unit: Any) -> None:
        """Detach a visual unit previously added."""

    def set_fog(
        self,
        density: float,
        near: float,
        far: float,
        color: Tuple[int, int, int],
    ) -> None:
        """Update the scene wide fog."""


@dataclass
class FogParams:
    density: float = 0.0
    near: float = 100.0
    far: float = 1000.0
    color: pygame.Color = field(default_factory=lambda: pygame.Color(0xCF, 0xCF, 0xCF))


class RecordingScene:
    """In-memory scene remembering the units and the last fog values."""

    def __init__(self) -> None:
        self.units: List[Any] = []
        self.fog = FogParams()

    def add(self, unit: Any) -> None:
        self.units.append(unit)

    def remove(self, unit: Any) -> None:
        # Removing an unknown unit is harmless
        for i, existing in enumerate(self.units):
            if existing is unit:
                del self.units[i]
                return

    def set_fog(
        self,
        density: float,
        near: float,
        far: float,
        color: Tuple[int, int, int],
    ) -> None:
        self.fog = FogParams(density, near, far, pygame.Color(*color))

    def __contains__(self, unit: Any) -> bool:
        return any(existing is unit for existing in self.units)

    def __len__(self) -> int:
        return len(self.units)
