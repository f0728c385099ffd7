from __future__ import annotations

import math
import random

from pygame.math import Vector3


class DeterministicRng:
    def __init__(self, seed: int):
        self._random = random.Random(seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_horizontal_direction(self) -> Vector3:
        """Unit vector in the x/z ground plane."""
        angle = self._random.uniform(0, 2 * math.pi)
        return Vector3(math.cos(angle), 0.0, math.sin(angle))

    def next_token(self) -> str:
        return f"{self._random.getrandbits(48):012x}"
