"""Small immutable 2D vector used at the API boundary of the simulation."""

import math
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Vector2:
    """2D floating-point vector with value semantics."""
    x: float = 0.0
    y: float = 0.0

    @staticmethod
    def zero() -> 'Vector2':
        return Vector2(0.0, 0.0)

    @staticmethod
    def random_unit(rng: np.random.Generator) -> 'Vector2':
        """Uniformly distributed unit vector."""
        angle = rng.uniform(0.0, 2.0 * math.pi)
        return Vector2(math.cos(angle), math.sin(angle))

    def __add__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Union['Vector2', float]) -> 'Vector2':
        if isinstance(other, Vector2):
            return Vector2(self.x * other.x, self.y * other.y)
        return Vector2(self.x * other, self.y * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Union['Vector2', float]) -> 'Vector2':
        if isinstance(other, Vector2):
            return Vector2(self.x / other.x, self.y / other.y)
        return Vector2(self.x / other, self.y / other)

    def __neg__(self) -> 'Vector2':
        return Vector2(-self.x, -self.y)

    def dot(self, other: 'Vector2') -> float:
        return self.x * other.x + self.y * other.y

    def magnitude_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def magnitude(self) -> float:
        return math.sqrt(self.magnitude_squared())

    def normalize(self) -> 'Vector2':
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.magnitude()
        if length == 0.0:
            return Vector2.zero()
        return Vector2(self.x / length, self.y / length)

    def distance_to(self, other: 'Vector2') -> float:
        return (self - other).magnitude()

    def as_tuple(self) -> Tuple[float, float]:
        return self.x, self.y
