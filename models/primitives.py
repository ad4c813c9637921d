"""
Shared primitive data types for scene objects.

This module provides the basic geometric types used by the behavior
graph, scene files and the reference scene graph.
"""

from pydantic import BaseModel, ConfigDict
from typing import Tuple


class Vector3(BaseModel):
    """Immutable 3D vector for positions, rotations and scales.

    Attributes:
        x: X component
        y: Y component (up)
        z: Z component (towards the camera)

    Examples:
        >>> pos = Vector3(x=0.0, y=1.0, z=-2.0)
        >>> Vector3.from_sequence([1, 2, 3]).as_tuple()
        (1.0, 2.0, 3.0)
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_sequence(cls, values) -> "Vector3":
        """Build from a 3-item list or tuple (the scene file shape)."""
        x, y, z = values
        return cls(x=x, y=y, z=z)

    def as_tuple(self) -> Tuple[float, float, float]:
        """Return (x, y, z)."""
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        """String representation for debugging."""
        return f"Vector3(x={self.x:.2f}, y={self.y:.2f}, z={self.z:.2f})"
