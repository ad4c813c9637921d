"""
Input events delivered by an input surface to the runtime.

Uses frozen dataclasses so events are immutable once created.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class PointerEvent:
    """Immutable pointer click on the rendering surface.

    Attributes:
        x: Horizontal position in surface pixels
        y: Vertical position in surface pixels (0 at the top)
        timestamp: Time when the event occurred (seconds, monotonic clock)
        button: Mouse button number (1 = left)
    """
    x: float
    y: float
    timestamp: float = 0.0
    button: int = 1

    def __post_init__(self):
        """Validate timestamp is non-negative."""
        if self.timestamp < 0:
            raise ValueError(f'Timestamp must be non-negative, got {self.timestamp}')

    def __str__(self) -> str:
        return f"PointerEvent(pos=({self.x:.1f}, {self.y:.1f}), t={self.timestamp:.3f})"


@dataclass(frozen=True)
class KeyEvent:
    """Immutable key press.

    Attributes:
        key: Key name as reported by the surface (e.g. 'a', 'space')
        timestamp: Time when the event occurred (seconds, monotonic clock)
    """
    key: str
    timestamp: float = 0.0

    def matches(self, key: str) -> bool:
        """Case-insensitive key comparison."""
        return self.key.lower() == key.lower()

    def __str__(self) -> str:
        return f"KeyEvent({self.key!r}, t={self.timestamp:.3f})"
