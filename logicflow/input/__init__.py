"""
Input layer for the runtime.

Provides pointer/key events and the surfaces the runtime binds its
listeners to (pygame window or headless/scripted).
"""

from logicflow.input.events import PointerEvent, KeyEvent
from logicflow.input.surface import (
    InputSurface,
    HeadlessSurface,
    PygameSurface,
    CLICK,
    KEY,
)

__all__ = [
    'PointerEvent',
    'KeyEvent',
    'InputSurface',
    'HeadlessSurface',
    'PygameSurface',
    'CLICK',
    'KEY',
]
