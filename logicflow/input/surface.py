"""
Input surfaces - where the runtime binds its click and key listeners.

A surface delivers PointerEvent ("click") and KeyEvent ("key") objects to
bound handlers. Binding returns a callable that removes the handler.
"""
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

import pygame

from logicflow.errors import SurfaceUnavailableError
from logicflow.input.events import KeyEvent, PointerEvent
from logicflow.logging import get_logger

log = get_logger('input')

CLICK = 'click'
KEY = 'key'
EVENT_KINDS = (CLICK, KEY)

Handler = Callable[[Any], None]


class InputSurface(ABC):
    """Abstract base class for input surfaces."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {kind: [] for kind in EVENT_KINDS}

    @property
    @abstractmethod
    def available(self) -> bool:
        """True if listeners can be bound."""
        pass

    @abstractmethod
    def update(self, dt: float) -> None:
        """Collect pending input and dispatch it to bound handlers.

        Args:
            dt: Delta time in seconds since last update.
        """
        pass

    def bind(self, kind: str, handler: Handler) -> Callable[[], None]:
        """
        Bind a handler for an event kind.

        Args:
            kind: 'click' or 'key'
            handler: Called with the event

        Returns:
            Callable that unbinds the handler (safe to call twice)

        Raises:
            SurfaceUnavailableError: If the surface cannot take listeners
            ValueError: If kind is unknown
        """
        if kind not in self._handlers:
            raise ValueError(f"Unknown event kind: {kind}")
        if not self.available:
            raise SurfaceUnavailableError(
                f"{type(self).__name__} is not available for '{kind}' listeners"
            )
        self._handlers[kind].append(handler)

        def unbind() -> None:
            if handler in self._handlers[kind]:
                self._handlers[kind].remove(handler)

        return unbind

    def listener_count(self, kind: str) -> int:
        return len(self._handlers.get(kind, []))

    def dispatch(self, kind: str, event: Any) -> None:
        """Deliver an event to every handler bound for its kind."""
        for handler in list(self._handlers[kind]):
            handler(event)


class HeadlessSurface(InputSurface):
    """Programmatic surface for scripted runs and tests.

    Events are dispatched immediately from click()/press().
    """

    def __init__(self):
        super().__init__()
        self._closed = False

    @property
    def available(self) -> bool:
        return not self._closed

    def close(self) -> None:
        """Make the surface unavailable for new listeners."""
        self._closed = True

    def update(self, dt: float) -> None:
        pass

    def click(self, x: float, y: float, button: int = 1) -> PointerEvent:
        event = PointerEvent(x=float(x), y=float(y), timestamp=time.monotonic(), button=button)
        self.dispatch(CLICK, event)
        return event

    def press(self, key: str) -> KeyEvent:
        event = KeyEvent(key=key, timestamp=time.monotonic())
        self.dispatch(KEY, event)
        return event


class PygameSurface(InputSurface):
    """Surface backed by the pygame display window.

    Converts left-button MOUSEBUTTONDOWN events into clicks and KEYDOWN
    events into key presses. A QUIT event sets ``quit_requested``.
    """

    def __init__(self):
        super().__init__()
        self.quit_requested = False

    @property
    def available(self) -> bool:
        return pygame.display.get_init() and pygame.display.get_surface() is not None

    def update(self, dt: float) -> None:
        """Process pygame events and dispatch clicks and key presses."""
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event: "pygame.event.Event") -> None:
        """Translate one pygame event."""
        if event.type == pygame.MOUSEBUTTONDOWN:
            if event.button == 1:  # Left mouse button only
                pos_x, pos_y = event.pos
                self.dispatch(CLICK, PointerEvent(
                    x=float(pos_x),
                    y=float(pos_y),
                    timestamp=time.monotonic(),
                    button=event.button,
                ))
        elif event.type == pygame.KEYDOWN:
            self.dispatch(KEY, KeyEvent(
                key=pygame.key.name(event.key),
                timestamp=time.monotonic(),
            ))
        elif event.type == pygame.QUIT:
            log.debug("Window close requested")
            self.quit_requested = True
