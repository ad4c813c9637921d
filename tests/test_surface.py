"""Tests for input events and surfaces."""

import pygame
import pytest

from logicflow.errors import SurfaceUnavailableError
from logicflow.input.events import KeyEvent, PointerEvent
from logicflow.input.surface import CLICK, KEY, HeadlessSurface, PygameSurface


class TestEvents:

    def test_pointer_event_is_frozen(self):
        event = PointerEvent(x=1, y=2)
        with pytest.raises(AttributeError):
            event.x = 5

    def test_negative_timestamp_rejected(self):
        with pytest.raises(ValueError):
            PointerEvent(x=0, y=0, timestamp=-1)

    def test_key_match_is_case_insensitive(self):
        assert KeyEvent("Space").matches("space")
        assert not KeyEvent("a").matches("b")


class TestHeadlessSurface:

    def test_click_dispatches_to_bound_handlers(self):
        surface = HeadlessSurface()
        received = []
        surface.bind(CLICK, received.append)

        event = surface.click(10, 20)

        assert received == [event]
        assert (event.x, event.y) == (10.0, 20.0)

    def test_press_only_reaches_key_handlers(self):
        surface = HeadlessSurface()
        clicks, keys = [], []
        surface.bind(CLICK, clicks.append)
        surface.bind(KEY, keys.append)

        surface.press("h")

        assert clicks == []
        assert keys[0].key == "h"

    def test_unbind(self):
        surface = HeadlessSurface()
        received = []
        unbind = surface.bind(CLICK, received.append)

        unbind()
        unbind()
        surface.click(0, 0)

        assert received == []
        assert surface.listener_count(CLICK) == 0

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            HeadlessSurface().bind("hover", print)

    def test_closed_surface_rejects_listeners(self):
        surface = HeadlessSurface()
        surface.close()

        assert not surface.available
        with pytest.raises(SurfaceUnavailableError):
            surface.bind(CLICK, print)


class TestPygameSurface:

    @pytest.fixture
    def surface(self):
        pygame.init()
        yield PygameSurface()
        pygame.quit()

    def test_unavailable_without_display(self, surface):
        pygame.display.quit()
        assert not surface.available
        with pytest.raises(SurfaceUnavailableError):
            surface.bind(CLICK, print)

    def test_left_click(self, surface):
        received = []
        surface._handlers[CLICK].append(received.append)

        surface.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(12, 34), button=1))
        surface.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(12, 34), button=3))

        assert len(received) == 1
        assert (received[0].x, received[0].y) == (12.0, 34.0)

    def test_keydown(self, surface):
        received = []
        surface._handlers[KEY].append(received.append)

        surface.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE))

        assert received[0].key == "space"

    def test_quit(self, surface):
        surface.handle_event(pygame.event.Event(pygame.QUIT))
        assert surface.quit_requested
