"""
Simulation loop drivers.

The runtime only advances when something calls tick(dt). SimulationLoop
provides the two drivers used by the CLI:

- run_fixed(): deterministic fixed-step run with scripted input
- run_realtime(): pygame clock at the configured tick rate
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import pygame

from logicflow.config import RuntimeConfig
from logicflow.input.surface import HeadlessSurface, InputSurface, PygameSurface
from logicflow.logging import get_logger
from logicflow.runtime.engine import InteractionRuntime

log = get_logger('loop')


@dataclass(frozen=True)
class ScriptedInput:
    """An input injected at a simulation time during a fixed-step run.

    Attributes:
        time: Simulation time in seconds
        kind: 'click' or 'key'
        x: Click x in surface pixels
        y: Click y in surface pixels
        key: Key name for key presses
    """
    time: float
    kind: str
    x: float = 0.0
    y: float = 0.0
    key: str = ""


class SimulationLoop:
    """
    Drives surface input and the runtime clock.

    Args:
        runtime: Runtime to tick (already started)
        surface: Surface the runtime's listeners are bound to
        config: Tick rate settings
        render: Optional callback run after each tick
    """

    def __init__(
        self,
        runtime: InteractionRuntime,
        surface: InputSurface,
        config: Optional[RuntimeConfig] = None,
        render: Optional[Callable[[], None]] = None,
    ):
        self.runtime = runtime
        self.surface = surface
        self.config = config or RuntimeConfig()
        self.render = render
        self.elapsed = 0.0
        self.ticks = 0

    def step(self, dt: float) -> None:
        """One frame: input, clock, render."""
        self.surface.update(dt)
        self.runtime.tick(dt)
        if self.render is not None:
            self.render()
        self.elapsed += dt
        self.ticks += 1

    def run_fixed(self, duration: float, script: Sequence[ScriptedInput] = ()) -> None:
        """
        Run for ``duration`` seconds of simulation time at a fixed dt.

        Scripted inputs fire on the first tick at or after their time,
        before the clock advances for that tick. Requires a HeadlessSurface
        when a script is given.
        """
        dt = self.config.tick_interval
        pending: List[ScriptedInput] = sorted(script, key=lambda s: s.time)
        if pending and not isinstance(self.surface, HeadlessSurface):
            raise TypeError("Scripted input needs a HeadlessSurface")

        total_ticks = int(round(duration / dt))
        for _ in range(total_ticks):
            if not self.runtime.running:
                break
            while pending and pending[0].time <= self.elapsed + 1e-9:
                self._inject(pending.pop(0))
            self.step(dt)

        log.debug("Fixed run finished after %d ticks (%.2fs)", self.ticks, self.elapsed)

    def _inject(self, item: ScriptedInput) -> None:
        if item.kind == 'click':
            log.debug("t=%.2f scripted click at (%.0f, %.0f)", self.elapsed, item.x, item.y)
            self.surface.click(item.x, item.y)
        elif item.kind == 'key':
            log.debug("t=%.2f scripted key %r", self.elapsed, item.key)
            self.surface.press(item.key)
        else:
            raise ValueError(f"Unknown scripted input kind: {item.kind}")

    def run_realtime(self, duration: Optional[float] = None) -> None:
        """
        Run against the wall clock until the window closes or duration ends.
        """
        clock = pygame.time.Clock()
        while self.runtime.running:
            dt = clock.tick(self.config.tick_rate) / 1000.0
            self.step(dt)
            if isinstance(self.surface, PygameSurface) and self.surface.quit_requested:
                break
            if duration is not None and self.elapsed >= duration:
                break
