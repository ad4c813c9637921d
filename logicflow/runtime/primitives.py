"""
Animation primitives used by compiled procedures.

Suspending primitives are generators: each ``yield`` hands a wake condition
to the step clock. Instant primitives are plain functions. A missing node or
material makes the call a silent no-op.

Interpolating primitives write one intermediate value per step and check
``ctx.running`` before every write; cancelled interpolations stay at their
last written value.
"""

import math
from typing import Iterator

from logicflow.runtime.clock import NEXT_TICK, Sleep
from logicflow.runtime.context import RuntimeContext
from logicflow.runtime.scene import Vec3


def ease_out_cubic(t: float) -> float:
    """1 - (1 - t)^3"""
    return 1 - (1 - t) ** 3


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def _animate_axis(ctx: RuntimeContext, vector: Vec3, axis: str, delta: float) -> Iterator:
    steps = ctx.config.interpolation_steps
    start = vector.get(axis)
    end = start + delta
    for step in range(1, steps + 1):
        if not ctx.running:
            return
        vector.set_axis(axis, lerp(start, end, ease_out_cubic(step / steps)))
        yield NEXT_TICK


def wait(ctx: RuntimeContext, seconds: float) -> Iterator:
    """Suspend for ``seconds`` of clock time; non-positive waits one tick."""
    if not ctx.running:
        return
    yield Sleep(seconds)


def move_by(ctx: RuntimeContext, object_id: str, axis: str, amount: float) -> Iterator:
    """Eased move of the node position along one axis."""
    node = ctx.node(object_id)
    if node is None:
        return
    yield from _animate_axis(ctx, node.position, axis, amount)


def rotate_by(ctx: RuntimeContext, object_id: str, axis: str, degrees: float) -> Iterator:
    """Eased rotation around one axis. Node rotation is stored in radians."""
    node = ctx.node(object_id)
    if node is None:
        return
    yield from _animate_axis(ctx, node.rotation, axis, math.radians(degrees))


def move_to(
    ctx: RuntimeContext,
    object_id: str,
    x: float,
    y: float,
    z: float,
    seconds: float,
) -> Iterator:
    """Linear move to an absolute position, all axes in lockstep."""
    node = ctx.node(object_id)
    if node is None or not ctx.running:
        return
    if seconds <= 0:
        node.position.set(x, y, z)
        return

    total = seconds * ctx.config.move_to_rate
    if math.isinf(total):
        # Too long to ever arrive: hold position until cancelled
        while ctx.running:
            yield NEXT_TICK
        return

    frames = max(1, round(total))
    start_x, start_y, start_z = node.position.as_tuple()
    for frame in range(1, frames + 1):
        if not ctx.running:
            return
        t = frame / frames
        node.position.set(lerp(start_x, x, t), lerp(start_y, y, t), lerp(start_z, z, t))
        yield NEXT_TICK


def set_scale(ctx: RuntimeContext, object_id: str, factor: float) -> None:
    node = ctx.node(object_id)
    if node is not None:
        node.scale.set(factor, factor, factor)


def set_color(ctx: RuntimeContext, object_id: str, color: str) -> None:
    node = ctx.node(object_id)
    if node is not None and node.material is not None:
        node.material.color = color


def set_visible(ctx: RuntimeContext, object_id: str, visible: bool) -> None:
    node = ctx.node(object_id)
    if node is not None:
        node.visible = visible


def set_opacity(ctx: RuntimeContext, object_id: str, percent: float) -> None:
    """Opacity in percent; clamps to 0-100."""
    node = ctx.node(object_id)
    if node is not None and node.material is not None:
        node.material.transparent = True
        node.material.opacity = min(100.0, max(0.0, percent)) / 100
