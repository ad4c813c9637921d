"""
Procedure interpreter.

Executes a procedure's operations strictly in order, dispatching each
operation variant to its primitive. Suspending primitives are delegated to
with ``yield from`` so the next operation starts only after the previous one
has fully resolved.
"""

from typing import Callable, Dict, Iterator, Optional

from logicflow.compiler import (
    Color,
    Move,
    MoveTo,
    Noop,
    Opacity,
    Operation,
    Procedure,
    Rotate,
    Scale,
    Visible,
    Wait,
)
from logicflow.logging import get_logger
from logicflow.runtime import primitives
from logicflow.runtime.context import RuntimeContext

log = get_logger('runtime')

# Returns a generator for suspending operations, None for instant ones
OperationHandler = Callable[[RuntimeContext, str, Operation], Optional[Iterator]]


def _noop(ctx: RuntimeContext, object_id: str, op: Noop) -> None:
    return None


_HANDLERS: Dict[type, OperationHandler] = {
    Move: lambda ctx, oid, op: primitives.move_by(ctx, oid, op.axis, op.amount),
    Rotate: lambda ctx, oid, op: primitives.rotate_by(ctx, oid, op.axis, op.amount),
    Scale: lambda ctx, oid, op: primitives.set_scale(ctx, oid, op.factor),
    Color: lambda ctx, oid, op: primitives.set_color(ctx, oid, op.color),
    Wait: lambda ctx, oid, op: primitives.wait(ctx, op.seconds),
    Visible: lambda ctx, oid, op: primitives.set_visible(ctx, oid, op.visible),
    MoveTo: lambda ctx, oid, op: primitives.move_to(ctx, oid, op.x, op.y, op.z, op.seconds),
    Opacity: lambda ctx, oid, op: primitives.set_opacity(ctx, oid, op.percent),
    Noop: _noop,
}


def execute(ctx: RuntimeContext, object_id: str, op: Operation) -> Iterator:
    """Run one operation, suspending as its primitive requires."""
    handler = _HANDLERS.get(type(op))
    if handler is None:
        raise TypeError(f"No handler for operation {op!r}")
    result = handler(ctx, object_id, op)
    if result is not None:
        yield from result


def run_procedure(ctx: RuntimeContext, procedure: Procedure) -> Iterator:
    """Generator body of one procedure instance."""
    for op in procedure.operations:
        if not ctx.running:
            return
        log.step(procedure.object_id, op)
        yield from execute(ctx, procedure.object_id, op)
