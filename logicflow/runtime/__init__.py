"""
LogicFlow runtime.

Runs compiled procedures as cooperative instances on a shared step clock,
dispatches clicks via the scene's ray-intersection query, and mutates scene
nodes through an ObjectAccessor.
"""

from .clock import (
    StepClock,
    ProcedureInstance,
    InstanceState,
    NextTick,
    Sleep,
    NEXT_TICK,
)
from .context import RuntimeContext
from .scene import (
    ObjectAccessor,
    SceneGraph,
    SceneNode,
    Material,
    Vec3,
)
from .interpreter import execute, run_procedure
from .engine import InteractionRuntime

__all__ = [
    'StepClock',
    'ProcedureInstance',
    'InstanceState',
    'NextTick',
    'Sleep',
    'NEXT_TICK',
    'RuntimeContext',
    'ObjectAccessor',
    'SceneGraph',
    'SceneNode',
    'Material',
    'Vec3',
    'execute',
    'run_procedure',
    'InteractionRuntime',
]
