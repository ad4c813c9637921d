"""
Behavior compiler.

Turns per-object behavior graphs into procedures: ordered tuples of
operation variants that the runtime interprets.
"""

from .operations import (
    Move,
    Rotate,
    Scale,
    Color,
    Wait,
    Visible,
    MoveTo,
    Opacity,
    Noop,
    Operation,
    Procedure,
)
from .compiler import (
    compile_action,
    compile_graph,
    compile_scene,
    describe,
    key_slot,
    CompiledProcedures,
    ProcedureSlot,
    COMPILED_TRIGGERS,
)

__all__ = [
    'Move',
    'Rotate',
    'Scale',
    'Color',
    'Wait',
    'Visible',
    'MoveTo',
    'Opacity',
    'Noop',
    'Operation',
    'Procedure',
    'compile_action',
    'compile_graph',
    'compile_scene',
    'describe',
    'key_slot',
    'CompiledProcedures',
    'ProcedureSlot',
    'COMPILED_TRIGGERS',
]
