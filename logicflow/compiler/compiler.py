"""
Behavior compiler - turns behavior graphs into executable procedures.

Compilation never fails: missing or malformed params fall back to the
defaults below, and unknown action types become Noop steps so that sibling
actions still compile.

| type    | params             | defaults                 |
|---------|--------------------|--------------------------|
| MOVE    | axis, amount       | axis='x', amount=1       |
| ROTATE  | axis, amount       | axis='y', amount=90      |
| SCALE   | scale              | scale=1.5                |
| COLOR   | color              | color='#ff0000'          |
| WAIT    | seconds            | seconds=1                |
| VISIBLE | visible            | visible=False            |
| MOVE_TO | x, y, z, seconds   | 0, 0, 0, 1               |
| OPACITY | opacity            | opacity=100              |
"""

import math
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from models import ActionType, BehaviorGraph, LogicAction, SceneObjectData, Trigger

from logicflow.logging import get_logger
from .operations import (
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

log = get_logger('compiler')

AXES = ('x', 'y', 'z')

# Triggers that produce procedures; ON_HOVER is reserved
COMPILED_TRIGGERS = (Trigger.ON_START, Trigger.ON_CLICK, Trigger.ON_KEY)

# ON_START and ON_CLICK are keyed by trigger, ON_KEY by (trigger, lowercased key)
ProcedureSlot = Union[Trigger, Tuple[Trigger, str]]
CompiledProcedures = Dict[ProcedureSlot, Procedure]


def key_slot(key: str) -> ProcedureSlot:
    """Slot of the ON_KEY procedure bound to a key."""
    return (Trigger.ON_KEY, key.lower())


def _slot_name(slot: ProcedureSlot) -> str:
    if isinstance(slot, tuple):
        return f"{slot[0].value}:{slot[1]}"
    return slot.value


def _num(value: Any, default: float) -> float:
    """Coerce to a finite float, or the default."""
    if value is None or isinstance(value, (dict, list)):
        return float(default)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return float(default)
    if math.isnan(number) or math.isinf(number):
        return float(default)
    return number


def _axis(value: Any, default: str) -> str:
    if isinstance(value, str) and value.lower() in AXES:
        return value.lower()
    return default


def _str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _bool(value: Any) -> bool:
    return value is True or value == 'true'


def _compile_move(p: Mapping[str, Any]) -> Operation:
    return Move(axis=_axis(p.get('axis'), 'x'), amount=_num(p.get('amount'), 1))


def _compile_rotate(p: Mapping[str, Any]) -> Operation:
    return Rotate(axis=_axis(p.get('axis'), 'y'), amount=_num(p.get('amount'), 90))


def _compile_scale(p: Mapping[str, Any]) -> Operation:
    return Scale(factor=_num(p.get('scale'), 1.5))


def _compile_color(p: Mapping[str, Any]) -> Operation:
    return Color(color=_str(p.get('color'), '#ff0000'))


def _compile_wait(p: Mapping[str, Any]) -> Operation:
    return Wait(seconds=_num(p.get('seconds'), 1))


def _compile_visible(p: Mapping[str, Any]) -> Operation:
    return Visible(visible=_bool(p.get('visible')))


def _compile_move_to(p: Mapping[str, Any]) -> Operation:
    return MoveTo(
        x=_num(p.get('x'), 0),
        y=_num(p.get('y'), 0),
        z=_num(p.get('z'), 0),
        seconds=_num(p.get('seconds'), 1),
    )


def _compile_opacity(p: Mapping[str, Any]) -> Operation:
    return Opacity(percent=_num(p.get('opacity'), 100))


_ACTION_COMPILERS: Dict[str, Callable[[Mapping[str, Any]], Operation]] = {
    ActionType.MOVE.value: _compile_move,
    ActionType.ROTATE.value: _compile_rotate,
    ActionType.SCALE.value: _compile_scale,
    ActionType.COLOR.value: _compile_color,
    ActionType.WAIT.value: _compile_wait,
    ActionType.VISIBLE.value: _compile_visible,
    ActionType.MOVE_TO.value: _compile_move_to,
    ActionType.OPACITY.value: _compile_opacity,
}


def compile_action(action: LogicAction) -> Operation:
    """Translate one action into its operation, substituting defaults."""
    compile_fn = _ACTION_COMPILERS.get(action.type)
    if compile_fn is None:
        log.warning("Unknown action type %r (action %s), compiling as no-op",
                    action.type, action.id)
        return Noop(source_type=action.type)
    params = action.params if isinstance(action.params, Mapping) else {}
    return compile_fn(params)


def compile_graph(graph: BehaviorGraph, object_id: str) -> CompiledProcedures:
    """
    Compile one object's behavior graph.

    Args:
        graph: The object's behavior graph (snapshot)
        object_id: Id of the object the procedures will drive

    Returns:
        Dict of slot -> procedure, with an entry only for triggers that
        have at least one action. ON_START and ON_CLICK procedures sit under
        their trigger; ON_KEY procedures under ``key_slot(key)``, one per
        bound key. Never raises.
    """
    compiled: CompiledProcedures = {}

    for event in graph.events:
        if not isinstance(event.type, Trigger):
            log.debug("Unknown trigger %r (event %s on %s), skipping",
                      event.type, event.id, object_id)
            continue
        if event.type not in COMPILED_TRIGGERS or not event.actions:
            continue

        slot: ProcedureSlot = event.type
        if event.type == Trigger.ON_KEY:
            if not event.key:
                log.warning("ON_KEY event %s on %s has no key, skipping", event.id, object_id)
                continue
            slot = key_slot(event.key)

        operations = tuple(compile_action(action) for action in event.actions)
        # Last non-empty event of a slot wins
        compiled[slot] = Procedure(
            object_id=object_id,
            trigger=event.type,
            operations=operations,
            key=event.key if event.type == Trigger.ON_KEY else None,
        )

    log.debug("Compiled %s: %s", object_id,
              ', '.join(f"{_slot_name(s)}[{len(p)}]" for s, p in compiled.items()) or 'nothing')
    return compiled


def compile_scene(
    objects: Iterable[SceneObjectData],
    snapshot: bool = True,
) -> Dict[str, CompiledProcedures]:
    """
    Compile every object of a scene.

    Args:
        objects: Scene objects with their behavior graphs
        snapshot: Compile from a deep copy of each graph

    Returns:
        Dict of object id -> compiled procedures (empty dict for objects
        whose graph has no actions)
    """
    result: Dict[str, CompiledProcedures] = {}
    for obj in objects:
        graph = obj.logic.snapshot() if snapshot else obj.logic
        result[obj.id] = compile_graph(graph, obj.id)
    return result


def describe(procedure: Optional[Procedure]) -> str:
    """Human-readable listing of a procedure's steps."""
    if procedure is None:
        return "<none>"
    lines = [str(procedure)]
    for index, op in enumerate(procedure.operations):
        lines.append(f"  {index}: {op!r}")
    return '\n'.join(lines)
