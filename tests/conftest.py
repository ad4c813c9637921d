"""Shared fixtures for LogicFlow tests."""
import os

# pygame must not open a real window during tests
os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')

from typing import Dict, List, Optional

import pytest

from models import BehaviorGraph, LogicAction, SceneObjectData, Trigger
from logicflow.compiler import compile_scene
from logicflow.config import RuntimeConfig
from logicflow.input.surface import HeadlessSurface
from logicflow.runtime import InteractionRuntime, SceneGraph

# Exact in binary floating point, so clock times add up without drift
DT = 1 / 64


def make_object(
    object_id: str,
    start: Optional[List[Dict]] = None,
    click: Optional[List[Dict]] = None,
    position=(0.0, 0.0, 0.0),
    **fields,
) -> SceneObjectData:
    """Create a scene object whose graph holds the given actions.

    Actions are dicts like {'type': 'MOVE', 'params': {'axis': 'y'}}.
    """
    graph = BehaviorGraph.default()
    for trigger, actions in ((Trigger.ON_START, start), (Trigger.ON_CLICK, click)):
        for action in actions or []:
            graph.event_for(trigger).actions.append(LogicAction(
                type=action['type'],
                params=action.get('params', {}),
            ))
    return SceneObjectData(id=object_id, position=list(position), logic=graph, **fields)


def run_ticks(runtime: InteractionRuntime, count: int, dt: float = DT) -> None:
    for _ in range(count):
        runtime.tick(dt)


@pytest.fixture
def config():
    return RuntimeConfig()


@pytest.fixture
def surface():
    return HeadlessSurface()


@pytest.fixture
def build_runtime(config, surface):
    """Factory: (objects) -> (runtime, scene, launched ON_START instances)."""
    runtimes = []

    def _build(objects: List[SceneObjectData]):
        scene = SceneGraph.from_objects(objects, config)
        runtime = InteractionRuntime(scene, surface, config)
        runtimes.append(runtime)
        launched = runtime.start(objects, compile_scene(objects))
        return runtime, scene, launched

    yield _build

    for runtime in runtimes:
        runtime.stop()
