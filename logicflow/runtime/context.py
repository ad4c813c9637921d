"""Per-session runtime context shared by every instance of one simulation."""

import itertools
from typing import Optional

from logicflow.config import RuntimeConfig
from logicflow.runtime.clock import StepClock
from logicflow.runtime.scene import ObjectAccessor, SceneNode


class RuntimeContext:
    """
    State of one simulation session.

    Created by each InteractionRuntime.start() and held by every instance
    the session spawns. Clearing ``running`` cancels all of them: the clock
    stops dispatching and primitives stop at their next step. Contexts of
    different runtimes are fully independent.
    """

    def __init__(self, accessor: ObjectAccessor, config: Optional[RuntimeConfig] = None):
        self.accessor = accessor
        self.config = config or RuntimeConfig()
        self.running = False
        self.clock = StepClock(lambda: self.running)
        self._instance_ids = itertools.count(1)

    def node(self, object_id: str) -> Optional[SceneNode]:
        """Resolve the node for an object through the accessor."""
        return self.accessor.get_object_mesh(object_id)

    def next_instance_id(self) -> int:
        return next(self._instance_ids)
