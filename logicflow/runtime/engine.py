"""
Interaction Runtime - runs compiled procedures while the scene is live.

The InteractionRuntime:
1. Binds click and key listeners on the input surface
2. Registers each object's compiled procedures
3. Launches every ON_START procedure as an independent instance
4. Launches a new ON_CLICK instance for the object under each click
5. Launches ON_KEY instances whose key matches a key press
6. Resumes suspended instances on each tick(dt)
7. Cancels everything cooperatively on stop()
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from models import Trigger

from logicflow.compiler import CompiledProcedures, Procedure, ProcedureSlot, key_slot
from logicflow.config import RuntimeConfig
from logicflow.errors import SurfaceUnavailableError
from logicflow.input.events import KeyEvent, PointerEvent
from logicflow.input.surface import CLICK, KEY, InputSurface
from logicflow.logging import get_logger
from logicflow.runtime.clock import ProcedureInstance
from logicflow.runtime.context import RuntimeContext
from logicflow.runtime.interpreter import run_procedure
from logicflow.runtime.scene import ObjectAccessor

log = get_logger('runtime')


def _object_id(obj: Any) -> str:
    """Id of a scene object record (model or plain dict)."""
    if isinstance(obj, Mapping):
        return obj['id']
    return obj.id


class InteractionRuntime:
    """
    Scheduler for procedure instances.

    Usage:
        runtime = InteractionRuntime(scene, surface)
        runtime.start(objects, compile_scene(objects))

        # Each frame:
        surface.update(dt)      # dispatches clicks/keys to the runtime
        runtime.tick(dt)        # resumes due instances

        runtime.stop()

    Concurrent instances on the same object are not coordinated: their
    writes race and the last write wins. Repeated clicks launch repeated,
    independent instances.
    """

    def __init__(
        self,
        accessor: ObjectAccessor,
        surface: Optional[InputSurface],
        config: Optional[RuntimeConfig] = None,
    ):
        self.accessor = accessor
        self.surface = surface
        self.config = config or RuntimeConfig()

        # Current session (None before the first start)
        self._context: Optional[RuntimeContext] = None

        # object id -> slot (trigger, or ON_KEY plus key) -> procedure
        self._registry: Dict[str, Dict[ProcedureSlot, Procedure]] = {}

        # Listener removers from the surface
        self._unbinders: List[Any] = []

        # Instances not yet in a terminal state
        self._instances: List[ProcedureInstance] = []

        # Lifetime counters for the current session
        self.stats: Dict[str, int] = {}

    @property
    def running(self) -> bool:
        return self._context is not None and self._context.running

    @property
    def context(self) -> Optional[RuntimeContext]:
        return self._context

    @property
    def registry(self) -> Mapping[str, Mapping[ProcedureSlot, Procedure]]:
        """Read-only view of registered procedures."""
        return MappingProxyType({k: MappingProxyType(v) for k, v in self._registry.items()})

    @property
    def instances(self) -> List[ProcedureInstance]:
        """Live (non-terminal) instances."""
        self._prune()
        return list(self._instances)

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def start(
        self,
        objects: Iterable[Any],
        compiled: Mapping[str, CompiledProcedures],
    ) -> List[ProcedureInstance]:
        """
        Start a simulation session.

        Args:
            objects: Scene objects (anything with an ``id``)
            compiled: Object id -> compiled procedures

        Returns:
            The launched ON_START instances, each completed, aborted, or
            suspended at its first suspension point

        Raises:
            SurfaceUnavailableError: If listeners cannot be bound; nothing
                is launched in that case
        """
        if self.running:
            log.info("start() while running, stopping previous session")
            self.stop()

        self._bind_listeners()

        self._context = RuntimeContext(self.accessor, self.config)
        self._context.running = True
        self.stats = {'launched': 0, 'completed': 0, 'aborted': 0}

        self._registry.clear()
        for obj in objects:
            object_id = _object_id(obj)
            procedures = compiled.get(object_id)
            if procedures:
                self._registry[object_id] = dict(procedures)

        log.info("Simulation started: %d objects with behaviors", len(self._registry))

        launched = []
        for object_id, procedures in list(self._registry.items()):
            procedure = procedures.get(Trigger.ON_START)
            if procedure is not None:
                launched.append(self._launch(procedure))
        return launched

    def stop(self) -> None:
        """
        Stop the session. Idempotent and safe when not running.

        Clears the running flag, removes listeners, clears the registry and
        aborts every live instance without running any more of its steps.
        """
        if self._context is not None:
            self._context.running = False

        for unbind in self._unbinders:
            unbind()
        self._unbinders.clear()
        self._registry.clear()

        instances, self._instances = self._instances, []
        for instance in instances:
            instance.abort("session stopped")
            self._count(instance)

        if instances:
            log.info("Simulation stopped: %d instances cancelled", len(instances))

    def _bind_listeners(self) -> None:
        if self.surface is None:
            log.error("InteractionRuntime: no surface to bind events to")
            raise SurfaceUnavailableError("No input surface to bind listeners to")

        unbinders = []
        try:
            unbinders.append(self.surface.bind(CLICK, self.handle_click))
            unbinders.append(self.surface.bind(KEY, self.handle_key))
        except SurfaceUnavailableError:
            for unbind in unbinders:
                unbind()
            log.error("InteractionRuntime: could not bind events to %s",
                      type(self.surface).__name__)
            raise
        self._unbinders = unbinders

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def _launch(self, procedure: Procedure) -> ProcedureInstance:
        ctx = self._context
        instance = ProcedureInstance(
            instance_id=ctx.next_instance_id(),
            procedure=procedure,
            body=run_procedure(ctx, procedure),
            clock=ctx.clock,
            is_running=lambda: ctx.running,
        )
        self.stats['launched'] += 1
        self._instances.append(instance)
        instance.start()
        self._prune()
        return instance

    def _count(self, instance: ProcedureInstance) -> None:
        if instance.state.value in self.stats:
            self.stats[instance.state.value] += 1

    def _prune(self) -> None:
        live = []
        for instance in self._instances:
            if instance.done:
                self._count(instance)
            else:
                live.append(instance)
        self._instances = live

    def tick(self, dt: float) -> int:
        """
        Advance the session clock by dt seconds.

        Returns:
            Number of instances resumed
        """
        if not self.running:
            return 0
        resumed = self._context.clock.tick(dt)
        self._prune()
        return resumed

    # -------------------------------------------------------------------------
    # Input dispatch
    # -------------------------------------------------------------------------

    def handle_click(self, event: PointerEvent) -> Optional[ProcedureInstance]:
        """Launch the ON_CLICK procedure of the object under the pointer."""
        if not self.running:
            return None

        object_id = self.accessor.ray_intersect(event)
        if object_id is None:
            return None

        procedure = self._registry.get(object_id, {}).get(Trigger.ON_CLICK)
        if procedure is None:
            log.debug("Click on %s (no ON_CLICK behavior)", object_id)
            return None

        log.debug("Click on %s, launching ON_CLICK", object_id)
        return self._launch(procedure)

    def handle_key(self, event: KeyEvent) -> List[ProcedureInstance]:
        """Launch every ON_KEY procedure bound to the pressed key."""
        if not self.running:
            return []

        slot = key_slot(event.key)
        launched = []
        for procedures in list(self._registry.values()):
            procedure = procedures.get(slot)
            if procedure is not None:
                launched.append(self._launch(procedure))
        if not launched:
            log.debug("Key %r (no ON_KEY behavior)", event.key)
        return launched
