"""
Step clock and procedure instances.

Every running procedure is a ProcedureInstance wrapping a generator. The
generator yields a wake condition at each suspension point:

- NEXT_TICK: resume on the next clock tick (one interpolation step)
- Sleep(seconds): resume on the first tick whose clock time has advanced
  by at least ``seconds``

A single StepClock per session owns all suspended instances and resumes the
due ones on each tick(dt). Once the session stops running the clock no
longer dispatches, and an instance that is resumed while the session is
stopped aborts instead of running its next step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generator, List, Optional, TYPE_CHECKING

from logicflow.logging import emit_record, get_logger

if TYPE_CHECKING:
    from logicflow.compiler import Procedure

log = get_logger('runtime')

# Tolerance for accumulated float dt when comparing against sleep deadlines
_TIME_EPSILON = 1e-9


class InstanceState(Enum):
    """Lifecycle of a procedure instance."""
    PENDING = "pending"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (InstanceState.COMPLETED, InstanceState.ABORTED)


@dataclass(frozen=True)
class NextTick:
    """Wake on the next clock tick."""


@dataclass(frozen=True)
class Sleep:
    """Wake once ``seconds`` of clock time have elapsed (at least one tick)."""
    seconds: float


NEXT_TICK = NextTick()

WakeCondition = Any  # NextTick | Sleep
ProcedureBody = Generator[WakeCondition, None, None]


@dataclass
class _Waiter:
    instance: "ProcedureInstance"
    registered_frame: int
    until: Optional[float]  # None for NextTick

    def is_due(self, now: float, frame: int) -> bool:
        if frame <= self.registered_frame:
            return False
        return self.until is None or now + _TIME_EPSILON >= self.until


class StepClock:
    """
    Shared clock driving every suspended instance of one session.

    Args:
        is_running: Returns False once the session has stopped
    """

    def __init__(self, is_running: Callable[[], bool]):
        self._is_running = is_running
        self.now = 0.0
        self.frame = 0
        self._waiting: List[_Waiter] = []

    @property
    def pending(self) -> int:
        """Number of suspended instances waiting on this clock."""
        return len(self._waiting)

    def schedule(self, instance: "ProcedureInstance", wake: WakeCondition) -> None:
        """Register a wake condition for a suspended instance.

        Raises:
            TypeError: If wake is not NextTick or Sleep
        """
        if isinstance(wake, NextTick):
            until = None
        elif isinstance(wake, Sleep):
            until = self.now + max(0.0, float(wake.seconds))
        else:
            raise TypeError(f"Unknown wake condition: {wake!r}")
        self._waiting.append(_Waiter(instance, self.frame, until))

    def discard(self, instance: "ProcedureInstance") -> None:
        """Drop any wake registration for an instance."""
        self._waiting = [w for w in self._waiting if w.instance is not instance]

    def tick(self, dt: float) -> int:
        """
        Advance clock time and resume due instances.

        Instances resume in registration order. An instance that suspends
        again during this tick waits for a later tick.

        Args:
            dt: Elapsed time in seconds since the previous tick

        Returns:
            Number of instances resumed
        """
        if not self._is_running():
            return 0

        self.frame += 1
        self.now += max(0.0, dt)

        due: List[_Waiter] = []
        waiting: List[_Waiter] = []
        for waiter in self._waiting:
            (due if waiter.is_due(self.now, self.frame) else waiting).append(waiter)
        self._waiting = waiting

        resumed = 0
        for waiter in due:
            waiter.instance.resume()
            resumed += 1
        return resumed


class ProcedureInstance:
    """
    One execution of a procedure.

    State machine: PENDING -> RUNNING -> (SUSPENDED <-> RUNNING)* -> COMPLETED,
    with ABORTED reached when a suspended instance is resumed or aborted after
    its session stopped, or when its body raises. Terminal states are final.

    Errors raised by the body are caught and logged here, at the instance
    boundary; they never propagate to the runtime or other instances.
    """

    def __init__(
        self,
        instance_id: int,
        procedure: "Procedure",
        body: ProcedureBody,
        clock: StepClock,
        is_running: Callable[[], bool],
    ):
        self.instance_id = instance_id
        self.procedure = procedure
        self.state = InstanceState.PENDING
        self.error: Optional[BaseException] = None
        self._body = body
        self._clock = clock
        self._is_running = is_running
        self._abort_requested = False

    @property
    def object_id(self) -> str:
        return self.procedure.object_id

    @property
    def done(self) -> bool:
        return self.state.is_terminal

    def _record(self, event_type: str, **extra: Any) -> None:
        emit_record('runtime', {
            'type': event_type,
            'instance': self.instance_id,
            'object_id': self.procedure.object_id,
            'trigger': self.procedure.trigger.value,
            **extra,
        })

    def start(self) -> None:
        """Run from PENDING up to the first suspension (or the end)."""
        if self.state != InstanceState.PENDING:
            return
        self._record('instance_started')
        self._step()

    def resume(self) -> None:
        """Continue a suspended instance."""
        if self.state != InstanceState.SUSPENDED:
            return
        if not self._is_running() or self._abort_requested:
            self.abort("session stopped")
            return
        self._step()

    def abort(self, reason: str = "aborted") -> None:
        """Stop the instance without running any further steps."""
        if self.state.is_terminal:
            return
        if self.state == InstanceState.RUNNING:
            # Inside its own step; abort at the next suspension
            self._abort_requested = True
            return
        self._clock.discard(self)
        self._body.close()
        self._finish(InstanceState.ABORTED, reason=reason)

    def _step(self) -> None:
        self.state = InstanceState.RUNNING
        try:
            wake = self._body.send(None)
        except StopIteration:
            self._finish(InstanceState.COMPLETED)
            return
        except Exception as e:
            self.error = e
            log.error("Error executing %s for object %s: %s",
                      self.procedure.trigger.value, self.procedure.object_id, e)
            log.log_traceback(e)
            self._finish(InstanceState.ABORTED, reason=f"{type(e).__name__}: {e}")
            return

        self.state = InstanceState.SUSPENDED
        if self._abort_requested or not self._is_running():
            self.abort("session stopped")
            return
        try:
            self._clock.schedule(self, wake)
        except TypeError as e:
            self.error = e
            log.error("Instance %d yielded %r", self.instance_id, wake)
            self.abort(str(e))

    def _finish(self, state: InstanceState, reason: Optional[str] = None) -> None:
        self.state = state
        if state == InstanceState.COMPLETED:
            log.debug("Instance %d (%s) completed", self.instance_id, self.procedure)
            self._record('instance_completed')
        else:
            log.debug("Instance %d (%s) aborted: %s", self.instance_id, self.procedure, reason)
            self._record('instance_aborted', reason=reason)

    def __repr__(self) -> str:
        return (f"ProcedureInstance({self.instance_id}, {self.procedure.object_id}/"
                f"{self.procedure.trigger.value}, {self.state.value})")
