"""Tests for the step clock and procedure instance state machine."""

import pytest

from models import Trigger
from logicflow.compiler import Procedure
from logicflow.runtime.clock import (
    NEXT_TICK,
    InstanceState,
    ProcedureInstance,
    Sleep,
    StepClock,
)

from conftest import DT

PROCEDURE = Procedure(object_id="a", trigger=Trigger.ON_START, operations=())


class Session:
    """Running flag plus clock, standing in for a runtime context."""

    def __init__(self):
        self.running = True
        self.clock = StepClock(lambda: self.running)
        self._next_id = 0

    def launch(self, body):
        self._next_id += 1
        instance = ProcedureInstance(self._next_id, PROCEDURE, body, self.clock,
                                     lambda: self.running)
        instance.start()
        return instance

    def ticks(self, count, dt=DT):
        for _ in range(count):
            self.clock.tick(dt)


@pytest.fixture
def session():
    return Session()


def yields(*wakes, log=None, name=None):
    for wake in wakes:
        if log is not None:
            log.append(name)
        yield wake
    if log is not None:
        log.append(name)


class TestNextTick:

    def test_runs_to_first_suspension_on_start(self, session):
        instance = session.launch(yields(NEXT_TICK))
        assert instance.state == InstanceState.SUSPENDED
        assert session.clock.pending == 1

    def test_resumes_once_per_tick(self, session):
        instance = session.launch(yields(NEXT_TICK, NEXT_TICK, NEXT_TICK))

        session.ticks(1)
        assert instance.state == InstanceState.SUSPENDED
        session.ticks(2)
        assert instance.state == InstanceState.COMPLETED

    def test_empty_body_completes_immediately(self, session):
        instance = session.launch(yields())
        assert instance.state == InstanceState.COMPLETED
        assert instance.done

    def test_registration_order(self, session):
        order = []
        session.launch(yields(NEXT_TICK, log=order, name="first"))
        session.launch(yields(NEXT_TICK, log=order, name="second"))
        order.clear()

        session.ticks(1)

        assert order == ["first", "second"]

    def test_tick_returns_resumed_count(self, session):
        session.launch(yields(NEXT_TICK))
        session.launch(yields(NEXT_TICK))
        assert session.clock.tick(DT) == 2
        assert session.clock.tick(DT) == 0


class TestSleep:

    def test_wakes_when_time_has_elapsed(self, session):
        instance = session.launch(yields(Sleep(0.5)))

        session.ticks(31)
        assert instance.state == InstanceState.SUSPENDED
        session.ticks(1)
        assert instance.state == InstanceState.COMPLETED

    def test_zero_sleep_needs_one_tick(self, session):
        instance = session.launch(yields(Sleep(0)))
        assert instance.state == InstanceState.SUSPENDED

        session.clock.tick(0.0)
        assert instance.state == InstanceState.COMPLETED

    def test_accumulated_float_dt(self, session):
        instance = session.launch(yields(Sleep(1.0)))
        session.ticks(9, dt=0.1)
        assert instance.state == InstanceState.SUSPENDED
        session.ticks(1, dt=0.1)
        assert instance.state == InstanceState.COMPLETED


class TestStateMachine:

    def test_error_aborts_only_that_instance(self, session):
        def failing():
            yield NEXT_TICK
            raise ValueError("boom")

        bad = session.launch(failing())
        good = session.launch(yields(NEXT_TICK, NEXT_TICK))

        session.ticks(2)

        assert bad.state == InstanceState.ABORTED
        assert isinstance(bad.error, ValueError)
        assert good.state == InstanceState.COMPLETED

    def test_abort_closes_suspended_body(self, session):
        closed = []

        def body():
            try:
                yield NEXT_TICK
                yield NEXT_TICK
            finally:
                closed.append(True)

        instance = session.launch(body())
        instance.abort("test")

        assert instance.state == InstanceState.ABORTED
        assert closed == [True]
        assert session.clock.pending == 0

    def test_abort_is_final(self, session):
        instance = session.launch(yields())
        instance.abort()
        assert instance.state == InstanceState.COMPLETED

    def test_stopped_clock_does_not_dispatch(self, session):
        instance = session.launch(yields(NEXT_TICK))
        session.running = False

        assert session.clock.tick(DT) == 0
        assert session.clock.frame == 0
        assert instance.state == InstanceState.SUSPENDED

    def test_resume_after_stop_aborts(self, session):
        steps = []
        instance = session.launch(yields(NEXT_TICK, log=steps, name="x"))
        session.running = False

        instance.resume()

        assert instance.state == InstanceState.ABORTED
        assert steps == ["x"]

    def test_unknown_wake_condition_aborts(self, session):
        instance = session.launch(yields("soon"))

        assert instance.state == InstanceState.ABORTED
        assert isinstance(instance.error, TypeError)

    def test_schedule_rejects_unknown_wake(self, session):
        with pytest.raises(TypeError):
            session.clock.schedule(object(), 3)
