"""Tests for the cooperative tick loop."""

import asyncio
from unittest.mock import MagicMock

import pytest

from wiresim.config import SimulationConfig
from wiresim.exceptions import ConfigurationError
from wiresim.simulation import NetlistTracer, TickScheduler


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


def stop_after(scheduler, count):
    """Install an on_tick callback that stops the scheduler after ``count`` ticks."""
    states = []

    def on_tick(state):
        states.append(state)
        if len(states) >= count:
            scheduler.stop()

    scheduler.on_tick = on_tick
    return states


class TestStepOnce:
    """Tests for a single synchronous tick."""

    def test_step_samples_and_propagates(self, led_circuit, core_class):
        core = core_class([{10: 1}])
        scheduler = TickScheduler(core, NetlistTracer(led_circuit))

        state = scheduler.step_once()

        assert core.steps == [500_000]
        assert state.is_energized("led") is True
        assert scheduler.net_state is state
        assert scheduler.ticks == 1
        assert scheduler.levels == {n: (1 if n == 10 else 0) for n in range(14)}

    def test_each_tick_recomputes_from_scratch(self, led_circuit, core_class):
        core = core_class([{10: 1}, {10: 0}, {10: 1}])
        scheduler = TickScheduler(core, NetlistTracer(led_circuit))

        seen = [scheduler.step_once().is_energized("led") for _ in range(3)]
        assert seen == [True, False, True]
        assert scheduler.net_state.tick == 2

    def test_custom_batch_and_pin_range(self, led_circuit, fake_core):
        config = SimulationConfig(cycles_per_tick=1000, digital_pins=8)
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), config)
        scheduler.step_once()
        assert fake_core.steps == [1000]
        assert sorted(scheduler.levels) == list(range(8))

    def test_on_tick_receives_state(self, led_circuit, core_class):
        received = []
        scheduler = TickScheduler(
            core_class([{10: 1}]), NetlistTracer(led_circuit), on_tick=received.append
        )
        state = scheduler.step_once()
        assert received == [state]

    def test_simulated_seconds(self, led_circuit, fake_core):
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit))
        scheduler.step_once()
        scheduler.step_once()
        assert scheduler.simulated_seconds == pytest.approx(0.0625)

    def test_rejects_empty_batch(self, led_circuit, fake_core):
        with pytest.raises(ConfigurationError, match="positive"):
            TickScheduler(
                fake_core, NetlistTracer(led_circuit), SimulationConfig(cycles_per_tick=0)
            )


class TestLoop:
    """Tests for the self-rescheduling loop."""

    def test_runs_until_stopped(self, loop, led_circuit, core_class):
        core = core_class([{10: 1}])
        scheduler = TickScheduler(core, NetlistTracer(led_circuit), loop=loop)
        states = stop_after(scheduler, 3)

        scheduler.start()
        assert scheduler.running
        loop.run_until_complete(scheduler.wait_stopped())

        assert len(states) == 3
        assert scheduler.ticks == 3
        assert [s.tick for s in states] == [0, 1, 2]
        assert not scheduler.running
        assert core.stopped == 1

    def test_stop_before_first_iteration(self, loop, led_circuit, fake_core):
        """A stop request is honoured before any batch runs."""
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        scheduler.start()
        scheduler.stop()
        loop.run_until_complete(scheduler.wait_stopped())

        assert fake_core.steps == []
        assert fake_core.stopped == 1
        assert not scheduler.running

    def test_in_flight_batch_completes(self, loop, led_circuit, fake_core):
        """Stopping from inside a tick does not cut the tick short."""
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        states = stop_after(scheduler, 1)
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        assert len(states) == 1
        assert scheduler.net_state is states[0]
        assert len(fake_core.steps) == 1

    def test_restart_retires_old_callbacks(self, loop, led_circuit, fake_core):
        """Starting twice leaves a single live loop."""
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        stop_after(scheduler, 2)

        scheduler.start()
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        assert scheduler.ticks == 2
        assert len(fake_core.steps) == 2
        assert fake_core.stopped == 1

    def test_restart_after_stop(self, loop, led_circuit, fake_core):
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        stop_after(scheduler, 1)
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        stop_after(scheduler, 2)
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        assert scheduler.ticks == 3
        assert fake_core.stopped == 2

    def test_store_edits_between_ticks_are_seen(self, loop, led_circuit, core_class):
        """Deleting the LED mid-run drops it from the next state."""
        core = core_class([{10: 1}])
        scheduler = TickScheduler(core, NetlistTracer(led_circuit), loop=loop)
        states = []

        def on_tick(state):
            states.append(state)
            if len(states) == 1:
                led_circuit.delete_component("led")
            else:
                scheduler.stop()

        scheduler.on_tick = on_tick
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        assert states[0].is_energized("led") is True
        assert len(states[1]) == 0

    def test_uses_running_loop(self, led_circuit, fake_core):
        async def scenario():
            scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit))
            stop_after(scheduler, 2)
            scheduler.start()
            await scheduler.wait_stopped()
            return scheduler

        scheduler = asyncio.run(scenario())
        assert scheduler.ticks == 2

    def test_failing_tick_stops_the_loop(self, loop, led_circuit, fake_core):
        """A core that raises mid-run ends the loop and stops the core."""

        def broken_step(cycles):
            raise RuntimeError("illegal opcode")

        fake_core.step = broken_step
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        scheduler.start()

        with pytest.raises(RuntimeError, match="illegal opcode"):
            loop.run_until_complete(asyncio.wait_for(scheduler.wait_stopped(), 1.0))

        assert not scheduler.running
        assert fake_core.stopped == 1
        assert isinstance(scheduler.error, RuntimeError)

    def test_failing_on_tick_stops_the_loop(self, loop, led_circuit, fake_core):
        def on_tick(state):
            raise ValueError("renderer gone")

        scheduler = TickScheduler(
            fake_core, NetlistTracer(led_circuit), loop=loop, on_tick=on_tick
        )
        scheduler.start()

        with pytest.raises(ValueError):
            loop.run_until_complete(asyncio.wait_for(scheduler.wait_stopped(), 1.0))
        assert fake_core.stopped == 1

    def test_restart_clears_previous_error(self, loop, led_circuit, core_class):
        core = core_class([{10: 1}])
        real_step = core.step
        core.step = MagicMock(side_effect=RuntimeError("boom"))
        scheduler = TickScheduler(core, NetlistTracer(led_circuit), loop=loop)
        scheduler.start()
        with pytest.raises(RuntimeError):
            loop.run_until_complete(scheduler.wait_stopped())

        core.step = real_step
        stop_after(scheduler, 1)
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        assert scheduler.error is None
        assert scheduler.net_state.is_energized("led") is True

    def test_start_without_loop(self, led_circuit, fake_core):
        """Outside a running loop, start() refuses instead of inventing a loop."""
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit))

        with pytest.raises(ConfigurationError, match="No event loop"):
            scheduler.start()

        assert not scheduler.running
        assert fake_core.steps == []

    def test_wait_stopped_when_idle(self, loop, led_circuit, fake_core):
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        loop.run_until_complete(scheduler.wait_stopped())
        assert not scheduler.running


class TestInputInjection:
    """Tests for writing inputs into the core."""

    def test_inject_is_immediate(self, led_circuit, fake_core):
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit))
        scheduler.inject_input(2, 1)
        assert fake_core.inputs == [(2, 1)]
        assert fake_core.steps == []

    def test_level_is_normalized(self, led_circuit, fake_core):
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit))
        scheduler.inject_input(2, 5)
        scheduler.inject_input(2, 0)
        assert fake_core.inputs == [(2, 1), (2, 0)]

    def test_injected_between_ticks_precedes_next_batch(self, loop, led_circuit, fake_core):
        scheduler = TickScheduler(fake_core, NetlistTracer(led_circuit), loop=loop)
        order = []
        fake_step = fake_core.step

        def recording_step(cycles):
            order.append(("step", len(fake_core.inputs)))
            fake_step(cycles)

        fake_core.step = recording_step

        def on_tick(state):
            if scheduler.ticks == 1:
                scheduler.inject_input(2, 1)
            else:
                scheduler.stop()

        scheduler.on_tick = on_tick
        scheduler.start()
        loop.run_until_complete(scheduler.wait_stopped())

        assert order == [("step", 0), ("step", 1)]
