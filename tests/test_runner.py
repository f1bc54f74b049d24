"""Tests for the simulation runner."""

import asyncio
from unittest.mock import MagicMock

import pytest

from wiresim.catalog import ComponentKind
from wiresim.circuit import Point
from wiresim.exceptions import CompileError, ConfigurationError, ProgramMissingError
from wiresim.simulation import CompileClient, CompileResult, SimulationRunner


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def compiler(program_hex):
    client = MagicMock(spec=CompileClient)
    client.compile.return_value = CompileResult(success=True, hex=program_hex, board="uno")
    return client


@pytest.fixture
def cores(core_class):
    """Core factory that records every core and program it was built with."""
    built = []

    def factory(program):
        core = core_class([{10: 1}])
        core.program = program
        built.append(core)
        return core

    factory.built = built
    return factory


def stop_after(runner, count):
    states = []

    def on_tick(state):
        states.append(state)
        if len(states) >= count:
            runner.stop()

    runner.on_tick = on_tick
    return states


class TestRun:
    """Tests for starting runs."""

    def test_run_compiles_and_ticks(self, loop, led_circuit, compiler, cores, program_hex):
        runner = SimulationRunner(led_circuit, compiler, cores, loop=loop)
        states = stop_after(runner, 2)

        scheduler = runner.run("void setup() {}")
        assert runner.running
        loop.run_until_complete(scheduler.wait_stopped())

        compiler.compile.assert_called_once_with("void setup() {}", None)
        assert cores.built[0].program == program_hex
        assert [s.is_energized("led") for s in states] == [True, True]
        assert runner.net_state.is_energized("led") is True
        assert not runner.running
        assert cores.built[0].stopped == 1

    def test_run_passes_board_id(self, loop, led_circuit, compiler, cores):
        runner = SimulationRunner(led_circuit, compiler, cores, loop=loop)
        runner.run("src", board_id="nano")
        runner.stop()
        compiler.compile.assert_called_once_with("src", "nano")

    def test_new_run_stops_previous(self, loop, led_circuit, compiler, cores):
        runner = SimulationRunner(led_circuit, compiler, cores, loop=loop)
        stop_after(runner, 1)
        first = runner.run("one")
        second = runner.run("two")

        assert first.stopping
        assert runner.scheduler is second
        loop.run_until_complete(second.wait_stopped())
        loop.run_until_complete(first.wait_stopped())

        assert cores.built[0].stopped == 1
        assert cores.built[0].steps == []
        assert len(cores.built[1].steps) == 1

    def test_consecutive_runs_share_the_running_loop(self, led_circuit, compiler, cores):
        """Without an explicit loop, every run ticks on the loop running at the time."""

        async def scenario():
            runner = SimulationRunner(led_circuit, compiler, cores)
            stop_after(runner, 2)
            first = runner.run("one")
            second = runner.run("two")
            await second.wait_stopped()
            await first.wait_stopped()
            return runner, first, second

        runner, first, second = asyncio.run(scenario())

        assert first.loop is second.loop
        assert runner.loop is first.loop
        assert not first.running
        assert not second.running
        assert cores.built[0].stopped == 1
        assert cores.built[0].steps == []
        assert len(cores.built[1].steps) == 2

    def test_run_without_loop(self, led_circuit, compiler, cores):
        """Outside a running loop the run is refused before a core is built."""
        runner = SimulationRunner(led_circuit, compiler, cores)

        with pytest.raises(ConfigurationError, match="No event loop"):
            runner.run("src")

        assert cores.built == []
        assert runner.scheduler is None

    def test_net_state_before_any_run(self, led_circuit, compiler, cores):
        runner = SimulationRunner(led_circuit, compiler, cores)
        assert len(runner.net_state) == 0
        assert not runner.running


class TestRunFailures:
    """Tests for runs that cannot start."""

    def test_compile_failure(self, loop, led_circuit, compiler, cores):
        """The previous run is stopped and the circuit is left alone."""
        runner = SimulationRunner(led_circuit, compiler, cores, loop=loop)
        previous = runner.run("good")
        before = led_circuit.to_dict()

        compiler.compile.return_value = CompileResult(
            success=False, stderr="sketch.ino:3: error: expected ';'", board="uno"
        )
        with pytest.raises(CompileError, match="failed to compile") as exc_info:
            runner.run("bad")

        assert "expected ';'" in exc_info.value.context["diagnostics"]
        assert previous.stopping
        assert len(cores.built) == 1
        assert led_circuit.to_dict() == before

        loop.run_until_complete(previous.wait_stopped())
        assert cores.built[0].stopped == 1

    def test_compile_service_error(self, loop, led_circuit, compiler, cores):
        runner = SimulationRunner(led_circuit, compiler, cores, loop=loop)
        previous = runner.run("good")

        compiler.compile.side_effect = CompileError("Compile service request failed")
        with pytest.raises(CompileError, match="request failed"):
            runner.run("again")

        assert previous.stopping
        assert len(cores.built) == 1

    def test_missing_program(self, led_circuit, compiler, cores):
        compiler.compile.return_value = CompileResult(success=True, hex="", board="uno")
        runner = SimulationRunner(led_circuit, compiler, cores)

        with pytest.raises(ProgramMissingError):
            runner.run("src")

        assert cores.built == []
        assert runner.scheduler is None


class TestButtons:
    """Tests for pressing and releasing input components."""

    @pytest.fixture
    def button_circuit(self, led_circuit):
        led_circuit.place(ComponentKind.PUSHBUTTON, Point(400, 200), "btn", auto_wire=True)
        return led_circuit

    def test_press_and_release(self, loop, button_circuit, compiler, cores):
        runner = SimulationRunner(button_circuit, compiler, cores, loop=loop)
        runner.run("src")

        assert runner.press("btn") == [2]
        assert runner.release("btn") == [2]
        assert cores.built[0].inputs == [(2, 1), (2, 0)]
        runner.stop()

    def test_press_without_run(self, button_circuit, compiler, cores):
        runner = SimulationRunner(button_circuit, compiler, cores)
        assert runner.press("btn") == []

    def test_press_unwired_component(self, loop, led_circuit, compiler, cores):
        led_circuit.place(ComponentKind.PUSHBUTTON, Point(400, 200), "btn", auto_wire=False)
        runner = SimulationRunner(led_circuit, compiler, cores, loop=loop)
        runner.run("src")
        assert runner.press("btn") == []
        assert runner.press("ghost") == []
        assert cores.built[0].inputs == []
        runner.stop()
