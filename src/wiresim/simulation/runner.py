"""
Simulation lifecycle.

Ties together compiling a sketch, creating an execution core for the program,
and running the tick loop over the circuit. Starting a run always stops the
previous one first, including when the new run fails to compile.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from ..circuit import Circuit
from ..config import Config
from ..exceptions import CompileError, ConfigurationError, ProgramMissingError
from .compiler import CompileClient, CompileResult
from .core import ExecutionCore
from .netlist import NetlistTracer, NetState
from .scheduler import TickCallback, TickScheduler

logger = logging.getLogger(__name__)

CoreFactory = Callable[[str], ExecutionCore]


class SimulationRunner:
    """
    Runs sketches against a circuit.

    Args:
        circuit: Circuit to simulate
        compiler: Compile service client
        core_factory: Builds an execution core from Intel HEX program text
        config: Simulation and compile settings (default: built-in defaults)
        loop: Event loop shared by every run (default: the loop running
            when the first run starts)
        on_tick: Called with each new :class:`NetState`

    Example::

        async def main():
            runner = SimulationRunner(circuit, CompileClient(), make_core)
            scheduler = runner.run(Path("blink.ino").read_text())
            ...
            runner.press("pushbutton-1")
            runner.stop()
            await scheduler.wait_stopped()
    """

    def __init__(
        self,
        circuit: Circuit,
        compiler: CompileClient,
        core_factory: CoreFactory,
        config: Optional[Config] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_tick: Optional[TickCallback] = None,
    ):
        self.circuit = circuit
        self.compiler = compiler
        self.core_factory = core_factory
        self.config = config or Config()
        self.loop = loop
        self.on_tick = on_tick

        self.scheduler: Optional[TickScheduler] = None
        self.last_result: Optional[CompileResult] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    @property
    def net_state(self) -> NetState:
        """Latest published state; all sinks off when nothing has run."""
        if self.scheduler is None:
            return NetState()
        return self.scheduler.net_state

    def run(self, source_text: str, board_id: Optional[str] = None) -> TickScheduler:
        """
        Compile ``source_text`` and start simulating it.

        Raises:
            CompileError: If the sketch does not compile or the service fails
            ProgramMissingError: If compilation succeeded without a program
            ConfigurationError: If no loop was given and none is running
        """
        self.stop()

        result = self.compiler.compile(source_text, board_id)
        self.last_result = result
        if not result.success:
            raise CompileError(
                "Sketch failed to compile",
                context={"board": result.board, "diagnostics": result.diagnostics.strip()},
                suggestions=["Fix the reported errors and run again"],
            )
        if result.program is None:
            raise ProgramMissingError(
                "Compile succeeded but returned no program",
                context={"board": result.board},
                suggestions=["Check the compile service logs"],
            )

        return self.start(result.program)

    def start(self, program: str) -> TickScheduler:
        """
        Start simulating an already compiled program.

        Raises:
            ConfigurationError: If no loop was given and none is running
        """
        self.stop()

        loop = self._resolve_loop()
        core = self.core_factory(program)
        scheduler = TickScheduler(
            core,
            NetlistTracer(self.circuit),
            self.config.simulation,
            loop=loop,
            on_tick=self.on_tick,
        )
        scheduler.start()
        self.scheduler = scheduler
        logger.info("Simulation started")
        return scheduler

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self.loop is None:
            try:
                self.loop = asyncio.get_running_loop()
            except RuntimeError:
                raise ConfigurationError(
                    "No event loop to run the simulation on",
                    suggestions=["Call run() from a coroutine", "Pass loop= to SimulationRunner"],
                ) from None
        return self.loop

    def stop(self) -> None:
        """Stop the current run, if any."""
        if self.scheduler is not None and not self.scheduler.stopping:
            logger.info("Stopping simulation")
            self.scheduler.stop()

    def _inject(self, component_id: str, level: int) -> List[int]:
        if self.scheduler is None:
            return []
        pins = self.scheduler.tracer.input_pins(component_id)
        for pin in pins:
            self.scheduler.inject_input(pin, level)
        return pins

    def press(self, component_id: str) -> List[int]:
        """
        Press an input component.

        Drives every board digital pin wired to it high. Returns the pins
        written, empty when nothing is running or nothing is wired.
        """
        return self._inject(component_id, 1)

    def release(self, component_id: str) -> List[int]:
        """Release an input component, driving its pins low."""
        return self._inject(component_id, 0)
