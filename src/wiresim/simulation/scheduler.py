"""
Cooperative tick loop.

Each tick advances the execution core by a fixed batch of cycles, samples the
digital pins, and recomputes the sink states from scratch. The loop runs as a
callback that re-queues itself on an asyncio event loop with ``call_soon``,
so pointer events and store edits are handled between ticks, never during
one.

Stopping is cooperative: :meth:`TickScheduler.stop` sets a flag that the next
iteration checks before doing any work. A batch that has started always
finishes. A tick that raises ends the loop as if stopped; the exception is
kept on ``error`` and re-raised by :meth:`TickScheduler.wait_stopped`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from ..config import SimulationConfig
from ..exceptions import ConfigurationError
from .core import ExecutionCore
from .netlist import NetlistTracer, NetState

logger = logging.getLogger(__name__)

TickCallback = Callable[[NetState], None]


class TickScheduler:
    """
    Drives an execution core and publishes a :class:`NetState` per tick.

    Args:
        core: Pin-level execution core
        tracer: Netlist tracer for the circuit being simulated
        config: Cycle batch size and pin range
        loop: Event loop to schedule on (default: the running or current loop)
        on_tick: Called with each new state after it is fully computed

    Raises:
        ConfigurationError: If the cycle batch or pin count is not positive
    """

    def __init__(
        self,
        core: ExecutionCore,
        tracer: NetlistTracer,
        config: Optional[SimulationConfig] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_tick: Optional[TickCallback] = None,
    ):
        self.core = core
        self.tracer = tracer
        self.config = config or SimulationConfig()
        if self.config.cycles_per_tick <= 0 or self.config.digital_pins <= 0:
            raise ConfigurationError(
                "Simulation needs a positive cycle batch and pin count",
                context={
                    "cycles_per_tick": self.config.cycles_per_tick,
                    "digital_pins": self.config.digital_pins,
                },
                suggestions=["Check the [simulation] section of .wiresim.toml"],
            )
        self.on_tick = on_tick
        self._loop = loop

        self.ticks = 0
        self.net_state = NetState()
        self.levels: Dict[int, int] = {}

        self._stopping = True
        self._running = False
        self._generation = 0
        self._stopped: Optional[asyncio.Event] = None
        self.error: Optional[BaseException] = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """
        Event loop the ticks are queued on.

        Raises:
            ConfigurationError: If no loop was given and none is running
        """
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                raise ConfigurationError(
                    "No event loop to run the simulation on",
                    suggestions=[
                        "Start the simulation from a coroutine",
                        "Pass loop= explicitly",
                    ],
                ) from None
        return self._loop

    @property
    def running(self) -> bool:
        return self._running

    @property
    def stopping(self) -> bool:
        return self._stopping

    def start(self) -> None:
        """
        Start ticking.

        Starting a scheduler that is already running restarts it: callbacks
        queued by the earlier run are retired and do nothing.

        Raises:
            ConfigurationError: If there is no event loop to schedule on
        """
        loop = self.loop
        if self._running:
            logger.debug("Restarting tick loop")

        self._generation += 1
        self._stopped = asyncio.Event()
        self._stopping = False
        self._running = True
        self.error = None
        generation = self._generation
        logger.info(
            f"Starting tick loop ({self.config.cycles_per_tick} cycles/tick, "
            f"{self.config.digital_pins} pins)"
        )
        loop.call_soon(self._iteration, generation)

    def stop(self) -> None:
        """Request a stop; takes effect at the top of the next iteration."""
        self._stopping = True

    def _finish(self) -> None:
        self._running = False
        self.core.stop()
        if self._stopped is not None:
            self._stopped.set()
        logger.info(f"Tick loop stopped after {self.ticks} tick(s)")

    def _iteration(self, generation: int) -> None:
        if generation != self._generation:
            return
        if self._stopping:
            if self._running:
                self._finish()
            return

        try:
            self.step_once()
        except Exception as e:
            logger.exception(f"Tick {self.ticks} failed; stopping")
            self.error = e
            self._stopping = True
            self._finish()
            return
        self.loop.call_soon(self._iteration, generation)

    def step_once(self) -> NetState:
        """
        Run one tick synchronously: step, sample, recompute, publish.

        Returns:
            The newly computed state
        """
        started = time.perf_counter()
        self.core.step(self.config.cycles_per_tick)

        levels = {
            pin: self.core.get_pin_state(pin) for pin in range(self.config.digital_pins)
        }
        state = self.tracer.propagate(levels, tick=self.ticks)

        self.levels = levels
        self.net_state = state
        self.ticks += 1

        logger.debug(
            f"Tick {state.tick}: {len(state.energized_ids())} energized "
            f"in {(time.perf_counter() - started) * 1000:.1f} ms"
        )
        if self.on_tick is not None:
            self.on_tick(state)
        return state

    async def wait_stopped(self) -> None:
        """
        Wait until the loop has processed a stop request.

        Re-raises the exception that ended the loop, if a tick failed.
        """
        if self._stopped is not None and self._running:
            await self._stopped.wait()
        if self.error is not None:
            raise self.error

    def inject_input(self, pin: int, level: int) -> None:
        """Write an input level into the core immediately."""
        level = 1 if level else 0
        logger.debug(f"Input D{pin} <- {level}")
        self.core.set_digital_input(pin, level)

    @property
    def simulated_seconds(self) -> float:
        return self.ticks * self.config.tick_seconds
