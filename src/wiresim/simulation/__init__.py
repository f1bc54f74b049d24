"""
Simulation: net tracing, the execution-core boundary, and the tick loop.
"""

from .compiler import CompileClient, CompileResult
from .core import AvrPinMap, ExecutionCore, load_hex, program_size
from .netlist import NetlistTracer, NetState, propagate
from .runner import SimulationRunner
from .scheduler import TickScheduler

__all__ = [
    "NetlistTracer",
    "NetState",
    "propagate",
    "ExecutionCore",
    "AvrPinMap",
    "load_hex",
    "program_size",
    "CompileClient",
    "CompileResult",
    "TickScheduler",
    "SimulationRunner",
]
