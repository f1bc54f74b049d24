"""
Propagate pin levels through a saved circuit.

Usage:
    wiresim trace <circuit.json> [options]

Examples:
    wiresim trace blink.json --high D10
    wiresim trace blink.json --high D10 --low D9 --format json
    wiresim trace blink.json --from uno.D10
"""

import argparse
import json
import sys
from typing import List

from rich.console import Console
from rich.table import Table

from ..circuit import Circuit
from ..config import Config, ConfigError
from ..exceptions import WireSimError
from ..simulation import NetlistTracer, NetState
from .utils import parse_endpoint, parse_levels, print_error


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the trace command."""
    parser = argparse.ArgumentParser(
        prog="wiresim trace",
        description="Show which indicators a set of pin levels energizes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("circuit", help="Path to circuit JSON file")
    parser.add_argument(
        "--high", action="append", metavar="PIN", help="Drive a digital pin high (repeatable)"
    )
    parser.add_argument(
        "--low", action="append", metavar="PIN", help="Drive a digital pin low (repeatable)"
    )
    parser.add_argument(
        "--from",
        dest="start",
        metavar="COMPONENT.PIN",
        help="List every endpoint reachable from one pin instead",
    )
    parser.add_argument("--format", choices=["table", "json"], help="Output format")

    args = parser.parse_args(argv)
    try:
        config = Config.load()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    output_format = args.format or config.defaults.format

    try:
        circuit = Circuit.load(args.circuit, wiring=config.wiring)
    except WireSimError as e:
        print_error(e)
        return 1

    tracer = NetlistTracer(circuit)

    if args.start:
        try:
            start = parse_endpoint(args.start)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if start.component_id not in circuit.placement:
            print(f"Error: Component '{start.component_id}' not found", file=sys.stderr)
            return 1

        reached = sorted(tracer.trace(start), key=lambda e: (e.component_id, e.pin_name))
        if output_format == "json":
            print(json.dumps([e.to_dict() for e in reached], indent=2))
        else:
            output_reached_table(circuit, reached)
        return 0

    try:
        levels = parse_levels(args.high, args.low)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    state = tracer.propagate(levels)
    if output_format == "json":
        print(json.dumps(state.to_dict(), indent=2))
    else:
        output_state_table(circuit, state)
    return 0


def output_state_table(circuit: Circuit, state: NetState) -> None:
    """Output sink states as a table."""
    console = Console()
    if not len(state):
        console.print("[dim]No indicators placed.[/dim]")
        return

    table = Table(title="Indicators")
    table.add_column("Component")
    table.add_column("Kind", style="dim")
    table.add_column("State")

    for component_id, on in state.energized.items():
        instance = circuit.get(component_id)
        kind = instance.kind.value if instance else "?"
        table.add_row(component_id, kind, "[green]ON[/green]" if on else "off")

    console.print(table)
    console.print(f"{len(state.energized_ids())} of {len(state)} energized")


def output_reached_table(circuit: Circuit, reached) -> None:
    """Output reached endpoints as a table."""
    console = Console()
    table = Table(title="Reached")
    table.add_column("Component")
    table.add_column("Pin")
    table.add_column("Kind", style="dim")

    for endpoint in reached:
        instance = circuit.get(endpoint.component_id)
        kind = instance.kind.value if instance else "?"
        table.add_row(endpoint.component_id, endpoint.pin_name, kind)

    console.print(table)
