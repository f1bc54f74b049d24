"""
Check a saved circuit for suspicious wiring.

Usage:
    wiresim check <circuit.json> [--strict]

Partial wiring is legal, so findings are warnings. With ``--strict`` any
finding makes the command exit with status 1.
"""

import argparse
import json
import sys
from typing import List

from rich.console import Console

from ..circuit import Circuit
from ..config import Config, ConfigError
from ..exceptions import ValidationError, WireSimError
from .utils import print_error


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the check command."""
    parser = argparse.ArgumentParser(
        prog="wiresim check",
        description="Check a circuit file for suspicious wiring",
    )
    parser.add_argument("circuit", help="Path to circuit JSON file")
    parser.add_argument("--strict", action="store_true", help="Fail on any warning")
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

    issues = circuit.check()

    if output_format == "json":
        print(
            json.dumps(
                {
                    "components": len(circuit.placement),
                    "wires": len(circuit.wires),
                    "warnings": issues,
                },
                indent=2,
            )
        )
    elif not config.defaults.quiet or issues:
        console = Console()
        console.print(f"[bold]{args.circuit}[/bold]: {circuit!r}")
        if issues:
            for issue in issues:
                console.print(f"  [yellow]warning[/yellow] {issue}")
        else:
            console.print("  [green]No issues found[/green]")

    if issues and args.strict:
        print_error(ValidationError(issues, context={"file": args.circuit}))
        return 1
    return 0
