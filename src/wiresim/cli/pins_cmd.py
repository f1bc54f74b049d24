"""
List component kinds and their pin geometry.

Usage:
    wiresim pins                      List every kind with its role and size
    wiresim pins <kind> [--at X Y]    Pin offsets, or absolute positions at X,Y
"""

import argparse
import json
import sys
from typing import List

from rich.console import Console
from rich.table import Table

from ..catalog import ComponentKind, PinCatalog, board_pin_number


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the pins command."""
    parser = argparse.ArgumentParser(
        prog="wiresim pins",
        description="Show the pin catalogue",
    )
    parser.add_argument("kind", nargs="?", help="Component kind, e.g. arduino-uno")
    parser.add_argument(
        "--at",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        help="Resolve pins for an instance placed at X,Y",
    )
    parser.add_argument("--format", choices=["table", "json"], default="table")

    args = parser.parse_args(argv)
    catalog = PinCatalog.default()

    if not args.kind:
        return _list_kinds(args.format)

    try:
        kind = ComponentKind.from_string(args.kind)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    position = tuple(args.at) if args.at else (0.0, 0.0)
    rows = []
    for name in catalog.pins(kind):
        x, y = catalog.resolve(kind, name, position)
        rows.append({"pin": name, "x": x, "y": y, "digital": board_pin_number(name)})

    if args.format == "json":
        print(json.dumps({"kind": kind.value, "role": kind.role.value, "pins": rows}, indent=2))
        return 0

    title = f"{kind.value} pins" + (f" at ({position[0]:g}, {position[1]:g})" if args.at else "")
    table = Table(title=title)
    table.add_column("Pin")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Driver", style="dim")
    for row in rows:
        table.add_row(
            row["pin"],
            f"{row['x']:g}",
            f"{row['y']:g}",
            "yes" if kind.is_board and row["digital"] is not None else "",
        )
    Console().print(table)
    return 0


def _list_kinds(output_format: str) -> int:
    catalog = PinCatalog.default()
    kinds = [
        {
            "kind": kind.value,
            "role": kind.role.value,
            "width": kind.size[0],
            "height": kind.size[1],
            "pins": len(catalog.pins(kind)),
        }
        for kind in ComponentKind
    ]

    if output_format == "json":
        print(json.dumps(kinds, indent=2))
        return 0

    table = Table(title="Component kinds")
    table.add_column("Kind")
    table.add_column("Role")
    table.add_column("Size", justify="right")
    table.add_column("Pins", justify="right")
    for entry in kinds:
        table.add_row(
            entry["kind"],
            entry["role"],
            f"{entry['width']:g}x{entry['height']:g}",
            str(entry["pins"]),
        )
    Console().print(table)
    return 0
