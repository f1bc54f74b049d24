"""
Config command for wiresim CLI.

Provides commands to view and initialize configuration.

Usage:
    wiresim config --show          Show effective configuration with sources
    wiresim config --init          Create template config file
    wiresim config --paths         Show config file locations
    wiresim config get <key>       Get a specific config value
"""

import argparse
import sys
from dataclasses import fields
from pathlib import Path

from ..config import (
    CONFIG_FILENAMES,
    KNOWN_KEYS,
    USER_CONFIG_PATH,
    Config,
    ConfigError,
    generate_template,
    get_config_paths,
)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for config command."""
    parser = argparse.ArgumentParser(
        prog="wiresim config",
        description="Manage wiresim configuration",
    )

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument(
        "--show",
        action="store_true",
        help="Show effective configuration with sources",
    )
    action_group.add_argument(
        "--init",
        action="store_true",
        help="Create template config file in current directory",
    )
    action_group.add_argument(
        "--paths",
        action="store_true",
        help="Show config file paths",
    )

    parser.add_argument(
        "action",
        nargs="?",
        choices=["get"],
        help="Config action",
    )
    parser.add_argument(
        "key",
        nargs="?",
        help="Config key (e.g., simulation.cycles_per_tick)",
    )
    parser.add_argument(
        "--user",
        action="store_true",
        help="Use user config (~/.config/wiresim/config.toml) for --init",
    )

    args = parser.parse_args(argv)

    try:
        if args.show:
            return _show_config()
        elif args.init:
            return _init_config(args.user)
        elif args.paths:
            return _show_paths()
        elif args.action == "get":
            if not args.key:
                print("Error: 'get' requires a key argument", file=sys.stderr)
                return 1
            return _get_config(args.key)
        else:
            return _show_config()

    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _show_config() -> int:
    """Show effective configuration with sources."""
    config = Config.load()

    print("# Effective wiresim configuration")

    for section in KNOWN_KEYS:
        print()
        print(f"[{section}]")
        section_obj = getattr(config, section)
        for f in fields(section_obj):
            key = f"{section}.{f.name}"
            _print_value(f.name, getattr(section_obj, f.name), config.get_source(key))

    return 0


def _print_value(key: str, value, source: str) -> None:
    """Print a config value with its source."""
    if isinstance(value, str):
        formatted = f'"{value}"'
    elif isinstance(value, bool):
        formatted = "true" if value else "false"
    elif value is None:
        formatted = "# not set"
    else:
        formatted = str(value)

    source_display = Path(source).name if source != "default" else source
    print(f"{key} = {formatted}  # from: {source_display}")


def _show_paths() -> int:
    """Show config file paths."""
    paths = get_config_paths()

    print("Config file paths:")
    print()

    print(f"User config: {USER_CONFIG_PATH}")
    print("  Status: exists" if paths["user"] else "  Status: not found")
    print()

    print(f"Project config search: {', '.join(CONFIG_FILENAMES)}")
    if paths["project"]:
        print(f"  Found: {paths['project']}")
    else:
        print("  Status: not found")

    return 0


def _init_config(user: bool = False) -> int:
    """Create a template config file."""
    if user:
        target = USER_CONFIG_PATH
        target.parent.mkdir(parents=True, exist_ok=True)
    else:
        target = Path.cwd() / CONFIG_FILENAMES[0]  # .wiresim.toml

    if target.exists():
        print(f"Error: Config file already exists: {target}", file=sys.stderr)
        print("Remove it first or edit manually.", file=sys.stderr)
        return 1

    try:
        target.write_text(generate_template())
    except OSError as e:
        print(f"Error writing config file: {e}", file=sys.stderr)
        return 1

    print(f"Created config template: {target}")
    print()
    print("Uncomment and modify values as needed.")
    return 0


def _get_config(key: str) -> int:
    """Get a specific config value."""
    config = Config.load()

    if key.count(".") != 1:
        print(f"Error: Invalid key format '{key}'. Use 'section.key' format.", file=sys.stderr)
        return 1

    try:
        value = config.get(key)
    except KeyError:
        print(f"Error: Unknown config key '{key}'", file=sys.stderr)
        return 1

    if isinstance(value, bool):
        print("true" if value else "false")
    else:
        print(value)

    source = config.get_source(key)
    if source != "default":
        print(f"# source: {source}", file=sys.stderr)

    return 0
