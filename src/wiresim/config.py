"""
Configuration file support for wiresim.

Provides hierarchical configuration loading from:
1. Project config: .wiresim.toml or wiresim.toml in project root
2. User config: ~/.config/wiresim/config.toml

CLI arguments override config file values, and project config overrides user config.
"""

import tomllib
import warnings
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

# Config file names to search for in project directories
CONFIG_FILENAMES = [".wiresim.toml", "wiresim.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "wiresim" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"format", "verbose", "quiet"},
    "simulation": {"cycles_per_tick", "clock_hz", "digital_pins"},
    "compile": {"url", "board", "timeout"},
    "wiring": {"default_color", "auto_wire_inputs", "input_pin"},
}


@dataclass
class DefaultsConfig:
    """Default options for CLI commands."""

    format: str = "table"
    verbose: bool = False
    quiet: bool = False


@dataclass
class SimulationConfig:
    """Tick loop configuration."""

    cycles_per_tick: int = 500_000
    clock_hz: int = 16_000_000
    digital_pins: int = 14

    @property
    def tick_seconds(self) -> float:
        """Simulated time covered by one cycle batch."""
        return self.cycles_per_tick / self.clock_hz


@dataclass
class CompileConfig:
    """Compile service configuration."""

    url: str = "http://localhost:9000"
    board: str = "uno"
    timeout: float = 30.0


@dataclass
class WiringConfig:
    """Interactive wiring configuration."""

    default_color: str = "red"
    auto_wire_inputs: bool = True
    input_pin: str = "D2"


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    compile: CompileConfig = field(default_factory=CompileConfig)
    wiring: WiringConfig = field(default_factory=WiringConfig)

    # Track which file each setting came from (for --show)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            if user_data:
                _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            if project_data:
                _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")

    def get(self, key: str) -> Any:
        """
        Look up a dotted key such as ``simulation.cycles_per_tick``.

        Raises:
            KeyError: If the section or option is not a known config key
        """
        section, _, option = key.partition(".")
        if section not in KNOWN_KEYS or option not in KNOWN_KEYS[section]:
            raise KeyError(key)
        return getattr(getattr(self, section), option)


class ConfigError(Exception):
    """Configuration-related errors."""

    pass


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any] | None:
    """
    Load a TOML file safely.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML data

    Raises:
        ConfigError: If TOML is invalid or the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Every section maps one-to-one onto a dataclass on ``Config``, so known
    options are copied attribute by attribute.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    for section, known in KNOWN_KEYS.items():
        if section not in data:
            continue
        section_data = data[section]
        _warn_unknown_keys(section_data, known, section, source)

        target = getattr(config, section)
        types = {f.name: f.type for f in fields(target)}
        for option in sorted(known):
            if option in section_data:
                key = f"{section}.{option}"
                value = _coerce(section_data[option], types[option], key, source)
                setattr(target, option, value)
                sources[key] = source


def _coerce(value: Any, expected: type, key: str, source: str) -> Any:
    """
    Convert a TOML value to the type of its config field.

    Integers are accepted for float options and numeric strings for numeric
    options. Booleans are never treated as numbers.

    Raises:
        ConfigError: If the value cannot be used as ``expected``
    """
    if isinstance(value, bool) or expected in (bool, str):
        if type(value) is expected:
            return value
    elif expected is float and isinstance(value, (int, float)):
        return float(value)
    elif expected is int and isinstance(value, int):
        return value
    elif expected is int and isinstance(value, float) and value.is_integer():
        return int(value)
    elif expected in (int, float) and isinstance(value, str):
        try:
            return expected(value.strip())
        except ValueError:
            pass

    raise ConfigError(
        f"Invalid value for '{key}' in {source}: expected {expected.__name__}, got {value!r}"
    )


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# wiresim configuration file
# Place as .wiresim.toml in project root or ~/.config/wiresim/config.toml for user defaults

[defaults]
# Output format: table, json
# format = "table"

# Enable verbose output by default
# verbose = false

# Enable quiet mode by default
# quiet = false

[simulation]
# CPU cycles executed per tick before pin levels are sampled
# cycles_per_tick = 500000

# Core clock frequency in Hz (used to report simulated time)
# clock_hz = 16000000

# Number of digital pins sampled each tick (D0..D13)
# digital_pins = 14

[compile]
# Base URL of the compile service
# url = "http://localhost:9000"

# Board id sent with each compile request
# board = "uno"

# Request timeout in seconds
# timeout = 30.0

[wiring]
# Colour given to newly drawn wires
# default_color = "red"

# Wire new push buttons to the board automatically
# auto_wire_inputs = true

# Board pin that auto-wired push buttons drive
# input_pin = "D2"
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
