"""Configuration management for ergorace."""

import json
from pathlib import Path

from ergorace.debug import debug_log
from ergorace.drivetrain.gears import DEFAULT_PRESET, PRESETS, Drivetrain, get_preset


def get_config_dir() -> Path:
    """Get the config directory path."""
    config_dir = Path.home() / ".local" / "share" / "ergorace"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get the config file path."""
    return get_config_dir() / "config.json"


def load_config() -> dict:
    """Load configuration from file."""
    config_file = get_config_file()
    if config_file.exists():
        try:
            with open(config_file, "r") as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            debug_log(f"Ignoring unreadable config {config_file}: {e}")
            return {}
        if not isinstance(config, dict):
            debug_log(f"Ignoring config {config_file}: expected an object")
            return {}
        return config
    return {}


def save_config(config: dict) -> None:
    """Save configuration to file."""
    config_file = get_config_file()
    try:
        with open(config_file, "w") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        debug_log(f"Failed to save config: {e}")


def get_drivetrain_preset() -> str:
    """Get the name of the configured drivetrain preset."""
    return load_config().get("drivetrain_preset", DEFAULT_PRESET)


def save_drivetrain_preset(name: str) -> None:
    """Save the drivetrain preset to use on the next start.

    Raises:
        KeyError: If no preset has that name
    """
    get_preset(name)
    config = load_config()
    config["drivetrain_preset"] = name
    save_config(config)


def load_drivetrain() -> Drivetrain:
    """Build the configured drivetrain.

    A ``custom_drivetrain`` entry with ``chainrings`` and ``sprockets`` lists
    takes precedence over the preset name. Anything invalid falls back to
    the default preset.
    """
    config = load_config()

    custom = config.get("custom_drivetrain")
    if custom:
        try:
            return Drivetrain(
                "custom",
                tuple(int(t) for t in custom["chainrings"]),
                tuple(int(t) for t in custom["sprockets"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            debug_log(f"Invalid custom drivetrain, using default: {e}")

    name = config.get("drivetrain_preset", DEFAULT_PRESET)
    if name not in PRESETS:
        debug_log(f"Unknown drivetrain preset '{name}', using {DEFAULT_PRESET}")
        name = DEFAULT_PRESET
    return PRESETS[name]
