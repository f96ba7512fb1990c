"""Drivetrain configuration and gear shifting."""

from ergorace.drivetrain.gears import (
    DEFAULT_PRESET,
    PRESETS,
    Drivetrain,
    get_preset,
    shift_down,
    shift_up,
)

__all__ = [
    "DEFAULT_PRESET",
    "PRESETS",
    "Drivetrain",
    "get_preset",
    "shift_down",
    "shift_up",
]
