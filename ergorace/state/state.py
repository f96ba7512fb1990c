"""Shared state container for the virtual drivetrain."""

import asyncio
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from ergorace.debug import debug_log
from ergorace.drivetrain.gears import DEFAULT_PRESET, Drivetrain, get_preset, shift_down, shift_up
from ergorace.simulation.physics import PhysicsModel
from ergorace.simulation.recalculate import recalculate

Observer = Callable[[str], None]


class Direction(Enum):
    """Directional key pad input."""

    NONE = "none"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class TrainerSnapshot:
    """Every mutable trainer quantity."""

    clock: datetime | None = None

    # Rider vitals
    heart_rate: int = 0
    cadence: int = 0

    # Terrain
    gradient: float = 0.0
    previous_gradient: float = 0.0

    # Derived from cadence and gear
    speed_kmh: float = 0.0

    # Drivetrain (1-based indices)
    front_gear: int = 1
    rear_gear: int = 1

    # Power targets
    erg_mode: bool = False
    target_power: int = 25
    bike_target_power: int = 25
    current_bike_power: int = 0

    direction: Direction = Direction.NONE


FIELD_NAMES = frozenset(f.name for f in fields(TrainerSnapshot))


class TrainerState:
    """Lock-guarded trainer state with change notifications.

    Every write acquires the lock, commits, releases, and only then tells
    subscribers which field changed. Writes to cadence, gradient or the gears
    then recalculate target power and speed, outside the lock.
    """

    def __init__(self, drivetrain: Drivetrain | None = None, physics: PhysicsModel | None = None):
        self.drivetrain = drivetrain or get_preset(DEFAULT_PRESET)
        self.physics = physics or PhysicsModel()
        self._values = TrainerSnapshot()
        self._lock = asyncio.Lock()
        self._observers: list[Observer] = []

    async def get_snapshot(self) -> TrainerSnapshot:
        """Get a copy of the current state."""
        async with self._lock:
            return replace(self._values)

    async def get(self, name: str) -> Any:
        """Get a single field by name."""
        if name not in FIELD_NAMES:
            raise AttributeError(f"TrainerSnapshot has no field '{name}'")
        async with self._lock:
            return getattr(self._values, name)

    async def chainring(self) -> int:
        """Teeth on the active chainring."""
        async with self._lock:
            return self.drivetrain.chainring(self._values.front_gear)

    async def sprocket(self) -> int:
        """Teeth on the active sprocket."""
        async with self._lock:
            return self.drivetrain.sprocket(self._values.rear_gear)

    def subscribe(self, callback: Observer) -> None:
        """Register a callback invoked with the name of each changed field."""
        self._observers.append(callback)

    def unsubscribe(self, callback: Observer) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _announce(self, name: str) -> None:
        for callback in list(self._observers):
            callback(name)

    async def _write(self, name: str, value: Any) -> None:
        async with self._lock:
            setattr(self._values, name, value)
        self._announce(name)

    async def set_clock(self, value: datetime) -> None:
        await self._write("clock", value)

    async def set_heart_rate(self, value: int) -> None:
        await self._write("heart_rate", value)

    async def set_speed(self, value: float) -> None:
        await self._write("speed_kmh", value)

    async def set_erg_mode(self, value: bool) -> None:
        await self._write("erg_mode", value)

    async def set_target_power(self, value: int) -> None:
        await self._write("target_power", value)

    async def set_bike_target_power(self, value: int) -> None:
        await self._write("bike_target_power", value)

    async def set_current_bike_power(self, value: int) -> None:
        await self._write("current_bike_power", value)

    async def set_direction(self, value: Direction) -> None:
        await self._write("direction", value)

    async def adjust_target_power(self, delta: int) -> int:
        """Add delta to the target power, flooring the result at 0 W.

        Returns:
            The committed target power
        """
        async with self._lock:
            value = max(0, self._values.target_power + delta)
            self._values.target_power = value
        self._announce("target_power")
        return value

    async def clamp_target_power(self) -> int:
        """Floor a negative target power at 0 W.

        Returns:
            The committed target power
        """
        async with self._lock:
            value = self._values.target_power
            clamped = value < 0
            if clamped:
                value = self._values.target_power = 0
        if clamped:
            self._announce("target_power")
        return value

    async def set_cadence(self, value: int) -> None:
        await self._write("cadence", value)
        await recalculate(self, auto_shift=True)

    async def set_gradient(self, value: float) -> None:
        async with self._lock:
            self._values.previous_gradient = self._values.gradient
            self._values.gradient = value
        self._announce("previous_gradient")
        self._announce("gradient")
        await recalculate(self, auto_shift=True)

    async def set_front_gear(self, value: int) -> None:
        if not 1 <= value <= self.drivetrain.front_count:
            debug_log(f"Ignoring front gear {value} (valid 1..{self.drivetrain.front_count})")
            return
        await self._write("front_gear", value)
        await recalculate(self, auto_shift=False)

    async def set_rear_gear(self, value: int) -> None:
        if not 1 <= value <= self.drivetrain.rear_count:
            debug_log(f"Ignoring rear gear {value} (valid 1..{self.drivetrain.rear_count})")
            return
        await self._write("rear_gear", value)
        await recalculate(self, auto_shift=False)

    async def shift_up(self) -> bool:
        """Shift one step harder. Returns False at the top of the ladder."""
        return await self._shift(shift_up)

    async def shift_down(self) -> bool:
        """Shift one step easier. Returns False at the bottom of the ladder."""
        return await self._shift(shift_down)

    async def _shift(self, transition: Callable[[int, int, int, int], tuple[int, int]]) -> bool:
        async with self._lock:
            front, rear = self._values.front_gear, self._values.rear_gear
            new_front, new_rear = transition(
                front, rear, self.drivetrain.front_count, self.drivetrain.rear_count
            )
            self._values.front_gear = new_front
            self._values.rear_gear = new_rear

        if (new_front, new_rear) == (front, rear):
            return False

        debug_log(f"{transition.__name__}: {front}x{rear} -> {new_front}x{new_rear}")
        if new_front != front:
            self._announce("front_gear")
        if new_rear != rear:
            self._announce("rear_gear")
        await recalculate(self, auto_shift=False)
        return True


# Global state instance
_global_state: TrainerState | None = None


def get_state() -> TrainerState:
    """Get the global trainer state instance."""
    global _global_state
    if _global_state is None:
        _global_state = TrainerState()
    return _global_state


def set_state(state: TrainerState | None) -> None:
    """Replace the global trainer state instance (None clears it)."""
    global _global_state
    _global_state = state
