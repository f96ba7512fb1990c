"""Physics-based calculations for cycling speed and power."""

from dataclasses import dataclass
from typing import Callable


# Physical constants
GRAVITY = 9.81  # m/s²
AIR_DENSITY = 1.225  # kg/m³ at sea level, 15°C
ROLLING_RESISTANCE = 0.004  # Typical for road bike on smooth asphalt
DRAG_COEFFICIENT_AREA = 0.3  # m² - CdA for road position

WHEEL_CIRCUMFERENCE_M = 2.096  # 700x23c
DEFAULT_TOTAL_MASS_KG = 80.0  # Rider + bike


def calculate_speed(cadence_rpm: float, chainring: int, sprocket: int) -> float:
    """Calculate road speed from cadence and gearing.

    Args:
        cadence_rpm: Pedal cadence in revolutions per minute
        chainring: Front chainring teeth
        sprocket: Rear sprocket teeth

    Returns:
        Speed in m/s
    """
    if cadence_rpm <= 0:
        return 0.0

    wheel_rps = (cadence_rpm / 60.0) * (chainring / sprocket)
    return wheel_rps * WHEEL_CIRCUMFERENCE_M


def calculate_power(
    cadence_rpm: float,
    gradient_pct: float,
    chainring: int,
    sprocket: int,
    total_mass_kg: float = DEFAULT_TOTAL_MASS_KG,
) -> float:
    """Calculate the power needed to hold a cadence in a gear on a gradient.

    Power = (gravity + rolling + air resistance) forces × speed

    Args:
        cadence_rpm: Pedal cadence in revolutions per minute
        gradient_pct: Grade as percentage (5% = 5.0)
        chainring: Front chainring teeth
        sprocket: Rear sprocket teeth
        total_mass_kg: Combined rider + bike mass in kg

    Returns:
        Power in watts, never negative (descending is coasting)
    """
    speed = calculate_speed(cadence_rpm, chainring, sprocket)
    if speed <= 0:
        return 0.0

    grade = gradient_pct / 100.0

    force_gravity = total_mass_kg * GRAVITY * grade
    force_rolling = ROLLING_RESISTANCE * total_mass_kg * GRAVITY
    force_air = 0.5 * DRAG_COEFFICIENT_AREA * AIR_DENSITY * speed * speed

    total_force = force_gravity + force_rolling + force_air

    return max(0.0, total_force * speed)


@dataclass(frozen=True)
class PhysicsModel:
    """The pair of pure functions the trainer state recalculates with."""

    power: Callable[[float, float, int, int], float] = calculate_power
    speed: Callable[[float, int, int], float] = calculate_speed
