"""Target power, speed and auto-shift recalculation."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ergorace.state.state import TrainerState


# Cadence band a rider should be able to hold in the right gear
MIN_CADENCE_RPM = 70
MAX_CADENCE_RPM = 95

MS_TO_KMH = 3.6


async def recalculate(state: "TrainerState", auto_shift: bool) -> None:
    """Derive target power and speed from cadence, gradient and gear.

    Reads one snapshot, so the inputs are consistent with each other even if
    other writers run in between. Writes go back through the state setters.

    Args:
        state: Trainer state to read and update
        auto_shift: Also compare reported bike power with the power band of
            the current gear and shift at most once. Gear changes pass False
            so a shift never triggers another shift.
    """
    snapshot = await state.get_snapshot()
    drivetrain = state.drivetrain
    physics = state.physics

    chainring = drivetrain.chainring(snapshot.front_gear)
    sprocket = drivetrain.sprocket(snapshot.rear_gear)

    power = round(physics.power(snapshot.cadence, snapshot.gradient, chainring, sprocket))
    if not snapshot.erg_mode:
        await state.set_target_power(power)

    speed_ms = physics.speed(snapshot.cadence, chainring, sprocket)
    await state.set_speed(speed_ms * MS_TO_KMH)

    if not auto_shift:
        return

    min_power = physics.power(MIN_CADENCE_RPM, snapshot.gradient, chainring, sprocket)
    max_power = physics.power(MAX_CADENCE_RPM, snapshot.gradient, chainring, sprocket)

    if snapshot.current_bike_power < min_power:
        await state.shift_down()
    elif snapshot.current_bike_power > max_power:
        await state.shift_up()
