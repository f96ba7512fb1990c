from __future__ import annotations

import asyncio

import pytest

from ergorace.drivetrain import get_preset
from ergorace.simulation.physics import PhysicsModel, calculate_power, calculate_speed
from ergorace.state.state import Direction, TrainerState, get_state, set_state


def _record(state: TrainerState) -> list[str]:
    events: list[str] = []
    state.subscribe(events.append)
    return events


async def _in_gear(state: TrainerState, front: int, rear: int) -> None:
    await state.set_front_gear(front)
    await state.set_rear_gear(rear)


def test_initial_values() -> None:
    async def _run() -> None:
        state = TrainerState()
        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (1, 1)
        assert snapshot.target_power == 25
        assert snapshot.bike_target_power == 25
        assert snapshot.erg_mode is False
        assert snapshot.direction is Direction.NONE
        assert await state.chainring() == 39
        assert await state.sprocket() == 40

    asyncio.run(_run())


def test_snapshot_is_a_copy() -> None:
    async def _run() -> None:
        state = TrainerState()
        snapshot = await state.get_snapshot()
        snapshot.cadence = 120
        assert await state.get("cadence") == 0

    asyncio.run(_run())


def test_get_unknown_field() -> None:
    async def _run() -> None:
        state = TrainerState()
        with pytest.raises(AttributeError):
            await state.get("wattage")

    asyncio.run(_run())


def test_recalculation_matches_physics() -> None:
    async def _run() -> None:
        state = TrainerState()
        await _in_gear(state, 1, 5)
        expected = round(calculate_power(85, 2.0, 39, 24))
        # Rider holding the band keeps auto-shift quiet
        await state.set_current_bike_power(expected)
        await state.set_gradient(2.0)
        await state.set_cadence(85)

        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (1, 5)
        assert snapshot.target_power == expected
        assert snapshot.speed_kmh == pytest.approx(calculate_speed(85, 39, 24) * 3.6)

    asyncio.run(_run())


def test_erg_mode_keeps_target_power() -> None:
    async def _run() -> None:
        state = TrainerState()
        await state.set_erg_mode(True)
        await state.set_target_power(200)
        await state.set_current_bike_power(35)
        await state.set_rear_gear(5)
        await state.set_cadence(90)

        snapshot = await state.get_snapshot()
        assert snapshot.target_power == 200
        assert snapshot.speed_kmh == pytest.approx(calculate_speed(90, 39, 24) * 3.6)

    asyncio.run(_run())


def test_gradient_keeps_previous_value() -> None:
    async def _run() -> None:
        state = TrainerState()
        await state.set_gradient(3.5)
        await state.set_gradient(-1.0)
        snapshot = await state.get_snapshot()
        assert snapshot.gradient == -1.0
        assert snapshot.previous_gradient == 3.5

    asyncio.run(_run())


def test_plain_setters_announce_once_without_recalculation() -> None:
    async def _run() -> None:
        state = TrainerState()
        events = _record(state)
        await state.set_heart_rate(142)
        await state.set_current_bike_power(180)
        await state.set_bike_target_power(150)
        await state.set_direction(Direction.UP)
        assert events == ["heart_rate", "current_bike_power", "bike_target_power", "direction"]

    asyncio.run(_run())


def test_announcement_follows_commit() -> None:
    async def _run() -> None:
        state = TrainerState()
        seen: list[int] = []

        def on_change(name: str) -> None:
            if name == "heart_rate":
                seen.append(state._values.heart_rate)

        state.subscribe(on_change)
        await state.set_heart_rate(150)
        assert seen == [150]

    asyncio.run(_run())


def test_cadence_triggers_recalculation_announcements() -> None:
    async def _run() -> None:
        state = TrainerState()
        await _in_gear(state, 1, 5)
        await state.set_current_bike_power(round(calculate_power(85, 0.0, 39, 24)))
        events = _record(state)
        await state.set_cadence(85)
        assert events == ["cadence", "target_power", "speed_kmh"]

    asyncio.run(_run())


def test_unsubscribe_stops_notifications() -> None:
    async def _run() -> None:
        state = TrainerState()
        events = _record(state)
        state.unsubscribe(events.append)
        await state.set_heart_rate(100)
        assert events == []

    asyncio.run(_run())


def test_adjust_target_power_floors_at_zero() -> None:
    async def _run() -> None:
        state = TrainerState()
        assert await state.adjust_target_power(5) == 30
        assert await state.adjust_target_power(-100) == 0
        assert await state.adjust_target_power(-5) == 0
        assert await state.get("target_power") == 0

    asyncio.run(_run())


def test_clamp_target_power_floors_negative_value() -> None:
    async def _run() -> None:
        state = TrainerState()
        await state.set_target_power(-15)
        events = _record(state)

        assert await state.clamp_target_power() == 0
        assert await state.get("target_power") == 0
        assert events == ["target_power"]

    asyncio.run(_run())


def test_clamp_target_power_leaves_valid_value_alone() -> None:
    async def _run() -> None:
        state = TrainerState()
        events = _record(state)

        assert await state.clamp_target_power() == 25
        assert events == []

    asyncio.run(_run())


def test_out_of_range_gear_is_ignored() -> None:
    async def _run() -> None:
        state = TrainerState()
        events = _record(state)
        await state.set_rear_gear(12)
        await state.set_rear_gear(0)
        await state.set_front_gear(3)
        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (1, 1)
        assert events == []

    asyncio.run(_run())


def test_shift_commits_both_indices_and_recalculates_once() -> None:
    async def _run() -> None:
        state = TrainerState()
        await state.set_rear_gear(10)
        events = _record(state)

        assert await state.shift_up() is True

        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (2, 9)
        assert events == ["front_gear", "rear_gear", "target_power", "speed_kmh"]

    asyncio.run(_run())


def test_shift_at_boundary_is_silent() -> None:
    async def _run() -> None:
        state = TrainerState()
        events = _record(state)
        assert await state.shift_down() is False
        assert events == []

        await _in_gear(state, 2, 11)
        events.clear()
        assert await state.shift_up() is False
        assert events == []

    asyncio.run(_run())


def test_low_rider_power_shifts_down_exactly_once() -> None:
    async def _run() -> None:
        state = TrainerState()
        await _in_gear(state, 1, 5)
        await state.set_current_bike_power(0)

        await state.set_gradient(2.0)

        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (1, 4)
        assert snapshot.target_power == round(calculate_power(0, 2.0, 39, 27))

    asyncio.run(_run())


def test_high_rider_power_shifts_up_exactly_once() -> None:
    async def _run() -> None:
        state = TrainerState()
        await _in_gear(state, 1, 5)
        await state.set_current_bike_power(2000)
        events = _record(state)

        await state.set_cadence(90)

        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (1, 6)
        assert events.count("rear_gear") == 1

    asyncio.run(_run())


def test_gear_setters_never_auto_shift() -> None:
    async def _run() -> None:
        state = TrainerState()
        await state.set_current_bike_power(2000)
        await state.set_rear_gear(5)
        await state.set_front_gear(2)
        snapshot = await state.get_snapshot()
        assert (snapshot.front_gear, snapshot.rear_gear) == (2, 5)

    asyncio.run(_run())


def test_concurrent_writers_leave_consistent_state() -> None:
    async def _run() -> None:
        state = TrainerState()
        writers = []
        for i in range(50):
            writers.append(state.set_cadence(60 + i % 40))
            writers.append(state.set_gradient((i % 10) - 3.0))
            writers.append(state.shift_up() if i % 3 else state.shift_down())
            writers.append(state.set_current_bike_power(100 + i))
        await asyncio.gather(*writers)

        snapshot = await state.get_snapshot()
        drivetrain = state.drivetrain
        assert drivetrain.is_valid(snapshot.front_gear, snapshot.rear_gear)

        # A final write settles target power and speed for whatever gear won
        await state.set_cadence(snapshot.cadence)
        settled = await state.get_snapshot()
        chainring = drivetrain.chainring(settled.front_gear)
        sprocket = drivetrain.sprocket(settled.rear_gear)
        assert settled.target_power == round(
            calculate_power(settled.cadence, settled.gradient, chainring, sprocket)
        )
        assert settled.speed_kmh == pytest.approx(
            calculate_speed(settled.cadence, chainring, sprocket) * 3.6
        )

    asyncio.run(_run())


def test_custom_drivetrain() -> None:
    async def _run() -> None:
        state = TrainerState(get_preset("compact"))
        await state.set_front_gear(2)
        assert await state.chainring() == 34

    asyncio.run(_run())


def test_global_state_accessors() -> None:
    try:
        set_state(None)
        first = get_state()
        assert get_state() is first

        replacement = TrainerState()
        set_state(replacement)
        assert get_state() is replacement
    finally:
        set_state(None)
