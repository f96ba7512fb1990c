from __future__ import annotations

import asyncio

from ergorace.simulation.simulator import DemoSimulator
from ergorace.state.state import TrainerState


def test_update_sensors_feeds_state() -> None:
    async def _run() -> None:
        state = TrainerState()
        simulator = DemoSimulator(state, seed=7)

        await simulator.update_sensors(elapsed=0.0)

        snapshot = await state.get_snapshot()
        assert snapshot.cadence == 85
        assert snapshot.gradient == 2.0
        assert 128 <= snapshot.heart_rate <= 132
        # Reported power tracks the target that was in force (25W)
        assert 23 <= snapshot.current_bike_power <= 27
        assert snapshot.speed_kmh > 0

    asyncio.run(_run())


def test_erg_mode_reports_bike_target() -> None:
    async def _run() -> None:
        state = TrainerState()
        await state.set_bike_target_power(200)
        await state.set_erg_mode(True)
        simulator = DemoSimulator(state, seed=1)

        await simulator.update_sensors(elapsed=10.0)

        snapshot = await state.get_snapshot()
        assert 190 <= snapshot.current_bike_power <= 210
        assert snapshot.target_power == 25

    asyncio.run(_run())


def test_start_and_stop() -> None:
    async def _run() -> None:
        state = TrainerState()
        simulator = DemoSimulator(state, seed=3)

        await simulator.start()
        await asyncio.sleep(0.05)
        await simulator.stop()

        assert simulator.task is None
        assert not simulator.running
        assert await state.get("cadence") > 0

    asyncio.run(_run())
