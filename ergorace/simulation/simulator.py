"""Fake sensor feed for demo mode."""

import asyncio
import math
import random
import time

from ergorace.state.state import TrainerState


class DemoSimulator:
    """Simulates heart rate, cadence, terrain and trainer power."""

    def __init__(self, state: TrainerState, seed: int | None = None):
        self.state = state
        self.running = False
        self.task: asyncio.Task | None = None
        self.start_time: float | None = None
        self._random = random.Random(seed)

    async def start(self) -> None:
        """Start the simulation loop."""
        if self.running:
            return

        self.running = True
        self.start_time = time.time()
        self.task = asyncio.create_task(self._simulation_loop())

    async def stop(self) -> None:
        """Stop the simulation loop."""
        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None

    async def _simulation_loop(self) -> None:
        """Main simulation loop - runs every 0.5 seconds."""
        try:
            while self.running:
                await self.update_sensors(time.time() - self.start_time)
                await asyncio.sleep(0.5)
        except asyncio.CancelledError:
            pass

    async def update_sensors(self, elapsed: float) -> None:
        """Push one round of fake sensor readings into the state.

        Args:
            elapsed: Seconds since the simulation started
        """
        # Cadence: oscillates between 70-100 rpm
        cadence = round(85 + 15 * math.sin(elapsed * 0.15))

        # Rolling hills: -4% to +8%
        gradient = round(2.0 + 4.0 * math.sin(elapsed * 0.02) + 2.0 * math.sin(elapsed * 0.07), 1)

        # Heart rate drifts up with effort
        heart_rate = round(130 + 20 * math.sin(elapsed * 0.05) + self._random.uniform(-2, 2))

        await self.state.set_heart_rate(heart_rate)

        # Trainer reports roughly what it was asked for
        snapshot = await self.state.get_snapshot()
        requested = snapshot.bike_target_power if snapshot.erg_mode else snapshot.target_power
        bike_power = max(0, round(requested * self._random.uniform(0.95, 1.05)))
        await self.state.set_current_bike_power(bike_power)

        await self.state.set_cadence(cadence)
        if gradient != snapshot.gradient:
            await self.state.set_gradient(gradient)
