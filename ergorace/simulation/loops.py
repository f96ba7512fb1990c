"""Background loops driving the trainer state."""

import asyncio
from datetime import datetime
from typing import Callable

from ergorace.debug import debug_log
from ergorace.state.state import Direction, TrainerState


class PollingLoop:
    """Runs ``step()`` every ``period_s`` seconds until stopped.

    The stop flag is checked before every cycle, so a loop always finishes
    the step it is in and exits at the next cycle boundary.
    """

    period_s: float = 1.0

    def __init__(self, state: TrainerState):
        self.state = state
        self.task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()

    async def start(self) -> None:
        """Start the loop as a background task."""
        if self.is_running:
            return

        self._stop_event.clear()
        self.task = asyncio.create_task(self._loop())
        debug_log(f"{type(self).__name__} started ({self.period_s * 1000:.0f}ms period)")

    async def stop(self) -> None:
        """Ask the loop to stop and wait for its current cycle to end."""
        self._stop_event.set()
        if self.task:
            await self.task
            self.task = None
            debug_log(f"{type(self).__name__} stopped")

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            await self.step()
            try:
                # Sleep for one period, waking early if stop() is called
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.period_s)
            except TimeoutError:
                pass

    async def step(self) -> None:
        raise NotImplementedError


class ClockLoop(PollingLoop):
    """Refreshes the displayed wall clock once a second."""

    period_s = 1.0

    def __init__(self, state: TrainerState, now: Callable[[], datetime] = datetime.now):
        super().__init__(state)
        self._now = now

    async def step(self) -> None:
        await self.state.set_clock(self._now())


class KeypadLoop(PollingLoop):
    """Turns the held key pad direction into power steps and gear shifts.

    Up/Down step the target power once when pressed, then pause, then repeat
    every cycle while held. Left/Right shift once per press.
    """

    period_s = 0.02
    REPEAT_DELAY_CYCLES = 20  # ~400ms before Up/Down auto-repeat
    POWER_STEP_W = 5

    def __init__(self, state: TrainerState):
        super().__init__(state)
        self.last_direction = Direction.NONE
        self.streak = 0

    async def start(self) -> None:
        """Start the loop. A key still held from a previous run is a new press."""
        if not self.is_running:
            self.last_direction = Direction.NONE
            self.streak = 0
        await super().start()

    async def step(self) -> None:
        snapshot = await self.state.get_snapshot()

        # Erg mode owns the power target, manual control is off
        if snapshot.erg_mode:
            return

        direction = snapshot.direction
        if direction == self.last_direction:
            self.streak += 1
        else:
            self.streak = 0

        repeat = self.streak == 0 or self.streak > self.REPEAT_DELAY_CYCLES

        if direction is Direction.UP:
            if repeat:
                await self.state.adjust_target_power(self.POWER_STEP_W)
        elif direction is Direction.DOWN:
            if repeat:
                await self.state.adjust_target_power(-self.POWER_STEP_W)
        elif direction is Direction.LEFT:
            if self.streak == 0:
                await self.state.shift_down()
        elif direction is Direction.RIGHT:
            if self.streak == 0:
                await self.state.shift_up()

        # Recalculation may have written a negative target
        await self.state.clamp_target_power()

        self.last_direction = direction
