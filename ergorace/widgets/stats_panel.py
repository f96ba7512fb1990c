"""Stats panel widget for displaying live trainer state."""

from textual.app import ComposeResult
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Static

from ergorace.state.state import TrainerSnapshot, TrainerState, get_state


class StatsPanel(Widget):
    """Widget that displays the drivetrain, power and rider values."""

    # Reactive properties that trigger re-render
    snapshot: reactive[TrainerSnapshot | None] = reactive(None)

    def __init__(self, state: TrainerState | None = None, **kwargs):
        super().__init__(**kwargs)
        self.state = state or get_state()
        self._dirty = True

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Static(id="stats-content")

    def on_mount(self) -> None:
        """Handle mount - listen for changes and start redraw timer."""
        self.state.subscribe(self._on_state_changed)
        # Changes can arrive at 50Hz while a key is held, redraw at most 10x/s
        self.set_interval(0.1, self.update_stats)

    def on_unmount(self) -> None:
        self.state.unsubscribe(self._on_state_changed)

    def _on_state_changed(self, field_name: str) -> None:
        self._dirty = True

    async def update_stats(self) -> None:
        """Fetch latest state if anything changed since the last redraw."""
        if not self._dirty:
            return
        self._dirty = False
        self.snapshot = await self.state.get_snapshot()

    def watch_snapshot(self, snapshot: TrainerSnapshot | None) -> None:
        """Called when the snapshot changes - update the display."""
        if snapshot is None:
            return

        stats_widget = self.query_one("#stats-content", Static)
        drivetrain = self.state.drivetrain

        clock_str = snapshot.clock.strftime("%H:%M:%S") if snapshot.clock else "--:--:--"
        chainring = drivetrain.chainring(snapshot.front_gear)
        sprocket = drivetrain.sprocket(snapshot.rear_gear)

        content = "\n".join([
            f"Mode: {'ERG' if snapshot.erg_mode else 'SIM'}",
            f"Time: {clock_str}",
            "",
            f"Gear: {snapshot.front_gear}x{snapshot.rear_gear} ({chainring}/{sprocket})",
            f"Cadence: {snapshot.cadence} rpm",
            f"Grade: {snapshot.gradient:+.1f}%",
            f"Speed: {snapshot.speed_kmh:.1f} km/h",
            "",
            f"Target Power: {snapshot.target_power} W",
            f"Bike Power: {snapshot.current_bike_power} W",
        ])

        if snapshot.erg_mode:
            content += f"\nERG Target: {snapshot.bike_target_power} W"

        if snapshot.heart_rate > 0:
            content += f"\nHeart Rate: {snapshot.heart_rate} bpm"

        stats_widget.update(content)
