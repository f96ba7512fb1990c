"""Riding screen with live drivetrain stats and key pad control."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen, Screen
from textual.timer import Timer
from textual.widgets import Button, Footer, Header, Label, Static

from ergorace.debug import debug_log
from ergorace.simulation.loops import ClockLoop, KeypadLoop
from ergorace.simulation.simulator import DemoSimulator
from ergorace.state.state import Direction, TrainerState, get_state
from ergorace.widgets.gear_ladder import GearLadder
from ergorace.widgets.stats_panel import StatsPanel

# Terminals report key presses, never releases. A tap is held for less than
# the key pad repeat delay (~400ms) so it steps once; auto-repeat events then
# keep the key held for as long as they keep arriving.
TAP_RELEASE_S = 0.3
REPEAT_RELEASE_S = 0.15

KEY_DIRECTIONS = {
    "up": Direction.UP,
    "down": Direction.DOWN,
    "left": Direction.LEFT,
    "right": Direction.RIGHT,
}


class HelpModal(ModalScreen):
    """Modal screen showing keyboard shortcuts."""

    BINDINGS = [
        ("escape", "dismiss", "Close"),
        ("h", "dismiss", "Close"),
    ]

    CSS = """
    HelpModal {
        align: center middle;
        background: transparent;
    }

    #help-dialog {
        width: 50;
        height: auto;
        border: round white;
        background: $background 60%;
        padding: 1;
    }

    #header {
        width: 100%;
        height: auto;
        content-align: center middle;
        padding-bottom: 1;
        border-bottom: solid white;
    }

    #help-content {
        width: 100%;
        height: auto;
        padding: 1 2;
    }

    #buttons {
        width: 100%;
        height: auto;
        align: center middle;
    }

    Button {
        margin: 0 1;
        background: transparent;
        border: round $surface;
        color: white;
    }
    """

    def compose(self) -> ComposeResult:
        """Create the help dialog."""
        with Container(id="help-dialog"):
            yield Label("Keyboard Shortcuts", id="header")
            yield Static(self._build_help_text(), id="help-content")
            with Horizontal(id="buttons"):
                yield Button("Close", id="close-btn")

    def on_button_pressed(self, event) -> None:
        """Handle button press."""
        self.dismiss()

    def _build_help_text(self) -> str:
        """Build the help text content."""
        return """
Power (SIM mode)
  ↑ / ↓       Target power ±5W, hold to repeat

Gears (SIM mode)
  ←           Shift down (easier)
  →           Shift up (harder)

Mode
  e           Toggle ERG mode (holds current target)
  h           Show this help
  q           Quit
"""


class RidingScreen(Screen):
    """Main riding screen."""

    BINDINGS = [
        ("e", "toggle_erg", "ERG"),
        ("h", "show_help", "Help"),
        Binding("up", "press_direction('up')", "Power +"),
        Binding("down", "press_direction('down')", "Power -"),
        Binding("left", "press_direction('left')", "Shift Down"),
        Binding("right", "press_direction('right')", "Shift Up"),
    ]

    CSS = """
    RidingScreen {
        layout: vertical;
    }

    #main-container {
        height: 1fr;
        align: center middle;
    }

    GearLadder {
        width: 50;
        height: auto;
        border: round white;
        padding: 1;
        margin-bottom: 1;
    }

    StatsPanel {
        width: 50;
        height: auto;
        border: round white;
        padding: 1;
    }
    """

    def __init__(self, state: TrainerState | None = None, demo: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.state = state or get_state()
        self.demo = demo
        self.clock_loop = ClockLoop(self.state)
        self.keypad_loop = KeypadLoop(self.state)
        self.simulator = DemoSimulator(self.state) if demo else None
        self._release_timer: Timer | None = None
        self._held_direction = Direction.NONE

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Header(show_clock=False)
        with Container(id="main-container"):
            yield GearLadder(self.state)
            yield StatsPanel(self.state)
        yield Footer()

    async def on_mount(self) -> None:
        """Handle mount - start background loops."""
        await self.clock_loop.start()
        await self.keypad_loop.start()
        if self.simulator is not None:
            await self.simulator.start()

    async def on_unmount(self) -> None:
        """Handle unmount - stop background loops."""
        try:
            if self.simulator is not None:
                await self.simulator.stop()
            await self.keypad_loop.stop()
        finally:
            await self.clock_loop.stop()

    async def action_press_direction(self, key: str) -> None:
        """Feed an arrow key to the key pad loop.

        The same key arriving again while held is terminal auto-repeat and
        keeps the direction held; anything else is a fresh press.
        """
        direction = KEY_DIRECTIONS[key]
        repeating = self._release_timer is not None and direction is self._held_direction

        if self._release_timer is not None:
            self._release_timer.stop()

        if repeating:
            self._release_timer = self.set_timer(REPEAT_RELEASE_S, self._release_direction)
            return

        self._held_direction = direction
        await self.state.set_direction(direction)
        self._release_timer = self.set_timer(TAP_RELEASE_S, self._release_direction)

    async def _release_direction(self) -> None:
        self._release_timer = None
        self._held_direction = Direction.NONE
        await self.state.set_direction(Direction.NONE)

    def action_show_help(self) -> None:
        self.app.push_screen(HelpModal())

    def action_toggle_erg(self) -> None:
        self.run_worker(self._toggle_erg())

    async def _toggle_erg(self) -> None:
        snapshot = await self.state.get_snapshot()
        if snapshot.erg_mode:
            await self.state.set_erg_mode(False)
            self.notify("Switched to SIM mode")
        else:
            # Lock the trainer to whatever target the rider had reached
            await self.state.set_bike_target_power(snapshot.target_power)
            await self.state.set_erg_mode(True)
            self.notify(f"ERG mode - holding {snapshot.target_power}W")
        debug_log(f"ERG mode {'off' if snapshot.erg_mode else 'on'}")
