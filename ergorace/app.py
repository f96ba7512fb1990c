"""Main application entry point."""

import argparse

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from ergorace.config import load_drivetrain, save_drivetrain_preset
from ergorace.debug import debug_log, enable_debug_log
from ergorace.drivetrain.gears import PRESETS, Drivetrain, get_preset
from ergorace.screens.riding import RidingScreen
from ergorace.state.state import TrainerState, set_state


class ConfirmQuitScreen(ModalScreen[bool]):
    """Modal dialog to confirm quitting the app."""

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("left", "navigate_left", "Left"),
        ("right", "navigate_right", "Right"),
    ]

    CSS = """
    ConfirmQuitScreen {
        align: center middle;
    }

    #dialog {
        width: 50;
        height: 9;
        border: round white;
        background: $surface;
        padding: 1 2;
    }

    #question {
        width: 100%;
        height: auto;
        content-align: center middle;
        margin-bottom: 1;
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

    Button:focus {
        border: round white;
    }
    """

    def compose(self) -> ComposeResult:
        """Create dialog widgets."""
        with Container(id="dialog"):
            yield Label("Quit ergorace?", id="question")
            with Horizontal(id="buttons"):
                yield Button("No", id="no")
                yield Button("Yes", id="yes")

    def action_cancel(self) -> None:
        self.dismiss(False)

    def action_navigate_left(self) -> None:
        self.query_one("#no", Button).focus()

    def action_navigate_right(self) -> None:
        self.query_one("#yes", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        self.dismiss(event.button.id == "yes")


class ErgoRaceApp(App):
    """A Textual app simulating a geared bike on an indoor trainer."""

    TITLE = "ergorace"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, drivetrain: Drivetrain, demo: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.state = TrainerState(drivetrain)
        self.demo = demo
        set_state(self.state)

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        # Empty main screen - the riding screen is always on top
        yield Static("")

    def on_mount(self) -> None:
        """Handle app mount - show the riding screen."""
        debug_log(f"Starting with drivetrain {self.state.drivetrain}")
        self.push_screen(RidingScreen(self.state, demo=self.demo))

    def action_quit(self) -> None:
        """Override quit action to show confirmation dialog."""
        self.push_screen(ConfirmQuitScreen(), self.handle_quit_confirmation)

    def handle_quit_confirmation(self, confirmed: bool) -> None:
        """Handle the quit confirmation result."""
        if confirmed:
            self.exit()


def main():
    """Run the application."""
    parser = argparse.ArgumentParser(description="ergorace - virtual drivetrain for indoor trainers")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging to ergorace-debug.log")
    parser.add_argument("--demo", action="store_true", help="Run with a simulated sensor feed (no hardware required)")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Drivetrain preset to use (saved as the new default)",
    )
    args = parser.parse_args()

    if args.debug:
        enable_debug_log()

    if args.preset:
        save_drivetrain_preset(args.preset)
        drivetrain = get_preset(args.preset)
    else:
        drivetrain = load_drivetrain()

    app = ErgoRaceApp(drivetrain, demo=args.demo)
    app.run()


if __name__ == "__main__":
    main()
