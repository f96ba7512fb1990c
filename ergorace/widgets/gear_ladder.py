"""Chainring and cassette display with the active gear highlighted."""

from rich.console import RenderableType
from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from ergorace.drivetrain.gears import Drivetrain
from ergorace.state.state import TrainerState, get_state

ACTIVE_STYLE = "bold black on white"
IDLE_STYLE = "dim"


def render_gears(drivetrain: Drivetrain, front: int, rear: int) -> Text:
    """Build a two-line view of the drivetrain.

    Example (front 1, rear 5):
        Front  [39] 53
        Rear   40 35 31 27 [24] 21 19 17 15 13 11
    """
    text = Text()

    text.append("Front ")
    for index, teeth in enumerate(drivetrain.chainrings, start=1):
        text.append(" ")
        if index == front:
            text.append(f"[{teeth}]", style=ACTIVE_STYLE)
        else:
            text.append(str(teeth), style=IDLE_STYLE)

    text.append("\nRear  ")
    for index, teeth in enumerate(drivetrain.sprockets, start=1):
        text.append(" ")
        if index == rear:
            text.append(f"[{teeth}]", style=ACTIVE_STYLE)
        else:
            text.append(str(teeth), style=IDLE_STYLE)

    return text


class GearLadder(Widget):
    """Widget showing which chainring and sprocket are in use."""

    gear: reactive[tuple[int, int]] = reactive((1, 1))

    def __init__(self, state: TrainerState | None = None, **kwargs):
        super().__init__(**kwargs)
        self.state = state or get_state()

    def on_mount(self) -> None:
        self.state.subscribe(self._on_state_changed)
        self.run_worker(self._refresh_gear(), group="gear", exclusive=True)

    def on_unmount(self) -> None:
        self.state.unsubscribe(self._on_state_changed)

    def _on_state_changed(self, field_name: str) -> None:
        if field_name in ("front_gear", "rear_gear"):
            self.run_worker(self._refresh_gear(), group="gear", exclusive=True)

    async def _refresh_gear(self) -> None:
        snapshot = await self.state.get_snapshot()
        self.gear = (snapshot.front_gear, snapshot.rear_gear)

    def render(self) -> RenderableType:
        front, rear = self.gear
        return render_gears(self.state.drivetrain, front, rear)
