"""Drivetrain tables and the gear shifting ladder."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Drivetrain:
    """Fixed chainring and sprocket tables.

    Gear indices are 1-based: front gear 1 is ``chainrings[0]`` and rear
    gear 1 is ``sprockets[0]`` (the largest cog, easiest gear).
    """

    name: str
    chainrings: tuple[int, ...]
    sprockets: tuple[int, ...]

    def __post_init__(self):
        if not self.chainrings:
            raise ValueError(f"Drivetrain '{self.name}' needs at least one chainring")
        if len(self.sprockets) < 2:
            raise ValueError(f"Drivetrain '{self.name}' needs at least two sprockets")
        for teeth in (*self.chainrings, *self.sprockets):
            if teeth <= 0:
                raise ValueError(f"Drivetrain '{self.name}' has invalid teeth count {teeth}")

    @property
    def front_count(self) -> int:
        return len(self.chainrings)

    @property
    def rear_count(self) -> int:
        return len(self.sprockets)

    def is_valid(self, front: int, rear: int) -> bool:
        """Check that both gear indices resolve to a table entry."""
        return 1 <= front <= self.front_count and 1 <= rear <= self.rear_count

    def chainring(self, front: int) -> int:
        return self.chainrings[front - 1]

    def sprocket(self, rear: int) -> int:
        return self.sprockets[rear - 1]


ELEVEN_SPEED_CASSETTE = (40, 35, 31, 27, 24, 21, 19, 17, 15, 13, 11)

PRESETS: dict[str, Drivetrain] = {
    "standard": Drivetrain("standard", (39, 53), ELEVEN_SPEED_CASSETTE),
    "compact": Drivetrain("compact", (24, 34), ELEVEN_SPEED_CASSETTE),
}

DEFAULT_PRESET = "standard"


def get_preset(name: str) -> Drivetrain:
    """Look up a drivetrain preset by name.

    Raises:
        KeyError: If no preset has that name
    """
    try:
        return PRESETS[name]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise KeyError(f"Unknown drivetrain preset '{name}' (known: {known})") from None


def shift_down(front: int, rear: int, front_count: int, rear_count: int) -> tuple[int, int]:
    """Move one step down the gear ladder (easier).

    Prefers a rear-only shift. Dropping to the small chainring moves the
    rear one cog harder so the effective ratio does not fall off a cliff.

    Returns:
        New (front, rear). Unchanged when already in the easiest gear.
    """
    new_front, new_rear = front, rear

    if rear > 2:
        new_rear -= 1
    elif rear > 1 and front == 1:
        new_rear -= 1
    elif front > 1:
        new_front -= 1
        if rear < rear_count - 1:
            new_rear += 1

    return _guard(front, rear, new_front, new_rear, front_count, rear_count)


def shift_up(front: int, rear: int, front_count: int, rear_count: int) -> tuple[int, int]:
    """Move one step up the gear ladder (harder).

    The smallest cog is only used on the big chainring; otherwise the chain
    moves to the next chainring and the rear one cog easier.

    Returns:
        New (front, rear). Unchanged when already in the hardest gear.
    """
    new_front, new_rear = front, rear

    if rear < rear_count - 1:
        new_rear += 1
    elif rear < rear_count and front == front_count:
        new_rear += 1
    elif front < front_count:
        new_front += 1
        if rear > 2:
            new_rear -= 1

    return _guard(front, rear, new_front, new_rear, front_count, rear_count)


def _guard(
    front: int,
    rear: int,
    new_front: int,
    new_rear: int,
    front_count: int,
    rear_count: int,
) -> tuple[int, int]:
    # Never hand out an index that would miss the teeth tables
    if 1 <= new_front <= front_count and 1 <= new_rear <= rear_count:
        return new_front, new_rear
    return front, rear
