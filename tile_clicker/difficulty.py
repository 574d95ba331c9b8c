"""
Difficulty curve.

The virtual clock runs faster as the session progresses, which both speeds up
the decay of tile worth and shortens the spawn cadence. The relative speed
follows a quadratic ease-in:

    speed(t) = a * t^2 + b
    speed(0) = 1                 => b = 1
    speed(GAME_DURATION) = 3     => a = 2 / GAME_DURATION^2
"""

from .constants import BASE_DELAY, GAME_DURATION, TILE_WORTH_SECONDS

MAX_SPEED = 3.0


def relative_speed(elapsed):
    if elapsed < 0:
        raise ValueError(f"elapsed time must be non-negative, got {elapsed}")
    return (MAX_SPEED - 1.0) * elapsed ** 2 / GAME_DURATION ** 2 + 1.0


def spawn_period(elapsed):
    """Real seconds between timed spawns at `elapsed`."""
    return BASE_DELAY / relative_speed(elapsed)


def worth_lifetime(elapsed):
    """Real seconds a fresh tile stays worth points at `elapsed`."""
    return TILE_WORTH_SECONDS / relative_speed(elapsed)
