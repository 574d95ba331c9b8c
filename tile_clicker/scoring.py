import math

from .constants import POINTS_PER_SECOND


def points(remaining_seconds):
    """Points for a tile claimed with `remaining_seconds` left on its worth timer.

    Two points per remaining second, truncated, never negative.
    """
    return max(0, int(math.floor(remaining_seconds * POINTS_PER_SECOND)))
