import logging

import numpy as np

from .constants import SPAWN_ATTEMPTS, SPAWN_DISTANCE
from .events import MisclickMarker, TileSpawned

logger = logging.getLogger(__name__)


class SpawnPlacer:
    """
    Chooses where the next tile appears.

    Candidates are sampled uniformly, then pulled to within `distance` cells
    (per axis) of the last spawn, so consecutive tiles stay near each other.
    The allowed distance widens every second failed attempt. After `attempts`
    failed samples the placer picks directly among the free cells, so a grid
    with any free cell always yields one.
    """

    def __init__(self, rng=None, distance=SPAWN_DISTANCE, attempts=SPAWN_ATTEMPTS):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.distance = distance
        self.attempts = attempts

    def choose(self, grid, last):
        """Return the (col, row) for the next tile, or None if the grid is full."""
        if grid.is_full():
            return None

        last_col, last_row = last
        max_offset = max(grid.cols, grid.rows) - 1
        for attempt in range(self.attempts):
            x = int(self.rng.integers(0, grid.cols))
            y = int(self.rng.integers(0, grid.rows))
            reach = min(self.distance + attempt // 2, max_offset)
            dx = max(-reach, min(reach, x - last_col))
            dy = max(-reach, min(reach, y - last_row))
            col, row = grid.clamp(last_col + dx, last_row + dy)
            if (col, row) == (last_col, last_row):
                continue
            if grid.is_free(col, row):
                return col, row

        return self._fallback(grid, (last_col, last_row))

    def _fallback(self, grid, last):
        free = grid.free_cells()
        if not free:
            raise RuntimeError("spawn search found no free cell on a grid that is not full")
        # The last spawn cell is only reused when it is the single free cell.
        pool = [cell for cell in free if cell != last] or free
        return pool[int(self.rng.integers(0, len(pool)))]

    def spawn(self, session, make_handle):
        """Place one tile for `session`.

        Returns the TileSpawned event, or None when the grid is full.
        """
        cell = self.choose(session.grid, session.last_spawn)
        if cell is None:
            logger.debug("spawn skipped, grid full")
            return None
        col, row = cell
        handle = make_handle(col, row)
        session.grid.place(col, row, handle)
        session.last_spawn = (col, row)
        session.spawn_timer.reset()
        logger.debug("spawned tile %r at (%d, %d)", handle, col, row)
        return TileSpawned(col, row, handle)

    def misclick(self, grid, col, row):
        """Marker for a click on an empty cell. The grid is left untouched."""
        col, row = grid.clamp(col, row)
        return MisclickMarker(col, row)
