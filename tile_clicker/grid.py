import numpy as np

from .constants import GRID_COLS, GRID_ROWS, TILE_WORTH_SECONDS
from .scoring import points


class Grid:
    """
    Occupancy of the play field.

    Each cell is either empty or holds a tile: an opaque handle supplied by
    the caller plus a worth timer counting down from `worth_seconds`. Arrays
    are indexed [col, row]. Every coordinate is clamped into the grid before
    use, so out-of-range input lands on the nearest edge cell.
    """

    def __init__(self, cols=GRID_COLS, rows=GRID_ROWS, worth_seconds=TILE_WORTH_SECONDS):
        self.cols = cols
        self.rows = rows
        self.worth_seconds = worth_seconds
        self.occupied = np.zeros((cols, rows), dtype=bool)
        self.worth = np.zeros((cols, rows), dtype=np.float64)
        self.handles = np.full((cols, rows), None, dtype=object)

    @property
    def size(self):
        return self.cols * self.rows

    def clamp(self, col, row):
        col = max(0, min(self.cols - 1, int(col)))
        row = max(0, min(self.rows - 1, int(row)))
        return col, row

    def place(self, col, row, handle):
        """Occupy a cell with a fresh tile.

        Returns the handle of the tile it replaced, or None if the cell was free.
        """
        col, row = self.clamp(col, row)
        displaced = self.handles[col, row] if self.occupied[col, row] else None
        self.occupied[col, row] = True
        self.worth[col, row] = self.worth_seconds
        self.handles[col, row] = handle
        return displaced

    def is_free(self, col, row):
        col, row = self.clamp(col, row)
        return not self.occupied[col, row]

    def claim(self, col, row):
        """Remove the tile at (col, row).

        Returns (handle, points), or None when the cell is empty.
        """
        col, row = self.clamp(col, row)
        if not self.occupied[col, row]:
            return None
        handle = self.handles[col, row]
        score = points(self.worth[col, row])
        self.occupied[col, row] = False
        self.worth[col, row] = 0.0
        self.handles[col, row] = None
        return handle, score

    def tick(self, delta):
        # Expired tiles stay on the grid, worth nothing, until claimed.
        if delta < 0:
            raise ValueError(f"delta must be non-negative, got {delta}")
        self.worth[self.occupied] = np.maximum(self.worth[self.occupied] - delta, 0.0)

    def remaining(self, col, row):
        col, row = self.clamp(col, row)
        return float(self.worth[col, row]) if self.occupied[col, row] else 0.0

    def handle_at(self, col, row):
        col, row = self.clamp(col, row)
        return self.handles[col, row]

    def occupied_cells(self):
        return [(int(c), int(r)) for c, r in np.argwhere(self.occupied)]

    def free_cells(self):
        return [(int(c), int(r)) for c, r in np.argwhere(~self.occupied)]

    def free_count(self):
        return int(self.size - np.count_nonzero(self.occupied))

    def filled_count(self):
        return self.size - self.free_count()

    def is_full(self):
        return self.free_count() == 0
