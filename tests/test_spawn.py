import pytest

from tile_clicker.events import MisclickMarker, TileSpawned
from tile_clicker.grid import Grid
from tile_clicker.session import Session
from tile_clicker.spawn import SpawnPlacer


class ScriptedRng:
    """Stands in for numpy's Generator.integers, returning queued values in order."""

    def __init__(self, values):
        self.values = list(values)

    def integers(self, low, high):
        value = self.values.pop(0) if self.values else low
        assert low <= value < high
        return value


def fill_except(grid, keep):
    for col in range(grid.cols):
        for row in range(grid.rows):
            if (col, row) not in keep:
                grid.place(col, row, (col, row))


def test_candidate_is_pulled_towards_last_spawn(grid):
    placer = SpawnPlacer(ScriptedRng([4, 4]))
    assert placer.choose(grid, (0, 0)) == (2, 2)


def test_last_spawn_cell_is_never_repeated(grid):
    placer = SpawnPlacer(ScriptedRng([2, 2, 0, 4]))
    assert placer.choose(grid, (2, 2)) == (0, 4)


def test_distance_widens_after_failures(grid):
    for col in range(3):
        for row in range(3):
            grid.place(col, row, "near")
    placer = SpawnPlacer(ScriptedRng([4, 4] * 3))
    # reach 2, 2, then 3
    assert placer.choose(grid, (0, 0)) == (3, 3)


def test_fallback_after_exhausted_attempts(grid):
    placer = SpawnPlacer(ScriptedRng([]), attempts=8)
    # Every sample lands on the last spawn cell, so the free-cell fallback decides
    assert placer.choose(grid, (0, 0)) == (0, 1)


@pytest.mark.parametrize("free,last", [
    ((4, 4), (0, 0)),
    ((0, 0), (4, 4)),
    ((2, 3), (2, 3)),
])
def test_single_free_cell_is_always_found(rng, grid, free, last):
    fill_except(grid, {free})
    placer = SpawnPlacer(rng)
    assert placer.choose(grid, last) == free


def test_full_grid_is_a_noop(rng):
    session = Session()
    fill_except(session.grid, set())
    placer = SpawnPlacer(rng)
    assert placer.spawn(session, lambda col, row: "new") is None
    assert session.grid.is_full()
    assert session.last_spawn == (0, 0)


def test_spawn_never_overwrites(rng):
    session = Session()
    placer = SpawnPlacer(rng)
    handles = iter(range(100))
    while not session.grid.is_full():
        free_before = set(session.grid.free_cells())
        event = placer.spawn(session, lambda col, row: next(handles))
        assert isinstance(event, TileSpawned)
        assert (event.col, event.row) in free_before
        assert session.last_spawn == (event.col, event.row)
        assert session.grid.handle_at(event.col, event.row) == event.handle
    assert session.grid.filled_count() == 25


def test_spawn_resets_cadence_timer(rng):
    session = Session()
    session.spawn_timer.tick(0.5)
    SpawnPlacer(rng).spawn(session, lambda col, row: (col, row))
    assert session.spawn_timer.elapsed == 0.0


def test_misclick_marker_does_not_touch_grid(rng, grid):
    marker = SpawnPlacer(rng).misclick(grid, 9, -2)
    assert marker == MisclickMarker(4, 0)
    assert grid.free_count() == 25


class BrokenGrid(Grid):
    """Claims a free cell exists but never offers one."""

    def is_full(self):
        return False

    def is_free(self, col, row):
        return False

    def free_cells(self):
        return []


def test_search_failure_on_non_full_grid_is_fatal(rng):
    placer = SpawnPlacer(rng, attempts=4)
    with pytest.raises(RuntimeError):
        placer.choose(BrokenGrid(), (0, 0))
