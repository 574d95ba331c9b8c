import os
import sys

import numpy as np
import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

# Ensure the repository root (containing the `tile_clicker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from tile_clicker.grid import Grid
from tile_clicker.session import SessionStateMachine

FRAME = 1.0 / 30


@pytest.fixture()
def rng():
    return np.random.default_rng(1234)


@pytest.fixture()
def grid():
    return Grid()


@pytest.fixture()
def machine(rng):
    m = SessionStateMachine(rng=rng)
    m.start()
    m.poll_events()
    return m


def tick_until(machine, predicate, dt=FRAME, limit=2000):
    """Tick `machine` until `predicate(machine)` holds; returns all events seen."""
    events = []
    for _ in range(limit):
        if predicate(machine):
            return events
        events.extend(machine.tick(dt))
    raise AssertionError("condition never reached")
