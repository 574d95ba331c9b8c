"""
Session state machine.

A game session goes through four phases:

- setup, PAUSED: nothing is simulated, waiting for a start command
- running, RUNNING: tiles spawn and decay, clicks are applied
- finished, FINISHED: the simulation is frozen until the outcome is accepted
- cleanup: accepting the outcome discards the session and returns to PAUSED

Everything a session mutates (grid, score, clocks, last spawn position) lives
in one `Session` object that exists only between start and cleanup.
"""

import itertools
import logging
from collections import deque

from .constants import (
    BASE_DELAY,
    FINISHED,
    GAME_DURATION,
    GRID_COLS,
    GRID_ROWS,
    LOST,
    PAUSED,
    RUNNING,
    TIMED_OUT,
)
from .difficulty import relative_speed
from .events import ScoreChanged, StateChanged, TileRemoved, TimeUpdated
from .grid import Grid
from .spawn import SpawnPlacer
from .timers import Stopwatch, Timer, VirtualClock

logger = logging.getLogger(__name__)


class Session:
    """State of one RUNNING-to-FINISHED lifecycle."""

    def __init__(self, cols=GRID_COLS, rows=GRID_ROWS):
        self.grid = Grid(cols, rows)
        self.score = 0
        self.clock = Stopwatch()
        self.virtual_time = VirtualClock()
        self.spawn_timer = Timer(BASE_DELAY, repeating=True)
        self.last_spawn = (0, 0)

    @property
    def elapsed(self):
        return self.clock.elapsed

    def remaining_time(self):
        return max(GAME_DURATION - self.clock.elapsed, 0.0)


class SessionStateMachine:
    """
    Drives sessions from an external update loop.

    Commands (`start`, `push_click`, `accept_outcome`) are accepted at any
    time and ignored when they do not apply to the current state. `tick(dt)`
    advances the running session by `dt` real seconds and returns the events
    emitted since the previous drain.

    `handle_factory(col, row)` creates the opaque handle stored with each new
    tile; by default handles are increasing integers.
    """

    def __init__(self, rng=None, handle_factory=None, cols=GRID_COLS, rows=GRID_ROWS):
        self.placer = SpawnPlacer(rng)
        self.cols = cols
        self.rows = rows
        self._handle_ids = itertools.count(1)
        self.handle_factory = handle_factory or self._next_handle
        self.state = PAUSED
        self.reason = None
        self.session = None
        self.clicks = deque()
        self._events = []

    def _next_handle(self, col, row):
        return next(self._handle_ids)

    # --- Read-only views ---

    @property
    def score(self):
        return self.session.score if self.session is not None else 0

    @property
    def remaining_time(self):
        return self.session.remaining_time() if self.session is not None else GAME_DURATION

    # --- Events ---

    def _emit(self, event):
        self._events.append(event)

    def poll_events(self):
        events, self._events = self._events, []
        return events

    def _set_state(self, state, reason=None):
        self.state = state
        self._emit(StateChanged(state, reason))

    # --- Commands ---

    def start(self):
        """PAUSED -> RUNNING with a fresh session. From FINISHED this restarts."""
        if self.state == RUNNING:
            logger.debug("start ignored, a session is already running")
            return False
        if self.state == FINISHED:
            self.accept_outcome()

        self.session = Session(self.cols, self.rows)
        self.session.virtual_time.set_relative_speed(1.0)
        self.session.virtual_time.unpause()
        self.reason = None
        self.clicks.clear()
        self._set_state(RUNNING)
        self._emit(ScoreChanged(0))
        self._emit(TimeUpdated(self.session.remaining_time()))
        logger.info("session started")
        return True

    def restart(self):
        return self.start()

    def push_click(self, col, row):
        """Buffer a claim attempt; it is applied on the next tick."""
        if self.state != RUNNING:
            logger.debug("click at (%s, %s) ignored in state %s", col, row, self.state)
            return False
        self.clicks.append((col, row))
        return True

    def accept_outcome(self):
        """FINISHED -> PAUSED, discarding the finished session."""
        if self.state != FINISHED:
            logger.debug("accept_outcome ignored in state %s", self.state)
            return False
        logger.info("session cleaned up")
        self.session = None
        self.reason = None
        self.clicks.clear()
        self._set_state(PAUSED)
        return True

    # --- Simulation ---

    def tick(self, dt):
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        if self.state != RUNNING:
            self.clicks.clear()
            return self.poll_events()

        session = self.session
        session.clock.tick(dt)
        if session.elapsed > GAME_DURATION:
            self._emit(TimeUpdated(0.0))
            self._finish(TIMED_OUT)
            return self.poll_events()

        session.virtual_time.set_relative_speed(relative_speed(session.elapsed))
        virtual_dt = session.virtual_time.tick(dt)
        session.grid.tick(virtual_dt)
        session.spawn_timer.tick(virtual_dt)

        timer_spawn = session.spawn_timer.finished
        emptied = self._apply_clicks()

        if self.state == RUNNING:
            # At most one spawn per tick, whichever way it was requested.
            if timer_spawn or emptied:
                event = self.placer.spawn(session, self.handle_factory)
                if event is not None:
                    self._emit(event)
            self._emit(TimeUpdated(session.remaining_time()))
        return self.poll_events()

    def _apply_clicks(self):
        """Drain buffered clicks oldest-first. Returns True if a claim emptied the grid."""
        session = self.session
        grid = session.grid
        emptied = False
        while self.clicks:
            col, row = grid.clamp(*self.clicks.popleft())
            claimed = grid.claim(col, row)
            if claimed is None:
                self._emit(self.placer.misclick(grid, col, row))
                self._finish(LOST)
                return False

            handle, gained = claimed
            session.score += gained
            logger.debug("claimed tile %r at (%d, %d) for %d points", handle, col, row, gained)
            self._emit(TileRemoved(col, row, gained, handle))
            self._emit(ScoreChanged(session.score))
            if grid.filled_count() == 0:
                emptied = True
        return emptied

    def _finish(self, reason):
        session = self.session
        session.virtual_time.pause()
        self.reason = reason
        self.clicks.clear()
        logger.info(
            "session finished: %s, score %d after %.2fs", reason, session.score, session.elapsed
        )
        self._set_state(FINISHED, reason)
