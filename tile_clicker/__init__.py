"""Tile Clicker: a timed reflex game engine and its gymnasium environment."""

from .constants import FINISHED, LOST, PAUSED, RUNNING, TIMED_OUT
from .grid import Grid
from .session import Session, SessionStateMachine
from .spawn import SpawnPlacer

__version__ = "0.1.0"
