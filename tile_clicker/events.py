"""Events the session state machine emits for the presentation layer."""

from collections import namedtuple

TileSpawned = namedtuple("TileSpawned", ["col", "row", "handle"])
TileRemoved = namedtuple("TileRemoved", ["col", "row", "points", "handle"])
MisclickMarker = namedtuple("MisclickMarker", ["col", "row"])
ScoreChanged = namedtuple("ScoreChanged", ["score"])
TimeUpdated = namedtuple("TimeUpdated", ["remaining"])
StateChanged = namedtuple("StateChanged", ["state", "reason"])
