"""Fixed game constants. Nothing here is configurable at runtime."""

# --- Grid ---
GRID_COLS = 5
GRID_ROWS = 5

# --- Session timing (seconds) ---
GAME_DURATION = 30.0
BASE_DELAY = 0.8          # spawn cadence at 1x speed
TILE_WORTH_SECONDS = 5.0  # worth timer of a fresh tile at 1x speed
CLICK_DELAY = 0.4         # clicks ignored right after a session starts
MENU_DELAY = 0.8          # outcome commands ignored right after a session ends

# --- Scoring ---
POINTS_PER_SECOND = 2
LOST_PENALTY = 10

# --- Spawning ---
SPAWN_DISTANCE = 2
SPAWN_ATTEMPTS = 64

# --- Session states ---
PAUSED = "PAUSED"
RUNNING = "RUNNING"
FINISHED = "FINISHED"

# --- Finish reasons ---
LOST = "LOST"
TIMED_OUT = "TIMED_OUT"
