"""
Plain timers advanced by an explicit delta.

Nothing here reads a clock. The session state machine passes the frame delta
in every tick, so a session can be stepped at any rate (a fixed environment
FPS, a real display loop, or a test).
"""


def _check_delta(delta):
    if delta < 0:
        raise ValueError(f"delta must be non-negative, got {delta}")


class Timer:
    """Countdown over `duration` seconds.

    A once-timer latches `finished` when it runs out. A repeating timer wraps
    around, keeping the overshoot, and reports `finished` only on the tick in
    which it wrapped.
    """

    def __init__(self, duration, repeating=False):
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration}")
        self.duration = float(duration)
        self.repeating = repeating
        self.elapsed = 0.0
        self.finished = False

    def tick(self, delta):
        _check_delta(delta)
        if self.repeating:
            self.elapsed += delta
            wraps = int(self.elapsed // self.duration)
            self.elapsed -= wraps * self.duration
            self.finished = wraps > 0
        else:
            self.elapsed = min(self.elapsed + delta, self.duration)
            self.finished = self.elapsed >= self.duration
        return self

    def reset(self):
        self.elapsed = 0.0
        self.finished = False


class Stopwatch:
    def __init__(self):
        self.elapsed = 0.0

    def tick(self, delta):
        _check_delta(delta)
        self.elapsed += delta
        return self


class VirtualClock:
    """Simulation time: real time scaled by a relative speed."""

    def __init__(self, relative_speed=1.0):
        self.relative_speed = 1.0
        self.paused = False
        self.delta = 0.0
        self.set_relative_speed(relative_speed)

    def set_relative_speed(self, speed):
        if speed < 0:
            raise ValueError(f"relative speed must be non-negative, got {speed}")
        self.relative_speed = float(speed)

    def pause(self):
        self.paused = True

    def unpause(self):
        self.paused = False

    def tick(self, real_delta):
        """Advance by `real_delta` real seconds and return the virtual delta."""
        _check_delta(real_delta)
        self.delta = 0.0 if self.paused else real_delta * self.relative_speed
        return self.delta
