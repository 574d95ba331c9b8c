import numpy as np
import pytest

from tile_clicker.constants import BASE_DELAY, FINISHED, LOST, LOST_PENALTY, RUNNING, TIMED_OUT, TILE_WORTH_SECONDS
from tile_clicker.env import GameEnv
from tile_clicker.policy import policy

NOOP = [0, 0, 0]
CLICK = [0, 1, 0]


@pytest.fixture()
def env():
    environment = GameEnv()
    environment.reset(seed=0)
    yield environment
    environment.close()


def test_spaces_and_reset(env):
    assert env.action_space.nvec.tolist() == [5, 2, 2]
    obs, info = env.reset(seed=3)
    assert obs.shape == (GameEnv.SCREEN_HEIGHT, GameEnv.SCREEN_WIDTH, 3)
    assert obs.dtype == np.uint8
    assert env.observation_space.contains(obs)
    assert info["state"] == RUNNING
    assert info["score"] == 0
    assert info["tiles"] == 0
    assert env.cursor_pos == [2, 2]


def test_validate_implementation(env):
    env.validate_implementation()


def test_click_guard_drops_early_clicks(env):
    obs, reward, terminated, truncated, info = env.step(CLICK)
    assert not terminated
    assert info["state"] == RUNNING
    assert reward == 0


def test_click_on_empty_cell_loses(env):
    for _ in range(15):
        env.step(NOOP)
    assert env.click_ready()
    assert env.machine.session.grid.is_free(*env.cursor_pos)

    obs, reward, terminated, truncated, info = env.step(CLICK)
    assert terminated
    assert not truncated
    assert reward == -LOST_PENALTY
    assert info["reason"] == LOST
    assert env.markers == [tuple(env.cursor_pos)]

    # Finished: further steps are inert, the menu unlocks after a short delay
    assert not env.menu_ready()
    for _ in range(25):
        obs, reward, terminated, truncated, info = env.step(CLICK)
        assert terminated
        assert reward == 0
    assert env.menu_ready()


def test_cursor_is_clamped(env):
    for _ in range(10):
        env.step([3, 0, 0])
        env.step([1, 0, 0])
    assert env.cursor_pos == [0, 0]


def test_seeded_resets_are_reproducible():
    positions = []
    for _ in range(2):
        environment = GameEnv()
        environment.reset(seed=7)
        for _ in range(90):
            environment.step(NOOP)
        positions.append(sorted(environment.tiles.values()))
        environment.close()
    assert positions[0] == positions[1]
    assert len(positions[0]) > 0


def test_policy_plays_until_timeout(env):
    total = 0
    terminated = False
    info = {}
    for _ in range(1200):
        obs, reward, terminated, truncated, info = env.step(policy(env))
        total += reward
        if terminated:
            break
    assert terminated
    assert info["state"] == FINISHED
    assert info["reason"] == TIMED_OUT
    assert info["score"] > 0
    assert total == info["score"]


def test_info_reports_difficulty(env):
    _, info = env.reset(seed=1)
    assert info["spawn_period"] == BASE_DELAY
    assert info["worth_lifetime"] == TILE_WORTH_SECONDS

    for _ in range(25 * GameEnv.FPS):
        obs, reward, terminated, truncated, info = env.step(NOOP)
    assert not terminated
    assert info["spawn_period"] < BASE_DELAY / 2
    assert info["worth_lifetime"] < TILE_WORTH_SECONDS / 2


def test_pointer_click_registers_while_space_held(env):
    for _ in range(15):
        env.step([0, 1, 0])
    assert env.last_space_held

    env.point_at(9, -4)
    assert env.cursor_pos == [4, 0]
    assert env.machine.session.grid.is_free(4, 0)

    obs, reward, terminated, truncated, info = env.step(CLICK)
    assert terminated
    assert info["reason"] == LOST
    assert env.markers == [(4, 0)]
