import os

# Render off-screen unless started as the interactive game
if __name__ != "__main__":
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import gymnasium as gym
from gymnasium.spaces import MultiDiscrete
import numpy as np
import pygame
import math

from tile_clicker.constants import (
    CLICK_DELAY,
    FINISHED,
    GAME_DURATION,
    GRID_COLS,
    GRID_ROWS,
    LOST,
    LOST_PENALTY,
    MENU_DELAY,
)
from tile_clicker.difficulty import spawn_period, worth_lifetime
from tile_clicker.events import (
    MisclickMarker,
    ScoreChanged,
    StateChanged,
    TileRemoved,
    TileSpawned,
    TimeUpdated,
)
from tile_clicker.session import SessionStateMachine
from tile_clicker.timers import Timer


# Helper class for claim effects
class Particle:
    def __init__(self, pos, vel, color, lifetime, radius):
        self.pos = list(pos)
        self.vel = list(vel)
        self.color = color
        self.lifetime = lifetime
        self.radius = radius

    def update(self):
        self.pos[0] += self.vel[0]
        self.pos[1] += self.vel[1]
        self.lifetime -= 1
        self.radius = max(0, self.radius - 0.2)


class GameEnv(gym.Env):
    """
    A reflex game on a 5x5 grid. Tiles appear one at a time and lose worth
    while they wait; clicking a tile banks two points per second of worth
    left, clicking an empty cell ends the game. Over the 30 second session
    tiles decay and spawn up to three times faster.

    The simulation itself lives in SessionStateMachine; this class moves a
    cursor, turns space presses into clicks, and renders the events the
    machine emits.
    """
    metadata = {"render_modes": ["rgb_array"]}

    user_guide = (
        "Controls: Arrow keys to move the cursor. Space to click the cell under the cursor."
    )

    game_description = (
        "Click the tiles as they appear, before their value runs out. "
        "Clicking an empty cell ends the game, and everything speeds up as the clock runs down."
    )

    # Frames auto-advance so tiles keep decaying without input.
    auto_advance = True

    # --- Constants ---
    FIELD_SIZE = 500
    SCORE_HEIGHT = 80
    SCREEN_WIDTH = FIELD_SIZE
    SCREEN_HEIGHT = FIELD_SIZE + SCORE_HEIGHT
    CELL_SIZE = FIELD_SIZE // GRID_COLS
    FPS = 30

    # --- Colors ---
    COLOR_BG = (20, 20, 24)
    COLOR_CELL = (204, 204, 204)
    COLOR_TILE = (26, 26, 26)
    COLOR_TILE_SPENT = (130, 130, 130)
    COLOR_ERROR = (230, 26, 26)
    COLOR_CURSOR = (255, 200, 0)
    COLOR_PARTICLE = (255, 220, 120)
    COLOR_TEXT = (255, 255, 255)
    COLOR_TEXT_SHADOW = (10, 10, 10)

    def __init__(self, render_mode="rgb_array"):
        super().__init__()
        self.render_mode = render_mode

        # --- Spaces ---
        self.observation_space = gym.spaces.Box(
            low=0, high=255, shape=(self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3), dtype=np.uint8
        )
        self.action_space = MultiDiscrete([5, 2, 2])

        # --- Pygame Setup ---
        pygame.init()
        pygame.font.init()
        self.screen = pygame.Surface((self.SCREEN_WIDTH, self.SCREEN_HEIGHT))
        self.clock = pygame.time.Clock()
        self.font_hud = pygame.font.Font(None, 52)
        self.font_small = pygame.font.Font(None, 32)

        # --- State Variables (initialized in reset) ---
        self.machine = None
        self.tiles = {}
        self.markers = []
        self.particles = []
        self.cursor_pos = [0, 0]
        self.steps = 0
        self.score = 0
        self.remaining = GAME_DURATION
        self.game_over = False
        self.last_space_held = False
        self.menu_timer = None

        self.reset()

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)

        self.machine = SessionStateMachine(rng=self.np_random)
        self.tiles = {}
        self.markers = []
        self.particles = []
        self.cursor_pos = [GRID_COLS // 2, GRID_ROWS // 2]
        self.steps = 0
        self.score = 0
        self.remaining = GAME_DURATION
        self.game_over = False
        self.last_space_held = False
        self.menu_timer = Timer(MENU_DELAY)

        self.machine.start()
        self._consume_events(self.machine.poll_events())

        return self._get_observation(), self._get_info()

    def step(self, action):
        dt = 1.0 / self.FPS
        if self.game_over:
            self.menu_timer.tick(dt)
            self._update_particles()
            return self._get_observation(), 0, True, False, self._get_info()

        # --- Unpack Action ---
        movement, space_raw, _ = action
        space_held = bool(space_raw == 1)

        # Only the rising edge of space counts as a click
        is_click = space_held and not self.last_space_held
        self.last_space_held = space_held

        self._update_cursor(movement)
        if is_click and self.click_ready():
            # Sound effect placeholder: # sfx_click()
            self.machine.push_click(*self.cursor_pos)

        reward = self._consume_events(self.machine.tick(dt))
        self._update_particles()
        self.steps += 1

        terminated = self.machine.state == FINISHED
        if terminated:
            self.game_over = True

        return (
            self._get_observation(),
            reward,
            terminated,
            False,  # truncated is always False
            self._get_info(),
        )

    def click_ready(self):
        """Clicks are dropped for the first CLICK_DELAY seconds of a session."""
        session = self.machine.session
        return session is not None and session.elapsed >= CLICK_DELAY

    def menu_ready(self):
        """A finished game can be dismissed once MENU_DELAY seconds have passed."""
        return self.game_over and self.menu_timer.finished

    def point_at(self, col, row):
        """Move the cursor straight to a cell, so the next space press is a fresh click."""
        self.cursor_pos = [
            max(0, min(GRID_COLS - 1, int(col))),
            max(0, min(GRID_ROWS - 1, int(row))),
        ]
        self.last_space_held = False

    def _update_cursor(self, movement):
        if movement == 1:  # Up
            self.cursor_pos[1] -= 1
        elif movement == 2:  # Down
            self.cursor_pos[1] += 1
        elif movement == 3:  # Left
            self.cursor_pos[0] -= 1
        elif movement == 4:  # Right
            self.cursor_pos[0] += 1

        # Clamp cursor to grid boundaries
        self.cursor_pos[0] = max(0, min(GRID_COLS - 1, self.cursor_pos[0]))
        self.cursor_pos[1] = max(0, min(GRID_ROWS - 1, self.cursor_pos[1]))

    def _consume_events(self, events):
        reward = 0
        for event in events:
            if isinstance(event, TileSpawned):
                self.tiles[event.handle] = (event.col, event.row)
            elif isinstance(event, TileRemoved):
                self.tiles.pop(event.handle, None)
                reward += event.points
                self._create_particles(event.col, event.row, event.points)
                # Sound effect placeholder: # sfx_hit()
            elif isinstance(event, MisclickMarker):
                self.markers.append((event.col, event.row))
                # Sound effect placeholder: # sfx_error()
            elif isinstance(event, ScoreChanged):
                self.score = event.score
            elif isinstance(event, TimeUpdated):
                self.remaining = event.remaining
            elif isinstance(event, StateChanged):
                if event.reason == LOST:
                    reward -= LOST_PENALTY
        return reward

    def _create_particles(self, col, row, points):
        rect = self._cell_rect(col, row)
        for _ in range(4 + points):
            angle = self.np_random.uniform(0, 2 * math.pi)
            speed = self.np_random.uniform(1, 4)
            vel = (math.cos(angle) * speed, math.sin(angle) * speed)
            lifetime = int(self.np_random.integers(10, 20))
            self.particles.append(Particle(rect.center, vel, self.COLOR_PARTICLE, lifetime, 4))

    def _update_particles(self):
        for p in self.particles:
            p.update()
        self.particles = [p for p in self.particles if p.lifetime > 0]

    def _get_observation(self):
        self.screen.fill(self.COLOR_BG)
        self._render_game()
        self._render_ui()

        arr = pygame.surfarray.array3d(self.screen)
        return np.transpose(arr, (1, 0, 2)).astype(np.uint8)

    def _get_info(self):
        session = self.machine.session
        elapsed = min(session.elapsed, GAME_DURATION) if session is not None else 0.0
        return {
            "score": self.score,
            "steps": self.steps,
            "remaining": self.remaining,
            "state": self.machine.state,
            "reason": self.machine.reason,
            "tiles": len(self.tiles),
            "spawn_period": spawn_period(elapsed),
            "worth_lifetime": worth_lifetime(elapsed),
        }

    def _cell_rect(self, col, row):
        return pygame.Rect(
            col * self.CELL_SIZE,
            self.SCORE_HEIGHT + row * self.CELL_SIZE,
            self.CELL_SIZE,
            self.CELL_SIZE,
        )

    def _tile_color(self, worth):
        # Fresh tiles are near black and fade to grey as their worth runs out
        return tuple(
            int(spent + (fresh - spent) * worth)
            for fresh, spent in zip(self.COLOR_TILE, self.COLOR_TILE_SPENT)
        )

    def _render_game(self):
        inset = -int(self.CELL_SIZE * 0.05)

        # --- Background cells ---
        for col in range(GRID_COLS):
            for row in range(GRID_ROWS):
                rect = self._cell_rect(col, row).inflate(inset, inset)
                pygame.draw.rect(self.screen, self.COLOR_CELL, rect)

        # --- Tiles ---
        session = self.machine.session
        for col, row in self.tiles.values():
            worth = 0.0
            if session is not None:
                worth = session.grid.remaining(col, row) / session.grid.worth_seconds
            rect = self._cell_rect(col, row).inflate(inset, inset)
            pygame.draw.rect(self.screen, self._tile_color(worth), rect)

        # --- Misclick markers ---
        for col, row in self.markers:
            rect = self._cell_rect(col, row).inflate(inset, inset)
            pygame.draw.rect(self.screen, self.COLOR_ERROR, rect)

        # --- Particles ---
        for p in self.particles:
            pygame.draw.circle(self.screen, p.color, (int(p.pos[0]), int(p.pos[1])), int(p.radius))

        # --- Cursor ---
        if not self.game_over:
            rect = self._cell_rect(*self.cursor_pos)
            pygame.draw.rect(self.screen, self.COLOR_CURSOR, rect, 3)

    def _render_text(self, text, font, position, color=COLOR_TEXT, shadow_color=COLOR_TEXT_SHADOW):
        text_surf = font.render(str(text), True, color)
        shadow_surf = font.render(str(text), True, shadow_color)
        self.screen.blit(shadow_surf, (position[0] + 2, position[1] + 2))
        self.screen.blit(text_surf, position)

    def _render_ui(self):
        self._render_text(f"Score: {self.score}", self.font_hud, (15, 20))
        self._render_text(f"Time: {self.remaining:.1f}", self.font_hud, (self.SCREEN_WIDTH - 200, 20))

        if self.game_over:
            message = "MISSED!" if self.machine.reason == LOST else "TIME UP!"
            text_surf = self.font_hud.render(message, True, self.COLOR_ERROR)
            text_rect = text_surf.get_rect(
                center=(self.SCREEN_WIDTH // 2, self.SCORE_HEIGHT + self.FIELD_SIZE // 2)
            )
            self.screen.blit(text_surf, text_rect)
            if self.menu_ready():
                self._render_text(
                    "Press R to restart",
                    self.font_small,
                    (text_rect.left, text_rect.bottom + 10),
                )

    def close(self):
        pygame.quit()

    def validate_implementation(self):
        '''
        Verify the gymnasium API contract of this environment.
        '''
        # Test action space
        assert self.action_space.shape == (3,)
        assert self.action_space.nvec.tolist() == [5, 2, 2]

        # Test observation space
        test_obs = self._get_observation()
        assert test_obs.shape == (self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3)
        assert test_obs.dtype == np.uint8

        # Test reset
        obs, info = self.reset()
        assert obs.shape == (self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3)
        assert isinstance(info, dict)

        # Test step
        test_action = self.action_space.sample()
        obs, reward, term, trunc, info = self.step(test_action)
        assert obs.shape == (self.SCREEN_HEIGHT, self.SCREEN_WIDTH, 3)
        assert isinstance(reward, (int, float))
        assert isinstance(term, bool)
        assert trunc == False
        assert isinstance(info, dict)

        print("✓ Implementation validated successfully")


# Example of how to run the environment
if __name__ == "__main__":
    env = GameEnv(render_mode="rgb_array")
    print(env.user_guide)
    print(env.game_description)

    # --- Manual Play Loop ---
    obs, info = env.reset()

    # Set up a window to display the game
    pygame.display.set_caption("Tile Clicker")
    screen = pygame.display.set_mode((GameEnv.SCREEN_WIDTH, GameEnv.SCREEN_HEIGHT))

    running = True
    while running:
        action = [0, 0, 0]  # Default action: no-op

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    running = False
                elif event.key == pygame.K_r and env.menu_ready():
                    obs, info = env.reset()
                elif event.key == pygame.K_UP:
                    action[0] = 1
                elif event.key == pygame.K_DOWN:
                    action[0] = 2
                elif event.key == pygame.K_LEFT:
                    action[0] = 3
                elif event.key == pygame.K_RIGHT:
                    action[0] = 4
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                # Project the pointer onto the field; clicks on the HUD are ignored
                mx, my = event.pos
                if my >= GameEnv.SCORE_HEIGHT:
                    env.point_at(mx // GameEnv.CELL_SIZE, (my - GameEnv.SCORE_HEIGHT) // GameEnv.CELL_SIZE)
                    action[1] = 1

        if pygame.key.get_pressed()[pygame.K_SPACE]:
            action[1] = 1

        was_over = env.game_over
        obs, reward, terminated, truncated, info = env.step(action)

        # The observation is (H, W, C), but pygame surfaces are (W, H)
        surf = pygame.surfarray.make_surface(np.transpose(obs, (1, 0, 2)))
        screen.blit(surf, (0, 0))
        pygame.display.flip()

        if terminated and not was_over:
            print(f"Game Over ({info['reason']})! Final Score: {info['score']}")

        env.clock.tick(GameEnv.FPS)

    env.close()
