# src/env/flappy_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from src.game.config import WIDTH, HEIGHT, FRAME_INTERVAL_MS, EngineConfig
from src.game.engine import Engine, TickResult
from src.game.render import draw_world, draw_hud
from src.env.observations import build_observation, OBS_LOW, OBS_HIGH

POINT_REWARD = 10.0


class FlappyEnv(gym.Env):
    """
    Flappy Gates Gymnasium environment (vector observations).
    - Simulation ticks every 30 ms (~33 Hz).
    - Agent acts every `frame_skip` ticks (default 2).
    - Actions: 0 = release, 1 = hold flying input.
    - Observation: shape (7,), float32 (see observations.build_observation).
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 1000 // FRAME_INTERVAL_MS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 2,
                 time_limit_seconds: Optional[float] = 60.0,
                 config: Optional[EngineConfig] = None):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"], \
            f"Invalid render_mode {render_mode}"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.config = config

        ticks_per_second = 1000.0 / FRAME_INTERVAL_MS
        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(ticks_per_second * time_limit_seconds / self.frame_skip)

        # --- Gym spaces ---
        self.action_space = gym.spaces.Discrete(2)
        self.observation_space = gym.spaces.Box(low=OBS_LOW, high=OBS_HIGH, dtype=np.float32)

        # --- Runtime state ---
        self.engine: Optional[Engine] = None
        self.timestep: int = 0                   # number of *decision* steps elapsed

        # Rendering
        self.screen = None
        self.clock = None
        self.font = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # Seeding policy:
        # - If a seed is provided, use it directly for the Engine for strict reproducibility.
        # - If not, let the Engine draw a fresh seed internally.
        engine_seed = int(seed) if seed is not None else None

        if self.engine is None:
            self.engine = Engine(self.config, seed=engine_seed)
        else:
            self.engine.restart(seed=engine_seed, reseed=engine_seed is None)
        self.engine.flyer.clear_input()
        self.timestep = 0

        obs = self._get_obs()
        info = {"seed": self.engine.seed, "score": 0, "ticks": 0}
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.engine is not None, "Call reset() before step()"

        self.engine.on_flying_input_changed(bool(action == 1), source="key")

        score_before = self.engine.score
        for _ in range(self.frame_skip):
            if self.engine.tick() is TickResult.GAME_OVER:
                break

        alive = self.engine.is_running
        points = self.engine.score - score_before
        reward = (1.0 + POINT_REWARD * points) if alive else -1.0

        self.timestep += 1
        terminated = not alive
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "seed": self.engine.seed,
            "score": self.engine.score,
            "ticks": self.engine.ticks,
            "timestep": self.timestep,
        }

        if self.render_mode == "human":
            self.render()

        return obs, float(reward), terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.engine is not None
        return build_observation(self.engine)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.engine is None:
            return None

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Flappy Gates — Gym Env")
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))
            self.clock = pygame.time.Clock()
            self.font = pygame.font.SysFont("jetbrainsmono", 36)

        snap = self.engine.snapshot()
        draw_world(self.screen, snap)
        draw_hud(self.screen, self.font, snap, seed=self.engine.seed)

        if self.render_mode == "human":
            # Pump minimal event queue so the OS doesn't think we're hung
            pygame.event.pump()
            pygame.display.flip()
            self.clock.tick(self.metadata["render_fps"])
            return None

        # (H, W, 3) uint8 array
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
            self.font = None
