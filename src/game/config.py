from __future__ import annotations
import math
from dataclasses import dataclass

# --- Display ---
WIDTH = 480
HEIGHT = 640
FRAME_INTERVAL_MS = 30      # one simulation tick every 30 ms

# --- Stage (normalized units, 0..100 on each axis, y grows upwards) ---
STAGE_H_LOWER = 0.0
STAGE_H_UPPER = 100.0
STAGE_V_LOWER = 0.0
STAGE_V_UPPER = 100.0

# --- Flyer ---
FLYER_X = 15.0              # flyer’s fixed x (world scrolls left)
FLYER_INITIAL_Y = 50.0
FLYER_W = 4.0
FLYER_H = 5.0
ASCEND_RATE = 0.8           # units per tick while flying input is held
DESCEND_RATE = 0.5          # units per tick otherwise

# --- Obstacles ---
OBSTACLE_W = 10.0
OBSTACLE_GAP = 15.0         # distance between the end of an obstacle and the start of the next
GATE_SIZE = 30.0            # passable opening
OBSTACLE_SPEED = 0.3        # units per tick
SEED_DEFAULT = 12345

# --- Debug ---
DEBUG_TICK_LOGS = False
DEBUG_OBS_OVERLAY = False

# --- Colors (RGB) ---
COLOR_BG = (112, 197, 206)
COLOR_FG = (250, 250, 250)
COLOR_FLYER = (245, 200, 60)
COLOR_OBSTACLE = (83, 160, 60)
COLOR_OBSTACLE_EDGE = (40, 90, 30)
COLOR_DANGER = (230, 70, 70)


class ConfigError(ValueError):
    """Engine constants that cannot produce a playable game."""


@dataclass(frozen=True)
class EngineConfig:
    """
    Tuning of the simulation. Defaults mirror the module constants; tests and
    experiments build variants (e.g. a wider gate) with keyword overrides.
    """
    flyer_x: float = FLYER_X
    flyer_initial_y: float = FLYER_INITIAL_Y
    flyer_width: float = FLYER_W
    flyer_height: float = FLYER_H
    ascend_rate: float = ASCEND_RATE
    descend_rate: float = DESCEND_RATE
    obstacle_width: float = OBSTACLE_W
    obstacle_gap: float = OBSTACLE_GAP
    gate_size: float = GATE_SIZE
    obstacle_speed: float = OBSTACLE_SPEED

    @property
    def obstacle_offset(self) -> float:
        """Distance between the start of an obstacle and the start of the next one."""
        return self.obstacle_width + self.obstacle_gap

    @property
    def pool_size(self) -> int:
        """Maximum number of obstacles that can be on stage at once."""
        return math.floor(STAGE_H_UPPER / self.obstacle_offset) + 1

    @property
    def frames_between(self) -> int:
        """
        Ticks between an obstacle's trailing edge clearing the flyer and the
        next obstacle's leading edge reaching it.
        """
        return math.floor((self.obstacle_gap - self.flyer_width) / self.obstacle_speed)

    @property
    def max_up_travel(self) -> float:
        return self.frames_between * self.ascend_rate

    @property
    def max_down_travel(self) -> float:
        return self.frames_between * self.descend_rate

    @property
    def travel_gap(self) -> float:
        """Difficulty margin: the greater the gap, the easier the game."""
        return self.flyer_height * 2

    @property
    def gate_bottom_upper_limit(self) -> float:
        return STAGE_V_UPPER - self.gate_size

    @property
    def flyer_upper_limit(self) -> float:
        return STAGE_V_UPPER - self.flyer_height

    def validate(self) -> "EngineConfig":
        """Raise ConfigError unless every gate derived from any previous gate is reachable."""
        positives = {
            "flyer_width": self.flyer_width,
            "flyer_height": self.flyer_height,
            "ascend_rate": self.ascend_rate,
            "descend_rate": self.descend_rate,
            "obstacle_width": self.obstacle_width,
            "obstacle_speed": self.obstacle_speed,
        }
        for name, value in positives.items():
            if not value > 0:
                raise ConfigError(f"{name} must be > 0, got {value}")
        if self.obstacle_gap < 0:
            raise ConfigError(f"obstacle_gap must be >= 0, got {self.obstacle_gap}")
        if not 0 < self.gate_size < STAGE_V_UPPER:
            raise ConfigError(f"gate_size must be in (0, {STAGE_V_UPPER}), got {self.gate_size}")
        if self.flyer_height >= STAGE_V_UPPER or self.flyer_width >= STAGE_H_UPPER:
            raise ConfigError("flyer does not fit the stage")
        if not STAGE_V_LOWER <= self.flyer_initial_y <= self.flyer_upper_limit:
            raise ConfigError(f"flyer_initial_y out of [0, {self.flyer_upper_limit}]")
        if self.pool_size <= 0:
            raise ConfigError(f"obstacle pool size must be > 0, got {self.pool_size}")
        if self.frames_between <= 0:
            raise ConfigError("obstacle_gap too small for the flyer to travel between obstacles")
        # An obstacle must be scored before it can leave the stage and get recycled.
        if self.flyer_x <= self.obstacle_speed or self.flyer_x + self.flyer_width > STAGE_H_UPPER:
            raise ConfigError(f"flyer_x must be in ({self.obstacle_speed}, {STAGE_H_UPPER - self.flyer_width}]")
        # The tail's trailing edge never drops to (N - 1) * offset, so there is always an unscored obstacle.
        last_lead = (self.pool_size - 1) * self.obstacle_offset
        if self.flyer_x > last_lead:
            raise ConfigError(f"flyer_x must be <= {last_lead} or every obstacle can be scored at once")

        # The [min_bottom, max_bottom] range must be non-empty for every previous
        # bottom in [0, 100 - gate_size]; the three conditions cover the worst cases.
        up, down, gap, size = self.max_up_travel, self.max_down_travel, self.travel_gap, self.gate_size
        if 2 * gap - 2 * size > up + down:
            raise ConfigError("travel_gap too large: consecutive gates can be unreachable")
        if size + up - gap < 0:
            raise ConfigError("gate cannot be reached upwards from the lowest gate")
        if gap > size + down:
            raise ConfigError("gate cannot be reached downwards from the highest gate")
        return self


DEFAULT_CONFIG = EngineConfig()
