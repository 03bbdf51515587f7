# src/game/engine.py
from __future__ import annotations
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .geometry import Rectangle, overlaps
from .level import Obstacle, ObstacleStream
from .player import Flyer


class TickResult(Enum):
    RUNNING = "running"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of one frame for the presentation layer."""
    ticks: int
    score: int
    state: TickResult
    flyer: Rectangle
    obstacles: Tuple[Tuple[Rectangle, Rectangle], ...]   # (lower, upper) in travel order


class Engine:
    """
    Fixed-timestep simulation. Owns every piece of game state; the driver
    calls tick() once per interval and feeds input through
    on_flying_input_changed(), which only records flags.

    - state RUNNING until the flyer touches the leader's spans, then GAME_OVER
    - GAME_OVER is terminal until restart()
    """
    def __init__(self,
                 cfg: Optional[EngineConfig] = None,
                 seed: Optional[int] = None,
                 on_score: Optional[Callable[[int], None]] = None,
                 on_game_over: Optional[Callable[[int], None]] = None):
        self.cfg = (cfg or DEFAULT_CONFIG).validate()
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.on_score = on_score
        self.on_game_over = on_game_over

        self.flyer = Flyer.from_config(self.cfg)
        self.stream = ObstacleStream(self.cfg, self.rng)
        self.score = 0
        self.ticks = 0
        self.state = TickResult.RUNNING

    # -------------------- Input --------------------

    def on_flying_input_changed(self, active: bool, source: str = "key"):
        self.flyer.set_input(source, active)

    # -------------------- Core API --------------------

    def tick(self) -> TickResult:
        if self.state is TickResult.GAME_OVER:
            return self.state

        self.stream.advance()
        self.flyer.advance()
        self.ticks += 1

        leader = self.leader()
        if self.flyer.x > leader.right:
            leader.scored = True
            self.score += 1
            if self.on_score is not None:
                self.on_score(self.score)
            leader = self.leader()

        flyer_rect = self.flyer.rect
        if any(overlaps(flyer_rect, span) for span in leader.rects):
            self.state = TickResult.GAME_OVER
            if self.on_game_over is not None:
                self.on_game_over(self.score)

        return self.state

    def restart(self, seed: Optional[int] = None, reseed: bool = False):
        """
        Reinitialize flyer, obstacles and score.
        - no argument: replay the current seed
        - seed: use that seed
        - reseed=True: draw a fresh random seed
        """
        if seed is None and reseed:
            seed = random.randrange(0, 2**32 - 1)
        if seed is not None:
            self.seed = seed
        self.rng.seed(self.seed)

        self.flyer.reset(self.cfg.flyer_initial_y)
        self.stream.reset()
        self.score = 0
        self.ticks = 0
        self.state = TickResult.RUNNING

    # -------------------- Accessors --------------------

    @property
    def is_running(self) -> bool:
        return self.state is TickResult.RUNNING

    def leader(self) -> Obstacle:
        """Nearest obstacle not yet passed (the one scored and collided against)."""
        for obstacle in self.stream.in_travel_order():
            if not obstacle.scored:
                return obstacle
        # every obstacle scored would need the whole pool behind the flyer
        raise RuntimeError("no unscored obstacle left in the stream")

    def upcoming(self) -> List[Obstacle]:
        """Unscored obstacles in travel order, leader first."""
        return [o for o in self.stream.in_travel_order() if not o.scored]

    def flyer_rect(self) -> Rectangle:
        return self.flyer.rect

    def obstacle_rects(self) -> List[Tuple[Rectangle, Rectangle]]:
        return [o.rects for o in self.stream.in_travel_order()]

    def snapshot(self) -> Snapshot:
        return Snapshot(
            ticks=self.ticks,
            score=self.score,
            state=self.state,
            flyer=self.flyer_rect(),
            obstacles=tuple(self.obstacle_rects()),
        )
