# src/game/level.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple
from .config import STAGE_H_LOWER, STAGE_H_UPPER, STAGE_V_LOWER, STAGE_V_UPPER, EngineConfig
from .geometry import Rectangle

Bounds = Tuple[float, float]


@dataclass
class Obstacle:
    """
    A pair of blocking spans with a passable gate between them.
    gate_bottom + gate_size + gate_top == 100 at all times.
    """
    position: float     # left edge, scrolls left every tick
    width: float
    gate_size: float
    gate_bottom: float = 0.0
    scored: bool = False

    @property
    def gate_top(self) -> float:
        """Height of the upper span."""
        return STAGE_V_UPPER - self.gate_bottom - self.gate_size

    @property
    def right(self) -> float:
        return self.position + self.width

    def set_gate(self, bottom: float):
        upper = STAGE_V_UPPER - self.gate_size
        if not STAGE_V_LOWER <= bottom <= upper:
            raise ValueError(f"gate_bottom {bottom} out of [{STAGE_V_LOWER}, {upper}]")
        self.gate_bottom = float(bottom)

    @property
    def lower_rect(self) -> Rectangle:
        return Rectangle(self.position, STAGE_V_LOWER, self.width, self.gate_bottom)

    @property
    def upper_rect(self) -> Rectangle:
        top = self.gate_top
        return Rectangle(self.position, STAGE_V_UPPER - top, self.width, top)

    @property
    def rects(self) -> Tuple[Rectangle, Rectangle]:
        return self.lower_rect, self.upper_rect


def randomize_gate(obstacle: Obstacle, min_bottom: float, max_bottom: float, rng: random.Random):
    bottom = rng.uniform(min_bottom, max_bottom)
    # uniform() may round one ulp past max_bottom
    obstacle.set_gate(min(max(bottom, min_bottom), max_bottom))


def gate_bounds(previous_bottom: float, cfg: EngineConfig) -> Bounds:
    """
    Range for the next gate bottom so that the flyer can always reach it from
    the previous gate.

    Going down, the worst case is the flyer leaving the previous gate at its
    bottom edge: the new gate's top edge may sit at most `max_down_travel`
    below that, minus the travel gap. Going up, the flyer leaves at the top
    edge of the previous gate and may climb `max_up_travel`, minus the gap.
    """
    min_bottom = previous_bottom - cfg.max_down_travel - cfg.gate_size + cfg.travel_gap
    if min_bottom < STAGE_V_LOWER:
        min_bottom = STAGE_V_LOWER

    max_bottom = previous_bottom + cfg.gate_size + cfg.max_up_travel - cfg.travel_gap
    if max_bottom > cfg.gate_bottom_upper_limit:
        max_bottom = cfg.gate_bottom_upper_limit

    return min_bottom, max_bottom


def randomize_next_gate(new: Obstacle, previous: Obstacle, cfg: EngineConfig, rng: random.Random) -> Bounds:
    """Randomize `new`'s gate relative to `previous` and return the bounds used."""
    lo, hi = gate_bounds(previous.gate_bottom, cfg)
    randomize_gate(new, lo, hi, rng)
    return lo, hi


class ObstacleStream:
    """
    Fixed pool of obstacles scrolling left, kept as a ring buffer.
    `head` indexes the front obstacle (leftmost); the one before it in the
    ring is the tail. When the front leaves the stage it is moved behind
    the tail and the head rotates, so identities cycle and nothing is
    reallocated.
    """
    def __init__(self,
                 cfg: EngineConfig,
                 rng: random.Random,
                 on_recycle: Optional[Callable[[Obstacle, Bounds], None]] = None):
        self.cfg = cfg
        self.rng = rng
        self.on_recycle = on_recycle
        self.obstacles: List[Obstacle] = [
            Obstacle(position=0.0, width=cfg.obstacle_width, gate_size=cfg.gate_size)
            for _ in range(cfg.pool_size)
        ]
        self.head = 0
        self.recycle_count = 0
        self.reset()

    def reset(self):
        """Place every obstacle off-stage to the right and randomize the whole chain."""
        self.head = 0
        self.recycle_count = 0
        offset = self.cfg.obstacle_offset
        previous: Optional[Obstacle] = None
        for i, obstacle in enumerate(self.obstacles):
            obstacle.position = STAGE_H_UPPER + i * offset
            obstacle.scored = False
            if previous is None:
                randomize_gate(obstacle, STAGE_V_LOWER, self.cfg.gate_bottom_upper_limit, self.rng)
            else:
                randomize_next_gate(obstacle, previous, self.cfg, self.rng)
            previous = obstacle

    def __len__(self) -> int:
        return len(self.obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return self.in_travel_order()

    def in_travel_order(self) -> Iterator[Obstacle]:
        n = len(self.obstacles)
        for k in range(n):
            yield self.obstacles[(self.head + k) % n]

    @property
    def front(self) -> Obstacle:
        return self.obstacles[self.head]

    @property
    def tail(self) -> Obstacle:
        return self.obstacles[(self.head - 1) % len(self.obstacles)]

    def advance(self) -> Optional[Obstacle]:
        """Scroll every obstacle; recycle the front one if it left the stage."""
        for obstacle in self.obstacles:
            obstacle.position -= self.cfg.obstacle_speed

        front = self.front
        if front.position > STAGE_H_LOWER - front.width:
            return None

        tail = self.tail
        front.position = tail.position + self.cfg.obstacle_offset
        front.scored = False
        bounds = randomize_next_gate(front, tail, self.cfg, self.rng)
        self.head = (self.head + 1) % len(self.obstacles)
        self.recycle_count += 1
        if self.on_recycle is not None:
            self.on_recycle(front, bounds)
        return front
