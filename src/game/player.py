# src/game/player.py
from __future__ import annotations
from dataclasses import dataclass
from .config import (
    FLYER_X, FLYER_INITIAL_Y, FLYER_W, FLYER_H, ASCEND_RATE, DESCEND_RATE,
    STAGE_V_LOWER, STAGE_V_UPPER, EngineConfig
)
from .geometry import Rectangle

INPUT_SOURCES = ("pointer", "key")


@dataclass
class Flyer:
    """
    Player object at a fixed x. Vertical motion is level-triggered:
    - any input held  -> climbs ascend_rate per tick
    - nothing held    -> sinks descend_rate per tick
    y is clamped to [0, 100 - height].
    """
    x: float = FLYER_X
    y: float = FLYER_INITIAL_Y
    width: float = FLYER_W
    height: float = FLYER_H
    ascend_rate: float = ASCEND_RATE
    descend_rate: float = DESCEND_RATE

    # raw input state, one flag per device
    pointer_down: bool = False
    key_down: bool = False

    @classmethod
    def from_config(cls, cfg: EngineConfig) -> "Flyer":
        return cls(
            x=float(cfg.flyer_x),
            y=float(cfg.flyer_initial_y),
            width=float(cfg.flyer_width),
            height=float(cfg.flyer_height),
            ascend_rate=float(cfg.ascend_rate),
            descend_rate=float(cfg.descend_rate),
        )

    @property
    def flying(self) -> bool:
        return self.pointer_down or self.key_down

    @property
    def upper_limit(self) -> float:
        return STAGE_V_UPPER - self.height

    @property
    def rect(self) -> Rectangle:
        return Rectangle(self.x, self.y, self.width, self.height)

    def set_input(self, source: str, active: bool):
        """Record the state of one input device. Takes effect on the next advance()."""
        if source == "pointer":
            self.pointer_down = bool(active)
        elif source == "key":
            self.key_down = bool(active)
        else:
            raise ValueError(f"Unknown input source {source!r}, expected one of {INPUT_SOURCES}")

    def set_flying(self, active: bool):
        self.set_input("key", active)

    def clear_input(self):
        self.pointer_down = False
        self.key_down = False

    def reset(self, y: float):
        self.y = float(y)

    def advance(self):
        """One tick of vertical motion."""
        if self.flying:
            self.y = min(self.y + self.ascend_rate, self.upper_limit)
        else:
            self.y = max(self.y - self.descend_rate, STAGE_V_LOWER)
