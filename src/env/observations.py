# src/env/observations.py
from __future__ import annotations
from typing import Optional, Tuple
import numpy as np

from src.game.config import STAGE_H_UPPER, STAGE_V_UPPER
from src.game.level import Obstacle

OBS_LABELS: Tuple[str, ...] = (
    "y", "flying",
    "lead_dx", "lead_bot", "lead_top",
    "next_bot", "next_top",
)
OBS_SIZE = len(OBS_LABELS)

OBS_LOW = np.array([0.0, 0.0, -1.0, 0.0, 0.0, 0.0, 0.0], dtype=np.float32)
OBS_HIGH = np.ones(OBS_SIZE, dtype=np.float32)


def _clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return lo if x < lo else (hi if x > hi else x)

def _gate_edges(obstacle: Optional[Obstacle]) -> Tuple[float, float]:
    """(bottom edge, top edge) of the gate, normalized. No obstacle -> fully open."""
    if obstacle is None:
        return 0.0, 1.0
    bottom = obstacle.gate_bottom / STAGE_V_UPPER
    top = (obstacle.gate_bottom + obstacle.gate_size) / STAGE_V_UPPER
    return _clamp(bottom), _clamp(top)

def build_observation(engine) -> np.ndarray:
    """
    Returns a fixed (7,) float32 vector:
      [ y_norm, flying,
        lead_dx, lead_gate_bottom, lead_gate_top,
        next_gate_bottom, next_gate_top ]
    - y_norm uses the flyer's bottom edge over [0, 100 - height] -> [0,1]
    - flying is the current input state (0/1)
    - lead_dx = (leader.position - flyer.x) / 100, clipped to [-1,1]
    - gate edges are stage heights / 100
    """
    flyer = engine.flyer
    upcoming = engine.upcoming()
    leader = upcoming[0]
    nxt = upcoming[1] if len(upcoming) > 1 else None

    y_norm = _clamp(flyer.y / max(1e-6, flyer.upper_limit))
    flying = 1.0 if flyer.flying else 0.0
    lead_dx = _clamp((leader.position - flyer.x) / STAGE_H_UPPER, -1.0, 1.0)
    lead_bot, lead_top = _gate_edges(leader)
    next_bot, next_top = _gate_edges(nxt)

    return np.asarray(
        [y_norm, flying, lead_dx, lead_bot, lead_top, next_bot, next_top],
        dtype=np.float32,
    )
