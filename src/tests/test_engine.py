# src/tests/test_engine.py
"""
Simulation tick: scoring, collision, restart determinism.

Usage (from repo root):
  python -m pytest src/tests/test_engine.py
  python -m src.tests.test_engine
"""
from __future__ import annotations
import dataclasses
from typing import List, Tuple
import pytest

from src.game.config import EngineConfig, FLYER_H, DESCEND_RATE
from src.game.engine import Engine, TickResult
from src.game.geometry import overlaps

# Gate wide enough that a flyer hovering mid-stage can never touch a span.
WIDE_GATE = EngineConfig(gate_size=90.0)
HOVER_Y = 47.5


def _hover(engine: Engine):
    engine.on_flying_input_changed(engine.flyer.y < HOVER_Y)


def test_free_fall_scenario():
    """No input from y=50: floor reached within (100 - h) / descend ticks, and kept."""
    engine = Engine(seed=1)
    ticks = int((100 - FLYER_H) / DESCEND_RATE)
    for _ in range(ticks):
        assert engine.tick() is TickResult.RUNNING
    assert engine.flyer.y == 0.0
    for _ in range(10):
        engine.tick()
        assert engine.flyer.y == 0.0


def test_falls_into_first_lower_span():
    """gate 30, width 10, gap 15, speed 0.3, flyer at x=10 and no input."""
    engine = Engine(EngineConfig(flyer_x=10.0), seed=2024)
    first = engine.stream.front
    result = TickResult.RUNNING
    while result is TickResult.RUNNING and engine.ticks < 367:
        result = engine.tick()

    assert result is TickResult.GAME_OVER
    # right edge of the flyer (x=14) meets the obstacle once it has moved 86 units
    assert engine.ticks == 287
    assert engine.leader() is first
    assert overlaps(engine.flyer_rect(), first.lower_rect)
    assert not overlaps(engine.flyer_rect(), first.upper_rect)


def test_holding_input_hits_upper_span():
    engine = Engine(seed=9)
    engine.on_flying_input_changed(True, source="pointer")
    while engine.tick() is TickResult.RUNNING:
        pass
    assert 269 <= engine.ticks <= 271
    assert engine.flyer.y == pytest.approx(95.0)
    assert overlaps(engine.flyer_rect(), engine.leader().upper_rect)


def test_game_over_is_terminal():
    engine = Engine(EngineConfig(flyer_x=10.0), seed=3)
    while engine.tick() is TickResult.RUNNING:
        pass
    ticks, y = engine.ticks, engine.flyer.y
    positions = [o.position for o in engine.stream]
    for _ in range(20):
        assert engine.tick() is TickResult.GAME_OVER
    assert engine.ticks == ticks
    assert engine.flyer.y == y
    assert [o.position for o in engine.stream] == positions
    assert not engine.is_running


def test_score_once_per_obstacle():
    scores: List[int] = []
    engine = Engine(WIDE_GATE, seed=5, on_score=scores.append)
    score_ticks: List[int] = []
    previous = 0
    for _ in range(2000):
        _hover(engine)
        assert engine.tick() is TickResult.RUNNING
        delta = engine.score - previous
        assert delta in (0, 1)
        if delta:
            score_ticks.append(engine.ticks)
        previous = engine.score

    # obstacle k is passed once 100 + 25k + 10 - 0.3t < 15
    assert score_ticks[0] == 317
    assert engine.score == 21
    assert scores == list(range(1, 22))
    intervals = [b - a for a, b in zip(score_ticks, score_ticks[1:])]
    assert all(i in (83, 84) for i in intervals)


def test_leader_moves_on_after_scoring():
    engine = Engine(WIDE_GATE, seed=6)
    first = engine.leader()
    while engine.score == 0:
        _hover(engine)
        engine.tick()
    assert first.scored
    assert engine.leader() is not first
    assert engine.leader() is engine.upcoming()[0]
    assert first not in engine.upcoming()
    # still on stage until it leaves at -width, then recycled unscored
    while engine.stream.recycle_count == 0:
        _hover(engine)
        engine.tick()
    assert not first.scored
    assert engine.stream.tail is first
    assert engine.score == 1


def test_flyer_at_pool_edge_always_has_a_leader():
    # 4 obstacles 30 apart: the tail's trailing edge stays beyond x=90
    cfg = EngineConfig(obstacle_gap=20.0, flyer_x=90.0, gate_size=90.0)
    assert cfg.pool_size == 4 and cfg.validate() is cfg
    engine = Engine(cfg, seed=9)
    for _ in range(3000):
        _hover(engine)
        assert engine.tick() is TickResult.RUNNING
        assert engine.upcoming()
        assert engine.flyer.x < engine.leader().right
    assert engine.score > 0


def _trace(engine: Engine, ticks: int) -> List[Tuple[int, TickResult, float, float]]:
    out = []
    for t in range(ticks):
        engine.on_flying_input_changed((t % 40) < 18)
        result = engine.tick()
        out.append((engine.score, result, engine.flyer.y, engine.leader().gate_bottom))
    return out


def test_restart_replays_fresh_engine():
    engine = Engine(seed=42)
    first = _trace(engine, 1500)
    engine.restart()
    again = _trace(engine, 1500)
    fresh = _trace(Engine(seed=42), 1500)
    assert first == again == fresh


def test_restart_with_seed_and_reseed():
    engine = Engine(seed=1)
    _trace(engine, 300)
    engine.restart(seed=99)
    assert engine.seed == 99
    assert engine.score == 0 and engine.ticks == 0 and engine.is_running
    assert engine.flyer.y == 50.0
    assert [o.position for o in engine.stream] == [100.0, 125.0, 150.0, 175.0, 200.0]
    assert _trace(engine, 500) == _trace(Engine(seed=99), 500)

    engine.restart(reseed=True)
    assert engine.seed != 99


def test_snapshot_is_read_only_view():
    engine = Engine(seed=12)
    engine.tick()
    snap = engine.snapshot()
    assert snap.ticks == 1 and snap.score == 0 and snap.state is TickResult.RUNNING
    assert len(snap.obstacles) == engine.cfg.pool_size
    assert snap.flyer == engine.flyer_rect()
    lower, upper = snap.obstacles[0]
    assert lower.origin_x == pytest.approx(99.7)
    assert lower.height + engine.cfg.gate_size + upper.height == pytest.approx(100.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.score = 10


def test_game_over_callback():
    finals: List[int] = []
    engine = Engine(EngineConfig(flyer_x=10.0), seed=4, on_game_over=finals.append)
    while engine.tick() is TickResult.RUNNING:
        pass
    assert finals == [0]


def main():
    for name, fn in list(globals().items()):
        if name.startswith("test_") and callable(fn):
            fn()
    print("✓ engine tests passed")


if __name__ == "__main__":
    main()
