# src/game/render.py
from __future__ import annotations
from typing import Optional, Tuple
import pygame

from .config import (
    WIDTH, HEIGHT, STAGE_H_UPPER, STAGE_V_UPPER,
    COLOR_BG, COLOR_FG, COLOR_FLYER, COLOR_OBSTACLE, COLOR_OBSTACLE_EDGE, COLOR_DANGER
)
from .engine import Snapshot, TickResult
from .geometry import Rectangle


def to_screen_rect(r: Rectangle, size: Tuple[int, int] = (WIDTH, HEIGHT)) -> pygame.Rect:
    """Normalized, y-up stage rectangle -> pixel rectangle (y-down)."""
    w_px, h_px = size
    sx = w_px / STAGE_H_UPPER
    sy = h_px / STAGE_V_UPPER
    left = int(round(r.origin_x * sx))
    top = int(round(h_px - r.top * sy))
    return pygame.Rect(left, top, int(round(r.width * sx)), int(round(r.height * sy)))


def draw_world(surf: pygame.Surface, snap: Snapshot):
    size = surf.get_size()
    surf.fill(COLOR_BG)
    for lower, upper in snap.obstacles:
        for span in (lower, upper):
            if span.height <= 0:
                continue
            pr = to_screen_rect(span, size)
            pygame.draw.rect(surf, COLOR_OBSTACLE, pr)
            pygame.draw.rect(surf, COLOR_OBSTACLE_EDGE, pr, width=2)

    color = COLOR_FLYER if snap.state is TickResult.RUNNING else COLOR_DANGER
    pygame.draw.rect(surf, color, to_screen_rect(snap.flyer, size), border_radius=4)


def draw_hud(surf: pygame.Surface, font: pygame.font.Font, snap: Snapshot, seed: Optional[int] = None):
    score_txt = font.render(str(snap.score), True, COLOR_FG)
    surf.blit(score_txt, (surf.get_width() // 2 - score_txt.get_width() // 2, 12))
    if seed is not None:
        surf.blit(font.render(f"Seed: {seed}", True, COLOR_FG), (12, surf.get_height() - font.get_linesize() - 8))


def draw_game_over(surf: pygame.Surface, font: pygame.font.Font) -> pygame.Rect:
    """Draws the restart panel and returns its rect (clickable)."""
    btn_w, btn_h = 200, 70
    panel = pygame.Rect((surf.get_width() - btn_w) // 2, (surf.get_height() - btn_h) // 2, btn_w, btn_h)
    pygame.draw.rect(surf, (40, 60, 90), panel, border_radius=10)
    pygame.draw.rect(surf, (90, 130, 180), panel, width=2, border_radius=10)

    txt = font.render("Restart (R)", True, (220, 235, 255))
    surf.blit(txt, (panel.centerx - txt.get_width() // 2, panel.centery - txt.get_height() - 5))
    txt2 = font.render("New Random (N)", True, (220, 235, 255))
    surf.blit(txt2, (panel.centerx - txt2.get_width() // 2, panel.centery + 5))
    return panel
