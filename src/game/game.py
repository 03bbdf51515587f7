# src/game/game.py
import sys, argparse
import pygame
from pygame import K_SPACE, K_UP, K_ESCAPE, K_r, K_n
from .config import (
    WIDTH, HEIGHT, FRAME_INTERVAL_MS, SEED_DEFAULT,
    DEBUG_TICK_LOGS, DEBUG_OBS_OVERLAY
)
from .engine import Engine, TickResult
from .render import draw_world, draw_hud, draw_game_over
from src.env.observations import build_observation, OBS_LABELS

TICK_EVENT = pygame.USEREVENT + 1
FLY_KEYS = (K_SPACE, K_UP)


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None,
                   help="Obstacle seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    return p.parse_args()


def run():
    args = parse_args()

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = None  # signals Engine to randomize
    else:
        launch_seed = args.seed

    _print_timer = 0 if DEBUG_TICK_LOGS else None

    pygame.init()
    pygame.display.set_caption("Flappy Gates")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    font = pygame.font.SysFont("jetbrainsmono", 18)
    big_font = pygame.font.SysFont("jetbrainsmono", 36)

    engine = Engine(seed=launch_seed)
    restart_rect = None

    # One tick per timer event: ticks never overlap, input only flips flags.
    pygame.time.set_timer(TICK_EVENT, FRAME_INTERVAL_MS)

    def restart(reseed: bool):
        engine.restart(reseed=reseed)
        pygame.time.set_timer(TICK_EVENT, FRAME_INTERVAL_MS)

    while True:
        # block until something happens, then drain the queue
        events = [pygame.event.wait()] + pygame.event.get()
        dirty = False

        for event in events:
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()

            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                if event.key in FLY_KEYS:
                    engine.on_flying_input_changed(True, source="key")
                if event.key == K_r and not engine.is_running:
                    # Restart SAME seed
                    restart(reseed=False)
                    dirty = True
                if event.key == K_n and not engine.is_running:
                    # Restart with NEW RANDOM seed
                    restart(reseed=True)
                    dirty = True
            if event.type == pygame.KEYUP and event.key in FLY_KEYS:
                engine.on_flying_input_changed(False, source="key")

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if (not engine.is_running) and restart_rect is not None and restart_rect.collidepoint(event.pos):
                    restart(reseed=False)
                    dirty = True
                else:
                    engine.on_flying_input_changed(True, source="pointer")
            if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                engine.on_flying_input_changed(False, source="pointer")

            if event.type == TICK_EVENT and engine.is_running:
                result = engine.tick()
                dirty = True
                if result is TickResult.GAME_OVER:
                    # stop polling until restart
                    pygame.time.set_timer(TICK_EVENT, 0)
                    print(f"Game over: score={engine.score} ticks={engine.ticks} seed={engine.seed}")

                if _print_timer is not None:
                    _print_timer -= FRAME_INTERVAL_MS
                    if _print_timer <= 0:
                        _print_timer = 500  # print twice per second
                        leader = engine.leader()
                        print(f"t={engine.ticks} y={engine.flyer.y:.2f} flying={engine.flyer.flying} "
                              f"leader@{leader.position:.2f} gate=[{leader.gate_bottom:.2f}, "
                              f"{leader.gate_bottom + leader.gate_size:.2f}] score={engine.score}")

        if not dirty:
            continue

        # --- Render ---
        snap = engine.snapshot()
        draw_world(screen, snap)
        draw_hud(screen, big_font, snap, seed=engine.seed)
        screen.blit(font.render("SPACE/click fly | ESC quit", True, (235, 245, 255)), (12, 10))

        if DEBUG_OBS_OVERLAY:
            obs = build_observation(engine)
            panel_h = 18 * (len(OBS_LABELS) + 1)
            panel = pygame.Surface((220, panel_h), pygame.SRCALPHA)
            panel.fill((10, 20, 35, 150))
            screen.blit(panel, (12, 54))
            for li, (label, value) in enumerate(zip(OBS_LABELS, obs)):
                screen.blit(font.render(f"{label}={value:+.2f}", True, (200, 220, 255)), (20, 60 + li * 18))

        restart_rect = None
        if not engine.is_running:
            restart_rect = draw_game_over(screen, font)

        pygame.display.flip()


if __name__ == "__main__":
    run()
