# file: main_gui.py

import logging
import sys

import pygame

from animation import AnimationDriver
from game import Game
from game_config import (BACKGROUND_COLOR, DEFAULT_BOARD_WIDTH, FONT_COLOR, SCORE_FONT_COLOR,
                         BoardGeometry, GameConfig, animation_duration_from_env, tile_colors)
from game_types import Direction

logger = logging.getLogger(__name__)

SCREEN_WIDTH = DEFAULT_BOARD_WIDTH
SCREEN_HEIGHT = SCREEN_WIDTH + 100
GAME_OVER_FONT_COLOR = (119, 110, 101)
SWIPE_MIN_DISTANCE_PX = 30

KEY_MAP = {
    pygame.K_UP: Direction.UP, pygame.K_DOWN: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT, pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_w: Direction.UP, pygame.K_s: Direction.DOWN,
    pygame.K_a: Direction.LEFT, pygame.K_d: Direction.RIGHT,
}


def swipe_direction(start, end, min_distance=SWIPE_MIN_DISTANCE_PX):
    """Direction of a mouse/touch drag, or None if it is too short."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if max(abs(dx), abs(dy)) < min_distance:
        return None
    if abs(dx) > abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


def load_fonts():
    try:
        return {
            'tile': pygame.font.SysFont("arial", 40, bold=True),
            'label': pygame.font.SysFont("arial", 20, bold=True),
            'score': pygame.font.SysFont("arial", 25, bold=True),
            'title': pygame.font.SysFont("arial", 40, bold=True),
        }
    except pygame.error as e:
        logger.warning("Could not load Arial (%s), using the default font", e)
        return {name: pygame.font.Font(None, s)
                for name, s in (('tile', 55), ('label', 30), ('score', 35), ('title', 60))}


def draw_board(screen, fonts, geometry, driver, score):
    screen.fill(BACKGROUND_COLOR)
    score_label = fonts['label'].render("SCORE", True, FONT_COLOR)
    score_value = fonts['score'].render(str(score), True, SCORE_FONT_COLOR)
    screen.blit(score_label, (20, SCREEN_WIDTH + 10))
    screen.blit(score_value, (20, SCREEN_WIDTH + 35))

    empty_color = tile_colors(0)[0]
    for r in range(geometry.size):
        for c in range(geometry.size):
            x, y = geometry.cell_origin(r, c)
            pygame.draw.rect(screen, empty_color, (x, y, geometry.cell_size, geometry.cell_size))

    for frame in driver.frames():
        if frame.scale <= 0:
            continue
        color, text_color = tile_colors(frame.value)
        x, y = geometry.cell_origin(frame.row, frame.col)
        size = geometry.cell_size * frame.scale
        offset = (geometry.cell_size - size) / 2
        pygame.draw.rect(screen, color, (x + offset, y + offset, size, size))
        if frame.scale > 0.7:
            text_surface = fonts['tile'].render(str(frame.value), True, text_color)
            text_rect = text_surface.get_rect(center=(x + geometry.cell_size / 2, y + geometry.cell_size / 2))
            screen.blit(text_surface, text_rect)


def draw_overlay(screen, fonts, title, subtitle):
    overlay = pygame.Surface((SCREEN_WIDTH, SCREEN_WIDTH), pygame.SRCALPHA)
    overlay.fill((238, 228, 218, 200))
    screen.blit(overlay, (0, 0))
    title_text = fonts['title'].render(title, True, GAME_OVER_FONT_COLOR)
    subtitle_text = fonts['label'].render(subtitle, True, GAME_OVER_FONT_COLOR)
    screen.blit(title_text, title_text.get_rect(center=(SCREEN_WIDTH / 2, SCREEN_WIDTH / 2 - 30)))
    screen.blit(subtitle_text, subtitle_text.get_rect(center=(SCREEN_WIDTH / 2, SCREEN_WIDTH / 2 + 30)))


def main():
    logging.basicConfig(level=logging.INFO)
    pygame.init()
    pygame.font.init()

    config = GameConfig.from_env()
    geometry = BoardGeometry.from_board_width(SCREEN_WIDTH, size=config.size, rem=0)
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption("2048")
    fonts = load_fonts()

    driver = AnimationDriver(animation_duration_from_env())
    game = Game(config=config)
    game.subscribe(lambda event: driver.feed(event, pygame.time.get_ticks()))
    driver.reset()
    game.new_game()

    clock = pygame.time.Clock()
    running = True
    welcome = True
    drag_start = None

    def request_move(direction):
        # Input is dropped while the previous move is still animating
        if driver.busy or game.is_game_over():
            return
        result = game.move(direction)
        logger.debug("%s -> %s", direction.name, result.status.value)

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    running = False
                elif welcome:
                    welcome = False
                elif event.key == pygame.K_r:
                    driver.reset()
                    game.new_game()
                elif event.key in KEY_MAP:
                    request_move(KEY_MAP[event.key])
            elif event.type == pygame.MOUSEBUTTONDOWN:
                drag_start = event.pos
            elif event.type == pygame.MOUSEBUTTONUP and drag_start is not None:
                if welcome:
                    welcome = False
                else:
                    direction = swipe_direction(drag_start, event.pos)
                    if direction is not None:
                        request_move(direction)
                drag_start = None

        driver.update(pygame.time.get_ticks())
        draw_board(screen, fonts, geometry, driver, game.score)
        if welcome:
            draw_overlay(screen, fonts, "2048", "Press any key to start")
        elif game.is_game_over() and not driver.busy:
            draw_overlay(screen, fonts, "Game Over!", "Press R to Restart")

        pygame.display.flip()
        clock.tick(60)

    print(f"Final Score: {game.score}")
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
