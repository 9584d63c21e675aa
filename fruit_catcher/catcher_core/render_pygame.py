"""
Pygame Renderer
===============

Draws lanes, falling items, the basket and the HUD from
``GameSession.get_render_data()``.
Supports both display mode (human play) and headless RGB output.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from fruit_catcher.catcher_core.config_loader import GameConfig, get_config


class PygameRenderer:
    """
    Renderer using pygame.

    Supports:
    - Lane layout with the capture band highlighted
    - Items drawn as coloured discs with their initial
    - Score/time/level overlay
    - Screen display for human mode
    - RGB array output for agents
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration.
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if config is None:
            config = get_config()

        self._config = config

        if not pygame.get_init():
            pygame.init()

        # Display surface (created on demand)
        self._screen: Optional[pygame.Surface] = None
        self._screen_size: Optional[Tuple[int, int]] = None

        pygame.font.init()
        self._font = pygame.font.Font(None, 28)
        self._font_large = pygame.font.Font(None, 48)
        self._font_item = pygame.font.Font(None, 30)

        self._bg_color = (245, 235, 220)
        self._lane_colors = ((255, 248, 240), (250, 240, 228))
        self._lane_border = (220, 180, 140)
        self._band_color = (255, 225, 180)
        self._basket_color = (150, 100, 50)
        self._text_color = (80, 60, 40)
        self._overlay_color = (0, 0, 0, 150)

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render to RGB array.

        Returns:
            (height, width, 3) uint8 array.
        """
        surface = pygame.Surface((width, height))
        self._render_to_surface(surface, render_data)
        array = pygame.surfarray.array3d(surface)
        return np.transpose(array, (1, 0, 2))

    def render_to_screen(
        self,
        render_data: Dict[str, Any],
        window_width: int = 480,
        window_height: int = 720
    ) -> None:
        """Render to the pygame window, creating it on first use."""
        if self._screen is None or self._screen_size != (window_width, window_height):
            self._screen = pygame.display.set_mode((window_width, window_height))
            self._screen_size = (window_width, window_height)
            pygame.display.set_caption("Fruit Catcher")

        self._render_to_surface(self._screen, render_data)
        pygame.display.flip()

    def _render_to_surface(
        self,
        surface: pygame.Surface,
        render_data: Dict[str, Any]
    ) -> None:
        """Render game state to a pygame surface."""
        width, height = surface.get_size()

        board_width = render_data["board_width"]
        board_height = render_data["board_height"]
        lane_count = render_data["lane_count"]

        # Reserve space for HUD at top
        ui_height = 80
        game_area_height = height - ui_height

        scale = min((width - 20) / board_width, (game_area_height - 20) / board_height)
        board_render_width = board_width * scale
        offset_x = (width - board_render_width) / 2
        offset_y = ui_height + (game_area_height - board_height * scale) / 2
        lane_width = board_render_width / lane_count

        surface.fill(self._bg_color)
        self._draw_hud(surface, render_data)

        # Lanes
        for lane in range(lane_count):
            rect = pygame.Rect(
                int(offset_x + lane * lane_width),
                int(offset_y),
                int(lane_width) + 1,
                int(board_height * scale)
            )
            pygame.draw.rect(surface, self._lane_colors[lane % 2], rect)
            pygame.draw.rect(surface, self._lane_border, rect, 1)

        # Capture band across all lanes
        band_top = offset_y + render_data["capture_top"] * scale
        band_height = (render_data["capture_bottom"] - render_data["capture_top"]) * scale
        band_rect = pygame.Rect(
            int(offset_x), int(band_top), int(board_render_width), max(1, int(band_height))
        )
        pygame.draw.rect(surface, self._band_color, band_rect)

        # Basket sits in the band of its lane
        basket_rect = pygame.Rect(
            int(offset_x + render_data["basket_lane"] * lane_width + lane_width * 0.15),
            int(band_top),
            int(lane_width * 0.7),
            max(8, int(band_height * 2))
        )
        pygame.draw.rect(surface, self._basket_color, basket_rect, border_radius=6)

        radius = max(6, int(lane_width * 0.18))
        for entity in render_data["entities"]:
            cx = int(offset_x + (entity["lane"] + 0.5) * lane_width)
            cy = int(offset_y + entity["y"] * scale)
            if cy - radius > offset_y + board_height * scale:
                continue
            pygame.draw.circle(surface, entity["color"], (cx, cy), radius)
            label = self._font_item.render(entity["kind"][:1].upper(), True, (255, 255, 255))
            surface.blit(label, label.get_rect(center=(cx, cy)))

        if render_data["phase"] == "ended":
            self._draw_game_over(surface, render_data)

    def _draw_hud(self, surface: pygame.Surface, render_data: Dict[str, Any]) -> None:
        """Draw score, time and level."""
        width = surface.get_width()
        score_surface = self._font_large.render(
            f"Score: {render_data['score']}", True, self._text_color
        )
        surface.blit(score_surface, (16, 14))

        info = self._font.render(
            f"Time: {render_data['time_remaining']}   Lv.{render_data['level']}",
            True,
            self._text_color
        )
        surface.blit(info, (width - info.get_width() - 16, 24))

    def _draw_game_over(self, surface: pygame.Surface, render_data: Dict[str, Any]) -> None:
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        overlay.fill(self._overlay_color)
        surface.blit(overlay, (0, 0))

        center = (surface.get_width() // 2, surface.get_height() // 2)
        title = self._font_large.render("GAME OVER", True, (255, 255, 255))
        surface.blit(title, title.get_rect(center=(center[0], center[1] - 30)))
        detail = self._font.render(
            f"Score {render_data['score']}  Level {render_data['level']}  (R to restart)",
            True,
            (255, 255, 255)
        )
        surface.blit(detail, detail.get_rect(center=(center[0], center[1] + 20)))

    def close(self) -> None:
        """Clean up pygame resources."""
        if self._screen is not None:
            self._screen = None
            pygame.display.quit()
