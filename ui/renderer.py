"""
Renderer - draws a SimulationView with pygame.

Nothing here reads or mutates live simulation state; the app hands over an
immutable view plus the few derived extras (heat map, prices) per frame.
"""
import math
from typing import Dict, Optional, Tuple

import pygame

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, HUD_WIDTH, DEBUG_FONT_SIZE,
    FLOOR_LEFT, FLOOR_RIGHT, FLOOR_TOP, FLOOR_BOTTOM, OVERHANG_BUFFER,
    CLUSTER_CELL_SIZE, ROBOT_RADIUS, HEATMAP_ALPHA, NOTICES_SHOWN,
    COLOR_BG, COLOR_FLOOR, COLOR_WALL, COLOR_FRAME, COLOR_DIRT,
    COLOR_ROBOT_BODY, COLOR_ROBOT_TOP, COLOR_TARGET, COLOR_HUD_BG,
    COLOR_TEXT, COLOR_NOTICE, LED_OK, LED_EMPTY, LED_FULL
)
from ui.camera import Camera

CellKey = Tuple[int, int]

KEY_HINTS = [
    "SPACE start/stop   C charge   E empty",
    "P repaint   R reset   N new game",
    "1-5 buy capacity/suction/speed/battery/auto",
    "B background   S autosave",
    "H heat map   F frame   O overhang   A camera",
    "Click floor: set target   ESC quit",
]

UPGRADE_LABELS = [
    ('1', 'capacity', "Capacity"),
    ('2', 'suction', "Suction"),
    ('3', 'speed', "Speed"),
    ('4', 'battery', "Battery"),
    ('5', 'auto', "Auto AI"),
]


def led_color(view) -> Tuple[int, int, int]:
    """Status LED: red for a full bin, amber for a flat battery."""
    if view.bin_full:
        return LED_FULL
    if view.energy_empty:
        return LED_EMPTY
    return LED_OK


class Renderer:
    """Draws the floor scene on the left and the HUD panel on the right."""

    def __init__(self, screen: pygame.Surface, camera: Camera):
        self.screen = screen
        self.camera = camera
        self.font = pygame.font.Font(None, DEBUG_FONT_SIZE + 6)
        self.small_font = pygame.font.Font(None, DEBUG_FONT_SIZE)
        self.title_font = pygame.font.Font(None, 64)

    def draw(
        self,
        view,
        costs: Dict[str, Optional[float]],
        heat: Optional[Dict[CellKey, int]] = None,
        fps: float = 0.0
    ):
        self.screen.fill(COLOR_BG)

        self._draw_floor()
        if heat:
            self._draw_heatmap(heat)
        if view.prefs.get('show_frame'):
            self._draw_frame(view.prefs.get('overhang'))
        self._draw_dirt(view)
        if view.target is not None:
            self._draw_target(view.target, view.nudging)
        self._draw_robot(view)

        self._draw_hud(view, costs, fps)
        self._draw_notices(view)
        if view.level_complete:
            self._draw_level_complete(view)

        pygame.display.flip()

    # =========================================================================
    # SCENE
    # =========================================================================

    def _rect(self, left: float, top: float, right: float, bottom: float) -> pygame.Rect:
        x0, y0 = self.camera.world_to_screen((left, top))
        x1, y1 = self.camera.world_to_screen((right, bottom))
        return pygame.Rect(x0, y0, x1 - x0, y1 - y0)

    def _draw_floor(self):
        floor = self._rect(FLOOR_LEFT, FLOOR_TOP, FLOOR_RIGHT, FLOOR_BOTTOM)
        pygame.draw.rect(self.screen, COLOR_FLOOR, floor)
        pygame.draw.rect(self.screen, COLOR_WALL, floor.inflate(8, 8), 4)

    def _draw_frame(self, overhang: bool):
        """Outline of the navigable area."""
        buffer = OVERHANG_BUFFER if overhang else 0.0
        rect = self._rect(
            FLOOR_LEFT - buffer, FLOOR_TOP - buffer,
            FLOOR_RIGHT + buffer, FLOOR_BOTTOM + buffer,
        )
        pygame.draw.rect(self.screen, COLOR_FRAME, rect, 2)

    def _draw_heatmap(self, heat: Dict[CellKey, int]):
        peak = max(heat.values())
        overlay = pygame.Surface((SCREEN_WIDTH - HUD_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
        for (cx, cy), count in heat.items():
            left = cx * CLUSTER_CELL_SIZE
            top = cy * CLUSTER_CELL_SIZE
            rect = self._rect(left, top, left + CLUSTER_CELL_SIZE, top + CLUSTER_CELL_SIZE)
            alpha = int(HEATMAP_ALPHA * count / peak)
            pygame.draw.rect(overlay, (239, 68, 68, alpha), rect)
        self.screen.blit(overlay, (0, 0))

    def _draw_dirt(self, view):
        for point in view.dirt:
            pixel = self.camera.world_to_screen(point)
            if self.camera.in_viewport(pixel):
                self.screen.set_at(pixel, COLOR_DIRT)
                self.screen.set_at((pixel[0] + 1, pixel[1]), COLOR_DIRT)

    def _draw_target(self, target, nudging: bool):
        center = self.camera.world_to_screen(target)
        color = COLOR_NOTICE if nudging else COLOR_TARGET
        pygame.draw.circle(self.screen, color, center, self.camera.length(0.12), 2)
        pygame.draw.circle(self.screen, color, center, 2)

    def _draw_robot(self, view):
        center = self.camera.world_to_screen(view.position)
        radius = self.camera.length(ROBOT_RADIUS)

        pygame.draw.circle(self.screen, COLOR_ROBOT_BODY, center, radius)
        pygame.draw.circle(self.screen, COLOR_ROBOT_TOP, center, int(radius * 0.7))

        # Heading tick
        tip = (
            center[0] + int(math.cos(view.heading) * radius),
            center[1] + int(math.sin(view.heading) * radius),
        )
        pygame.draw.line(self.screen, COLOR_TEXT, center, tip, 2)

        pygame.draw.circle(self.screen, led_color(view), center, max(2, radius // 5))

    # =========================================================================
    # OVERLAYS
    # =========================================================================

    def _text(self, text: str, pos, color=COLOR_TEXT, font=None):
        surface = (font or self.font).render(text, True, color)
        self.screen.blit(surface, pos)
        return surface.get_height()

    def _draw_bar(self, x: int, y: int, width: int, fraction: float, color):
        pygame.draw.rect(self.screen, (50, 50, 50), (x, y, width, 8))
        fill = int(width * max(0.0, min(1.0, fraction)))
        pygame.draw.rect(self.screen, color, (x, y, fill, 8))

    def _draw_hud(self, view, costs: Dict[str, Optional[float]], fps: float):
        x0 = SCREEN_WIDTH - HUD_WIDTH
        pygame.draw.rect(self.screen, COLOR_HUD_BG, (x0, 0, HUD_WIDTH, SCREEN_HEIGHT))

        x = x0 + 15
        y = 15
        status = "CLEANING" if view.cleaning else "IDLE"
        if view.level_complete:
            status = "COMPLETE"
        y += self._text(f"{status}  ({'AI' if view.ai_enabled else 'manual'})", (x, y)) + 10

        y += self._text(f"Money: ${view.money:.2f}", (x, y)) + 6
        y += self._text(f"Clean: {view.clean_percent:.1f}%", (x, y)) + 10

        y += self._text(f"Energy {view.energy:.0f}/{view.energy_max:.0f}", (x, y), font=self.small_font) + 2
        self._draw_bar(x, y, HUD_WIDTH - 30, view.energy / view.energy_max, LED_OK)
        y += 16
        y += self._text(f"Bin {view.bin:.1f}/{view.bin_capacity:.0f}", (x, y), font=self.small_font) + 2
        self._draw_bar(x, y, HUD_WIDTH - 30, view.bin / view.bin_capacity, LED_EMPTY)
        y += 24

        y += self._text("Upgrades", (x, y), COLOR_NOTICE) + 6
        for key, kind, label in UPGRADE_LABELS:
            cost = costs.get(kind)
            price = "MAX" if cost is None else f"${cost:.0f}"
            line = f"[{key}] {label} Lv{view.upgrades.get(kind, 0)}  {price}"
            y += self._text(line, (x, y), font=self.small_font) + 4
        y += 10

        flags = f"Background: {'on' if view.background else 'off'}   Autosave: {'on' if view.autosave else 'off'}"
        y += self._text(flags, (x, y), font=self.small_font) + 14

        for hint in KEY_HINTS:
            y += self._text(hint, (x, y), (150, 150, 150), self.small_font) + 3

        self._text(f"FPS: {fps:.0f}", (x, SCREEN_HEIGHT - 25), (150, 150, 150), self.small_font)

    def _draw_notices(self, view):
        y = 12
        for message in view.notices[-NOTICES_SHOWN:]:
            surface = self.font.render(message, True, COLOR_NOTICE)
            rect = surface.get_rect(midtop=((SCREEN_WIDTH - HUD_WIDTH) // 2, y))
            pygame.draw.rect(self.screen, (0, 0, 0), rect.inflate(16, 8))
            self.screen.blit(surface, rect)
            y += rect.height + 12

    def _draw_level_complete(self, view):
        overlay = pygame.Surface((SCREEN_WIDTH - HUD_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 120))
        self.screen.blit(overlay, (0, 0))

        center_x = (SCREEN_WIDTH - HUD_WIDTH) // 2
        title = self.title_font.render("LEVEL COMPLETE!", True, (100, 255, 100))
        self.screen.blit(title, title.get_rect(center=(center_x, SCREEN_HEIGHT // 2 - 30)))
        sub = self.font.render("P to repaint, R to reset", True, COLOR_TEXT)
        self.screen.blit(sub, sub.get_rect(center=(center_x, SCREEN_HEIGHT // 2 + 20)))
