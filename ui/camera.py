"""
Camera - maps floor-plane coordinates to window pixels and back.

Kept free of pygame so click projection can be tested headless.
"""
from typing import Tuple

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import SCREEN_WIDTH, SCREEN_HEIGHT, HUD_WIDTH, PIXELS_PER_METRE

Point = Tuple[float, float]


class Camera:
    """
    Top-down orthographic view of the floor.

    The viewport is the window area left of the HUD panel. Plane y grows
    downward on screen, matching the floor's top/bottom naming.
    """

    def __init__(
        self,
        viewport_width: int = SCREEN_WIDTH - HUD_WIDTH,
        viewport_height: int = SCREEN_HEIGHT,
        scale: float = PIXELS_PER_METRE
    ):
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.scale = scale
        self.focus: Point = (0.0, 0.0)

    def follow(self, point: Point, smoothing: float = 0.1):
        """Ease the focus toward a point (auto camera)."""
        fx, fy = self.focus
        self.focus = (fx + (point[0] - fx) * smoothing, fy + (point[1] - fy) * smoothing)

    def recenter(self):
        self.focus = (0.0, 0.0)

    def world_to_screen(self, point: Point) -> Tuple[int, int]:
        x = (point[0] - self.focus[0]) * self.scale + self.viewport_width / 2
        y = (point[1] - self.focus[1]) * self.scale + self.viewport_height / 2
        return (int(round(x)), int(round(y)))

    def screen_to_world(self, pixel: Tuple[int, int]) -> Point:
        x = (pixel[0] - self.viewport_width / 2) / self.scale + self.focus[0]
        y = (pixel[1] - self.viewport_height / 2) / self.scale + self.focus[1]
        return (x, y)

    def in_viewport(self, pixel: Tuple[int, int]) -> bool:
        return 0 <= pixel[0] < self.viewport_width and 0 <= pixel[1] < self.viewport_height

    def length(self, metres: float) -> int:
        """Plane distance in pixels, at least one."""
        return max(1, int(metres * self.scale))
