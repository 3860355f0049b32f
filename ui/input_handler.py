"""
Input handler - translates pygame keyboard and mouse events into
simulation commands.
"""
import logging
from typing import Callable, Dict, Optional

import pygame

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from simulation import Simulation
from systems.economy import UpgradeKind
from ui.camera import Camera

logger = logging.getLogger(__name__)

PURCHASE_KEYS = {
    pygame.K_1: UpgradeKind.CAPACITY,
    pygame.K_2: UpgradeKind.SUCTION,
    pygame.K_3: UpgradeKind.SPEED,
    pygame.K_4: UpgradeKind.BATTERY,
    pygame.K_5: UpgradeKind.AUTO,
}

PREFERENCE_KEYS = {
    pygame.K_h: 'show_heatmap',
    pygame.K_f: 'show_frame',
    pygame.K_o: 'overhang',
    pygame.K_a: 'camera_auto',
}


class InputHandler:
    """
    Routes events to the simulation.

    Returns False from `handle` when the user asked to quit.
    """

    def __init__(
        self,
        sim: Simulation,
        camera: Camera,
        before_new_game: Optional[Callable[[], None]] = None,
        on_background_toggled: Optional[Callable[[], None]] = None
    ):
        self.sim = sim
        self.camera = camera
        self.before_new_game = before_new_game
        self.on_background_toggled = on_background_toggled

        self.commands: Dict[int, Callable] = {
            pygame.K_SPACE: sim.toggle_cleaning,
            pygame.K_c: sim.charge,
            pygame.K_e: sim.empty_bin,
            pygame.K_p: sim.repaint,
            pygame.K_r: sim.reset,
            pygame.K_n: self._new_game,
            pygame.K_b: self._toggle_background,
            pygame.K_s: sim.toggle_autosave,
        }

    def handle(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.QUIT:
            return False

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            self._on_key(event.key)

        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.camera.in_viewport(event.pos):
                point = self.camera.screen_to_world(event.pos)
                self.sim.click(point)

        return True

    def _on_key(self, key: int):
        if key in self.commands:
            result = self.commands[key]()
        elif key in PURCHASE_KEYS:
            result = self.sim.purchase(PURCHASE_KEYS[key])
        elif key in PREFERENCE_KEYS:
            result = self.sim.toggle_preference(PREFERENCE_KEYS[key])
        else:
            return
        logger.debug("%s -> %s", pygame.key.name(key), result.message)

    def _new_game(self):
        if self.before_new_game is not None:
            self.before_new_game()
        return self.sim.new_game()

    def _toggle_background(self):
        result = self.sim.toggle_background()
        if self.on_background_toggled is not None:
            self.on_background_toggled()
        return result
