"""
Pygame host - owns the window, the drivers and autosave.

Foreground: one advance per rendered frame from pygame's millisecond
ticks. When the window loses focus or is minimised, the background driver
takes over on a coarse pygame timer if background running is enabled;
otherwise advancement pauses until the window comes back.
"""
import logging
from typing import Optional

import pygame

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, FPS, CLUSTER_CELL_SIZE, AUTOSAVE_INTERVAL_MS
)
from simulation import Simulation
from systems.clock import BackgroundDriver, LoopScheduler
from systems.persistence import AutosaveWriter
from ui.camera import Camera
from ui.input_handler import InputHandler
from ui.renderer import Renderer

logger = logging.getLogger(__name__)

BACKGROUND_WAKE = pygame.USEREVENT + 1


class App:
    """Runs a Simulation in a pygame window."""

    def __init__(self, sim: Simulation, telemetry_log: Optional[str] = None):
        pygame.init()
        pygame.display.set_caption("Roomba Cleaning Simulation")

        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        self.frame_clock = pygame.time.Clock()

        self.sim = sim
        self.telemetry_log = telemetry_log
        self.writer = AutosaveWriter(sim.store)

        self.camera = Camera()
        self.renderer = Renderer(self.screen, self.camera)
        self.input = InputHandler(
            sim,
            self.camera,
            before_new_game=self.writer.flush,
            on_background_toggled=self._refresh_driver,
        )

        background = BackgroundDriver(sim.clock, after_wake=self.autosave)
        self.scheduler = LoopScheduler(
            sim.clock,
            background_enabled=lambda: self.sim.state.background,
            background=background,
        )

        self.running = True
        self.visible = True
        self.next_autosave = 0

    # =========================================================================
    # DRIVERS
    # =========================================================================

    def _set_visible(self, visible: bool):
        if visible == self.visible:
            return
        self.visible = visible
        self._refresh_driver()
        if not visible:
            self.autosave()

    def _refresh_driver(self):
        """Re-pick the driver and arm or disarm the wake timer to match."""
        self.scheduler.set_foreground(self.visible)
        if self.scheduler.active == 'background':
            pygame.time.set_timer(BACKGROUND_WAKE, self.scheduler.background.wake_ms)
        else:
            pygame.time.set_timer(BACKGROUND_WAKE, 0)

    def autosave(self):
        """Queue a snapshot write if autosave is on."""
        if not self.sim.state.autosave:
            return
        self.writer.submit(self.sim.epoch, self.sim.snapshot())

    # =========================================================================
    # LOOP
    # =========================================================================

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == BACKGROUND_WAKE:
                self.scheduler.background.on_wake()
            elif event.type in (pygame.WINDOWFOCUSLOST, pygame.WINDOWMINIMIZED):
                self._set_visible(False)
            elif event.type in (pygame.WINDOWFOCUSGAINED, pygame.WINDOWRESTORED):
                self._set_visible(True)
            elif not self.input.handle(event):
                self.running = False

    def update(self):
        now = pygame.time.get_ticks()
        self.scheduler.frame.on_frame(now)

        if now >= self.next_autosave:
            self.autosave()
            self.next_autosave = now + AUTOSAVE_INTERVAL_MS

    def draw(self):
        view = self.sim.view()

        if view.prefs.get('camera_auto'):
            self.camera.follow(view.position)
        else:
            self.camera.recenter()

        heat = None
        if view.prefs.get('show_heatmap'):
            heat = self.sim.state.dirt.density_grid(CLUSTER_CELL_SIZE)

        self.renderer.draw(view, self.sim.next_costs(), heat, self.frame_clock.get_fps())

    def run(self):
        """Main loop."""
        restored = self.sim.initialize()
        logger.info("Starting (%s)", "save restored" if restored else "fresh game")
        self.scheduler.resume(visible=True)

        while self.running:
            self.handle_events()
            self.update()
            if self.visible:
                self.draw()
            self.frame_clock.tick(FPS)

        self.shutdown()

    def shutdown(self):
        self.scheduler.pause()
        pygame.time.set_timer(BACKGROUND_WAKE, 0)
        self.autosave()
        self.writer.shutdown(wait=True)
        pygame.quit()

        if self.telemetry_log is not None:
            try:
                self.sim.telemetry.export_log(self.telemetry_log)
                print(f"Telemetry log exported to {self.telemetry_log}")
            except OSError as e:
                print(f"Failed to export telemetry: {e}")
