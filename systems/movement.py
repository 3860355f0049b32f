"""
Movement system - decides HOW the robot reaches its target.

Velocity is in plane units per tick; acceleration is scaled by the elapsed
milliseconds. Bounds are enforced by clamping position only, so the robot
can slide along (and hug) the walls.
"""
import math
from dataclasses import dataclass
from typing import Tuple, TYPE_CHECKING

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    ACCELERATION, SPEED_SCALE, FRICTION, ARRIVAL_RADIUS,
    ORBIT_RADIUS, ORBIT_RATE, ORBIT_GAIN
)
from systems.economy import speed_bonus, suction_radius
from utils.math_helpers import Bounds, distance, heading_of, limit, point_on_circle

if TYPE_CHECKING:
    from simulation import SimulationState


@dataclass(frozen=True)
class MovementResult:
    """What happened during one movement step."""
    moved: bool
    collected: int = 0
    speed: float = 0.0
    distance: float = 0.0


FROZEN = MovementResult(moved=False)


class MovementController:
    """
    Integrates the robot toward its target and sweeps up dirt at the new
    position.
    """

    def __init__(
        self,
        acceleration: float = ACCELERATION,
        speed_scale: float = SPEED_SCALE,
        friction: float = FRICTION,
        arrival_radius: float = ARRIVAL_RADIUS,
        orbit_radius: float = ORBIT_RADIUS,
        orbit_rate: float = ORBIT_RATE,
        orbit_gain: float = ORBIT_GAIN
    ):
        self.acceleration = acceleration
        self.speed_scale = speed_scale
        self.friction = friction
        self.arrival_radius = arrival_radius
        self.orbit_radius = orbit_radius
        self.orbit_rate = orbit_rate
        self.orbit_gain = orbit_gain

    @staticmethod
    def can_move(state: 'SimulationState') -> bool:
        """Cleaning, powered, and with room in the bin."""
        return (
            state.cleaning and
            state.battery.energy > 0 and
            state.robot.bin < state.robot.bin_capacity
        )

    def max_speed(self, state: 'SimulationState') -> float:
        return (state.robot.base_speed + speed_bonus(state.upgrades)) * self.speed_scale

    def update(self, dt: float, now: float, state: 'SimulationState', bounds: Bounds) -> MovementResult:
        """
        Advance the robot by one tick.

        Velocity is left untouched when the robot cannot move.
        """
        if not self.can_move(state):
            return FROZEN

        robot = state.robot
        target = state.targeting.effective_target()

        if target is not None:
            if distance(robot.position, target) > self.arrival_radius:
                self._seek(robot, target, dt, self.max_speed(state))
            elif not state.targeting.manual_locked:
                self._orbit(robot, target, now)

        # Friction
        robot.vx *= self.friction
        robot.vy *= self.friction

        # Integrate and clamp (no bounce)
        start = robot.position
        robot.position = bounds.clamp((robot.x + robot.vx, robot.y + robot.vy))
        travelled = distance(start, robot.position)

        # Sweep up dirt under the robot
        ids = state.dirt.query_near(robot.position, suction_radius(state.upgrades))
        collected = state.dirt.collect(ids)

        return MovementResult(
            moved=True,
            collected=collected,
            speed=robot.speed,
            distance=travelled,
        )

    def _seek(self, robot, target: Tuple[float, float], dt: float, max_speed: float):
        """Accelerate toward the target, capped at max speed."""
        dx = target[0] - robot.x
        dy = target[1] - robot.y
        dist = math.sqrt(dx * dx + dy * dy)

        robot.vx += dx / dist * self.acceleration * dt
        robot.vy += dy / dist * self.acceleration * dt
        robot.velocity = limit(robot.velocity, max_speed)
        robot.heading = heading_of(robot.velocity)

    def _orbit(self, robot, target: Tuple[float, float], now: float):
        """Circle a small ring around the target so a depleting cluster keeps getting swept."""
        orbit_point = point_on_circle(target, self.orbit_radius, now * self.orbit_rate)
        robot.vx = (orbit_point[0] - robot.x) * self.orbit_gain
        robot.vy = (orbit_point[1] - robot.y) * self.orbit_gain
