"""
Robot entity - the disc-shaped cleaning robot and its battery.
"""
import math
from typing import Tuple

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    ROBOT_BASE_SPEED, ROBOT_SUCTION, ROBOT_BIN_CAPACITY, BATTERY_ENERGY_MAX
)


class Robot:
    """
    A cleaning robot on the floor plane.

    Position and velocity are plane coordinates; velocity is applied once per
    tick. Heading is in radians (0 = +x).
    """

    def __init__(
        self,
        position: Tuple[float, float] = (0.0, 0.0),
        base_speed: float = ROBOT_BASE_SPEED,
        suction: int = ROBOT_SUCTION,
        bin_capacity: float = ROBOT_BIN_CAPACITY
    ):
        self.x, self.y = position
        self.vx = 0.0
        self.vy = 0.0
        self.heading = 0.0
        self.base_speed = base_speed
        self.suction = suction

        # Internal bin, measured in volume rather than items
        self.bin = 0.0
        self.bin_capacity = bin_capacity

    @property
    def position(self) -> Tuple[float, float]:
        """Get current position."""
        return (self.x, self.y)

    @position.setter
    def position(self, pos: Tuple[float, float]):
        """Set position."""
        self.x, self.y = pos

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.vx, self.vy)

    @velocity.setter
    def velocity(self, v: Tuple[float, float]):
        self.vx, self.vy = v

    @property
    def speed(self) -> float:
        """Current speed (plane units per tick)."""
        return math.sqrt(self.vx * self.vx + self.vy * self.vy)

    @property
    def bin_full(self) -> bool:
        """Check if bin is at capacity."""
        return self.bin >= self.bin_capacity

    def add_to_bin(self, amount: float) -> float:
        """
        Add debris volume to the bin, clamped to capacity.

        Returns:
            Volume actually stored
        """
        before = self.bin
        self.bin = min(self.bin_capacity, self.bin + amount)
        return self.bin - before

    def empty_bin(self) -> float:
        """
        Empty the internal bin.

        Returns:
            Volume emptied
        """
        amount = self.bin
        self.bin = 0.0
        return amount

    def stop(self):
        self.vx = 0.0
        self.vy = 0.0

    def __repr__(self) -> str:
        return (
            f"Robot(pos=({self.x:.2f}, {self.y:.2f}), speed={self.speed:.4f}, "
            f"bin={self.bin:.1f}/{self.bin_capacity:.0f})"
        )


class Battery:
    """Energy store. Energy never leaves [0, energy_max]."""

    def __init__(self, energy_max: float = BATTERY_ENERGY_MAX, energy: float = None):
        self.energy_max = energy_max
        self.energy = energy_max if energy is None else max(0.0, min(energy_max, energy))

    @property
    def depleted(self) -> bool:
        return self.energy <= 0

    def drain(self, amount: float) -> float:
        """
        Remove energy, never going below zero.

        Returns:
            Energy actually drained
        """
        before = self.energy
        self.energy = max(0.0, self.energy - amount)
        return before - self.energy

    def charge(self):
        """Refill to maximum."""
        self.energy = self.energy_max

    def __repr__(self) -> str:
        return f"Battery({self.energy:.0f}/{self.energy_max:.0f})"
