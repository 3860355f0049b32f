"""
Navigation bounds - the rectangle the robot's position is clamped to.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    FLOOR_LEFT, FLOOR_RIGHT, FLOOR_TOP, FLOOR_BOTTOM, OVERHANG_BUFFER
)
from utils.math_helpers import Bounds

FLOOR_BOUNDS = Bounds(FLOOR_LEFT, FLOOR_RIGHT, FLOOR_TOP, FLOOR_BOTTOM)


def navigation_bounds(overhang: bool = True) -> Bounds:
    """
    Navigable area for the robot.

    Args:
        overhang: Allow the robot to hang slightly past the floor edge

    Returns:
        The floor rectangle, inflated by the overhang buffer when enabled
    """
    if overhang:
        return FLOOR_BOUNDS.inflate(OVERHANG_BUFFER)
    return FLOOR_BOUNDS
