"""
Targeting system - decides WHERE the robot should go.

The mode is one tagged state instead of a pile of independent flags:

    Idle        no target
    ManualSeek  user-clicked waypoint (manual lock active)
    AISeek      cluster chosen by the dirt-seeking AI
    Nudge       short randomized override that breaks stuck/edge-hugging

Stuck-detection accumulators and the revisit map are owned separately
because they outlive any single mode.
"""
import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple, Union, TYPE_CHECKING

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    CLUSTER_CELL_SIZE, CLEAN_ENOUGH_RADIUS, CLEAN_ENOUGH_COUNT,
    STILL_SPEED, EDGE_MARGIN, STILL_WINDOW_MS, EDGE_HUG_WINDOW_MS,
    NUDGE_DURATION_MS, NUDGE_LOCK_MS, NUDGE_SPREAD, NUDGE_JITTER,
    AI_LOCK_MS, AI_HOLD_MS, MANUAL_LOCK_MS,
    DISTANCE_WEIGHT, REVISIT_WEIGHT
)
from entities.dirt import Cluster, CellKey
from systems.telemetry import Telemetry, EventType
from utils.math_helpers import Bounds, distance

if TYPE_CHECKING:
    from entities.robot import Robot
    from entities.dirt import DirtField

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass
class TargetingConfig:
    """Hand-tuned targeting constants. Defaults come from config.py."""
    cluster_cell_size: float = CLUSTER_CELL_SIZE
    clean_enough_radius: float = CLEAN_ENOUGH_RADIUS
    clean_enough_count: int = CLEAN_ENOUGH_COUNT
    still_speed: float = STILL_SPEED
    edge_margin: float = EDGE_MARGIN
    still_window_ms: float = STILL_WINDOW_MS
    edge_hug_window_ms: float = EDGE_HUG_WINDOW_MS
    nudge_duration_ms: float = NUDGE_DURATION_MS
    nudge_lock_ms: float = NUDGE_LOCK_MS
    nudge_spread: float = NUDGE_SPREAD
    nudge_jitter: float = NUDGE_JITTER
    ai_lock_ms: float = AI_LOCK_MS
    ai_hold_ms: float = AI_HOLD_MS
    manual_lock_ms: float = MANUAL_LOCK_MS
    distance_weight: float = DISTANCE_WEIGHT
    revisit_weight: float = REVISIT_WEIGHT


# =============================================================================
# MODES
# =============================================================================

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ManualSeek:
    point: Point
    lock_expiry: float


@dataclass(frozen=True)
class AISeek:
    point: Point
    lock_expiry: float
    hold_expiry: float


@dataclass(frozen=True)
class Nudge:
    point: Point
    expiry: float
    lock_expiry: float


TargetMode = Union[Idle, ManualSeek, AISeek, Nudge]


class TargetingStateMachine:
    """
    Priority-ordered target selection, re-evaluated every tick while the AI
    is enabled: Nudge > Locked > Seeking > Idle.
    """

    def __init__(
        self,
        config: Optional[TargetingConfig] = None,
        rng: Optional[random.Random] = None,
        telemetry: Optional[Telemetry] = None
    ):
        self.config = config or TargetingConfig()
        self.rng = rng or random.Random()
        self.telemetry = telemetry

        self.mode: TargetMode = Idle()
        self.still_time = 0.0
        self.edge_hug_time = 0.0
        self.revisit: Dict[CellKey, int] = {}

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def target(self) -> Optional[Point]:
        """Point the robot is currently steering for."""
        if isinstance(self.mode, Idle):
            return None
        return self.mode.point

    @property
    def manual_locked(self) -> bool:
        return isinstance(self.mode, ManualSeek)

    @property
    def nudging(self) -> bool:
        return isinstance(self.mode, Nudge)

    def lock_expiry(self) -> float:
        """Time until which the current target may not be overridden."""
        if isinstance(self.mode, Idle):
            return 0.0
        return self.mode.lock_expiry

    def effective_target(self) -> Optional[Point]:
        """Nudge point while a nudge is live, else the held target."""
        return self.target

    def clear(self):
        """Forget the target, accumulators and revisit history."""
        self.mode = Idle()
        self.still_time = 0.0
        self.edge_hug_time = 0.0
        self.revisit.clear()

    # =========================================================================
    # MANUAL
    # =========================================================================

    def manual_target(
        self,
        point: Point,
        now: float,
        ai_enabled: bool,
        bounds: Bounds
    ) -> Optional[Point]:
        """
        Set a user waypoint.

        Ignored while the AI is enabled.

        Returns:
            The (clamped) target, or None when the click was ignored
        """
        if ai_enabled:
            return None

        clamped = bounds.clamp(point)
        self.mode = ManualSeek(clamped, now + self.config.manual_lock_ms)
        self._log(EventType.TARGET_SET, now, {'source': 'manual', 'point': clamped})
        return clamped

    # =========================================================================
    # AI
    # =========================================================================

    def update(
        self,
        dt: float,
        now: float,
        robot: 'Robot',
        dirt: 'DirtField',
        bounds: Bounds,
        ai_enabled: bool
    ):
        """
        Run one tick of the AI decision.

        Args:
            dt: Elapsed ms this tick
            now: Simulation time in ms (after this tick's advance)
            robot: The robot (velocity may be jittered by a nudge)
            dirt: Current dirt field
            bounds: Navigable bounds
            ai_enabled: Targeting source; nothing happens when False
        """
        if not ai_enabled:
            return

        cfg = self.config

        # 1. Live nudge overrides everything
        if isinstance(self.mode, Nudge):
            if now <= self.mode.expiry:
                return
            # Expired: keep steering for the nudge point until its lock ends
            self.mode = AISeek(self.mode.point, self.mode.lock_expiry, 0.0)

        # 2. Locked
        if self.lock_expiry() > now:
            return

        # 3. Release the hold early once the target area is clean enough
        target = self.target
        if target is not None and isinstance(self.mode, AISeek):
            remaining = dirt.query_near(target, cfg.clean_enough_radius)
            if len(remaining) < cfg.clean_enough_count:
                self.mode = replace(self.mode, hold_expiry=0.0)

        # 4. Hold
        if isinstance(self.mode, AISeek) and self.mode.hold_expiry > now:
            return

        # 5. Stuck detection
        if robot.speed < cfg.still_speed:
            self.still_time += dt
        else:
            self.still_time = 0.0

        if bounds.near_edge(robot.position, cfg.edge_margin):
            self.edge_hug_time += dt
        else:
            self.edge_hug_time = 0.0

        if self.still_time > cfg.still_window_ms or self.edge_hug_time > cfg.edge_hug_window_ms:
            self._nudge(now, robot, bounds)
            return

        # 6. Pick the next cluster
        cluster = self.choose_cluster(robot.position, dirt)
        if cluster is None:
            self.mode = Idle()
            return

        self.revisit[cluster.key] = self.revisit.get(cluster.key, 0) + 1
        self.mode = AISeek(
            cluster.center,
            now + cfg.ai_lock_ms,
            now + cfg.ai_hold_ms,
        )
        self._log(EventType.TARGET_SET, now, {
            'source': 'ai',
            'point': cluster.center,
            'count': cluster.count,
        })

    def score(self, cluster: Cluster, origin: Point) -> float:
        """Dense, near and rarely visited clusters score highest."""
        cfg = self.config
        dist = distance(origin, cluster.center)
        visits = self.revisit.get(cluster.key, 0)
        return cluster.count / (1 + dist * cfg.distance_weight) - visits * cfg.revisit_weight

    def choose_cluster(self, origin: Point, dirt: 'DirtField') -> Optional[Cluster]:
        """Highest-scoring cluster, or None when the field is clean."""
        best = None
        best_score = None
        for cluster in dirt.clusters(self.config.cluster_cell_size):
            score = self.score(cluster, origin)
            if best_score is None or score > best_score:
                best = cluster
                best_score = score
        return best

    def _nudge(self, now: float, robot: 'Robot', bounds: Bounds):
        """Send the robot toward a random point near the centre."""
        cfg = self.config
        cx, cy = bounds.center
        point = (
            cx + self.rng.uniform(-cfg.nudge_spread, cfg.nudge_spread),
            cy + self.rng.uniform(-cfg.nudge_spread, cfg.nudge_spread),
        )
        reason = 'still' if self.still_time > cfg.still_window_ms else 'edge_hug'

        self.mode = Nudge(point, now + cfg.nudge_duration_ms, now + cfg.nudge_lock_ms)
        self.still_time = 0.0
        self.edge_hug_time = 0.0

        robot.vx += self.rng.uniform(-cfg.nudge_jitter, cfg.nudge_jitter)
        robot.vy += self.rng.uniform(-cfg.nudge_jitter, cfg.nudge_jitter)

        logger.debug("Nudge (%s) toward (%.2f, %.2f)", reason, point[0], point[1])
        self._log(EventType.NUDGE, now, {'reason': reason, 'point': point})

    def _log(self, event_type: EventType, now: float, data: dict):
        if self.telemetry is not None:
            self.telemetry.log(event_type, now, data)

    def __repr__(self) -> str:
        return f"TargetingStateMachine(mode={self.mode}, still={self.still_time:.0f}, edge={self.edge_hug_time:.0f})"
