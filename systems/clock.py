"""
Simulation clock - the single "advance by dt" entry point and the driving
strategies that feed it.

Every tick runs the same fixed pipeline:
    targeting -> movement (+ dirt collection) -> economy -> stop checks

Drivers only decide *when* and *with what dt* to advance:
    FrameDriver       per-frame callback, variable dt from host timestamps
    BackgroundDriver  coarse timer doing fixed-size catch-up steps per wake
LoopScheduler keeps exactly one of them active.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, TYPE_CHECKING

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import MAX_TICK_MS, BACKGROUND_WAKE_MS, BACKGROUND_STEPS, BACKGROUND_STEP_MS
from systems.telemetry import EventType

if TYPE_CHECKING:
    from simulation import Simulation

logger = logging.getLogger(__name__)


class AdvanceStatus(Enum):
    APPLIED = "applied"
    DISCARDED = "discarded"
    FAULTED = "faulted"


@dataclass(frozen=True)
class AdvanceResult:
    status: AdvanceStatus
    dt: float
    error: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status == AdvanceStatus.APPLIED


class SimulationClock:
    """
    Advances a Simulation by a host-supplied dt (milliseconds).

    Deltas outside (0, max_tick_ms) are stalls and are dropped without
    touching state. A fault inside a tick is logged and swallowed so the
    host keeps scheduling.
    """

    def __init__(self, simulation: 'Simulation', max_tick_ms: float = MAX_TICK_MS):
        self.simulation = simulation
        self.max_tick_ms = max_tick_ms
        self.ticks = 0
        self.discarded = 0
        self.faults = 0

    def advance(self, dt: float) -> AdvanceResult:
        if not (0 < dt < self.max_tick_ms):
            self.discarded += 1
            logger.debug("Discarded stall dt=%.1fms", dt)
            return AdvanceResult(AdvanceStatus.DISCARDED, dt)

        try:
            self.step(dt)
        except Exception as e:
            self.faults += 1
            logger.exception("Tick failed (dt=%.1fms)", dt)
            sim = self.simulation
            sim.telemetry.log(EventType.ERROR, sim.state.now, {
                'dt': dt,
                'error': repr(e),
            })
            return AdvanceResult(AdvanceStatus.FAULTED, dt, repr(e))

        self.ticks += 1
        return AdvanceResult(AdvanceStatus.APPLIED, dt)

    def step(self, dt: float):
        """One tick of the fixed pipeline. Raises on internal faults."""
        sim = self.simulation
        state = sim.state
        bounds = sim.bounds()

        state.now += dt

        state.targeting.update(dt, state.now, state.robot, state.dirt, bounds, state.ai_enabled)

        result = sim.movement.update(dt, state.now, state, bounds)
        if result.collected:
            sim.ledger.apply_collection(state, result.collected, result.speed)
        if result.distance:
            sim.telemetry.add_distance(result.distance)

        sim.ledger.check_stop_conditions(state)


# =============================================================================
# DRIVERS
# =============================================================================

class FrameDriver:
    """Foreground driver: one advance per rendered frame."""

    def __init__(self, clock: SimulationClock):
        self.clock = clock
        self.active = False
        self.last_time: Optional[float] = None

    def start(self):
        self.active = True
        self.last_time = None

    def stop(self):
        self.active = False
        self.last_time = None

    def on_frame(self, timestamp_ms: float) -> Optional[AdvanceResult]:
        """
        Host frame callback.

        The first frame after (re)starting only records the timestamp; its
        zero dt is discarded by the clock.
        """
        if not self.active:
            return None
        dt = timestamp_ms - self.last_time if self.last_time is not None else 0.0
        self.last_time = timestamp_ms
        return self.clock.advance(dt)


class BackgroundDriver:
    """Background driver: several fixed catch-up steps per timer wake."""

    def __init__(
        self,
        clock: SimulationClock,
        wake_ms: int = BACKGROUND_WAKE_MS,
        steps: int = BACKGROUND_STEPS,
        step_ms: float = BACKGROUND_STEP_MS,
        after_wake: Optional[Callable[[], None]] = None
    ):
        self.clock = clock
        self.wake_ms = wake_ms
        self.steps = steps
        self.step_ms = step_ms
        self.after_wake = after_wake
        self.active = False

    def start(self):
        self.active = True

    def stop(self):
        self.active = False

    def on_wake(self) -> List[AdvanceResult]:
        if not self.active:
            return []
        results = [self.clock.advance(self.step_ms) for _ in range(self.steps)]
        if self.after_wake is not None:
            self.after_wake()
        return results


class LoopScheduler:
    """
    Chooses the driving mechanism. At most one driver is active; switching
    stops the other one first.
    """

    def __init__(
        self,
        clock: SimulationClock,
        background_enabled: Callable[[], bool],
        background: Optional[BackgroundDriver] = None
    ):
        self.frame = FrameDriver(clock)
        self.background = background or BackgroundDriver(clock)
        self.background_enabled = background_enabled
        self.paused = False

    @property
    def active(self) -> Optional[str]:
        if self.frame.active:
            return 'frame'
        if self.background.active:
            return 'background'
        return None

    def set_foreground(self, visible: bool):
        """Host visibility changed."""
        if self.paused:
            return
        if visible:
            self.background.stop()
            self.frame.start()
        else:
            self.frame.stop()
            if self.background_enabled():
                self.background.start()
        logger.info("Driver switched to %s", self.active)

    def pause(self):
        """Stop scheduling advances. State is left exactly as it is."""
        self.paused = True
        self.frame.stop()
        self.background.stop()

    def resume(self, visible: bool = True):
        self.paused = False
        self.set_foreground(visible)
