"""
Main simulation - owns the authoritative state and exposes the command
surface used by the presentation layer.

The simulation itself never schedules anything: a host feeds it elapsed
time through `advance(dt)` (see systems.clock for the driving strategies)
and reads immutable `SimulationView`s between advances.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from config import DIRT_COUNT
from entities.dirt import DirtField
from entities.preferences import UiPreferences
from entities.robot import Robot, Battery
from systems.clock import SimulationClock, AdvanceResult
from systems.economy import (
    EconomyLedger, UpgradeKind, UpgradeLevels, PurchaseResult
)
from systems.movement import MovementController
from systems.navigation import Bounds, FLOOR_BOUNDS, navigation_bounds
from systems.notices import NoticeBoard, TARGET_SET, CLICK_IGNORED
from systems.persistence import (
    SnapshotStore, InMemorySnapshotStore, SnapshotError,
    encode_snapshot, decode_snapshot
)
from systems.targeting import TargetingStateMachine, TargetingConfig
from systems.telemetry import Telemetry, EventType

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass
class SimulationState:
    """Everything the tick pipeline mutates."""
    robot: Robot
    battery: Battery
    dirt: DirtField
    targeting: TargetingStateMachine
    upgrades: UpgradeLevels = field(default_factory=UpgradeLevels)
    prefs: UiPreferences = field(default_factory=UiPreferences)
    money: float = 0.0
    cleaning: bool = False
    level_complete: bool = False
    ai_enabled: bool = False
    background: bool = False
    autosave: bool = True
    now: float = 0.0  # Simulation time in ms

    @property
    def clean_percent(self) -> float:
        return self.dirt.clean_fraction() * 100


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a user command. Rejections are results, not exceptions."""
    ok: bool
    message: str


@dataclass(frozen=True)
class SimulationView:
    """Read-only snapshot for rendering."""
    position: Point
    heading: float
    cleaning: bool
    level_complete: bool
    ai_enabled: bool
    energy: float
    energy_max: float
    bin: float
    bin_capacity: float
    money: float
    target: Optional[Point]
    nudging: bool
    clean_percent: float
    upgrades: Dict[str, int]
    prefs: Dict[str, bool]
    notices: Tuple[str, ...]
    dirt: Tuple[Point, ...]
    background: bool
    autosave: bool

    @property
    def energy_empty(self) -> bool:
        return self.energy <= 0

    @property
    def bin_full(self) -> bool:
        return self.bin >= self.bin_capacity


class Simulation:
    """
    Cleaning robot simulation.

    Commands:
    - start/stop cleaning, charge, empty bin
    - repaint (new dirt), reset (keep upgrades), new game (wipe everything)
    - purchase(kind), click(point) for manual targeting
    """

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        rng: Optional[random.Random] = None,
        dirt_count: int = DIRT_COUNT,
        targeting_config: Optional[TargetingConfig] = None
    ):
        self.rng = rng or random.Random()
        self.dirt_count = dirt_count
        self.targeting_config = targeting_config

        # Systems
        self.telemetry = Telemetry()
        self.notices = NoticeBoard()
        self.movement = MovementController()
        self.ledger = EconomyLedger(self.telemetry, self.notices)
        self.store = store or InMemorySnapshotStore()

        self.state = self._fresh_state()
        self.clock = SimulationClock(self)

    def _fresh_state(self, now: float = 0.0) -> SimulationState:
        return SimulationState(
            robot=Robot(),
            battery=Battery(),
            dirt=DirtField(),
            targeting=self._new_targeting(),
            now=now,
        )

    def _new_targeting(self) -> TargetingStateMachine:
        return TargetingStateMachine(
            config=self.targeting_config,
            rng=self.rng,
            telemetry=self.telemetry,
        )

    def bounds(self) -> Bounds:
        """Navigable bounds under the current overhang preference."""
        return navigation_bounds(self.state.prefs.overhang)

    def advance(self, dt: float) -> AdvanceResult:
        """Advance the simulation by dt milliseconds."""
        return self.clock.advance(dt)

    def _notify(self, message: str) -> CommandResult:
        self.notices.post(message, self.state.now)
        return CommandResult(True, message)

    def _reject(self, message: str) -> CommandResult:
        self.notices.post(message, self.state.now)
        return CommandResult(False, message)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> bool:
        """
        Load the current epoch's save, falling back to a fresh game.

        Returns:
            True if a save was restored
        """
        loaded = self.load()
        if self.state.dirt.total == 0 or self.state.level_complete:
            self.regenerate()
            self.state.level_complete = False
        return loaded

    def regenerate(self, count: Optional[int] = None):
        """Swap in a brand new dirt field."""
        count = self.dirt_count if count is None else count
        dirt = DirtField()
        dirt.generate(count, FLOOR_BOUNDS, self.rng)
        self.state.dirt = dirt
        self.state.level_complete = False
        self.telemetry.log(EventType.FIELD_RESET, self.state.now, {'count': count})

    def repaint(self, count: Optional[int] = None) -> CommandResult:
        self.regenerate(count)
        return self._notify("Dirt repainted")

    def reset(self) -> CommandResult:
        """Clear progress on this field but keep money and upgrades."""
        state = self.state
        state.robot.position = (0.0, 0.0)
        state.robot.stop()
        state.robot.heading = 0.0
        state.robot.empty_bin()
        state.battery.charge()
        state.cleaning = False
        state.targeting.clear()
        self.regenerate()
        logger.info("Game reset")
        return self._notify("Game reset")

    def new_game(self) -> CommandResult:
        """
        Wipe everything, upgrades included, and move to a new save epoch.

        Snapshots for every earlier epoch are deleted.
        """
        current = self.store.current_epoch()
        self.store.delete_range(1, current)
        self.store.set_epoch(current + 1)

        self.state = self._fresh_state(now=self.state.now)
        self.regenerate()
        logger.info("New game started (epoch %d)", current + 1)
        return self._notify("New game started!")

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def start_cleaning(self) -> CommandResult:
        if self.state.level_complete:
            return self._reject("Level complete - repaint or reset to continue")
        self.state.cleaning = True
        self.telemetry.log(EventType.MODE_CHANGE, self.state.now, {'cleaning': True})
        return self._notify("Cleaning started")

    def stop_cleaning(self) -> CommandResult:
        self.state.cleaning = False
        self.telemetry.log(EventType.MODE_CHANGE, self.state.now, {'cleaning': False})
        return self._notify("Cleaning paused")

    def toggle_cleaning(self) -> CommandResult:
        if self.state.cleaning:
            return self.stop_cleaning()
        return self.start_cleaning()

    def charge(self) -> CommandResult:
        self.state.battery.charge()
        return self._notify("Battery charged")

    def empty_bin(self) -> CommandResult:
        self.state.robot.empty_bin()
        return self._notify("Bin emptied")

    def click(self, point: Point) -> CommandResult:
        """Floor click, already projected to plane coordinates."""
        state = self.state
        target = state.targeting.manual_target(point, state.now, state.ai_enabled, self.bounds())
        if target is None:
            return self._reject(CLICK_IGNORED)
        return self._notify(TARGET_SET)

    def purchase(self, kind: Union[UpgradeKind, str]) -> PurchaseResult:
        if not isinstance(kind, UpgradeKind):
            kind = UpgradeKind(kind)
        return self.ledger.purchase(self.state, kind)

    def next_costs(self) -> Dict[str, Optional[float]]:
        """Price of the next level of every upgrade (None at max)."""
        return {
            kind.value: self.ledger.cost_of(kind, self.state.upgrades.get(kind))
            for kind in UpgradeKind
        }

    def set_preference(self, name: str, value: bool) -> CommandResult:
        if name not in UiPreferences.names():
            raise ValueError(f"unknown preference {name!r}")
        setattr(self.state.prefs, name, bool(value))
        return CommandResult(True, f"{name} {'on' if value else 'off'}")

    def toggle_preference(self, name: str) -> CommandResult:
        if name not in UiPreferences.names():
            raise ValueError(f"unknown preference {name!r}")
        return self.set_preference(name, not getattr(self.state.prefs, name))

    def toggle_background(self) -> CommandResult:
        self.state.background = not self.state.background
        return self._notify(f"Background running {'on' if self.state.background else 'off'}")

    def toggle_autosave(self) -> CommandResult:
        self.state.autosave = not self.state.autosave
        return self._notify(f"Autosave {'on' if self.state.autosave else 'off'}")

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    @property
    def epoch(self) -> int:
        return self.store.current_epoch()

    def snapshot(self) -> dict:
        """Snapshot document for the current state. Call between advances."""
        return encode_snapshot(self.state)

    def save(self):
        self.store.save(self.epoch, self.snapshot())

    def load(self) -> bool:
        """
        Replace the state with the current epoch's snapshot.

        A missing or malformed snapshot leaves the state untouched.
        """
        doc = self.store.load(self.epoch)
        if doc is None:
            return False
        try:
            saved = decode_snapshot(doc)
        except SnapshotError as e:
            logger.warning("Ignoring unusable save for epoch %d: %s", self.epoch, e)
            return False

        self.state = SimulationState(
            robot=saved.robot,
            battery=saved.battery,
            dirt=saved.dirt,
            targeting=self._new_targeting(),
            upgrades=saved.upgrades,
            prefs=saved.prefs,
            money=saved.money,
            cleaning=saved.cleaning,
            level_complete=saved.level_complete,
            ai_enabled=saved.ai_enabled,
            background=saved.background,
            autosave=saved.autosave,
            now=self.state.now,
        )
        logger.info("Loaded save for epoch %d", self.epoch)
        return True

    # =========================================================================
    # VIEW
    # =========================================================================

    def view(self) -> SimulationView:
        state = self.state
        return SimulationView(
            position=state.robot.position,
            heading=state.robot.heading,
            cleaning=state.cleaning,
            level_complete=state.level_complete,
            ai_enabled=state.ai_enabled,
            energy=state.battery.energy,
            energy_max=state.battery.energy_max,
            bin=state.robot.bin,
            bin_capacity=state.robot.bin_capacity,
            money=state.money,
            target=state.targeting.target,
            nudging=state.targeting.nudging,
            clean_percent=state.clean_percent,
            upgrades=state.upgrades.as_dict(),
            prefs=state.prefs.as_dict(),
            notices=tuple(n.message for n in self.notices.active(state.now)),
            dirt=tuple(p.position for p in state.dirt.particles if not p.collected),
            background=state.background,
            autosave=state.autosave,
        )

    def __repr__(self) -> str:
        return f"Simulation(epoch={self.epoch}, {self.state.robot}, {self.state.dirt})"
