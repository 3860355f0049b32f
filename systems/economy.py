"""
Economy ledger - turns collection into money, bin volume and energy cost,
enforces the stop conditions and sells upgrades.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    UPGRADE_COSTS, CAPACITY_PER_LEVEL, BATTERY_PER_LEVEL,
    SPEED_PER_LEVEL, SUCTION_BASE_RADIUS, SUCTION_PER_LEVEL,
    ROBOT_BIN_CAPACITY, BATTERY_ENERGY_MAX,
    MONEY_PER_PARTICLE_SPEED, BIN_PER_PARTICLE,
    ENERGY_PER_SPEED, ENERGY_PER_PARTICLE, COMPLETION_THRESHOLD
)
from systems.notices import (
    NoticeBoard, BATTERY_DEPLETED, BIN_FULL, LEVEL_COMPLETE,
    MAX_LEVEL, NOT_ENOUGH_MONEY
)
from systems.telemetry import Telemetry, EventType

if TYPE_CHECKING:
    from simulation import SimulationState

logger = logging.getLogger(__name__)


# =============================================================================
# UPGRADES
# =============================================================================

class UpgradeKind(Enum):
    """Independent upgrade tracks."""
    CAPACITY = "capacity"
    SUCTION = "suction"
    SPEED = "speed"
    BATTERY = "battery"
    AUTO = "auto"


@dataclass
class UpgradeLevels:
    """Current level of every upgrade track."""
    capacity: int = 0
    suction: int = 0
    speed: int = 0
    battery: int = 0
    auto: int = 0

    def get(self, kind: UpgradeKind) -> int:
        return getattr(self, kind.value)

    def set(self, kind: UpgradeKind, level: int):
        setattr(self, kind.value, level)

    def as_dict(self) -> Dict[str, int]:
        return {kind.value: self.get(kind) for kind in UpgradeKind}


def suction_radius(levels: UpgradeLevels) -> float:
    """Collection radius around the robot."""
    return SUCTION_BASE_RADIUS + levels.suction * SUCTION_PER_LEVEL


def speed_bonus(levels: UpgradeLevels) -> float:
    return levels.speed * SPEED_PER_LEVEL


def bin_capacity_for(levels: UpgradeLevels) -> float:
    return ROBOT_BIN_CAPACITY + levels.capacity * CAPACITY_PER_LEVEL


def energy_max_for(levels: UpgradeLevels) -> float:
    return BATTERY_ENERGY_MAX + levels.battery * BATTERY_PER_LEVEL


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class CollectionReward:
    """Deltas applied for one collection event."""
    count: int
    money: float
    bin: float
    energy: float


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome of an upgrade purchase attempt."""
    ok: bool
    kind: UpgradeKind
    message: str
    level: int
    cost: Optional[float] = None


# =============================================================================
# LEDGER
# =============================================================================

class EconomyLedger:
    """
    Applies rewards and costs to the simulation state.

    The ledger never raises for user-facing rejections; they come back as
    results and are announced through the notice board.
    """

    def __init__(
        self,
        telemetry: Telemetry,
        notices: NoticeBoard,
        costs: Dict[str, List[float]] = None,
        completion_threshold: float = COMPLETION_THRESHOLD
    ):
        self.telemetry = telemetry
        self.notices = notices
        self.costs = {
            UpgradeKind(name): list(table)
            for name, table in (costs or UPGRADE_COSTS).items()
        }
        self.completion_threshold = completion_threshold

    def apply_collection(self, state: 'SimulationState', count: int, speed: float) -> CollectionReward:
        """
        Apply the reward/cost of collecting `count` particles at `speed`.

        Bin and energy are clamped to their valid ranges.
        """
        if count <= 0:
            return CollectionReward(0, 0.0, 0.0, 0.0)

        money = count * speed * MONEY_PER_PARTICLE_SPEED
        state.money += money
        stored = state.robot.add_to_bin(count * BIN_PER_PARTICLE)
        drained = state.battery.drain(speed * ENERGY_PER_SPEED + count * ENERGY_PER_PARTICLE)

        self.telemetry.log(EventType.COLLECTION, state.now, {
            'count': count,
            'money': money,
        })
        return CollectionReward(count, money, stored, drained)

    def check_stop_conditions(self, state: 'SimulationState'):
        """
        End-of-tick checks: depletion, full bin, then level completion.
        """
        if state.cleaning and state.battery.depleted:
            self._stop(state, BATTERY_DEPLETED, 'battery_depleted')
        elif state.cleaning and state.robot.bin_full:
            self._stop(state, BIN_FULL, 'bin_full')

        if state.dirt.clean_fraction() >= self.completion_threshold and not state.level_complete:
            state.cleaning = False
            state.level_complete = True
            self.notices.post(LEVEL_COMPLETE, state.now)
            self.telemetry.log(EventType.LEVEL_COMPLETE, state.now, {
                'clean_fraction': state.dirt.clean_fraction(),
            })
            logger.info("Level complete at %.1fs", state.now / 1000)

    def _stop(self, state: 'SimulationState', message: str, reason: str):
        state.cleaning = False
        self.notices.post(message, state.now)
        self.telemetry.log(EventType.MODE_CHANGE, state.now, {
            'cleaning': False,
            'reason': reason,
        })

    # =========================================================================
    # PURCHASES
    # =========================================================================

    def cost_of(self, kind: UpgradeKind, level: int) -> Optional[float]:
        """Cost of buying the next level from `level`, or None at max."""
        table = self.costs[kind]
        if level >= len(table):
            return None
        return table[level]

    def max_level(self, kind: UpgradeKind) -> int:
        return len(self.costs[kind])

    def purchase(self, state: 'SimulationState', kind: UpgradeKind) -> PurchaseResult:
        """
        Buy one level of an upgrade.

        Rejections (max level, insufficient funds) leave the state untouched.
        """
        level = state.upgrades.get(kind)
        cost = self.cost_of(kind, level)

        if cost is None:
            self.notices.post(MAX_LEVEL, state.now)
            return PurchaseResult(False, kind, MAX_LEVEL, level)

        if state.money < cost:
            self.notices.post(NOT_ENOUGH_MONEY, state.now)
            return PurchaseResult(False, kind, NOT_ENOUGH_MONEY, level, cost)

        state.money -= cost
        state.upgrades.set(kind, level + 1)
        self._apply_effect(state, kind)

        message = f"{kind.value} upgraded!"
        self.notices.post(message, state.now)
        self.telemetry.log(EventType.PURCHASE, state.now, {
            'kind': kind.value,
            'level': level + 1,
            'cost': cost,
        })
        logger.info("Purchased %s level %d for %s", kind.value, level + 1, cost)
        return PurchaseResult(True, kind, message, level + 1, cost)

    def _apply_effect(self, state: 'SimulationState', kind: UpgradeKind):
        """Side effects of a new upgrade level."""
        if kind == UpgradeKind.CAPACITY:
            state.robot.bin_capacity = bin_capacity_for(state.upgrades)
        elif kind == UpgradeKind.BATTERY:
            state.battery.energy_max = energy_max_for(state.upgrades)
            state.battery.charge()
        elif kind == UpgradeKind.AUTO:
            state.ai_enabled = True
