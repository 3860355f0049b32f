"""
Tests for the economy ledger and upgrades.
"""
import pytest

from entities.dirt import DirtParticle
from systems.economy import UpgradeKind, suction_radius, UpgradeLevels
from systems.notices import (
    BATTERY_DEPLETED, BIN_FULL, LEVEL_COMPLETE, MAX_LEVEL, NOT_ENOUGH_MONEY
)
from systems.telemetry import EventType

from conftest import make_sim


class TestCollectionReward:
    """Tests for money, bin and energy changes."""

    def test_reward_formula(self, sim):
        reward = sim.ledger.apply_collection(sim.state, 10, 0.02)

        assert reward.money == pytest.approx(10 * 0.02 * 0.1)
        assert sim.state.money == pytest.approx(0.02)
        assert sim.state.robot.bin == pytest.approx(1.5)
        assert sim.state.battery.energy == pytest.approx(2500 - (0.02 * 0.4 + 10))

    def test_bin_clamped_to_capacity(self, sim):
        sim.state.robot.bin = 199.9

        sim.ledger.apply_collection(sim.state, 10, 0.0)

        assert sim.state.robot.bin == 200.0

    def test_energy_clamped_at_zero(self, sim):
        sim.state.battery.energy = 3.0

        sim.ledger.apply_collection(sim.state, 10, 0.0)

        assert sim.state.battery.energy == 0.0

    def test_zero_count_is_noop(self, sim):
        sim.ledger.apply_collection(sim.state, 0, 0.02)

        assert sim.state.money == 0.0
        assert sim.telemetry.count(EventType.COLLECTION) == 0


class TestStopConditions:
    """Tests for the end-of-tick checks."""

    def test_depletion_stops_cleaning(self, sim):
        sim.state.cleaning = True
        sim.state.battery.energy = 0

        sim.ledger.check_stop_conditions(sim.state)

        assert not sim.state.cleaning
        assert sim.notices.messages() == [BATTERY_DEPLETED]

    def test_full_bin_stops_cleaning(self, sim):
        sim.state.cleaning = True
        sim.state.robot.bin = sim.state.robot.bin_capacity

        sim.ledger.check_stop_conditions(sim.state)

        assert not sim.state.cleaning
        assert sim.notices.messages() == [BIN_FULL]

    def test_depletion_checked_before_bin(self, sim):
        """Only one stop notice when both limits are hit at once."""
        sim.state.cleaning = True
        sim.state.battery.energy = 0
        sim.state.robot.bin = sim.state.robot.bin_capacity

        sim.ledger.check_stop_conditions(sim.state)

        assert sim.notices.messages() == [BATTERY_DEPLETED]

    def test_no_notice_when_already_stopped(self, sim):
        sim.state.battery.energy = 0

        sim.ledger.check_stop_conditions(sim.state)

        assert sim.notices.messages() == []

    def test_level_completes_once(self):
        sim = make_sim([DirtParticle(i, 0.0, 0.0) for i in range(1000)])
        sim.state.cleaning = True
        sim.state.dirt.collect(range(995))

        sim.ledger.check_stop_conditions(sim.state)
        sim.ledger.check_stop_conditions(sim.state)

        assert sim.state.level_complete
        assert not sim.state.cleaning
        assert sim.notices.messages() == [LEVEL_COMPLETE]
        assert sim.telemetry.count(EventType.LEVEL_COMPLETE) == 1

    def test_just_below_threshold(self):
        sim = make_sim([DirtParticle(i, 0.0, 0.0) for i in range(1000)])
        sim.state.dirt.collect(range(994))

        sim.ledger.check_stop_conditions(sim.state)

        assert not sim.state.level_complete


class TestPurchase:
    """Tests for buying upgrades."""

    def test_purchase_deducts_table_cost(self, sim):
        sim.state.money = 100.0

        result = sim.ledger.purchase(sim.state, UpgradeKind.SUCTION)

        assert result.ok
        assert result.cost == 60
        assert sim.state.money == pytest.approx(40.0)
        assert sim.state.upgrades.suction == 1
        assert sim.notices.messages() == ["suction upgraded!"]
        assert suction_radius(sim.state.upgrades) == pytest.approx(0.25)

    def test_cost_follows_level(self, sim):
        sim.state.money = 1000.0
        sim.ledger.purchase(sim.state, UpgradeKind.CAPACITY)

        result = sim.ledger.purchase(sim.state, UpgradeKind.CAPACITY)

        assert result.cost == 75
        assert sim.state.money == pytest.approx(1000 - 50 - 75)

    def test_insufficient_funds_rejected(self, sim):
        sim.state.money = 59.0

        result = sim.ledger.purchase(sim.state, UpgradeKind.SPEED)

        assert not result.ok
        assert result.message == NOT_ENOUGH_MONEY
        assert sim.state.money == 59.0
        assert sim.state.upgrades.speed == 0

    def test_max_level_rejected(self, sim):
        sim.state.money = 10000.0
        for _ in range(5):
            assert sim.ledger.purchase(sim.state, UpgradeKind.BATTERY).ok
        money = sim.state.money

        result = sim.ledger.purchase(sim.state, UpgradeKind.BATTERY)

        assert not result.ok
        assert result.message == MAX_LEVEL
        assert sim.state.money == money
        assert sim.state.upgrades.battery == 5

    def test_capacity_effect(self, sim):
        sim.state.money = 50.0
        sim.ledger.purchase(sim.state, UpgradeKind.CAPACITY)

        assert sim.state.robot.bin_capacity == 275.0

    def test_battery_effect_refills(self, sim):
        sim.state.money = 80.0
        sim.state.battery.energy = 10.0

        sim.ledger.purchase(sim.state, UpgradeKind.BATTERY)

        assert sim.state.battery.energy_max == 3250.0
        assert sim.state.battery.energy == 3250.0

    def test_auto_unlocks_ai_once(self, sim):
        """Buying auto at exactly 300 enables AI; a second attempt is max level."""
        sim.state.money = 300.0

        first = sim.ledger.purchase(sim.state, UpgradeKind.AUTO)
        second = sim.ledger.purchase(sim.state, UpgradeKind.AUTO)

        assert first.ok
        assert sim.state.ai_enabled
        assert sim.state.money == 0.0
        assert not second.ok
        assert second.message == MAX_LEVEL

    def test_cost_of_past_table(self, sim):
        assert sim.ledger.cost_of(UpgradeKind.AUTO, 0) == 300
        assert sim.ledger.cost_of(UpgradeKind.AUTO, 1) is None
        assert sim.ledger.max_level(UpgradeKind.CAPACITY) == 5

    def test_levels_as_dict(self):
        levels = UpgradeLevels(capacity=2, auto=1)

        assert levels.as_dict() == {
            'capacity': 2, 'suction': 0, 'speed': 0, 'battery': 0, 'auto': 1,
        }
