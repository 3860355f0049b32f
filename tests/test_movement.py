"""
Tests for the movement controller.
"""
import math

import pytest

from entities.dirt import DirtParticle
from systems.movement import MovementController
from systems.navigation import navigation_bounds
from systems.targeting import AISeek, ManualSeek
from systems.economy import UpgradeKind

from conftest import make_sim


@pytest.fixture
def controller():
    return MovementController()


def cleaning_state(particles=()):
    sim = make_sim(particles)
    sim.state.cleaning = True
    return sim.state


class TestGate:
    """Tests for when the robot may move."""

    def test_frozen_when_not_cleaning(self, controller):
        state = cleaning_state()
        state.cleaning = False
        state.robot.vx = 0.01

        result = controller.update(16, 16, state, navigation_bounds())

        assert not result.moved
        assert state.robot.position == (0.0, 0.0)
        assert state.robot.vx == 0.01

    def test_frozen_without_energy(self, controller):
        state = cleaning_state()
        state.battery.energy = 0
        state.robot.vx = 0.01

        assert not controller.update(16, 16, state, navigation_bounds()).moved
        assert state.robot.vx == 0.01

    def test_frozen_with_full_bin(self, controller):
        state = cleaning_state()
        state.robot.bin = state.robot.bin_capacity

        assert not controller.update(16, 16, state, navigation_bounds()).moved


class TestSeek:
    """Tests for steering toward a target."""

    def test_accelerates_toward_target(self, controller):
        state = cleaning_state()
        state.targeting.mode = AISeek((1.0, 0.0), 0.0, 0.0)

        controller.update(16, 16, state, navigation_bounds())

        # 0.0008/ms * 16ms, then 2% friction
        assert state.robot.vx == pytest.approx(0.0128 * 0.98)
        assert state.robot.vy == pytest.approx(0.0)
        assert state.robot.x == pytest.approx(0.0128 * 0.98)
        assert state.robot.heading == pytest.approx(0.0)

    def test_speed_capped(self, controller):
        """Speed never exceeds (base + bonus) * 0.01 before friction."""
        state = cleaning_state()
        state.targeting.mode = AISeek((0.0, 2.0), 0.0, 0.0)

        for t in range(50):
            controller.update(16, 16 * (t + 1), state, navigation_bounds())

        assert state.robot.speed == pytest.approx(0.02 * 0.98)
        assert state.robot.heading == pytest.approx(math.pi / 2)

    def test_speed_upgrade_raises_cap(self, controller):
        state = cleaning_state()
        state.upgrades.set(UpgradeKind.SPEED, 2)

        assert controller.max_speed(state) == pytest.approx(0.03)

    def test_no_target_only_friction(self, controller):
        """Without a target the robot coasts to rest."""
        state = cleaning_state()
        state.robot.vx = 0.01

        controller.update(16, 16, state, navigation_bounds())

        assert state.robot.vx == pytest.approx(0.0098)


class TestArrival:
    """Tests for behaviour at the target."""

    def test_orbits_ai_target(self, controller):
        """Within the arrival radius the robot steers onto a ring around the target."""
        state = cleaning_state()
        state.robot.position = (1.0, 1.0)
        state.targeting.mode = AISeek((1.05, 1.0), 0.0, 0.0)

        controller.update(16, 0.0, state, navigation_bounds())

        # Orbit point at angle 0 is (1.35, 1.0)
        assert state.robot.vx == pytest.approx((1.35 - 1.0) * 0.002 * 0.98)
        assert state.robot.vy == pytest.approx(0.0)

    def test_manual_target_holds_still(self, controller):
        """A manually locked target is not orbited."""
        state = cleaning_state()
        state.robot.position = (1.0, 1.0)
        state.targeting.mode = ManualSeek((1.05, 1.0), 1000.0)

        controller.update(16, 16, state, navigation_bounds())

        assert state.robot.velocity == (0.0, 0.0)
        assert state.robot.position == (1.0, 1.0)


class TestBounds:
    """Tests for wall handling."""

    def test_position_clamped_velocity_kept(self, controller):
        """Walls clip position but leave velocity alone."""
        state = cleaning_state()
        state.robot.position = (3.69, 0.0)
        state.robot.vx = 0.02

        controller.update(16, 16, state, navigation_bounds(overhang=True))

        assert state.robot.x == pytest.approx(3.7)
        assert state.robot.vx == pytest.approx(0.02 * 0.98)

    def test_without_overhang(self, controller):
        state = cleaning_state()
        state.robot.position = (3.49, 0.0)
        state.robot.vx = 0.02

        controller.update(16, 16, state, navigation_bounds(overhang=False))

        assert state.robot.x == pytest.approx(3.5)


class TestSuction:
    """Tests for collection after integration."""

    def test_collects_within_radius(self, controller):
        state = cleaning_state([
            DirtParticle(0, 0.15, 0.0),
            DirtParticle(1, 0.22, 0.0),
        ])

        result = controller.update(16, 16, state, navigation_bounds())

        assert result.collected == 1
        assert state.dirt.get(0).collected
        assert not state.dirt.get(1).collected

    def test_suction_upgrade_widens_radius(self, controller):
        state = cleaning_state([DirtParticle(0, 0.22, 0.0)])
        state.upgrades.set(UpgradeKind.SUCTION, 1)

        assert controller.update(16, 16, state, navigation_bounds()).collected == 1
