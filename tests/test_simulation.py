"""
End-to-end tests for the simulation command surface and tick loop.
"""
import dataclasses
import math
import random

import pytest

from systems.notices import BATTERY_DEPLETED, CLICK_IGNORED, TARGET_SET
from systems.targeting import Idle

from conftest import make_sim, ring_of_particles


class TestScenarios:
    """Reference scenarios for single ticks and commands."""

    def test_stationary_sweep(self, sim):
        """A stationary robot collects 50 nearby particles for no money."""
        sim.start_cleaning()

        sim.advance(16)

        assert sim.state.dirt.uncollected_count == 50
        assert sim.state.money == 0.0
        assert sim.state.robot.bin == pytest.approx(7.5)
        assert sim.state.battery.energy == pytest.approx(2450.0)
        assert sim.state.cleaning

    def test_depleted_battery_stops(self, sim):
        sim.start_cleaning()
        sim.state.battery.energy = 0
        sim.state.robot.vx = 0.01

        sim.advance(16)

        assert not sim.state.cleaning
        assert sim.state.robot.position == (0.0, 0.0)
        assert BATTERY_DEPLETED in sim.view().notices

    def test_ai_without_dirt_coasts_to_rest(self):
        """No cluster to chase: the target clears and friction stops the robot."""
        sim = make_sim()
        sim.state.ai_enabled = True
        sim.start_cleaning()
        sim.state.robot.vx = 0.02

        speeds = []
        for _ in range(100):
            sim.advance(16)
            speeds.append(sim.state.robot.speed)

        assert isinstance(sim.state.targeting.mode, Idle)
        assert all(b <= a for a, b in zip(speeds, speeds[1:]))
        assert speeds[-1] < 0.01

    def test_click_ignored_with_ai(self, sim):
        sim.state.ai_enabled = True
        before = sim.state.targeting.target

        result = sim.click((1.0, 1.0))

        assert not result.ok
        assert result.message == CLICK_IGNORED
        assert sim.state.targeting.target == before

    def test_auto_purchase(self, sim):
        sim.state.money = 300.0

        assert sim.purchase('auto').ok
        assert sim.state.ai_enabled
        assert sim.state.money == 0.0
        assert not sim.purchase('auto').ok

    def test_repaint_starts_clean(self, sim):
        sim.repaint(2000)

        assert sim.state.dirt.total == 2000
        assert sim.state.clean_percent == 0.0


class TestCommands:
    """Tests for the remaining user commands."""

    def test_click_sets_target(self, sim):
        result = sim.click((1.0, -1.0))

        assert result.ok
        assert result.message == TARGET_SET
        assert sim.view().target == (1.0, -1.0)

    def test_charge_and_empty(self, sim):
        sim.state.battery.energy = 1.0
        sim.state.robot.bin = 30.0

        sim.charge()
        sim.empty_bin()

        assert sim.state.battery.energy == sim.state.battery.energy_max
        assert sim.state.robot.bin == 0.0

    def test_toggle_cleaning(self, sim):
        assert sim.toggle_cleaning().message == "Cleaning started"
        assert sim.state.cleaning
        assert sim.toggle_cleaning().message == "Cleaning paused"
        assert not sim.state.cleaning

    def test_start_rejected_when_level_complete(self, sim):
        sim.state.level_complete = True

        result = sim.start_cleaning()

        assert not result.ok
        assert not sim.state.cleaning

    def test_reset_keeps_upgrades_and_money(self, sim):
        sim.state.money = 120.0
        sim.purchase('capacity')
        sim.state.robot.position = (2.0, 1.0)
        sim.state.robot.vx = 0.01
        sim.state.robot.bin = 40.0
        sim.state.battery.energy = 3.0
        sim.state.level_complete = True
        sim.click((1.0, 1.0))

        sim.reset()

        state = sim.state
        assert state.money == pytest.approx(70.0)
        assert state.upgrades.capacity == 1
        assert state.robot.bin_capacity == 275.0
        assert state.robot.position == (0.0, 0.0)
        assert state.robot.velocity == (0.0, 0.0)
        assert state.robot.bin == 0.0
        assert state.battery.energy == state.battery.energy_max
        assert not state.level_complete
        assert state.targeting.target is None
        assert state.dirt.total == sim.dirt_count

    def test_new_game_resets_preferences(self, sim):
        sim.toggle_preference('show_heatmap')

        sim.new_game()

        assert not sim.state.prefs.show_heatmap
        assert "New game started!" in sim.view().notices

    def test_unknown_preference(self, sim):
        with pytest.raises(ValueError):
            sim.set_preference('wallpaper', True)

    def test_overhang_preference_changes_bounds(self, sim):
        assert sim.bounds().right == pytest.approx(3.7)

        sim.set_preference('overhang', False)

        assert sim.bounds().right == 3.5

    def test_unknown_upgrade(self, sim):
        with pytest.raises(ValueError):
            sim.purchase('turbo')

    def test_next_costs(self, sim):
        costs = sim.next_costs()

        assert costs['capacity'] == 50
        assert costs['auto'] == 300


class TestLifecycle:
    """Tests for start-up and the read-only view."""

    def test_initialize_without_save_generates_field(self):
        sim = make_sim(dirt_count=300)

        assert not sim.initialize()
        assert sim.state.dirt.total == 300

    def test_initialize_regenerates_completed_level(self, sim):
        sim.state.level_complete = True
        sim.save()

        other = make_sim(store=sim.store, dirt_count=50)
        assert other.initialize()

        assert not other.state.level_complete
        assert other.state.dirt.total == 50

    def test_view_is_immutable(self, sim):
        view = sim.view()

        with pytest.raises(dataclasses.FrozenInstanceError):
            view.money = 10

    def test_notices_expire(self, sim):
        sim.charge()
        assert sim.view().notices == ("Battery charged",)

        for _ in range(40):
            sim.advance(80)

        assert sim.view().notices == ()


class TestInvariants:
    """Long AI runs keep the state inside its bounds."""

    def test_long_ai_run(self):
        sim = make_sim(dirt_count=400, seed=3)
        sim.regenerate()
        sim.state.money = 300.0
        sim.purchase('auto')
        sim.start_cleaning()

        rng = random.Random(99)
        last_clean = sim.state.dirt.clean_fraction()
        last_now = sim.state.now

        for _ in range(3000):
            result = sim.advance(rng.choice([8.0, 16.0, 33.0, 0.0, 150.0]))
            state = sim.state

            assert 0 <= state.robot.bin <= state.robot.bin_capacity
            assert 0 <= state.battery.energy <= state.battery.energy_max
            assert state.money >= 0
            assert state.dirt.clean_fraction() >= last_clean
            bounds = sim.bounds()
            assert bounds.contains(state.robot.position)
            if not result.applied:
                assert state.now == last_now
            last_clean = state.dirt.clean_fraction()
            last_now = state.now

        assert sim.state.dirt.clean_fraction() > 0
        assert sim.clock.faults == 0

    def test_depletion_stops_same_tick(self):
        """Cleaning turns off on the very tick energy hits zero."""
        sim = make_sim(ring_of_particles((0.0, 0.0), 30, 0.1))
        sim.start_cleaning()
        sim.state.battery.energy = 5.0

        sim.advance(16)

        assert sim.state.battery.energy == 0.0
        assert not sim.state.cleaning

    def test_bin_full_stops_same_tick(self):
        sim = make_sim(ring_of_particles((0.0, 0.0), 30, 0.1))
        sim.start_cleaning()
        sim.state.robot.bin = sim.state.robot.bin_capacity - 1.0

        sim.advance(16)

        assert sim.state.robot.bin == sim.state.robot.bin_capacity
        assert not sim.state.cleaning


class TestCamera:
    """Screen/plane projection used for floor clicks."""

    def test_projection_inverts(self):
        from ui.camera import Camera

        camera = Camera(viewport_width=900, viewport_height=800, scale=120)

        assert camera.world_to_screen((0.0, 0.0)) == (450, 400)
        x, y = camera.screen_to_world((570, 280))
        assert x == pytest.approx(1.0)
        assert y == pytest.approx(-1.0)

    def test_follow_moves_focus(self):
        from ui.camera import Camera

        camera = Camera()
        camera.follow((1.0, 0.0), smoothing=0.5)

        assert camera.focus == (0.5, 0.0)
        assert math.isclose(camera.screen_to_world(camera.world_to_screen((0.5, 0.0)))[0], 0.5)
