"""Unit tests for the orient-then-burn velocity controller."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from moonshot.dynamics import WorldDynamics
from moonshot.gnc.control import TargetMode, VelocityController
from moonshot.simulation import rocket_only_world
from moonshot.vehicle import VehicleConfig


class TestThrustToCancel:
    """Feed-forward thrust level."""

    def test_partial_thrust(self):
        """0.1 of velocity on a mass-10 rocket needs 60% of 100 thrust for 1/60 s."""
        ctrl = VelocityController()
        assert_allclose(ctrl.thrust_to_cancel(0.1, 10.0), 0.6)

    def test_saturates_at_full_thrust(self):
        assert VelocityController().thrust_to_cancel(5.0, 10.0) == 1.0

    def test_uses_vehicle_constants(self):
        ctrl = VelocityController(vehicle=VehicleConfig(max_thrust=200.0))
        assert_allclose(ctrl.thrust_to_cancel(0.1, 10.0), 0.3)


class TestVelocityController:
    """Single-tick behavior."""

    def test_no_target_no_thrust(self):
        ctrl = VelocityController()
        command = ctrl.update(rocket_only_world().rocket)
        assert command.thrust == 0.0
        assert ctrl.rotation.mode is TargetMode.NONE

    def test_misaligned_turns_without_burning(self):
        """Target velocity off the nose: attitude first, no thrust."""
        ctrl = VelocityController()
        ctrl.set_target(np.array([0.0, 5.0, 0.0]))
        command = ctrl.update(rocket_only_world().rocket)
        assert command.thrust == 0.0
        assert ctrl.rotation.mode is TargetMode.ORIENTATION
        assert_allclose(ctrl.rotation.target_direction, [0.0, 1.0, 0.0])
        assert command.rcs.yaw != 0.0

    def test_aligned_burns(self):
        ctrl = VelocityController()
        ctrl.set_target(np.array([0.1, 0.0, 0.0]))
        command = ctrl.update(rocket_only_world().rocket)
        assert_allclose(command.thrust, 0.6)

    def test_small_error_coasts(self):
        """Errors below the speed tolerance give no thrust."""
        ctrl = VelocityController()
        world = rocket_only_world(velocity=np.array([1.0, 0.0, 0.0]))
        ctrl.set_target(np.array([1.0, 0.01, 0.0]))
        command = ctrl.update(world.rocket)
        assert command.thrust == 0.0

    def test_clearing_target_releases_rotation(self):
        ctrl = VelocityController()
        ctrl.set_target(np.array([0.0, 5.0, 0.0]))
        ctrl.update(rocket_only_world().rocket)
        ctrl.set_target(None)
        assert ctrl.target is None
        assert ctrl.rotation.mode is TargetMode.NONE

    def test_target_copied(self):
        ctrl = VelocityController()
        target = np.array([1.0, 2.0, 3.0])
        ctrl.set_target(target)
        target[0] = 50.0
        assert ctrl.target[0] == 1.0

    def test_bad_shape_raises(self):
        with pytest.raises(ValueError):
            VelocityController().set_target(np.zeros(4))

    @pytest.mark.parametrize(
        "kwargs",
        [{"speed_tolerance": 0.0}, {"alignment_tolerance": -1.0}],
    )
    def test_invalid_tolerances(self, kwargs):
        with pytest.raises(ValueError):
            VelocityController(**kwargs)


class TestClosedLoop:
    """Fly the controller against the plant without gravity."""

    @pytest.mark.parametrize(
        "target",
        [[3.0, 0.0, 0.0], [0.0, 3.0, 0.0], [-1.0, 2.0, -2.0]],
    )
    def test_reaches_target_velocity(self, target):
        target = np.array(target)
        ctrl = VelocityController()
        ctrl.set_target(target)
        dynamics = WorldDynamics()
        world = rocket_only_world()
        for _ in range(900):
            world = dynamics.step(world, ctrl.update(world.rocket))
        assert np.linalg.norm(world.rocket.velocity - target) < 0.05

    def test_burns_fuel_only_while_correcting(self):
        ctrl = VelocityController()
        ctrl.set_target(np.array([2.0, 0.0, 0.0]))
        dynamics = WorldDynamics()
        world = rocket_only_world()
        for _ in range(120):
            world = dynamics.step(world, ctrl.update(world.rocket))
        fuel_after_burn = world.rocket.fuel.volume
        for _ in range(120):
            world = dynamics.step(world, ctrl.update(world.rocket))
        assert fuel_after_burn < 95.0
        assert world.rocket.fuel.volume == fuel_after_burn
