"""Unit tests for dynamics module - state, quaternions, gravitation, physics plant.

These tests verify the world model the guidance is flown against.
"""

import math
from dataclasses import replace

import numpy as np
import pytest
from numpy.testing import assert_allclose

from moonshot.dynamics.quaternion import (
    IDENTITY_QUATERNION,
    normalize_quaternion,
    quaternion_conjugate,
    quaternion_from_axis_angle,
    quaternion_from_vectors,
    quaternion_inverse,
    quaternion_multiply,
    quaternion_to_axis_angle,
    quaternion_to_dcm,
    rotate_vector,
)
from moonshot.dynamics.rigid_body import (
    PhysicsConfig,
    WorldDynamics,
    consume_fuel,
    integrate_rotation,
    quaternion_derivative,
    step_world,
)
from moonshot.dynamics.state import (
    BodyState,
    Command,
    FuelState,
    RcsCommand,
    WorldState,
)
from moonshot.dynamics.vectors import perpendicular, safe_unit_vector, unit_vector
from moonshot.environment.gravity import (
    GRAVITATION,
    Gravitation,
    gravitational_force,
)
from moonshot.errors import DegenerateGeometryError
from moonshot.simulation import earth_moon_scenario, rocket_only_world
from moonshot.vehicle import VehicleConfig

DT = 1.0 / 60.0

# =============================================================================
# Quaternion Tests
# =============================================================================


class TestQuaternionOperations:
    """Test quaternion math operations."""

    def test_normalize_unit_length(self):
        """Normalized quaternion should have unit length."""
        q = normalize_quaternion(np.array([1.0, 2.0, 3.0, 4.0]))
        assert_allclose(np.linalg.norm(q), 1.0, atol=1e-12)

    def test_normalize_zero_gives_identity(self):
        assert_allclose(normalize_quaternion(np.zeros(4)), IDENTITY_QUATERNION)

    def test_multiply_identity(self):
        """Multiplying by identity should give same quaternion."""
        q = normalize_quaternion(np.array([0.707, 0.707, 0.0, 0.0]))
        assert_allclose(quaternion_multiply(IDENTITY_QUATERNION, q), q, atol=1e-12)
        assert_allclose(quaternion_multiply(q, IDENTITY_QUATERNION), q, atol=1e-12)

    def test_conjugate_is_inverse_for_unit(self):
        """Quaternion times its conjugate should give identity."""
        q = normalize_quaternion(np.array([1.0, 2.0, 3.0, 4.0]))
        assert_allclose(quaternion_multiply(q, quaternion_conjugate(q)), IDENTITY_QUATERNION,
                        atol=1e-12)

    def test_inverse_of_scaled_quaternion(self):
        q = np.array([2.0, 0.0, 2.0, 0.0])
        assert_allclose(quaternion_multiply(q, quaternion_inverse(q)), IDENTITY_QUATERNION,
                        atol=1e-12)

    def test_inverse_of_zero_raises(self):
        with pytest.raises(ValueError):
            quaternion_inverse(np.zeros(4))

    def test_composition_order(self):
        """Rotating by q1 then q2 equals rotating by q2 * q1."""
        q1 = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), math.pi / 2)
        q2 = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), math.pi / 2)
        v = np.array([1.0, 0.0, 0.0])
        step_by_step = rotate_vector(rotate_vector(v, q1), q2)
        combined = rotate_vector(v, quaternion_multiply(q2, q1))
        assert_allclose(combined, step_by_step, atol=1e-12)
        assert_allclose(combined, [0.0, 0.0, 1.0], atol=1e-12)

    def test_dcm_matches_rotate(self):
        q = quaternion_from_axis_angle(np.array([1.0, 2.0, -1.0]), 0.9)
        v = np.array([0.5, -1.0, 2.0])
        assert_allclose(quaternion_to_dcm(q) @ v, rotate_vector(v, q), atol=1e-12)

    def test_dcm_orthonormal(self):
        """DCM should be orthonormal (R @ R.T = I, det(R) = 1)."""
        dcm = quaternion_to_dcm(normalize_quaternion(np.array([1.0, 2.0, 3.0, 4.0])))
        assert_allclose(dcm @ dcm.T, np.eye(3), atol=1e-12)
        assert_allclose(np.linalg.det(dcm), 1.0, atol=1e-12)


class TestAxisAngle:
    """Test axis-angle conversions."""

    def test_roundtrip(self):
        axis = unit_vector(np.array([1.0, -2.0, 0.5]))
        q = quaternion_from_axis_angle(axis, 1.3)
        axis2, angle2 = quaternion_to_axis_angle(q)
        assert_allclose(axis2, axis, atol=1e-12)
        assert_allclose(angle2, 1.3, atol=1e-12)

    def test_axis_need_not_be_unit(self):
        q1 = quaternion_from_axis_angle(np.array([0.0, 3.0, 0.0]), 0.4)
        q2 = quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), 0.4)
        assert_allclose(q1, q2, atol=1e-12)

    def test_zero_axis_is_identity(self):
        assert_allclose(quaternion_from_axis_angle(np.zeros(3), 1.0), IDENTITY_QUATERNION)

    def test_identity_has_zero_angle_and_axis(self):
        axis, angle = quaternion_to_axis_angle(IDENTITY_QUATERNION)
        assert angle == 0.0
        assert_allclose(axis, np.zeros(3))

    def test_tiny_angle_axis_fades_out(self):
        """Below the epsilon the axis is not rescaled to unit length."""
        q = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), 1e-4)
        axis, angle = quaternion_to_axis_angle(q)
        assert np.linalg.norm(axis) < 1e-3
        assert_allclose(angle, 1e-4, rtol=1e-3)


class TestQuaternionFromVectors:
    """Test shortest-arc rotations."""

    @pytest.mark.parametrize(
        "u, v",
        [
            ([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]),
            ([1.0, 2.0, 3.0], [-3.0, 0.5, 1.0]),
            ([0.0, 0.0, 5.0], [0.0, 0.1, 0.1]),
        ],
    )
    def test_maps_u_onto_v(self, u, v):
        u = np.array(u)
        v = np.array(v)
        q = quaternion_from_vectors(u, v)
        assert_allclose(rotate_vector(unit_vector(u), q), unit_vector(v), atol=1e-12)

    def test_parallel_is_identity(self):
        u = np.array([1.0, 1.0, 0.0])
        assert_allclose(quaternion_from_vectors(u, 2.0 * u), IDENTITY_QUATERNION, atol=1e-12)

    def test_antiparallel_half_turn(self):
        u = np.array([0.0, 0.0, 1.0])
        q = quaternion_from_vectors(u, -u)
        _, angle = quaternion_to_axis_angle(q)
        assert_allclose(angle, math.pi, atol=1e-9)
        assert_allclose(rotate_vector(u, q), -u, atol=1e-12)

    def test_zero_vector_raises(self):
        with pytest.raises(DegenerateGeometryError):
            quaternion_from_vectors(np.zeros(3), np.array([1.0, 0.0, 0.0]))


class TestVectors:
    """Test guarded vector helpers."""

    def test_unit_vector(self):
        assert_allclose(unit_vector(np.array([3.0, 0.0, 4.0])), [0.6, 0.0, 0.8])

    def test_unit_vector_zero_raises(self):
        with pytest.raises(DegenerateGeometryError):
            unit_vector(np.zeros(3))

    def test_degenerate_is_value_error(self):
        """Callers that only know ValueError still catch it."""
        with pytest.raises(ValueError):
            unit_vector(np.array([1e-15, 0.0, 0.0]))

    def test_safe_unit_vector_zero(self):
        assert_allclose(safe_unit_vector(np.zeros(3)), np.zeros(3))

    def test_unit_vector_does_not_modify_input(self):
        v = np.array([2.0, 0.0, 0.0])
        unit_vector(v)
        assert v[0] == 2.0

    @pytest.mark.parametrize("v", [[1.0, 0.0, 0.0], [0.3, -0.2, 5.0], [1.0, 1.0, 1.0]])
    def test_perpendicular(self, v):
        v = np.array(v)
        p = perpendicular(v)
        assert_allclose(np.linalg.norm(p), 1.0)
        assert_allclose(np.dot(p, v), 0.0, atol=1e-12)


# =============================================================================
# State Tests
# =============================================================================


class TestState:
    """Test snapshot construction and invariants."""

    def test_arrays_read_only(self):
        world = rocket_only_world()
        with pytest.raises(ValueError):
            world.rocket.position[0] = 1.0

    def test_input_arrays_copied(self):
        position = np.array([1.0, 2.0, 3.0])
        world = rocket_only_world(position=position)
        position[0] = 100.0
        assert world.rocket.position[0] == 1.0

    def test_rotation_normalized(self):
        world = rocket_only_world(rotation=np.array([2.0, 0.0, 0.0, 0.0]))
        assert_allclose(world.rocket.rotation, IDENTITY_QUATERNION)

    def test_bad_shape_raises(self):
        with pytest.raises(ValueError):
            rocket_only_world(position=np.zeros(2))

    def test_nonpositive_mass_raises(self):
        with pytest.raises(ValueError):
            rocket_only_world(mass=0.0)

    def test_nose_direction(self):
        q = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), math.pi / 2)
        world = rocket_only_world(rotation=q)
        assert_allclose(world.rocket.nose_direction, [0.0, 1.0, 0.0], atol=1e-12)

    def test_fuel(self):
        assert rocket_only_world().rocket.has_fuel
        assert not rocket_only_world(fuel_volume=0.0).rocket.has_fuel
        assert FuelState(mass=0.0, volume=0.0).empty

    def test_body_lookup(self):
        world = earth_moon_scenario()
        assert world.body("Moon").radius == 5.0
        assert world.has_body("Earth")
        assert not world.has_body("Mars")
        with pytest.raises(KeyError):
            world.body("Mars")

    def test_unique_body_names(self):
        earth = BodyState(name="Earth", mass=1.0, radius=1.0, position=np.zeros(3))
        with pytest.raises(ValueError):
            WorldState(rocket=rocket_only_world().rocket, bodies=(earth, earth))

    def test_body_altitude(self):
        earth = BodyState(name="Earth", mass=1.0, radius=20.0, position=np.zeros(3))
        assert_allclose(earth.altitude_of(np.array([0.0, 30.0, 0.0])), 10.0)


class TestCommand:
    """Test command construction."""

    def test_idle(self):
        command = Command.idle()
        assert command.thrust == 0.0
        assert command.rcs == RcsCommand()

    @pytest.mark.parametrize("thrust, expected", [(1.5, 1.0), (-0.3, 0.0), (0.4, 0.4)])
    def test_thrust_clamped(self, thrust, expected):
        assert Command(thrust=thrust).thrust == expected

    def test_non_finite_thrust_raises(self):
        with pytest.raises(ValueError):
            Command(thrust=math.nan)

    def test_rcs_not_clamped(self):
        rcs = RcsCommand(roll=3.0, pitch=-2.0, yaw=0.1)
        assert_allclose(rcs.as_array(), [3.0, -2.0, 0.1])


class TestVehicleConfig:
    def test_defaults(self):
        vehicle = VehicleConfig()
        assert vehicle.half_length == 2.0
        assert_allclose(vehicle.fuel_per_step, 1.5 / 60.0)
        assert_allclose(vehicle.max_acceleration(10.0), 10.0)

    @pytest.mark.parametrize("field", ["max_thrust", "time_step", "rcs_thrust_ratio", "length"])
    def test_nonpositive_raises(self, field):
        with pytest.raises(ValueError):
            VehicleConfig(**{field: 0.0})


# =============================================================================
# Gravitation Tests
# =============================================================================


class TestGravitation:
    """Test the power-law gravitation model."""

    def test_force_law(self):
        assert_allclose(gravitational_force(2.0, 3.0, 16.0), GRAVITATION * 6.0 / 32.0)

    def test_pairwise_forces_opposite(self):
        positions = np.array([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
        masses = np.array([1e12, 5e11])
        forces = Gravitation().forces(positions, masses)
        assert_allclose(forces[0], -forces[1])
        assert forces[0, 0] > 0  # attracted toward the other body
        assert_allclose(forces[0, 0], gravitational_force(1e12, 5e11, 10.0))

    def test_net_force_sums_to_zero(self):
        rng = np.random.default_rng(3)
        positions = rng.normal(size=(5, 3)) * 100.0
        masses = rng.uniform(1e10, 1e12, size=5)
        forces = Gravitation().forces(positions, masses)
        assert_allclose(forces.sum(axis=0), np.zeros(3), atol=1e-6 * np.abs(forces).max())

    def test_coincident_bodies_no_force(self):
        positions = np.zeros((2, 3))
        forces = Gravitation().forces(positions, np.array([1.0, 1.0]))
        assert_allclose(forces, np.zeros((2, 3)))

    def test_acceleration_matches_force(self):
        grav = Gravitation()
        a = grav.acceleration(np.array([0.0, 30.0, 0.0]), np.zeros(3), 5.9e12)
        assert_allclose(a, [0.0, -GRAVITATION * 5.9e12 / 30.0**1.25, 0.0])

    def test_potential_gradient(self):
        """-dPhi/dr equals the attraction per unit mass."""
        grav = Gravitation()
        r, h, mass = 50.0, 1e-3, 5.9e12
        slope = (grav.potential(r + h, mass) - grav.potential(r - h, mass)) / (2 * h)
        assert_allclose(slope, GRAVITATION * mass / r**1.25, rtol=1e-6)

    def test_bad_shapes_raise(self):
        with pytest.raises(ValueError):
            Gravitation().forces(np.zeros((2, 2)), np.ones(2))
        with pytest.raises(ValueError):
            Gravitation().forces(np.zeros((2, 3)), np.ones(3))


# =============================================================================
# Physics Plant Tests
# =============================================================================


class TestKinematics:
    """Test attitude and fuel helpers."""

    def test_quaternion_derivative_identity(self):
        dq = quaternion_derivative(IDENTITY_QUATERNION, np.array([0.0, 0.0, 2.0]))
        assert_allclose(dq, [0.0, 0.0, 0.0, 1.0])

    def test_integrate_rotation_world_frame(self):
        """Spinning about world z for 1 s turns the nose ~1 rad in the x-y plane."""
        q = IDENTITY_QUATERNION.copy()
        omega = np.array([0.0, 0.0, 1.0])
        for _ in range(60):
            q = integrate_rotation(q, omega, DT)
        nose = quaternion_to_dcm(q)[:, 0]
        assert_allclose(nose, [math.cos(1.0), math.sin(1.0), 0.0], atol=1e-2)
        assert_allclose(np.linalg.norm(q), 1.0, atol=1e-12)

    def test_consume_fuel_linear_in_thrust(self):
        fuel = FuelState(mass=1.0, volume=10.0)
        half = consume_fuel(fuel, 0.5, 0.2)
        assert_allclose(half.volume, 9.9)
        assert_allclose(half.mass, 0.99)

    def test_consume_fuel_never_negative(self):
        fuel = consume_fuel(FuelState(mass=1.0, volume=0.01), 1.0, 0.5)
        assert fuel.volume == 0.0
        assert fuel.mass == 0.0

    def test_no_thrust_no_consumption(self):
        fuel = FuelState(mass=1.0, volume=10.0)
        assert consume_fuel(fuel, 0.0, 0.2) is fuel


class TestWorldDynamics:
    """Test one physics step."""

    def test_thrust_along_nose(self):
        """Full thrust from rest accelerates at max_thrust / mass."""
        world = rocket_only_world()
        new = step_world(world, Command(thrust=1.0))
        assert_allclose(new.rocket.velocity, [10.0 * DT, 0.0, 0.0])
        # Semi-implicit Euler: position uses the new velocity
        assert_allclose(new.rocket.position, [10.0 * DT * DT, 0.0, 0.0])

    def test_thrust_follows_attitude(self):
        q = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), math.pi / 2)
        new = step_world(rocket_only_world(rotation=q), Command(thrust=0.5))
        assert_allclose(new.rocket.velocity, [0.0, 5.0 * DT, 0.0], atol=1e-12)

    def test_fuel_drawn_with_thrust(self):
        new = step_world(rocket_only_world(), Command(thrust=1.0))
        assert_allclose(new.rocket.fuel.volume, 95.0 - 1.5 * DT)

    def test_no_fuel_no_actuators(self):
        world = rocket_only_world(fuel_volume=0.0)
        command = Command(thrust=1.0, rcs=RcsCommand(roll=1.0))
        new = step_world(world, command)
        assert_allclose(new.rocket.velocity, np.zeros(3))
        assert_allclose(new.rocket.angular_velocity, np.zeros(3))

    def test_rcs_increments_angular_velocity(self):
        command = Command(rcs=RcsCommand(roll=1.0, pitch=-0.5, yaw=0.0))
        new = step_world(rocket_only_world(), command)
        assert_allclose(new.rocket.angular_velocity, [0.05, -0.025, 0.0])

    def test_rcs_clamped(self):
        command = Command(rcs=RcsCommand(roll=5.0, pitch=-5.0))
        new = step_world(rocket_only_world(), command)
        assert_allclose(new.rocket.angular_velocity, [0.05, -0.05, 0.0])

    def test_rcs_does_not_burn_fuel(self):
        command = Command(rcs=RcsCommand(yaw=1.0))
        new = step_world(rocket_only_world(), command)
        assert new.rocket.fuel.volume == 95.0

    def test_input_world_untouched(self):
        world = earth_moon_scenario()
        step_world(world, Command(thrust=1.0))
        assert_allclose(world.rocket.velocity, np.zeros(3))
        assert_allclose(world.body("Moon").position, [0.0, 300.0, 0.0])

    def test_momentum_conserved(self):
        """Without thrust or contact the total momentum is unchanged."""
        world = earth_moon_scenario()
        world = replace(world, rocket=replace(world.rocket, position=np.array([100.0, 0.0, 0.0])))

        def momentum(w):
            total = w.rocket.mass * w.rocket.velocity
            for body in w.bodies:
                total = total + body.mass * body.velocity
            return total

        dynamics = WorldDynamics()
        new = world
        for _ in range(10):
            new = dynamics.step(new)
        scale = world.body("Moon").mass * 10.0
        assert_allclose(momentum(new), momentum(world), atol=1e-9 * scale)

    def test_rocket_rests_on_surface(self):
        """Idle on the launch pad the rocket neither sinks nor explodes."""
        world = earth_moon_scenario()
        dynamics = WorldDynamics()
        for _ in range(30):
            world = dynamics.step(world)
        earth = world.body("Earth")
        assert_allclose(earth.distance_to(world.rocket.position), 22.0, rtol=1e-9)
        assert_allclose(world.rocket.velocity, earth.velocity)
        assert not world.rocket.exploded

    def test_full_thrust_lifts_off(self):
        world = earth_moon_scenario()
        dynamics = WorldDynamics()
        for _ in range(60):
            world = dynamics.step(world, Command(thrust=1.0))
        assert world.body("Earth").altitude_of(world.rocket.position) > 2.4

    def test_hard_impact_explodes(self):
        body = BodyState(name="Rock", mass=1.0, radius=5.0, position=np.zeros(3))
        world = rocket_only_world(
            position=np.array([7.05, 0.0, 0.0]),
            velocity=np.array([-10.0, 0.0, 0.0]),
            bodies=(body,),
        )
        config = PhysicsConfig(gravitation=0.0)
        new = step_world(world, config=config)
        assert new.rocket.exploded
        assert_allclose(np.linalg.norm(new.rocket.position), 7.0)
        # Stays exploded
        assert step_world(new, config=config).rocket.exploded

    def test_soft_touchdown_survives(self):
        body = BodyState(name="Rock", mass=1.0, radius=5.0, position=np.zeros(3))
        world = rocket_only_world(
            position=np.array([7.01, 0.0, 0.0]),
            velocity=np.array([-2.0, 0.0, 0.0]),
            bodies=(body,),
        )
        new = step_world(world, config=PhysicsConfig(gravitation=0.0))
        assert not new.rocket.exploded
        assert_allclose(new.rocket.velocity, np.zeros(3))

    def test_contact_disabled(self):
        body = BodyState(name="Rock", mass=1.0, radius=5.0, position=np.zeros(3))
        world = rocket_only_world(position=np.array([6.0, 0.0, 0.0]), bodies=(body,))
        new = step_world(world, config=PhysicsConfig(gravitation=0.0, contact=False))
        assert_allclose(new.rocket.position, [6.0, 0.0, 0.0])

    def test_exploded_rocket_ignores_commands(self):
        world = rocket_only_world()
        world = replace(world, rocket=replace(world.rocket, exploded=True))
        new = step_world(world, Command(thrust=1.0, rcs=RcsCommand(roll=1.0)))
        assert_allclose(new.rocket.velocity, np.zeros(3))
        assert new.rocket.fuel.volume == 95.0
