"""Reference physics plant.

Advances a :class:`~moonshot.dynamics.state.WorldState` by one time step under
a :class:`~moonshot.dynamics.state.Command`. Guidance never calls into this
module; it exists so guidance can be flown closed-loop in tests, scripts and
the simulator.

Model:
- Point-mass power-law gravitation between every pair of bodies, including
  the rocket
- Engine force ``max_thrust * thrust`` along the rocket's nose
- RCS acts directly on angular velocity in the world-aligned frame:
  ``omega += rcs_thrust_ratio * clamp(rcs, -1, 1)`` per step
- Engine and RCS only work while fuel remains; fuel volume drops linearly
  with thrust level
- Semi-implicit Euler for translation, first-order quaternion integration
  with world-frame angular velocity
- The rocket cannot sink into a body: on contact it is placed on the surface
  and moves with the body. A velocity change of at least
  ``explosion_threshold`` within one step destroys the rocket.

Example:
    >>> from moonshot.dynamics import WorldDynamics
    >>> from moonshot.simulation import earth_moon_scenario
    >>>
    >>> dynamics = WorldDynamics()
    >>> world = earth_moon_scenario()
    >>> world = dynamics.step(world, Command(thrust=1.0))
"""

from dataclasses import dataclass, replace

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.quaternion import normalize_quaternion, quaternion_multiply
from moonshot.dynamics.state import (
    BodyState,
    Command,
    FuelState,
    WorldState,
)
from moonshot.dynamics.vectors import ZERO_NORM
from moonshot.environment.gravity import GRAVITATION, GRAVITATION_FALLOFF, Gravitation
from moonshot.vehicle import VehicleConfig

# =============================================================================
# Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class PhysicsConfig:
    """Configuration for the physics plant.

    Attributes:
        gravitation: Gravitational constant
        falloff: Distance exponent of the gravitation law
        explosion_threshold: Velocity change within one step that destroys the rocket
        contact: Whether the rocket collides with body surfaces
    """
    gravitation: float = GRAVITATION
    falloff: float = GRAVITATION_FALLOFF
    explosion_threshold: float = 5.0
    contact: bool = True

    def create_gravitation(self) -> Gravitation:
        """Create gravitation model from config."""
        return Gravitation(gravitation=self.gravitation, falloff=self.falloff)


# =============================================================================
# Kinematics
# =============================================================================


@beartype
def quaternion_derivative(
    q: NDArray[np.float64],
    omega: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Quaternion time derivative for a world-frame angular velocity.

    dq/dt = 0.5 * [0, omega] * q

    Args:
        q: Current quaternion [w, x, y, z]
        omega: Angular velocity in the world-aligned frame [rad/s]
    """
    omega_quat = np.array([0.0, omega[0], omega[1], omega[2]])
    return 0.5 * quaternion_multiply(omega_quat, q)


@beartype
def integrate_rotation(
    q: NDArray[np.float64],
    omega: NDArray[np.float64],
    dt: float,
) -> NDArray[np.float64]:
    """Advance a quaternion by one step of world-frame angular velocity."""
    return normalize_quaternion(q + dt * quaternion_derivative(q, omega))


@beartype
def consume_fuel(fuel: FuelState, thrust: float, fuel_per_step: float) -> FuelState:
    """Fuel left after one step at ``thrust`` level.

    Propellant mass drops in proportion to the volume burned.
    """
    if thrust <= 0.0 or fuel.empty:
        return fuel
    burned = fuel_per_step * thrust
    volume = max(0.0, fuel.volume - burned)
    mass = max(0.0, fuel.mass * volume / fuel.volume)
    return FuelState(mass=mass, volume=volume)


# =============================================================================
# World Dynamics
# =============================================================================


@beartype
class WorldDynamics:
    """Steps a world snapshot forward in time.

    Example:
        >>> dynamics = WorldDynamics(VehicleConfig(max_thrust=150.0))
        >>> next_world = dynamics.step(world, command)
    """

    def __init__(
        self,
        vehicle: VehicleConfig | None = None,
        config: PhysicsConfig | None = None,
    ) -> None:
        """Initialize the plant.

        Args:
            vehicle: Actuator and timing constants
            config: Physics configuration
        """
        self.vehicle = vehicle or VehicleConfig()
        self.config = config or PhysicsConfig()
        self.gravitation = self.config.create_gravitation()

    @property
    def time_step(self) -> float:
        return self.vehicle.time_step

    def step(self, world: WorldState, command: Command | None = None) -> WorldState:
        """Advance ``world`` by one time step.

        Args:
            world: Current snapshot
            command: Actuator command; ``None`` means idle

        Returns:
            Snapshot one time step later
        """
        command = command or Command.idle()
        dt = self.vehicle.time_step
        rocket = world.rocket
        bodies = world.bodies

        positions = np.vstack([rocket.position] + [b.position for b in bodies])
        masses = np.array([rocket.mass] + [b.mass for b in bodies], dtype=np.float64)
        forces = self.gravitation.forces(positions, masses)

        # Actuators only work while fuel remains and the rocket is intact
        active = rocket.has_fuel and not rocket.exploded
        thrust = command.thrust if active else 0.0

        rocket_force = forces[0] + rocket.nose_direction * (self.vehicle.max_thrust * thrust)
        angular_velocity = rocket.angular_velocity.copy()
        if active:
            rcs = np.clip(command.rcs.as_array(), -1.0, 1.0)
            angular_velocity += rcs * self.vehicle.rcs_thrust_ratio

        velocity = rocket.velocity + rocket_force / rocket.mass * dt
        position = rocket.position + velocity * dt
        rotation = integrate_rotation(rocket.rotation, angular_velocity, dt)

        new_bodies = tuple(
            self._step_body(body, forces[i + 1], dt) for i, body in enumerate(bodies)
        )

        if self.config.contact:
            position, velocity = self._resolve_contact(position, velocity, new_bodies)

        velocity_change = float(np.linalg.norm(velocity - rocket.velocity))
        exploded = rocket.exploded or velocity_change >= self.config.explosion_threshold

        new_rocket = replace(
            rocket,
            position=position,
            velocity=velocity,
            rotation=rotation,
            angular_velocity=angular_velocity,
            fuel=consume_fuel(rocket.fuel, thrust, self.vehicle.fuel_per_step),
            exploded=exploded,
        )
        return WorldState(rocket=new_rocket, bodies=new_bodies)

    def _step_body(self, body: BodyState, force: NDArray[np.float64], dt: float) -> BodyState:
        """Advance one celestial body under gravitation only."""
        velocity = body.velocity + force / body.mass * dt
        return replace(
            body,
            position=body.position + velocity * dt,
            velocity=velocity,
            rotation=integrate_rotation(body.rotation, body.angular_velocity, dt),
        )

    def _resolve_contact(
        self,
        position: NDArray[np.float64],
        velocity: NDArray[np.float64],
        bodies: tuple[BodyState, ...],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Keep the rocket outside every body; a touching rocket rides along."""
        for body in bodies:
            contact_distance = body.radius + self.vehicle.half_length
            offset = position - body.position
            distance = float(np.linalg.norm(offset))
            if distance >= contact_distance:
                continue
            if distance < ZERO_NORM:
                normal = np.array([1.0, 0.0, 0.0])
            else:
                normal = offset / distance
            position = body.position + normal * contact_distance
            velocity = body.velocity.copy()
        return position, velocity


@beartype
def step_world(
    world: WorldState,
    command: Command | None = None,
    vehicle: VehicleConfig | None = None,
    config: PhysicsConfig | None = None,
) -> WorldState:
    """Advance ``world`` by one step with a throwaway :class:`WorldDynamics`."""
    return WorldDynamics(vehicle, config).step(world, command)
