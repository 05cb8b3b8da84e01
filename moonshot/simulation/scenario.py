"""Initial world snapshots.

Example:
    >>> from moonshot.simulation import earth_moon_scenario
    >>>
    >>> world = earth_moon_scenario()
    >>> world.body("Moon").radius
    5.0
"""

import math

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.state import BodyState, FuelState, RocketState, WorldState
from moonshot.environment.gravity import GRAVITATION, GRAVITATION_FALLOFF
from moonshot.vehicle import VehicleConfig

# Reference scenario values
EARTH_MASS = 5.9e12
EARTH_RADIUS = 20.0
MOON_MASS = 7.3e11
MOON_RADIUS = 5.0
ROCKET_MASS = 10.0
FUEL_MASS = 0.000005
FUEL_VOLUME = 95.0


@beartype
def rocket_only_world(
    mass: float = ROCKET_MASS,
    position: NDArray[np.float64] | None = None,
    velocity: NDArray[np.float64] | None = None,
    rotation: NDArray[np.float64] | None = None,
    angular_velocity: NDArray[np.float64] | None = None,
    fuel_volume: float = FUEL_VOLUME,
    bodies: tuple[BodyState, ...] = (),
) -> WorldState:
    """A rocket, optionally with some bodies, for controller experiments.

    Unspecified vectors are zero and the attitude is the identity (nose +x).
    """
    rocket = RocketState(
        mass=mass,
        position=np.zeros(3) if position is None else position,
        rotation=np.array([1.0, 0.0, 0.0, 0.0]) if rotation is None else rotation,
        velocity=np.zeros(3) if velocity is None else velocity,
        angular_velocity=np.zeros(3) if angular_velocity is None else angular_velocity,
        fuel=FuelState(mass=FUEL_MASS, volume=fuel_volume),
    )
    return WorldState(rocket=rocket, bodies=bodies)


@beartype
def earth_moon_scenario(vehicle: VehicleConfig | None = None) -> WorldState:
    """Reference mission scenario.

    The rocket rests on the Earth's surface at +x, nose up. The Moon is 300
    units out on +y moving at 10 in -x, close to a circular orbit. Three far
    away planets complete the system.
    """
    vehicle = vehicle or VehicleConfig()
    bodies = (
        BodyState(name="Earth", mass=EARTH_MASS, radius=EARTH_RADIUS,
                  position=np.zeros(3)),
        BodyState(name="Moon", mass=MOON_MASS, radius=MOON_RADIUS,
                  position=np.array([0.0, 300.0, 0.0]),
                  velocity=np.array([-10.0, 0.0, 0.0])),
        BodyState(name="Halimaa", mass=7.3e11, radius=80.0,
                  position=np.array([1500.0, 800.0, 0.0]),
                  velocity=np.array([-2.0, 0.0, 0.0])),
        BodyState(name="Volcano", mass=7.3e11, radius=80.0,
                  position=np.array([1500.0, 500.0, 800.0]),
                  velocity=np.array([-15.0, 0.0, 0.0])),
        BodyState(name="Ice", mass=7.3e11, radius=80.0,
                  position=np.array([-1900.0, 1500.0, 400.0]),
                  velocity=np.array([-15.0, 0.0, 0.0])),
    )
    return rocket_only_world(
        position=np.array([EARTH_RADIUS + vehicle.half_length, 0.0, 0.0]),
        bodies=bodies,
    )


@beartype
def circular_orbit_speed(
    primary_mass: float,
    radius: float,
    gravitation: float = GRAVITATION,
    falloff: float = GRAVITATION_FALLOFF,
) -> float:
    """Speed of a circular orbit of ``radius`` under the power-law gravitation."""
    acceleration = gravitation * primary_mass / radius**falloff
    return math.sqrt(acceleration * radius)


@beartype
def satellite_scenario(
    radius: float = 100.0,
    primary_mass: float = EARTH_MASS,
    satellite_mass: float = 1.0,
) -> WorldState:
    """A light satellite on a circular orbit around a fixed-ish primary.

    The satellite orbits in the x-y plane starting at +x. The rocket is parked
    far below the orbital plane so it barely disturbs either body.
    """
    speed = circular_orbit_speed(primary_mass, radius)
    bodies = (
        BodyState(name="Earth", mass=primary_mass, radius=EARTH_RADIUS,
                  position=np.zeros(3)),
        BodyState(name="Satellite", mass=satellite_mass, radius=1.0,
                  position=np.array([radius, 0.0, 0.0]),
                  velocity=np.array([0.0, speed, 0.0])),
    )
    return rocket_only_world(
        mass=1e-6,
        position=np.array([0.0, 0.0, -1e5]),
        bodies=bodies,
    )
