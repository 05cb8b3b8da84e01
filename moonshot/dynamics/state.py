"""World snapshots and actuator commands.

A snapshot describes the rocket and every celestial body at one instant:

- Positions and velocities are in the world (inertial) frame
- Rotations are unit quaternions [w, x, y, z] taking body -> world
- Angular velocity is expressed in the non-rotating, world-aligned frame
  attached to the body (not in the rotating body frame)

Body frame of the rocket: +x is the nose (thrust axis / roll axis), +y the
pitch axis, +z the yaw axis.

Snapshots are frozen: every array is copied and made read-only on
construction, so guidance code can hold on to a snapshot for the duration of
an update without it changing underneath. Use ``dataclasses.replace`` to
derive a modified snapshot.
"""

import math
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.quaternion import normalize_quaternion, quaternion_to_dcm

# =============================================================================
# Helpers
# =============================================================================


def _frozen_array(value: NDArray[np.float64], name: str, size: int) -> NDArray[np.float64]:
    """Copy ``value`` into a read-only float array of shape (size,)."""
    arr = np.array(value, dtype=np.float64)
    if arr.shape != (size,):
        raise ValueError(f"{name} must be shape ({size},), got {arr.shape}")
    arr.flags.writeable = False
    return arr


def _zeros() -> NDArray[np.float64]:
    return np.zeros(3)


def _identity() -> NDArray[np.float64]:
    return np.array([1.0, 0.0, 0.0, 0.0])


# =============================================================================
# Snapshots
# =============================================================================


@beartype
@dataclass(frozen=True)
class FuelState:
    """Remaining propellant.

    Attributes:
        mass: Propellant mass
        volume: Propellant volume (what the engine burns)
    """
    mass: float
    volume: float

    @property
    def empty(self) -> bool:
        return self.volume <= 0.0


@beartype
@dataclass(frozen=True, eq=False)
class RocketState:
    """Snapshot of the rocket.

    Attributes:
        mass: Vehicle mass
        position: World position
        rotation: Attitude quaternion [w, x, y, z] (body -> world)
        velocity: World velocity
        angular_velocity: Angular velocity in the world-aligned frame [rad/s]
        fuel: Remaining propellant
        exploded: Whether the vehicle has been destroyed
    """
    mass: float
    position: NDArray[np.float64]
    rotation: NDArray[np.float64]
    velocity: NDArray[np.float64]
    angular_velocity: NDArray[np.float64]
    fuel: FuelState
    exploded: bool = False

    def __post_init__(self) -> None:
        """Validate and freeze state."""
        if self.mass <= 0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        object.__setattr__(self, "position", _frozen_array(self.position, "position", 3))
        object.__setattr__(self, "velocity", _frozen_array(self.velocity, "velocity", 3))
        object.__setattr__(
            self, "angular_velocity",
            _frozen_array(self.angular_velocity, "angular_velocity", 3),
        )
        rotation = _frozen_array(self.rotation, "rotation", 4)
        rotation = normalize_quaternion(rotation)
        rotation.flags.writeable = False
        object.__setattr__(self, "rotation", rotation)

    @property
    def speed(self) -> float:
        """Speed magnitude."""
        return float(np.linalg.norm(self.velocity))

    @property
    def nose_direction(self) -> NDArray[np.float64]:
        """Unit vector along the nose (thrust axis) in the world frame."""
        return quaternion_to_dcm(self.rotation)[:, 0]

    @property
    def has_fuel(self) -> bool:
        return not self.fuel.empty


@beartype
@dataclass(frozen=True, eq=False)
class BodyState:
    """Snapshot of a celestial body (planet or moon).

    Attributes:
        name: Unique body name
        mass: Body mass
        radius: Surface radius
        position: World position of the center
        velocity: World velocity
        rotation: Attitude quaternion [w, x, y, z]
        angular_velocity: Angular velocity in the world frame [rad/s]
    """
    name: str
    mass: float
    radius: float
    position: NDArray[np.float64]
    velocity: NDArray[np.float64] = field(default_factory=_zeros)
    rotation: NDArray[np.float64] = field(default_factory=_identity)
    angular_velocity: NDArray[np.float64] = field(default_factory=_zeros)

    def __post_init__(self) -> None:
        """Validate and freeze state."""
        if self.mass <= 0:
            raise ValueError(f"mass of {self.name} must be positive, got {self.mass}")
        if self.radius < 0:
            raise ValueError(f"radius of {self.name} must be non-negative, got {self.radius}")
        object.__setattr__(self, "position", _frozen_array(self.position, "position", 3))
        object.__setattr__(self, "velocity", _frozen_array(self.velocity, "velocity", 3))
        object.__setattr__(self, "rotation", _frozen_array(self.rotation, "rotation", 4))
        object.__setattr__(
            self, "angular_velocity",
            _frozen_array(self.angular_velocity, "angular_velocity", 3),
        )

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @beartype
    def distance_to(self, point: NDArray[np.float64]) -> float:
        """Distance from the body's center to ``point``."""
        return float(np.linalg.norm(point - self.position))

    @beartype
    def altitude_of(self, point: NDArray[np.float64]) -> float:
        """Distance from the body's surface to ``point`` (negative inside)."""
        return self.distance_to(point) - self.radius


@beartype
@dataclass(frozen=True, eq=False)
class WorldState:
    """Snapshot of the whole simulated world.

    Attributes:
        rocket: The guided vehicle
        bodies: Celestial bodies, unique by name
    """
    rocket: RocketState
    bodies: tuple[BodyState, ...] = ()

    def __post_init__(self) -> None:
        """Validate body names."""
        names = [b.name for b in self.bodies]
        if len(set(names)) != len(names):
            raise ValueError(f"body names must be unique, got {names}")

    @property
    def body_names(self) -> list[str]:
        return [b.name for b in self.bodies]

    @beartype
    def body(self, name: str) -> BodyState:
        """Look up a body by name.

        Raises:
            KeyError: If no body has that name
        """
        for b in self.bodies:
            if b.name == name:
                return b
        raise KeyError(f"no body named {name!r} (known: {self.body_names})")

    @beartype
    def has_body(self, name: str) -> bool:
        return any(b.name == name for b in self.bodies)


# =============================================================================
# Commands
# =============================================================================


@beartype
@dataclass(frozen=True)
class RcsCommand:
    """Reaction control command.

    Each value is torque-proportional about the world-aligned axis of the
    same name (roll: x, pitch: y, yaw: z). Typically in [-1, 1]; the plant
    clamps.
    """
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    def as_array(self) -> NDArray[np.float64]:
        """Values ordered as world axes [x, y, z]."""
        return np.array([self.roll, self.pitch, self.yaw])


@beartype
@dataclass(frozen=True)
class Command:
    """Actuator command handed to the physics plant.

    Attributes:
        thrust: Main engine level, clamped to [0, 1]
        rcs: Reaction control command
    """
    thrust: float = 0.0
    rcs: RcsCommand = field(default_factory=RcsCommand)

    def __post_init__(self) -> None:
        """Clamp thrust."""
        if not math.isfinite(self.thrust):
            raise ValueError(f"thrust must be finite, got {self.thrust}")
        object.__setattr__(self, "thrust", float(min(max(self.thrust, 0.0), 1.0)))

    @classmethod
    def idle(cls) -> "Command":
        """Zero thrust, zero RCS."""
        return cls()
