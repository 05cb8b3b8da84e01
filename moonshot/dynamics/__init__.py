"""World state, quaternion algebra and the reference physics plant.

Example:
    >>> from moonshot.dynamics import Command, WorldDynamics
    >>> from moonshot.simulation import earth_moon_scenario
    >>>
    >>> world = earth_moon_scenario()
    >>> dynamics = WorldDynamics()
    >>> world = dynamics.step(world, Command(thrust=1.0))
"""

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
    RocketState,
    WorldState,
)
from moonshot.dynamics.vectors import (
    is_degenerate,
    perpendicular,
    safe_unit_vector,
    unit_vector,
)

__all__ = [
    # State
    "BodyState",
    "Command",
    "FuelState",
    "RcsCommand",
    "RocketState",
    "WorldState",
    # Quaternions
    "IDENTITY_QUATERNION",
    "normalize_quaternion",
    "quaternion_conjugate",
    "quaternion_from_axis_angle",
    "quaternion_from_vectors",
    "quaternion_inverse",
    "quaternion_multiply",
    "quaternion_to_axis_angle",
    "quaternion_to_dcm",
    "rotate_vector",
    # Vectors
    "is_degenerate",
    "perpendicular",
    "safe_unit_vector",
    "unit_vector",
    # Plant
    "PhysicsConfig",
    "WorldDynamics",
    "consume_fuel",
    "integrate_rotation",
    "quaternion_derivative",
    "step_world",
]
