"""Circular-motion trajectory prediction.

Extrapolates a body's future position assuming it moves on a circle around a
primary body at its current angular velocity:

    omega = (r x v) / |r|^2
    r(t) = rotate(r, omega_hat, |omega| * t)

with r and v relative to the primary. This is a planning hint only: real
orbits are not circular and the primary moves, so accuracy degrades with the
prediction horizon.

Example:
    >>> from moonshot.gnc.guidance import CircularOrbit
    >>>
    >>> orbit = CircularOrbit.from_bodies(world.body("Moon"), world.body("Earth"))
    >>> orbit.position_at(30.0)
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.quaternion import quaternion_from_axis_angle, rotate_vector
from moonshot.dynamics.state import BodyState, WorldState
from moonshot.dynamics.vectors import ZERO_NORM


@beartype
def orbital_angular_velocity(
    relative_position: NDArray[np.float64],
    relative_velocity: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Angular velocity of instantaneous circular motion, r x v / |r|^2.

    Returns the zero vector when ``relative_position`` is zero.
    """
    r_sq = float(np.dot(relative_position, relative_position))
    if r_sq < ZERO_NORM**2:
        return np.zeros(3)
    return np.cross(relative_position, relative_velocity) / r_sq


@beartype
def circular_motion(
    relative_position: NDArray[np.float64],
    angular_velocity: NDArray[np.float64],
    t: float,
) -> NDArray[np.float64]:
    """Rotate ``relative_position`` about ``angular_velocity`` for time ``t``.

    A zero angular velocity leaves the position unchanged.
    """
    rate = float(np.linalg.norm(angular_velocity))
    if rate < ZERO_NORM:
        return np.array(relative_position, dtype=np.float64)
    q = quaternion_from_axis_angle(angular_velocity, rate * t)
    return rotate_vector(relative_position, q)


@beartype
@dataclass(frozen=True, eq=False)
class CircularOrbit:
    """A body on an assumed circular path around a fixed center.

    Attributes:
        center: World position of the primary at prediction time zero
        relative_position: Body position relative to the center
        angular_velocity: Orbital angular velocity [rad/s]
    """
    center: NDArray[np.float64]
    relative_position: NDArray[np.float64]
    angular_velocity: NDArray[np.float64]

    @classmethod
    def from_bodies(cls, body: BodyState, primary: BodyState) -> "CircularOrbit":
        """Orbit of ``body`` around ``primary`` from their current states."""
        r = body.position - primary.position
        v = body.velocity - primary.velocity
        return cls(
            center=np.array(primary.position, dtype=np.float64),
            relative_position=r,
            angular_velocity=orbital_angular_velocity(r, v),
        )

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.relative_position))

    @property
    def speed(self) -> float:
        """Speed along the circle relative to the center."""
        return float(np.linalg.norm(self.angular_velocity)) * self.radius

    def position_at(self, t: float) -> NDArray[np.float64]:
        """Predicted world position after ``t`` seconds."""
        return self.center + circular_motion(self.relative_position, self.angular_velocity, t)


@beartype
def predict_body_position(world: WorldState, body: str, primary: str, t: float) -> NDArray[np.float64]:
    """Predicted world position of ``body`` circling ``primary`` after ``t`` seconds.

    Raises:
        KeyError: If either body is not in ``world``
    """
    return CircularOrbit.from_bodies(world.body(body), world.body(primary)).position_at(t)
