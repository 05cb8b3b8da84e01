"""Orientation math.

Stateless conversions between quaternions, roll/pitch/yaw angles and
body/world frame vectors.

Conventions:
- Quaternions are scalar-first [w, x, y, z] and rotate body -> world
- Body +x is the nose (roll axis), +y the pitch axis, +z the yaw axis
- Euler decomposition is intrinsic pitch -> yaw -> roll ("YZX")

Example:
    >>> import numpy as np
    >>> from moonshot.gnc.orientation import nose_direction, quaternion_to_rpy
    >>>
    >>> q = np.array([1.0, 0.0, 0.0, 0.0])
    >>> quaternion_to_rpy(q)
    RPYAngles(roll=0.0, pitch=0.0, yaw=0.0)
    >>> nose_direction(q)
    array([1., 0., 0.])
"""

import math
from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.quaternion import (
    normalize_quaternion,
    quaternion_inverse,
    rotate_vector,
)
from moonshot.dynamics.vectors import ZERO_NORM, safe_unit_vector, unit_vector

__all__ = [
    "RPYAngles",
    "angle_between",
    "body_to_world",
    "deg_to_rad",
    "nose_direction",
    "quaternion_to_rpy",
    "rad_to_deg",
    "reflection",
    "rotate",
    "safe_unit_vector",
    "unit_vector",
    "world_to_body",
]

BODY_X: NDArray[np.float64] = np.array([1.0, 0.0, 0.0])
BODY_X.flags.writeable = False

# |test| above this is treated as the pitch singularity
_POLE_THRESHOLD: float = 0.499


class RPYAngles(NamedTuple):
    """Roll, pitch and yaw angles [rad]."""
    roll: float
    pitch: float
    yaw: float


# =============================================================================
# Euler Angles
# =============================================================================


@beartype
def quaternion_to_rpy(q: NDArray[np.float64]) -> RPYAngles:
    """Decompose a quaternion into roll, pitch and yaw (YZX order).

    Uses the closed-form formula with an explicit branch near the
    singularity (yaw = +/-pi/2). Inside the branch roll is reported as 0 and
    the whole rotation is folded into pitch. Close to the branch threshold
    the result loses precision; the branch cut is kept as-is because callers
    may depend on it.

    Args:
        q: Quaternion [w, x, y, z]

    Returns:
        Roll (about x), pitch (about y) and yaw (about z) [rad]
    """
    w, x, y, z = normalize_quaternion(q)
    test = x * y + z * w

    if test > _POLE_THRESHOLD:
        return RPYAngles(roll=0.0, pitch=2.0 * math.atan2(x, w), yaw=math.pi / 2)
    if test < -_POLE_THRESHOLD:
        return RPYAngles(roll=0.0, pitch=-2.0 * math.atan2(x, w), yaw=-math.pi / 2)

    pitch = math.atan2(2 * y * w - 2 * x * z, 1 - 2 * y * y - 2 * z * z)
    yaw = math.asin(2 * test)
    roll = math.atan2(2 * x * w - 2 * y * z, 1 - 2 * x * x - 2 * z * z)
    return RPYAngles(roll=float(roll), pitch=float(pitch), yaw=float(yaw))


# =============================================================================
# Frame Transforms
# =============================================================================


@beartype
def rotate(v: NDArray[np.float64], q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate ``v`` by ``q`` (sandwich product q v q^-1)."""
    return rotate_vector(v, q)


@beartype
def nose_direction(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """World direction of the body +x axis, i.e. the thrust direction."""
    return rotate_vector(BODY_X, q)


@beartype
def body_to_world(v: NDArray[np.float64], q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Express a body-frame vector in the world frame."""
    return rotate_vector(v, q)


@beartype
def world_to_body(v: NDArray[np.float64], q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Express a world-frame vector in the body frame."""
    return rotate_vector(v, quaternion_inverse(q))


@beartype
def reflection(v: NDArray[np.float64], normal: NDArray[np.float64]) -> NDArray[np.float64]:
    """Mirror ``v`` about the plane with the given ``normal``.

    Raises:
        DegenerateGeometryError: If ``normal`` has zero length
    """
    n = unit_vector(normal)
    return v - 2.0 * float(np.dot(v, n)) * n


# =============================================================================
# Angles
# =============================================================================


@beartype
def angle_between(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> float:
    """Angle between two vectors [rad], in [0, pi].

    Returns ``nan`` when either vector has (near) zero length; callers that
    need a direction must guard first.
    """
    n1 = float(np.linalg.norm(v1))
    n2 = float(np.linalg.norm(v2))
    if n1 < ZERO_NORM or n2 < ZERO_NORM:
        return math.nan
    cos_angle = float(np.dot(v1, v2)) / (n1 * n2)
    return math.acos(min(1.0, max(-1.0, cos_angle)))


@beartype
def deg_to_rad(degrees: float) -> float:
    """Convert degrees to radians."""
    return degrees * math.pi / 180.0


@beartype
def rad_to_deg(radians: float) -> float:
    """Convert radians to degrees."""
    return radians * 180.0 / math.pi
