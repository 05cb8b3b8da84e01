"""Quaternion algebra.

Convention:
- Scalar-first: q = [w, x, y, z]
- Unit quaternions describe the rotation taking body-frame vectors into the
  world frame (body -> world)
- Composition is the Hamilton product: rotating by q1 then q2 is q2 * q1
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.vectors import perpendicular, unit_vector

IDENTITY_QUATERNION: NDArray[np.float64] = np.array([1.0, 0.0, 0.0, 0.0])
IDENTITY_QUATERNION.flags.writeable = False

# Below this sin(angle/2) the rotation axis is numerically meaningless
_AXIS_EPSILON: float = 1e-3


@beartype
def normalize_quaternion(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a quaternion to unit length."""
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


@beartype
def quaternion_multiply(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """Multiply two quaternions (Hamilton product).

    Args:
        q1: First quaternion [w, x, y, z]
        q2: Second quaternion [w, x, y, z]

    Returns:
        Product quaternion q1 * q2
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ])


@beartype
def quaternion_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Compute quaternion conjugate (inverse for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


@beartype
def quaternion_inverse(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Compute the multiplicative inverse of a (not necessarily unit) quaternion."""
    norm_sq = float(np.dot(q, q))
    if norm_sq < 1e-20:
        raise ValueError("zero quaternion has no inverse")
    return quaternion_conjugate(q) / norm_sq


@beartype
def quaternion_to_dcm(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert quaternion to Direction Cosine Matrix (DCM).

    Args:
        q: Quaternion [w, x, y, z] representing rotation from frame A to B

    Returns:
        3x3 DCM that transforms vectors from frame A to frame B
    """
    q = normalize_quaternion(q)
    q0, q1, q2, q3 = q

    return np.array([
        [1 - 2*(q2**2 + q3**2), 2*(q1*q2 - q0*q3), 2*(q1*q3 + q0*q2)],
        [2*(q1*q2 + q0*q3), 1 - 2*(q1**2 + q3**2), 2*(q2*q3 - q0*q1)],
        [2*(q1*q3 - q0*q2), 2*(q2*q3 + q0*q1), 1 - 2*(q1**2 + q2**2)],
    ])


@beartype
def quaternion_from_axis_angle(
    axis: NDArray[np.float64],
    angle: float,
) -> NDArray[np.float64]:
    """Quaternion rotating by ``angle`` radians about ``axis``.

    The axis does not need to be unit length. A zero axis gives the identity.
    """
    norm = np.linalg.norm(axis)
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])

    half = 0.5 * angle
    s = np.sin(half) / norm
    return np.array([np.cos(half), axis[0] * s, axis[1] * s, axis[2] * s])


@beartype
def quaternion_to_axis_angle(q: NDArray[np.float64]) -> tuple[NDArray[np.float64], float]:
    """Decompose a quaternion into rotation axis and angle.

    The angle is in [0, 2*pi]. For (near) zero rotations the axis is not
    rescaled and comes back with length ~sin(angle/2), so that
    ``axis * f(angle)`` fades out smoothly instead of jumping to an arbitrary
    unit axis.

    Returns:
        Tuple of (axis, angle [rad])
    """
    q = normalize_quaternion(q)
    w = float(np.clip(q[0], -1.0, 1.0))
    angle = 2.0 * float(np.arccos(w))
    s = np.sqrt(1.0 - w * w)

    if s < _AXIS_EPSILON:
        return q[1:].copy(), angle
    return q[1:] / s, angle


@beartype
def quaternion_from_vectors(
    u: NDArray[np.float64],
    v: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Shortest-arc rotation taking the direction of ``u`` onto that of ``v``.

    For antiparallel vectors the rotation is pi about an arbitrary axis
    perpendicular to ``u``.

    Raises:
        DegenerateGeometryError: If either vector has zero length
    """
    u_hat = unit_vector(u)
    v_hat = unit_vector(v)
    dot = float(np.dot(u_hat, v_hat))

    if dot < -1.0 + 1e-9:
        return quaternion_from_axis_angle(perpendicular(u_hat), np.pi)

    xyz = np.cross(u_hat, v_hat)
    return normalize_quaternion(np.array([1.0 + dot, xyz[0], xyz[1], xyz[2]]))


@beartype
def rotate_vector(v: NDArray[np.float64], q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate ``v`` by ``q`` with the sandwich product q * v * q^-1."""
    v_quat = np.array([0.0, v[0], v[1], v[2]])
    rotated = quaternion_multiply(quaternion_multiply(q, v_quat), quaternion_inverse(q))
    return rotated[1:]
