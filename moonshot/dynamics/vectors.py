"""Guarded helpers for 3-vectors.

Vectors are plain ``NDArray[np.float64]`` of shape (3,). These helpers never
modify their input.
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.errors import DegenerateGeometryError

ZERO_NORM: float = 1e-12  # Below this a vector has no usable direction


@beartype
def is_degenerate(v: NDArray[np.float64]) -> bool:
    """True when ``v`` is too short to define a direction."""
    return bool(np.linalg.norm(v) < ZERO_NORM)


@beartype
def unit_vector(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return ``v`` scaled to unit length.

    Raises:
        DegenerateGeometryError: If ``v`` has (near) zero length
    """
    norm = np.linalg.norm(v)
    if norm < ZERO_NORM:
        raise DegenerateGeometryError(f"cannot normalize zero-length vector {v}")
    return v / norm


@beartype
def safe_unit_vector(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Like :func:`unit_vector` but returns the zero vector for zero input."""
    norm = np.linalg.norm(v)
    if norm < ZERO_NORM:
        return np.zeros(3)
    return v / norm


@beartype
def perpendicular(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Any unit vector perpendicular to ``v``."""
    u = unit_vector(v)
    # Cross with the world axis least aligned with u
    axis = np.zeros(3)
    axis[int(np.argmin(np.abs(u)))] = 1.0
    return unit_vector(np.cross(u, axis))
