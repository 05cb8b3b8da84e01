"""Intercept search against a body on a predicted circular orbit.

Marches forward in fixed time steps. At each step the target's predicted
position defines a candidate constant-velocity trajectory (fixed speed,
straight at that position) and its miss distance. The first time the miss
distance grows again, the previous candidate is the minimum and is returned.

Example:
    >>> from moonshot.gnc.guidance import CircularOrbit, search_intercept
    >>>
    >>> orbit = CircularOrbit.from_bodies(moon, earth)
    >>> solution = search_intercept(rocket.position, 12.0, orbit)
    >>> solution.velocity
"""

import logging
from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.vectors import safe_unit_vector
from moonshot.errors import UnreachableTargetError
from moonshot.gnc.guidance.trajectory import CircularOrbit

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_TIME_STEP = 0.5
DEFAULT_SEARCH_MAX_ITERATIONS = 600


class InterceptSolution(NamedTuple):
    """Result of an intercept search.

    Attributes:
        velocity: Constant velocity to fly [world frame]
        time: Predicted time of closest approach [s]
        miss_distance: Predicted distance to the target at that time
        iterations: Search steps evaluated
    """
    velocity: NDArray[np.float64]
    time: float
    miss_distance: float
    iterations: int


@beartype
def candidate_velocity(
    position: NDArray[np.float64],
    aim_point: NDArray[np.float64],
    speed: float,
) -> NDArray[np.float64]:
    """Velocity of magnitude ``speed`` from ``position`` straight at ``aim_point``."""
    return safe_unit_vector(aim_point - position) * speed


@beartype
def search_intercept(
    position: NDArray[np.float64],
    speed: float,
    orbit: CircularOrbit,
    time_step: float = DEFAULT_SEARCH_TIME_STEP,
    max_iterations: int = DEFAULT_SEARCH_MAX_ITERATIONS,
) -> InterceptSolution:
    """Find the constant velocity that passes closest to an orbiting target.

    Args:
        position: Current rocket position
        speed: Speed to fly at
        orbit: Predicted motion of the target
        time_step: Spacing of the candidate arrival times [s]
        max_iterations: Number of candidate arrival times to try

    Returns:
        The minimum-miss candidate

    Raises:
        ValueError: If ``speed``, ``time_step`` or ``max_iterations`` is not positive
        UnreachableTargetError: If the miss distance never starts growing
            within ``max_iterations`` steps
    """
    if speed <= 0:
        raise ValueError(f"speed must be positive, got {speed}")
    if time_step <= 0:
        raise ValueError(f"time_step must be positive, got {time_step}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")

    best: InterceptSolution | None = None

    for k in range(1, max_iterations + 1):
        t = k * time_step
        aim_point = orbit.position_at(t)
        velocity = candidate_velocity(position, aim_point, speed)
        miss = float(np.linalg.norm(aim_point - (position + velocity * t)))

        if best is not None and miss > best.miss_distance:
            logger.debug(
                "Intercept at t=%.1f s, miss %.3f after %d steps",
                best.time, best.miss_distance, k,
            )
            return best._replace(iterations=k)

        best = InterceptSolution(velocity=velocity, time=t, miss_distance=miss, iterations=k)

    logger.warning(
        "Intercept search exhausted %d steps, closest miss %.3f",
        max_iterations, best.miss_distance,
    )
    raise UnreachableTargetError(max_iterations, best.miss_distance)
