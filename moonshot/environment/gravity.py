"""Power-law gravitation between point masses.

The simulated universe does not use an inverse-square law. Force between two
bodies falls off with distance raised to ``GRAVITATION_FALLOFF``:

    F = G * m1 * m2 / d^falloff

which keeps orbits small enough to fly a whole transfer mission in a few
thousand physics steps. The pairwise kernel is numba-compiled since it runs
once per physics step for every pair of bodies.

Example:
    >>> from moonshot.environment import Gravitation
    >>>
    >>> grav = Gravitation()
    >>> forces = grav.forces(positions, masses)  # (n, 3) array
    >>> a = grav.acceleration(rocket_position, earth_position, earth_mass)
"""

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

# =============================================================================
# Constants
# =============================================================================

GRAVITATION: float = 6.7e-11  # Gravitational constant of the simulation
GRAVITATION_FALLOFF: float = 1.25  # Distance exponent of the force law
MIN_DISTANCE: float = 1e-9  # Coincident bodies exert no force on each other


# =============================================================================
# Numba-Optimized Core Functions
# =============================================================================


@njit(cache=True, fastmath=True)
def _pairwise_forces(
    positions: np.ndarray,
    masses: np.ndarray,
    gravitation: float,
    falloff: float,
) -> np.ndarray:
    """Numba-optimized pairwise gravitation.

    Returns the net force acting on each body, shape (n, 3).
    """
    n = positions.shape[0]
    forces = np.zeros((n, 3))

    for i in range(n):
        for j in range(i + 1, n):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            dz = positions[j, 2] - positions[i, 2]
            d = np.sqrt(dx*dx + dy*dy + dz*dz)
            if d < MIN_DISTANCE:
                continue

            f_over_d = gravitation * masses[i] * masses[j] / (d**falloff * d)

            forces[i, 0] += f_over_d * dx
            forces[i, 1] += f_over_d * dy
            forces[i, 2] += f_over_d * dz
            forces[j, 0] -= f_over_d * dx
            forces[j, 1] -= f_over_d * dy
            forces[j, 2] -= f_over_d * dz

    return forces


# =============================================================================
# Gravitation Model
# =============================================================================


@beartype
def gravitational_force(
    m1: float,
    m2: float,
    distance: float,
    gravitation: float = GRAVITATION,
    falloff: float = GRAVITATION_FALLOFF,
) -> float:
    """Magnitude of the attraction between two point masses."""
    if distance < MIN_DISTANCE:
        return 0.0
    return gravitation * m1 * m2 / distance**falloff


@beartype
class Gravitation:
    """Power-law gravitation model.

    Example:
        >>> grav = Gravitation(falloff=2.0)  # Newtonian
        >>> forces = grav.forces(positions, masses)
    """

    def __init__(
        self,
        gravitation: float = GRAVITATION,
        falloff: float = GRAVITATION_FALLOFF,
    ) -> None:
        """Initialize gravitation model.

        Args:
            gravitation: Gravitational constant
            falloff: Distance exponent of the force law
        """
        if gravitation < 0:
            raise ValueError(f"gravitation must be non-negative, got {gravitation}")
        if falloff <= 0:
            raise ValueError(f"falloff must be positive, got {falloff}")
        self.gravitation = gravitation
        self.falloff = falloff

    @beartype
    def forces(
        self,
        positions: NDArray[np.float64],
        masses: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Net gravitational force on every body.

        Args:
            positions: Body positions, shape (n, 3)
            masses: Body masses, shape (n,)

        Returns:
            Forces, shape (n, 3)
        """
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"positions must be shape (n, 3), got {positions.shape}")
        if masses.shape != (positions.shape[0],):
            raise ValueError(
                f"masses must be shape ({positions.shape[0]},), got {masses.shape}"
            )
        return _pairwise_forces(
            np.ascontiguousarray(positions),
            np.ascontiguousarray(masses),
            self.gravitation,
            self.falloff,
        )

    @beartype
    def acceleration(
        self,
        position: NDArray[np.float64],
        source_position: NDArray[np.float64],
        source_mass: float,
    ) -> NDArray[np.float64]:
        """Acceleration at ``position`` caused by a single source body."""
        offset = source_position - position
        d = float(np.linalg.norm(offset))
        if d < MIN_DISTANCE:
            return np.zeros(3)
        magnitude = self.gravitation * source_mass / d**self.falloff
        return magnitude * offset / d

    @beartype
    def potential(self, distance: float, source_mass: float) -> float:
        """Gravitational potential per unit mass at ``distance`` from a source.

        Integral of the power-law force; only defined for falloff != 1.
        """
        if self.falloff == 1.0:
            raise ValueError("potential is logarithmic for falloff == 1")
        d = max(distance, MIN_DISTANCE)
        exponent = self.falloff - 1.0
        return -self.gravitation * source_mass / (exponent * d**exponent)
