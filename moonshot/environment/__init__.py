"""Environment models for the simulated universe.

Example:
    >>> from moonshot.environment import Gravitation
    >>>
    >>> grav = Gravitation()
    >>> forces = grav.forces(positions, masses)
"""

from moonshot.environment.gravity import (
    GRAVITATION,
    GRAVITATION_FALLOFF,
    Gravitation,
    gravitational_force,
)

__all__ = [
    "GRAVITATION",
    "GRAVITATION_FALLOFF",
    "Gravitation",
    "gravitational_force",
]
