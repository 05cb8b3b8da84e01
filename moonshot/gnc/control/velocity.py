"""Velocity control by orient-then-burn.

The velocity controller points the nose along the velocity error and only
fires the engine once the nose is aligned, with the thrust that would cancel
the whole error in one physics step.

Example:
    >>> import numpy as np
    >>> from moonshot.gnc.control import VelocityController
    >>>
    >>> ctrl = VelocityController()
    >>> ctrl.set_target(np.array([0.0, 12.0, 0.0]))
    >>> command = ctrl.update(world.rocket)
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.state import Command, RocketState
from moonshot.gnc.control.rotation import RotationController
from moonshot.gnc.orientation import angle_between, deg_to_rad
from moonshot.vehicle import VehicleConfig

DEFAULT_SPEED_TOLERANCE = 0.02
DEFAULT_ALIGNMENT_TOLERANCE = deg_to_rad(2.0)


@beartype
class VelocityController:
    """Drives the rocket's world velocity toward a target.

    Attributes:
        vehicle: Feed-forward constants (max thrust, time step)
        rotation: Attitude controller owned by this controller
        speed_tolerance: Velocity errors below this need no correction
        alignment_tolerance: Largest nose misalignment that still allows thrust [rad]
    """

    def __init__(
        self,
        vehicle: VehicleConfig | None = None,
        rotation: RotationController | None = None,
        speed_tolerance: float = DEFAULT_SPEED_TOLERANCE,
        alignment_tolerance: float = DEFAULT_ALIGNMENT_TOLERANCE,
    ) -> None:
        if speed_tolerance <= 0:
            raise ValueError(f"speed_tolerance must be positive, got {speed_tolerance}")
        if alignment_tolerance <= 0:
            raise ValueError(f"alignment_tolerance must be positive, got {alignment_tolerance}")

        self.vehicle = vehicle or VehicleConfig()
        self.rotation = rotation or RotationController()
        self.speed_tolerance = speed_tolerance
        self.alignment_tolerance = alignment_tolerance
        self._target: NDArray[np.float64] | None = None

    @property
    def target(self) -> NDArray[np.float64] | None:
        if self._target is None:
            return None
        return self._target.copy()

    def set_target(self, velocity: NDArray[np.float64] | None) -> None:
        """Track a world-frame velocity; ``None`` stops the controller."""
        if velocity is None:
            self._target = None
            self.rotation.clear_target()
            return
        target = np.array(velocity, dtype=np.float64)
        if target.shape != (3,):
            raise ValueError(f"velocity target must be shape (3,), got {target.shape}")
        self._target = target

    def reset(self) -> None:
        """Reset the owned rotation controller's history."""
        self.rotation.reset()

    def thrust_to_cancel(self, error_magnitude: float, mass: float) -> float:
        """Thrust level that removes ``error_magnitude`` of velocity in one step."""
        level = error_magnitude * mass / (self.vehicle.max_thrust * self.vehicle.time_step)
        return min(1.0, max(0.0, level))

    def update(self, rocket: RocketState) -> Command:
        """Compute the command for this tick.

        Args:
            rocket: Current rocket snapshot

        Returns:
            Command with thrust and RCS
        """
        if self._target is None:
            return Command(thrust=0.0, rcs=self.rotation.update(rocket))

        error = self._target - rocket.velocity
        error_magnitude = float(np.linalg.norm(error))

        # Close enough: coast and keep the last attitude target
        if error_magnitude < self.speed_tolerance:
            return Command(thrust=0.0, rcs=self.rotation.update(rocket))

        self.rotation.set_orientation_target(error)
        rcs = self.rotation.update(rocket)

        misalignment = angle_between(rocket.nose_direction, error)
        if misalignment > self.alignment_tolerance:
            return Command(thrust=0.0, rcs=rcs)
        return Command(thrust=self.thrust_to_cancel(error_magnitude, rocket.mass), rcs=rcs)
