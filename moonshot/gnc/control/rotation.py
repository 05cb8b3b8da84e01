"""Attitude control through the reaction control system.

The rotation controller drives the rocket's world-frame angular velocity
with three independent PID loops, one per world-aligned axis
(x -> roll, y -> pitch, z -> yaw). Orientation control is cascaded on top:
an outer angle loop turns the pointing error into an angular velocity
target for the inner loops.

    direction target --> [angle PID] --> omega target --> [x/y/z PIDs] --> RCS

Example:
    >>> import numpy as np
    >>> from moonshot.gnc.control import RotationController
    >>>
    >>> ctrl = RotationController()
    >>> ctrl.set_orientation_target(np.array([0.0, 1.0, 0.0]))
    >>> rcs = ctrl.update(world.rocket)
"""

import logging
from enum import Enum, auto

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.quaternion import quaternion_from_vectors, quaternion_to_axis_angle
from moonshot.dynamics.state import RcsCommand, RocketState
from moonshot.dynamics.vectors import unit_vector
from moonshot.gnc.control.pid import AngularPIDController, PIDController, PIDGains

logger = logging.getLogger(__name__)

# Reference gains
DEFAULT_RATE_GAINS = PIDGains(kp=5.0, ki=0.0, kd=0.0)
DEFAULT_ANGLE_GAINS = PIDGains(kp=3.0, ki=0.0, kd=1.0)


class TargetMode(Enum):
    """What the rotation controller is currently tracking."""
    NONE = auto()
    ANGULAR_VELOCITY = auto()
    ORIENTATION = auto()


@beartype
class RotationController:
    """Cascaded attitude controller producing RCS commands.

    Switching between target modes resets every owned PID so history from one
    control law never leaks into another. Re-targeting within the same mode
    keeps the history.

    Attributes:
        axis_controllers: Angular velocity loops for world x, y, z
        angle_controller: Outer pointing loop (target angle 0)
    """

    def __init__(
        self,
        rate_gains: PIDGains | None = None,
        angle_gains: PIDGains | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            rate_gains: Gains of each per-axis angular velocity loop
            angle_gains: Gains of the outer pointing loop
        """
        rate_gains = rate_gains or DEFAULT_RATE_GAINS
        angle_gains = angle_gains or DEFAULT_ANGLE_GAINS

        self.axis_controllers = tuple(PIDController.from_gains(rate_gains) for _ in range(3))
        self.angle_controller = AngularPIDController.from_gains(angle_gains)

        self._mode = TargetMode.NONE
        self._target_angular_velocity: NDArray[np.float64] | None = None
        self._target_direction: NDArray[np.float64] | None = None

    @property
    def mode(self) -> TargetMode:
        return self._mode

    @property
    def target_angular_velocity(self) -> NDArray[np.float64] | None:
        """Angular velocity target of the inner loops (set in either mode)."""
        if self._target_angular_velocity is None:
            return None
        return self._target_angular_velocity.copy()

    @property
    def target_direction(self) -> NDArray[np.float64] | None:
        """Unit pointing target in orientation mode."""
        if self._target_direction is None:
            return None
        return self._target_direction.copy()

    # -------------------------------------------------------------------------
    # Targets
    # -------------------------------------------------------------------------

    def set_angular_velocity_target(self, omega: NDArray[np.float64] | None) -> None:
        """Track a world-frame angular velocity; ``None`` clears the target."""
        if omega is None:
            self.clear_target()
            return
        self._switch_mode(TargetMode.ANGULAR_VELOCITY)
        self._target_direction = None
        self._set_rate_targets(omega)

    def set_orientation_target(self, direction: NDArray[np.float64] | None) -> None:
        """Point the nose along ``direction``; ``None`` clears the target.

        Raises:
            DegenerateGeometryError: If ``direction`` has zero length
        """
        if direction is None:
            self.clear_target()
            return
        target = unit_vector(direction)
        self._switch_mode(TargetMode.ORIENTATION)
        self._target_direction = target

    def clear_target(self) -> None:
        """Stop commanding the RCS."""
        self._switch_mode(TargetMode.NONE)
        self._target_angular_velocity = None
        self._target_direction = None

    def reset(self) -> None:
        """Reset every owned PID; targets and mode are kept."""
        for ctrl in self.axis_controllers:
            ctrl.reset()
        self.angle_controller.reset()

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def update(self, rocket: RocketState) -> RcsCommand:
        """Compute the RCS command for this tick.

        Args:
            rocket: Current rocket snapshot

        Returns:
            RCS command (unclamped)
        """
        if self._mode is TargetMode.NONE:
            return RcsCommand()

        if self._mode is TargetMode.ORIENTATION:
            self._set_rate_targets(self._orientation_rate(rocket.nose_direction))

        roll, pitch, yaw = (
            ctrl.update(float(w))
            for ctrl, w in zip(self.axis_controllers, rocket.angular_velocity)
        )
        return RcsCommand(roll=roll, pitch=pitch, yaw=yaw)

    def _orientation_rate(self, nose: NDArray[np.float64]) -> NDArray[np.float64]:
        """Angular velocity that turns ``nose`` toward the pointing target."""
        # Rotation taking the target onto the nose; driving its angle to zero
        # turns the nose the other way round, onto the target
        error_rotation = quaternion_from_vectors(self._target_direction, nose)
        axis, angle = quaternion_to_axis_angle(error_rotation)
        magnitude = self.angle_controller.update(angle)
        return axis * magnitude

    def _set_rate_targets(self, omega: NDArray[np.float64]) -> None:
        target = np.array(omega, dtype=np.float64)
        if target.shape != (3,):
            raise ValueError(f"angular velocity target must be shape (3,), got {target.shape}")
        self._target_angular_velocity = target
        for ctrl, value in zip(self.axis_controllers, target):
            ctrl.target = float(value)

    def _switch_mode(self, mode: TargetMode) -> None:
        if mode is self._mode:
            return
        logger.debug("Rotation target mode %s -> %s, resetting PIDs", self._mode.name, mode.name)
        self.reset()
        self._mode = mode
