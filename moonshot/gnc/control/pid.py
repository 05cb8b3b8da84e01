"""PID controller implementation.

Discrete PID controllers evaluated once per guidance tick:

    e = target - current
    u = kp * e + ki * sum(e) + kd * (e - e_prev)

The integral is a plain running sum and the derivative a plain difference;
the tick length is folded into the gains. No clamping or anti-windup is
applied here, callers saturate the output themselves.

Example:
    >>> from moonshot.gnc.control import PIDController
    >>>
    >>> # Roll rate loop
    >>> ctrl = PIDController(kp=5.0, target=0.3)
    >>> command = ctrl.update(0.1)
"""

import math
from dataclasses import dataclass, field

from beartype import beartype

# =============================================================================
# PID Gains
# =============================================================================


@beartype
@dataclass
class PIDGains:
    """PID controller gains.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0

    def scale(self, factor: float) -> "PIDGains":
        """Scale all gains by a factor."""
        return PIDGains(
            kp=self.kp * factor,
            ki=self.ki * factor,
            kd=self.kd * factor,
        )


# =============================================================================
# PID Controller
# =============================================================================


@beartype
@dataclass
class PIDController:
    """Scalar PID controller.

    Each :meth:`update` adds the current error to the accumulated sum and
    remembers it for the next derivative. :meth:`reset` clears that history
    but keeps gains and target.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        target: Setpoint the controller drives toward
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0
    target: float = 0.0

    # Internal state
    _sum_error: float = field(default=0.0, init=False, repr=False)
    _last_error: float = field(default=0.0, init=False, repr=False)

    @classmethod
    def from_gains(cls, gains: PIDGains, target: float = 0.0) -> "PIDController":
        """Create controller from PIDGains object."""
        return cls(kp=gains.kp, ki=gains.ki, kd=gains.kd, target=target)

    def reset(self) -> None:
        """Reset controller state (accumulated and previous error)."""
        self._sum_error = 0.0
        self._last_error = 0.0

    def error(self, current: float) -> float:
        """Error between target and ``current``."""
        return self.target - current

    def update(self, current: float) -> float:
        """Compute PID control output.

        Args:
            current: Measured value

        Returns:
            Control output (unclamped)
        """
        err = self.error(current)
        self._sum_error += err
        d_err = err - self._last_error
        self._last_error = err
        return float(self.kp * err + self.ki * self._sum_error + self.kd * d_err)

    @property
    def sum_error(self) -> float:
        return self._sum_error

    @property
    def last_error(self) -> float:
        return self._last_error

    @property
    def gains(self) -> PIDGains:
        """Get current gains as PIDGains object."""
        return PIDGains(kp=self.kp, ki=self.ki, kd=self.kd)

    @gains.setter
    def gains(self, value: PIDGains) -> None:
        """Set gains from PIDGains object."""
        self.kp = value.kp
        self.ki = value.ki
        self.kd = value.kd


# =============================================================================
# Angular PID Controller
# =============================================================================


@beartype
@dataclass
class AngularPIDController(PIDController):
    """PID controller for angles [rad].

    The error is wrapped once by 2*pi so the controller always turns the
    short way around, also when the measurement crosses +/-pi.
    """

    def error(self, current: float) -> float:
        """Wrapped error between target and ``current`` [rad]."""
        err = self.target - current
        if err > math.pi:
            err -= 2.0 * math.pi
        elif err < -math.pi:
            err += 2.0 * math.pi
        return err
