"""Control loops for the rocket.

Provides scalar and angular PID controllers, the cascaded RCS attitude
controller and the orient-then-burn velocity controller.
"""

from moonshot.gnc.control.pid import (
    AngularPIDController,
    PIDController,
    PIDGains,
)
from moonshot.gnc.control.rotation import (
    RotationController,
    TargetMode,
)
from moonshot.gnc.control.velocity import (
    VelocityController,
)

__all__ = [
    "AngularPIDController",
    "PIDController",
    "PIDGains",
    "RotationController",
    "TargetMode",
    "VelocityController",
]
