"""GNC (Guidance, Navigation, Control) for the simulated rocket.

Provides orientation math, the RCS and velocity control loops, mission
guidance and manual flying support. Guidance only reads world snapshots and
returns commands; it never steps the world.

Example:
    >>> from moonshot.gnc import MissionGuidance
    >>>
    >>> guidance = MissionGuidance()
    >>> command = guidance.update(world)
"""

from moonshot.gnc.control import (
    AngularPIDController,
    PIDController,
    PIDGains,
    RotationController,
    TargetMode,
    VelocityController,
)
from moonshot.gnc.guidance import (
    CircularOrbit,
    InterceptSolution,
    MissionConfig,
    MissionGuidance,
    MissionPhase,
    classify_phase,
    search_intercept,
)
from moonshot.gnc.manual import (
    AssistMode,
    ManualControl,
    PilotAssist,
    apply_manual_overrides,
)
from moonshot.gnc.orientation import RPYAngles, quaternion_to_rpy

__all__ = [
    # Control
    "AngularPIDController",
    "PIDController",
    "PIDGains",
    "RotationController",
    "TargetMode",
    "VelocityController",
    # Guidance
    "CircularOrbit",
    "InterceptSolution",
    "MissionConfig",
    "MissionGuidance",
    "MissionPhase",
    "classify_phase",
    "search_intercept",
    # Manual
    "AssistMode",
    "ManualControl",
    "PilotAssist",
    "apply_manual_overrides",
    # Orientation
    "RPYAngles",
    "quaternion_to_rpy",
]
