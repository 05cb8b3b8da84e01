"""Guidance for the Earth-to-Moon mission.

Provides the circular-orbit trajectory predictor, the intercept search and
the staged mission state machine that drives the control loops.
"""

from moonshot.gnc.guidance.intercept import (
    InterceptSolution,
    search_intercept,
)
from moonshot.gnc.guidance.mission import (
    MissionConfig,
    MissionGeometry,
    MissionGuidance,
    MissionPhase,
    approach_velocity,
    classify_phase,
)
from moonshot.gnc.guidance.trajectory import (
    CircularOrbit,
    circular_motion,
    orbital_angular_velocity,
    predict_body_position,
)

__all__ = [
    # Trajectory
    "CircularOrbit",
    "circular_motion",
    "orbital_angular_velocity",
    "predict_body_position",
    # Intercept
    "InterceptSolution",
    "search_intercept",
    # Mission
    "MissionConfig",
    "MissionGeometry",
    "MissionGuidance",
    "MissionPhase",
    "approach_velocity",
    "classify_phase",
]
