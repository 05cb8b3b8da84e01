"""Moonshot - Guidance and control for a simulated Earth-to-Moon rocket.

This package provides the autonomous guidance core (PID loops, orientation
math, trajectory prediction, mission state machine) together with a compact
reference physics plant and simulation harness to fly it against.

Example:
    >>> from moonshot import MissionGuidance, earth_moon_scenario, run_mission
    >>>
    >>> result = run_mission(earth_moon_scenario(), MissionGuidance(), steps=6000)
    >>> print(result.phase_sequence)
    >>> print(f"Fuel left: {result.final_state.rocket.fuel.volume:.1f}")
"""

__version__ = "0.1.0"

# World state and plant
from moonshot.dynamics import (
    BodyState,
    Command,
    FuelState,
    PhysicsConfig,
    RcsCommand,
    RocketState,
    WorldDynamics,
    WorldState,
    step_world,
)
from moonshot.errors import (
    DegenerateGeometryError,
    GuidanceError,
    UnreachableTargetError,
)

# Guidance and control
from moonshot.gnc import (
    AngularPIDController,
    AssistMode,
    CircularOrbit,
    ManualControl,
    MissionConfig,
    MissionGuidance,
    MissionPhase,
    PIDController,
    PIDGains,
    PilotAssist,
    RotationController,
    TargetMode,
    VelocityController,
    apply_manual_overrides,
    classify_phase,
    search_intercept,
)

# Simulation
from moonshot.simulation import (
    SimulationResult,
    Simulator,
    earth_moon_scenario,
    rocket_only_world,
    run_mission,
)
from moonshot.vehicle import VehicleConfig

__all__ = [
    "__version__",
    # State
    "BodyState",
    "Command",
    "FuelState",
    "RcsCommand",
    "RocketState",
    "WorldState",
    # Config
    "MissionConfig",
    "PhysicsConfig",
    "VehicleConfig",
    # Errors
    "DegenerateGeometryError",
    "GuidanceError",
    "UnreachableTargetError",
    # Control
    "AngularPIDController",
    "PIDController",
    "PIDGains",
    "RotationController",
    "TargetMode",
    "VelocityController",
    # Guidance
    "CircularOrbit",
    "MissionGuidance",
    "MissionPhase",
    "classify_phase",
    "search_intercept",
    # Manual
    "AssistMode",
    "ManualControl",
    "PilotAssist",
    "apply_manual_overrides",
    # Simulation
    "SimulationResult",
    "Simulator",
    "WorldDynamics",
    "earth_moon_scenario",
    "rocket_only_world",
    "run_mission",
    "step_world",
]
