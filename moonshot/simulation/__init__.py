"""Simulation harness for flying guidance against the reference plant.

Example:
    >>> from moonshot.gnc.guidance import MissionGuidance
    >>> from moonshot.simulation import earth_moon_scenario, run_mission
    >>>
    >>> result = run_mission(earth_moon_scenario(), MissionGuidance(), steps=6000)
    >>> result.phase_sequence
"""

from moonshot.simulation.scenario import (
    circular_orbit_speed,
    earth_moon_scenario,
    rocket_only_world,
    satellite_scenario,
)
from moonshot.simulation.simulator import (
    SimulationResult,
    Simulator,
    run_mission,
)

__all__ = [
    "SimulationResult",
    "Simulator",
    "circular_orbit_speed",
    "earth_moon_scenario",
    "rocket_only_world",
    "run_mission",
    "satellite_scenario",
]
