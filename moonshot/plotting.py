"""Visualization of guided runs.

Provides plotting functions for:
- The rocket's path among the celestial bodies (top-down x-y view)
- Telemetry over time (distances, speed, fuel, thrust) with phase bands

All plots use matplotlib with a consistent style.
"""

import matplotlib.pyplot as plt
import numpy as np
from beartype import beartype
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from moonshot.gnc.guidance.mission import MissionPhase
from moonshot.simulation.simulator import SimulationResult

# =============================================================================
# Plot Style Configuration
# =============================================================================

COLORS = {
    "rocket": "#2E86AB",  # Steel blue
    "primary": "#3B8E4F",  # Green
    "target": "#8C8C8C",  # Gray
    "accent": "#F18F01",  # Orange
    "text": "#333333",
}

PHASE_COLORS = {
    MissionPhase.LIFTOFF_1: "#FDE2E4",
    MissionPhase.LIFTOFF_2: "#FAD2E1",
    MissionPhase.TRANSIT: "#E2ECE9",
    MissionPhase.APPROACH: "#BEE1E6",
    MissionPhase.FINAL: "#DFE7FD",
    MissionPhase.COAST: "#EEEEEE",
}

DEFAULT_FIGSIZE = (12.0, 6.0)


def _setup_style() -> None:
    """Configure matplotlib style for consistent appearance."""
    plt.rcParams.update(
        {
            "font.family": "sans-serif",
            "font.size": 11,
            "axes.titlesize": 14,
            "axes.labelsize": 12,
            "axes.edgecolor": COLORS["text"],
            "axes.labelcolor": COLORS["text"],
            "legend.fontsize": 10,
            "grid.alpha": 0.5,
        }
    )


def _shade_phases(ax: Axes, result: SimulationResult) -> None:
    """Background bands for the mission phases."""
    if not result.phases:
        return
    times = result.times
    start = 0
    for i in range(1, len(result.phases) + 1):
        if i == len(result.phases) or result.phases[i] is not result.phases[start]:
            ax.axvspan(times[start], times[i], color=PHASE_COLORS[result.phases[start]],
                       alpha=0.6, linewidth=0)
            start = i


# =============================================================================
# Trajectory Plot
# =============================================================================


@beartype
def plot_trajectory(
    result: SimulationResult,
    figsize: tuple[float, float] = (8.0, 8.0),
    show_bodies: bool = True,
) -> Figure:
    """Plot the rocket's path and the primary/target body tracks (x-y plane).

    Args:
        result: Recorded run
        figsize: Figure size
        show_bodies: Draw the bodies at their final positions

    Returns:
        matplotlib Figure
    """
    _setup_style()
    fig, ax = plt.subplots(figsize=figsize)

    path = result.position
    ax.plot(path[:, 0], path[:, 1], color=COLORS["rocket"], linewidth=2, label="Rocket")

    for name, color in ((result.primary, COLORS["primary"]), (result.target, COLORS["target"])):
        track = result.body_positions(name)
        ax.plot(track[:, 0], track[:, 1], color=color, linestyle="--", alpha=0.7,
                label=f"{name} track")
        if show_bodies:
            body = result.final_state.body(name)
            ax.add_patch(Circle((body.position[0], body.position[1]), body.radius,
                                color=color, alpha=0.8))

    end = path[-1]
    marker = "x" if result.exploded else "o"
    ax.plot(end[0], end[1], marker=marker, color=COLORS["accent"], markersize=10,
            linestyle="none", label="Exploded" if result.exploded else "End")

    ax.set_aspect("equal", adjustable="datalim")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title(f"{result.primary} to {result.target}")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")

    fig.tight_layout()
    return fig


# =============================================================================
# Telemetry Plot
# =============================================================================


@beartype
def plot_telemetry(
    result: SimulationResult,
    figsize: tuple[float, float] = DEFAULT_FIGSIZE,
) -> Figure:
    """Plot distances, speed, fuel and thrust over time.

    Args:
        result: Recorded run
        figsize: Figure size

    Returns:
        matplotlib Figure with four subplots
    """
    _setup_style()
    times = np.asarray(result.times)
    fig, axes = plt.subplots(2, 2, figsize=figsize, sharex=True)
    (ax_dist, ax_speed), (ax_fuel, ax_thrust) = axes

    ax_dist.plot(times, result.primary_altitude(), color=COLORS["primary"],
                 label=f"Above {result.primary}")
    ax_dist.plot(times, result.target_distance(), color=COLORS["target"],
                 label=f"Above {result.target}")
    ax_dist.set_ylabel("Distance")
    ax_dist.legend()

    ax_speed.plot(times, result.speed, color=COLORS["rocket"])
    ax_speed.set_ylabel("Speed")

    ax_fuel.plot(times, result.fuel_volume, color=COLORS["accent"])
    ax_fuel.set_ylabel("Fuel volume")
    ax_fuel.set_xlabel("Time (s)")

    thrust = [c.thrust for c in result.commands]
    ax_thrust.step(times[: len(thrust)], thrust, where="post", color=COLORS["rocket"])
    ax_thrust.set_ylabel("Thrust level")
    ax_thrust.set_ylim(-0.05, 1.05)
    ax_thrust.set_xlabel("Time (s)")

    for ax in axes.flat:
        _shade_phases(ax, result)
        ax.grid(True, alpha=0.3)

    fig.suptitle("Mission Telemetry", fontsize=14)
    fig.tight_layout()
    return fig
