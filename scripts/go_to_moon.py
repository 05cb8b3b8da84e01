#!/usr/bin/env python
"""Example: Fly the autonomous Earth-to-Moon mission.

The loop follows the usual flight software pattern:
1. Read state (truth in sim)
2. Run guidance (phase selection, intercept search)
3. Run control (velocity and attitude loops -> thrust and RCS)
4. Step simulation (the plant moves the world)

Usage:
    uv run python scripts/go_to_moon.py
"""

import logging

from moonshot import MissionGuidance, earth_moon_scenario, run_mission

STEPS = 7200  # Two minutes of simulated time


def run_moonshot():
    """Run the reference mission and print a summary."""
    print("=" * 60)
    print("EARTH TO MOON")
    print("=" * 60)

    world = earth_moon_scenario()
    guidance = MissionGuidance()
    moon = world.body("Moon")

    print("\nScenario:")
    print(f"  Rocket mass: {world.rocket.mass:.1f}, fuel volume: {world.rocket.fuel.volume:.1f}")
    print(f"  Moon: radius {moon.radius:.0f}, speed {moon.speed:.1f}")
    print(f"  Bodies: {', '.join(world.body_names)}")

    result = run_mission(world, guidance, steps=STEPS, progress=True)

    print("-" * 60)
    print("\nFINAL STATE:")
    final = result.final_state
    rocket = final.rocket
    print(f"  Time: {result.times[-1]:.1f} s")
    print(f"  Phases: {' -> '.join(p.name for p in result.phase_sequence)}")
    print(f"  Distance above Moon: {final.body('Moon').altitude_of(rocket.position):.2f}")
    print(f"  Fuel left: {rocket.fuel.volume:.2f}")
    print("\nTelemetry (last rows):")
    print(result.to_dataframe().tail(5))

    if rocket.exploded:
        print("\n✗ Rocket destroyed")
    elif final.body("Moon").altitude_of(rocket.position) < 5.0:
        print("\n✓ LANDED ON THE MOON")
    else:
        print("\n✗ Did not reach the Moon")

    return result


if __name__ == "__main__":
    import matplotlib.pyplot as plt

    from moonshot.mission_plotting import plot_mission_3d
    from moonshot.plotting import plot_telemetry, plot_trajectory

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    result = run_moonshot()

    print("\n" + "=" * 60)
    print("GENERATING PLOTS")
    print("=" * 60)

    plot_trajectory(result)
    plot_telemetry(result)
    plot_mission_3d(result).show()
    plt.show()
