"""Step-driven simulation of the guided rocket.

The simulator owns the "truth" world and advances it with the reference
physics plant in response to commands. Guidance code runs the loop: read the
state, compute a command, step.

Example:
    >>> from moonshot.gnc.guidance import MissionGuidance
    >>> from moonshot.simulation import Simulator, earth_moon_scenario, run_mission
    >>>
    >>> # Drive the loop yourself
    >>> sim = Simulator(earth_moon_scenario())
    >>> guidance = MissionGuidance()
    >>> for _ in range(600):
    ...     sim.step(guidance.update(sim.state))
    >>>
    >>> # Or let run_mission do it and collect telemetry
    >>> result = run_mission(earth_moon_scenario(), MissionGuidance(), steps=6000)
    >>> result.to_dataframe()
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import polars as pl
from beartype import beartype
from numpy.typing import NDArray
from tqdm import tqdm

from moonshot.dynamics.rigid_body import PhysicsConfig, WorldDynamics
from moonshot.dynamics.state import Command, WorldState
from moonshot.gnc.guidance.mission import MissionGuidance, MissionPhase
from moonshot.vehicle import VehicleConfig

logger = logging.getLogger(__name__)

# =============================================================================
# Simulator
# =============================================================================


@beartype
@dataclass
class Simulator:
    """Step-driven world simulator.

    Attributes:
        state: Current truth world
        vehicle: Actuator and timing constants
        physics: Plant configuration
        record_history: Keep every visited world in memory
    """
    state: WorldState
    vehicle: VehicleConfig = field(default_factory=VehicleConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    record_history: bool = True

    # Internal
    _dynamics: WorldDynamics = field(init=False, repr=False)
    _time: float = field(default=0.0, init=False)
    _history: list[WorldState] = field(default_factory=list, init=False, repr=False)
    _commands: list[Command] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize the plant."""
        self._dynamics = WorldDynamics(self.vehicle, self.physics)
        if self.record_history:
            self._history = [self.state]

    @property
    def time(self) -> float:
        """Simulated time since start [s]."""
        return self._time

    @property
    def time_step(self) -> float:
        return self.vehicle.time_step

    def step(self, command: Command | None = None) -> WorldState:
        """Propagate the world by one time step.

        Args:
            command: Actuator command; ``None`` means idle

        Returns:
            New world after integration
        """
        command = command or Command.idle()
        self.state = self._dynamics.step(self.state, command)
        self._time += self.vehicle.time_step

        if self.record_history:
            self._commands.append(command)
            self._history.append(self.state)

        return self.state

    def get_history(self) -> list[WorldState]:
        """Recorded worlds, starting with the initial one."""
        return self._history.copy()

    def get_commands(self) -> list[Command]:
        """Recorded commands; command ``i`` led from world ``i`` to ``i + 1``."""
        return self._commands.copy()

    def clear_history(self) -> None:
        """Forget recorded history, keeping only the current world."""
        self._history = [self.state]
        self._commands = []


# =============================================================================
# Results and Telemetry
# =============================================================================


@beartype
@dataclass
class SimulationResult:
    """Outcome of a guided run.

    ``states[i]`` is the world at ``times[i]``; ``commands[i]`` and
    ``phases[i]`` are what guidance decided from it. The final world has no
    command.

    Attributes:
        states: Visited worlds
        times: Simulated time of each world [s]
        commands: Commands issued
        phases: Mission phase behind each command
        primary: Name of the launch body
        target: Name of the destination body
    """
    states: list[WorldState]
    times: list[float]
    commands: list[Command]
    phases: list[MissionPhase]
    primary: str = "Earth"
    target: str = "Moon"

    @property
    def final_state(self) -> WorldState:
        return self.states[-1]

    @property
    def exploded(self) -> bool:
        return self.final_state.rocket.exploded

    @property
    def steps(self) -> int:
        """Number of physics steps taken."""
        return len(self.commands)

    @property
    def phase_sequence(self) -> list[MissionPhase]:
        """Phases in the order they were entered, without repeats."""
        sequence: list[MissionPhase] = []
        for phase in self.phases:
            if not sequence or sequence[-1] is not phase:
                sequence.append(phase)
        return sequence

    @property
    def position(self) -> NDArray[np.float64]:
        """Rocket position history, shape (N, 3)."""
        return np.array([s.rocket.position for s in self.states])

    @property
    def speed(self) -> NDArray[np.float64]:
        return np.array([s.rocket.speed for s in self.states])

    @property
    def fuel_volume(self) -> NDArray[np.float64]:
        return np.array([s.rocket.fuel.volume for s in self.states])

    def body_positions(self, name: str) -> NDArray[np.float64]:
        """Position history of a celestial body, shape (N, 3)."""
        return np.array([s.body(name).position for s in self.states])

    def target_distance(self) -> NDArray[np.float64]:
        """Rocket distance above the target's surface."""
        return np.array([s.body(self.target).altitude_of(s.rocket.position) for s in self.states])

    def primary_altitude(self) -> NDArray[np.float64]:
        """Rocket distance above the primary's surface."""
        return np.array([s.body(self.primary).altitude_of(s.rocket.position) for s in self.states])

    def to_dataframe(self) -> pl.DataFrame:
        """Telemetry table with one row per visited world."""
        n = len(self.states)
        pad = n - len(self.commands)
        thrust = [c.thrust for c in self.commands] + [None] * pad
        phase = [p.name for p in self.phases] + [None] * (n - len(self.phases))
        position = self.position

        return pl.DataFrame({
            "time": self.times,
            "phase": phase,
            "x": position[:, 0],
            "y": position[:, 1],
            "z": position[:, 2],
            "speed": self.speed,
            "fuel_volume": self.fuel_volume,
            "thrust": thrust,
            "altitude": self.primary_altitude(),
            "target_distance": self.target_distance(),
            "exploded": [s.rocket.exploded for s in self.states],
        })


# =============================================================================
# Mission Runner
# =============================================================================


@beartype
def run_mission(
    world: WorldState,
    guidance: MissionGuidance,
    steps: int,
    vehicle: VehicleConfig | None = None,
    physics: PhysicsConfig | None = None,
    progress: bool = False,
) -> SimulationResult:
    """Fly ``guidance`` closed-loop against the reference plant.

    Stops early if the rocket explodes. Guidance errors propagate.

    Args:
        world: Initial world
        guidance: Mission guidance session
        steps: Maximum number of physics steps
        vehicle: Plant constants (defaults to the guidance's)
        physics: Plant configuration
        progress: Show a tqdm progress bar

    Returns:
        Recorded run
    """
    if steps < 0:
        raise ValueError(f"steps must be non-negative, got {steps}")

    vehicle = vehicle or guidance.vehicle
    sim = Simulator(world, vehicle=vehicle, physics=physics or PhysicsConfig(), record_history=False)

    states = [sim.state]
    times = [sim.time]
    commands: list[Command] = []
    phases: list[MissionPhase] = []

    logger.info("Starting mission run: up to %d steps of %.4f s", steps, vehicle.time_step)

    iterator: Any = range(steps)
    if progress:
        iterator = tqdm(iterator, desc="Flying mission", total=steps)

    for _ in iterator:
        if sim.state.rocket.exploded:
            break
        command = guidance.update(sim.state)
        commands.append(command)
        phases.append(guidance.phase)
        states.append(sim.step(command))
        times.append(sim.time)

    result = SimulationResult(
        states=states,
        times=times,
        commands=commands,
        phases=phases,
        primary=guidance.config.primary,
        target=guidance.config.target,
    )
    rocket = result.final_state.rocket
    logger.info(
        "Mission run finished after %d steps (%.1f s): phase %s, fuel %.2f, exploded %s",
        result.steps, sim.time,
        phases[-1].name if phases else "NONE",
        rocket.fuel.volume, rocket.exploded,
    )
    return result
