"""Earth-to-Moon mission guidance.

Staged state machine flying the rocket from the surface of a primary body to
a landing on a target body. The phase is recomputed from geometry and fuel on
every tick:

1. LIFTOFF_1 - Full thrust straight up, no attitude control
2. LIFTOFF_2 - Full thrust while turning the nose toward the target
3. TRANSIT   - Fly the velocity found by the intercept search
4. APPROACH  - Move with the target and close on it slowly
5. FINAL     - Engine off, tail toward the target, fall in
6. COAST     - Out of fuel, nothing left to command

The session remembers the last phase only to reset the controllers on a hand-off
and for telemetry; it never drives the phase choice.

The velocity controller withholds thrust while it turns toward a new target,
so early in TRANSIT the rocket can sink back below the turn altitude and
re-enter LIFTOFF_2 once before climbing out again. Each re-entry is a
hand-off and resets both controllers.

Example:
    >>> from moonshot.dynamics import WorldDynamics
    >>> from moonshot.gnc.guidance import MissionGuidance
    >>> from moonshot.simulation import earth_moon_scenario
    >>>
    >>> world = earth_moon_scenario()
    >>> guidance = MissionGuidance()
    >>> dynamics = WorldDynamics()
    >>> for _ in range(6000):
    ...     world = dynamics.step(world, guidance.update(world))
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from moonshot.dynamics.state import BodyState, Command, WorldState
from moonshot.dynamics.vectors import is_degenerate, safe_unit_vector
from moonshot.gnc.control.pid import PIDGains
from moonshot.gnc.control.rotation import RotationController
from moonshot.gnc.control.velocity import VelocityController
from moonshot.gnc.guidance.intercept import InterceptSolution, search_intercept
from moonshot.gnc.guidance.trajectory import CircularOrbit
from moonshot.vehicle import VehicleConfig

logger = logging.getLogger(__name__)


class MissionPhase(IntEnum):
    """Mission phases in flight order."""
    LIFTOFF_1 = 0
    LIFTOFF_2 = 1
    TRANSIT = 2
    APPROACH = 3
    FINAL = 4
    COAST = 5


class MissionGeometry(NamedTuple):
    """Quantities the phase choice is made from.

    Attributes:
        altitude: Rocket distance above the primary's surface
        target_distance: Rocket distance above the target's surface
        fuel_volume: Remaining fuel volume
        rocket_speed: Rocket speed
        target_speed: Target body speed
    """
    altitude: float
    target_distance: float
    fuel_volume: float
    rocket_speed: float
    target_speed: float


# =============================================================================
# Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class MissionConfig:
    """Mission geometry thresholds and guidance tuning.

    Attributes:
        primary: Name of the body to launch from
        target: Name of the body to land on
        liftoff_altitude: End of the vertical climb
        turn_altitude: End of the turn toward the target
        approach_distance: Target surface distance where transit ends
        final_distance: Target surface distance where the engine is cut
        excess_speed: Transit speed margin over the target's speed
        closing_speed: Approach speed relative to the target
        search_time_step: Intercept search step [s]
        search_max_iterations: Intercept search budget
    """
    primary: str = "Earth"
    target: str = "Moon"
    liftoff_altitude: float = 10.0
    turn_altitude: float = 20.0
    approach_distance: float = 60.0
    final_distance: float = 3.0
    excess_speed: float = 2.0
    closing_speed: float = 2.0
    search_time_step: float = 0.5
    search_max_iterations: int = 600

    def __post_init__(self) -> None:
        """Validate inputs."""
        if self.primary == self.target:
            raise ValueError(f"primary and target must differ, both are {self.primary!r}")
        if not 0 < self.liftoff_altitude <= self.turn_altitude:
            raise ValueError(
                f"need 0 < liftoff_altitude <= turn_altitude, got "
                f"{self.liftoff_altitude} and {self.turn_altitude}"
            )
        if not 0 < self.final_distance <= self.approach_distance:
            raise ValueError(
                f"need 0 < final_distance <= approach_distance, got "
                f"{self.final_distance} and {self.approach_distance}"
            )
        if self.excess_speed <= 0:
            raise ValueError(f"excess_speed must be positive, got {self.excess_speed}")
        if self.closing_speed <= 0:
            raise ValueError(f"closing_speed must be positive, got {self.closing_speed}")
        if self.search_time_step <= 0:
            raise ValueError(f"search_time_step must be positive, got {self.search_time_step}")
        if self.search_max_iterations < 1:
            raise ValueError(
                f"search_max_iterations must be positive, got {self.search_max_iterations}"
            )


# =============================================================================
# Phase Selection
# =============================================================================


@beartype
def classify_phase(
    altitude: float,
    target_distance: float,
    fuel_volume: float,
    config: MissionConfig | None = None,
) -> MissionPhase:
    """Pick the mission phase from geometry and fuel.

    Args:
        altitude: Distance above the primary's surface
        target_distance: Distance above the target's surface
        fuel_volume: Remaining fuel volume
        config: Thresholds (defaults if omitted)
    """
    config = config or MissionConfig()
    if fuel_volume <= 0:
        return MissionPhase.COAST
    if altitude < config.liftoff_altitude:
        return MissionPhase.LIFTOFF_1
    if altitude < config.turn_altitude:
        return MissionPhase.LIFTOFF_2
    if target_distance >= config.approach_distance:
        return MissionPhase.TRANSIT
    if target_distance >= config.final_distance:
        return MissionPhase.APPROACH
    return MissionPhase.FINAL


@beartype
def approach_velocity(
    rocket_position: NDArray[np.float64],
    target: BodyState,
    closing_speed: float,
) -> NDArray[np.float64]:
    """Velocity that moves with ``target`` and closes on it at ``closing_speed``.

    The target's velocity is split along the closing direction: the
    orthogonal part is matched as-is and the closing speed is added on top of
    the target's own speed along that direction.
    """
    closing = safe_unit_vector(target.position - rocket_position)
    along = float(np.dot(target.velocity, closing))
    matched = target.velocity - along * closing
    return matched + (along + closing_speed) * closing


# =============================================================================
# Mission Guidance
# =============================================================================


@beartype
class MissionGuidance:
    """Guidance session for one rocket.

    Owns a rotation controller (liftoff turn, final flip) and a velocity
    controller (transit, approach). Both are reset whenever the phase
    changes.

    Example:
        >>> guidance = MissionGuidance(MissionConfig(closing_speed=1.5))
        >>> command = guidance.update(world)
        >>> guidance.phase
        <MissionPhase.LIFTOFF_1: 0>
    """

    def __init__(
        self,
        config: MissionConfig | None = None,
        vehicle: VehicleConfig | None = None,
        rate_gains: PIDGains | None = None,
        angle_gains: PIDGains | None = None,
    ) -> None:
        """Initialize guidance.

        Args:
            config: Mission thresholds and tuning
            vehicle: Feed-forward constants shared with the plant
            rate_gains: Angular velocity loop gains of both rotation controllers
            angle_gains: Pointing loop gains of both rotation controllers
        """
        self.config = config or MissionConfig()
        self.vehicle = vehicle or VehicleConfig()
        self.rotation = RotationController(rate_gains, angle_gains)
        self.velocity = VelocityController(
            self.vehicle, RotationController(rate_gains, angle_gains)
        )

        self._phase: MissionPhase | None = None
        self._geometry: MissionGeometry | None = None
        self._intercept: InterceptSolution | None = None

        self._handlers = {
            MissionPhase.LIFTOFF_1: self._liftoff_1,
            MissionPhase.LIFTOFF_2: self._liftoff_2,
            MissionPhase.TRANSIT: self._transit,
            MissionPhase.APPROACH: self._approach,
            MissionPhase.FINAL: self._final,
            MissionPhase.COAST: self._coast,
        }

    @property
    def phase(self) -> MissionPhase | None:
        """Phase of the last update (``None`` before the first)."""
        return self._phase

    @property
    def geometry(self) -> MissionGeometry | None:
        return self._geometry

    @property
    def last_intercept(self) -> InterceptSolution | None:
        """Most recent transit intercept solution."""
        return self._intercept

    def reset(self) -> None:
        """Forget the previous phase and all controller history."""
        self._release_controllers()
        self._phase = None
        self._geometry = None
        self._intercept = None

    def measure(self, world: WorldState) -> MissionGeometry:
        """Derive the phase-selection quantities from a snapshot.

        Raises:
            KeyError: If the primary or target body is missing
        """
        rocket = world.rocket
        primary = world.body(self.config.primary)
        target = world.body(self.config.target)
        return MissionGeometry(
            altitude=primary.altitude_of(rocket.position),
            target_distance=target.altitude_of(rocket.position),
            fuel_volume=rocket.fuel.volume,
            rocket_speed=rocket.speed,
            target_speed=target.speed,
        )

    def update(self, world: WorldState) -> Command:
        """Produce the command for this tick.

        Args:
            world: Current snapshot (read only)

        Returns:
            Command for the physics plant

        Raises:
            KeyError: If the primary or target body is missing
            UnreachableTargetError: If the transit intercept search fails
        """
        geometry = self.measure(world)
        phase = classify_phase(
            geometry.altitude, geometry.target_distance, geometry.fuel_volume, self.config
        )
        self._geometry = geometry

        if phase is not self._phase:
            self._handoff(phase, geometry)

        return self._handlers[phase](world, geometry)

    # -------------------------------------------------------------------------
    # Phase handlers
    # -------------------------------------------------------------------------

    def _liftoff_1(self, world: WorldState, geometry: MissionGeometry) -> Command:
        return Command(thrust=1.0)

    def _liftoff_2(self, world: WorldState, geometry: MissionGeometry) -> Command:
        target = world.body(self.config.target)
        self._point(target.position - world.rocket.position)
        return Command(thrust=1.0, rcs=self.rotation.update(world.rocket))

    def _transit(self, world: WorldState, geometry: MissionGeometry) -> Command:
        rocket = world.rocket
        orbit = CircularOrbit.from_bodies(
            world.body(self.config.target), world.body(self.config.primary)
        )
        speed = max(geometry.target_speed + self.config.excess_speed, geometry.rocket_speed)
        self._intercept = search_intercept(
            rocket.position,
            speed,
            orbit,
            time_step=self.config.search_time_step,
            max_iterations=self.config.search_max_iterations,
        )
        self.velocity.set_target(self._intercept.velocity)
        return self.velocity.update(rocket)

    def _approach(self, world: WorldState, geometry: MissionGeometry) -> Command:
        rocket = world.rocket
        target = world.body(self.config.target)
        self.velocity.set_target(
            approach_velocity(rocket.position, target, self.config.closing_speed)
        )
        return self.velocity.update(rocket)

    def _final(self, world: WorldState, geometry: MissionGeometry) -> Command:
        target = world.body(self.config.target)
        # Tail at the target: nose points away from it
        self._point(world.rocket.position - target.position)
        return Command(thrust=0.0, rcs=self.rotation.update(world.rocket))

    def _coast(self, world: WorldState, geometry: MissionGeometry) -> Command:
        return Command.idle()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _point(self, direction: NDArray[np.float64]) -> None:
        """Orientation target for the rotation controller; zero means hold."""
        if is_degenerate(direction):
            return
        self.rotation.set_orientation_target(direction)

    def _handoff(self, phase: MissionPhase, geometry: MissionGeometry) -> None:
        previous = "START" if self._phase is None else self._phase.name
        logger.info(
            "Phase %s -> %s (altitude %.1f, target distance %.1f, fuel %.2f)",
            previous, phase.name, geometry.altitude, geometry.target_distance,
            geometry.fuel_volume,
        )
        self._release_controllers()
        self._phase = phase

    def _release_controllers(self) -> None:
        self.rotation.clear_target()
        self.rotation.reset()
        self.velocity.set_target(None)
        self.velocity.reset()
