"""Vehicle constants shared by guidance and the physics plant.

Guidance uses these for feed-forward math (how much thrust cancels a velocity
error in one step); the plant uses the same values to apply commands. They are
fixed when a guidance session is constructed and never discovered at runtime.

Example:
    >>> from moonshot.vehicle import VehicleConfig
    >>>
    >>> vehicle = VehicleConfig(max_thrust=150.0)
    >>> vehicle.max_acceleration(mass=10.0)
    15.0
"""

from dataclasses import dataclass

from beartype import beartype


@beartype
@dataclass(frozen=True)
class VehicleConfig:
    """Rocket actuator and timing constants.

    Attributes:
        max_thrust: Engine force at thrust level 1
        time_step: Physics step duration [s]
        fuel_consumption: Fuel volume burned per second at thrust level 1
        rcs_thrust_ratio: Angular velocity change per step at RCS level 1 [rad/s]
        length: Nose-to-tail length of the rocket
    """
    max_thrust: float = 100.0
    time_step: float = 1.0 / 60.0
    fuel_consumption: float = 1.5
    rcs_thrust_ratio: float = 0.05
    length: float = 4.0

    def __post_init__(self) -> None:
        """Validate inputs."""
        for name in ("max_thrust", "time_step", "rcs_thrust_ratio", "length"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.fuel_consumption < 0:
            raise ValueError(f"fuel_consumption must be non-negative, got {self.fuel_consumption}")

    @property
    def half_length(self) -> float:
        """Distance from the rocket's center to its nose or tail."""
        return 0.5 * self.length

    @property
    def fuel_per_step(self) -> float:
        """Fuel volume burned by one step at full thrust."""
        return self.fuel_consumption * self.time_step

    def max_acceleration(self, mass: float) -> float:
        """Acceleration at full thrust for a vehicle of ``mass``."""
        return self.max_thrust / mass
