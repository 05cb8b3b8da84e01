"""Manual flying with pilot assist.

Input handling (keyboard, joystick) lives outside this package; callers
translate their input into a set of active :class:`ManualControl` values.
Manual inputs are merged into an automatic command per axis, manual taking
precedence.

Example:
    >>> from moonshot.gnc.manual import AssistMode, ManualControl, PilotAssist
    >>>
    >>> assist = PilotAssist(mode=AssistMode.ORIENT_TO_TARGET)
    >>> command = assist.update(world, {ManualControl.THRUST})
"""

from collections.abc import Collection
from enum import Enum, auto

import numpy as np
from beartype import beartype

from moonshot.dynamics.state import Command, RcsCommand, WorldState
from moonshot.dynamics.vectors import is_degenerate
from moonshot.gnc.control.pid import PIDGains
from moonshot.gnc.control.rotation import RotationController

MANUAL_RCS_LEVEL = 0.5


class ManualControl(Enum):
    """Inputs a pilot can hold down."""
    PITCH_UP = auto()
    PITCH_DOWN = auto()
    YAW_LEFT = auto()
    YAW_RIGHT = auto()
    THRUST = auto()


class AssistMode(Enum):
    """Automatic attitude help while flying manually."""
    NONE = auto()
    ORIENT_TO_TARGET = auto()
    STABILIZE_ROTATION = auto()


def _axis_override(
    active: Collection[ManualControl],
    positive: ManualControl,
    negative: ManualControl,
) -> float | None:
    """Manual RCS level for one axis; ``None`` when the axis is not overridden."""
    up = positive in active
    down = negative in active
    if up == down:
        return None
    return MANUAL_RCS_LEVEL if up else -MANUAL_RCS_LEVEL


@beartype
def apply_manual_overrides(command: Command, active: Collection[ManualControl]) -> Command:
    """Merge held manual inputs into ``command``.

    Pitch and yaw inputs replace the automatic value of their axis with
    +/-0.5; opposing inputs on one axis cancel and leave it automatic.
    THRUST forces full thrust. Roll is never overridden.

    Args:
        command: Automatic command
        active: Manual inputs currently held

    Returns:
        Merged command
    """
    pitch = _axis_override(active, ManualControl.PITCH_UP, ManualControl.PITCH_DOWN)
    yaw = _axis_override(active, ManualControl.YAW_LEFT, ManualControl.YAW_RIGHT)
    rcs = RcsCommand(
        roll=command.rcs.roll,
        pitch=command.rcs.pitch if pitch is None else pitch,
        yaw=command.rcs.yaw if yaw is None else yaw,
    )
    thrust = 1.0 if ManualControl.THRUST in active else command.thrust
    return Command(thrust=thrust, rcs=rcs)


@beartype
class PilotAssist:
    """Manual flying session with optional automatic attitude help.

    Attributes:
        target: Body the ORIENT_TO_TARGET mode points at
        rotation: Attitude controller driven by the assist mode
    """

    def __init__(
        self,
        target: str = "Moon",
        mode: AssistMode = AssistMode.STABILIZE_ROTATION,
        rate_gains: PIDGains | None = None,
        angle_gains: PIDGains | None = None,
    ) -> None:
        self.target = target
        self.rotation = RotationController(rate_gains, angle_gains)
        self._mode = mode

    @property
    def mode(self) -> AssistMode:
        return self._mode

    @mode.setter
    def mode(self, value: AssistMode) -> None:
        self._mode = value

    def toggle(self, mode: AssistMode) -> AssistMode:
        """Switch ``mode`` on, or off again if it is already active."""
        self._mode = AssistMode.NONE if self._mode is mode else mode
        return self._mode

    def update(
        self,
        world: WorldState,
        active: Collection[ManualControl] = frozenset(),
    ) -> Command:
        """Command for this tick from the assist mode and held inputs.

        Raises:
            KeyError: If ORIENT_TO_TARGET is active and the target body is missing
        """
        rocket = world.rocket

        if self._mode is AssistMode.ORIENT_TO_TARGET:
            direction = world.body(self.target).position - rocket.position
            if not is_degenerate(direction):
                self.rotation.set_orientation_target(direction)
        elif self._mode is AssistMode.STABILIZE_ROTATION:
            self.rotation.set_angular_velocity_target(np.zeros(3))
        else:
            self.rotation.clear_target()

        command = Command(thrust=0.0, rcs=self.rotation.update(rocket))
        return apply_manual_overrides(command, active)
