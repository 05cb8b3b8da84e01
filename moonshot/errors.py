"""Exceptions raised by the guidance core."""


class GuidanceError(RuntimeError):
    """Base class for guidance failures."""


class UnreachableTargetError(GuidanceError):
    """The intercept search found no improving miss distance within its budget.

    Attributes:
        iterations: Number of search steps evaluated
        best_miss_distance: Smallest predicted miss distance seen
    """

    def __init__(self, iterations: int, best_miss_distance: float) -> None:
        self.iterations = iterations
        self.best_miss_distance = best_miss_distance
        super().__init__(
            f"no intercept found after {iterations} search steps "
            f"(closest predicted miss {best_miss_distance:.3f})"
        )


class DegenerateGeometryError(GuidanceError, ValueError):
    """A direction was requested from a (near) zero-length vector."""
