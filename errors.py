# errors.py v1.0
# Part of Project Tesseract: 4D Projection Lab
# v1.0: "Error Taxonomy"
# - Lifecycle violations and unknown simulation keys get their own types so the
#   host and the CLI can report them without catching everything.
# - Numeric edge cases (e.g. a projection divisor near zero) are NOT errors;
#   math4d clamps them.

class ProjectionLabError(Exception):
    """Base class for all errors raised by the projection lab."""


class LifecycleError(ProjectionLabError, RuntimeError):
    """An operation was invoked in a state that does not allow it."""


class UnknownSimulationKey(ProjectionLabError, KeyError):
    """The host was asked to select a simulation that is not registered."""

    def __init__(self, key: str, available=()):
        self.key = key
        self.available = tuple(available)
        super().__init__(key)

    def __str__(self):
        if self.available:
            return f"Unknown simulation '{self.key}'. Available: {', '.join(self.available)}"
        return f"Unknown simulation '{self.key}'"
